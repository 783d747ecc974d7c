"""
Viewport: pan offset plus zoom scale.

Maps between screen space (pixels relative to the editor container) and
canvas space (where node positions live):

    canvas = (screen - pan) / zoom
    screen = canvas * zoom + pan

Viewports are immutable; every change returns a new value.
"""

from dataclasses import dataclass, replace
from typing import Tuple

from mindmap.constants import MAX_ZOOM, MIN_ZOOM, ZOOM_STEP
from mindmap.geometry import Point


def clamp_zoom(zoom: float) -> float:
    return min(max(zoom, MIN_ZOOM), MAX_ZOOM)


@dataclass(frozen=True)
class Viewport:
    pan_x: float = 0.0
    pan_y: float = 0.0
    zoom: float = 1.0

    def __post_init__(self):
        # Out-of-range zoom is clamped, never rejected
        object.__setattr__(self, "zoom", clamp_zoom(self.zoom))

    @property
    def pan(self) -> Point:
        return Point(self.pan_x, self.pan_y)

    def screen_to_canvas(self, point) -> Point:
        return Point((point[0] - self.pan_x) / self.zoom, (point[1] - self.pan_y) / self.zoom)

    def canvas_to_screen(self, point) -> Point:
        return Point(point[0] * self.zoom + self.pan_x, point[1] * self.zoom + self.pan_y)

    def screen_delta_to_canvas(self, dx: float, dy: float) -> Tuple[float, float]:
        return dx / self.zoom, dy / self.zoom

    def visible_center(self, width: float, height: float) -> Point:
        """Canvas point currently shown at the middle of a width x height container."""
        return self.screen_to_canvas((width / 2, height / 2))

    # --- Zoom ---

    def with_zoom(self, zoom: float) -> "Viewport":
        return replace(self, zoom=zoom)

    def zoom_in(self) -> "Viewport":
        return self.with_zoom(self.zoom + ZOOM_STEP)

    def zoom_out(self) -> "Viewport":
        return self.with_zoom(self.zoom - ZOOM_STEP)

    def zoom_by_wheel(self, delta_y: float) -> "Viewport":
        """Scrolling down (positive delta) zooms out, scrolling up zooms in."""
        return self.zoom_out() if delta_y > 0 else self.zoom_in()

    def reset(self) -> "Viewport":
        return Viewport()

    # --- Pan ---

    def with_pan(self, x: float, y: float) -> "Viewport":
        return replace(self, pan_x=x, pan_y=y)

    def pan_by(self, dx: float, dy: float) -> "Viewport":
        return self.with_pan(self.pan_x + dx, self.pan_y + dy)

    def to_dict(self) -> dict:
        return {"pan_x": self.pan_x, "pan_y": self.pan_y, "zoom": self.zoom}
