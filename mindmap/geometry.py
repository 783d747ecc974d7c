"""
Geometry for mind-map nodes and edges.

Everything here is a pure function of node data: sizes are derived from text
and shape, handles from the derived box, and edges from the handles. Nothing
is cached, since node positions change on every drag frame.

Any object exposing ``x``, ``y``, ``text`` and ``shape`` attributes can be
passed where a node is expected.
"""

import math
from typing import Dict, List, NamedTuple, Optional, Tuple

from mindmap.constants import (
    BASE_NODE_HEIGHT,
    CHAR_WIDTH,
    CHARS_PER_LINE,
    CURVATURE_CAP,
    CURVATURE_FACTOR,
    HANDLE_RADIUS,
    HANDLE_SIDES,
    LINE_HEIGHT,
    MAX_NODE_WIDTH,
    MIN_NODE_WIDTH,
    TEXT_PADDING,
)


class Point(NamedTuple):
    x: float
    y: float

    def __add__(self, other):
        return Point(self.x + other[0], self.y + other[1])

    def __sub__(self, other):
        return Point(self.x - other[0], self.y - other[1])


class Handle(NamedTuple):
    """One of the four attachment points on a node's bounding box."""
    side: str
    point: Point


class BezierPath(NamedTuple):
    """A single cubic bezier segment: two endpoints and two control points."""
    start: Point
    cp1: Point
    cp2: Point
    end: Point

    def point_at(self, t: float) -> Point:
        mt = 1 - t
        a, b, c, d = mt ** 3, 3 * mt * mt * t, 3 * mt * t * t, t ** 3
        return Point(
            a * self.start.x + b * self.cp1.x + c * self.cp2.x + d * self.end.x,
            a * self.start.y + b * self.cp1.y + c * self.cp2.y + d * self.end.y,
        )

    def midpoint(self) -> Point:
        """Midpoint of the straight line between the endpoints (delete badge anchor)."""
        return Point((self.start.x + self.end.x) / 2, (self.start.y + self.end.y) / 2)

    def to_svg(self) -> str:
        return (
            f"M {_fmt(self.start.x)} {_fmt(self.start.y)} "
            f"C {_fmt(self.cp1.x)} {_fmt(self.cp1.y)}, "
            f"{_fmt(self.cp2.x)} {_fmt(self.cp2.y)}, "
            f"{_fmt(self.end.x)} {_fmt(self.end.y)}"
        )


def _fmt(value: float) -> str:
    # 120.0 -> "120", 12.5 -> "12.5"
    return f"{value:.2f}".rstrip("0").rstrip(".")


def distance(a, b) -> float:
    return math.hypot(a[0] - b[0], a[1] - b[1])


# --- Node sizing ---

def node_dimensions(node) -> Tuple[float, float]:
    """
    Derive (width, height) from a node's shape and text length.

    Width grows with the text and is clamped to [MIN_NODE_WIDTH, MAX_NODE_WIDTH].
    Diamonds are square, ovals keep a fixed height, and rectangles add a line
    of height for every CHARS_PER_LINE characters.
    """
    text_length = len(node.text or "")
    width = max(MIN_NODE_WIDTH, min(text_length * CHAR_WIDTH + TEXT_PADDING, MAX_NODE_WIDTH))

    shape = node.shape or "rectangle"
    if shape == "diamond":
        side = max(width, MIN_NODE_WIDTH)
        return side, side
    if shape == "oval":
        return width, BASE_NODE_HEIGHT

    lines = math.ceil(text_length / CHARS_PER_LINE)
    return width, max(BASE_NODE_HEIGHT, lines * LINE_HEIGHT + LINE_HEIGHT)


def node_bounds(node) -> Tuple[float, float, float, float]:
    """Return (left, top, right, bottom) in canvas space."""
    width, height = node_dimensions(node)
    return node.x, node.y, node.x + width, node.y + height


def node_center(node) -> Point:
    width, height = node_dimensions(node)
    return Point(node.x + width / 2, node.y + height / 2)


def handle_positions(node) -> Dict[str, Point]:
    """Midpoints of the top, right, bottom and left edges of the bounding box."""
    width, height = node_dimensions(node)
    cx = node.x + width / 2
    cy = node.y + height / 2
    return {
        "top": Point(cx, node.y),
        "right": Point(node.x + width, cy),
        "bottom": Point(cx, node.y + height),
        "left": Point(node.x, cy),
    }


def handles(node) -> List[Handle]:
    positions = handle_positions(node)
    return [Handle(side, positions[side]) for side in HANDLE_SIDES]


def nearest_handle_pair(node_a, node_b) -> Tuple[Handle, Handle]:
    """
    Pick the handle on each node that minimizes the distance between them.

    All 16 combinations are checked. On ties the first pair in
    top/right/bottom/left order wins.
    """
    best = None
    best_dist = float("inf")
    for ha in handles(node_a):
        for hb in handles(node_b):
            dist = distance(ha.point, hb.point)
            if dist < best_dist:
                best_dist = dist
                best = (ha, hb)
    return best


# --- Edge curves ---

def bezier_path(start, end) -> BezierPath:
    """
    Build a smooth S-curve between two points.

    Control points are pushed along whichever axis has the larger delta, by
    min(distance * CURVATURE_FACTOR, CURVATURE_CAP), so short edges bend less.
    """
    start = Point(*start)
    end = Point(*end)
    dx = end.x - start.x
    dy = end.y - start.y
    curvature = min(math.hypot(dx, dy) * CURVATURE_FACTOR, CURVATURE_CAP)

    if abs(dx) > abs(dy):
        offset = curvature if dx > 0 else -curvature
        cp1 = Point(start.x + offset, start.y)
        cp2 = Point(end.x - offset, end.y)
    else:
        offset = curvature if dy > 0 else -curvature
        cp1 = Point(start.x, start.y + offset)
        cp2 = Point(end.x, end.y - offset)
    return BezierPath(start, cp1, cp2, end)


def connection_path(node_a, node_b) -> Tuple[BezierPath, Handle, Handle]:
    """Route an edge between the nearest handles of two nodes."""
    ha, hb = nearest_handle_pair(node_a, node_b)
    return bezier_path(ha.point, hb.point), ha, hb


# --- Hit-testing ---

def point_in_node(point, node) -> bool:
    """
    Shape-aware containment test against the node's derived box.

    Diamonds use the rhombus inscribed in the box, ovals the pill shape with
    fully rounded ends, rectangles the box itself.
    """
    left, top, right, bottom = node_bounds(node)
    px, py = point
    if not (left <= px <= right and top <= py <= bottom):
        return False

    width, height = right - left, bottom - top
    cx, cy = left + width / 2, top + height / 2
    shape = node.shape or "rectangle"

    if shape == "diamond":
        return abs(px - cx) / (width / 2) + abs(py - cy) / (height / 2) <= 1.0
    if shape == "oval":
        radius = min(width, height) / 2
        # Clamp to the straight middle section, then test the end caps
        nearest_x = min(max(px, left + radius), right - radius)
        nearest_y = min(max(py, top + radius), bottom - radius)
        return distance((px, py), (nearest_x, nearest_y)) <= radius
    return True


def handle_at(point, node, radius: float = HANDLE_RADIUS) -> Optional[Handle]:
    """Return the node's handle within ``radius`` of point, closest first."""
    hit = None
    hit_dist = float("inf")
    for handle in handles(node):
        dist = distance(point, handle.point)
        if dist <= radius and dist < hit_dist:
            hit_dist = dist
            hit = handle
    return hit


def point_to_segment_distance(point, seg_start, seg_end) -> Tuple[float, float]:
    """Distance from point to a line segment, plus the clamped projection t."""
    px, py = point
    x1, y1 = seg_start
    x2, y2 = seg_end
    dx, dy = x2 - x1, y2 - y1

    if dx == 0 and dy == 0:
        return math.hypot(px - x1, py - y1), 0.0

    t = max(0.0, min(1.0, ((px - x1) * dx + (py - y1) * dy) / (dx * dx + dy * dy)))
    closest_x, closest_y = x1 + t * dx, y1 + t * dy
    return math.hypot(px - closest_x, py - closest_y), t


def distance_to_path(point, path: BezierPath, samples: int = 24) -> float:
    """Approximate distance from point to a bezier by flattening it into segments."""
    best = float("inf")
    prev = path.start
    for i in range(1, samples + 1):
        current = path.point_at(i / samples)
        dist, _ = point_to_segment_distance(point, prev, current)
        best = min(best, dist)
        prev = current
    return best
