"""
Shared constants for the mind-map engine.

Node sizing, edge curvature and viewport limits live here so that geometry,
hit-testing and any renderer agree on the same numbers. Keep them in sync
with whatever draws the nodes!
"""

# Node sizing: width follows text length, clamped
MIN_NODE_WIDTH = 100
MAX_NODE_WIDTH = 300
CHAR_WIDTH = 8
TEXT_PADDING = 40
BASE_NODE_HEIGHT = 50

# Rectangles grow one line per CHARS_PER_LINE characters
CHARS_PER_LINE = 30
LINE_HEIGHT = 24

# Edge curvature = min(distance * CURVATURE_FACTOR, CURVATURE_CAP)
CURVATURE_FACTOR = 0.4
CURVATURE_CAP = 120

# Viewport zoom limits
MIN_ZOOM = 0.25
MAX_ZOOM = 2.0
ZOOM_STEP = 0.15

# New nodes land within +/- ADD_NODE_JITTER of the visible center
ADD_NODE_JITTER = 50
DEFAULT_NODE_TEXT = "New idea"
DEFAULT_TITLE = "Mind Map"

# Fallback container size when the host has not reported one yet
DEFAULT_CONTAINER_WIDTH = 400
DEFAULT_CONTAINER_HEIGHT = 300

# Hit-testing tolerances in canvas units
HANDLE_RADIUS = 6
EDGE_HOVER_TOLERANCE = 8

# Undo history depth
HISTORY_SIZE = 50

SHAPES = ("rectangle", "diamond", "oval")
DEFAULT_SHAPE = "rectangle"
HANDLE_SIDES = ("top", "right", "bottom", "left")
STYLE_FLAGS = ("bold", "italic", "underline")

# Muted palette, token -> fill/border/text colors
NODE_COLORS = {
    "sage": {"name": "Sage", "bg": "hsl(162 22% 42%)", "border": "hsl(160 25% 50%)", "text": "#ffffff"},
    "gold": {"name": "Gold", "bg": "hsl(40 75% 45%)", "border": "hsl(42 80% 55%)", "text": "#ffffff"},
    "rose": {"name": "Rose", "bg": "hsl(350 60% 50%)", "border": "hsl(350 65% 60%)", "text": "#ffffff"},
    "sky": {"name": "Sky", "bg": "hsl(200 70% 45%)", "border": "hsl(200 75% 55%)", "text": "#ffffff"},
    "violet": {"name": "Violet", "bg": "hsl(270 50% 50%)", "border": "hsl(270 55% 60%)", "text": "#ffffff"},
    "coral": {"name": "Coral", "bg": "hsl(16 70% 55%)", "border": "hsl(16 75% 65%)", "text": "#ffffff"},
}
COLOR_TOKENS = tuple(NODE_COLORS)
DEFAULT_COLOR = COLOR_TOKENS[0]


def resolve_color(token: str) -> dict:
    """Return the palette entry for a color token, falling back to the first one."""
    return NODE_COLORS.get(token, NODE_COLORS[DEFAULT_COLOR])
