"""
Mind-map controller - single source of truth for interaction state.

This controller owns the committed graph, the viewport and the one active
gesture, and coordinates between:
- Pointer/wheel/keyboard events from the host
- Hit-testing against the model's own geometry (no renderer needed)
- Graph operations and the host's on_change callback

The gesture is an explicit state value (Idle, DraggingNode, Panning,
Connecting) so impossible combinations such as dragging while connecting
cannot be represented. Hover, the open picker and the text editor are
tracked beside it and never block a transition.
"""

import logging
import random
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from mindmap.config import CommitPolicy, EditorSettings
from mindmap.constants import (
    DEFAULT_CONTAINER_HEIGHT,
    DEFAULT_CONTAINER_WIDTH,
    DEFAULT_NODE_TEXT,
    DEFAULT_TITLE,
    EDGE_HOVER_TOLERANCE,
    STYLE_FLAGS,
)
from mindmap.geometry import (
    BezierPath,
    Point,
    bezier_path,
    connection_path,
    distance_to_path,
    handle_at,
    handle_positions,
    node_center,
    point_in_node,
)
from mindmap.graph import Connection, Graph, Node
from mindmap.history import GraphHistory
from mindmap.viewport import Viewport

logger = logging.getLogger(__name__)

PRIMARY_BUTTON = 0
PICKER_KINDS = ("color", "shape")

ChangeCallback = Callable[[List[Dict[str, Any]], List[Dict[str, Any]]], None]
TitleCallback = Callable[[str], None]


# --- Interaction states ---

@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class DraggingNode:
    node_id: str
    offset: Point  # canvas-space pointer position minus node origin


@dataclass(frozen=True)
class Panning:
    start_pointer: Point  # screen space
    start_pan: Point


@dataclass(frozen=True)
class Connecting:
    source_id: str
    source_handle: Optional[str] = None


InteractionState = Union[Idle, DraggingNode, Panning, Connecting]


# --- Host inputs ---

@dataclass(frozen=True)
class ContainerRect:
    """The editor container's bounding box in client coordinates."""
    left: float = 0.0
    top: float = 0.0
    width: float = DEFAULT_CONTAINER_WIDTH
    height: float = DEFAULT_CONTAINER_HEIGHT


@dataclass(frozen=True)
class PointerEvent:
    x: float  # client coordinates
    y: float
    button: int = PRIMARY_BUTTON


@dataclass(frozen=True)
class WheelEvent:
    delta_y: float
    ctrl: bool = False
    meta: bool = False


@dataclass(frozen=True)
class KeyEvent:
    key: str
    ctrl: bool = False
    meta: bool = False
    shift: bool = False


@dataclass(frozen=True)
class HitResult:
    kind: str  # 'handle', 'node' or 'canvas'
    node_id: Optional[str] = None
    handle: Optional[str] = None


CANVAS_HIT = HitResult(kind='canvas')


class MindMapController:
    """Drives the graph and viewport from a single-pointer event stream."""

    def __init__(self, nodes=(), connections=(),
                 on_change: Optional[ChangeCallback] = None,
                 settings: Optional[EditorSettings] = None,
                 container: Optional[ContainerRect] = None,
                 rng: Optional[random.Random] = None,
                 title: str = DEFAULT_TITLE,
                 on_title_change: Optional[TitleCallback] = None):
        self.settings = settings or EditorSettings()
        self._graph = Graph.from_dicts(nodes, connections)
        self._preview: Optional[Graph] = None
        self._viewport = Viewport()
        self._state: InteractionState = Idle()
        self._container = container or ContainerRect()
        self._pointer = Point(0.0, 0.0)  # last pointer position, canvas space
        self._history = GraphHistory(self._graph, max_size=self.settings.history_size)
        self._rng = rng or random.Random()
        self._on_change = on_change

        self.hovered_node_id: Optional[str] = None
        self.hovered_connection_id: Optional[str] = None
        self.open_picker: Optional[Tuple[str, str]] = None  # (kind, node_id)
        self.editing_node_id: Optional[str] = None

        self.title = title
        self.title_draft = title
        self.editing_title = False
        self._on_title_change = on_title_change

    # --- Properties ---

    @property
    def state(self) -> InteractionState:
        return self._state

    @property
    def graph(self) -> Graph:
        """The committed graph, as last handed to the host."""
        return self._graph

    @property
    def display_graph(self) -> Graph:
        """What should be drawn: the in-progress drag preview if any, else the committed graph."""
        return self._preview if self._preview is not None else self._graph

    @property
    def viewport(self) -> Viewport:
        return self._viewport

    @property
    def container(self) -> ContainerRect:
        return self._container

    @property
    def pointer(self) -> Point:
        return self._pointer

    @property
    def history(self) -> GraphHistory:
        return self._history

    @property
    def commit_policy(self) -> CommitPolicy:
        return self.settings.commit_policy

    # --- Host wiring ---

    def set_on_change(self, callback: Optional[ChangeCallback]):
        self._on_change = callback

    def set_on_title_change(self, callback: Optional[TitleCallback]):
        self._on_title_change = callback

    def set_container(self, container: ContainerRect):
        self._container = container

    def set_data(self, nodes, connections):
        """Replace the committed graph with data supplied by the host."""
        graph = Graph.from_dicts(nodes, connections)
        if graph == self._graph:
            return
        self._graph = graph
        self._preview = None
        self._history.push(graph)

    def _notify_change(self):
        if self._on_change:
            nodes, connections = self._graph.to_dicts()
            self._on_change(nodes, connections)

    def _commit(self, graph: Graph, record: bool = True):
        """Make ``graph`` the committed value and tell the host."""
        if graph is self._graph:
            return
        self._graph = graph
        self._preview = None
        if record:
            self._history.push(graph)
        self._notify_change()

    # --- Coordinates & hit-testing ---

    def to_screen(self, event) -> Point:
        return Point(event.x - self._container.left, event.y - self._container.top)

    def to_canvas(self, event) -> Point:
        return self._viewport.screen_to_canvas(self.to_screen(event))

    def hit_test(self, canvas_point) -> HitResult:
        """
        Find what sits under a canvas point.

        Handles win over node bodies and topmost nodes (last drawn) win over
        lower ones; anything else is empty canvas.
        """
        nodes = self.display_graph.nodes
        for node in reversed(nodes):
            handle = handle_at(canvas_point, node, radius=self.settings.handle_radius)
            if handle:
                return HitResult(kind='handle', node_id=node.id, handle=handle.side)
        for node in reversed(nodes):
            if point_in_node(canvas_point, node):
                return HitResult(kind='node', node_id=node.id)
        return CANVAS_HIT

    def connection_at(self, canvas_point, tolerance: float = EDGE_HOVER_TOLERANCE) -> Optional[Connection]:
        graph = self.display_graph
        closest = None
        closest_dist = float('inf')
        for conn in graph.live_connections():
            path, _, _ = connection_path(graph.node(conn.source), graph.node(conn.target))
            dist = distance_to_path(canvas_point, path)
            if dist <= tolerance and dist < closest_dist:
                closest_dist = dist
                closest = conn
        return closest

    # --- Pointer events ---

    def pointer_down(self, event: PointerEvent) -> InteractionState:
        if event.button != PRIMARY_BUTTON:
            return self._state

        screen = self.to_screen(event)
        canvas = self._viewport.screen_to_canvas(screen)
        self._pointer = canvas
        hit = self.hit_test(canvas)

        if self.editing_title:
            self.submit_title()

        # The node being edited keeps its own pointer events
        if self.editing_node_id is not None:
            if hit.kind == 'node' and hit.node_id == self.editing_node_id:
                return self._state
            self.end_text_edit()

        if isinstance(self._state, Connecting):
            source_id = self._state.source_id
            if hit.kind != 'canvas' and hit.node_id != source_id:
                logger.debug(f"Completing connection {source_id} -> {hit.node_id}")
                self._commit(self._graph.add_connection(source_id, hit.node_id))
            else:
                logger.debug(f"Connection from {source_id} cancelled")
            self.open_picker = None
            self._state = Idle()
            return self._state

        if not isinstance(self._state, Idle):
            # Single pointer model: ignore presses while a gesture is running
            return self._state

        if hit.kind == 'handle':
            self._state = Connecting(source_id=hit.node_id, source_handle=hit.handle)
        elif hit.kind == 'node':
            node = self._graph.node(hit.node_id)
            self.open_picker = None
            self._state = DraggingNode(node_id=node.id, offset=canvas - node.position)
        else:
            self.open_picker = None
            self._state = Panning(start_pointer=screen, start_pan=self._viewport.pan)

        logger.debug(f"pointer_down -> {self._state}")
        return self._state

    def pointer_move(self, event: PointerEvent) -> InteractionState:
        screen = self.to_screen(event)
        canvas = self._viewport.screen_to_canvas(screen)
        self._pointer = canvas

        state = self._state
        if isinstance(state, DraggingNode):
            self._drag_to(state, canvas)
        elif isinstance(state, Panning):
            delta = screen - state.start_pointer
            self._viewport = self._viewport.with_pan(state.start_pan.x + delta.x,
                                                     state.start_pan.y + delta.y)
        else:
            self._update_hover(canvas)
        return self._state

    def pointer_up(self, event: Optional[PointerEvent] = None) -> InteractionState:
        if event is not None:
            self._pointer = self.to_canvas(event)
        state = self._state
        if isinstance(state, DraggingNode):
            if self._preview is not None:
                # Per-gesture policy: the whole drag lands as one change
                self._commit(self._preview, record=False)
            self._history.push(self._graph)
            self._state = Idle()
        elif isinstance(state, Panning):
            self._state = Idle()
            # A press and release without movement is a click; on an edge it deletes it
            if self._viewport.pan == state.start_pan:
                conn = self.connection_at(self._pointer)
                if conn is not None:
                    logger.debug(f"Edge click deletes connection {conn.id}")
                    self.delete_connection(conn.id)
        logger.debug(f"pointer_up -> {self._state}")
        return self._state

    def double_click(self, event: PointerEvent) -> Optional[str]:
        """Start editing the text of the node under the pointer, if any."""
        hit = self.hit_test(self.to_canvas(event))
        if hit.kind == 'node':
            self.begin_text_edit(hit.node_id)
            return hit.node_id
        return None

    def _drag_to(self, state: DraggingNode, canvas: Point):
        x, y = canvas - state.offset
        if self.commit_policy == CommitPolicy.PER_MOVE:
            # History gets one entry per gesture, on pointer up
            self._commit(self._graph.move_node(state.node_id, x, y), record=False)
        else:
            self._preview = self.display_graph.move_node(state.node_id, x, y)

    def _update_hover(self, canvas: Point):
        hit = self.hit_test(canvas)
        if hit.kind != 'canvas':
            self.hovered_node_id = hit.node_id
            self.hovered_connection_id = None
            return

        # Keep the toolbar of a node with an open picker visible
        if self.open_picker and self.open_picker[1] == self.hovered_node_id:
            return
        self.hovered_node_id = None
        conn = self.connection_at(canvas)
        self.hovered_connection_id = conn.id if conn else None

    # --- Wheel & keyboard ---

    def wheel(self, event: WheelEvent) -> bool:
        """Zoom one step on modifier+wheel. Returns True if the event was consumed."""
        if not (event.ctrl or event.meta):
            return False
        self._viewport = self._viewport.zoom_by_wheel(event.delta_y)
        return True

    def key_down(self, event: KeyEvent) -> bool:
        """Handle a key press. Returns True if the event was consumed."""
        if self.editing_title:
            if event.key == 'Escape':
                self.cancel_title_edit()
                return True
            if event.key == 'Enter':
                self.submit_title()
                return True
            return False

        if self.editing_node_id is not None:
            if event.key == 'Escape' or (event.key == 'Enter' and not event.shift):
                self.end_text_edit()
                return True
            return False

        if event.key == 'Escape':
            consumed = isinstance(self._state, Connecting) or self.open_picker is not None
            self.cancel_connection()
            self.open_picker = None
            return consumed

        if event.ctrl or event.meta:
            key = event.key.lower()
            if (key == 'z' and event.shift) or key == 'y':
                return self.redo()
            if key == 'z':
                return self.undo()
        return False

    # --- Connection gesture ---

    def start_connection(self, node_id: str, handle: Optional[str] = None) -> InteractionState:
        if isinstance(self._state, Idle) and node_id in self._graph:
            self._state = Connecting(source_id=node_id, source_handle=handle)
        return self._state

    def cancel_connection(self) -> InteractionState:
        if isinstance(self._state, Connecting):
            logger.debug(f"Connection from {self._state.source_id} cancelled")
            self._state = Idle()
        return self._state

    def connection_preview(self) -> Optional[BezierPath]:
        """Dashed preview from the source handle (or node center) to the pointer."""
        if not isinstance(self._state, Connecting):
            return None
        source = self.display_graph.node(self._state.source_id)
        if source is None:
            return None
        if self._state.source_handle:
            start = handle_positions(source)[self._state.source_handle]
        else:
            start = node_center(source)
        return bezier_path(start, self._pointer)

    # --- Node & connection actions ---

    def add_node(self, text: str = DEFAULT_NODE_TEXT) -> Node:
        graph, node = self._graph.add_node(
            self._viewport,
            (self._container.width, self._container.height),
            text=text,
            rng=self._rng,
        )
        self._commit(graph)
        logger.debug(f"Added node {node.id} at ({node.x:.1f}, {node.y:.1f})")
        return node

    def update_node(self, node_id: str, **changes):
        self._commit(self._graph.update_node(node_id, **changes))

    def delete_node(self, node_id: str):
        if self.hovered_node_id == node_id:
            self.hovered_node_id = None
        if self.editing_node_id == node_id:
            self.editing_node_id = None
        if self.open_picker and self.open_picker[1] == node_id:
            self.open_picker = None
        self._commit(self._graph.delete_node(node_id))

    def connect(self, a: str, b: str):
        self._commit(self._graph.add_connection(a, b))

    def delete_connection(self, connection_id: str):
        if self.hovered_connection_id == connection_id:
            self.hovered_connection_id = None
        self._commit(self._graph.delete_connection(connection_id))

    def toggle_style(self, node_id: str, flag: str):
        if flag not in STYLE_FLAGS:
            raise ValueError(f"Unknown style flag: {flag!r}")
        node = self._graph.node(node_id)
        if node is None:
            return
        self.update_node(node_id, **{flag: not getattr(node, flag)})

    def set_shape(self, node_id: str, shape: str):
        self.update_node(node_id, shape=shape)
        self.open_picker = None

    def set_color(self, node_id: str, color: str):
        self.update_node(node_id, color=color)
        self.open_picker = None

    def toggle_picker(self, kind: str, node_id: str) -> Optional[Tuple[str, str]]:
        """Open the color or shape picker for a node, or close it if already open."""
        if kind not in PICKER_KINDS:
            raise ValueError(f"Unknown picker: {kind!r}")
        picker = (kind, node_id)
        self.open_picker = None if self.open_picker == picker else picker
        return self.open_picker

    # --- Text editing ---

    def begin_text_edit(self, node_id: str):
        if node_id in self._graph:
            self.editing_node_id = node_id

    def set_text(self, node_id: str, text: str):
        # Keystrokes during an edit reach the host at once; history gets one entry in end_text_edit
        record = self.editing_node_id != node_id
        self._commit(self._graph.update_node(node_id, text=text), record=record)

    def end_text_edit(self):
        if self.editing_node_id is not None:
            self._history.push(self._graph)
        self.editing_node_id = None

    # --- Title ---

    def set_title(self, title: str):
        """Take a title from the host. The host is not notified."""
        self.title = title
        if not self.editing_title:
            self.title_draft = title

    def begin_title_edit(self):
        self.title_draft = self.title
        self.editing_title = True

    def set_title_draft(self, text: str):
        self.title_draft = text

    def submit_title(self) -> Optional[str]:
        """
        Finish editing the title.

        The draft is trimmed; a blank draft is dropped and the previous title
        kept. Returns the new title, or None if nothing was submitted.
        """
        if not self.editing_title:
            return None
        self.editing_title = False
        title = (self.title_draft or "").strip()
        if not title:
            logger.debug("Blank title dropped")
            self.title_draft = self.title
            return None
        self.title = title
        self.title_draft = title
        if self._on_title_change:
            self._on_title_change(title)
        return title

    def cancel_title_edit(self):
        self.editing_title = False
        self.title_draft = self.title

    # --- View ---

    def zoom_in(self):
        self._viewport = self._viewport.zoom_in()

    def zoom_out(self):
        self._viewport = self._viewport.zoom_out()

    def reset_view(self):
        self._viewport = self._viewport.reset()

    # --- History ---

    def undo(self) -> bool:
        if not isinstance(self._state, Idle):
            return False
        self.end_text_edit()
        graph = self._history.undo()
        if graph is None:
            return False
        self._commit(graph, record=False)
        self._drop_stale_ids()
        return True

    def redo(self) -> bool:
        if not isinstance(self._state, Idle):
            return False
        self.end_text_edit()
        graph = self._history.redo()
        if graph is None:
            return False
        self._commit(graph, record=False)
        self._drop_stale_ids()
        return True

    def _drop_stale_ids(self):
        """Forget hover, picker and edit targets the restored graph no longer has."""
        graph = self._graph
        if self.hovered_node_id is not None and self.hovered_node_id not in graph:
            self.hovered_node_id = None
        if self.editing_node_id is not None and self.editing_node_id not in graph:
            self.editing_node_id = None
        if self.open_picker and self.open_picker[1] not in graph:
            self.open_picker = None
        if self.hovered_connection_id is not None and graph.connection(self.hovered_connection_id) is None:
            self.hovered_connection_id = None
