"""
Graph model for the mind map: nodes, connections and the operations on them.

A Graph is an immutable value. Every operation returns a new Graph and leaves
the old one untouched, so the host can keep the previous value around for
undo or for comparing renders.

Invariants kept by every operation:
- node ids are unique
- no connection joins a node to itself
- no two connections join the same unordered pair of nodes
- deleting a node deletes every connection that touches it

Data from the host may still be partially corrupt (dangling endpoints, old
duplicates). Such connections are tolerated in storage and filtered out at
read time by ``live_connections``.
"""

import logging
import random
import uuid
from dataclasses import dataclass, replace
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Tuple

import networkx as nx

from mindmap.constants import (
    ADD_NODE_JITTER,
    COLOR_TOKENS,
    DEFAULT_COLOR,
    DEFAULT_CONTAINER_HEIGHT,
    DEFAULT_CONTAINER_WIDTH,
    DEFAULT_NODE_TEXT,
    DEFAULT_SHAPE,
    SHAPES,
)
from mindmap.viewport import Viewport

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("text", "x", "y", "color", "shape", "bold", "italic", "underline")


@dataclass(frozen=True)
class Node:
    id: str
    text: str = DEFAULT_NODE_TEXT
    x: float = 0.0
    y: float = 0.0
    color: str = DEFAULT_COLOR
    shape: str = DEFAULT_SHAPE
    bold: bool = False
    italic: bool = False
    underline: bool = False

    @property
    def position(self) -> Tuple[float, float]:
        return self.x, self.y

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "text": self.text,
            "x": self.x,
            "y": self.y,
            "color": self.color,
            "shape": self.shape,
            "bold": self.bold,
            "italic": self.italic,
            "underline": self.underline,
        }


@dataclass(frozen=True)
class Connection:
    """An undirected edge. ``source``/``target`` only record creation order."""
    id: str
    source: str
    target: str

    @property
    def pair(self) -> FrozenSet[str]:
        return frozenset((self.source, self.target))

    def touches(self, node_id: str) -> bool:
        return self.source == node_id or self.target == node_id

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "from": self.source, "to": self.target}


def make_node(text: str = DEFAULT_NODE_TEXT, x: float = 0.0, y: float = 0.0, **style) -> Node:
    """Create a node with a fresh UUID4 id."""
    return Node(id=str(uuid.uuid4()), text=text, x=x, y=y, **style)


def _node_from_dict(record: Dict[str, Any]) -> Optional[Node]:
    node_id = record.get("id")
    if not node_id:
        logger.warning(f"Skipping node record without id: {record!r}")
        return None
    shape = record.get("shape") or DEFAULT_SHAPE
    if shape not in SHAPES:
        logger.warning(f"Node {node_id} has unknown shape {shape!r}, using {DEFAULT_SHAPE}")
        shape = DEFAULT_SHAPE
    return Node(
        id=str(node_id),
        text=str(record.get("text") or ""),
        x=float(record.get("x") or 0.0),
        y=float(record.get("y") or 0.0),
        color=record.get("color") or DEFAULT_COLOR,
        shape=shape,
        bold=bool(record.get("bold", False)),
        italic=bool(record.get("italic", False)),
        underline=bool(record.get("underline", False)),
    )


@dataclass(frozen=True)
class Graph:
    nodes: Tuple[Node, ...] = ()
    connections: Tuple[Connection, ...] = ()

    # --- Conversion ---

    @classmethod
    def from_dicts(cls, nodes: Iterable[Dict[str, Any]],
                   connections: Iterable[Dict[str, Any]] = ()) -> "Graph":
        """
        Build a graph from the host's plain records.

        Node records without an id are skipped and repeated ids keep the first
        record. Connection records are kept as supplied; dangling ones are
        ignored by every read through ``live_connections``.
        """
        parsed: List[Node] = []
        seen = set()
        for record in nodes or []:
            node = _node_from_dict(record)
            if node is None:
                continue
            if node.id in seen:
                logger.warning(f"Duplicate node id {node.id}, keeping the first record")
                continue
            seen.add(node.id)
            parsed.append(node)

        conns = tuple(
            Connection(
                id=str(record.get("id") or uuid.uuid4()),
                source=record.get("from"),
                target=record.get("to"),
            )
            for record in connections or []
        )
        return cls(nodes=tuple(parsed), connections=conns)

    def to_dicts(self) -> Tuple[List[Dict[str, Any]], List[Dict[str, Any]]]:
        return [n.to_dict() for n in self.nodes], [c.to_dict() for c in self.connections]

    def to_networkx(self) -> nx.Graph:
        """Undirected NetworkX view of the live graph (dangling edges dropped)."""
        G = nx.Graph()
        for node in self.nodes:
            G.add_node(node.id, node=node)
        for conn in self.live_connections():
            G.add_edge(conn.source, conn.target, id=conn.id, connection=conn)
        return G

    # --- Queries ---

    def node(self, node_id: str) -> Optional[Node]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def __contains__(self, node_id) -> bool:
        return self.node(node_id) is not None

    def node_ids(self) -> List[str]:
        return [n.id for n in self.nodes]

    def connection(self, connection_id: str) -> Optional[Connection]:
        for conn in self.connections:
            if conn.id == connection_id:
                return conn
        return None

    def has_edge(self, a: str, b: str) -> bool:
        pair = frozenset((a, b))
        return any(conn.pair == pair for conn in self.connections)

    def live_connections(self) -> List[Connection]:
        """
        Connections safe to render: both endpoints exist, no self loops,
        and only the first connection for any unordered pair.
        """
        ids = {n.id for n in self.nodes}
        seen_pairs = set()
        live = []
        for conn in self.connections:
            if conn.source not in ids or conn.target not in ids:
                continue
            if conn.source == conn.target or conn.pair in seen_pairs:
                continue
            seen_pairs.add(conn.pair)
            live.append(conn)
        return live

    def connections_of(self, node_id: str) -> List[Connection]:
        return [c for c in self.live_connections() if c.touches(node_id)]

    # --- Node operations ---

    def add_node(self, viewport: Viewport = None,
                 container_size: Tuple[float, float] = (DEFAULT_CONTAINER_WIDTH, DEFAULT_CONTAINER_HEIGHT),
                 text: str = DEFAULT_NODE_TEXT,
                 rng: Optional[random.Random] = None) -> Tuple["Graph", Node]:
        """
        Append a node near the middle of the visible area.

        The position is the canvas point under the container center, jittered
        by up to ADD_NODE_JITTER on each axis so repeated adds don't stack.
        """
        viewport = viewport or Viewport()
        rng = rng or random
        center = viewport.visible_center(*container_size)
        node = make_node(
            text=text,
            x=center.x + rng.uniform(-ADD_NODE_JITTER, ADD_NODE_JITTER),
            y=center.y + rng.uniform(-ADD_NODE_JITTER, ADD_NODE_JITTER),
            color=rng.choice(COLOR_TOKENS),
            shape=DEFAULT_SHAPE,
        )
        return replace(self, nodes=self.nodes + (node,)), node

    def update_node(self, node_id: str, **changes) -> "Graph":
        """Merge ``changes`` into the named node. No-op if the id is absent."""
        unknown = set(changes) - set(EDITABLE_FIELDS)
        if unknown:
            raise ValueError(f"Unknown node fields: {sorted(unknown)}")
        if "shape" in changes and changes["shape"] not in SHAPES:
            raise ValueError(f"Unknown shape: {changes['shape']!r}")
        if node_id not in self:
            return self
        return replace(self, nodes=tuple(
            replace(n, **changes) if n.id == node_id else n for n in self.nodes
        ))

    def move_node(self, node_id: str, x: float, y: float) -> "Graph":
        return self.update_node(node_id, x=x, y=y)

    def delete_node(self, node_id: str) -> "Graph":
        """Remove the node and, in the same step, every connection touching it."""
        if node_id not in self:
            return self
        return Graph(
            nodes=tuple(n for n in self.nodes if n.id != node_id),
            connections=tuple(c for c in self.connections if not c.touches(node_id)),
        )

    # --- Connection operations ---

    def add_connection(self, a: str, b: str) -> "Graph":
        """
        Connect two nodes. Self connections, unknown endpoints and pairs that
        are already connected (in either direction) are silent no-ops.
        """
        if a == b:
            logger.debug(f"Ignoring self connection on {a}")
            return self
        if a not in self or b not in self:
            logger.debug(f"Ignoring connection to missing node ({a} -> {b})")
            return self
        if self.has_edge(a, b):
            logger.debug(f"Nodes {a} and {b} are already connected")
            return self
        conn = Connection(id=str(uuid.uuid4()), source=a, target=b)
        return replace(self, connections=self.connections + (conn,))

    def delete_connection(self, connection_id: str) -> "Graph":
        if self.connection(connection_id) is None:
            return self
        return replace(self, connections=tuple(
            c for c in self.connections if c.id != connection_id
        ))
