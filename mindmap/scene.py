"""
Scene builder that turns controller state into plain render data.

The output is a dict any renderer can consume (the NiceGUI page draws it as
SVG through ``render_svg``). Edges are routed through a NetworkX view of the
graph, so connections with a missing endpoint never reach the renderer.

Scene format:
  {
    "viewport": {"pan_x": .., "pan_y": .., "zoom": ..},
    "nodes": [{"id", "text", "x", "y", "width", "height", "shape",
               "bold", "italic", "underline", "colors": {...},
               "hovered", "editing", "connecting", "handles": {...}}],
    "edges": [{"id", "from", "to", "start", "end", "path", "midpoint",
               "hovered"}],
    "preview": "<svg path>" or None,
    "state": "Idle" | "DraggingNode" | "Panning" | "Connecting",
    "is_connecting": bool,
    "title": "<mind map title>",
  }
"""

from html import escape
from typing import Any, Dict, Optional

import networkx as nx

from mindmap.constants import resolve_color
from mindmap.geometry import connection_path, handle_positions, node_dimensions

EDGE_COLOR = "hsl(215 20% 55%)"
EDGE_HOVER_COLOR = "hsl(350 65% 55%)"
CANVAS_BACKGROUND = "#0f172a"
HANDLE_COLOR = "#94a3b8"
HANDLE_ACTIVE_COLOR = "#38bdf8"


def node_to_scene(node, hovered: bool = False, editing: bool = False,
                  connecting: bool = False) -> Dict[str, Any]:
    width, height = node_dimensions(node)
    return {
        "id": node.id,
        "text": node.text,
        "x": node.x,
        "y": node.y,
        "width": width,
        "height": height,
        "shape": node.shape,
        "bold": node.bold,
        "italic": node.italic,
        "underline": node.underline,
        "colors": resolve_color(node.color),
        "hovered": hovered,
        "editing": editing,
        "connecting": connecting,
        "handles": {side: tuple(p) for side, p in handle_positions(node).items()},
    }


def edge_to_scene(G: nx.Graph, src: str, tgt: str, hovered_id: Optional[str] = None) -> Dict[str, Any]:
    conn = G.edges[src, tgt]["connection"]
    path, start, end = connection_path(G.nodes[conn.source]["node"], G.nodes[conn.target]["node"])
    return {
        "id": conn.id,
        "from": conn.source,
        "to": conn.target,
        "start": tuple(start.point),
        "end": tuple(end.point),
        "path": path.to_svg(),
        "midpoint": tuple(path.midpoint()),
        "hovered": conn.id == hovered_id,
    }


def build_scene(controller) -> Dict[str, Any]:
    """Snapshot everything a renderer needs from a MindMapController."""
    graph = controller.display_graph
    G = graph.to_networkx()
    state = controller.state
    connecting_id = getattr(state, "source_id", None)

    nodes = [
        node_to_scene(
            node,
            hovered=node.id == controller.hovered_node_id,
            editing=node.id == controller.editing_node_id,
            connecting=node.id == connecting_id,
        )
        for node in graph.nodes
    ]
    edges = [edge_to_scene(G, src, tgt, controller.hovered_connection_id) for src, tgt in G.edges()]

    preview = controller.connection_preview()
    return {
        "viewport": controller.viewport.to_dict(),
        "nodes": nodes,
        "edges": edges,
        "preview": preview.to_svg() if preview else None,
        "state": type(state).__name__,
        "is_connecting": connecting_id is not None,
        "title": controller.title,
    }


# --- SVG rendering ---

def _node_shape_svg(n: Dict[str, Any]) -> str:
    colors = n["colors"]
    x, y, w, h = n["x"], n["y"], n["width"], n["height"]
    stroke_width = 3 if n["connecting"] else 2
    style = f'fill="{colors["bg"]}" stroke="{colors["border"]}" stroke-width="{stroke_width}"'
    if n["shape"] == "diamond":
        points = f"{x + w / 2},{y} {x + w},{y + h / 2} {x + w / 2},{y + h} {x},{y + h / 2}"
        return f'<polygon points="{points}" {style} />'
    radius = h / 2 if n["shape"] == "oval" else 12
    return f'<rect x="{x}" y="{y}" width="{w}" height="{h}" rx="{radius}" {style} />'


def _node_text_svg(n: Dict[str, Any]) -> str:
    attrs = [
        f'x="{n["x"] + n["width"] / 2}"',
        f'y="{n["y"] + n["height"] / 2}"',
        'text-anchor="middle"',
        'dominant-baseline="middle"',
        'font-size="14"',
        f'fill="{n["colors"]["text"]}"',
        f'font-weight="{"bold" if n["bold"] else "500"}"',
    ]
    if n["italic"]:
        attrs.append('font-style="italic"')
    if n["underline"]:
        attrs.append('text-decoration="underline"')
    label = escape(n["text"]) if n["text"] else "Double-click to edit"
    return f'<text {" ".join(attrs)}>{label}</text>'


def render_svg_content(scene: Dict[str, Any], width: float, height: float) -> str:
    """SVG elements for a scene, without the outer <svg> root (for overlays)."""
    vp = scene["viewport"]
    parts = [
        f'<rect x="0" y="0" width="{width}" height="{height}" fill="{CANVAS_BACKGROUND}" />',
        f'<g transform="translate({vp["pan_x"]} {vp["pan_y"]}) scale({vp["zoom"]})">',
    ]

    for e in scene["edges"]:
        color = EDGE_HOVER_COLOR if e["hovered"] else EDGE_COLOR
        parts.append(f'<path d="{e["path"]}" stroke="{color}" stroke-width="2" fill="none" '
                     f'stroke-linecap="round" />')
        for cx, cy in (e["start"], e["end"]):
            parts.append(f'<circle cx="{cx}" cy="{cy}" r="3" fill="{color}" />')
        if e["hovered"]:
            mx, my = e["midpoint"]
            parts.append(f'<circle cx="{mx}" cy="{my}" r="10" fill="{EDGE_HOVER_COLOR}" />')
            parts.append(f'<text x="{mx}" y="{my + 4}" text-anchor="middle" font-size="12" '
                         f'fill="#ffffff">&#215;</text>')

    if scene["preview"]:
        parts.append(f'<path d="{scene["preview"]}" stroke="{EDGE_COLOR}" stroke-width="2" '
                     f'fill="none" stroke-dasharray="6,4" opacity="0.7" stroke-linecap="round" />')

    for n in scene["nodes"]:
        parts.append(_node_shape_svg(n))
        parts.append(_node_text_svg(n))
        if n["hovered"] or scene["is_connecting"]:
            fill = HANDLE_ACTIVE_COLOR if scene["is_connecting"] and not n["connecting"] else HANDLE_COLOR
            for hx, hy in n["handles"].values():
                parts.append(f'<circle cx="{hx}" cy="{hy}" r="6" fill="{fill}" stroke="#ffffff" />')

    parts.append('</g>')
    return "".join(parts)


def render_svg(scene: Dict[str, Any], width: float, height: float) -> str:
    """Render a scene as a standalone SVG document sized width x height."""
    return (
        f'<svg viewBox="0 0 {width} {height}" width="{width}" height="{height}" '
        f'xmlns="http://www.w3.org/2000/svg">'
        f'{render_svg_content(scene, width, height)}</svg>'
    )
