"""
Mind-map node-graph editing engine.

- Graph / Node / Connection: immutable graph model
- Viewport: pan + zoom coordinate mapping
- MindMapController: pointer/keyboard/wheel interaction state machine
- build_scene: plain render data for a host renderer
"""

from mindmap.config import CommitPolicy, EditorSettings, get_editor_settings
from mindmap.controller import (
    Connecting,
    ContainerRect,
    DraggingNode,
    Idle,
    KeyEvent,
    MindMapController,
    Panning,
    PointerEvent,
    WheelEvent,
)
from mindmap.graph import Connection, Graph, Node
from mindmap.history import GraphHistory
from mindmap.scene import build_scene, render_svg
from mindmap.viewport import Viewport

__version__ = "0.1.0"

__all__ = [
    'CommitPolicy',
    'EditorSettings',
    'get_editor_settings',
    'MindMapController',
    'ContainerRect',
    'PointerEvent',
    'WheelEvent',
    'KeyEvent',
    'Idle',
    'DraggingNode',
    'Panning',
    'Connecting',
    'Graph',
    'Node',
    'Connection',
    'GraphHistory',
    'Viewport',
    'build_scene',
    'render_svg',
]
