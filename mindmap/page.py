"""
Mind-map page - NiceGUI host for one MindMapController.

This module keeps the event wiring out of app.py:
- Mouse events from an interactive image are forwarded to the controller
- Ctrl/Cmd + wheel zooms, the global keyboard drives Escape and undo/redo
- The canvas is redrawn from build_scene() after every handled event

The controller never talks to NiceGUI; everything here is translation.
"""

import logging
from typing import Any, Callable, Dict, Optional

from nicegui import ui

from mindmap.config import EditorSettings
from mindmap.constants import DEFAULT_TITLE, NODE_COLORS, SHAPES
from mindmap.controller import (
    ContainerRect,
    KeyEvent,
    MindMapController,
    PointerEvent,
    WheelEvent,
)
from mindmap.scene import build_scene, render_svg_content

logger = logging.getLogger(__name__)

CANVAS_WIDTH = 1200
CANVAS_HEIGHT = 700

MOUSE_EVENTS = ['mousedown', 'mousemove', 'mouseup', 'dblclick']
# Only modifier wheels are bound, and those skip the browser's own page zoom
WHEEL_EVENTS = ['wheel.ctrl.prevent', 'wheel.meta.prevent']


def render_mindmap(
    document: Dict[str, Any],
    settings: Optional[EditorSettings] = None,
    on_commit: Optional[Callable[[Dict[str, Any]], None]] = None,
) -> MindMapController:
    """
    Build the editor UI for a document holding 'nodes', 'connections' and 'title'.

    Args:
        document: Plain dict owned by the caller; replaced lists are written back to it
        settings: Editor settings (commit policy, history size)
        on_commit: Called with the document after every committed change

    Returns:
        The controller driving the page
    """

    def handle_change(nodes, connections):
        document['nodes'] = nodes
        document['connections'] = connections
        if on_commit:
            on_commit(document)

    def handle_title_change(title):
        document['title'] = title
        if on_commit:
            on_commit(document)

    controller = MindMapController(
        document.get('nodes', []),
        document.get('connections', []),
        on_change=handle_change,
        settings=settings,
        container=ContainerRect(0, 0, CANVAS_WIDTH, CANVAS_HEIGHT),
        title=document.get('title') or DEFAULT_TITLE,
        on_title_change=handle_title_change,
    )

    toolbar_key = {'value': None}

    def refresh():
        scene = build_scene(controller)
        canvas.content = render_svg_content(scene, CANVAS_WIDTH, CANVAS_HEIGHT)
        zoom_label.set_text(f'{round(controller.viewport.zoom * 100)}%')
        connecting = scene['is_connecting']
        cancel_button.set_visibility(connecting)
        hint_label.set_visibility(not connecting)
        title_label.set_text(controller.title)
        title_label.set_visibility(not controller.editing_title)
        title_input.set_visibility(controller.editing_title)
        if not controller.editing_title and title_input.value != controller.title_draft:
            title_input.set_value(controller.title_draft)
        # Rebuilding the toolbar on every mouse move would steal focus from the text input
        hovered = None if controller.editing_node_id else controller.graph.node(controller.hovered_node_id or '')
        key = (controller.hovered_node_id, controller.editing_node_id, controller.open_picker, hovered)
        if key != toolbar_key['value']:
            toolbar_key['value'] = key
            node_toolbar.refresh()

    def handle_mouse(e):
        event = PointerEvent(e.image_x, e.image_y, button=e.button)
        if e.type == 'mousedown':
            controller.pointer_down(event)
        elif e.type == 'mousemove':
            controller.pointer_move(event)
        elif e.type == 'mouseup':
            controller.pointer_up(event)
        elif e.type == 'dblclick':
            controller.double_click(event)
        refresh()

    def handle_wheel(e):
        args = e.args or {}
        handled = controller.wheel(WheelEvent(
            delta_y=args.get('deltaY', 0),
            ctrl=bool(args.get('ctrlKey')),
            meta=bool(args.get('metaKey')),
        ))
        if handled:
            refresh()

    def handle_keyboard(e):
        if not e.action.keydown:
            return
        handled = controller.key_down(KeyEvent(
            key=e.key.name,
            ctrl=e.modifiers.ctrl,
            meta=e.modifiers.meta,
            shift=e.modifiers.shift,
        ))
        if handled:
            refresh()

    def run(action: Callable, *args):
        """Run a controller action from a button, then redraw."""
        action(*args)
        refresh()

    def make_handler(action: Callable, *args):
        return lambda: run(action, *args)

    def begin_title_edit():
        controller.begin_title_edit()
        refresh()
        title_input.run_method('focus')

    # --- Layout ---

    with ui.row().classes('items-center gap-2'):
        title_label = ui.label(controller.title).classes('text-lg font-semibold cursor-pointer')
        title_label.on('click', begin_title_edit)
        title_input = ui.input(value=controller.title_draft,
                               on_change=lambda e: controller.set_title_draft(e.value)) \
            .props('dense outlined') \
            .on('keydown.enter', lambda: run(controller.submit_title)) \
            .on('keydown.escape', lambda: run(controller.cancel_title_edit)) \
            .on('blur', lambda: run(controller.submit_title))

    with ui.row().classes('items-center gap-2'):
        ui.button(icon='add', on_click=lambda: run(controller.add_node)).props('flat dense').tooltip('Add node')
        cancel_button = ui.button('Cancel', icon='close', on_click=lambda: run(controller.cancel_connection)) \
            .props('dense color=negative no-caps')
        hint_label = ui.label('Drag canvas to pan, hover nodes for tools').classes('text-xs text-gray-500')
        ui.separator().props('vertical')
        ui.button(icon='zoom_out', on_click=lambda: run(controller.zoom_out)).props('flat dense')
        zoom_label = ui.label('100%').classes('text-xs text-gray-400 w-10 text-center')
        ui.button(icon='zoom_in', on_click=lambda: run(controller.zoom_in)).props('flat dense')
        ui.button(icon='restart_alt', on_click=lambda: run(controller.reset_view)).props('flat dense').tooltip('Reset view')
        ui.separator().props('vertical')
        ui.button(icon='undo', on_click=lambda: run(controller.undo)).props('flat dense').tooltip('Undo (Ctrl+Z)')
        ui.button(icon='redo', on_click=lambda: run(controller.redo)).props('flat dense').tooltip('Redo (Ctrl+Shift+Z)')

    canvas = ui.interactive_image(
        size=(CANVAS_WIDTH, CANVAS_HEIGHT),
        on_mouse=handle_mouse,
        events=MOUSE_EVENTS,
        cross=False,
    ).classes('rounded-lg border border-slate-700')
    for wheel_event in WHEEL_EVENTS:
        canvas.on(wheel_event, handle_wheel, ['deltaY', 'ctrlKey', 'metaKey'])

    @ui.refreshable
    def node_toolbar():
        node_id = controller.editing_node_id or controller.hovered_node_id
        node = controller.graph.node(node_id) if node_id else None
        if node is None:
            ui.label('Hover a node to style it, drag a handle to connect.').classes('text-xs text-gray-500')
            return

        if controller.editing_node_id == node.id:
            ui.input('Text', value=node.text,
                     on_change=lambda e: controller.set_text(node.id, e.value)) \
                .props('dense outlined autofocus') \
                .on('keydown.enter', lambda: run(controller.end_text_edit)) \
                .on('blur', lambda: run(controller.end_text_edit))
            return

        with ui.row().classes('items-center gap-1'):
            for flag, icon in (('bold', 'format_bold'), ('italic', 'format_italic'),
                               ('underline', 'format_underlined')):
                ui.button(icon=icon, on_click=make_handler(controller.toggle_style, node.id, flag)) \
                    .props(f'flat dense {"color=primary" if getattr(node, flag) else "color=grey"}')
            ui.button(icon='category', on_click=lambda: run(controller.toggle_picker, 'shape', node.id)) \
                .props('flat dense').tooltip('Shape')
            ui.button(icon='palette', on_click=lambda: run(controller.toggle_picker, 'color', node.id)) \
                .props('flat dense').tooltip('Color')
            ui.button(icon='edit', on_click=lambda: run(controller.begin_text_edit, node.id)) \
                .props('flat dense').tooltip('Edit text')
            ui.button(icon='close', on_click=lambda: run(controller.delete_node, node.id)) \
                .props('flat dense color=negative').tooltip('Delete node')

        picker = controller.open_picker
        if picker and picker[1] == node.id:
            with ui.row().classes('items-center gap-1'):
                if picker[0] == 'shape':
                    for shape in SHAPES:
                        ui.button(shape.title(), on_click=make_handler(controller.set_shape, node.id, shape)) \
                            .props('flat dense no-caps')
                else:
                    for token, color in NODE_COLORS.items():
                        ui.button(on_click=make_handler(controller.set_color, node.id, token)) \
                            .props('round dense').style(f'background: {color["bg"]} !important') \
                            .tooltip(color['name'])

    node_toolbar()
    ui.keyboard(on_key=handle_keyboard)
    refresh()

    logger.debug(f"Mind map page ready with {len(controller.graph.nodes)} nodes")
    return controller
