from mindmap.controller import MindMapController, PointerEvent
from mindmap.scene import build_scene, render_svg, render_svg_content


def make_controller(connections=None, **node_overrides):
    a = {"id": "a", "text": "A", "x": 0, "y": 0}
    a.update(node_overrides)
    nodes = [a, {"id": "b", "text": "B", "x": 300, "y": 0}]
    if connections is None:
        connections = [{"id": "ab", "from": "a", "to": "b"}]
    return MindMapController(nodes, connections)


def test_scene_nodes():
    scene = build_scene(make_controller())
    assert [n["id"] for n in scene["nodes"]] == ["a", "b"]
    a = scene["nodes"][0]
    assert (a["width"], a["height"]) == (100, 50)
    assert a["handles"]["right"] == (100, 25)
    assert a["colors"]["name"]
    assert scene["state"] == "Idle"
    assert not scene["is_connecting"]
    assert scene["preview"] is None


def test_scene_edges_use_nearest_handles():
    edge = build_scene(make_controller())["edges"][0]
    assert edge["id"] == "ab"
    assert edge["start"] == (100, 25)
    assert edge["end"] == (300, 25)
    assert edge["path"] == "M 100 25 C 180 25, 220 25, 300 25"
    assert edge["midpoint"] == (200, 25)


def test_dangling_connections_are_not_rendered():
    ctrl = make_controller(connections=[{"id": "x", "from": "a", "to": "ghost"}])
    assert build_scene(ctrl)["edges"] == []


def test_hover_flags():
    ctrl = make_controller()
    ctrl.pointer_move(PointerEvent(50, 25))
    scene = build_scene(ctrl)
    assert scene["nodes"][0]["hovered"]
    assert not scene["nodes"][1]["hovered"]

    ctrl.pointer_move(PointerEvent(200, 25))
    assert build_scene(ctrl)["edges"][0]["hovered"]


def test_connecting_scene():
    ctrl = make_controller(connections=[])
    ctrl.pointer_down(PointerEvent(100, 25))
    ctrl.pointer_move(PointerEvent(200, 100))
    scene = build_scene(ctrl)
    assert scene["state"] == "Connecting"
    assert scene["is_connecting"]
    assert scene["nodes"][0]["connecting"]
    assert scene["preview"].startswith("M 100 25 C")


def test_viewport_in_scene():
    ctrl = make_controller()
    ctrl.zoom_in()
    assert build_scene(ctrl)["viewport"]["zoom"] == ctrl.viewport.zoom


def test_render_svg():
    svg = render_svg(build_scene(make_controller()), 400, 300)
    assert svg.startswith("<svg")
    assert 'xmlns="http://www.w3.org/2000/svg"' in svg
    assert 'd="M 100 25 C 180 25, 220 25, 300 25"' in svg
    assert ">A</text>" in svg


def test_render_content_has_no_root():
    content = render_svg_content(build_scene(make_controller()), 400, 300)
    assert "<svg" not in content


def test_text_is_escaped():
    svg = render_svg(build_scene(make_controller(text="<b>&")), 400, 300)
    assert "&lt;b&gt;&amp;" in svg
    assert "<b>" not in svg


def test_empty_text_placeholder():
    svg = render_svg(build_scene(make_controller(text="")), 400, 300)
    assert "Double-click to edit" in svg


def test_diamond_is_polygon():
    svg = render_svg(build_scene(make_controller(shape="diamond")), 400, 300)
    assert "<polygon" in svg


def test_style_flags():
    svg = render_svg(build_scene(make_controller(bold=True, italic=True, underline=True)), 400, 300)
    assert 'font-weight="bold"' in svg
    assert 'font-style="italic"' in svg
    assert 'text-decoration="underline"' in svg


def test_cancelled_connection_clears_connecting_flag():
    ctrl = make_controller(connections=[])
    ctrl.pointer_down(PointerEvent(100, 25))
    assert build_scene(ctrl)["is_connecting"]

    ctrl.cancel_connection()
    scene = build_scene(ctrl)
    assert not scene["is_connecting"]
    assert scene["preview"] is None
    assert scene["state"] == "Idle"


def test_scene_title():
    ctrl = make_controller()
    assert build_scene(ctrl)["title"] == "Mind Map"
    ctrl.begin_title_edit()
    ctrl.set_title_draft(" Plans ")
    ctrl.submit_title()
    assert build_scene(ctrl)["title"] == "Plans"
