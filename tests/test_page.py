from mindmap.page import MOUSE_EVENTS, WHEEL_EVENTS


def test_wheel_bindings_need_a_modifier():
    for event in WHEEL_EVENTS:
        base, *modifiers = event.split(".")
        assert base == "wheel"
        assert "ctrl" in modifiers or "meta" in modifiers


def test_wheel_bindings_prevent_browser_zoom():
    assert WHEEL_EVENTS
    assert all(event.endswith(".prevent") for event in WHEEL_EVENTS)
    assert {"wheel.ctrl.prevent", "wheel.meta.prevent"} == set(WHEEL_EVENTS)


def test_mouse_events():
    assert set(MOUSE_EVENTS) == {"mousedown", "mousemove", "mouseup", "dblclick"}
