import pytest

from mindmap.graph import Graph
from mindmap.history import GraphHistory


def graph_with(*ids):
    return Graph.from_dicts([{"id": i} for i in ids])


def test_starts_with_initial_graph():
    history = GraphHistory(graph_with("a"))
    assert history.current == graph_with("a")
    assert not history.can_undo
    assert not history.can_redo


def test_undo_redo():
    history = GraphHistory(graph_with())
    history.push(graph_with("a"))
    history.push(graph_with("a", "b"))

    assert history.undo() == graph_with("a")
    assert history.undo() == graph_with()
    assert history.undo() is None
    assert history.redo() == graph_with("a")
    assert history.redo() == graph_with("a", "b")
    assert history.redo() is None


def test_push_after_undo_drops_redo_states():
    history = GraphHistory(graph_with())
    history.push(graph_with("a"))
    history.undo()
    history.push(graph_with("b"))

    assert not history.can_redo
    assert len(history) == 2
    assert history.current == graph_with("b")


def test_equal_snapshot_is_skipped():
    history = GraphHistory(graph_with("a"))
    history.push(graph_with("a"))
    assert len(history) == 1


def test_size_is_bounded():
    history = GraphHistory(graph_with(), max_size=3)
    for name in ["a", "b", "c", "d"]:
        history.push(graph_with(name))

    assert len(history) == 3
    assert history.current == graph_with("d")
    history.undo()
    history.undo()
    assert not history.can_undo
    assert history.current == graph_with("b")


def test_reset():
    history = GraphHistory(graph_with())
    history.push(graph_with("a"))
    history.reset(graph_with("z"))
    assert len(history) == 1
    assert history.current == graph_with("z")


def test_invalid_size():
    with pytest.raises(ValueError):
        GraphHistory(Graph(), max_size=0)
