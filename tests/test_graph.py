import random

import pytest

from mindmap.constants import COLOR_TOKENS, DEFAULT_NODE_TEXT
from mindmap.graph import Connection, Graph, Node, make_node
from mindmap.viewport import Viewport


@pytest.fixture
def graph():
    """Three nodes in a row, with a-b connected."""
    return Graph.from_dicts(
        [
            {"id": "a", "text": "A", "x": 0, "y": 0},
            {"id": "b", "text": "B", "x": 300, "y": 0},
            {"id": "c", "text": "C", "x": 600, "y": 0},
        ],
        [{"id": "ab", "from": "a", "to": "b"}],
    )


def assert_invariants(g: Graph):
    ids = g.node_ids()
    assert len(ids) == len(set(ids))
    pairs = [c.pair for c in g.connections]
    assert len(pairs) == len(set(pairs))
    for conn in g.connections:
        assert conn.source != conn.target
        assert conn.source in g and conn.target in g


class TestFromDicts:

    def test_defaults(self):
        g = Graph.from_dicts([{"id": "n1"}])
        node = g.node("n1")
        assert node.shape == "rectangle"
        assert node.color == "sage"
        assert node.text == ""
        assert not node.bold and not node.italic and not node.underline

    def test_unknown_shape_falls_back_to_rectangle(self):
        g = Graph.from_dicts([{"id": "n1", "shape": "hexagon"}])
        assert g.node("n1").shape == "rectangle"

    def test_records_without_id_are_skipped(self):
        g = Graph.from_dicts([{"text": "orphan"}, {"id": "n1"}])
        assert g.node_ids() == ["n1"]

    def test_duplicate_ids_keep_first(self):
        g = Graph.from_dicts([{"id": "n1", "text": "first"}, {"id": "n1", "text": "second"}])
        assert len(g.nodes) == 1
        assert g.node("n1").text == "first"

    def test_connection_without_id_gets_one(self):
        g = Graph.from_dicts([{"id": "a"}, {"id": "b"}], [{"from": "a", "to": "b"}])
        assert g.connections[0].id

    def test_round_trip_keys(self, graph):
        nodes, connections = graph.to_dicts()
        assert set(nodes[0]) == {"id", "text", "x", "y", "color", "shape", "bold", "italic", "underline"}
        assert connections == [{"id": "ab", "from": "a", "to": "b"}]
        assert Graph.from_dicts(nodes, connections) == graph


class TestLiveConnections:

    def test_dangling_connection_is_stored_but_not_live(self):
        g = Graph.from_dicts([{"id": "a"}], [{"id": "x", "from": "a", "to": "ghost"}])
        assert len(g.connections) == 1
        assert g.live_connections() == []

    def test_corrupt_self_loop_and_duplicate_are_filtered(self):
        g = Graph.from_dicts(
            [{"id": "a"}, {"id": "b"}],
            [
                {"id": "1", "from": "a", "to": "b"},
                {"id": "2", "from": "b", "to": "a"},
                {"id": "3", "from": "a", "to": "a"},
            ],
        )
        assert [c.id for c in g.live_connections()] == ["1"]

    def test_networkx_view_skips_dangling(self):
        g = Graph.from_dicts(
            [{"id": "a"}, {"id": "b"}],
            [{"id": "1", "from": "a", "to": "b"}, {"id": "2", "from": "a", "to": "ghost"}],
        )
        G = g.to_networkx()
        assert set(G.nodes) == {"a", "b"}
        assert G.number_of_edges() == 1
        assert G.edges["a", "b"]["id"] == "1"
        assert isinstance(G.nodes["a"]["node"], Node)

    def test_connections_of(self, graph):
        assert [c.id for c in graph.connections_of("a")] == ["ab"]
        assert graph.connections_of("c") == []


class TestAddNode:

    def test_three_adds_give_distinct_ids(self):
        g = Graph()
        rng = random.Random(42)
        ids = []
        for _ in range(3):
            g, node = g.add_node(rng=rng)
            ids.append(node.id)
        assert len(g.nodes) == 3
        assert len(set(ids)) == 3

    def test_new_node_defaults(self):
        _, node = Graph().add_node(rng=random.Random(1))
        assert node.text == DEFAULT_NODE_TEXT
        assert node.shape == "rectangle"
        assert node.color in COLOR_TOKENS

    def test_placed_near_visible_center(self):
        rng = random.Random(3)
        for _ in range(20):
            _, node = Graph().add_node(container_size=(400, 300), rng=rng)
            assert 150 <= node.x <= 250
            assert 100 <= node.y <= 200

    def test_placement_follows_viewport(self):
        vp = Viewport(pan_x=100, pan_y=50, zoom=2)
        _, node = Graph().add_node(vp, (400, 300), rng=random.Random(5))
        # visible center is canvas (50, 50)
        assert 0 <= node.x <= 100
        assert 0 <= node.y <= 100

    def test_source_graph_is_untouched(self, graph):
        new_graph, _ = graph.add_node(rng=random.Random(0))
        assert len(graph.nodes) == 3
        assert len(new_graph.nodes) == 4

    def test_make_node_ids_are_unique(self):
        assert make_node().id != make_node().id


class TestUpdateNode:

    def test_merges_fields(self, graph):
        g = graph.update_node("a", text="Hello", bold=True)
        assert g.node("a").text == "Hello"
        assert g.node("a").bold
        assert g.node("a").x == 0

    def test_missing_id_is_noop(self, graph):
        assert graph.update_node("ghost", text="x") is graph

    def test_unknown_field_raises(self, graph):
        with pytest.raises(ValueError):
            graph.update_node("a", id="new-id")

    def test_unknown_shape_raises(self, graph):
        with pytest.raises(ValueError):
            graph.update_node("a", shape="star")

    def test_move_node(self, graph):
        g = graph.move_node("b", 10, 20)
        assert g.node("b").position == (10, 20)


class TestDeleteNode:

    def test_cascades_to_connections(self):
        g = Graph()
        rng = random.Random(0)
        g, n1 = g.add_node(rng=rng)
        g, n2 = g.add_node(rng=rng)
        g, n3 = g.add_node(rng=rng)
        g = g.add_connection(n1.id, n2.id)
        g = g.add_connection(n2.id, n3.id)
        g = g.add_connection(n1.id, n3.id)

        g = g.delete_node(n2.id)

        assert g.node_ids() == [n1.id, n3.id]
        assert [(c.source, c.target) for c in g.connections] == [(n1.id, n3.id)]

    def test_missing_id_is_noop(self, graph):
        assert graph.delete_node("ghost") is graph


class TestConnections:

    def test_add_connection(self, graph):
        g = graph.add_connection("b", "c")
        assert g.has_edge("c", "b")
        assert len(g.connections) == 2

    def test_self_connection_is_noop(self, graph):
        assert graph.add_connection("c", "c") is graph

    def test_duplicate_is_noop_in_either_direction(self, graph):
        assert graph.add_connection("a", "b") is graph
        assert graph.add_connection("b", "a") is graph

    def test_add_connection_is_idempotent(self, graph):
        once = graph.add_connection("a", "c")
        twice = once.add_connection("a", "c")
        assert twice.connections == once.connections

    def test_missing_endpoint_is_noop(self, graph):
        assert graph.add_connection("a", "ghost") is graph

    def test_delete_connection(self, graph):
        g = graph.delete_connection("ab")
        assert g.connections == ()
        assert g.nodes == graph.nodes

    def test_delete_missing_connection_is_noop(self, graph):
        assert graph.delete_connection("nope") is graph

    def test_connection_pair_is_unordered(self):
        assert Connection("1", "a", "b").pair == Connection("2", "b", "a").pair


def test_invariants_hold_for_random_edits():
    rng = random.Random(1234)
    g = Graph()
    for _ in range(300):
        op = rng.choice(["add", "add", "connect", "connect", "delete", "disconnect", "move"])
        ids = g.node_ids()
        if op == "add" or not ids:
            g, _ = g.add_node(rng=rng)
        elif op == "connect":
            g = g.add_connection(rng.choice(ids), rng.choice(ids))
        elif op == "delete":
            g = g.delete_node(rng.choice(ids))
        elif op == "disconnect" and g.connections:
            g = g.delete_connection(rng.choice(g.connections).id)
        elif op == "move":
            g = g.move_node(rng.choice(ids), rng.uniform(-500, 500), rng.uniform(-500, 500))
        assert_invariants(g)
