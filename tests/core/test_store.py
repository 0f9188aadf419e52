"""Tests for GraphStore."""

import pytest

from skillgraph.graph.mutations import MissingDependency
from skillgraph.graph.relations import Edge, EdgeKind
from skillgraph.graph.SkillNode import Phase, SkillNode
from skillgraph.graph.store import GraphStore


@pytest.fixture
def store():
    store = GraphStore()
    for node_id in ("a", "b", "c"):
        store.add_node(SkillNode(id=node_id, phase=Phase.TEST if node_id == "c" else None))
    return store


class TestNodes:
    def test_duplicate_id_rejected(self, store):
        with pytest.raises(ValueError, match="Duplicate"):
            store.add_node(SkillNode(id="a"))

    def test_lookup(self, store):
        assert store.find_by_id("a").id == "a"
        assert store.find_by_id("zzz") is None
        assert store.node_ids() == ["a", "b", "c"]
        assert [n.id for n in store.nodes_by_phase(Phase.TEST)] == ["c"]

    def test_remove_node_removes_every_touching_edge(self, store):
        store.add_edge(Edge("a", "b", EdgeKind.DEPENDS_ON))
        store.add_edge(Edge("b", "c", EdgeKind.SEQUENCE))
        store.add_edge(Edge("c", "b", EdgeKind.CO_EXECUTED))
        store.add_edge(Edge("a", "c", EdgeKind.SEQUENCE))

        node, removed = store.remove_node("b")

        assert node.id == "b"
        assert len(removed) == 3
        assert [e.key for e in store.iter_edges()] == [("a", "c", EdgeKind.SEQUENCE)]
        assert store.outgoing_edges("a") == [Edge("a", "c", EdgeKind.SEQUENCE)]
        assert not store.has_node("b")

    def test_remove_unknown_raises_key_error(self, store):
        with pytest.raises(KeyError):
            store.remove_node("zzz")

    def test_missing_dependencies_follow_node_set(self):
        store = GraphStore()
        store.add_node(SkillNode(id="a", depends_on=["ghost", "b", "a"]))
        store.add_node(SkillNode(id="b", depends_on=["c"]))
        store.add_node(SkillNode(id="c"))

        # self-dependencies are never reported
        assert store.missing_dependencies() == [MissingDependency("a", "ghost")]

        store.remove_node("c")
        assert store.missing_dependencies() == [
            MissingDependency("a", "ghost"),
            MissingDependency("b", "c"),
        ]

        store.remove_node("a")
        assert store.missing_dependencies() == [MissingDependency("b", "c")]

        store.add_node(SkillNode(id="c"))
        assert store.missing_dependencies() == []


class TestEdges:
    def test_endpoints_must_exist(self, store):
        with pytest.raises(ValueError, match="ghost"):
            store.add_edge(Edge("a", "ghost", EdgeKind.DEPENDS_ON))

    def test_duplicate_key_reinforces(self, store):
        store.add_edge(Edge("a", "b", EdgeKind.SEQUENCE, evidence=["r1"]))
        store.add_edge(Edge("a", "b", EdgeKind.SEQUENCE, evidence=["r2"]))

        assert store.edge_count() == 1
        edge = store.find_edge("a", "b", EdgeKind.SEQUENCE)
        assert edge.weight == 2.0
        assert edge.evidence == ["r1", "r2"]

    def test_same_pair_different_kinds_are_distinct(self, store):
        store.add_edge(Edge("a", "b", EdgeKind.SEQUENCE))
        store.add_edge(Edge("a", "b", EdgeKind.DEPENDS_ON))

        assert store.edge_count() == 2
        assert store.edge_count(EdgeKind.SEQUENCE) == 1

    def test_replace_node_edges_only_touches_slice(self, store):
        store.add_edge(Edge("a", "b", EdgeKind.DEPENDS_ON))
        store.add_edge(Edge("b", "c", EdgeKind.DEPENDS_ON))

        store.replace_node_edges("a", [Edge("a", "c", EdgeKind.SEQUENCE)])

        keys = {e.key for e in store.iter_edges()}
        assert keys == {("b", "c", EdgeKind.DEPENDS_ON), ("a", "c", EdgeKind.SEQUENCE)}

    def test_replace_node_edges_rejects_foreign_edge(self, store):
        with pytest.raises(ValueError):
            store.replace_node_edges("a", [Edge("b", "c", EdgeKind.SEQUENCE)])


class TestDerived:
    def test_degrees_ignore_tag_edges(self, store):
        store.add_edge(Edge("a", "b", EdgeKind.TAG_CLUSTER))
        store.add_edge(Edge("a", "c", EdgeKind.DEPENDS_ON))

        store.recompute_degrees()

        assert store.find_by_id("a").out_degree == 1
        assert store.find_by_id("b").degree == 0
        assert store.find_by_id("c").in_degree == 1

    def test_stats(self, store):
        store.add_edge(Edge("a", "b", EdgeKind.DEPENDS_ON))
        store.add_edge(Edge("a", "b", EdgeKind.SEQUENCE))
        store.add_edge(Edge("b", "c", EdgeKind.TAG_CLUSTER))
        store.recompute_degrees()

        stats = store.stats()

        assert stats["node_count"] == 3
        assert stats["edge_count"] == 3
        assert stats["edges_by_kind"]["depends_on"] == 1
        assert stats["edges_by_kind"]["improved_by"] == 0
        # one connected ordered pair out of 3 * 2
        assert stats["density"] == pytest.approx(1 / 6)
        assert stats["average_degree"] == pytest.approx(4 / 3)

    def test_empty_stats(self):
        stats = GraphStore().stats()

        assert stats["node_count"] == 0
        assert stats["density"] == 0.0
        assert stats["average_degree"] == 0.0

    def test_clone_is_independent(self, store):
        store.add_edge(Edge("a", "b", EdgeKind.DEPENDS_ON))

        clone = store.clone()
        clone.remove_node("b")
        clone.find_by_id("a").leverage_score = 9.0

        assert store.has_node("b")
        assert store.edge_count() == 1
        assert store.find_by_id("a").leverage_score == 1.0
