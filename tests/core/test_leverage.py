"""Tests for LeverageScorer."""

import pytest

from skillgraph.graph.leverage import LeverageScorer
from skillgraph.graph.relations import Edge, EdgeKind
from tests.core.graph_test_helpers import build_store, chain_scenario, make_skill


class TestMassConservation:
    def test_scores_sum_to_node_count(self, chain_store):
        scores = chain_store.leverage_scores()

        assert sum(scores.values()) == pytest.approx(3.0)
        assert all(s >= 0 for s in scores.values())

    def test_dangling_nodes_do_not_leak(self):
        # b has no outgoing edges; its score is spread over everyone
        result = LeverageScorer().compute(
            ["a", "b", "c"],
            [Edge("a", "b", EdgeKind.DEPENDS_ON), Edge("c", "b", EdgeKind.DEPENDS_ON)],
        )

        assert sum(result.scores.values()) == pytest.approx(3.0)
        assert result.scores["b"] > result.scores["a"]
        assert result.scores["a"] == pytest.approx(result.scores["c"])

    def test_no_edges_gives_uniform_scores(self):
        result = LeverageScorer().compute(["a", "b", "c", "d"], [])

        assert result.converged
        for score in result.scores.values():
            assert score == pytest.approx(1.0)

    def test_empty_graph(self):
        result = LeverageScorer().compute([], [])

        assert result.scores == {}


class TestPropagation:
    def test_dependency_target_outranks_source(self, chain_store):
        scores = chain_store.leverage_scores()

        assert scores["c"] > scores["a"]

    def test_tag_edges_carry_no_score(self):
        with_tags = LeverageScorer().compute(
            ["a", "b"], [Edge("a", "b", EdgeKind.TAG_CLUSTER, weight=5)]
        )

        assert with_tags.scores["a"] == pytest.approx(with_tags.scores["b"])

    def test_weight_shapes_distribution(self):
        result = LeverageScorer().compute(
            ["a", "b", "c"],
            [
                Edge("a", "b", EdgeKind.SEQUENCE, weight=3),
                Edge("a", "c", EdgeKind.SEQUENCE, weight=1),
            ],
        )

        assert result.scores["b"] > result.scores["c"]


class TestDeterminism:
    def test_order_independent(self):
        edges = [
            Edge("a", "b", EdgeKind.DEPENDS_ON),
            Edge("b", "c", EdgeKind.SEQUENCE, weight=2),
            Edge("c", "a", EdgeKind.CO_EXECUTED),
        ]

        first = LeverageScorer().compute(["a", "b", "c"], edges)
        second = LeverageScorer().compute(["c", "b", "a"], list(reversed(edges)))

        assert first.scores == second.scores

    def test_repeated_builds_identical(self):
        skills, runs = chain_scenario()

        first = build_store(skills, runs).leverage_scores()
        second = build_store(skills, runs).leverage_scores()

        assert first == second


class TestConvergence:
    def test_warm_start_converges_to_same_scores(self):
        edges = [
            Edge("a", "b", EdgeKind.DEPENDS_ON),
            Edge("b", "c", EdgeKind.DEPENDS_ON),
            Edge("c", "a", EdgeKind.SEQUENCE),
            Edge("a", "c", EdgeKind.CO_EXECUTED),
        ]
        scorer = LeverageScorer(tolerance=1e-10, max_iterations=1000)

        cold = scorer.compute(["a", "b", "c"], edges)
        warm = scorer.compute(["a", "b", "c"], edges, initial={"a": 5.0, "b": 0.1})

        for node_id in ("a", "b", "c"):
            assert warm.scores[node_id] == pytest.approx(cold.scores[node_id], abs=1e-6)

    def test_iteration_cap_reports_non_convergence(self, caplog):
        edges = [Edge("a", "b", EdgeKind.DEPENDS_ON), Edge("b", "c", EdgeKind.DEPENDS_ON)]

        result = LeverageScorer(tolerance=1e-15, max_iterations=1).compute(["a", "b", "c"], edges)

        assert not result.converged
        assert result.iterations == 1
        assert sum(result.scores.values()) == pytest.approx(3.0)
        assert "did not converge" in caplog.text

    def test_score_writes_back_to_store(self):
        store = build_store([make_skill("a", depends_on=["b"]), make_skill("b")])

        for node in store.all_nodes():
            node.leverage_score = 1.0
        LeverageScorer().score(store)

        assert store.find_by_id("b").leverage_score > store.find_by_id("a").leverage_score
