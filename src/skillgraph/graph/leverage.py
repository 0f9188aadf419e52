"""Leverage scoring - PageRank-style centrality over structural edges.

Score flows from a skill to the skills it relies on (dependency targets,
the next skill in a run, co-executed skills, improvement triggers).
``tag_cluster`` edges never carry score.

Each iteration:
- every node spreads its score over its outgoing targets, in proportion
  to edge weight;
- dangling nodes (no outgoing structural weight) spread their score
  evenly over all nodes, so no mass leaks out of the system;
- ``new = (1 - damping) + damping * incoming``.

With scores summing to ``n`` this keeps the total at ``n`` every
iteration. The final vector is rescaled to sum to ``n`` so scores stay
comparable across builds of different sizes.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from skillgraph.graph.relations import Edge

if TYPE_CHECKING:
    from skillgraph.graph.store import GraphStore

logger = logging.getLogger(__name__)


@dataclass
class LeverageResult:
    """Outcome of a scoring run.

    Attributes:
        scores: Score per node id, summing to the node count.
        iterations: Iterations performed.
        converged: True if the tolerance was reached before the cap.
    """

    scores: dict[str, float] = field(default_factory=dict)
    iterations: int = 0
    converged: bool = True


class LeverageScorer:
    """Iterative leverage computation with dangling-node redistribution."""

    def __init__(
        self,
        damping: float = 0.85,
        tolerance: float = 1e-6,
        max_iterations: int = 100,
    ) -> None:
        self.damping = damping
        self.tolerance = tolerance
        self.max_iterations = max_iterations

    def score(self, store: GraphStore, initial: dict[str, float] | None = None) -> LeverageResult:
        """Score every node of ``store`` and write the scores back.

        Args:
            store: Graph to score.
            initial: Warm-start scores (e.g. the previous converged vector).
                Nodes missing from it start at 1.0.
        """
        result = self.compute(store.node_ids(), store.iter_edges(), initial)
        store.apply_scores(result.scores)
        return result

    def compute(
        self,
        node_ids: Iterable[str],
        edges: Iterable[Edge],
        initial: dict[str, float] | None = None,
    ) -> LeverageResult:
        """Score a bare node/edge set without touching any store.

        Edges are aggregated into a per-source table keyed by sorted node
        id before iterating, so the result does not depend on the order
        nodes or edges are supplied in.
        """
        ids = sorted(set(node_ids))
        n = len(ids)
        if n == 0:
            return LeverageResult()
        position = {node_id: i for i, node_id in enumerate(ids)}

        # Aggregate propagating weight per (source, target)
        weight_table: dict[tuple[int, int], float] = {}
        for edge in edges:
            if not edge.kind.propagates_leverage():
                continue
            src = position.get(edge.source_id)
            dst = position.get(edge.target_id)
            if src is None or dst is None or src == dst:
                continue
            weight_table[(src, dst)] = weight_table.get((src, dst), 0.0) + edge.weight

        outgoing: list[list[tuple[int, float]]] = [[] for _ in range(n)]
        for (src, dst), weight in sorted(weight_table.items()):
            outgoing[src].append((dst, weight))
        out_total = [sum(w for _, w in targets) for targets in outgoing]

        scores = self._initial_vector(ids, initial)
        base = 1.0 - self.damping

        iterations = 0
        converged = False
        while iterations < self.max_iterations:
            iterations += 1
            incoming = [0.0] * n
            dangling = 0.0
            for i in range(n):
                total = out_total[i]
                if total <= 0.0:
                    dangling += scores[i]
                    continue
                share = scores[i] / total
                for j, weight in outgoing[i]:
                    incoming[j] += share * weight
            spread = dangling / n
            new_scores = [base + self.damping * (incoming[j] + spread) for j in range(n)]
            delta = max(abs(new_scores[j] - scores[j]) for j in range(n))
            scores = new_scores
            if delta < self.tolerance:
                converged = True
                break

        if not converged:
            logger.warning(
                "Leverage scoring did not converge after %d iterations", self.max_iterations
            )
        else:
            logger.debug("Leverage scoring converged after %d iterations", iterations)

        return LeverageResult(
            scores=dict(zip(ids, _rescale(scores, n))),
            iterations=iterations,
            converged=converged,
        )

    @staticmethod
    def _initial_vector(ids: list[str], initial: dict[str, float] | None) -> list[float]:
        if not initial:
            return [1.0] * len(ids)
        vector = [max(0.0, float(initial.get(node_id, 1.0))) for node_id in ids]
        return _rescale(vector, len(ids))


def _rescale(scores: list[float], n: int) -> list[float]:
    """Rescale so the scores sum to ``n``."""
    total = sum(scores)
    if total <= 0.0:
        return [1.0] * len(scores)
    factor = n / total
    return [s * factor for s in scores]


__all__ = ["LeverageScorer", "LeverageResult"]
