"""GraphBuilder - Constructs and maintains GraphStore snapshots.

Every operation here returns a new store. ``build`` starts from nothing;
``refresh_node`` and ``remove_node`` work on a clone of the given store,
so the caller's snapshot is never touched and a failure part-way through
leaves it intact.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from skillgraph.errors import NodeNotFoundError
from skillgraph.graph.clusters import ClusterBuilder
from skillgraph.graph.gaps import GapAnalyzer
from skillgraph.graph.inference import EdgeInferenceEngine, node_from_definition
from skillgraph.graph.leverage import LeverageScorer
from skillgraph.graph.mutations import MutationEntry
from skillgraph.graph.settings import GraphSettings
from skillgraph.graph.store import GraphStore

if TYPE_CHECKING:
    from skillgraph.sources.models import ImprovementEvent, RunRecord, SkillDefinition

logger = logging.getLogger(__name__)


def _summary(store: GraphStore) -> dict[str, Any]:
    return {"node_count": store.node_count(), "edge_count": store.edge_count()}


class GraphBuilder:
    """Runs the pipeline: inference, degrees, leverage, clusters, gaps.

    Usage:
        builder = GraphBuilder(settings)
        store = builder.build(registry.list_skills(), archive.iter_runs(), log.iter_events())
        store = builder.refresh_node(store, registry.get_skill("code-review"), runs, events)
    """

    def __init__(self, settings: GraphSettings | None = None) -> None:
        self.settings = settings or GraphSettings()
        self.inference = EdgeInferenceEngine()
        self.scorer = LeverageScorer(
            damping=self.settings.damping,
            tolerance=self.settings.tolerance,
            max_iterations=self.settings.max_iterations,
        )
        self.cluster_builder = ClusterBuilder(self.settings.weak_cluster_threshold)
        self.gap_analyzer = GapAnalyzer(
            weak_threshold=self.settings.weak_cluster_threshold,
            unused_after_days=self.settings.unused_after_days,
            min_skills_per_phase=self.settings.min_skills_per_phase,
        )

    def build(
        self,
        skills: Iterable[SkillDefinition],
        runs: Iterable[RunRecord] = (),
        improvements: Iterable[ImprovementEvent] = (),
        now: datetime | None = None,
    ) -> GraphStore:
        """Build a complete snapshot from the three sources.

        Args:
            skills: Registry definitions.
            runs: Run archive records.
            improvements: Improvement log events.
            now: Reference time for staleness (defaults to current UTC time).

        Returns:
            A fully scored, clustered and analyzed GraphStore.
        """
        now = now or datetime.now(timezone.utc)
        result = self.inference.infer(skills, runs, improvements)

        store = GraphStore(settings=self.settings, built_at=now)
        for node in result.nodes:
            store.add_node(node)
        store.add_edges(result.edges)
        for missing in result.missing_dependencies:
            logger.debug(
                "Skill '%s' depends on unknown skill '%s'", missing.source_id, missing.target_id
            )

        self._finalize(store, initial=None, now=now)
        store.mutation_log.append(
            MutationEntry(
                operation="build",
                target_id="*",
                before_state={},
                after_state=_summary(store),
            )
        )
        logger.info(
            "Built skill graph: %d skills, %d edges, %d clusters",
            store.node_count(),
            store.edge_count(),
            len(store.clusters()),
        )
        return store

    def refresh_node(
        self,
        store: GraphStore,
        definition: SkillDefinition,
        runs: Iterable[RunRecord] = (),
        improvements: Iterable[ImprovementEvent] = (),
        now: datetime | None = None,
    ) -> GraphStore:
        """Re-derive one skill's edge slice and rescore, on a clone of ``store``.

        A definition whose id is not yet in the graph is added. Scoring is
        warm-started from the previous scores.
        """
        now = now or datetime.now(timezone.utc)
        new_store = store.clone()
        before = _summary(new_store)
        previous_scores = new_store.leverage_scores()

        fresh = node_from_definition(definition)
        existing = new_store.find_by_id(definition.id)
        if existing is None:
            new_store.add_node(fresh)
        else:
            fresh.leverage_score = existing.leverage_score
            new_store.replace_node(fresh)

        result = self.inference.infer_for_node(
            definition.id, new_store.all_nodes(), runs, improvements
        )
        new_store.replace_node_edges(definition.id, result.edges)
        new_store.built_at = now

        self._finalize(new_store, initial=previous_scores, now=now)
        new_store.mutation_log.append(
            MutationEntry(
                operation="refresh_node",
                target_id=definition.id,
                before_state=before,
                after_state=_summary(new_store),
            )
        )
        logger.info("Refreshed skill '%s'", definition.id)
        return new_store

    def remove_node(self, store: GraphStore, node_id: str, now: datetime | None = None) -> GraphStore:
        """Delete a skill and every edge referencing it, on a clone of ``store``.

        Raises:
            NodeNotFoundError: If node_id is not in the graph.
        """
        if not store.has_node(node_id):
            raise NodeNotFoundError(node_id)

        now = now or datetime.now(timezone.utc)
        new_store = store.clone()
        before = _summary(new_store)
        previous_scores = new_store.leverage_scores()
        previous_scores.pop(node_id, None)

        _, removed = new_store.remove_node(node_id)
        new_store.built_at = now

        self._finalize(new_store, initial=previous_scores, now=now)
        new_store.mutation_log.append(
            MutationEntry(
                operation="remove_node",
                target_id=node_id,
                before_state=before,
                after_state=_summary(new_store),
            )
        )
        logger.info("Removed skill '%s' and %d edges", node_id, len(removed))
        return new_store

    def _finalize(
        self,
        store: GraphStore,
        initial: dict[str, float] | None,
        now: datetime,
    ) -> None:
        """Recompute everything derived from the node/edge set."""
        store.recompute_degrees()
        self.scorer.score(store, initial=initial)
        store.set_clusters(self.cluster_builder.build(store))
        store.set_gap_report(self.gap_analyzer.analyze(store, now=now))


__all__ = ["GraphBuilder"]
