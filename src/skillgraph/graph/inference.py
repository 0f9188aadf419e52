"""Edge inference - derives the edge set for a build pass.

Edges come from three inputs:
- the registry: ``depends_on`` (declared) and ``tag_cluster`` (shared tags)
- the run archive: ``sequence`` (consecutive order) and ``co_executed``
- the improvement log: ``improved_by``

Evidence is accumulated per ``(source, target, kind)`` triple before any
edge is emitted, so the output order depends only on input order.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING

from skillgraph.graph.mutations import MissingDependency
from skillgraph.graph.relations import Edge, EdgeKind
from skillgraph.graph.SkillNode import SkillNode

if TYPE_CHECKING:
    from skillgraph.sources.models import ImprovementEvent, RunRecord, SkillDefinition

logger = logging.getLogger(__name__)

# Evidence lists are explanatory only; weight carries the full count.
MAX_EVIDENCE = 10


def node_from_definition(definition: SkillDefinition) -> SkillNode:
    """Create a fresh, unscored node from a registry definition."""
    return SkillNode(
        id=definition.id,
        name=definition.name or definition.id,
        description=definition.description,
        phase=definition.phase,
        tags=list(definition.tags),
        version=definition.version,
        depends_on=list(definition.depends_on),
        category=definition.category,
    )


@dataclass
class InferenceResult:
    """Output of one inference pass.

    Attributes:
        nodes: Nodes created from the registry, in registry order.
        edges: Deduplicated edges, in first-seen order.
        missing_dependencies: Declared dependencies on unknown skills.
        unknown_skill_refs: Run/improvement references to unknown skills.
    """

    nodes: list[SkillNode] = field(default_factory=list)
    edges: list[Edge] = field(default_factory=list)
    missing_dependencies: list[MissingDependency] = field(default_factory=list)
    unknown_skill_refs: int = 0

    def edges_of_kind(self, kind: EdgeKind) -> list[Edge]:
        return [e for e in self.edges if e.kind == kind]


class _EdgeAccumulator:
    """Collects weighted evidence per edge key, preserving first-seen order."""

    def __init__(self, focus: str | None = None) -> None:
        self.focus = focus
        self._edges: dict[tuple[str, str, EdgeKind], Edge] = {}

    def add(
        self,
        source_id: str,
        target_id: str,
        kind: EdgeKind,
        weight: float = 1.0,
        evidence: Iterable[str] = (),
    ) -> None:
        if self.focus is not None and self.focus not in (source_id, target_id):
            return
        key = (source_id, target_id, kind)
        edge = self._edges.get(key)
        if edge is None:
            self._edges[key] = Edge(
                source_id=source_id,
                target_id=target_id,
                kind=kind,
                weight=weight,
                evidence=list(evidence)[:MAX_EVIDENCE],
            )
            return
        edge.weight += weight
        for item in evidence:
            if len(edge.evidence) >= MAX_EVIDENCE:
                break
            if item not in edge.evidence:
                edge.evidence.append(item)

    def edges(self) -> list[Edge]:
        return list(self._edges.values())


class EdgeInferenceEngine:
    """Produces nodes, edges and missing-dependency findings from the sources."""

    def infer(
        self,
        skills: Iterable[SkillDefinition],
        runs: Iterable[RunRecord] = (),
        improvements: Iterable[ImprovementEvent] = (),
    ) -> InferenceResult:
        """Run a full inference pass.

        Args:
            skills: Registry definitions. Duplicate ids keep the first entry.
            runs: Run archive records.
            improvements: Improvement log events.

        Returns:
            InferenceResult with usage statistics applied to the nodes.
        """
        nodes = self._create_nodes(skills)
        return self._infer(nodes, list(runs), list(improvements), focus=None)

    def infer_for_node(
        self,
        node_id: str,
        nodes: Iterable[SkillNode],
        runs: Iterable[RunRecord] = (),
        improvements: Iterable[ImprovementEvent] = (),
    ) -> InferenceResult:
        """Derive only the edges touching ``node_id``.

        ``nodes`` is the full current node set (with ``node_id`` already
        carrying its refreshed metadata). Only the focus node's usage
        statistics are recomputed; the returned ``nodes`` holds just it.
        """
        node_list = list(nodes)
        result = self._infer(node_list, list(runs), list(improvements), focus=node_id)
        result.nodes = [n for n in node_list if n.id == node_id]
        return result

    # ─────────────────────────────────────────────────────────────────────────

    @staticmethod
    def _create_nodes(skills: Iterable[SkillDefinition]) -> list[SkillNode]:
        nodes: dict[str, SkillNode] = {}
        for definition in skills:
            if definition.id in nodes:
                logger.warning("Duplicate skill id '%s' in registry; keeping first", definition.id)
                continue
            nodes[definition.id] = node_from_definition(definition)
        return list(nodes.values())

    def _infer(
        self,
        nodes: list[SkillNode],
        runs: list[RunRecord],
        improvements: list[ImprovementEvent],
        focus: str | None,
    ) -> InferenceResult:
        known = {n.id: n for n in nodes}
        acc = _EdgeAccumulator(focus)
        result = InferenceResult(nodes=nodes)

        # 1. Declared dependencies
        for node in nodes:
            for dep in node.depends_on:
                if dep == node.id:
                    continue
                if dep not in known:
                    if focus is None or node.id == focus:
                        result.missing_dependencies.append(MissingDependency(node.id, dep))
                    continue
                acc.add(node.id, dep, EdgeKind.DEPENDS_ON)

        # 2. Shared tags (one edge per unordered pair, smaller id as source)
        ordered = sorted(nodes, key=lambda n: n.id)
        for i, a in enumerate(ordered):
            if not a.tags:
                continue
            for b in ordered[i + 1 :]:
                shared = a.shared_tags(b)
                if shared:
                    acc.add(
                        a.id, b.id, EdgeKind.TAG_CLUSTER, weight=float(len(shared)), evidence=shared
                    )

        # 3. Runs: sequence and co-execution, plus usage statistics
        usage: dict[str, int] = {}
        last_used: dict[str, datetime] = {}
        for run in runs:
            present: list[str] = []
            for skill_id in run.skill_ids:
                if skill_id not in known:
                    result.unknown_skill_refs += 1
                elif skill_id not in present:
                    present.append(skill_id)

            for a, b in zip(run.skill_ids, run.skill_ids[1:]):
                if a != b and a in known and b in known:
                    acc.add(a, b, EdgeKind.SEQUENCE, evidence=(run.run_id,))

            for i, a in enumerate(present):
                for b in present[i + 1 :]:
                    acc.add(a, b, EdgeKind.CO_EXECUTED, evidence=(run.run_id,))
                    acc.add(b, a, EdgeKind.CO_EXECUTED, evidence=(run.run_id,))

            for skill_id in present:
                usage[skill_id] = usage.get(skill_id, 0) + 1
                if run.timestamp is not None:
                    previous = last_used.get(skill_id)
                    if previous is None or run.timestamp > previous:
                        last_used[skill_id] = run.timestamp

        # 4. Improvements
        for event in improvements:
            improved, trigger = event.improved_skill_id, event.triggering_skill_id
            if improved not in known or trigger not in known:
                result.unknown_skill_refs += 1
                continue
            if improved == trigger:
                continue
            stamp = (event.timestamp.isoformat(),) if event.timestamp else ()
            acc.add(improved, trigger, EdgeKind.IMPROVED_BY, evidence=stamp)

        for node in nodes:
            if focus is not None and node.id != focus:
                continue
            node.usage_count = usage.get(node.id, 0)
            node.last_used_at = last_used.get(node.id)

        result.edges = acc.edges()
        if result.unknown_skill_refs:
            logger.debug("%d run/improvement references to unknown skills", result.unknown_skill_refs)
        return result


__all__ = ["EdgeInferenceEngine", "InferenceResult", "node_from_definition", "MAX_EVIDENCE"]
