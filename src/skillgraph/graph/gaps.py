"""Gap analysis - structural-quality findings over a built graph.

Findings are data, never exceptions:
- missing dependencies (declared targets that don't exist)
- isolated skills (no structural edges at all)
- unused skills (never run, or not run recently)
- weak clusters (low tag cohesion)
- phase gaps (phases with too few skills)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

from skillgraph.graph.clusters import Cluster
from skillgraph.graph.mutations import MissingDependency
from skillgraph.graph.SkillNode import Phase

if TYPE_CHECKING:
    from skillgraph.graph.SkillNode import SkillNode
    from skillgraph.graph.store import GraphStore


@dataclass(frozen=True)
class PhaseGap:
    """A phase with fewer skills than the configured minimum.

    Attributes:
        phase: The under-served phase.
        count: Number of skills affiliated with it.
        minimum: The configured soft minimum.
    """

    phase: Phase
    count: int
    minimum: int

    @property
    def empty(self) -> bool:
        """True when no skill at all covers this phase."""
        return self.count == 0


@dataclass
class GapReport:
    """All findings for one snapshot.

    Attributes:
        missing_dependencies: Unresolved ``depends_on`` declarations.
        isolated_skills: Skill ids with no non-tag edges.
        unused_skills: Skill ids never run or stale.
        weak_clusters: Clusters below the cohesion threshold.
        phase_gaps: Phases below the minimum skill count.
        unused_after_days: Age threshold used for ``unused_skills``.
        analyzed_at: Reference time for the staleness rule.
    """

    missing_dependencies: list[MissingDependency] = field(default_factory=list)
    isolated_skills: list[str] = field(default_factory=list)
    unused_skills: list[str] = field(default_factory=list)
    weak_clusters: list[Cluster] = field(default_factory=list)
    phase_gaps: list[PhaseGap] = field(default_factory=list)
    unused_after_days: int = 30
    analyzed_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def empty_phases(self) -> list[Phase]:
        """Phases with zero skills."""
        return [g.phase for g in self.phase_gaps if g.empty]

    @property
    def underserved_phases(self) -> list[Phase]:
        """Phases with some skills, but fewer than the minimum."""
        return [g.phase for g in self.phase_gaps if not g.empty]

    def has_findings(self) -> bool:
        return bool(
            self.missing_dependencies
            or self.isolated_skills
            or self.unused_skills
            or self.weak_clusters
            or self.phase_gaps
        )


def is_unused(node: SkillNode, days: int, now: datetime) -> bool:
    """Check the usage rule for one skill.

    A skill is unused if it never ran, or if its last run is older than
    ``days`` before ``now``. A skill with runs but no recorded timestamp
    is treated as used.
    """
    if node.usage_count == 0:
        return True
    if node.last_used_at is None:
        return False
    return node.last_used_at < now - timedelta(days=days)


class GapAnalyzer:
    """Derives a GapReport from a store whose scores and clusters are final."""

    def __init__(
        self,
        weak_threshold: float = 0.3,
        unused_after_days: int = 30,
        min_skills_per_phase: int = 1,
    ) -> None:
        self.weak_threshold = weak_threshold
        self.unused_after_days = unused_after_days
        self.min_skills_per_phase = min_skills_per_phase

    def analyze(self, store: GraphStore, now: datetime | None = None) -> GapReport:
        """Compute all findings for ``store``.

        Args:
            store: Graph with degrees and clusters already computed.
            now: Reference time for staleness (defaults to current UTC time).
        """
        now = now or datetime.now(timezone.utc)
        nodes = list(store.all_nodes())

        missing = store.missing_dependencies()
        isolated = sorted(n.id for n in nodes if n.degree == 0)
        unused = sorted(n.id for n in nodes if is_unused(n, self.unused_after_days, now))
        weak = [c for c in store.clusters() if c.cohesion < self.weak_threshold]

        phase_counts: dict[Phase, int] = {phase: 0 for phase in Phase}
        for node in nodes:
            if node.phase is not None:
                phase_counts[node.phase] += 1
        phase_gaps = [
            PhaseGap(phase=phase, count=count, minimum=self.min_skills_per_phase)
            for phase, count in phase_counts.items()
            if count < self.min_skills_per_phase
        ]

        return GapReport(
            missing_dependencies=missing,
            isolated_skills=isolated,
            unused_skills=unused,
            weak_clusters=weak,
            phase_gaps=phase_gaps,
            unused_after_days=self.unused_after_days,
            analyzed_at=now,
        )


__all__ = ["GapAnalyzer", "GapReport", "PhaseGap", "is_unused"]
