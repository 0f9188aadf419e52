"""Test helpers for black-box graph testing.

This module provides factories for source records and a one-call graph
builder, so tests can describe a scenario as skills + runs + improvements
and then assert on the built store.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from skillgraph.graph.builder import GraphBuilder
from skillgraph.graph.settings import GraphSettings
from skillgraph.graph.SkillNode import Phase
from skillgraph.graph.store import GraphStore
from skillgraph.sources.models import ImprovementEvent, RunRecord, SkillDefinition

# Fixed reference time so staleness checks are deterministic
NOW = datetime(2026, 10, 15, 12, 0, tzinfo=timezone.utc)


# === Source Factories ===


def make_skill(
    skill_id: str,
    phase: str | None = None,
    tags: list[str] | None = None,
    depends_on: list[str] | None = None,
    description: str = "",
    version: str = "1.0.0",
    category: str | None = None,
) -> SkillDefinition:
    """Factory for registry definitions.

    Args:
        skill_id: Skill id (directory name in a real registry).
        phase: Phase name, case-insensitive (e.g. "implement").
        tags: Tags for clustering.
        depends_on: Declared dependency ids.
    """
    return SkillDefinition(
        id=skill_id,
        name=skill_id,
        description=description,
        phase=Phase.parse(phase),
        tags=tuple(tags or ()),
        version=version,
        depends_on=tuple(depends_on or ()),
        category=category,
    )


def make_run(run_id: str, *skill_ids: str, days_ago: float | None = 1) -> RunRecord:
    """Factory for a run of ``skill_ids`` in order, ``days_ago`` before NOW."""
    timestamp = NOW - timedelta(days=days_ago) if days_ago is not None else None
    return RunRecord(run_id=run_id, skill_ids=tuple(skill_ids), timestamp=timestamp)


def make_improvement(improved: str, trigger: str, days_ago: float = 1) -> ImprovementEvent:
    return ImprovementEvent(
        improved_skill_id=improved,
        triggering_skill_id=trigger,
        timestamp=NOW - timedelta(days=days_ago),
    )


# === Graph Factory ===


def build_store(
    skills: list[SkillDefinition],
    runs: list[RunRecord] | None = None,
    improvements: list[ImprovementEvent] | None = None,
    settings: GraphSettings | None = None,
) -> GraphStore:
    """Build a complete store at the fixed reference time."""
    builder = GraphBuilder(settings)
    return builder.build(skills, runs or [], improvements or [], now=NOW)


def chain_scenario() -> tuple[list[SkillDefinition], list[RunRecord]]:
    """A -> B -> C declared dependencies, plus two A, B, C runs."""
    skills = [
        make_skill("a", phase="init", depends_on=["b"]),
        make_skill("b", phase="implement", depends_on=["c"]),
        make_skill("c", phase="test"),
    ]
    runs = [make_run("r1", "a", "b", "c"), make_run("r2", "a", "b", "c")]
    return skills, runs


def edge_weights(store: GraphStore) -> dict[tuple[str, str, str], float]:
    """Map ``(source, target, kind)`` to weight for easy comparison."""
    return {(e.source_id, e.target_id, e.kind.value): e.weight for e in store.iter_edges()}
