"""Source record types and collaborator protocols."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Protocol, runtime_checkable

from skillgraph.graph.SkillNode import Phase


def parse_timestamp(value: object) -> datetime | None:
    """Parse an ISO-8601 string (or datetime) into an aware UTC datetime.

    Naive values are assumed to be UTC. A trailing ``Z`` is accepted.

    Returns:
        The parsed datetime, or None for empty input.

    Raises:
        ValueError: If the value is not a recognizable timestamp.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


@dataclass(frozen=True)
class SkillDefinition:
    """One skill as declared in the registry."""

    id: str
    name: str = ""
    description: str = ""
    phase: Phase | None = None
    tags: tuple[str, ...] = ()
    version: str = "1.0.0"
    depends_on: tuple[str, ...] = ()
    category: str | None = None


@dataclass(frozen=True)
class RunRecord:
    """One historical run: the skills invoked, in order."""

    run_id: str
    skill_ids: tuple[str, ...] = ()
    timestamp: datetime | None = None


@dataclass(frozen=True)
class ImprovementEvent:
    """A revision of ``improved_skill_id`` triggered by ``triggering_skill_id``."""

    improved_skill_id: str
    triggering_skill_id: str
    timestamp: datetime | None = None


@runtime_checkable
class SkillRegistry(Protocol):
    """Supplies the authoritative skill definitions."""

    def list_skills(self) -> list[SkillDefinition]: ...

    def get_skill(self, skill_id: str) -> SkillDefinition | None: ...


@runtime_checkable
class RunArchive(Protocol):
    """Supplies historical run records."""

    def iter_runs(self) -> Iterator[RunRecord]: ...


@runtime_checkable
class ImprovementLog(Protocol):
    """Supplies recorded improvement events."""

    def iter_events(self) -> Iterator[ImprovementEvent]: ...


class StaticSkillRegistry:
    """In-memory registry over a mutable set of definitions."""

    def __init__(self, skills: Iterable[SkillDefinition] = ()) -> None:
        self._skills: dict[str, SkillDefinition] = {}
        for skill in skills:
            self.put(skill)

    def put(self, skill: SkillDefinition) -> None:
        self._skills[skill.id] = skill

    def delete(self, skill_id: str) -> None:
        self._skills.pop(skill_id, None)

    def list_skills(self) -> list[SkillDefinition]:
        return list(self._skills.values())

    def get_skill(self, skill_id: str) -> SkillDefinition | None:
        return self._skills.get(skill_id)


@dataclass
class StaticRunArchive:
    """In-memory run archive."""

    runs: list[RunRecord] = field(default_factory=list)

    def iter_runs(self) -> Iterator[RunRecord]:
        yield from self.runs


@dataclass
class StaticImprovementLog:
    """In-memory improvement log."""

    events: list[ImprovementEvent] = field(default_factory=list)

    def iter_events(self) -> Iterator[ImprovementEvent]:
        yield from self.events


__all__ = [
    "parse_timestamp",
    "SkillDefinition",
    "RunRecord",
    "ImprovementEvent",
    "SkillRegistry",
    "RunArchive",
    "ImprovementLog",
    "StaticSkillRegistry",
    "StaticRunArchive",
    "StaticImprovementLog",
]
