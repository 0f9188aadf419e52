"""Mutation and finding types for GraphStore operations.

This module provides dataclasses for recording graph mutations
(build, refresh, remove) and unresolved dependency references.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4


@dataclass(frozen=True)
class MissingDependency:
    """A declared dependency on a skill that does not exist.

    Captured during edge inference when a ``depends_on`` target cannot be
    resolved. The edge itself is dropped; this finding is kept instead.

    Attributes:
        source_id: ID of the skill declaring the dependency.
        target_id: ID that was declared but doesn't exist.
    """

    source_id: str
    target_id: str

    def __str__(self) -> str:
        """Human-readable representation."""
        return f"{self.source_id} --[depends_on]--> {self.target_id} (missing)"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class MutationEntry:
    """Single mutation operation record.

    Attributes:
        operation: Operation type ("build", "refresh_node", "remove_node", "load").
        target_id: Primary target of the mutation ("*" for whole-graph operations).
        before_state: Summary of the relevant state before the mutation.
        after_state: Summary of the relevant state after the mutation.
        id: Unique mutation ID (UUID4 hex).
        timestamp: When the mutation occurred (UTC).
    """

    operation: str
    target_id: str
    before_state: dict[str, Any]
    after_state: dict[str, Any]
    id: str = field(default_factory=lambda: uuid4().hex)
    timestamp: datetime = field(default_factory=_utcnow)

    def __str__(self) -> str:
        """Human-readable representation."""
        return f"[{self.id[:8]}] {self.operation}({self.target_id})"


class MutationLog:
    """Append-only mutation history for a graph lineage.

    Entries are stored in chronological order. A cloned store copies the
    log, so every published snapshot carries the history that produced it.
    """

    def __init__(self) -> None:
        """Initialize an empty mutation log."""
        self._entries: list[MutationEntry] = []

    def append(self, entry: MutationEntry) -> None:
        """Append a mutation entry to the log."""
        self._entries.append(entry)

    def iter_entries(self) -> Iterator[MutationEntry]:
        """Iterate over all entries in chronological order."""
        yield from self._entries

    def __len__(self) -> int:
        """Return the number of entries in the log."""
        return len(self._entries)

    def last(self) -> MutationEntry | None:
        """Return the most recent entry, or None if empty."""
        return self._entries[-1] if self._entries else None

    def find_by_id(self, mutation_id: str) -> MutationEntry | None:
        """Find an entry by its mutation ID."""
        for entry in self._entries:
            if entry.id == mutation_id:
                return entry
        return None


__all__ = ["MissingDependency", "MutationEntry", "MutationLog"]
