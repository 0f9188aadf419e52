"""Exception types raised by skillgraph.

Structural findings (missing dependencies, isolated skills, weak clusters,
unused skills) are never raised; they are reported by the gap analyzer.
"""

from __future__ import annotations

from pathlib import Path


class SkillGraphError(Exception):
    """Base class for all skillgraph errors."""


class NodeNotFoundError(SkillGraphError, KeyError):
    """A skill id is not present in the graph (or the registry)."""

    def __init__(self, node_id: str) -> None:
        super().__init__(node_id)
        self.node_id = node_id

    def __str__(self) -> str:
        return f"Skill '{self.node_id}' not found"


class GraphNotBuiltError(SkillGraphError):
    """A query was issued before any snapshot was built or loaded."""

    def __init__(self) -> None:
        super().__init__("Graph not loaded. Call build() or load() first.")


class SourceReadError(SkillGraphError):
    """An input source could not be read; the build is aborted.

    Attributes:
        source: Which collaborator failed ("registry", "run_archive",
            "improvement_log").
        path: Location that was being read, when known.
    """

    def __init__(self, source: str, message: str, path: Path | None = None) -> None:
        self.source = source
        self.path = path
        location = f" ({path})" if path else ""
        super().__init__(f"{source}{location}: {message}")


class SnapshotSchemaError(SkillGraphError):
    """A snapshot document is malformed or has an unrecognized schema version."""


__all__ = [
    "SkillGraphError",
    "NodeNotFoundError",
    "GraphNotBuiltError",
    "SourceReadError",
    "SnapshotSchemaError",
]
