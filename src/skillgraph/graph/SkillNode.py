"""SkillNode - Node representation for the skill knowledge graph.

This module provides the core node data structures:
- Phase: The fixed phase enumeration used by the skill registry
- SkillNode: A skill with registry metadata and derived metrics
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class Phase(Enum):
    """Workflow phases a skill can be affiliated with."""

    INIT = "INIT"
    SCAFFOLD = "SCAFFOLD"
    IMPLEMENT = "IMPLEMENT"
    TEST = "TEST"
    VERIFY = "VERIFY"
    VALIDATE = "VALIDATE"
    DOCUMENT = "DOCUMENT"
    REVIEW = "REVIEW"
    SHIP = "SHIP"
    COMPLETE = "COMPLETE"

    @classmethod
    def parse(cls, value: str | Phase | None) -> Phase | None:
        """Parse a phase name case-insensitively.

        Returns:
            The matching Phase, or None for empty input.

        Raises:
            ValueError: If the value is not a known phase.
        """
        if value is None or isinstance(value, Phase):
            return value
        text = str(value).strip().upper()
        if not text:
            return None
        try:
            return cls(text)
        except ValueError:
            valid = ", ".join(p.value for p in cls)
            raise ValueError(f"Unknown phase '{value}'. Must be one of: {valid}") from None


@dataclass
class SkillNode:
    """A skill in the knowledge graph.

    Registry metadata is copied in at build time. ``usage_count`` and
    ``last_used_at`` come from the run archive. ``leverage_score``,
    ``in_degree`` and ``out_degree`` are derived by the graph store and
    scorer and must not be edited by hand.

    Attributes:
        id: Unique skill identifier.
        name: Display name.
        description: One-line summary of the skill.
        phase: Primary phase affinity, if any.
        tags: Tags used for clustering (kept sorted).
        version: Skill version string.
        depends_on: Declared dependency ids, in declaration order.
        category: Optional registry category.
    """

    id: str
    name: str = ""
    description: str = ""
    phase: Phase | None = None
    tags: list[str] = field(default_factory=list)
    version: str = "1.0.0"
    depends_on: list[str] = field(default_factory=list)
    category: str | None = None

    # Archive-derived usage
    usage_count: int = 0
    last_used_at: datetime | None = None

    # Derived metrics
    leverage_score: float = 1.0
    in_degree: int = 0
    out_degree: int = 0

    def __post_init__(self) -> None:
        if not self.name:
            self.name = self.id
        self.tags = sorted(set(self.tags))
        if self.usage_count < 0:
            raise ValueError(f"usage_count must be non-negative, got {self.usage_count}")

    @property
    def degree(self) -> int:
        """Total degree (in + out)."""
        return self.in_degree + self.out_degree

    def has_tag(self, tag: str) -> bool:
        """Check if this skill carries a tag."""
        return tag in self.tags

    def shared_tags(self, other: SkillNode) -> list[str]:
        """Return the sorted tags both skills carry."""
        return sorted(set(self.tags) & set(other.tags))


__all__ = ["Phase", "SkillNode"]
