"""Relations - Edge types and relationship semantics.

This module defines the typed edges between skills:
- EdgeKind: Closed enum of relationship types with semantic properties
- Edge: A weighted, deduplicated edge between two skill ids
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class EdgeKind(Enum):
    """Types of edges in the skill graph.

    Each edge type has semantic meaning for scoring:
    - DEPENDS_ON: Declared dependency from skill frontmatter (propagates)
    - TAG_CLUSTER: Skills sharing tags (signal only, NO propagation)
    - SEQUENCE: Consecutive execution order within a run (propagates)
    - CO_EXECUTED: Skills run together in the same run (propagates)
    - IMPROVED_BY: Improvement of one skill triggered by another (propagates)
    """

    DEPENDS_ON = "depends_on"
    TAG_CLUSTER = "tag_cluster"
    SEQUENCE = "sequence"
    CO_EXECUTED = "co_executed"
    IMPROVED_BY = "improved_by"

    def propagates_leverage(self) -> bool:
        """Check if this edge type carries leverage score.

        Tag co-membership is vocabulary overlap, not endorsement, so
        tag_cluster edges are excluded from propagation, traversal and
        isolation degree counting.

        Returns:
            True if edges of this type take part in leverage scoring.
        """
        return self is not EdgeKind.TAG_CLUSTER

    @classmethod
    def parse(cls, value: str | EdgeKind) -> EdgeKind:
        """Parse an edge kind from its wire name.

        Raises:
            ValueError: If the value is not one of the five known kinds.
        """
        if isinstance(value, EdgeKind):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            valid = ", ".join(k.value for k in cls)
            raise ValueError(f"Unknown edge type '{value}'. Must be one of: {valid}") from None


PROPAGATING_KINDS: frozenset[EdgeKind] = frozenset(k for k in EdgeKind if k.propagates_leverage())


@dataclass
class Edge:
    """A typed, weighted edge between two skills.

    Edges are identified by ``(source_id, target_id, kind)``. Repeated
    evidence for the same triple increases ``weight`` rather than adding
    a second edge.

    Attributes:
        source_id: The originating skill.
        target_id: The receiving skill.
        kind: The type of relationship.
        weight: Positive strength of the relationship.
        evidence: Short strings explaining the edge (run ids, tags, ...).
    """

    source_id: str
    target_id: str
    kind: EdgeKind
    weight: float = 1.0
    evidence: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.weight <= 0:
            raise ValueError(f"Edge weight must be positive, got {self.weight}")

    @property
    def key(self) -> tuple[str, str, EdgeKind]:
        """Deduplication key."""
        return (self.source_id, self.target_id, self.kind)

    def touches(self, node_id: str) -> bool:
        """Check if either endpoint is ``node_id``."""
        return self.source_id == node_id or self.target_id == node_id

    def reinforce(self, amount: float = 1.0, evidence: str | None = None) -> None:
        """Add weight (and optionally evidence) to an existing edge."""
        self.weight += amount
        if evidence is not None and evidence not in self.evidence:
            self.evidence.append(evidence)

    def __eq__(self, other: object) -> bool:
        """Check equality based on source, target, kind and weight."""
        if not isinstance(other, Edge):
            return NotImplemented
        return self.key == other.key and self.weight == other.weight

    def __hash__(self) -> int:
        """Hash based on source, target, and kind."""
        return hash((self.source_id, self.target_id, self.kind.value))

    def __str__(self) -> str:
        return f"{self.source_id} --[{self.kind.value} x{self.weight:g}]--> {self.target_id}"


__all__ = ["EdgeKind", "Edge", "PROPAGATING_KINDS"]
