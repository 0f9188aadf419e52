"""Algorithm parameters for a graph build."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any


@dataclass(frozen=True)
class GraphSettings:
    """Tunable parameters shared by the scorer, cluster builder and gap analyzer.

    Attributes:
        damping: Fraction of score that follows edges each iteration.
        tolerance: Convergence threshold on the max per-node score change.
        max_iterations: Hard cap on scorer iterations.
        weak_cluster_threshold: Cohesion below which a cluster is weak.
        unused_after_days: Skills not run for this many days are unused.
        min_skills_per_phase: Phases with fewer skills are reported as gaps.
    """

    damping: float = 0.85
    tolerance: float = 1e-6
    max_iterations: int = 100
    weak_cluster_threshold: float = 0.3
    unused_after_days: int = 30
    min_skills_per_phase: int = 1

    def __post_init__(self) -> None:
        if not 0.0 <= self.damping <= 1.0:
            raise ValueError(f"damping must be within [0, 1], got {self.damping}")
        if self.tolerance <= 0:
            raise ValueError(f"tolerance must be positive, got {self.tolerance}")
        if self.max_iterations < 1:
            raise ValueError(f"max_iterations must be >= 1, got {self.max_iterations}")
        if self.unused_after_days < 0:
            raise ValueError(f"unused_after_days must be >= 0, got {self.unused_after_days}")
        if self.min_skills_per_phase < 0:
            raise ValueError(
                f"min_skills_per_phase must be >= 0, got {self.min_skills_per_phase}"
            )

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> GraphSettings:
        """Build settings from the ``[leverage]`` and ``[gaps]`` config sections."""
        leverage = config.get("leverage", {}) or {}
        gaps = config.get("gaps", {}) or {}
        defaults = cls()
        return cls(
            damping=float(leverage.get("damping", defaults.damping)),
            tolerance=float(leverage.get("tolerance", defaults.tolerance)),
            max_iterations=int(leverage.get("max_iterations", defaults.max_iterations)),
            weak_cluster_threshold=float(
                gaps.get("weak_cluster_threshold", defaults.weak_cluster_threshold)
            ),
            unused_after_days=int(gaps.get("unused_after_days", defaults.unused_after_days)),
            min_skills_per_phase=int(
                gaps.get("min_skills_per_phase", defaults.min_skills_per_phase)
            ),
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GraphSettings:
        """Build settings from a flat dict (as stored in snapshots)."""
        known = set(asdict(cls()))
        return cls(**{k: v for k, v in data.items() if k in known})

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


__all__ = ["GraphSettings"]
