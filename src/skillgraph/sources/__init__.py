"""Input sources for graph builds.

Three collaborators feed a build:
- SkillRegistry: authoritative skill definitions
- RunArchive: historical run records (which skills ran, in what order)
- ImprovementLog: which skill's revision was triggered by which other skill

Each is a Protocol; file-backed implementations live in the submodules
and in-memory ``Static*`` implementations are provided for embedding.
"""

from skillgraph.sources.archive import JsonRunArchive
from skillgraph.sources.learning import JsonlImprovementLog
from skillgraph.sources.models import (
    ImprovementEvent,
    ImprovementLog,
    RunArchive,
    RunRecord,
    SkillDefinition,
    SkillRegistry,
    StaticImprovementLog,
    StaticRunArchive,
    StaticSkillRegistry,
)
from skillgraph.sources.registry import SkillMdRegistry

__all__ = [
    "SkillDefinition",
    "RunRecord",
    "ImprovementEvent",
    "SkillRegistry",
    "RunArchive",
    "ImprovementLog",
    "StaticSkillRegistry",
    "StaticRunArchive",
    "StaticImprovementLog",
    "SkillMdRegistry",
    "JsonRunArchive",
    "JsonlImprovementLog",
]
