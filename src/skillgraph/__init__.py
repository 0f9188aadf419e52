"""
skillgraph - Knowledge graph over a library of reusable skills

Skills are the only primitive. Relationships between them are inferred
from declared dependencies, shared tags, run archives and the improvement
log; the graph then ranks skills by leverage and reports structural gaps.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("skillgraph")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"  # Not installed
__license__ = "MIT"

from skillgraph.errors import (
    GraphNotBuiltError,
    NodeNotFoundError,
    SkillGraphError,
    SnapshotSchemaError,
    SourceReadError,
)
from skillgraph.graph import EdgeKind, Phase, SkillNode
from skillgraph.graph.store import GraphStore
from skillgraph.service import KnowledgeGraphService

__all__ = [
    "__version__",
    "EdgeKind",
    "GraphNotBuiltError",
    "GraphStore",
    "KnowledgeGraphService",
    "NodeNotFoundError",
    "Phase",
    "SkillGraphError",
    "SkillNode",
    "SnapshotSchemaError",
    "SourceReadError",
]
