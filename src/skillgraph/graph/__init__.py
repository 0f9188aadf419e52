"""Graph module - Core graph data structures.

Exports:
- Phase: Enum of workflow phases
- SkillNode: A skill with registry metadata and derived metrics
- Edge: Typed, weighted edge between skills
- EdgeKind: Enum of edge types
- MissingDependency: Declared dependency on a non-existent skill
- MutationEntry / MutationLog: Audit trail of build/refresh/remove
- Cluster: Skills sharing a tag
- GapReport / PhaseGap: Structural findings
- GraphSettings: Algorithm parameters

Note: GraphStore is in skillgraph.graph.store (use graph.factory.build_graph() to construct)
"""

from skillgraph.graph.clusters import Cluster
from skillgraph.graph.gaps import GapReport, PhaseGap
from skillgraph.graph.mutations import MissingDependency, MutationEntry, MutationLog
from skillgraph.graph.relations import Edge, EdgeKind
from skillgraph.graph.settings import GraphSettings
from skillgraph.graph.SkillNode import Phase, SkillNode

__all__ = [
    "Phase",
    "SkillNode",
    "Edge",
    "EdgeKind",
    "MissingDependency",
    "MutationEntry",
    "MutationLog",
    "Cluster",
    "GapReport",
    "PhaseGap",
    "GraphSettings",
]
