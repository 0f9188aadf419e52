"""Query engine - read-only traversal and filtering over a built snapshot.

The engine never mutates the store it wraps. Unknown ids raise
NodeNotFoundError, except in ``find_path`` where "no path" is an
ordinary answer.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from skillgraph.errors import NodeNotFoundError
from skillgraph.graph.gaps import GapAnalyzer, GapReport, is_unused
from skillgraph.graph.relations import Edge, EdgeKind
from skillgraph.graph.SkillNode import Phase, SkillNode

if TYPE_CHECKING:
    from skillgraph.graph.clusters import Cluster
    from skillgraph.graph.store import GraphStore


class Direction(Enum):
    """Which incident edges a neighbor query follows."""

    OUTGOING = "out"
    INCOMING = "in"
    BOTH = "both"

    @classmethod
    def parse(cls, value: str | Direction) -> Direction:
        if isinstance(value, Direction):
            return value
        aliases = {"out": cls.OUTGOING, "outgoing": cls.OUTGOING, "in": cls.INCOMING,
                   "incoming": cls.INCOMING, "both": cls.BOTH}
        try:
            return aliases[str(value).strip().lower()]
        except KeyError:
            raise ValueError(f"Unknown direction '{value}'. Use out, in, or both") from None


@dataclass
class NodeView:
    """A node together with its incident edges."""

    node: SkillNode
    outgoing: list[Edge] = field(default_factory=list)
    incoming: list[Edge] = field(default_factory=list)


@dataclass
class GraphPath:
    """A shortest path between two skills.

    Attributes:
        nodes: Skill ids from start to end (inclusive).
        edges: Edges traversed, one fewer than nodes.
    """

    nodes: list[str] = field(default_factory=list)
    edges: list[Edge] = field(default_factory=list)

    @property
    def length(self) -> int:
        return len(self.edges)


class QueryEngine:
    """Read-only queries over one GraphStore snapshot."""

    def __init__(self, store: GraphStore) -> None:
        self.store = store

    def _require(self, node_id: str) -> SkillNode:
        node = self.store.find_by_id(node_id)
        if node is None:
            raise NodeNotFoundError(node_id)
        return node

    def get_node(self, node_id: str) -> NodeView:
        """Return the node plus its incident edges.

        Raises:
            NodeNotFoundError: If the id is not in the snapshot.
        """
        node = self._require(node_id)
        return NodeView(
            node=node,
            outgoing=self.store.outgoing_edges(node_id),
            incoming=self.store.incoming_edges(node_id),
        )

    def get_neighbors(
        self,
        node_id: str,
        edge_kind: EdgeKind | None = None,
        direction: Direction = Direction.BOTH,
    ) -> list[SkillNode]:
        """Nodes one hop away, in edge insertion order, without duplicates.

        Args:
            node_id: The starting skill.
            edge_kind: Only follow edges of this kind (None = all kinds).
            direction: Follow outgoing edges, incoming edges, or both.

        Raises:
            NodeNotFoundError: If the id is not in the snapshot.
        """
        self._require(node_id)
        candidates: list[str] = []
        if direction in (Direction.OUTGOING, Direction.BOTH):
            candidates.extend(
                e.target_id
                for e in self.store.outgoing_edges(node_id)
                if edge_kind is None or e.kind == edge_kind
            )
        if direction in (Direction.INCOMING, Direction.BOTH):
            candidates.extend(
                e.source_id
                for e in self.store.incoming_edges(node_id)
                if edge_kind is None or e.kind == edge_kind
            )

        seen: set[str] = set()
        neighbors: list[SkillNode] = []
        for candidate in candidates:
            if candidate == node_id or candidate in seen:
                continue
            seen.add(candidate)
            node = self.store.find_by_id(candidate)
            if node is not None:
                neighbors.append(node)
        return neighbors

    def find_path(self, from_id: str, to_id: str) -> GraphPath | None:
        """Shortest path by edge count over directed structural edges.

        Breadth-first search following outgoing edges in insertion order;
        ``tag_cluster`` edges are not traversed. Ties resolve to the path
        whose edges were inserted first.

        Returns:
            The path, a zero-length path when ``from_id == to_id``, or None
            if either id is absent or no path exists.
        """
        if not self.store.has_node(from_id) or not self.store.has_node(to_id):
            return None
        if from_id == to_id:
            return GraphPath(nodes=[from_id], edges=[])

        parent: dict[str, Edge] = {}
        visited = {from_id}
        queue = deque([from_id])
        while queue:
            current = queue.popleft()
            for edge in self.store.outgoing_edges(current):
                if not edge.kind.propagates_leverage() or edge.target_id in visited:
                    continue
                visited.add(edge.target_id)
                parent[edge.target_id] = edge
                if edge.target_id == to_id:
                    return self._unwind(parent, from_id, to_id)
                queue.append(edge.target_id)
        return None

    @staticmethod
    def _unwind(parent: dict[str, Edge], from_id: str, to_id: str) -> GraphPath:
        edges: list[Edge] = []
        current = to_id
        while current != from_id:
            edge = parent[current]
            edges.append(edge)
            current = edge.source_id
        edges.reverse()
        return GraphPath(nodes=[from_id] + [e.target_id for e in edges], edges=edges)

    def get_nodes_by_phase(self, phase: Phase) -> list[SkillNode]:
        return list(self.store.nodes_by_phase(phase))

    def get_nodes_by_tag(self, tag: str) -> list[SkillNode]:
        return list(self.store.nodes_by_tag(tag))

    def get_edges_by_type(self, kind: EdgeKind) -> list[Edge]:
        return list(self.store.iter_edges(kind))

    def get_high_leverage_skills(self, n: int = 10) -> list[SkillNode]:
        """Top-n skills by leverage score; ties broken by id."""
        if n <= 0:
            return []
        ranked = sorted(self.store.all_nodes(), key=lambda node: (-node.leverage_score, node.id))
        return ranked[:n]

    def gap_report(self) -> GapReport:
        """The gap report cached at build time (computed on demand if absent)."""
        report = self.store.gap_report
        if report is None:
            settings = self.store.settings
            report = GapAnalyzer(
                weak_threshold=settings.weak_cluster_threshold,
                unused_after_days=settings.unused_after_days,
                min_skills_per_phase=settings.min_skills_per_phase,
            ).analyze(self.store)
        return report

    def get_isolated_skills(self) -> list[SkillNode]:
        return self._nodes_for(self.gap_report().isolated_skills)

    def get_unused_skills(self, days: int | None = None) -> list[SkillNode]:
        """Skills never run, or not run within ``days``.

        The build-time result is reused when ``days`` matches the
        threshold it was computed with; otherwise the usage rule is
        re-evaluated against the gap report's ``analyzed_at``.
        """
        report = self.gap_report()
        if days is None or days == report.unused_after_days:
            return self._nodes_for(report.unused_skills)
        if days < 0:
            raise ValueError(f"days must be non-negative, got {days}")
        return sorted(
            (n for n in self.store.all_nodes() if is_unused(n, days, report.analyzed_at)),
            key=lambda n: n.id,
        )

    def get_clusters(self) -> list[Cluster]:
        return self.store.clusters()

    def get_cluster_by_tag(self, tag: str) -> Cluster | None:
        return self.store.cluster_by_tag(tag)

    def get_stats(self) -> dict[str, Any]:
        return self.store.stats()

    def _nodes_for(self, ids: list[str]) -> list[SkillNode]:
        nodes = (self.store.find_by_id(node_id) for node_id in ids)
        return [n for n in nodes if n is not None]


__all__ = ["QueryEngine", "GraphPath", "NodeView", "Direction"]
