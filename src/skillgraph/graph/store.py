"""GraphStore - Container for one snapshot of the skill knowledge graph.

The store owns nodes, edges, clusters and their indices. It is the only
place graph state lives. Stores are filled by GraphBuilder and, once
published by the service, never mutated again: refresh and remove work on
a ``clone()`` which is then published in its place.
"""

from __future__ import annotations

import copy
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from skillgraph.graph.clusters import Cluster
from skillgraph.graph.gaps import GapReport
from skillgraph.graph.mutations import MissingDependency, MutationLog
from skillgraph.graph.relations import Edge, EdgeKind
from skillgraph.graph.settings import GraphSettings
from skillgraph.graph.SkillNode import Phase, SkillNode

SCHEMA_VERSION = "1"


@dataclass
class GraphStore:
    """Indexed node/edge/cluster collections for one graph snapshot.

    Uses an iterator API for traversal. Edges keep their insertion order,
    which is the tie-break order for path finding.

    Attributes:
        settings: Algorithm parameters the snapshot was built with.
        built_at: When the snapshot was produced (UTC).
        schema_version: Snapshot document schema version.
    """

    settings: GraphSettings = field(default_factory=GraphSettings)
    built_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    schema_version: str = SCHEMA_VERSION

    # Internal storage (prefixed) - excluded from constructor
    _index: dict[str, SkillNode] = field(default_factory=dict, init=False, repr=False)
    _edges: list[Edge] = field(default_factory=list, init=False, repr=False)
    _edge_index: dict[tuple[str, str, EdgeKind], Edge] = field(
        default_factory=dict, init=False, repr=False
    )
    _outgoing: dict[str, list[Edge]] = field(default_factory=dict, init=False, repr=False)
    _incoming: dict[str, list[Edge]] = field(default_factory=dict, init=False, repr=False)

    # Derived at build time
    _clusters: list[Cluster] = field(default_factory=list, init=False)
    _gap_report: GapReport | None = field(default=None, init=False, repr=False)

    _mutation_log: MutationLog = field(default_factory=MutationLog, init=False, repr=False)

    # ─────────────────────────────────────────────────────────────────────────
    # Nodes
    # ─────────────────────────────────────────────────────────────────────────

    def find_by_id(self, node_id: str) -> SkillNode | None:
        """Find node by ID.

        Returns:
            The matching SkillNode, or None if not found.
        """
        return self._index.get(node_id)

    def has_node(self, node_id: str) -> bool:
        return node_id in self._index

    def all_nodes(self) -> Iterator[SkillNode]:
        """Iterate all nodes in insertion order."""
        yield from self._index.values()

    def node_ids(self) -> list[str]:
        return list(self._index)

    def node_count(self) -> int:
        """Return total number of nodes in the graph."""
        return len(self._index)

    def nodes_by_phase(self, phase: Phase) -> Iterator[SkillNode]:
        for node in self._index.values():
            if node.phase == phase:
                yield node

    def nodes_by_tag(self, tag: str) -> Iterator[SkillNode]:
        for node in self._index.values():
            if node.has_tag(tag):
                yield node

    def add_node(self, node: SkillNode) -> None:
        """Add a node.

        Raises:
            ValueError: If a node with the same id already exists.
        """
        if node.id in self._index:
            raise ValueError(f"Duplicate skill id '{node.id}'")
        self._index[node.id] = node
        self._outgoing.setdefault(node.id, [])
        self._incoming.setdefault(node.id, [])

    def replace_node(self, node: SkillNode) -> None:
        """Swap in new metadata for an existing id, keeping its position."""
        if node.id not in self._index:
            raise KeyError(node.id)
        self._index[node.id] = node

    def remove_node(self, node_id: str) -> tuple[SkillNode, list[Edge]]:
        """Delete a node and every edge referencing it.

        Returns:
            The removed node and the removed edges.

        Raises:
            KeyError: If node_id is not found.
        """
        node = self._index.pop(node_id)
        removed = self.remove_edges_touching(node_id)
        self._outgoing.pop(node_id, None)
        self._incoming.pop(node_id, None)
        return node, removed

    # ─────────────────────────────────────────────────────────────────────────
    # Edges
    # ─────────────────────────────────────────────────────────────────────────

    def add_edge(self, edge: Edge) -> Edge:
        """Insert an edge, or reinforce the existing edge with the same key.

        Both endpoints must already be nodes of the store; unresolved
        targets are filtered out by the inference engine beforehand.

        Returns:
            The stored edge.

        Raises:
            ValueError: If either endpoint is not a node.
        """
        if edge.source_id not in self._index:
            raise ValueError(f"Edge source '{edge.source_id}' is not a node")
        if edge.target_id not in self._index:
            raise ValueError(f"Edge target '{edge.target_id}' is not a node")

        existing = self._edge_index.get(edge.key)
        if existing is not None:
            existing.weight += edge.weight
            for item in edge.evidence:
                if item not in existing.evidence:
                    existing.evidence.append(item)
            return existing

        stored = Edge(
            source_id=edge.source_id,
            target_id=edge.target_id,
            kind=edge.kind,
            weight=edge.weight,
            evidence=list(edge.evidence),
        )
        self._edges.append(stored)
        self._edge_index[stored.key] = stored
        self._outgoing[stored.source_id].append(stored)
        self._incoming[stored.target_id].append(stored)
        return stored

    def add_edges(self, edges: Iterable[Edge]) -> None:
        for edge in edges:
            self.add_edge(edge)

    def find_edge(self, source_id: str, target_id: str, kind: EdgeKind) -> Edge | None:
        return self._edge_index.get((source_id, target_id, kind))

    def iter_edges(self, kind: EdgeKind | None = None) -> Iterator[Edge]:
        """Iterate edges in insertion order, optionally of one kind."""
        for edge in self._edges:
            if kind is None or edge.kind == kind:
                yield edge

    def edge_count(self, kind: EdgeKind | None = None) -> int:
        if kind is None:
            return len(self._edges)
        return sum(1 for _ in self.iter_edges(kind))

    def outgoing_edges(self, node_id: str) -> list[Edge]:
        return list(self._outgoing.get(node_id, ()))

    def incoming_edges(self, node_id: str) -> list[Edge]:
        return list(self._incoming.get(node_id, ()))

    def remove_edges_touching(self, node_id: str) -> list[Edge]:
        """Remove every edge with ``node_id`` as source or target."""
        removed = [e for e in self._edges if e.touches(node_id)]
        if removed:
            self._edges = [e for e in self._edges if not e.touches(node_id)]
            self._reindex_edges()
        return removed

    def replace_node_edges(self, node_id: str, edges: Iterable[Edge]) -> list[Edge]:
        """Replace the edge slice touching one node.

        Returns:
            The edges that were removed.
        """
        removed = self.remove_edges_touching(node_id)
        for edge in edges:
            if not edge.touches(node_id):
                raise ValueError(f"Edge {edge} does not touch '{node_id}'")
            self.add_edge(edge)
        return removed

    def _reindex_edges(self) -> None:
        self._edge_index = {e.key: e for e in self._edges}
        self._outgoing = {node_id: [] for node_id in self._index}
        self._incoming = {node_id: [] for node_id in self._index}
        for edge in self._edges:
            self._outgoing[edge.source_id].append(edge)
            self._incoming[edge.target_id].append(edge)

    # ─────────────────────────────────────────────────────────────────────────
    # Derived values
    # ─────────────────────────────────────────────────────────────────────────

    def recompute_degrees(self) -> None:
        """Recompute in/out degree of every node from the edge set.

        Degrees count structural edges only; tag_cluster edges are
        excluded, so a skill connected only by tags has degree 0.
        """
        for node in self._index.values():
            node.in_degree = sum(
                1 for e in self._incoming[node.id] if e.kind.propagates_leverage()
            )
            node.out_degree = sum(
                1 for e in self._outgoing[node.id] if e.kind.propagates_leverage()
            )

    def leverage_scores(self) -> dict[str, float]:
        return {node.id: node.leverage_score for node in self._index.values()}

    def apply_scores(self, scores: dict[str, float]) -> None:
        for node_id, score in scores.items():
            self._index[node_id].leverage_score = score

    def clusters(self) -> list[Cluster]:
        return list(self._clusters)

    def set_clusters(self, clusters: list[Cluster]) -> None:
        self._clusters = list(clusters)

    def cluster_by_tag(self, tag: str) -> Cluster | None:
        for cluster in self._clusters:
            if cluster.tag == tag:
                return cluster
        return None

    def missing_dependencies(self) -> list[MissingDependency]:
        """Declared dependencies whose target is not in the graph.

        Derived from each node's ``depends_on`` against the current node
        set, in node then declaration order, so it always agrees with the
        ``depends_on`` edges present.
        """
        return [
            MissingDependency(node.id, dep)
            for node in self._index.values()
            for dep in node.depends_on
            if dep != node.id and dep not in self._index
        ]

    @property
    def gap_report(self) -> GapReport | None:
        return self._gap_report

    def set_gap_report(self, report: GapReport) -> None:
        self._gap_report = report

    @property
    def mutation_log(self) -> MutationLog:
        """Access the mutation log for this graph lineage."""
        return self._mutation_log

    # ─────────────────────────────────────────────────────────────────────────
    # Whole-graph helpers
    # ─────────────────────────────────────────────────────────────────────────

    def stats(self) -> dict[str, Any]:
        """Node/edge counts, average degree and density.

        Density is the number of distinct ordered skill pairs joined by a
        structural edge, divided by the n*(n-1) possible ordered pairs.
        """
        n = len(self._index)
        edges_by_kind = {kind.value: 0 for kind in EdgeKind}
        connected_pairs: set[tuple[str, str]] = set()
        for edge in self._edges:
            edges_by_kind[edge.kind.value] += 1
            if edge.kind.propagates_leverage():
                connected_pairs.add((edge.source_id, edge.target_id))
        total_degree = sum(node.degree for node in self._index.values())
        possible = n * (n - 1)
        return {
            "node_count": n,
            "edge_count": len(self._edges),
            "cluster_count": len(self._clusters),
            "edges_by_kind": edges_by_kind,
            "average_degree": total_degree / n if n else 0.0,
            "density": len(connected_pairs) / possible if possible else 0.0,
        }

    def clone(self) -> GraphStore:
        """Create a deep copy of this store.

        The new store is completely independent - mutations to one do not
        affect the other.
        """
        return copy.deepcopy(self)


__all__ = ["GraphStore", "SCHEMA_VERSION"]
