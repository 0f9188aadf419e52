"""Tag clusters and cohesion.

A cluster is the set of skills carrying one tag. Its cohesion is the
fraction of possible member pairs that are actually joined by a
``tag_cluster`` edge.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from skillgraph.graph.relations import EdgeKind

if TYPE_CHECKING:
    from skillgraph.graph.store import GraphStore

DEFAULT_WEAK_THRESHOLD = 0.3


@dataclass
class Cluster:
    """Skills sharing a tag.

    Attributes:
        tag: The shared tag.
        members: Member skill ids, sorted.
        cohesion: Realized pairs / possible pairs, in [0, 1].
        weak_threshold: Cohesion below this marks the cluster weak.
    """

    tag: str
    members: list[str] = field(default_factory=list)
    cohesion: float = 0.0
    weak_threshold: float = DEFAULT_WEAK_THRESHOLD

    @property
    def size(self) -> int:
        return len(self.members)

    @property
    def possible_pairs(self) -> int:
        n = len(self.members)
        return n * (n - 1) // 2

    @property
    def is_weak(self) -> bool:
        return self.cohesion < self.weak_threshold

    def __contains__(self, node_id: object) -> bool:
        return node_id in self.members


class ClusterBuilder:
    """Groups nodes by tag and computes cohesion."""

    def __init__(self, weak_threshold: float = DEFAULT_WEAK_THRESHOLD) -> None:
        self.weak_threshold = weak_threshold

    def build(self, store: GraphStore) -> list[Cluster]:
        """Form one cluster per distinct tag in the store.

        Clusters are returned sorted by tag. Single-member clusters have
        no possible pairs and get cohesion 0.0.
        """
        members_by_tag: dict[str, list[str]] = {}
        for node in store.all_nodes():
            for tag in node.tags:
                members_by_tag.setdefault(tag, []).append(node.id)

        clusters: list[Cluster] = []
        for tag in sorted(members_by_tag):
            members = sorted(members_by_tag[tag])
            cluster = Cluster(tag=tag, members=members, weak_threshold=self.weak_threshold)
            cluster.cohesion = self._cohesion(store, cluster)
            clusters.append(cluster)
        return clusters

    @staticmethod
    def _cohesion(store: GraphStore, cluster: Cluster) -> float:
        possible = cluster.possible_pairs
        if possible == 0:
            return 0.0
        member_set = set(cluster.members)
        realized = sum(
            1
            for edge in store.iter_edges(EdgeKind.TAG_CLUSTER)
            if edge.source_id in member_set and edge.target_id in member_set
        )
        return min(1.0, realized / possible)


__all__ = ["Cluster", "ClusterBuilder", "DEFAULT_WEAK_THRESHOLD"]
