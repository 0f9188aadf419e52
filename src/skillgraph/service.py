"""KnowledgeGraphService - the lifecycle owner of the published snapshot.

The service reads the three sources, asks GraphBuilder for a new
GraphStore and publishes it by swapping a single reference. Writers
(build, refresh, remove, load) are serialized by a lock; readers take
whatever store is currently published and never block. Published stores
are not mutated, so a reader never sees a half-built graph.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import TYPE_CHECKING, Any

from skillgraph.errors import GraphNotBuiltError, NodeNotFoundError
from skillgraph.graph.builder import GraphBuilder
from skillgraph.graph.query import Direction, GraphPath, NodeView, QueryEngine
from skillgraph.graph.serialize import load_snapshot, save_snapshot
from skillgraph.graph.settings import GraphSettings
from skillgraph.sources.models import StaticImprovementLog, StaticRunArchive

if TYPE_CHECKING:
    from skillgraph.config import ConfigLoader
    from skillgraph.graph.clusters import Cluster
    from skillgraph.graph.gaps import GapReport
    from skillgraph.graph.relations import Edge, EdgeKind
    from skillgraph.graph.SkillNode import Phase, SkillNode
    from skillgraph.graph.store import GraphStore
    from skillgraph.sources.models import ImprovementLog, RunArchive, SkillRegistry

logger = logging.getLogger(__name__)


class KnowledgeGraphService:
    """Builds, maintains and answers queries about the skill graph.

    Args:
        registry: Source of skill definitions.
        run_archive: Source of past runs (optional).
        improvement_log: Source of improvement events (optional).
        snapshot_path: Where ``save``/``load`` persist the snapshot.
        settings: Algorithm parameters.
        autosave: Save the snapshot after every successful mutation.
    """

    def __init__(
        self,
        registry: SkillRegistry,
        run_archive: RunArchive | None = None,
        improvement_log: ImprovementLog | None = None,
        snapshot_path: Path | None = None,
        settings: GraphSettings | None = None,
        autosave: bool = False,
    ) -> None:
        self.registry = registry
        self.run_archive = run_archive or StaticRunArchive()
        self.improvement_log = improvement_log or StaticImprovementLog()
        self.snapshot_path = Path(snapshot_path) if snapshot_path else None
        self.settings = settings or GraphSettings()
        self.autosave = autosave
        self.builder = GraphBuilder(self.settings)
        self._lock = threading.Lock()
        self._store: GraphStore | None = None

    @classmethod
    def from_config(cls, config: ConfigLoader, autosave: bool = True) -> KnowledgeGraphService:
        """Create a service wired to the file-backed sources named in ``config``."""
        from skillgraph.graph.factory import build_sources

        registry, run_archive, improvement_log = build_sources(config)
        return cls(
            registry=registry,
            run_archive=run_archive,
            improvement_log=improvement_log,
            snapshot_path=config.get_path("snapshot.path"),
            settings=GraphSettings.from_config(config.get_raw()),
            autosave=autosave,
        )

    # ─────────────────────────────────────────────────────────────────────────
    # Lifecycle (serialized writers)
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def is_built(self) -> bool:
        return self._store is not None

    def build(self) -> GraphStore:
        """Run a full build and publish the result.

        Raises:
            SourceReadError: If a source cannot be read. The previously
                published snapshot stays in place.
        """
        with self._lock:
            skills = self.registry.list_skills()
            runs = list(self.run_archive.iter_runs())
            events = list(self.improvement_log.iter_events())
            logger.debug(
                "Read %d skills, %d runs, %d improvement events",
                len(skills),
                len(runs),
                len(events),
            )
            store = self.builder.build(skills, runs, events)
            self._publish(store)
            return store

    def refresh_node(self, node_id: str) -> SkillNode:
        """Re-read one skill from the registry and recompute its edges.

        A registry entry not yet in the graph is added.

        Raises:
            GraphNotBuiltError: If nothing has been built or loaded yet.
            NodeNotFoundError: If the registry has no skill with this id.
        """
        with self._lock:
            current = self._require_store()
            definition = self.registry.get_skill(node_id)
            if definition is None:
                raise NodeNotFoundError(node_id)
            runs = list(self.run_archive.iter_runs())
            events = list(self.improvement_log.iter_events())
            store = self.builder.refresh_node(current, definition, runs, events)
            self._publish(store)
            node = store.find_by_id(node_id)
            if node is None:
                raise NodeNotFoundError(node_id)
            return node

    def remove_node(self, node_id: str) -> SkillNode:
        """Delete a skill and all its edges from the graph.

        Returns:
            The removed node as it was before removal.

        Raises:
            GraphNotBuiltError: If nothing has been built or loaded yet.
            NodeNotFoundError: If the id is not in the graph.
        """
        with self._lock:
            current = self._require_store()
            removed = current.find_by_id(node_id)
            if removed is None:
                raise NodeNotFoundError(node_id)
            store = self.builder.remove_node(current, node_id)
            self._publish(store)
            return removed

    def load(self, path: Path | None = None) -> GraphStore:
        """Load and publish a saved snapshot.

        Raises:
            ValueError: If no path is given and none is configured.
            FileNotFoundError: If the snapshot file does not exist.
            SnapshotSchemaError: If the document is malformed or has an
                unknown schema version.
        """
        path = self._snapshot_path(path)
        with self._lock:
            store = load_snapshot(path)
            self._store = store
            logger.info("Loaded skill graph with %d skills from %s", store.node_count(), path)
            return store

    def save(self, path: Path | None = None) -> Path:
        """Persist the published snapshot atomically."""
        store = self._require_store()
        return save_snapshot(store, self._snapshot_path(path))

    def ensure_graph(self) -> GraphStore:
        """Return the published graph, loading or building it on first use."""
        if self._store is not None:
            return self._store
        if self.snapshot_path is not None and self.snapshot_path.exists():
            return self.load()
        return self.build()

    def _publish(self, store: GraphStore) -> None:
        # Persist before swapping so a failed save leaves the old snapshot live
        if self.autosave and self.snapshot_path is not None:
            save_snapshot(store, self.snapshot_path)
        self._store = store

    def _snapshot_path(self, path: Path | None) -> Path:
        resolved = Path(path) if path else self.snapshot_path
        if resolved is None:
            raise ValueError("No snapshot path given or configured")
        return resolved

    def _require_store(self) -> GraphStore:
        store = self._store
        if store is None:
            raise GraphNotBuiltError()
        return store

    # ─────────────────────────────────────────────────────────────────────────
    # Queries (lock-free against the published snapshot)
    # ─────────────────────────────────────────────────────────────────────────

    def get_graph(self) -> GraphStore:
        return self._require_store()

    def query(self) -> QueryEngine:
        return QueryEngine(self._require_store())

    def get_node(self, node_id: str) -> NodeView:
        return self.query().get_node(node_id)

    def get_neighbors(
        self,
        node_id: str,
        edge_kind: EdgeKind | None = None,
        direction: Direction = Direction.BOTH,
    ) -> list[SkillNode]:
        return self.query().get_neighbors(node_id, edge_kind=edge_kind, direction=direction)

    def find_path(self, from_id: str, to_id: str) -> GraphPath | None:
        return self.query().find_path(from_id, to_id)

    def get_nodes_by_phase(self, phase: Phase) -> list[SkillNode]:
        return self.query().get_nodes_by_phase(phase)

    def get_nodes_by_tag(self, tag: str) -> list[SkillNode]:
        return self.query().get_nodes_by_tag(tag)

    def get_edges_by_type(self, kind: EdgeKind) -> list[Edge]:
        return self.query().get_edges_by_type(kind)

    def get_high_leverage_skills(self, n: int = 10) -> list[SkillNode]:
        return self.query().get_high_leverage_skills(n)

    def get_isolated_skills(self) -> list[SkillNode]:
        return self.query().get_isolated_skills()

    def get_unused_skills(self, days: int | None = None) -> list[SkillNode]:
        return self.query().get_unused_skills(days)

    def analyze_gaps(self) -> GapReport:
        return self.query().gap_report()

    def get_clusters(self) -> list[Cluster]:
        return self.query().get_clusters()

    def get_cluster_by_tag(self, tag: str) -> Cluster | None:
        return self.query().get_cluster_by_tag(tag)

    def get_stats(self) -> dict[str, Any]:
        return self.query().get_stats()


__all__ = ["KnowledgeGraphService"]
