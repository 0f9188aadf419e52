"""skillgraph.mcp.server - MCP server implementation.

Creates and runs the MCP server exposing the skill knowledge graph.

This is a pure interface layer: every tool delegates to a ``_``-prefixed
function that takes a KnowledgeGraphService and returns a JSON-compatible
dict. The REST server reuses the same functions.
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

try:
    from mcp.server.fastmcp import FastMCP

    MCP_AVAILABLE = True
except ImportError:
    MCP_AVAILABLE = False
    FastMCP = None

from skillgraph.config import get_config
from skillgraph.errors import SkillGraphError
from skillgraph.graph.mutations import MutationEntry
from skillgraph.graph.query import Direction
from skillgraph.graph.relations import EdgeKind
from skillgraph.graph.serialize import (
    serialize_cluster,
    serialize_edge,
    serialize_gap_report,
    serialize_graph,
    serialize_node,
)
from skillgraph.graph.SkillNode import Phase
from skillgraph.service import KnowledgeGraphService

logger = logging.getLogger(__name__)

MCP_SERVER_INSTRUCTIONS = """\
skillgraph exposes a knowledge graph over a library of reusable skills.

Nodes are skills. Edges are inferred from declared dependencies
(depends_on), shared tags (tag_cluster), run order (sequence), skills run
together (co_executed) and the improvement log (improved_by).

Start with get_graph_stats or get_high_leverage_skills. Use
analyze_skill_gaps to find missing dependencies, isolated or unused
skills, weak tag clusters and under-served phases. After editing a
skill's SKILL.md, call refresh_graph_node with its id.
"""


def _tool_result(fn: Callable[..., dict[str, Any]]) -> Callable[..., dict[str, Any]]:
    """Turn domain errors into ``{"success": False, "error": ...}`` results."""

    @functools.wraps(fn)
    def wrapper(*args: Any, **kwargs: Any) -> dict[str, Any]:
        try:
            result = fn(*args, **kwargs)
        except (SkillGraphError, ValueError) as e:
            return {"success": False, "error": str(e), "error_type": type(e).__name__}
        result.setdefault("success", True)
        return result

    return wrapper


def _serialize_mutation_entry(entry: MutationEntry) -> dict[str, Any]:
    return {
        "id": entry.id,
        "operation": entry.operation,
        "target_id": entry.target_id,
        "before_state": entry.before_state,
        "after_state": entry.after_state,
        "timestamp": entry.timestamp.isoformat(),
    }


# ─────────────────────────────────────────────────────────────────────────────
# Lifecycle
# ─────────────────────────────────────────────────────────────────────────────


@_tool_result
def _get_graph_status(service: KnowledgeGraphService) -> dict[str, Any]:
    store = service.get_graph()
    last = store.mutation_log.last()
    return {
        "built_at": store.built_at.isoformat(),
        "stats": store.stats(),
        "last_mutation": _serialize_mutation_entry(last) if last else None,
    }


@_tool_result
def _build_graph(service: KnowledgeGraphService) -> dict[str, Any]:
    store = service.build()
    return {"built_at": store.built_at.isoformat(), "stats": store.stats()}


@_tool_result
def _refresh_node(service: KnowledgeGraphService, node_id: str) -> dict[str, Any]:
    node = service.refresh_node(node_id)
    return {"node": serialize_node(node), "stats": service.get_stats()}


@_tool_result
def _remove_node(service: KnowledgeGraphService, node_id: str) -> dict[str, Any]:
    node = service.remove_node(node_id)
    return {"removed": node.id, "stats": service.get_stats()}


@_tool_result
def _get_mutation_log(service: KnowledgeGraphService, limit: int = 50) -> dict[str, Any]:
    entries = list(service.get_graph().mutation_log.iter_entries())
    recent = entries[-limit:] if limit > 0 else entries
    return {
        "count": len(entries),
        "mutations": [_serialize_mutation_entry(e) for e in reversed(recent)],
    }


# ─────────────────────────────────────────────────────────────────────────────
# Queries
# ─────────────────────────────────────────────────────────────────────────────


@_tool_result
def _get_knowledge_graph(service: KnowledgeGraphService) -> dict[str, Any]:
    return {"graph": serialize_graph(service.get_graph())}


@_tool_result
def _get_stats(service: KnowledgeGraphService) -> dict[str, Any]:
    return {"stats": service.get_stats()}


@_tool_result
def _get_node(service: KnowledgeGraphService, node_id: str) -> dict[str, Any]:
    view = service.get_node(node_id)
    return {
        "node": serialize_node(view.node),
        "outgoing": [serialize_edge(e) for e in view.outgoing],
        "incoming": [serialize_edge(e) for e in view.incoming],
    }


@_tool_result
def _get_nodes_by_phase(service: KnowledgeGraphService, phase: str) -> dict[str, Any]:
    parsed = Phase.parse(phase)
    if parsed is None:
        raise ValueError("phase is required")
    nodes = service.get_nodes_by_phase(parsed)
    return {"phase": parsed.value, "count": len(nodes), "nodes": [serialize_node(n) for n in nodes]}


@_tool_result
def _get_nodes_by_tag(service: KnowledgeGraphService, tag: str) -> dict[str, Any]:
    nodes = service.get_nodes_by_tag(tag)
    return {"tag": tag, "count": len(nodes), "nodes": [serialize_node(n) for n in nodes]}


@_tool_result
def _get_edges_by_type(service: KnowledgeGraphService, edge_type: str) -> dict[str, Any]:
    kind = EdgeKind.parse(edge_type)
    edges = service.get_edges_by_type(kind)
    return {"type": kind.value, "count": len(edges), "edges": [serialize_edge(e) for e in edges]}


@_tool_result
def _get_neighbors(
    service: KnowledgeGraphService,
    node_id: str,
    edge_type: str | None = None,
    direction: str = "both",
) -> dict[str, Any]:
    kind = EdgeKind.parse(edge_type) if edge_type else None
    neighbors = service.get_neighbors(node_id, edge_kind=kind, direction=Direction.parse(direction))
    return {
        "node_id": node_id,
        "count": len(neighbors),
        "neighbors": [serialize_node(n) for n in neighbors],
    }


@_tool_result
def _find_path(service: KnowledgeGraphService, from_id: str, to_id: str) -> dict[str, Any]:
    path = service.find_path(from_id, to_id)
    if path is None:
        return {"found": False, "path": [], "edges": [], "length": None}
    return {
        "found": True,
        "path": path.nodes,
        "edges": [serialize_edge(e) for e in path.edges],
        "length": path.length,
    }


@_tool_result
def _get_clusters(service: KnowledgeGraphService) -> dict[str, Any]:
    clusters = service.get_clusters()
    return {"count": len(clusters), "clusters": [serialize_cluster(c) for c in clusters]}


@_tool_result
def _get_cluster_by_tag(service: KnowledgeGraphService, tag: str) -> dict[str, Any]:
    cluster = service.get_cluster_by_tag(tag)
    if cluster is None:
        return {"success": False, "error": f"No cluster for tag '{tag}'"}
    return {"cluster": serialize_cluster(cluster)}


@_tool_result
def _get_high_leverage_skills(service: KnowledgeGraphService, limit: int = 10) -> dict[str, Any]:
    nodes = service.get_high_leverage_skills(limit)
    return {"count": len(nodes), "skills": [serialize_node(n) for n in nodes]}


@_tool_result
def _get_isolated_skills(service: KnowledgeGraphService) -> dict[str, Any]:
    nodes = service.get_isolated_skills()
    return {"count": len(nodes), "skills": [serialize_node(n) for n in nodes]}


@_tool_result
def _get_unused_skills(service: KnowledgeGraphService, days: int | None = None) -> dict[str, Any]:
    nodes = service.get_unused_skills(days)
    effective = days if days is not None else service.get_graph().settings.unused_after_days
    return {"days": effective, "count": len(nodes), "skills": [serialize_node(n) for n in nodes]}


@_tool_result
def _analyze_gaps(service: KnowledgeGraphService) -> dict[str, Any]:
    report = service.analyze_gaps()
    return {"has_findings": report.has_findings(), "gaps": serialize_gap_report(report)}


# ─────────────────────────────────────────────────────────────────────────────
# Server
# ─────────────────────────────────────────────────────────────────────────────


def create_server(
    service: KnowledgeGraphService | None = None,
    working_dir: Path | None = None,
) -> FastMCP:
    """Create the MCP server with all tools registered.

    Args:
        service: Optional pre-built service (for testing).
        working_dir: Directory to discover ``.skillgraph.toml`` from.

    Returns:
        FastMCP server instance.
    """
    if not MCP_AVAILABLE:
        raise ImportError(
            "MCP dependencies not installed. Install with: pip install skillgraph[mcp]"
        )

    if working_dir is None:
        working_dir = Path.cwd()

    if service is None:
        config = get_config(start_dir=working_dir)
        service = KnowledgeGraphService.from_config(config)
        service.ensure_graph()

    mcp = FastMCP("skillgraph", instructions=MCP_SERVER_INSTRUCTIONS)

    # Service held in closure for tools
    _state: dict[str, Any] = {
        "service": service,
        "working_dir": working_dir,
    }

    @mcp.tool()
    def build_knowledge_graph() -> dict[str, Any]:
        """Rebuild the graph from the skill registry, run archive and improvement log.

        Returns:
            Build time and graph statistics.
        """
        return _build_graph(_state["service"])

    @mcp.tool()
    def get_knowledge_graph() -> dict[str, Any]:
        """Get the full graph snapshot (nodes, edges, clusters)."""
        return _get_knowledge_graph(_state["service"])

    @mcp.tool()
    def get_graph_status() -> dict[str, Any]:
        """Get build time, statistics and the last mutation."""
        return _get_graph_status(_state["service"])

    @mcp.tool()
    def get_graph_node(skill_id: str) -> dict[str, Any]:
        """Get a skill with its incoming and outgoing edges.

        Args:
            skill_id: The skill id (its directory name in the registry).
        """
        return _get_node(_state["service"], skill_id)

    @mcp.tool()
    def get_graph_nodes_by_phase(phase: str) -> dict[str, Any]:
        """Get all skills affiliated with a phase.

        Args:
            phase: INIT, SCAFFOLD, IMPLEMENT, TEST, VERIFY, VALIDATE,
                DOCUMENT, REVIEW, SHIP or COMPLETE.
        """
        return _get_nodes_by_phase(_state["service"], phase)

    @mcp.tool()
    def get_graph_nodes_by_tag(tag: str) -> dict[str, Any]:
        """Get all skills carrying a tag."""
        return _get_nodes_by_tag(_state["service"], tag)

    @mcp.tool()
    def get_graph_edges_by_type(edge_type: str) -> dict[str, Any]:
        """Get all edges of one type.

        Args:
            edge_type: depends_on, tag_cluster, sequence, co_executed or improved_by.
        """
        return _get_edges_by_type(_state["service"], edge_type)

    @mcp.tool()
    def get_graph_neighbors(
        skill_id: str,
        edge_type: str | None = None,
        direction: str = "both",
    ) -> dict[str, Any]:
        """Get skills one hop away.

        Args:
            skill_id: Starting skill.
            edge_type: Only follow edges of this type.
            direction: 'out', 'in' or 'both'.
        """
        return _get_neighbors(_state["service"], skill_id, edge_type, direction)

    @mcp.tool()
    def find_skill_path(from_skill: str, to_skill: str) -> dict[str, Any]:
        """Find the shortest path between two skills along structural edges."""
        return _find_path(_state["service"], from_skill, to_skill)

    @mcp.tool()
    def get_graph_clusters() -> dict[str, Any]:
        """Get all tag clusters with their cohesion."""
        return _get_clusters(_state["service"])

    @mcp.tool()
    def get_cluster_by_tag(tag: str) -> dict[str, Any]:
        """Get the cluster for one tag."""
        return _get_cluster_by_tag(_state["service"], tag)

    @mcp.tool()
    def get_high_leverage_skills(limit: int = 10) -> dict[str, Any]:
        """Get the skills with the highest leverage score.

        Args:
            limit: Number of skills to return (default 10).
        """
        return _get_high_leverage_skills(_state["service"], limit)

    @mcp.tool()
    def get_isolated_skills() -> dict[str, Any]:
        """Get skills with no dependency, run or improvement edges."""
        return _get_isolated_skills(_state["service"])

    @mcp.tool()
    def get_unused_skills(days: int | None = None) -> dict[str, Any]:
        """Get skills never run, or not run within ``days``.

        Args:
            days: Staleness threshold (defaults to the configured value).
        """
        return _get_unused_skills(_state["service"], days)

    @mcp.tool()
    def analyze_skill_gaps() -> dict[str, Any]:
        """Report missing dependencies, isolated and unused skills, weak
        clusters and under-served phases."""
        return _analyze_gaps(_state["service"])

    @mcp.tool()
    def get_graph_stats() -> dict[str, Any]:
        """Get node, edge and cluster counts, average degree and density."""
        return _get_stats(_state["service"])

    @mcp.tool()
    def refresh_graph_node(skill_id: str) -> dict[str, Any]:
        """Re-read one skill from the registry and recompute its edges and scores."""
        return _refresh_node(_state["service"], skill_id)

    @mcp.tool()
    def remove_graph_node(skill_id: str) -> dict[str, Any]:
        """Remove a skill and all its edges from the graph."""
        return _remove_node(_state["service"], skill_id)

    @mcp.tool()
    def get_mutation_log(limit: int = 50) -> dict[str, Any]:
        """Get recent build/refresh/remove operations, newest first."""
        return _get_mutation_log(_state["service"], limit)

    return mcp


def run_server(
    working_dir: Path | None = None,
    transport: str = "stdio",
) -> None:
    """Run the MCP server.

    Args:
        working_dir: Directory to discover ``.skillgraph.toml`` from.
        transport: Transport type ('stdio' or 'sse').
    """
    mcp = create_server(working_dir=working_dir)
    mcp.run(transport=transport)
