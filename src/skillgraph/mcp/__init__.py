"""skillgraph.mcp - MCP tools over the skill knowledge graph.

The server wraps one KnowledgeGraphService and exposes it to agents as
tools in three groups:

- lifecycle: build_knowledge_graph, refresh_graph_node, remove_graph_node,
  get_graph_status, get_mutation_log
- lookup: get_graph_node, get_graph_neighbors, find_skill_path and the
  by-phase, by-tag and by-edge-type listings
- analysis: get_high_leverage_skills, get_isolated_skills,
  get_unused_skills, get_graph_clusters, analyze_skill_gaps,
  get_graph_stats

Every tool returns a JSON-ready dict; domain and validation errors come back as
``{"success": False, "error": ...}`` rather than raising.

The ``mcp`` package is an optional extra. Check ``MCP_AVAILABLE`` before
calling ``create_server`` or ``run_server``::

    from skillgraph.mcp import MCP_AVAILABLE, run_server

    if MCP_AVAILABLE:
        run_server(working_dir=Path("~/skills-repo").expanduser())
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

try:
    from mcp.server.fastmcp import FastMCP

    MCP_AVAILABLE = True
except ImportError:
    MCP_AVAILABLE = False
    FastMCP = None

if TYPE_CHECKING:
    from skillgraph.service import KnowledgeGraphService

_INSTALL_HINT = "MCP dependencies not installed. Install with: pip install skillgraph[mcp]"


def create_server(
    service: KnowledgeGraphService | None = None,
    working_dir: Path | None = None,
):
    """Create the skill graph MCP server.

    Without ``service``, one is built from the ``.skillgraph.toml``
    discovered from ``working_dir`` and its graph is loaded or built.

    Raises:
        ImportError: If the ``mcp`` extra is not installed.
    """
    if not MCP_AVAILABLE:
        raise ImportError(_INSTALL_HINT)
    from skillgraph.mcp.server import create_server as _create

    return _create(service=service, working_dir=working_dir)


def run_server(working_dir: Path | None = None, transport: str = "stdio") -> None:
    """Serve the skill graph tools over ``transport`` ('stdio' or 'sse').

    Raises:
        ImportError: If the ``mcp`` extra is not installed.
    """
    if not MCP_AVAILABLE:
        raise ImportError(_INSTALL_HINT)
    from skillgraph.mcp.server import run_server as _run

    _run(working_dir=working_dir, transport=transport)


__all__ = [
    "MCP_AVAILABLE",
    "create_server",
    "run_server",
]
