"""
skillgraph.commands.lifecycle - Refresh or remove a single skill.
"""

from __future__ import annotations

import argparse

from skillgraph.commands.common import emit_result, open_service
from skillgraph.mcp.server import _refresh_node, _remove_node


def run_refresh(args: argparse.Namespace) -> int:
    """Re-read one skill from the registry and rescore the graph."""
    result = _refresh_node(open_service(args), args.skill_id)
    handled = emit_result(args, result)
    if handled is not None:
        return handled

    node = result["node"]
    print(f"Refreshed {node['id']}: leverage={node['leverageScore']:.4f}")
    return 0


def run_remove(args: argparse.Namespace) -> int:
    """Remove a skill and its edges."""
    result = _remove_node(open_service(args), args.skill_id)
    handled = emit_result(args, result)
    if handled is not None:
        return handled

    stats = result["stats"]
    print(
        f"Removed {result['removed']}: {stats['node_count']} skills, "
        f"{stats['edge_count']} edges remain"
    )
    return 0
