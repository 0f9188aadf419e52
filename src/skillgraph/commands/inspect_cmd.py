"""
skillgraph.commands.inspect_cmd - Look at single skills and the paths between them.

Subcommands handled here: node, neighbors, path.
"""

from __future__ import annotations

import argparse
from typing import Any

from skillgraph.commands.common import emit_result, open_service
from skillgraph.mcp.server import _find_path, _get_neighbors, _get_node


def _format_node_line(node: dict[str, Any]) -> str:
    phase = node.get("phase") or "-"
    return f"{node['id']:<32} {phase:<10} leverage={node['leverageScore']:.3f}"


def run_node(args: argparse.Namespace) -> int:
    """Show one skill with its edges."""
    result = _get_node(open_service(args), args.skill_id)
    handled = emit_result(args, result)
    if handled is not None:
        return handled

    node = result["node"]
    print(f"{node['id']} ({node['name']}) v{node['version']}")
    if node["description"]:
        print(f"  {node['description']}")
    print(f"  Phase:    {node['phase'] or '-'}")
    print(f"  Tags:     {', '.join(node['tags']) or '-'}")
    print(f"  Leverage: {node['leverageScore']:.4f}")
    print(f"  Degree:   in={node['inDegree']} out={node['outDegree']}")
    last = node["lastUsedAt"] or "never"
    print(f"  Runs:     {node['usageCount']} (last: {last})")

    if result["outgoing"]:
        print("\nOutgoing:")
        for edge in result["outgoing"]:
            print(f"  --[{edge['type']} x{edge['weight']:g}]--> {edge['target']}")
    if result["incoming"]:
        print("\nIncoming:")
        for edge in result["incoming"]:
            print(f"  <--[{edge['type']} x{edge['weight']:g}]-- {edge['source']}")
    return 0


def run_neighbors(args: argparse.Namespace) -> int:
    """List skills one hop away."""
    result = _get_neighbors(open_service(args), args.skill_id, args.type, args.direction)
    handled = emit_result(args, result)
    if handled is not None:
        return handled

    if not result["neighbors"]:
        print(f"No neighbors for {args.skill_id}")
        return 0
    for node in result["neighbors"]:
        print(_format_node_line(node))
    return 0


def run_path(args: argparse.Namespace) -> int:
    """Show the shortest structural path between two skills."""
    result = _find_path(open_service(args), args.from_id, args.to_id)
    handled = emit_result(args, result)
    if handled is not None:
        return handled

    if not result["found"]:
        print(f"No path from {args.from_id} to {args.to_id}")
        return 1
    if result["length"] == 0:
        print(args.from_id)
        return 0
    parts = [result["path"][0]]
    for edge in result["edges"]:
        parts.append(f"--[{edge['type']}]--> {edge['target']}")
    print(" ".join(parts))
    print(f"Length: {result['length']}")
    return 0
