"""
skillgraph.commands.build - Build the knowledge graph from the sources.
"""

from __future__ import annotations

import argparse

from skillgraph.commands.common import emit_result, open_service
from skillgraph.mcp.server import _build_graph


def run(args: argparse.Namespace) -> int:
    """Run a full build and save the snapshot."""
    service = open_service(args, ensure=False)
    result = _build_graph(service)
    handled = emit_result(args, result)
    if handled is not None:
        return handled

    stats = result["stats"]
    print(
        f"Built skill graph: {stats['node_count']} skills, "
        f"{stats['edge_count']} edges, {stats['cluster_count']} clusters"
    )
    for kind, count in stats["edges_by_kind"].items():
        print(f"  {kind:<12} {count}")
    if service.snapshot_path is not None:
        print(f"Snapshot: {service.snapshot_path}")
    return 0
