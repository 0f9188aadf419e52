"""
skillgraph.commands.analyze - Graph-wide analysis commands.

Subcommands handled here: stats, leverage, gaps, clusters.
"""

from __future__ import annotations

import argparse

from skillgraph.commands.common import emit_result, open_service
from skillgraph.mcp.server import (
    _analyze_gaps,
    _get_cluster_by_tag,
    _get_clusters,
    _get_high_leverage_skills,
    _get_stats,
    _get_unused_skills,
)


def run_stats(args: argparse.Namespace) -> int:
    """Print node/edge counts, average degree and density."""
    result = _get_stats(open_service(args))
    handled = emit_result(args, result)
    if handled is not None:
        return handled

    stats = result["stats"]
    print("Skill Graph Statistics")
    print("=" * 40)
    print(f"Skills:          {stats['node_count']}")
    print(f"Edges:           {stats['edge_count']}")
    print(f"Clusters:        {stats['cluster_count']}")
    print(f"Average degree:  {stats['average_degree']:.2f}")
    print(f"Density:         {stats['density']:.4f}")
    print()
    for kind, count in stats["edges_by_kind"].items():
        print(f"  {kind:<12} {count}")
    return 0


def run_leverage(args: argparse.Namespace) -> int:
    """List the highest-leverage skills."""
    result = _get_high_leverage_skills(open_service(args), args.limit)
    handled = emit_result(args, result)
    if handled is not None:
        return handled

    print(f"{'#':>3}  {'Skill':<32} {'Phase':<10} {'Leverage':>9} {'In':>4} {'Out':>4}")
    for rank, node in enumerate(result["skills"], start=1):
        print(
            f"{rank:>3}  {node['id']:<32} {node['phase'] or '-':<10} "
            f"{node['leverageScore']:>9.4f} {node['inDegree']:>4} {node['outDegree']:>4}"
        )
    return 0


def run_gaps(args: argparse.Namespace) -> int:
    """Report structural gaps.

    Exits 0 even when gaps are found; findings are information, not errors.
    """
    service = open_service(args)
    result = _analyze_gaps(service)
    unused = _get_unused_skills(service, args.days) if args.days is not None else None
    if unused is not None and result.get("success"):
        result["gaps"]["unusedSkills"] = [n["id"] for n in unused.get("skills", [])]
        result["gaps"]["unusedAfterDays"] = args.days
    handled = emit_result(args, result)
    if handled is not None:
        return handled

    gaps = result["gaps"]
    if not result["has_findings"] and not gaps["unusedSkills"]:
        print("No gaps found.")
        return 0

    if gaps["missingDependencies"]:
        print(f"Missing dependencies ({len(gaps['missingDependencies'])}):")
        for missing in gaps["missingDependencies"]:
            print(f"  {missing['source']} -> {missing['target']}")
    if gaps["isolatedSkills"]:
        print(f"Isolated skills ({len(gaps['isolatedSkills'])}):")
        for skill_id in gaps["isolatedSkills"]:
            print(f"  {skill_id}")
    if gaps["unusedSkills"]:
        print(f"Unused skills, {gaps['unusedAfterDays']} days ({len(gaps['unusedSkills'])}):")
        for skill_id in gaps["unusedSkills"]:
            print(f"  {skill_id}")
    if gaps["weakClusters"]:
        print(f"Weak clusters ({len(gaps['weakClusters'])}):")
        for cluster in gaps["weakClusters"]:
            print(f"  {cluster['tag']}: cohesion {cluster['cohesion']:.2f}")
    if gaps["phaseGaps"]:
        print(f"Phase gaps ({len(gaps['phaseGaps'])}):")
        for gap in gaps["phaseGaps"]:
            print(f"  {gap['phase']}: {gap['count']} of {gap['minimum']}")
    return 0


def run_clusters(args: argparse.Namespace) -> int:
    """List tag clusters, or show one with ``--tag``."""
    service = open_service(args)
    if args.tag:
        result = _get_cluster_by_tag(service, args.tag)
        handled = emit_result(args, result)
        if handled is not None:
            return handled
        clusters = [result["cluster"]]
    else:
        result = _get_clusters(service)
        handled = emit_result(args, result)
        if handled is not None:
            return handled
        clusters = result["clusters"]

    if not clusters:
        print("No tag clusters.")
        return 0
    for cluster in clusters:
        marker = "  (weak)" if cluster["weak"] else ""
        print(f"{cluster['tag']:<24} {len(cluster['members']):>3} skills  "
              f"cohesion {cluster['cohesion']:.2f}{marker}")
        if args.tag:
            for member in cluster["members"]:
                print(f"  {member}")
    return 0
