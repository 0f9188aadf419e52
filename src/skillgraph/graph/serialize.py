"""Graph Serialization - Snapshot documents and reports.

This module converts a GraphStore to and from the JSON snapshot document,
persists snapshots atomically, and renders markdown and CSV reports.
"""

from __future__ import annotations

import csv
import io
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING, Any

from skillgraph.errors import SnapshotSchemaError
from skillgraph.graph.clusters import Cluster
from skillgraph.graph.gaps import GapAnalyzer
from skillgraph.graph.relations import Edge, EdgeKind
from skillgraph.graph.settings import GraphSettings
from skillgraph.graph.SkillNode import Phase, SkillNode
from skillgraph.graph.store import SCHEMA_VERSION, GraphStore
from skillgraph.sources.models import parse_timestamp

if TYPE_CHECKING:
    from skillgraph.graph.gaps import GapReport

logger = logging.getLogger(__name__)


def serialize_node(node: SkillNode) -> dict[str, Any]:
    """Serialize a SkillNode to a JSON-compatible dict."""
    return {
        "id": node.id,
        "name": node.name,
        "description": node.description,
        "phase": node.phase.value if node.phase else None,
        "tags": list(node.tags),
        "version": node.version,
        "dependsOn": list(node.depends_on),
        "category": node.category,
        "usageCount": node.usage_count,
        "lastUsedAt": node.last_used_at.isoformat() if node.last_used_at else None,
        "leverageScore": node.leverage_score,
        "inDegree": node.in_degree,
        "outDegree": node.out_degree,
    }


def serialize_edge(edge: Edge) -> dict[str, Any]:
    return {
        "source": edge.source_id,
        "target": edge.target_id,
        "type": edge.kind.value,
        "weight": edge.weight,
        "evidence": list(edge.evidence),
    }


def serialize_cluster(cluster: Cluster) -> dict[str, Any]:
    return {
        "tag": cluster.tag,
        "members": list(cluster.members),
        "cohesion": cluster.cohesion,
        "weak": cluster.is_weak,
    }


def serialize_gap_report(report: GapReport) -> dict[str, Any]:
    """Serialize a GapReport to a JSON-compatible dict."""
    return {
        "missingDependencies": [
            {"source": m.source_id, "target": m.target_id} for m in report.missing_dependencies
        ],
        "isolatedSkills": list(report.isolated_skills),
        "unusedSkills": list(report.unused_skills),
        "weakClusters": [serialize_cluster(c) for c in report.weak_clusters],
        "phaseGaps": [
            {"phase": g.phase.value, "count": g.count, "minimum": g.minimum}
            for g in report.phase_gaps
        ],
        "emptyPhases": [p.value for p in report.empty_phases],
        "unusedAfterDays": report.unused_after_days,
        "analyzedAt": report.analyzed_at.isoformat(),
    }


def serialize_graph(store: GraphStore) -> dict[str, Any]:
    """Serialize a GraphStore to the snapshot document.

    Returns:
        Dict with schemaVersion, builtAt, nodes, edges, clusters,
        missingDependencies and settings.
    """
    return {
        "schemaVersion": store.schema_version,
        "builtAt": store.built_at.isoformat(),
        "nodes": [serialize_node(n) for n in store.all_nodes()],
        "edges": [serialize_edge(e) for e in store.iter_edges()],
        "clusters": [serialize_cluster(c) for c in store.clusters()],
        "missingDependencies": [
            {"source": m.source_id, "target": m.target_id} for m in store.missing_dependencies()
        ],
        "settings": store.settings.to_dict(),
    }


def _deserialize_node(data: dict[str, Any]) -> SkillNode:
    node = SkillNode(
        id=data["id"],
        name=data.get("name") or "",
        description=data.get("description") or "",
        phase=Phase.parse(data.get("phase")),
        tags=list(data.get("tags") or []),
        version=data.get("version") or "1.0.0",
        depends_on=list(data.get("dependsOn") or []),
        category=data.get("category"),
        usage_count=int(data.get("usageCount", 0)),
        last_used_at=parse_timestamp(data.get("lastUsedAt")),
    )
    node.leverage_score = float(data.get("leverageScore", 1.0))
    return node


def deserialize_graph(data: dict[str, Any]) -> GraphStore:
    """Rebuild a GraphStore from a snapshot document.

    Degrees, missing dependencies and the gap report are not trusted from
    the document; they are recomputed from the restored nodes and edges.

    Raises:
        SnapshotSchemaError: If the schema version is missing or unknown,
            or the document structure is malformed.
        ValueError: If an edge type or phase name is not recognized.
    """
    if not isinstance(data, dict):
        raise SnapshotSchemaError("Snapshot document must be a JSON object")
    version = data.get("schemaVersion")
    if version is None:
        raise SnapshotSchemaError("Snapshot document has no schemaVersion")
    if str(version) != SCHEMA_VERSION:
        raise SnapshotSchemaError(
            f"Unsupported snapshot schemaVersion '{version}' (expected '{SCHEMA_VERSION}')"
        )

    try:
        settings = GraphSettings.from_dict(data.get("settings") or {})
        built_at = parse_timestamp(data.get("builtAt"))
        store = GraphStore(settings=settings, schema_version=SCHEMA_VERSION)
        if built_at is not None:
            store.built_at = built_at

        for node_data in data.get("nodes", []):
            store.add_node(_deserialize_node(node_data))
        for edge_data in data.get("edges", []):
            store.add_edge(
                Edge(
                    source_id=edge_data["source"],
                    target_id=edge_data["target"],
                    kind=EdgeKind.parse(edge_data["type"]),
                    weight=float(edge_data.get("weight", 1.0)),
                    evidence=list(edge_data.get("evidence") or []),
                )
            )
        store.recompute_degrees()
        store.set_clusters(
            [
                Cluster(
                    tag=c["tag"],
                    members=list(c.get("members") or []),
                    cohesion=float(c.get("cohesion", 0.0)),
                    weak_threshold=settings.weak_cluster_threshold,
                )
                for c in data.get("clusters", [])
            ]
        )
    except (KeyError, TypeError, AttributeError) as e:
        raise SnapshotSchemaError(f"Malformed snapshot document: {e!r}") from e

    store.set_gap_report(
        GapAnalyzer(
            weak_threshold=settings.weak_cluster_threshold,
            unused_after_days=settings.unused_after_days,
            min_skills_per_phase=settings.min_skills_per_phase,
        ).analyze(store)
    )
    return store


def save_snapshot(store: GraphStore, path: Path) -> Path:
    """Write the snapshot document atomically.

    The document is written to a temporary file in the target directory
    and moved into place with ``os.replace``, so readers never see a
    partial file.

    Returns:
        The path written.
    """
    path = Path(path).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    document = json.dumps(serialize_graph(store), indent=2)

    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(document)
            f.write("\n")
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    logger.debug("Saved snapshot with %d skills to %s", store.node_count(), path)
    return path


def load_snapshot(path: Path) -> GraphStore:
    """Read and validate a snapshot document.

    Raises:
        FileNotFoundError: If the file does not exist.
        SnapshotSchemaError: If the document is not valid JSON or has an
            unknown schema.
    """
    path = Path(path).expanduser()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise SnapshotSchemaError(f"Snapshot {path} is not valid JSON: {e}") from e
    store = deserialize_graph(data)
    logger.debug("Loaded snapshot with %d skills from %s", store.node_count(), path)
    return store


def _bar(value: float, width: int = 10) -> str:
    filled = max(0, min(width, round(value * width)))
    return "#" * filled + "." * (width - filled)


def to_markdown(store: GraphStore, top: int = 10) -> str:
    """Generate a markdown summary of a snapshot.

    Sections: statistics, top leverage skills, clusters with cohesion
    bars, and gap findings.
    """
    stats = store.stats()
    lines = [
        "# Skill Knowledge Graph",
        "",
        f"Built: {store.built_at.isoformat()}",
        "",
        "## Statistics",
        "",
        f"- Skills: {stats['node_count']}",
        f"- Edges: {stats['edge_count']}",
        f"- Clusters: {stats['cluster_count']}",
        f"- Average degree: {stats['average_degree']:.2f}",
        f"- Density: {stats['density']:.4f}",
        "",
        "| Edge type | Count |",
        "|-----------|-------|",
    ]
    for kind, count in stats["edges_by_kind"].items():
        lines.append(f"| {kind} | {count} |")

    ranked = sorted(store.all_nodes(), key=lambda n: (-n.leverage_score, n.id))[:top]
    lines += [
        "",
        "## High Leverage Skills",
        "",
        "| Skill | Phase | Leverage | In | Out | Runs |",
        "|-------|-------|----------|----|-----|------|",
    ]
    for node in ranked:
        phase = node.phase.value if node.phase else "-"
        lines.append(
            f"| {node.id} | {phase} | {node.leverage_score:.3f} | "
            f"{node.in_degree} | {node.out_degree} | {node.usage_count} |"
        )

    lines += ["", "## Clusters", ""]
    clusters = store.clusters()
    if not clusters:
        lines.append("_No tag clusters._")
    for cluster in clusters:
        marker = " (weak)" if cluster.is_weak else ""
        lines.append(
            f"- `{cluster.tag}` [{_bar(cluster.cohesion)}] {cluster.cohesion:.2f} "
            f"- {cluster.size} skills{marker}"
        )

    report = store.gap_report
    lines += ["", "## Gaps", ""]
    if report is None or not report.has_findings():
        lines.append("_No gaps found._")
    else:
        if report.missing_dependencies:
            lines.append("### Missing dependencies")
            lines.append("")
            lines.extend(f"- {m.source_id} -> {m.target_id}" for m in report.missing_dependencies)
            lines.append("")
        if report.isolated_skills:
            lines.append(f"**Isolated:** {', '.join(report.isolated_skills)}")
            lines.append("")
        if report.unused_skills:
            lines.append(
                f"**Unused ({report.unused_after_days}d):** {', '.join(report.unused_skills)}"
            )
            lines.append("")
        if report.weak_clusters:
            weak = ", ".join(f"{c.tag} ({c.cohesion:.2f})" for c in report.weak_clusters)
            lines.append(f"**Weak clusters:** {weak}")
            lines.append("")
        if report.phase_gaps:
            phases = ", ".join(f"{g.phase.value} ({g.count})" for g in report.phase_gaps)
            lines.append(f"**Phase gaps:** {phases}")
            lines.append("")

    lines.append("")
    return "\n".join(lines)


def to_csv(store: GraphStore) -> str:
    """Generate a CSV export with one row per skill, sorted by id."""
    output = io.StringIO()
    writer = csv.writer(output, quoting=csv.QUOTE_MINIMAL)
    writer.writerow(
        [
            "id",
            "name",
            "phase",
            "tags",
            "version",
            "depends_on",
            "usage_count",
            "last_used_at",
            "leverage_score",
            "in_degree",
            "out_degree",
        ]
    )
    for node in sorted(store.all_nodes(), key=lambda n: n.id):
        writer.writerow(
            [
                node.id,
                node.name,
                node.phase.value if node.phase else "",
                "; ".join(node.tags),
                node.version,
                "; ".join(node.depends_on),
                node.usage_count,
                node.last_used_at.isoformat() if node.last_used_at else "",
                f"{node.leverage_score:.6f}",
                node.in_degree,
                node.out_degree,
            ]
        )
    return output.getvalue()


__all__ = [
    "serialize_node",
    "serialize_edge",
    "serialize_cluster",
    "serialize_gap_report",
    "serialize_graph",
    "deserialize_graph",
    "save_snapshot",
    "load_snapshot",
    "to_markdown",
    "to_csv",
]
