"""skillgraph.server.app - Flask app factory and REST API routes.

This is a THIN REST wrapper: all logic delegates to pure functions in
``skillgraph.mcp.server``. No graph logic is duplicated here.

State pattern matches the MCP server:
    _state = {"service": service, "start_time": time.time()}
"""

from __future__ import annotations

import time
from typing import Any

from flask import Flask, jsonify, request
from flask_cors import CORS

from skillgraph import __version__
from skillgraph.mcp.server import (
    _analyze_gaps,
    _build_graph,
    _find_path,
    _get_cluster_by_tag,
    _get_clusters,
    _get_edges_by_type,
    _get_graph_status,
    _get_high_leverage_skills,
    _get_isolated_skills,
    _get_knowledge_graph,
    _get_mutation_log,
    _get_neighbors,
    _get_node,
    _get_nodes_by_phase,
    _get_nodes_by_tag,
    _get_stats,
    _get_unused_skills,
    _refresh_node,
    _remove_node,
)
from skillgraph.service import KnowledgeGraphService

# error_type -> HTTP status; anything else unsuccessful is a 400
_ERROR_STATUS = {
    "NodeNotFoundError": 404,
    "GraphNotBuiltError": 409,
    "SourceReadError": 502,
}


def _respond(result: dict[str, Any]):
    if result.get("success", True):
        return jsonify(result)
    return jsonify(result), _ERROR_STATUS.get(result.get("error_type", ""), 400)


def _int_arg(name: str, default: int | None) -> int | None:
    raw = request.args.get(name)
    if raw is None or raw == "":
        return default
    return int(raw)


def create_app(service: KnowledgeGraphService) -> Flask:
    """Create the Flask application with REST API routes.

    Args:
        service: A service whose graph is built or loaded (or will be via
            ``POST /api/build``).

    Returns:
        Configured Flask application.
    """
    app = Flask(__name__)
    CORS(app)

    _state: dict[str, Any] = {
        "service": service,
        "start_time": time.time(),
    }

    # ─────────────────────────────────────────────────────────────────
    # Read-only GET endpoints
    # ─────────────────────────────────────────────────────────────────

    @app.route("/api/health")
    def api_health():
        """GET /api/health - Liveness and whether a graph is published."""
        return jsonify(
            {
                "ok": True,
                "version": __version__,
                "graph_built": _state["service"].is_built,
                "uptime": time.time() - _state["start_time"],
            }
        )

    @app.route("/api/status")
    def api_status():
        """GET /api/status - Build time, stats and last mutation."""
        return _respond(_get_graph_status(_state["service"]))

    @app.route("/api/stats")
    def api_stats():
        return _respond(_get_stats(_state["service"]))

    @app.route("/api/graph")
    def api_graph():
        """GET /api/graph - Full snapshot document."""
        return _respond(_get_knowledge_graph(_state["service"]))

    @app.route("/api/node/<node_id>")
    def api_node(node_id: str):
        return _respond(_get_node(_state["service"], node_id))

    @app.route("/api/neighbors/<node_id>")
    def api_neighbors(node_id: str):
        """GET /api/neighbors/<id>?type=<edge type>&direction=out|in|both"""
        return _respond(
            _get_neighbors(
                _state["service"],
                node_id,
                request.args.get("type") or None,
                request.args.get("direction", "both"),
            )
        )

    @app.route("/api/path")
    def api_path():
        """GET /api/path?from=<id>&to=<id> - Shortest structural path."""
        from_id = request.args.get("from", "")
        to_id = request.args.get("to", "")
        if not from_id or not to_id:
            return jsonify({"success": False, "error": "from and to are required"}), 400
        return _respond(_find_path(_state["service"], from_id, to_id))

    @app.route("/api/leverage")
    def api_leverage():
        """GET /api/leverage?limit=<n> - Top skills by leverage."""
        try:
            limit = _int_arg("limit", 10)
        except ValueError:
            return jsonify({"success": False, "error": "limit must be an integer"}), 400
        return _respond(_get_high_leverage_skills(_state["service"], limit))

    @app.route("/api/isolated")
    def api_isolated():
        return _respond(_get_isolated_skills(_state["service"]))

    @app.route("/api/unused")
    def api_unused():
        """GET /api/unused?days=<n> - Skills never run or stale."""
        try:
            days = _int_arg("days", None)
        except ValueError:
            return jsonify({"success": False, "error": "days must be an integer"}), 400
        return _respond(_get_unused_skills(_state["service"], days))

    @app.route("/api/gaps")
    def api_gaps():
        return _respond(_analyze_gaps(_state["service"]))

    @app.route("/api/clusters")
    def api_clusters():
        return _respond(_get_clusters(_state["service"]))

    @app.route("/api/clusters/<tag>")
    def api_cluster(tag: str):
        result = _get_cluster_by_tag(_state["service"], tag)
        if not result.get("success"):
            return jsonify(result), 404
        return jsonify(result)

    @app.route("/api/phase/<phase>")
    def api_phase(phase: str):
        return _respond(_get_nodes_by_phase(_state["service"], phase))

    @app.route("/api/tag/<tag>")
    def api_tag(tag: str):
        return _respond(_get_nodes_by_tag(_state["service"], tag))

    @app.route("/api/edges/<kind>")
    def api_edges(kind: str):
        return _respond(_get_edges_by_type(_state["service"], kind))

    @app.route("/api/mutations")
    def api_mutations():
        try:
            limit = _int_arg("limit", 50)
        except ValueError:
            return jsonify({"success": False, "error": "limit must be an integer"}), 400
        return _respond(_get_mutation_log(_state["service"], limit))

    # ─────────────────────────────────────────────────────────────────
    # Mutating POST endpoints
    # ─────────────────────────────────────────────────────────────────

    @app.route("/api/build", methods=["POST"])
    def api_build():
        """POST /api/build - Full rebuild from the sources."""
        return _respond(_build_graph(_state["service"]))

    @app.route("/api/refresh/<node_id>", methods=["POST"])
    def api_refresh(node_id: str):
        """POST /api/refresh/<id> - Re-read one skill and recompute its edges."""
        return _respond(_refresh_node(_state["service"], node_id))

    @app.route("/api/remove/<node_id>", methods=["POST"])
    def api_remove(node_id: str):
        """POST /api/remove/<id> - Delete a skill and its edges."""
        return _respond(_remove_node(_state["service"], node_id))

    return app
