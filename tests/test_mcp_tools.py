"""Tests for the MCP tool functions.

The ``_``-prefixed functions hold all tool logic and do not need the MCP
package; only ``create_server`` does.
"""

from __future__ import annotations

import pytest

from skillgraph.mcp.server import (
    MCP_AVAILABLE,
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
from skillgraph.sources.models import StaticSkillRegistry
from tests.core.graph_test_helpers import make_skill
from tests.project_fixture import sample_service


@pytest.fixture
def service():
    return sample_service()


class TestErrorResults:
    def test_not_built(self):
        result = _get_stats(KnowledgeGraphService(StaticSkillRegistry()))

        assert result["success"] is False
        assert result["error_type"] == "GraphNotBuiltError"

    def test_unknown_node(self, service):
        result = _get_node(service, "nope")

        assert result == {
            "success": False,
            "error": "Skill 'nope' not found",
            "error_type": "NodeNotFoundError",
        }

    def test_bad_arguments(self, service):
        assert _get_edges_by_type(service, "teleports_to")["error_type"] == "ValueError"
        assert _get_nodes_by_phase(service, "LAUNCH")["success"] is False
        assert _get_neighbors(service, "build", direction="sideways")["success"] is False


class TestQueries:
    def test_status_and_stats(self, service):
        status = _get_graph_status(service)

        assert status["success"] is True
        assert status["stats"]["node_count"] == 5
        assert status["last_mutation"]["operation"] == "build"
        assert _get_stats(service)["stats"] == status["stats"]

    def test_full_graph(self, service):
        graph = _get_knowledge_graph(service)["graph"]

        assert graph["schemaVersion"]
        assert len(graph["nodes"]) == 5

    def test_node_with_edges(self, service):
        result = _get_node(service, "build")

        assert result["node"]["dependsOn"] == ["plan"]
        assert {"source": "build", "target": "plan"}.items() <= result["outgoing"][0].items()

    def test_filters(self, service):
        assert [n["id"] for n in _get_nodes_by_phase(service, "verify")["nodes"]] == ["verify"]
        assert _get_nodes_by_tag(service, "core")["count"] == 3
        assert _get_edges_by_type(service, "improved_by")["count"] == 1

    def test_neighbors(self, service):
        result = _get_neighbors(service, "build", "sequence", "in")

        assert [n["id"] for n in result["neighbors"]] == ["plan"]

    def test_path(self, service):
        found = _find_path(service, "plan", "verify")
        missing = _find_path(service, "docs", "plan")

        assert found["found"] and found["length"] == 1
        assert missing == {"success": True, "found": False, "path": [], "edges": [], "length": None}

    def test_clusters(self, service):
        assert [c["tag"] for c in _get_clusters(service)["clusters"]] == ["core", "planning", "quality"]
        assert _get_cluster_by_tag(service, "quality")["cluster"]["members"] == ["review", "verify"]
        assert _get_cluster_by_tag(service, "nope")["success"] is False

    def test_rankings(self, service):
        top = _get_high_leverage_skills(service, 2)

        assert top["count"] == 2
        assert top["skills"][0]["leverageScore"] >= top["skills"][1]["leverageScore"]
        assert [n["id"] for n in _get_isolated_skills(service)["skills"]] == ["docs"]

    def test_unused(self, service):
        result = _get_unused_skills(service)

        assert result["days"] == 30
        assert [n["id"] for n in result["skills"]] == ["docs", "review"]

    def test_gaps(self, service):
        result = _analyze_gaps(service)

        assert result["has_findings"] is True
        assert result["gaps"]["missingDependencies"] == [{"source": "docs", "target": "ghost"}]


class TestMutations:
    def test_build_refresh_remove(self, service):
        service.registry.put(make_skill("docs", phase="document", depends_on=["plan"]))

        assert _build_graph(service)["stats"]["node_count"] == 5
        refreshed = _refresh_node(service, "docs")
        removed = _remove_node(service, "review")

        assert refreshed["node"]["dependsOn"] == ["plan"]
        assert removed["removed"] == "review"
        assert removed["stats"]["node_count"] == 4

        log = _get_mutation_log(service, limit=2)
        assert log["count"] == 3
        assert [m["operation"] for m in log["mutations"]] == ["remove_node", "refresh_node"]

    def test_remove_unknown(self, service):
        assert _remove_node(service, "nope")["error_type"] == "NodeNotFoundError"


@pytest.mark.skipif(not MCP_AVAILABLE, reason="MCP dependencies not installed")
def test_create_server_registers_tools(service):
    from skillgraph.mcp.server import create_server

    server = create_server(service=service)

    assert server.name == "skillgraph"


@pytest.mark.skipif(not MCP_AVAILABLE, reason="MCP dependencies not installed")
def test_package_create_server_forwards_service(service):
    from skillgraph.mcp import create_server

    server = create_server(service=service)

    assert server.name == "skillgraph"


@pytest.mark.skipif(MCP_AVAILABLE, reason="MCP dependencies installed")
def test_package_create_server_requires_extra(service):
    from skillgraph.mcp import create_server

    with pytest.raises(ImportError, match="skillgraph\\[mcp\\]"):
        create_server(service=service)
