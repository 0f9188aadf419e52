"""Tests for the Flask REST API server."""

from __future__ import annotations

import pytest

pytest.importorskip("flask")
pytest.importorskip("flask_cors")

from skillgraph.server.app import create_app  # noqa: E402
from skillgraph.service import KnowledgeGraphService  # noqa: E402
from skillgraph.sources.models import StaticSkillRegistry  # noqa: E402
from tests.project_fixture import sample_service  # noqa: E402

# ─────────────────────────────────────────────────────────────────────────────
# Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def service():
    return sample_service()


@pytest.fixture
def client(service):
    app = create_app(service)
    app.config["TESTING"] = True
    return app.test_client()


# ─────────────────────────────────────────────────────────────────────────────
# Read-only endpoints
# ─────────────────────────────────────────────────────────────────────────────


class TestReadEndpoints:
    def test_health(self, client):
        data = client.get("/api/health").get_json()

        assert data["ok"] is True
        assert data["graph_built"] is True

    def test_cors_header(self, client):
        resp = client.get("/api/stats", headers={"Origin": "http://localhost:3000"})

        assert resp.headers.get("Access-Control-Allow-Origin") in ("*", "http://localhost:3000")

    def test_stats(self, client):
        resp = client.get("/api/stats")

        assert resp.status_code == 200
        assert resp.get_json()["stats"]["node_count"] == 5

    def test_node_found_and_missing(self, client):
        assert client.get("/api/node/build").get_json()["node"]["id"] == "build"

        resp = client.get("/api/node/nope")
        assert resp.status_code == 404
        assert resp.get_json()["error_type"] == "NodeNotFoundError"

    def test_neighbors_with_filters(self, client):
        resp = client.get("/api/neighbors/build?type=sequence&direction=out")

        assert [n["id"] for n in resp.get_json()["neighbors"]] == ["verify"]

    def test_bad_edge_type_is_400(self, client):
        assert client.get("/api/edges/teleports_to").status_code == 400

    def test_path(self, client):
        assert client.get("/api/path?from=plan&to=verify").get_json()["length"] == 1
        assert client.get("/api/path?from=plan").status_code == 400

    def test_leverage_limit(self, client):
        assert client.get("/api/leverage?limit=2").get_json()["count"] == 2
        assert client.get("/api/leverage?limit=abc").status_code == 400

    def test_unused_days(self, client):
        data = client.get("/api/unused?days=400").get_json()

        assert data["days"] == 400
        assert [n["id"] for n in data["skills"]] == ["docs", "review"]

    def test_gaps_and_isolated(self, client):
        gaps = client.get("/api/gaps").get_json()["gaps"]

        assert gaps["isolatedSkills"] == ["docs"]
        assert [n["id"] for n in client.get("/api/isolated").get_json()["skills"]] == ["docs"]

    def test_clusters(self, client):
        assert client.get("/api/clusters").get_json()["count"] == 3
        assert client.get("/api/clusters/core").get_json()["cluster"]["tag"] == "core"
        assert client.get("/api/clusters/nope").status_code == 404

    def test_phase_and_tag(self, client):
        assert client.get("/api/phase/implement").get_json()["count"] == 1
        assert client.get("/api/tag/quality").get_json()["count"] == 2
        assert client.get("/api/phase/launch").status_code == 400

    def test_graph_and_mutations(self, client):
        assert len(client.get("/api/graph").get_json()["graph"]["edges"]) > 0
        assert client.get("/api/mutations").get_json()["count"] == 1


class TestNotBuilt:
    def test_conflict_before_build(self):
        client = create_app(KnowledgeGraphService(StaticSkillRegistry())).test_client()

        assert client.get("/api/health").get_json()["graph_built"] is False
        assert client.get("/api/stats").status_code == 409


# ─────────────────────────────────────────────────────────────────────────────
# Mutating endpoints
# ─────────────────────────────────────────────────────────────────────────────


class TestMutatingEndpoints:
    def test_remove(self, client):
        resp = client.post("/api/remove/review")

        assert resp.status_code == 200
        assert resp.get_json()["stats"]["node_count"] == 4
        assert client.get("/api/node/review").status_code == 404

    def test_refresh_unknown_is_404(self, client):
        assert client.post("/api/refresh/nope").status_code == 404

    def test_rebuild(self, client, service):
        service.registry.delete("docs")

        resp = client.post("/api/build")

        assert resp.get_json()["stats"]["node_count"] == 4

    def test_get_not_allowed_on_mutations(self, client):
        assert client.get("/api/build").status_code == 405
