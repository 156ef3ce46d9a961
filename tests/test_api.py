"""HTTP layer via TestClient, with the agents stubbed at the coordinator."""

from __future__ import annotations

import httpx
import openai
import pytest
from fastapi.testclient import TestClient

import desertwatch.workflow as wf
from api.server import create_app
from desertwatch.session import DashboardSession


@pytest.fixture
def app_session():
    return DashboardSession()


@pytest.fixture
def client(app_session, store):
    with TestClient(create_app(session=app_session, store=store)) as c:
        yield c


def _rate_limit_error() -> openai.RateLimitError:
    request = httpx.Request("POST", "https://api.openai.com/v1/responses")
    response = httpx.Response(429, request=request)
    return openai.RateLimitError("Rate limit reached", response=response, body=None)


class TestReadEndpoints:
    def test_health(self, client):
        assert client.get("/health").json()["status"] == "healthy"

    def test_dashboard(self, client):
        body = client.get("/api/dashboard").json()
        assert body["facilities"] == 6
        assert body["severeDeserts"] == 3
        assert body["planDistribution"] == "Pending"
        assert len(body["recentAudit"]) == 4

    def test_reports_filtering(self, client):
        body = client.get("/api/reports", params={"search": "teaching"}).json()
        assert {r["id"] for r in body} == {"gh-tth", "gh-kbth", "gh-htb"}
        assert "facilityName" in body[0]

        body = client.get("/api/reports", params={"region": "Volta"}).json()
        assert [r["id"] for r in body] == ["gh-htb"]

    def test_radius_uses_session_location(self, client):
        assert len(client.get("/api/reports", params={"radius_km": 50}).json()) == 6
        client.put("/api/session/location", json={"lat": 9.4007, "lng": -0.8393})
        body = client.get("/api/reports", params={"radius_km": 50}).json()
        assert [r["id"] for r in body] == ["gh-tth"]

    def test_report_detail(self, client):
        body = client.get("/api/reports/gh-tth").json()
        assert body["report"]["facilityName"] == "Tamale Teaching Hospital"
        assert body["equipmentCounts"]["Offline"] == 1
        assert body["distanceKm"] is None

    def test_unknown_report_404(self, client):
        assert client.get("/api/reports/nope").status_code == 404
        assert client.post("/api/reports/nope/intervention").status_code == 404

    def test_map_and_geojson(self, client):
        layer = client.get("/api/map", params={"selected": "md-oti"}).json()
        assert len(layer["markers"]) == 6
        assert "dark_all" in layer["tiles"]["url"]
        assert client.get("/api/map", params={"selected": "md-none"}).status_code == 404

        fc = client.get("/api/map.geojson").json()
        assert fc["type"] == "FeatureCollection"
        assert len(fc["features"]) == 6

    def test_audit_filter(self, client):
        assert [log["id"] for log in client.get("/api/audit", params={"status": "warning"}).json()] == ["2", "5"]
        assert client.get("/api/audit", params={"status": "bogus"}).status_code == 422

    def test_document_empty_until_plan(self, client):
        assert client.get("/api/analysis/document").json()["html"] is None


class TestSessionEndpoints:
    def test_login_theme_logout(self, client):
        assert client.get("/api/session").json()["user"] is None

        body = client.post("/api/session/login").json()
        assert body["user"]["email"] == "operator@vip.layer"

        assert client.put("/api/session/theme", json={"theme": "light"}).json()["theme"] == "light"
        assert "light_all" in client.get("/api/map").json()["tiles"]["url"]

        body = client.post("/api/session/logout").json()
        assert body["user"] is None
        assert body["activeView"] == "dashboard"

    def test_bad_theme_and_location(self, client):
        assert client.put("/api/session/theme", json={"theme": "sepia"}).status_code == 422
        assert client.put("/api/session/location", json={"lat": 120, "lng": 0}).status_code == 422


class TestRunEndpoints:
    def test_workflow_requires_user(self, client, stub_agents):
        assert client.post("/api/workflow").status_code == 401

    def test_workflow(self, client, stub_agents, app_session):
        client.post("/api/session/login")
        body = client.post("/api/workflow").json()
        assert body["ok"] is True
        assert body["isThinking"] is False
        assert len(body["steps"]) == 5
        assert body["steps"][0]["status"] == "error"  # empty discovery
        assert body["plan"].startswith("## Plan")

        doc = client.get("/api/analysis/document").json()
        assert "<strong>Deploy</strong>" in doc["html"]
        assert doc["blocks"][0]["kind"] == "h2"
        assert client.get("/api/dashboard").json()["logicGrounding"] == "Verified"

    def test_workflow_busy_409(self, client, stub_agents, app_session):
        client.post("/api/session/login")
        app_session.begin_run()
        try:
            assert client.post("/api/workflow").status_code == 409
        finally:
            app_session.finish_run()

    def test_workflow_rate_limit_429(self, client, stub_agents, monkeypatch):
        client.post("/api/session/login")

        def limited(*args, **kwargs):
            raise _rate_limit_error()

        monkeypatch.setattr(wf, "run_parser_agent", limited)
        assert client.post("/api/workflow").status_code == 429

    def test_intervention(self, client, stub_agents):
        body = client.post("/api/reports/gh-swm/intervention").json()
        assert body["ok"] is True
        assert [s["agentName"] for s in body["steps"]] == ["Matcher", "Strategist"]
        assert body["plan"] == "## Answer"

    def test_query(self, client, stub_agents):
        body = client.post("/api/query", json={"question": "Where is dialysis weakest?"}).json()
        assert body["plan"] == "## Answer"
        assert body["groundingLinks"][0]["uri"] == "https://ghs.gov.gh"

    def test_blank_query_422(self, client, stub_agents):
        assert client.post("/api/query", json={"question": "  "}).status_code == 422

    def test_query_failure_500(self, client, monkeypatch):
        def boom(q, data):
            raise RuntimeError("inference core down")

        monkeypatch.setattr(wf, "run_query_agent", boom)
        resp = client.post("/api/query", json={"question": "anything"})
        assert resp.status_code == 500
        assert "inference core down" in resp.json()["detail"]

    def test_query_rate_limit_429(self, client, monkeypatch):
        def limited(q, data):
            raise _rate_limit_error()

        monkeypatch.setattr(wf, "run_query_agent", limited)
        assert client.post("/api/query", json={"question": "anything"}).status_code == 429
