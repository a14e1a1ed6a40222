"""Tests for the FastAPI endpoints."""

from __future__ import annotations

from datetime import date
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from dental_hub.sdr.manager import CampaignManager
from dental_hub.server import app


@pytest.fixture
def campaigns():
    return CampaignManager("Test Dental", clock=lambda: date(2026, 10, 19))


@pytest.fixture
def client(mock_knowledge, campaigns):
    """Test client with app state wired up the way the lifespan does it."""
    app.state.knowledge = mock_knowledge
    app.state.campaigns = campaigns
    yield TestClient(app)
    app.state.knowledge = None
    app.state.campaigns = None


class TestServiceEndpoints:
    def test_health_returns_ok(self, client):
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "service": "dental-hub-brain"}

    def test_root(self, client):
        assert client.get("/").json()["health"] == "/api/health"

    def test_request_id_is_echoed(self, client):
        response = client.get("/api/health", headers={"X-Request-ID": "req-42"})
        assert response.headers["X-Request-ID"] == "req-42"

    def test_request_id_is_generated(self, client):
        assert client.get("/api/health").headers["X-Request-ID"]


class TestConsultEndpoint:
    def test_consult_returns_sections(self, client):
        response = client.post("/api/consult", json={"query": "How is our production?"})

        assert response.status_code == 200
        data = response.json()
        assert [s["type"] for s in data["sections"]] == [
            "kpi-analysis", "recommendations", "deep-seek-context",
        ]
        assert data["sources"] == ["Knowledge Base"]

    def test_consult_validates_empty_query(self, client):
        assert client.post("/api/consult", json={"query": ""}).status_code == 422

    def test_consult_without_app_state_is_unavailable(self, client):
        app.state.knowledge = None
        assert client.post("/api/consult", json={"query": "hi"}).status_code == 503


class TestAnalysisEndpoints:
    def test_kpi_analysis_defaults_to_snapshot(self, client):
        response = client.post("/api/kpi-analysis", json={})

        assert response.status_code == 200
        data = response.json()
        assert data["analysis"]["areas_for_improvement"] == ["noShows"]
        assert [r["title"] for r in data["recommendations"]] == [
            "Reduce Appointment No-Shows",
            "Maintain Practice Excellence",
        ]

    def test_kpi_analysis_with_supplied_metrics(self, client):
        metrics = {
            "timeframe": "Q3",
            "production": 100000,
            "collections": 147500,
            "hygiene": 78000,
            "new_patients": 50,
            "active_patients": 1300,
            "recalls": {"sent": 250, "confirmed": 200},
            "appointments": {"no_shows": 2, "cancellations": 1},
        }
        data = client.post("/api/kpi-analysis", json={"metrics": metrics}).json()
        assert data["analysis"]["areas_for_improvement"] == ["production"]
        assert data["analysis"]["summary"].startswith("Practice KPI Analysis (Q3):")

    def test_kpi_analysis_error_does_not_leak(self, client):
        with patch(
            "dental_hub.api.routes.DataAnalysisAgent.analyze_kpi",
            side_effect=RuntimeError("secret stack detail"),
        ):
            response = client.post("/api/kpi-analysis", json={})

        assert response.status_code == 500
        assert "secret" not in response.text

    def test_lab_cases(self, client):
        response = client.post("/api/lab-cases", json={"query": "crowns"})
        assert response.status_code == 200
        assert response.json()["summary"].startswith("Lab Case Summary (10 total cases)")


class TestSdrEndpoints:
    def _add(self, client, prospect_id="p1", campaign="coldOffer"):
        return client.post(
            "/api/sdr/prospects",
            json={"prospect": {"id": prospect_id, "first_name": "Jane"}, "campaign": campaign},
        )

    def test_add_prospect(self, client):
        response = self._add(client)
        assert response.status_code == 201
        assert response.json()["campaign"] == "coldOffer"
        assert response.json()["stage"] == 1

    def test_add_prospect_rejects_unknown_campaign(self, client):
        assert self._add(client, campaign="nope").status_code == 422

    def test_response_books_appointment(self, client, campaigns):
        self._add(client)
        response = client.post("/api/sdr/prospects/p1/responses", json={"message": "2pm works"})

        assert response.status_code == 200
        assert response.json()["action"] == "book_appointment"
        assert "2:00 PM" in response.json()["reply"]
        assert campaigns.prospects["p1"].data.appointment is not None

    def test_response_for_unknown_prospect_is_404(self, client):
        response = client.post("/api/sdr/prospects/ghost/responses", json={"message": "hi"})
        assert response.status_code == 404

    def test_power_hour(self, client):
        self._add(client, "a", "holding")
        self._add(client, "b", "holding")
        response = client.post("/api/sdr/power-hour", json={"count": 1})
        assert response.json() == {"processed": 1}

    def test_no_shows(self, client, campaigns):
        self._add(client)
        campaigns.book_appointment("p1", "4pm")
        response = client.post("/api/sdr/no-shows", json={"today": "2026-10-25"})
        assert response.json() == {"processed": 1}
        assert campaigns.prospects["p1"].current_campaign == "noShow"

    def test_sdr_without_app_state_is_unavailable(self, client):
        app.state.campaigns = None
        assert client.post("/api/sdr/power-hour", json={}).status_code == 503


def test_lifespan_builds_and_releases_shared_state():
    with TestClient(app) as client:
        assert isinstance(app.state.campaigns, CampaignManager)
        assert app.state.knowledge is not None
        assert client.get("/api/health").status_code == 200
    assert app.state.knowledge is None
    assert app.state.campaigns is None
