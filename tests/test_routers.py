"""HTTP tests for the schedule and check-in routers."""

import pytest
from unittest.mock import AsyncMock
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app import dependencies
from app.config import Settings
from app.routers import checkin_router, schedule_router


WEEKLY = {
    "frequency": "weekly",
    "openWindow": {"kind": "specific_day", "day": "monday", "time": "09:00"},
    "closeWindow": {"kind": "specific_day", "day": "tuesday", "time": "17:00"},
}


@pytest.fixture
def client(mock_db, mock_collection):
    mock_collection.find_one = AsyncMock(return_value=None)
    dependencies.init_all_services(mock_db, Settings(DRAFT_STORAGE="memory"))

    app = FastAPI()
    app.include_router(schedule_router, prefix="/api/v1")
    app.include_router(checkin_router, prefix="/api/v1")

    yield TestClient(app)
    dependencies.shutdown_services()


# ─────────────────────────────────────────────────────────────────
# Schedule
# ─────────────────────────────────────────────────────────────────


class TestScheduleRoutes:

    def test_validate_reports_field_errors(self, client):
        response = client.post("/api/v1/schedule/validate", json={"config": {"frequency": "weekly"}})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"]["valid"] is False
        assert "openWindow" in body["data"]["errors"]

    def test_window_preview(self, client):
        response = client.post("/api/v1/schedule/window", json={
            "config": WEEKLY,
            "now": "2024-03-19T12:00:00Z",
        })

        assert response.status_code == 200
        window = response.json()["data"]
        assert window["openInstant"].startswith("2024-03-18T09:00:00")
        assert window["closeInstant"].startswith("2024-03-19T17:00:00")

    def test_window_for_invalid_config_is_422(self, client):
        response = client.post("/api/v1/schedule/window", json={"config": {"frequency": "weekly"}})

        assert response.status_code == 422
        assert response.json()["detail"]["code"] == "INVALID_SCHEDULE_CONFIG"

    def test_upcoming_count_is_bounded(self, client):
        ok = client.post("/api/v1/schedule/upcoming", json={"config": WEEKLY, "count": 3})
        too_many = client.post("/api/v1/schedule/upcoming", json={"config": WEEKLY, "count": 100})

        assert len(ok.json()["data"]["windows"]) == 3
        assert too_many.status_code == 422

    def test_presets(self, client):
        response = client.get("/api/v1/schedule/presets")

        assert {p["id"] for p in response.json()["data"]} == {"weekly", "fortnightly", "monthly"}


# ─────────────────────────────────────────────────────────────────
# Check-in
# ─────────────────────────────────────────────────────────────────


class TestCheckInRoutes:

    def test_instance_status(self, client):
        response = client.post("/api/v1/checkin/instances/status", json={
            "templateId": "t1",
            "clientId": "c1",
            "config": WEEKLY,
            "now": "2024-03-18T10:00:00Z",
        })

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["instance"]["status"] == "open"
        assert data["acceptsSubmission"] is True

    def test_draft_round_trip(self, client):
        saved = client.put("/api/v1/checkin/drafts/c1:t1", json={
            "payload": {"notes": "Halfway there"},
            "immediate": True,
        })
        loaded = client.post("/api/v1/checkin/drafts/c1:t1/load", json={})

        assert saved.json()["data"] == {"saved": True, "pending": False, "unsaved": False}
        assert loaded.json()["data"]["payload"]["notes"] == "Halfway there"

    def test_clear_draft(self, client):
        client.put("/api/v1/checkin/drafts/c1:t1", json={"payload": {"notes": "x"}, "immediate": True})

        cleared = client.delete("/api/v1/checkin/drafts/c1:t1")
        loaded = client.post("/api/v1/checkin/drafts/c1:t1/load", json={"initialData": {"notes": "seed"}})

        assert cleared.json() == {"success": True, "message": "Draft cleared"}
        assert loaded.json()["data"]["payload"]["notes"] == "seed"

    def test_submit_with_field_errors_is_422(self, client):
        response = client.post("/api/v1/checkin/drafts/c1:t1/submit", json={
            "templateId": "t1",
            "clientId": "c1",
            "config": WEEKLY,
            "payload": {
                "goals": [{"id": "g1", "name": ""}],
                "achievements": [{"id": "a1", "title": ""}],
            },
        })

        assert response.status_code == 422
        detail = response.json()["detail"]
        assert detail["code"] == "CHECKIN_VALIDATION_FAILED"
        assert set(detail["details"]["errors"]) == {"Goal name is required", "Achievement title is required"}
        assert detail["details"]["groups"]["goals"] == {"g1": ["Goal name is required"]}
