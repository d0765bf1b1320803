"""
test_routers_activities.py — Tests for routers/activities.py

Covers activity logging (auto-advance, step completion, validation),
the activity list with private-note visibility, and the best-time panel.

Called by: pytest
Depends on: conftest.py (client, make_lead, make_step, make_activity)
"""

from datetime import datetime, timedelta, timezone

from outreach.models import PipelineHistory


class TestLogActivity:
    def test_log_call(self, client, test_lead, make_step):
        step = make_step(test_lead, channel="phone")
        resp = client.post(
            f"/api/leads/{test_lead.id}/activities",
            json={"activity_type": "cold_call", "outcome": "connected", "notes": "  talked to Tony  ", "duration_sec": 95},
        )
        assert resp.status_code == 201
        data = resp.json()
        assert data["previous_stage"] == "cold"
        assert data["new_stage"] == "contacted"
        assert data["completed_step_id"] == step.id
        assert data["activity"]["channel"] == "phone"
        assert data["activity"]["notes"] == "talked to Tony"
        assert data["activity"]["user_id"] == "user-alice"

    def test_auto_advance_recorded(self, client, make_lead, db_session):
        lead = make_lead(pipeline_stage="contacted")
        resp = client.post(
            f"/api/leads/{lead.id}/activities",
            json={"activity_type": "follow_up_call", "outcome": "meeting_set"},
        )
        assert resp.json()["new_stage"] == "hot"
        history = db_session.query(PipelineHistory).one()
        assert history.reason == "auto:meeting_set"

    def test_occurred_at_kept(self, client, test_lead):
        resp = client.post(
            f"/api/leads/{test_lead.id}/activities",
            json={"activity_type": "cold_email", "occurred_at": "2024-01-03T09:15:00"},
        )
        assert resp.json()["activity"]["occurred_at"].startswith("2024-01-03T09:15:00")

    def test_unknown_lead(self, client):
        resp = client.post("/api/leads/99999/activities", json={"activity_type": "cold_call"})
        assert resp.status_code == 404

    def test_invalid_values(self, client, test_lead):
        url = f"/api/leads/{test_lead.id}/activities"
        assert client.post(url, json={"activity_type": "smoke_signal"}).status_code == 422
        assert client.post(url, json={"activity_type": "cold_call", "outcome": "maybe"}).status_code == 422
        assert client.post(url, json={"activity_type": "cold_call", "duration_sec": -1}).status_code == 422

    def test_validation_error_shape(self, client, test_lead):
        resp = client.post(f"/api/leads/{test_lead.id}/activities", json={})
        data = resp.json()
        assert data["error"] == "Validation error"
        assert data["status_code"] == 422
        assert data["detail"][0]["loc"][-1] == "activity_type"

    def test_requires_user(self, client, test_lead):
        resp = client.post(
            f"/api/leads/{test_lead.id}/activities",
            json={"activity_type": "cold_call"},
            headers={"X-User-Id": "   "},
        )
        assert resp.status_code == 401


class TestListActivities:
    def test_private_hidden_from_others(self, client, test_lead, make_activity):
        now = datetime.now(timezone.utc)
        make_activity(test_lead, user_id="user-bob", is_private=True, notes="bob only", occurred_at=now)
        mine = make_activity(test_lead, is_private=True, occurred_at=now - timedelta(hours=1))
        shared = make_activity(test_lead, user_id="user-bob", occurred_at=now - timedelta(hours=2))

        resp = client.get(f"/api/leads/{test_lead.id}/activities")
        assert resp.status_code == 200
        assert [a["id"] for a in resp.json()] == [mine.id, shared.id]

    def test_limit(self, client, test_lead, make_activity):
        for _ in range(3):
            make_activity(test_lead)
        assert len(client.get(f"/api/leads/{test_lead.id}/activities?limit=2").json()) == 2

    def test_unknown_lead(self, client):
        assert client.get("/api/leads/99999/activities").status_code == 404


class TestBestTime:
    def test_panel(self, client, test_lead):
        resp = client.get(f"/api/leads/{test_lead.id}/timing")
        assert resp.status_code == 200
        data = resp.json()
        assert data["lead_id"] == test_lead.id
        assert data["business_type"] == "restaurant"
        assert 0 <= data["current"]["score"] <= 1
        assert data["current"]["label"] in ("Great time", "Good time", "OK", "Off-peak")
        assert data["next_window"]["window"]["start_hour"] in (9.0, 14.0, 10.0)
        assert [w["day_label"] for w in data["windows"]] == ["Tue-Thu", "Mon-Thu"]
        assert data["learned_slots"] == []

    def test_learns_from_calls(self, client, test_lead, make_activity):
        tuesday = datetime(2024, 1, 2, 10, 15, tzinfo=timezone.utc)
        for outcome in ("connected", "connected", "no_answer", "connected", "voicemail"):
            make_activity(test_lead, outcome=outcome, occurred_at=tuesday)

        slots = client.get(f"/api/leads/{test_lead.id}/timing").json()["learned_slots"]
        assert slots == [
            {"day_of_week": 2, "hour": 10, "total_calls": 5, "connects": 3, "connect_rate": 0.6},
        ]

    def test_unknown_lead(self, client):
        assert client.get("/api/leads/99999/timing").status_code == 404

    def test_requires_user(self, client, test_lead):
        assert client.get(f"/api/leads/{test_lead.id}/timing", headers={"X-User-Id": ""}).status_code == 401
