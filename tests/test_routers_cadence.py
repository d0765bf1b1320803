"""
test_routers_cadence.py — Tests for routers/cadence.py

Covers cadence generation (201, 400, 404, 409, replace), the active
cadence view, step complete/skip with ownership and finality checks,
and the X-User-Id requirement.

Called by: pytest
Depends on: conftest.py (client, make_lead, make_step)
"""

from outreach.models import CadenceStep

START = {"start": "2024-01-01T00:00:00Z"}


# ── Generate ────────────────────────────────────────────────────────


class TestGenerateCadence:
    def test_creates_steps(self, client, test_lead):
        resp = client.post(f"/api/leads/{test_lead.id}/cadence", json=START)
        assert resp.status_code == 201
        data = resp.json()
        assert data["lead_id"] == test_lead.id
        assert [s["channel"] for s in data["steps"]] == ["phone", "email", "phone", "email", "phone"]
        assert data["steps"][0]["scheduled_at"].startswith("2024-01-01T14:00:00")
        assert data["steps"][0]["template_name"] == "cold_call"
        assert data["progress"] == {"completed": 0, "skipped": 0, "pending": 5, "total": 5, "percent": 0}

    def test_naive_start_read_as_utc(self, client, test_lead):
        resp = client.post(f"/api/leads/{test_lead.id}/cadence", json={"start": "2024-01-01T00:00:00"})
        assert resp.status_code == 201
        assert resp.json()["steps"][1]["scheduled_at"].startswith("2024-01-03T08:00:00")

    def test_body_optional(self, client, test_lead):
        resp = client.post(f"/api/leads/{test_lead.id}/cadence")
        assert resp.status_code == 201
        assert len(resp.json()["steps"]) == 5

    def test_unknown_lead(self, client):
        resp = client.post("/api/leads/99999/cadence", json=START)
        assert resp.status_code == 404
        assert resp.json()["error"] == "Lead not found"

    def test_no_channels(self, client, make_lead):
        lead = make_lead(phone=None, email=None)
        resp = client.post(f"/api/leads/{lead.id}/cadence", json=START)
        assert resp.status_code == 400
        assert resp.json()["error"] == "No contact channels available for this lead"

    def test_conflict_then_replace(self, client, test_lead, db_session):
        assert client.post(f"/api/leads/{test_lead.id}/cadence", json=START).status_code == 201

        resp = client.post(f"/api/leads/{test_lead.id}/cadence", json=START)
        assert resp.status_code == 409
        assert "already has an active cadence" in resp.json()["error"]

        resp = client.post(f"/api/leads/{test_lead.id}/cadence", json={**START, "replace": True})
        assert resp.status_code == 201
        assert db_session.query(CadenceStep).count() == 10
        assert db_session.query(CadenceStep).filter(CadenceStep.skipped.is_(True)).count() == 5

    def test_requires_user(self, client, test_lead):
        resp = client.post(f"/api/leads/{test_lead.id}/cadence", json=START, headers={"X-User-Id": ""})
        assert resp.status_code == 401
        assert resp.json()["error"] == "Not authenticated"


# ── View ────────────────────────────────────────────────────────────


class TestGetCadence:
    def test_empty(self, client, test_lead):
        resp = client.get(f"/api/leads/{test_lead.id}/cadence")
        assert resp.status_code == 200
        assert resp.json()["steps"] == []
        assert resp.json()["progress"]["total"] == 0

    def test_progress_after_complete(self, client, test_lead):
        steps = client.post(f"/api/leads/{test_lead.id}/cadence", json=START).json()["steps"]
        client.post(f"/api/cadence-steps/{steps[0]['id']}/complete")
        client.post(f"/api/cadence-steps/{steps[1]['id']}/skip")

        data = client.get(f"/api/leads/{test_lead.id}/cadence").json()
        assert data["progress"]["completed"] == 1
        assert data["progress"]["skipped"] == 1
        assert data["progress"]["percent"] == 40
        assert data["steps"][0]["completed_at"] is not None
        assert data["steps"][1]["skipped"] is True


# ── Step transitions ────────────────────────────────────────────────


class TestStepTransitions:
    def test_complete(self, client, test_lead, make_step):
        step = make_step(test_lead)
        resp = client.post(f"/api/cadence-steps/{step.id}/complete")
        assert resp.status_code == 200
        assert resp.json()["completed_at"] is not None

    def test_skip(self, client, test_lead, make_step):
        step = make_step(test_lead)
        resp = client.post(f"/api/cadence-steps/{step.id}/skip")
        assert resp.status_code == 200
        assert resp.json()["skipped"] is True

    def test_closed_step_conflict(self, client, test_lead, make_step):
        step = make_step(test_lead)
        client.post(f"/api/cadence-steps/{step.id}/skip")
        assert client.post(f"/api/cadence-steps/{step.id}/complete").status_code == 409
        assert client.post(f"/api/cadence-steps/{step.id}/skip").status_code == 409

    def test_unknown_step(self, client):
        resp = client.post("/api/cadence-steps/424242/complete")
        assert resp.status_code == 404
        assert resp.json()["error"] == "Cadence step not found"

    def test_other_users_step(self, client, test_lead, make_step):
        step = make_step(test_lead, user_id="user-bob")
        resp = client.post(f"/api/cadence-steps/{step.id}/skip")
        assert resp.status_code == 403
        assert resp.json()["error"] == "Not your cadence step"
