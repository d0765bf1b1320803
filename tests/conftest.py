"""
conftest.py — Shared Test Fixtures for the outreach API

Provides an in-memory SQLite database, a FastAPI TestClient that sends an
X-User-Id header, and factory fixtures for leads, cadence steps and
activities.

Business Rules:
- All tests run against an isolated in-memory DB
- Auth is the upstream proxy's job; tests just send X-User-Id
- Each test function gets fresh tables

Called by: all test files via pytest autodiscovery
Depends on: outreach.models (Base), outreach.database (get_db)
"""

import os

os.environ["TESTING"] = "1"  # Must be set before importing outreach modules
os.environ.setdefault("DATABASE_URL", "sqlite://")

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from outreach.models import Activity, Base, CadenceStep, Lead
from outreach.services.call_timing import TimingModel
from outreach.timing_tables import DEFAULT_CALL_WINDOWS

# ── In-memory SQLite engine ──────────────────────────────────────────

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@event.listens_for(engine, "connect")
def _enable_fk(dbapi_conn, _):
    """SQLite ignores FKs by default — turn them on."""
    dbapi_conn.execute("PRAGMA foreign_keys=ON")


USER_ID = "user-alice"


# ── Fixtures ─────────────────────────────────────────────────────────


@pytest.fixture(autouse=True)
def db_session():
    """Create all tables, yield a session, then tear down."""
    Base.metadata.create_all(bind=engine)
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def utc_timing() -> TimingModel:
    """Timing model over the built-in windows, business zone UTC."""
    return TimingModel(DEFAULT_CALL_WINDOWS, timezone.utc)


@pytest.fixture()
def make_lead(db_session: Session):
    """Factory: persist a Lead with sensible defaults."""

    def _make(**kwargs) -> Lead:
        defaults = {
            "name": "Tony's Pizza & Pasta",
            "category": "Pizza restaurant",
            "phone": "+1 555 0100",
            "email": "tony@example.com",
            "pipeline_stage": "cold",
            "assigned_to": USER_ID,
            "created_at": datetime.now(timezone.utc),
        }
        defaults.update(kwargs)
        lead = Lead(**defaults)
        db_session.add(lead)
        db_session.commit()
        db_session.refresh(lead)
        return lead

    return _make


@pytest.fixture()
def test_lead(make_lead) -> Lead:
    return make_lead()


@pytest.fixture()
def make_step(db_session: Session):
    """Factory: persist a CadenceStep for a lead."""

    def _make(lead: Lead, **kwargs) -> CadenceStep:
        defaults = {
            "lead_id": lead.id,
            "user_id": USER_ID,
            "batch_id": "batch-test",
            "step_number": 1,
            "channel": "phone",
            "scheduled_at": datetime.now(timezone.utc),
            "template_name": "cold_call",
        }
        defaults.update(kwargs)
        step = CadenceStep(**defaults)
        db_session.add(step)
        db_session.commit()
        db_session.refresh(step)
        return step

    return _make


@pytest.fixture()
def make_activity(db_session: Session):
    """Factory: persist an Activity for a lead."""

    def _make(lead: Lead, **kwargs) -> Activity:
        defaults = {
            "lead_id": lead.id,
            "user_id": USER_ID,
            "activity_type": "cold_call",
            "channel": "phone",
            "occurred_at": datetime.now(timezone.utc),
        }
        defaults.update(kwargs)
        activity = Activity(**defaults)
        db_session.add(activity)
        db_session.commit()
        db_session.refresh(activity)
        return activity

    return _make


@pytest.fixture()
def client(db_session: Session) -> TestClient:
    """FastAPI TestClient using the test session, acting as USER_ID."""
    from outreach.database import get_db
    from outreach.main import app

    def _override_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_db

    with TestClient(app, headers={"X-User-Id": USER_ID}) as c:
        yield c

    app.dependency_overrides.clear()
