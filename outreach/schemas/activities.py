"""
schemas/activities.py — Pydantic models for activity logging

Business Rules:
- activity_type, channel and outcome must be known values
- notes are trimmed; blank notes become null
- duration_sec cannot be negative
- a session log may name the cadence step it works (step_id)

Called by: routers/activities.py, routers/sessions.py
Depends on: pydantic, constants.py
"""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, Field, field_validator

from ..constants import ActivityType, Channel, Outcome


def _trimmed(v: str | None) -> str | None:
    if v is None:
        return None
    v = v.strip()
    return v or None


class ActivityCreate(BaseModel):
    activity_type: ActivityType
    channel: Channel | None = None
    outcome: Outcome | None = None
    notes: str | None = None
    is_private: bool = False
    duration_sec: int | None = Field(default=None, ge=0)
    occurred_at: datetime | None = None

    @field_validator("notes")
    @classmethod
    def notes_trimmed(cls, v: str | None) -> str | None:
        return _trimmed(v)

    @field_validator("occurred_at")
    @classmethod
    def occurred_at_utc(cls, v: datetime | None) -> datetime | None:
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v


class SessionLogRequest(BaseModel):
    """One tap on a session outcome button."""

    lead_id: int
    outcome: Outcome
    notes: str | None = None
    duration_sec: int | None = Field(default=None, ge=0)
    walk_in: bool = False
    step_id: int | None = Field(default=None, ge=1)  # the queue item being worked

    @field_validator("notes")
    @classmethod
    def notes_trimmed(cls, v: str | None) -> str | None:
        return _trimmed(v)


class ActivityOut(BaseModel):
    id: int
    lead_id: int
    user_id: str
    activity_type: str
    channel: str | None = None
    outcome: str | None = None
    notes: str | None = None
    is_private: bool = False
    duration_sec: int | None = None
    occurred_at: datetime


class ActivityLogResponse(BaseModel):
    activity: ActivityOut
    previous_stage: str
    new_stage: str | None = None
    completed_step_id: int | None = None
