"""
schemas/cadence.py — Pydantic models for cadence endpoints

Business Rules:
- start defaults to now; naive datetimes are read as UTC
- replace=true retires the user's pending steps for the lead (marks them
  skipped) before the new batch goes in

Called by: routers/cadence.py
Depends on: pydantic
"""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, Field, field_validator


class CadenceStartRequest(BaseModel):
    start: datetime | None = None
    replace: bool = False

    @field_validator("start")
    @classmethod
    def start_is_utc(cls, v: datetime | None) -> datetime | None:
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v


class CadenceStepOut(BaseModel):
    id: int
    lead_id: int
    batch_id: str
    step_number: int
    channel: str
    scheduled_at: datetime
    completed_at: datetime | None = None
    skipped: bool = False
    template_name: str | None = None


class CadenceProgressOut(BaseModel):
    completed: int = 0
    skipped: int = 0
    pending: int = 0
    total: int = 0
    percent: int = 0


class CadenceResponse(BaseModel):
    lead_id: int
    steps: list[CadenceStepOut] = Field(default_factory=list)
    progress: CadenceProgressOut = Field(default_factory=CadenceProgressOut)
