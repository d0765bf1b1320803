"""
schemas/sessions.py — Pydantic models for work sessions and timing

Called by: routers/sessions.py, routers/activities.py
Depends on: pydantic
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


# ── Session queue ───────────────────────────────────────────────────────


class QueueLeadOut(BaseModel):
    id: int
    name: str
    category: str | None = None
    pipeline_stage: str
    composite_score: float | None = None
    ai_channel_rec: str | None = None


class QueueItemOut(BaseModel):
    lead_id: int
    step_id: int | None = None
    reason: Literal["overdue", "today", "uncontacted"]
    timing_score: float | None = None
    channel: str | None = None
    scheduled_at: datetime | None = None
    lead: QueueLeadOut | None = None


class QueueResponse(BaseModel):
    session_type: str
    total: int = 0
    items: list[QueueItemOut] = Field(default_factory=list)


class OutcomeOptionOut(BaseModel):
    key: str
    label: str
    color: str
    shortcut: str


class SessionOutcomesResponse(BaseModel):
    session_type: str
    activity_type: str
    channel: str
    outcomes: list[OutcomeOptionOut] = Field(default_factory=list)


# ── Best time to call ───────────────────────────────────────────────────


class CallWindowOut(BaseModel):
    day_of_week: int
    start_hour: float
    end_hour: float
    weight: float
    label: str


class TimingScoreOut(BaseModel):
    score: float
    label: str
    color: str
    matching_window: CallWindowOut | None = None


class NextWindowOut(BaseModel):
    instant: datetime
    window: CallWindowOut


class WindowSummaryOut(BaseModel):
    day_label: str
    time_range: str
    quality: Literal["best", "good"]
    label: str


class OutcomeSlotOut(BaseModel):
    day_of_week: int
    hour: int
    total_calls: int
    connects: int
    connect_rate: float


class BestTimeResponse(BaseModel):
    lead_id: int
    business_type: str
    current: TimingScoreOut
    next_window: NextWindowOut
    windows: list[WindowSummaryOut] = Field(default_factory=list)
    learned_slots: list[OutcomeSlotOut] = Field(default_factory=list)
