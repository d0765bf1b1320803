"""
session_queue.py — Ranked work queue for one outreach session.

Priority order: overdue cadence steps → steps due today → fresh uncontacted
leads. Call and mixed sessions use the timing model to rank within buckets.

Business Rules:
- Each session type works a fixed set of activity types; a step qualifies
  when its channel is one of them or a channel those activities happen on
  (generated steps store "phone", hand-built ones store "cold_call")
- Only pending steps (not completed, not skipped) owned by the user count
- Overdue = scheduled before local midnight today, oldest first, better
  timing first on ties (call/mixed)
- Today = scheduled before local midnight tomorrow; call/mixed rank by
  timing score then schedule, other sessions by schedule
- Uncontacted = user's cold leads never contacted and not already queued;
  single-channel sessions drop leads recommended for another channel.
  Call/mixed rank by timing unless within 0.1, then by composite score
  (highest first); other sessions by composite score
- The queue is rebuilt at every session start; nothing is cached

Called by: routers/sessions.py
Depends on: services/call_timing.py, models (load_session_queue only)
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from functools import cmp_to_key

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from outreach.constants import (
    ACTIVITY_CHANNEL_MAP,
    ActivityType,
    PipelineStage,
    QueueReason,
    SessionType,
)
from outreach.models import CadenceStep, Lead
from outreach.services.call_timing import TimingModel, get_timing_model

log = logging.getLogger("outreach.session_queue")

TIMING_TIE_THRESHOLD = 0.1

SESSION_ACTIVITY_TYPES: dict[SessionType, tuple[ActivityType, ...]] = {
    SessionType.EMAIL: (ActivityType.COLD_EMAIL, ActivityType.FOLLOW_UP_EMAIL),
    SessionType.CALL: (ActivityType.COLD_CALL, ActivityType.FOLLOW_UP_CALL),
    SessionType.DM: (ActivityType.SOCIAL_DM,),
    SessionType.MIXED: (
        ActivityType.COLD_CALL, ActivityType.COLD_EMAIL, ActivityType.SOCIAL_DM,
        ActivityType.FOLLOW_UP_CALL, ActivityType.FOLLOW_UP_EMAIL,
        ActivityType.WALK_IN, ActivityType.MEETING,
    ),
}

# Sessions that rank by timing score
TIMED_SESSIONS = (SessionType.CALL, SessionType.MIXED)

# Mixed sessions take leads whatever their recommended channel
REC_FILTERED_SESSIONS = (SessionType.EMAIL, SessionType.CALL, SessionType.DM)


@dataclass(frozen=True)
class QueueItem:
    lead_id: int
    step_id: int | None
    reason: QueueReason
    timing_score: float | None = None
    lead: object = None
    step: object = None


def session_channels(session_type: SessionType) -> frozenset[str]:
    """Raw channel values a step may carry to be worked in this session."""
    values = set()
    for activity_type in SESSION_ACTIVITY_TYPES[SessionType(session_type)]:
        values.add(activity_type.value)
        values.update(ch.value for ch in ACTIVITY_CHANNEL_MAP[activity_type])
    return frozenset(values)


def _raw(value) -> str | None:
    if value is None:
        return None
    return getattr(value, "value", value)


def build_session_queue(
    steps,
    leads,
    session_type: SessionType,
    user_id: str,
    now: datetime | None = None,
    timing: TimingModel | None = None,
) -> list[QueueItem]:
    """Order steps and leads into the session's work queue."""
    session_type = SessionType(session_type)
    timing = timing or get_timing_model()
    now = now or datetime.now(timezone.utc)
    today_start = timing.start_of_day(now)
    tomorrow_start = timing.start_of_day(timing.to_local(now) + timedelta(days=1))

    allowed = session_channels(session_type)
    timed = session_type in TIMED_SESSIONS
    lead_map = {lead.id: lead for lead in leads}
    scores: dict[int, float] = {}

    def timing_score(lead_id) -> float:
        if not timed:
            return 0.0
        if lead_id not in scores:
            lead = lead_map.get(lead_id)
            scores[lead_id] = timing.score_lead(lead, now).score if lead is not None else 0.0
        return scores[lead_id]

    def as_utc(instant: datetime) -> datetime:
        return instant if instant.tzinfo else instant.replace(tzinfo=timezone.utc)

    pending = [
        s for s in steps
        if s.completed_at is None
        and not s.skipped
        and s.user_id == user_id
        and _raw(s.channel) in allowed
    ]

    overdue = sorted(
        (s for s in pending if as_utc(s.scheduled_at) < today_start),
        key=lambda s: (as_utc(s.scheduled_at), -timing_score(s.lead_id)),
    )
    due_today = [s for s in pending if today_start <= as_utc(s.scheduled_at) < tomorrow_start]
    if timed:
        due_today.sort(key=lambda s: (-timing_score(s.lead_id), as_utc(s.scheduled_at)))
    else:
        due_today.sort(key=lambda s: as_utc(s.scheduled_at))

    def step_item(step, reason: QueueReason) -> QueueItem:
        return QueueItem(
            lead_id=step.lead_id,
            step_id=step.id,
            reason=reason,
            timing_score=timing_score(step.lead_id) if timed else None,
            lead=lead_map.get(step.lead_id),
            step=step,
        )

    queued = {s.lead_id for s in overdue} | {s.lead_id for s in due_today}
    filter_by_rec = session_type in REC_FILTERED_SESSIONS

    def wants_lead(lead) -> bool:
        if lead.assigned_to != user_id or lead.last_contacted_at is not None:
            return False
        if lead.id in queued or _raw(lead.pipeline_stage) != PipelineStage.COLD.value:
            return False
        rec = _raw(lead.ai_channel_rec)
        return not filter_by_rec or not rec or rec in allowed

    def compare_leads(a, b) -> int:
        if timed:
            diff = timing_score(b.id) - timing_score(a.id)
            if abs(diff) > TIMING_TIE_THRESHOLD:
                return -1 if diff < 0 else 1
        ca, cb = a.composite_score or 0, b.composite_score or 0
        return (cb > ca) - (cb < ca)

    fresh = sorted((lead for lead in leads if wants_lead(lead)), key=cmp_to_key(compare_leads))

    return (
        [step_item(s, QueueReason.OVERDUE) for s in overdue]
        + [step_item(s, QueueReason.TODAY) for s in due_today]
        + [
            QueueItem(
                lead_id=lead.id,
                step_id=None,
                reason=QueueReason.UNCONTACTED,
                timing_score=timing_score(lead.id) if timed else None,
                lead=lead,
            )
            for lead in fresh
        ]
    )


def load_session_queue(
    db: Session,
    user_id: str,
    session_type: SessionType,
    now: datetime | None = None,
    limit: int | None = None,
    timing: TimingModel | None = None,
) -> list[QueueItem]:
    """Fetch the user's pending steps and candidate leads, then build the queue."""
    session_type = SessionType(session_type)
    timing = timing or get_timing_model()
    now = now or datetime.now(timezone.utc)
    tomorrow_start = timing.start_of_day(timing.to_local(now) + timedelta(days=1))

    steps = (
        db.query(CadenceStep)
        .filter(
            CadenceStep.user_id == user_id,
            CadenceStep.completed_at.is_(None),
            CadenceStep.skipped.is_(False),
            CadenceStep.channel.in_(sorted(session_channels(session_type))),
            CadenceStep.scheduled_at < tomorrow_start,
        )
        .all()
    )
    step_lead_ids = {s.lead_id for s in steps}
    lead_filter = and_(
        Lead.assigned_to == user_id,
        Lead.pipeline_stage == PipelineStage.COLD.value,
        Lead.last_contacted_at.is_(None),
    )
    if step_lead_ids:
        lead_filter = or_(Lead.id.in_(step_lead_ids), lead_filter)
    leads = db.query(Lead).filter(lead_filter).all()

    items = build_session_queue(steps, leads, session_type, user_id, now=now, timing=timing)
    log.info(
        "Session queue for %s (%s): %d items from %d steps, %d leads",
        user_id, session_type.value, len(items), len(steps), len(leads),
    )
    if limit is not None:
        items = items[:limit]
    return items