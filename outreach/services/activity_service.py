"""Activity service — logs contact attempts and applies their side effects.

Logging one activity, in a single commit:
  1. appends the Activity row
  2. stamps lead.last_contacted_at (never moving it backwards)
  3. auto-advances the pipeline stage (pipeline_rules.next_stage) and
     records the move in pipeline_history
  4. completes the cadence step the caller names, or else the
     lowest-numbered pending step that fits

Usage:
    from outreach.services.activity_service import log_activity, get_lead_activities
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from outreach.constants import (
    ACTIVITY_CHANNEL_MAP,
    ActivityType,
    Channel,
    PipelineStage,
    parse_enum,
)
from outreach.exceptions import LeadNotFound
from outreach.models import Activity, Lead, PipelineHistory
from outreach.services.cadence_service import claim_step, complete_matching_step
from outreach.services.pipeline_rules import next_stage

log = logging.getLogger("outreach.activity")


@dataclass(frozen=True)
class ActivityResult:
    activity: Activity
    previous_stage: str
    new_stage: str | None  # None when the stage did not move
    completed_step_id: int | None


def default_channel(activity_type: ActivityType) -> str | None:
    """Most likely channel for an activity type when the caller gives none."""
    channels = ACTIVITY_CHANNEL_MAP.get(ActivityType(activity_type))
    return channels[0].value if channels else None


def _as_utc(value: datetime) -> datetime:
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


def log_activity(
    lead_id: int,
    user_id: str,
    activity_type: ActivityType,
    db: Session,
    *,
    channel: str | None = None,
    outcome: str | None = None,
    notes: str | None = None,
    is_private: bool = False,
    duration_sec: int | None = None,
    occurred_at: datetime | None = None,
    step_id: int | None = None,
) -> ActivityResult:
    """Record an activity against a lead and apply its side effects.

    With step_id the named step is the one completed (and lends its channel
    when the activity type happens on it); otherwise the first pending step
    that fits is.
    """
    lead = db.get(Lead, lead_id)
    if not lead:
        raise LeadNotFound(lead_id)

    activity_type = ActivityType(activity_type)
    channel = getattr(channel, "value", channel) or default_channel(activity_type)
    outcome = getattr(outcome, "value", outcome)
    occurred_at = _as_utc(occurred_at or datetime.now(timezone.utc))
    previous_stage = lead.pipeline_stage

    target = None
    if step_id is not None:
        target = claim_step(step_id, lead_id, user_id, db)
        medium = parse_enum(Channel, target.channel)
        if medium in ACTIVITY_CHANNEL_MAP[activity_type]:
            channel = medium.value

    try:
        activity = Activity(
            lead_id=lead_id,
            user_id=user_id,
            activity_type=activity_type.value,
            channel=channel,
            outcome=outcome,
            notes=notes,
            is_private=is_private,
            duration_sec=duration_sec,
            occurred_at=occurred_at,
        )
        db.add(activity)
        # A backdated entry never moves the last contact backwards
        if lead.last_contacted_at is None or _as_utc(lead.last_contacted_at) < occurred_at:
            lead.last_contacted_at = occurred_at

        advanced = next_stage(previous_stage, outcome)
        if advanced is not None:
            lead.pipeline_stage = advanced.value
            if advanced == PipelineStage.HOT:
                lead.is_hot = True
            db.add(PipelineHistory(
                lead_id=lead_id,
                user_id=user_id,
                from_stage=previous_stage,
                to_stage=advanced.value,
                reason=f"auto:{outcome or activity_type.value}",
            ))

        if target is not None:
            target.completed_at = occurred_at
            step = target
        else:
            step = complete_matching_step(
                lead_id, user_id, channel, activity_type.value, db, at=occurred_at
            )
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        log.exception("Activity log failed for lead %s", lead_id)
        raise

    db.refresh(activity)
    if advanced is not None:
        log.info("Lead %s moved %s -> %s after %s", lead_id, previous_stage, advanced.value,
                 outcome or activity_type.value)
    return ActivityResult(
        activity=activity,
        previous_stage=previous_stage,
        new_stage=advanced.value if advanced is not None else None,
        completed_step_id=step.id if step is not None else None,
    )


def get_lead_activities(
    lead_id: int, db: Session, viewer_id: str | None = None, limit: int = 100
) -> list[Activity]:
    """Newest-first activity log. Private entries are visible only to their author."""
    if not db.get(Lead, lead_id):
        raise LeadNotFound(lead_id)
    visible = Activity.is_private.is_(False)
    if viewer_id:
        visible = or_(visible, Activity.user_id == viewer_id)
    return (
        db.query(Activity)
        .filter(Activity.lead_id == lead_id, visible)
        .order_by(Activity.occurred_at.desc(), Activity.id.desc())
        .limit(limit)
        .all()
    )


def get_call_history(lead_id: int, db: Session) -> list[Activity]:
    """Every logged activity for a lead; the timing model keeps only calls."""
    return db.query(Activity).filter(Activity.lead_id == lead_id).all()