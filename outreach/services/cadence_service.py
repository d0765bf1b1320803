"""Cadence service — persists generated cadences and moves steps along.

A generated cadence is written as one batch: every step shares a batch_id
and the rows go in with a single commit, so a failure leaves no partial
cadence behind. The newest batch is the cadence in effect.

Usage:
    from outreach.services.cadence_service import start_cadence, get_active_cadence
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from outreach.constants import ACTIVITY_CHANNEL_MAP, ActivityType, Channel, parse_enum
from outreach.exceptions import (
    CadenceConflict,
    LeadNotFound,
    StepAlreadyClosed,
    StepNotFound,
    StepNotOwned,
)
from outreach.models import CadenceStep, Lead
from outreach.services.cadence_generator import detect_available_channels, generate_cadence
from outreach.services.call_timing import TimingModel

log = logging.getLogger("outreach.cadence")


@dataclass(frozen=True)
class CadenceProgress:
    completed: int
    skipped: int
    total: int

    @property
    def pending(self) -> int:
        return self.total - self.completed - self.skipped

    @property
    def percent(self) -> int:
        if not self.total:
            return 0
        return round((self.completed + self.skipped) * 100 / self.total)


# ═══════════════════════════════════════════════════════════════════════
#  GENERATION
# ═══════════════════════════════════════════════════════════════════════


def _pending_steps(lead_id: int, user_id: str, db: Session) -> list[CadenceStep]:
    return (
        db.query(CadenceStep)
        .filter(
            CadenceStep.lead_id == lead_id,
            CadenceStep.user_id == user_id,
            CadenceStep.completed_at.is_(None),
            CadenceStep.skipped.is_(False),
        )
        .all()
    )


def start_cadence(
    lead_id: int,
    user_id: str,
    db: Session,
    start: datetime | None = None,
    replace: bool = False,
    timing: TimingModel | None = None,
) -> list[CadenceStep]:
    """Generate and store a cadence for the lead.

    Returns the new steps, or [] (nothing written) when the lead has no
    reachable channel. Raises LeadNotFound, or CadenceConflict when pending
    steps exist and ``replace`` is false.
    """
    lead = db.get(Lead, lead_id)
    if not lead:
        raise LeadNotFound(lead_id)

    existing = _pending_steps(lead_id, user_id, db)
    if existing and not replace:
        raise CadenceConflict(lead_id, len(existing))

    drafts = generate_cadence(
        detect_available_channels(lead),
        lead.ai_channel_rec,
        lead.category,
        start or datetime.now(timezone.utc),
        timing=timing,
    )
    if not drafts:
        log.info("No reachable channel for lead %s, cadence not generated", lead_id)
        return []

    batch_id = uuid.uuid4().hex
    try:
        for step in existing:
            step.skipped = True
        rows = [
            CadenceStep(
                lead_id=lead_id,
                user_id=user_id,
                batch_id=batch_id,
                step_number=d.step_number,
                channel=d.channel.value,
                scheduled_at=d.scheduled_at,
                template_name=d.template_name,
            )
            for d in drafts
        ]
        db.add_all(rows)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        log.exception("Cadence insert failed for lead %s", lead_id)
        raise

    log.info(
        "Cadence %s created for lead %s by %s: %d steps (%d replaced)",
        batch_id[:8], lead_id, user_id, len(rows), len(existing),
    )
    return rows


# ═══════════════════════════════════════════════════════════════════════
#  READING
# ═══════════════════════════════════════════════════════════════════════


def get_active_cadence(
    lead_id: int, user_id: str, db: Session
) -> tuple[list[CadenceStep], CadenceProgress]:
    """Steps of the user's newest batch for the lead, with progress."""
    latest = (
        db.query(CadenceStep.batch_id)
        .filter(CadenceStep.lead_id == lead_id, CadenceStep.user_id == user_id)
        .order_by(CadenceStep.id.desc())
        .first()
    )
    if latest is None:
        return [], CadenceProgress(0, 0, 0)

    steps = (
        db.query(CadenceStep)
        .filter(
            CadenceStep.lead_id == lead_id,
            CadenceStep.user_id == user_id,
            CadenceStep.batch_id == latest.batch_id,
        )
        .order_by(CadenceStep.step_number)
        .all()
    )
    progress = CadenceProgress(
        completed=sum(1 for s in steps if s.completed_at is not None),
        skipped=sum(1 for s in steps if s.skipped and s.completed_at is None),
        total=len(steps),
    )
    return steps, progress


# ═══════════════════════════════════════════════════════════════════════
#  STEP TRANSITIONS
# ═══════════════════════════════════════════════════════════════════════


def get_step(step_id: int, db: Session) -> CadenceStep:
    step = db.get(CadenceStep, step_id)
    if not step:
        raise StepNotFound(step_id)
    return step


def complete_step(step_id: int, db: Session, at: datetime | None = None) -> CadenceStep:
    step = get_step(step_id, db)
    if step.is_terminal:
        raise StepAlreadyClosed(step_id)
    step.completed_at = at or datetime.now(timezone.utc)
    db.commit()
    log.info("Cadence step %s completed (lead %s)", step_id, step.lead_id)
    return step


def skip_step(step_id: int, db: Session) -> CadenceStep:
    step = get_step(step_id, db)
    if step.is_terminal:
        raise StepAlreadyClosed(step_id)
    step.skipped = True
    db.commit()
    log.info("Cadence step %s skipped (lead %s)", step_id, step.lead_id)
    return step


def _step_matches(step_channel: str, channel: str | None, activity_type: str | None) -> bool:
    if step_channel in (channel, activity_type):
        return True
    # Manual cadences store the activity type; generated ones store a channel
    step_kind = parse_enum(ActivityType, step_channel)
    if step_kind is not None:
        return channel is not None and any(c.value == channel for c in ACTIVITY_CHANNEL_MAP[step_kind])
    medium = parse_enum(Channel, step_channel)
    logged_kind = parse_enum(ActivityType, activity_type)
    return (
        medium is not None
        and logged_kind is not None
        and medium in ACTIVITY_CHANNEL_MAP[logged_kind]
    )


def claim_step(step_id: int, lead_id: int, user_id: str, db: Session) -> CadenceStep:
    """Pending step a logged activity names explicitly.

    Raises StepNotFound when the step is missing or on another lead,
    StepNotOwned for another user's step, StepAlreadyClosed once terminal.
    Nothing is changed here; log_activity completes it in its own commit.
    """
    step = get_step(step_id, db)
    if step.lead_id != lead_id:
        raise StepNotFound(step_id)
    if step.user_id != user_id:
        raise StepNotOwned(step_id)
    if step.is_terminal:
        raise StepAlreadyClosed(step_id)
    return step


def complete_matching_step(
    lead_id: int,
    user_id: str,
    channel: str | None,
    activity_type: str | None,
    db: Session,
    at: datetime | None = None,
) -> CadenceStep | None:
    """Mark the lowest-numbered pending step that fits a logged activity.

    Does not commit; the caller commits alongside the activity.
    """
    pending = sorted(_pending_steps(lead_id, user_id, db), key=lambda s: (s.step_number, s.id))
    for step in pending:
        if _step_matches(step.channel, channel, activity_type):
            step.completed_at = at or datetime.now(timezone.utc)
            return step
    return None
