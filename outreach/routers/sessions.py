"""
routers/sessions.py — Work session routes (queue, outcome buttons, quick log)

Business Rules:
- The queue is rebuilt on every request; order is overdue → today →
  uncontacted, capped at settings.default_session_limit unless limit is given
- Outcome buttons depend on the session type; walk-ins have their own set
- A quick log records the session's activity type on the session's channel
  and rejects outcomes the session does not offer (400)
- A quick log that names a step_id closes that step (404 when it is not
  on the lead, 403 for another user, 409 once closed); a DM step keeps its
  own network as the activity channel

Called by: main.py (router mount)
Depends on: services/session_queue.py, services/session_outcomes.py,
            services/activity_service.py
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from loguru import logger
from sqlalchemy.orm import Session

from ..config import settings
from ..constants import SessionType
from ..database import get_db
from ..dependencies import require_user_id
from ..exceptions import LeadNotFound, StepAlreadyClosed, StepNotFound, StepNotOwned
from ..schemas.activities import ActivityLogResponse, SessionLogRequest
from ..schemas.sessions import QueueResponse, SessionOutcomesResponse
from ..services import activity_service
from ..services.session_outcomes import (
    WALKIN_MODE,
    activity_type_for_session,
    channel_for_session,
    is_valid_outcome,
    outcomes_for_session,
)
from ..services.session_queue import load_session_queue
from .activities import activity_result_out

router = APIRouter(tags=["sessions"])


def _queue_item_out(item) -> dict:
    lead = item.lead
    step = item.step
    return {
        "lead_id": item.lead_id,
        "step_id": item.step_id,
        "reason": item.reason.value,
        "timing_score": item.timing_score,
        "channel": step.channel if step is not None else None,
        "scheduled_at": step.scheduled_at if step is not None else None,
        "lead": {
            "id": lead.id,
            "name": lead.name,
            "category": lead.category,
            "pipeline_stage": lead.pipeline_stage,
            "composite_score": lead.composite_score,
            "ai_channel_rec": lead.ai_channel_rec,
        } if lead is not None else None,
    }


@router.get("/api/sessions/queue", response_model=QueueResponse)
async def session_queue(
    session_type: SessionType = Query(...),
    limit: int | None = Query(default=None, ge=1, le=1000),
    user_id: str = Depends(require_user_id),
    db: Session = Depends(get_db),
):
    items = load_session_queue(
        db, user_id, session_type, limit=limit or settings.default_session_limit
    )
    return {
        "session_type": session_type.value,
        "total": len(items),
        "items": [_queue_item_out(i) for i in items],
    }


@router.get("/api/sessions/{mode}/outcomes", response_model=SessionOutcomesResponse)
async def session_outcomes(mode: str, user_id: str = Depends(require_user_id)):
    """Outcome buttons for a session type, or "walkin"."""
    try:
        options = outcomes_for_session(mode)
    except ValueError:
        raise HTTPException(404, f"Unknown session type: {mode}")
    return {
        "session_type": mode.lower(),
        "activity_type": activity_type_for_session(mode).value,
        "channel": channel_for_session(mode).value,
        "outcomes": [
            {"key": o.key.value, "label": o.label, "color": o.color, "shortcut": o.shortcut}
            for o in options
        ],
    }


@router.post("/api/sessions/{session_type}/log", response_model=ActivityLogResponse, status_code=201)
async def log_session_outcome(
    session_type: SessionType,
    body: SessionLogRequest,
    user_id: str = Depends(require_user_id),
    db: Session = Depends(get_db),
):
    mode = WALKIN_MODE if body.walk_in else session_type.value
    if not is_valid_outcome(mode, body.outcome):
        raise HTTPException(400, f"Outcome {body.outcome.value} is not offered in {mode} sessions")
    try:
        result = activity_service.log_activity(
            body.lead_id,
            user_id,
            activity_type_for_session(mode),
            db,
            channel=channel_for_session(mode).value,
            outcome=body.outcome.value,
            notes=body.notes,
            duration_sec=body.duration_sec,
            step_id=body.step_id,
        )
    except LeadNotFound:
        raise HTTPException(404, "Lead not found")
    except StepNotFound:
        raise HTTPException(404, "Cadence step not found")
    except StepNotOwned:
        raise HTTPException(403, "Not your cadence step")
    except StepAlreadyClosed as e:
        raise HTTPException(409, str(e))
    logger.info(f"Session log: {mode} lead={body.lead_id} outcome={body.outcome.value} user={user_id}")
    return activity_result_out(result)
