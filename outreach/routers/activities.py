"""
routers/activities.py — Activity log and best-time-to-call routes

Business Rules:
- Logging an activity stamps last contact, may advance the pipeline, and
  closes the matching cadence step (see services/activity_service.py)
- Private activities are listed only for their author
- The timing panel learns from the lead's own call history

Called by: main.py (router mount)
Depends on: services/activity_service.py, services/call_timing.py
"""

from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException
from loguru import logger
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import get_lead_or_404, require_user_id
from ..exceptions import LeadNotFound
from ..models import Lead
from ..schemas.activities import ActivityCreate, ActivityLogResponse, ActivityOut
from ..schemas.sessions import BestTimeResponse
from ..services import activity_service
from ..services.call_timing import best_time_for_lead

router = APIRouter(tags=["activities"])


def activity_out(a) -> dict:
    return {
        "id": a.id,
        "lead_id": a.lead_id,
        "user_id": a.user_id,
        "activity_type": a.activity_type,
        "channel": a.channel,
        "outcome": a.outcome,
        "notes": a.notes,
        "is_private": bool(a.is_private),
        "duration_sec": a.duration_sec,
        "occurred_at": a.occurred_at,
    }


def activity_result_out(result) -> dict:
    return {
        "activity": activity_out(result.activity),
        "previous_stage": result.previous_stage,
        "new_stage": result.new_stage,
        "completed_step_id": result.completed_step_id,
    }


@router.post("/api/leads/{lead_id}/activities", response_model=ActivityLogResponse, status_code=201)
async def log_lead_activity(
    lead_id: int,
    body: ActivityCreate,
    user_id: str = Depends(require_user_id),
    db: Session = Depends(get_db),
):
    try:
        result = activity_service.log_activity(
            lead_id,
            user_id,
            body.activity_type,
            db,
            channel=body.channel.value if body.channel else None,
            outcome=body.outcome.value if body.outcome else None,
            notes=body.notes,
            is_private=body.is_private,
            duration_sec=body.duration_sec,
            occurred_at=body.occurred_at,
        )
    except LeadNotFound:
        raise HTTPException(404, "Lead not found")
    if result.new_stage:
        logger.info(f"Lead {lead_id} auto-advanced {result.previous_stage} -> {result.new_stage}")
    return activity_result_out(result)


@router.get("/api/leads/{lead_id}/activities", response_model=list[ActivityOut])
async def list_lead_activities(
    lead_id: int,
    limit: int = 100,
    user_id: str = Depends(require_user_id),
    db: Session = Depends(get_db),
):
    try:
        rows = activity_service.get_lead_activities(
            lead_id, db, viewer_id=user_id, limit=max(1, min(limit, 500))
        )
    except LeadNotFound:
        raise HTTPException(404, "Lead not found")
    return [activity_out(a) for a in rows]


@router.get("/api/leads/{lead_id}/timing", response_model=BestTimeResponse)
async def lead_best_time(
    user_id: str = Depends(require_user_id),
    lead: Lead = Depends(get_lead_or_404),
    db: Session = Depends(get_db),
):
    """Best time to call: score right now, next window, weekly windows, learned slots."""
    report = best_time_for_lead(lead, activity_service.get_call_history(lead.id, db))
    current = report.current
    return {
        "lead_id": lead.id,
        "business_type": report.business_type.value,
        "current": {
            "score": current.score,
            "label": current.label,
            "color": current.color,
            "matching_window": asdict(current.matching_window) if current.matching_window else None,
        },
        "next_window": {
            "instant": report.next_window.instant,
            "window": asdict(report.next_window.window),
        },
        "windows": [asdict(w) for w in report.windows],
        "learned_slots": [asdict(s) for s in report.learned_slots],
    }
