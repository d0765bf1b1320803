"""
routers/cadence.py — Cadence Routes (generate, view, complete, skip)

Business Rules:
- One active cadence per lead per user; generating again needs replace=true
- A lead with no phone, email or social handle cannot get a cadence (400)
- Only the step's owner may complete or skip it (403)
- Completed and skipped steps are final (409)

Called by: main.py (router mount)
Depends on: services/cadence_service.py, dependencies
"""

from fastapi import APIRouter, Depends, HTTPException
from loguru import logger
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import require_user_id
from ..exceptions import CadenceConflict, LeadNotFound, StepAlreadyClosed, StepNotFound
from ..schemas.cadence import CadenceResponse, CadenceStartRequest, CadenceStepOut
from ..services import cadence_service

router = APIRouter(tags=["cadence"])


def _step_out(step) -> dict:
    return {
        "id": step.id,
        "lead_id": step.lead_id,
        "batch_id": step.batch_id,
        "step_number": step.step_number,
        "channel": step.channel,
        "scheduled_at": step.scheduled_at,
        "completed_at": step.completed_at,
        "skipped": bool(step.skipped),
        "template_name": step.template_name,
    }


def _cadence_out(lead_id: int, steps, progress) -> dict:
    return {
        "lead_id": lead_id,
        "steps": [_step_out(s) for s in steps],
        "progress": {
            "completed": progress.completed,
            "skipped": progress.skipped,
            "pending": progress.pending,
            "total": progress.total,
            "percent": progress.percent,
        },
    }


@router.post("/api/leads/{lead_id}/cadence", response_model=CadenceResponse, status_code=201)
async def generate_lead_cadence(
    lead_id: int,
    body: CadenceStartRequest | None = None,
    user_id: str = Depends(require_user_id),
    db: Session = Depends(get_db),
):
    """Generate a smart-timed cadence from the lead's available channels."""
    body = body or CadenceStartRequest()
    try:
        steps = cadence_service.start_cadence(
            lead_id, user_id, db, start=body.start, replace=body.replace
        )
    except LeadNotFound:
        raise HTTPException(404, "Lead not found")
    except CadenceConflict as e:
        raise HTTPException(409, str(e))
    if not steps:
        raise HTTPException(400, "No contact channels available for this lead")

    logger.info(f"Cadence generated: lead={lead_id} user={user_id} steps={len(steps)}")
    _, progress = cadence_service.get_active_cadence(lead_id, user_id, db)
    return _cadence_out(lead_id, steps, progress)


@router.get("/api/leads/{lead_id}/cadence", response_model=CadenceResponse)
async def get_lead_cadence(
    lead_id: int,
    user_id: str = Depends(require_user_id),
    db: Session = Depends(get_db),
):
    steps, progress = cadence_service.get_active_cadence(lead_id, user_id, db)
    return _cadence_out(lead_id, steps, progress)


def _owned_step(step_id: int, user_id: str, db: Session):
    try:
        step = cadence_service.get_step(step_id, db)
    except StepNotFound:
        raise HTTPException(404, "Cadence step not found")
    if step.user_id != user_id:
        raise HTTPException(403, "Not your cadence step")
    return step


@router.post("/api/cadence-steps/{step_id}/complete", response_model=CadenceStepOut)
async def complete_cadence_step(
    step_id: int,
    user_id: str = Depends(require_user_id),
    db: Session = Depends(get_db),
):
    _owned_step(step_id, user_id, db)
    try:
        step = cadence_service.complete_step(step_id, db)
    except StepAlreadyClosed as e:
        raise HTTPException(409, str(e))
    return _step_out(step)


@router.post("/api/cadence-steps/{step_id}/skip", response_model=CadenceStepOut)
async def skip_cadence_step(
    step_id: int,
    user_id: str = Depends(require_user_id),
    db: Session = Depends(get_db),
):
    _owned_step(step_id, user_id, db)
    try:
        step = cadence_service.skip_step(step_id, db)
    except StepAlreadyClosed as e:
        raise HTTPException(409, str(e))
    return _step_out(step)
