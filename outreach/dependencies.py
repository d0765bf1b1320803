"""
dependencies.py — Shared FastAPI Dependencies

Authentication is done upstream: the auth proxy in front of this service
sets X-User-Id on every request it lets through.

Business Rules:
- require_user_id raises 401 when the header is missing or blank
- get_lead_or_404 raises 404 for unknown lead ids

Called by: all routers
Depends on: models, database
"""

from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from .database import get_db
from .models import Lead


def require_user_id(x_user_id: str | None = Header(default=None)) -> str:
    """Dependency: the caller's user id, or 401."""
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(401, "Not authenticated")
    return x_user_id.strip()


def get_lead_or_404(lead_id: int, db: Session = Depends(get_db)) -> Lead:
    lead = db.get(Lead, lead_id)
    if not lead:
        raise HTTPException(404, "Lead not found")
    return lead
