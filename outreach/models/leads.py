"""Lead models — prospects and their pipeline stage history."""

from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, Float, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship

from ..constants import PipelineStage
from ..database import UTCDateTime
from .base import Base


class Lead(Base):
    """A prospective customer. Owned by one salesperson (assigned_to) or unowned."""

    __tablename__ = "leads"
    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    category = Column(String(255))  # free text, e.g. "Pizza restaurant"

    # Contact channels
    phone = Column(String(100))
    email = Column(String(255))
    owner_email = Column(String(255))
    instagram = Column(String(255))
    facebook = Column(String(255))
    tiktok = Column(String(255))

    # CRM
    pipeline_stage = Column(String(20), nullable=False, default=PipelineStage.COLD.value)
    is_hot = Column(Boolean, default=False)
    assigned_to = Column(String(64))  # user id from the auth provider
    last_contacted_at = Column(UTCDateTime)
    composite_score = Column(Float)
    ai_channel_rec = Column(String(50))  # suggested first touch, e.g. "cold_call"

    created_at = Column(UTCDateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        UTCDateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    cadence_steps = relationship(
        "CadenceStep", back_populates="lead", cascade="all, delete-orphan"
    )
    activities = relationship(
        "Activity", back_populates="lead", cascade="all, delete-orphan"
    )

    __table_args__ = (
        Index("ix_leads_assigned_stage", "assigned_to", "pipeline_stage"),
    )


class PipelineHistory(Base):
    """One row per stage change, automatic or manual."""

    __tablename__ = "pipeline_history"
    id = Column(Integer, primary_key=True)
    lead_id = Column(Integer, ForeignKey("leads.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(String(64))
    from_stage = Column(String(20))
    to_stage = Column(String(20), nullable=False)
    reason = Column(Text)
    created_at = Column(UTCDateTime, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        Index("ix_pipeline_history_lead", "lead_id", "created_at"),
    )
