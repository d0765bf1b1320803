"""Outreach models — cadence steps and the activity log."""

from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship

from ..database import UTCDateTime
from .base import Base


class CadenceStep(Base):
    """One scheduled touch in a lead's cadence.

    Steps from one generation call share a batch_id; the latest batch is the
    cadence in effect. A step is terminal once completed_at is set or skipped
    is true.
    """

    __tablename__ = "cadence_steps"
    id = Column(Integer, primary_key=True)
    lead_id = Column(Integer, ForeignKey("leads.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(String(64), nullable=False)
    batch_id = Column(String(36), nullable=False)
    step_number = Column(Integer, nullable=False, default=1)
    channel = Column(String(30), nullable=False)  # Channel, or ActivityType for manual cadences
    scheduled_at = Column(UTCDateTime, nullable=False)
    completed_at = Column(UTCDateTime)
    skipped = Column(Boolean, nullable=False, default=False)
    template_name = Column(String(100))
    created_at = Column(UTCDateTime, default=lambda: datetime.now(timezone.utc))

    lead = relationship("Lead", back_populates="cadence_steps")

    __table_args__ = (
        Index("ix_cadence_steps_pending", "user_id", "scheduled_at"),
        Index("ix_cadence_steps_lead", "lead_id"),
        Index(
            "ix_cadence_steps_batch_step",
            "lead_id", "user_id", "batch_id", "step_number",
            unique=True,
        ),
    )

    @property
    def is_terminal(self) -> bool:
        return self.completed_at is not None or bool(self.skipped)


class Activity(Base):
    """Append-only log of a contact attempt and its outcome."""

    __tablename__ = "activities"
    id = Column(Integer, primary_key=True)
    lead_id = Column(Integer, ForeignKey("leads.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(String(64), nullable=False)
    activity_type = Column(String(30), nullable=False)
    channel = Column(String(30))
    outcome = Column(String(30))
    notes = Column(Text)
    is_private = Column(Boolean, nullable=False, default=False)
    duration_sec = Column(Integer)
    occurred_at = Column(UTCDateTime, nullable=False, default=lambda: datetime.now(timezone.utc))
    created_at = Column(UTCDateTime, default=lambda: datetime.now(timezone.utc))

    lead = relationship("Lead", back_populates="activities")

    __table_args__ = (
        Index("ix_activities_lead", "lead_id", "occurred_at"),
        Index("ix_activities_user", "user_id", "occurred_at"),
    )
