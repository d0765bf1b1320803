"""
constants.py — Closed value sets shared by the cadence engine, models, and API

Every string the CRM stores for stages, channels, activity types, outcomes,
and session types is one of the members below. The enums mix in ``str`` so a
member compares equal to the raw value read back from the database.

Business Rules:
- Pipeline order: cold → contacted → warm → hot → proposal → negotiation →
  closed_won | closed_lost, with a separate terminal ``dead`` stage
- Only cold/contacted/warm ever move automatically (see pipeline_rules)
- Cadence steps store either a Channel or, for hand-built cadences,
  the ActivityType of the touch

Called by: services/*, models/*, schemas/*
Depends on: nothing
"""

from enum import Enum


class PipelineStage(str, Enum):
    COLD = "cold"
    CONTACTED = "contacted"
    WARM = "warm"
    HOT = "hot"
    PROPOSAL = "proposal"
    NEGOTIATION = "negotiation"
    CLOSED_WON = "closed_won"
    CLOSED_LOST = "closed_lost"
    DEAD = "dead"


class Channel(str, Enum):
    PHONE = "phone"
    EMAIL = "email"
    INSTAGRAM = "instagram"
    TIKTOK = "tiktok"
    FACEBOOK = "facebook"
    LINKEDIN = "linkedin"
    IN_PERSON = "in_person"
    OTHER = "other"


class ActivityType(str, Enum):
    COLD_CALL = "cold_call"
    COLD_EMAIL = "cold_email"
    SOCIAL_DM = "social_dm"
    WALK_IN = "walk_in"
    FOLLOW_UP_CALL = "follow_up_call"
    FOLLOW_UP_EMAIL = "follow_up_email"
    MEETING = "meeting"
    PROPOSAL_SENT = "proposal_sent"
    NOTE = "note"
    STAGE_CHANGE = "stage_change"


class Outcome(str, Enum):
    CONNECTED = "connected"
    VOICEMAIL = "voicemail"
    NO_ANSWER = "no_answer"
    CALLBACK_REQUESTED = "callback_requested"
    INTERESTED = "interested"
    NOT_INTERESTED = "not_interested"
    WRONG_NUMBER = "wrong_number"
    SENT = "sent"
    OPENED = "opened"
    REPLIED = "replied"
    BOUNCED = "bounced"
    MEETING_SET = "meeting_set"
    PROPOSAL_REQUESTED = "proposal_requested"
    OTHER = "other"


class SessionType(str, Enum):
    EMAIL = "email"
    CALL = "call"
    DM = "dm"
    MIXED = "mixed"


class BusinessType(str, Enum):
    RESTAURANT = "restaurant"
    RETAIL = "retail"
    PROFESSIONAL_SERVICES = "professional_services"
    HEALTH_WELLNESS = "health_wellness"
    HOME_SERVICES = "home_services"
    AUTOMOTIVE = "automotive"
    CREATOR = "creator"
    GENERAL = "general"


class QueueReason(str, Enum):
    OVERDUE = "overdue"
    TODAY = "today"
    UNCONTACTED = "uncontacted"


PIPELINE_ORDER = [
    PipelineStage.COLD,
    PipelineStage.CONTACTED,
    PipelineStage.WARM,
    PipelineStage.HOT,
    PipelineStage.PROPOSAL,
    PipelineStage.NEGOTIATION,
    PipelineStage.CLOSED_WON,
    PipelineStage.CLOSED_LOST,
    PipelineStage.DEAD,
]

# Calls are the only activities the timing model learns from
CALL_ACTIVITY_TYPES = (ActivityType.COLD_CALL, ActivityType.FOLLOW_UP_CALL)

# Most likely channel(s) for each kind of touch
ACTIVITY_CHANNEL_MAP: dict[ActivityType, tuple[Channel, ...]] = {
    ActivityType.COLD_CALL: (Channel.PHONE,),
    ActivityType.COLD_EMAIL: (Channel.EMAIL,),
    ActivityType.SOCIAL_DM: (
        Channel.INSTAGRAM, Channel.TIKTOK, Channel.FACEBOOK, Channel.LINKEDIN,
    ),
    ActivityType.WALK_IN: (Channel.IN_PERSON,),
    ActivityType.FOLLOW_UP_CALL: (Channel.PHONE,),
    ActivityType.FOLLOW_UP_EMAIL: (Channel.EMAIL,),
    ActivityType.MEETING: (Channel.IN_PERSON, Channel.PHONE, Channel.OTHER),
    ActivityType.PROPOSAL_SENT: (Channel.EMAIL, Channel.IN_PERSON),
    ActivityType.NOTE: (Channel.OTHER,),
    ActivityType.STAGE_CHANGE: (Channel.OTHER,),
}


def stage_rank(stage: str) -> int:
    """Position of a stage in the pipeline; -1 for unknown values."""
    try:
        return PIPELINE_ORDER.index(PipelineStage(stage))
    except ValueError:
        return -1


def parse_enum(enum_cls, value):
    """Return ``enum_cls(value)`` or None when the value is absent or not a member."""
    if value is None or value == "":
        return None
    try:
        return enum_cls(value)
    except ValueError:
        return None
