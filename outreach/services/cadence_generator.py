"""
cadence_generator.py — Builds a 5-7 step outreach sequence for a lead.

Business Rules:
- No reachable channel → no steps (empty list, not an error)
- Step count = available channels + 3, clamped to 5..7
- Channel pool: the recommended channel first (when available), then the
  rest in strategic order phone > email > instagram > facebook > tiktok
- First step uses pool[0]; the last step is a phone call whenever phone is
  available; the others rotate pool[i % len(pool)]
- Steps spread over ~3 weeks (day offsets 0, 2, 5, 8, 12, 16, 21, then +3)
- Calls are smart-timed with the timing model; emails go out at 08:00 and
  social DMs at 12:00 on the anchor day, pushed past weekends
- Template names rotate per channel and stick on the last entry

Called by: services/cadence_service.py
Depends on: services/call_timing.py, services/business_classifier.py
"""

from dataclasses import dataclass
from datetime import datetime, timedelta

from outreach.constants import ActivityType, Channel
from outreach.services.business_classifier import classify_business_type
from outreach.services.call_timing import TimingModel, get_timing_model, is_weekend

MIN_STEPS = 5
MAX_STEPS = 7
DAY_OFFSETS = [0, 2, 5, 8, 12, 16, 21]
EXTRA_STEP_GAP_DAYS = 3
EMAIL_SEND_HOUR = 8
SOCIAL_SEND_HOUR = 12

# Strategic order for the rotation pool
CHANNEL_PRIORITY = [
    Channel.PHONE, Channel.EMAIL, Channel.INSTAGRAM, Channel.FACEBOOK, Channel.TIKTOK,
]

# Accepted spellings of a recommended first channel
_RECOMMENDED_ALIASES = {
    "phone": Channel.PHONE,
    "email": Channel.EMAIL,
    "instagram": Channel.INSTAGRAM,
    "facebook": Channel.FACEBOOK,
    "tiktok": Channel.TIKTOK,
    ActivityType.COLD_CALL.value: Channel.PHONE,
    ActivityType.FOLLOW_UP_CALL.value: Channel.PHONE,
    ActivityType.COLD_EMAIL.value: Channel.EMAIL,
    ActivityType.FOLLOW_UP_EMAIL.value: Channel.EMAIL,
}

TEMPLATE_MAP: dict[str, list[str]] = {
    Channel.PHONE.value: ["cold_call", "follow_up_call", "final_call"],
    Channel.EMAIL.value: ["cold_email", "follow_up_email", "breakup_email"],
    Channel.INSTAGRAM.value: ["social_dm_intro", "social_dm_follow_up"],
    Channel.FACEBOOK.value: ["social_dm_intro", "social_dm_follow_up"],
    Channel.TIKTOK.value: ["social_dm_intro", "social_dm_follow_up"],
    Channel.LINKEDIN.value: ["social_dm_intro", "social_dm_follow_up"],
    Channel.IN_PERSON.value: ["walk_in"],
    Channel.OTHER.value: ["general_outreach"],
}


@dataclass(frozen=True)
class AvailableChannels:
    phone: bool = False
    email: bool = False
    instagram: bool = False
    facebook: bool = False
    tiktok: bool = False

    def count(self) -> int:
        return sum((self.phone, self.email, self.instagram, self.facebook, self.tiktok))

    def has(self, channel: Channel) -> bool:
        return bool(getattr(self, Channel(channel).value, False))


@dataclass(frozen=True)
class CadenceStepDraft:
    step_number: int
    channel: Channel
    scheduled_at: datetime
    template_name: str


def detect_available_channels(lead) -> AvailableChannels:
    """Which channels a lead can be reached on, from its contact fields."""
    return AvailableChannels(
        phone=bool(getattr(lead, "phone", None)),
        email=bool(getattr(lead, "email", None) or getattr(lead, "owner_email", None)),
        instagram=bool(getattr(lead, "instagram", None)),
        facebook=bool(getattr(lead, "facebook", None)),
        tiktok=bool(getattr(lead, "tiktok", None)),
    )


def day_offset(index: int) -> int:
    """Days after the cadence start for the step at ``index`` (0-based)."""
    if index < len(DAY_OFFSETS):
        return DAY_OFFSETS[index]
    return DAY_OFFSETS[-1] + (index - len(DAY_OFFSETS) + 1) * EXTRA_STEP_GAP_DAYS


def _channel_pool(available: AvailableChannels, recommended: str | None) -> list[Channel]:
    pool: list[Channel] = []
    if recommended:
        mapped = _RECOMMENDED_ALIASES.get(str(recommended).strip().lower())
        if mapped is not None and available.has(mapped):
            pool.append(mapped)
    for channel in CHANNEL_PRIORITY:
        if available.has(channel) and channel not in pool:
            pool.append(channel)
    return pool


def build_channel_sequence(
    available: AvailableChannels, recommended: str | None, step_count: int
) -> list[Channel]:
    pool = _channel_pool(available, recommended)
    if not pool:
        return []
    sequence = []
    for i in range(step_count):
        if i == 0:
            sequence.append(pool[0])
        elif i == step_count - 1 and Channel.PHONE in pool:
            sequence.append(Channel.PHONE)
        else:
            sequence.append(pool[i % len(pool)])
    return sequence


def _at_business_hour(anchor: datetime, hour: int, timing: TimingModel) -> datetime:
    """``hour``:00 local on the anchor's date, moved forward past a weekend."""
    day = timing.to_local(anchor).date()
    while is_weekend(day):
        day += timedelta(days=1)
    return timing.at_local(day, hour)


def generate_cadence(
    available_channels: AvailableChannels,
    recommended_channel: str | None,
    category: str | None,
    start: datetime,
    timing: TimingModel | None = None,
) -> list[CadenceStepDraft]:
    """Draft the steps of a new cadence. Nothing is persisted here."""
    channel_count = available_channels.count()
    if channel_count == 0:
        return []

    step_count = min(MAX_STEPS, max(MIN_STEPS, channel_count + 3))
    sequence = build_channel_sequence(available_channels, recommended_channel, step_count)
    if not sequence:
        return []

    timing = timing or get_timing_model()
    business_type = classify_business_type(category)
    template_counts: dict[Channel, int] = {}
    steps = []

    for i, channel in enumerate(sequence):
        anchor = start + timedelta(days=day_offset(i))
        if channel == Channel.PHONE:
            scheduled = timing.next_best_window(business_type, anchor).instant
        elif channel == Channel.EMAIL:
            scheduled = _at_business_hour(anchor, EMAIL_SEND_HOUR, timing)
        else:
            scheduled = _at_business_hour(anchor, SOCIAL_SEND_HOUR, timing)

        used = template_counts.get(channel, 0)
        templates = TEMPLATE_MAP.get(channel.value, ["general_outreach"])
        template_counts[channel] = used + 1

        steps.append(
            CadenceStepDraft(
                step_number=i + 1,
                channel=channel,
                scheduled_at=scheduled,
                template_name=templates[min(used, len(templates) - 1)],
            )
        )
    return steps
