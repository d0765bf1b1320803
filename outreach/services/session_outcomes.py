"""Session outcome options — the buttons a salesperson taps after each touch.

Each session type offers its own short list of outcomes with number-key
shortcuts. Walk-ins get their own list. A logged outcome is recorded as the
session's activity type on the session's channel.
"""

from dataclasses import dataclass

from outreach.constants import ActivityType, Channel, Outcome, SessionType

WALKIN_MODE = "walkin"


@dataclass(frozen=True)
class OutcomeOption:
    key: Outcome
    label: str
    color: str
    shortcut: str


def _options(*rows) -> tuple[OutcomeOption, ...]:
    return tuple(
        OutcomeOption(Outcome(key), label, color, str(i))
        for i, (key, label, color) in enumerate(rows, start=1)
    )


SESSION_OUTCOMES: dict[str, tuple[OutcomeOption, ...]] = {
    SessionType.EMAIL.value: _options(
        ("sent", "Sent", "emerald"),
        ("bounced", "Bounced", "red"),
        ("replied", "Replied", "blue"),
        ("not_interested", "Not Interested", "slate"),
    ),
    SessionType.CALL.value: _options(
        ("connected", "Connected", "emerald"),
        ("voicemail", "Voicemail", "amber"),
        ("no_answer", "No Answer", "slate"),
        ("callback_requested", "Callback", "blue"),
    ),
    SessionType.DM.value: _options(
        ("sent", "Sent", "emerald"),
        ("replied", "Replied", "blue"),
        ("not_interested", "Not Interested", "red"),
    ),
    SessionType.MIXED.value: _options(
        ("connected", "Connected", "emerald"),
        ("voicemail", "Voicemail", "amber"),
        ("no_answer", "No Answer", "slate"),
        ("not_interested", "Not Interested", "red"),
    ),
    WALKIN_MODE: _options(
        ("connected", "Spoke With Owner", "emerald"),
        ("sent", "Left Info", "amber"),
        ("no_answer", "Business Closed", "slate"),
        ("not_interested", "Not Interested", "red"),
    ),
}

_MODE_ACTIVITY = {
    SessionType.CALL.value: ActivityType.COLD_CALL,
    SessionType.EMAIL.value: ActivityType.COLD_EMAIL,
    SessionType.DM.value: ActivityType.SOCIAL_DM,
    SessionType.MIXED.value: ActivityType.COLD_CALL,
    WALKIN_MODE: ActivityType.WALK_IN,
}

_MODE_CHANNEL = {
    SessionType.CALL.value: Channel.PHONE,
    SessionType.EMAIL.value: Channel.EMAIL,
    SessionType.DM.value: Channel.INSTAGRAM,
    SessionType.MIXED.value: Channel.PHONE,
    WALKIN_MODE: Channel.IN_PERSON,
}


def _mode(mode) -> str:
    key = str(getattr(mode, "value", mode)).strip().lower()
    if key not in SESSION_OUTCOMES:
        raise ValueError(f"Unknown session mode: {mode!r}")
    return key


def outcomes_for_session(mode) -> tuple[OutcomeOption, ...]:
    """Outcome buttons for a session type or "walkin". Raises ValueError if unknown."""
    return SESSION_OUTCOMES[_mode(mode)]


def activity_type_for_session(mode) -> ActivityType:
    return _MODE_ACTIVITY[_mode(mode)]


def channel_for_session(mode) -> Channel:
    return _MODE_CHANNEL[_mode(mode)]


def is_valid_outcome(mode, outcome) -> bool:
    value = getattr(outcome, "value", outcome)
    return any(o.key.value == value for o in outcomes_for_session(mode))
