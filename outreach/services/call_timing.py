"""
call_timing.py — When is a good time to contact this lead?

Scores an instant against the call windows of a lead's business type, finds
the next good window for scheduling, learns connect-rate patterns from past
calls, and summarizes the windows for display.

Business Rules:
- Inside a window (start <= hour < end on the same weekday) scores the
  window weight; the best window that day wins
- Near a window (nearest edge within 1 hour) scores weight * (1 - dist) * 0.5
- Nothing matched on a weekday between 8:00 and 17:00 scores the 0.20 floor
- Scores are rounded to 2 decimals; the label and color come from the
  rounded score (>=0.70 Great, >=0.40 Good, >=0.20 OK, else Off-peak)
- next_best_window is always strictly after the from-instant; with no window
  in the next 7 days it falls back to the next weekday at 10:00
- Learned slots are advisory: at least 5 calls overall and 3 per slot,
  never merged into the static table
- All weekday/hour math happens in the business time zone; naive datetimes
  are treated as UTC

Called by: services/cadence_generator.py, services/session_queue.py,
           routers/activities.py
Depends on: timing_tables.py, services/business_classifier.py
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Iterable, Mapping
from zoneinfo import ZoneInfo

from outreach.config import settings
from outreach.constants import CALL_ACTIVITY_TYPES, BusinessType, Outcome, parse_enum
from outreach.services.business_classifier import classify_business_type
from outreach.timing_tables import CallWindow, get_timing_tables

log = logging.getLogger("outreach.timing")

# ── Scoring constants ──
NEAR_WINDOW_HOURS = 1.0
NEAR_WINDOW_FACTOR = 0.5
BUSINESS_HOURS_FLOOR = 0.20
BUSINESS_HOURS_START = 8
BUSINESS_HOURS_END = 17

# ── Label thresholds ──
GREAT_THRESHOLD = 0.70
GOOD_THRESHOLD = 0.40
OK_THRESHOLD = 0.20

# ── Learning thresholds ──
MIN_CALLS_FOR_PATTERNS = 5
MIN_CALLS_PER_SLOT = 3
CONNECT_OUTCOMES = (Outcome.CONNECTED, Outcome.INTERESTED, Outcome.MEETING_SET)

FALLBACK_HOUR = 10
FALLBACK_WINDOW_END = 12
FALLBACK_WEIGHT = 0.5
FALLBACK_LABEL = "General business hours"

DAY_NAMES = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]


@dataclass(frozen=True)
class TimingScore:
    score: float
    label: str
    color: str
    matching_window: CallWindow | None
    business_type: BusinessType


@dataclass(frozen=True)
class WindowPick:
    instant: datetime
    window: CallWindow


@dataclass(frozen=True)
class OutcomeSlot:
    day_of_week: int
    hour: int
    total_calls: int
    connects: int
    connect_rate: float


@dataclass(frozen=True)
class WindowSummary:
    day_label: str
    time_range: str
    quality: str  # "best" | "good"
    label: str


@dataclass(frozen=True)
class BestTimeReport:
    """Everything the lead page needs for its best-time-to-call panel."""

    business_type: BusinessType
    current: TimingScore
    next_window: WindowPick
    windows: list[WindowSummary] = field(default_factory=list)
    learned_slots: list[OutcomeSlot] = field(default_factory=list)


# ═══════════════════════════════════════════════════════════════════════
#  HELPERS
# ═══════════════════════════════════════════════════════════════════════


def timing_label(score: float) -> str:
    if score >= GREAT_THRESHOLD:
        return "Great time"
    if score >= GOOD_THRESHOLD:
        return "Good time"
    if score >= OK_THRESHOLD:
        return "OK"
    return "Off-peak"


def timing_color(score: float) -> str:
    if score >= GREAT_THRESHOLD:
        return "emerald"
    if score >= GOOD_THRESHOLD:
        return "blue"
    if score >= OK_THRESHOLD:
        return "amber"
    return "slate"


def resolve_timezone(name: str | None) -> tzinfo:
    """IANA zone by name; UTC when blank."""
    if not name or name.upper() == "UTC":
        return timezone.utc
    return ZoneInfo(name)


def day_of_week(d: date) -> int:
    """0=Sunday … 6=Saturday."""
    return (d.weekday() + 1) % 7


def is_weekend(d: date) -> bool:
    return d.weekday() >= 5


def next_weekday(d: date) -> date:
    """First Monday–Friday date strictly after ``d``."""
    d += timedelta(days=1)
    while is_weekend(d):
        d += timedelta(days=1)
    return d


def _hour_to_time(hour: float) -> time:
    whole = int(hour)
    minutes = int(round((hour - whole) * 60))
    if minutes == 60:
        whole, minutes = whole + 1, 0
    return time(min(whole, 23), minutes)


def _format_hour(hour: float) -> str:
    """12-hour clock label; a window ending at 24 reads "12am"."""
    whole, minute = divmod(int(round(hour * 60)), 60)
    whole %= 24
    suffix = "pm" if whole >= 12 else "am"
    h12 = whole - 12 if whole > 12 else (whole or 12)
    return f"{h12}:{minute:02d}{suffix}" if minute else f"{h12}{suffix}"


def _day_label(days: list[int]) -> str:
    ordered = sorted(days)
    if len(ordered) >= 3 and ordered[-1] - ordered[0] == len(ordered) - 1:
        return f"{DAY_NAMES[ordered[0]]}-{DAY_NAMES[ordered[-1]]}"
    return ", ".join(DAY_NAMES[d] for d in ordered)


# ═══════════════════════════════════════════════════════════════════════
#  TIMING MODEL
# ═══════════════════════════════════════════════════════════════════════


class TimingModel:
    """Call-window table plus the business time zone it is expressed in."""

    def __init__(
        self,
        windows: Mapping[BusinessType, Iterable[CallWindow]],
        tz: tzinfo = timezone.utc,
    ):
        self.windows = {BusinessType(k): tuple(v) for k, v in windows.items()}
        self.tz = tz

    def windows_for(self, business_type: BusinessType) -> tuple[CallWindow, ...]:
        btype = parse_enum(BusinessType, business_type)
        return self.windows.get(btype, ()) if btype else ()

    def to_local(self, instant: datetime) -> datetime:
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=timezone.utc)
        return instant.astimezone(self.tz)

    def start_of_day(self, instant: datetime) -> datetime:
        """Local midnight of the instant's business-zone date, as UTC."""
        local = self.to_local(instant)
        midnight = datetime.combine(local.date(), time(0), tzinfo=self.tz)
        return midnight.astimezone(timezone.utc)

    def at_local(self, d: date, hour: float) -> datetime:
        """UTC instant for a local date and fractional hour."""
        return datetime.combine(d, _hour_to_time(hour), tzinfo=self.tz).astimezone(timezone.utc)

    # ── Scoring ──

    def score_instant(self, business_type: BusinessType, instant: datetime) -> TimingScore:
        business_type = parse_enum(BusinessType, business_type) or BusinessType.GENERAL
        local = self.to_local(instant)
        dow = day_of_week(local.date())
        hour = local.hour + local.minute / 60

        best_score = 0.0
        best_window = None
        for w in self.windows_for(business_type):
            if w.day_of_week != dow:
                continue
            if w.start_hour <= hour < w.end_hour:
                candidate = w.weight
            else:
                dist = min(abs(hour - w.start_hour), abs(hour - w.end_hour))
                if dist > NEAR_WINDOW_HOURS:
                    continue
                candidate = w.weight * (1 - dist) * NEAR_WINDOW_FACTOR
            if candidate > best_score:
                best_score, best_window = candidate, w

        if best_score == 0 and 1 <= dow <= 5 and BUSINESS_HOURS_START <= hour <= BUSINESS_HOURS_END:
            best_score = BUSINESS_HOURS_FLOOR

        score = round(best_score, 2)
        return TimingScore(
            score=score,
            label=timing_label(score),
            color=timing_color(score),
            matching_window=best_window,
            business_type=business_type,
        )

    def score_lead(self, lead, instant: datetime) -> TimingScore:
        """Score an instant for a lead, classifying its category first."""
        return self.score_instant(classify_business_type(getattr(lead, "category", None)), instant)

    # ── Scheduling ──

    def next_best_window(self, business_type: BusinessType, from_instant: datetime) -> WindowPick:
        local_from = self.to_local(from_instant)
        windows = self.windows_for(business_type)

        for offset in range(7):
            day = local_from.date() + timedelta(days=offset)
            dow = day_of_week(day)
            todays = sorted((w for w in windows if w.day_of_week == dow), key=lambda w: -w.weight)
            for w in todays:
                candidate = self.at_local(day, w.start_hour)
                if offset == 0 and candidate <= local_from:
                    continue
                return WindowPick(instant=candidate, window=w)

        fallback_day = next_weekday(local_from.date())
        return WindowPick(
            instant=self.at_local(fallback_day, FALLBACK_HOUR),
            window=CallWindow(
                day_of_week(fallback_day), FALLBACK_HOUR, FALLBACK_WINDOW_END,
                FALLBACK_WEIGHT, FALLBACK_LABEL,
            ),
        )

    # ── Display ──

    def window_summary(self, business_type: BusinessType) -> list[WindowSummary]:
        groups: dict[tuple[float, float], dict] = {}
        for w in self.windows_for(business_type):
            group = groups.setdefault(
                (w.start_hour, w.end_hour), {"days": [], "weight": 0.0, "label": w.label}
            )
            group["days"].append(w.day_of_week)
            group["weight"] = max(group["weight"], w.weight)

        ordered = sorted(groups.items(), key=lambda item: -item[1]["weight"])
        return [
            WindowSummary(
                day_label=_day_label(g["days"]),
                time_range=f"{_format_hour(start)} - {_format_hour(end)}",
                quality="best" if g["weight"] >= 0.85 else "good",
                label=g["label"],
            )
            for (start, end), g in ordered
        ]

    # ── Learning ──

    def learn_from_history(self, activities) -> list[OutcomeSlot]:
        """Connect rates by (weekday, hour) from past calls, best first.

        ``activities`` are objects with activity_type, outcome and occurred_at.
        """
        calls = [a for a in activities if a.activity_type in CALL_ACTIVITY_TYPES]
        if len(calls) < MIN_CALLS_FOR_PATTERNS:
            return []

        buckets: dict[tuple[int, int], list[int]] = {}
        for call in calls:
            local = self.to_local(call.occurred_at)
            counts = buckets.setdefault((day_of_week(local.date()), local.hour), [0, 0])
            counts[0] += 1
            if call.outcome in CONNECT_OUTCOMES:
                counts[1] += 1

        slots = [
            OutcomeSlot(
                day_of_week=dow,
                hour=hour,
                total_calls=total,
                connects=connects,
                connect_rate=connects / total,
            )
            for (dow, hour), (total, connects) in buckets.items()
            if total >= MIN_CALLS_PER_SLOT
        ]
        slots.sort(key=lambda s: -s.connect_rate)
        return slots


def get_timing_model() -> TimingModel:
    """Model over the loaded tables in the configured business time zone."""
    return TimingModel(get_timing_tables().windows, resolve_timezone(settings.business_timezone))


def best_time_for_lead(
    lead,
    activities=(),
    now: datetime | None = None,
    timing: TimingModel | None = None,
) -> BestTimeReport:
    """Bundle current score, next window, window summary and learned slots."""
    timing = timing or get_timing_model()
    now = now or datetime.now(timezone.utc)
    business_type = classify_business_type(getattr(lead, "category", None))
    report = BestTimeReport(
        business_type=business_type,
        current=timing.score_instant(business_type, now),
        next_window=timing.next_best_window(business_type, now),
        windows=timing.window_summary(business_type),
        learned_slots=timing.learn_from_history(activities),
    )
    log.debug(
        "Best time for lead %s (%s): now=%.2f next=%s",
        getattr(lead, "id", "?"), business_type.value,
        report.current.score, report.next_window.instant.isoformat(),
    )
    return report
