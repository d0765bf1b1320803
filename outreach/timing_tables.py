"""
timing_tables.py — Business keyword and call-window tables loader.

Holds the compiled-in category keyword table and the per-business-type call
windows, and optionally overrides either from a JSON file named by
``settings.timing_tables_path``. The loaded tables are immutable and cached;
reload_timing_tables() swaps in a fresh copy.

Business Rules:
- Keyword order matters: the classifier takes the first business type
  whose keyword list matches, in the order listed here
- Keywords are stored lowercase and stripped
- Windows use day-of-week 0=Sunday … 6=Saturday and fractional hours
  (9.5 = 9:30) in the business time zone; start < end, weight in [0, 1]
- Missing or unreadable override file falls back to the defaults
- Malformed window rows are skipped with a warning, weights clamped to [0, 1]

Override file format:
    {
      "category_keywords": {"restaurant": ["pizza", "taco"], ...},
      "call_windows": {"restaurant": [[2, 9, 10.5, 0.9, "Before lunch prep"], ...]}
    }

Called by: services/business_classifier.py, services/call_timing.py
Depends on: config.py
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Mapping

from loguru import logger

from .config import settings
from .constants import BusinessType


@dataclass(frozen=True)
class CallWindow:
    """A recurring weekly interval when a business type tends to answer."""

    day_of_week: int  # 0=Sunday … 6=Saturday
    start_hour: float
    end_hour: float
    weight: float
    label: str


@dataclass(frozen=True)
class TimingTables:
    keywords: Mapping[BusinessType, tuple[str, ...]]
    windows: Mapping[BusinessType, tuple[CallWindow, ...]]


# ── Defaults ────────────────────────────────────────────────────────────

DEFAULT_CATEGORY_KEYWORDS: dict[BusinessType, tuple[str, ...]] = {
    BusinessType.RESTAURANT: (
        "restaurant", "cafe", "coffee", "bakery", "bar", "grill", "pizza", "sushi",
        "thai", "chinese", "mexican", "italian", "indian", "food", "diner", "bistro",
        "eatery", "kitchen", "brewing", "brewery", "pub", "taco", "burger",
        "nepalese", "japanese", "korean", "vietnamese", "catering", "deli", "juice",
        "smoothie", "ice cream", "bbq",
    ),
    BusinessType.RETAIL: (
        "shop", "store", "boutique", "retail", "clothing", "apparel", "jewelry",
        "gift", "florist", "flower", "pet", "furniture", "hardware", "bookstore",
        "gallery", "antique", "thrift",
    ),
    BusinessType.PROFESSIONAL_SERVICES: (
        "law", "legal", "attorney", "accounting", "cpa", "consulting", "financial",
        "insurance", "real estate", "realty", "architect", "engineering",
        "marketing", "agency", "design", "photography", "photographer",
        "videograph", "studio", "media", "creative", "tech", "software",
        "it services", "staffing", "recruiting",
    ),
    BusinessType.HEALTH_WELLNESS: (
        "dental", "dentist", "doctor", "medical", "clinic", "therapy", "therapist",
        "chiropract", "massage", "spa", "salon", "barber", "beauty", "nail", "yoga",
        "fitness", "gym", "wellness", "health", "veterinar", "vet", "optom", "eye",
        "pharmacy", "urgent care",
    ),
    BusinessType.HOME_SERVICES: (
        "plumb", "electric", "hvac", "roofing", "roofer", "landscap", "painting",
        "painter", "cleaning", "janitorial", "pest", "contractor", "construction",
        "remodel", "handyman", "moving", "locksmith", "garage door", "fencing",
        "pool", "solar",
    ),
    BusinessType.AUTOMOTIVE: (
        "auto", "car", "mechanic", "tire", "body shop", "collision", "detailing",
        "wash", "dealer", "towing", "transmission",
    ),
    BusinessType.CREATOR: (
        "creator", "influencer", "blogger", "youtuber", "podcast", "streamer",
        "content creator", "social media",
    ),
    BusinessType.GENERAL: (),
}


def _days(days, start, end, weights, label):
    return tuple(CallWindow(d, start, end, w, label) for d, w in zip(days, weights))


_TUE_THU = (2, 3, 4)
_MON_THU = (1, 2, 3, 4)
_MON_FRI = (1, 2, 3, 4, 5)

DEFAULT_CALL_WINDOWS: dict[BusinessType, tuple[CallWindow, ...]] = {
    BusinessType.RESTAURANT: (
        _days(_TUE_THU, 9, 10.5, (0.9, 0.95, 0.9), "Before lunch prep")
        + _days(_MON_THU, 14, 16, (0.8, 0.85, 0.9, 0.85), "Between services")
    ),
    BusinessType.RETAIL: (
        _days(_TUE_THU, 9, 10.5, (0.9, 0.95, 0.9), "Before store opens")
        + _days(_MON_THU, 13, 15, (0.75, 0.8, 0.85, 0.8), "Afternoon lull")
    ),
    BusinessType.PROFESSIONAL_SERVICES: (
        _days(_TUE_THU, 10, 12, (0.9, 0.95, 0.9), "Mid-morning")
        + _days(_MON_THU, 14, 16, (0.8, 0.85, 0.9, 0.85), "Post-lunch")
        + _days((5,), 10, 12, (0.7,), "Friday morning")
    ),
    BusinessType.HEALTH_WELLNESS: (
        _days(_TUE_THU, 8, 9.5, (0.9, 0.95, 0.9), "Before appointments")
        + _days(_MON_THU, 12, 13.5, (0.75, 0.8, 0.85, 0.8), "Lunch break")
    ),
    BusinessType.HOME_SERVICES: (
        _days(_MON_FRI, 7, 8.5, (0.85, 0.9, 0.9, 0.9, 0.85), "Before jobs")
        + _days(_MON_THU, 16.5, 18, (0.8, 0.85, 0.85, 0.8), "End of day")
    ),
    BusinessType.AUTOMOTIVE: (
        _days(_MON_FRI, 8, 9.5, (0.85, 0.9, 0.9, 0.9, 0.85), "Shop just opened")
        + _days(_TUE_THU, 14, 15.5, (0.8, 0.85, 0.8), "Mid-afternoon")
    ),
    BusinessType.CREATOR: (
        _days(_TUE_THU, 11, 13, (0.9, 0.95, 0.9), "Late morning")
        + _days(_MON_THU, 15, 17, (0.75, 0.8, 0.85, 0.8), "Afternoon")
    ),
    BusinessType.GENERAL: (
        _days(_TUE_THU, 10, 11.5, (0.85, 0.9, 0.85), "Mid-morning")
        + _days(_TUE_THU, 14, 15.5, (0.75, 0.8, 0.75), "Early afternoon")
    ),
}


def default_timing_tables() -> TimingTables:
    return TimingTables(
        keywords=MappingProxyType(dict(DEFAULT_CATEGORY_KEYWORDS)),
        windows=MappingProxyType(dict(DEFAULT_CALL_WINDOWS)),
    )


# ── Loading ─────────────────────────────────────────────────────────────


def _parse_window(row) -> CallWindow | None:
    """Build a CallWindow from a [dow, start, end, weight, label] row or dict."""
    try:
        if isinstance(row, dict):
            dow, start, end = row["day_of_week"], row["start_hour"], row["end_hour"]
            weight, label = row["weight"], row.get("label", "")
        else:
            dow, start, end, weight, label = row
        dow, start, end, weight = int(dow), float(start), float(end), float(weight)
    except (KeyError, TypeError, ValueError):
        return None
    if not 0 <= dow <= 6 or not 0 <= start < end <= 24:
        return None
    return CallWindow(dow, start, end, min(max(weight, 0.0), 1.0), str(label))


def _parse_keywords(raw: dict) -> dict[BusinessType, tuple[str, ...]]:
    merged = dict(DEFAULT_CATEGORY_KEYWORDS)
    for key, words in raw.items():
        try:
            btype = BusinessType(str(key).strip().lower())
        except ValueError:
            logger.warning(f"Timing tables: unknown business type {key!r} in keywords, skipped")
            continue
        merged[btype] = tuple(
            str(w).strip().lower() for w in (words or []) if str(w).strip()
        )
    # Preserve the canonical classification order regardless of file order
    return {bt: merged[bt] for bt in DEFAULT_CATEGORY_KEYWORDS}


def _parse_windows(raw: dict) -> dict[BusinessType, tuple[CallWindow, ...]]:
    merged = dict(DEFAULT_CALL_WINDOWS)
    for key, rows in raw.items():
        try:
            btype = BusinessType(str(key).strip().lower())
        except ValueError:
            logger.warning(f"Timing tables: unknown business type {key!r} in windows, skipped")
            continue
        parsed = []
        for row in rows or []:
            window = _parse_window(row)
            if window is None:
                logger.warning(f"Timing tables: malformed window {row!r} for {btype.value}, skipped")
                continue
            parsed.append(window)
        merged[btype] = tuple(parsed)
    return merged


def load_timing_tables(path: Path | str | None = None) -> TimingTables:
    """Read tables from a JSON override file, falling back to the defaults."""
    if not path:
        return default_timing_tables()
    target = Path(path)
    if not target.exists():
        logger.warning(f"Timing tables config not found at {target}, using defaults")
        return default_timing_tables()

    try:
        raw = json.loads(target.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError) as exc:
        logger.error(f"Failed to parse timing tables config: {exc}")
        return default_timing_tables()
    if not isinstance(raw, dict):
        logger.error("Timing tables config must be a JSON object, using defaults")
        return default_timing_tables()

    keywords = _parse_keywords(raw.get("category_keywords") or {})
    windows = _parse_windows(raw.get("call_windows") or {})
    logger.info(
        f"Timing tables loaded from {target}: "
        f"{sum(len(v) for v in keywords.values())} keywords, "
        f"{sum(len(v) for v in windows.values())} windows"
    )
    return TimingTables(
        keywords=MappingProxyType(keywords), windows=MappingProxyType(windows)
    )


_tables: TimingTables | None = None


def get_timing_tables() -> TimingTables:
    """Return the cached tables, loading them on first use."""
    global _tables
    if _tables is None:
        _tables = load_timing_tables(settings.timing_tables_path or None)
    return _tables


def reload_timing_tables(path: Path | str | None = None) -> TimingTables:
    """Reload the cached tables (from ``path`` or the configured file)."""
    global _tables
    _tables = load_timing_tables(path or settings.timing_tables_path or None)
    return _tables
