"""Date classification relative to 'today' in the reference timezone.

This module is the only place that decides whether an event belongs to
today's slate. Other modules consume DateClassification and never compare raw
dates themselves.
"""

from dataclasses import dataclass
from datetime import date, datetime, timezone
from enum import Enum
from zoneinfo import ZoneInfo

import structlog

from gamenight.config import get_settings

logger = structlog.get_logger(__name__)

LATE_NIGHT_HOUR = 22


class DateCategory(str, Enum):
    """Where an event's start falls relative to today."""

    TODAY = "TODAY"
    LATE_NIGHT_SAME_DAY = "LATE_NIGHT_SAME_DAY"
    TOMORROW = "TOMORROW"
    YESTERDAY = "YESTERDAY"
    INVALID = "INVALID"


ELIGIBLE_CATEGORIES = frozenset({DateCategory.TODAY, DateCategory.LATE_NIGHT_SAME_DAY})


@dataclass(frozen=True)
class DateClassification:
    """Result of classifying an event start instant."""

    category: DateCategory
    today: str
    event_date: str | None
    eligible_for_today_pick: bool

    def to_dict(self) -> dict:
        return {
            "category": self.category.value,
            "today": self.today,
            "eventDate": self.event_date,
            "eligibleForTodayPick": self.eligible_for_today_pick,
        }


def reference_zone(tz: ZoneInfo | str | None = None) -> ZoneInfo:
    """Resolve the reference timezone (settings default)."""
    if isinstance(tz, ZoneInfo):
        return tz
    return ZoneInfo(tz or get_settings().reference_timezone)


def parse_instant(value: datetime | str | None) -> datetime | None:
    """
    Parse a provider timestamp into an aware UTC datetime.

    Accepts aware/naive datetimes (naive is treated as UTC) and ISO-8601
    strings, including the minute-precision 'Z' form the scoreboard uses.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        raw = value.strip()
        if not raw:
            return None
        if raw.endswith("Z"):
            raw = raw[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(raw)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def local_today(tz: ZoneInfo | str | None = None, now: datetime | None = None) -> date:
    """Today's calendar date in the reference timezone."""
    zone = reference_zone(tz)
    current = now or datetime.now(timezone.utc)
    if current.tzinfo is None:
        current = current.replace(tzinfo=timezone.utc)
    return current.astimezone(zone).date()


def classify(
    start: datetime | str | None,
    tz: ZoneInfo | str | None = None,
    now: datetime | None = None,
    late_night_hour: int = LATE_NIGHT_HOUR,
) -> DateClassification:
    """
    Classify an event start relative to today in the reference timezone.

    Day difference 0 is TODAY (or LATE_NIGHT_SAME_DAY when the UTC date has
    already rolled over for a late local start), negative is YESTERDAY,
    positive is TOMORROW. Missing or unparsable input is INVALID.
    """
    zone = reference_zone(tz)
    today = local_today(zone, now)
    today_str = today.isoformat()

    instant = parse_instant(start)
    if instant is None:
        logger.debug("date_classification_invalid", raw_start=str(start))
        return DateClassification(
            category=DateCategory.INVALID,
            today=today_str,
            event_date=None,
            eligible_for_today_pick=False,
        )

    local_start = instant.astimezone(zone)
    event_date = local_start.date()
    day_diff = (event_date - today).days

    if day_diff == 0:
        rolled_over = instant.date() != event_date
        if rolled_over and local_start.hour >= late_night_hour:
            category = DateCategory.LATE_NIGHT_SAME_DAY
        else:
            category = DateCategory.TODAY
    elif day_diff < 0:
        category = DateCategory.YESTERDAY
    else:
        category = DateCategory.TOMORROW

    return DateClassification(
        category=category,
        today=today_str,
        event_date=event_date.isoformat(),
        eligible_for_today_pick=category in ELIGIBLE_CATEGORIES,
    )
