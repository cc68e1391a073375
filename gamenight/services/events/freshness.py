"""Staleness checks for provider snapshots.

Freshness only gates the CLEAR confidence tier and annotates subtext. It never
blocks a pick from being emitted.
"""

import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from gamenight.services.events.models import EventStatus

DEFAULT_THRESHOLDS = {
    "in_progress_minutes": 5,
    "scheduled_minutes": 60,
    "final_minutes": 60,
    "default_minutes": 30,
}


@dataclass(frozen=True)
class Freshness:
    """How old a snapshot is versus what is acceptable for its state."""

    fresh: bool
    age_minutes: float
    threshold: float

    @property
    def age_label(self) -> str:
        if math.isinf(self.age_minutes):
            return "unknown"
        return f"{int(self.age_minutes)} min"

    def to_dict(self) -> dict[str, Any]:
        return {
            "fresh": self.fresh,
            "ageMinutes": None if math.isinf(self.age_minutes) else round(self.age_minutes, 1),
            "threshold": self.threshold,
        }


def threshold_for(status: EventStatus | None, config: dict[str, Any] | None = None) -> float:
    """Acceptable snapshot age in minutes for an event status."""
    params = {**DEFAULT_THRESHOLDS, **(config or {})}
    if status is EventStatus.IN_PROGRESS:
        return float(params["in_progress_minutes"])
    if status is EventStatus.SCHEDULED:
        return float(params["scheduled_minutes"])
    if status is EventStatus.FINAL:
        return float(params["final_minutes"])
    return float(params["default_minutes"])


def check_freshness(
    fetched_at: datetime | None,
    status: EventStatus | None,
    now: datetime | None = None,
    config: dict[str, Any] | None = None,
) -> Freshness:
    """
    Compute snapshot age and whether it is acceptable.

    A missing fetch instant has infinite age and is never fresh.
    """
    threshold = threshold_for(status, config)
    if fetched_at is None:
        return Freshness(fresh=False, age_minutes=math.inf, threshold=threshold)

    current = now or datetime.now(timezone.utc)
    if fetched_at.tzinfo is None:
        fetched_at = fetched_at.replace(tzinfo=timezone.utc)
    age_minutes = max(0.0, (current - fetched_at).total_seconds() / 60)
    return Freshness(
        fresh=age_minutes <= threshold,
        age_minutes=age_minutes,
        threshold=threshold,
    )
