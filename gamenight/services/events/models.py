"""Candidate event model and provider-boundary normalization.

Everything downstream of the data source works with these types. Free-text
provider status strings are normalized exactly once, here, into EventStatus.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class EventStatus(str, Enum):
    """Normalized live status of an event."""

    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    FINAL = "final"
    POSTPONED = "postponed"  # postponed or cancelled
    UNKNOWN = "unknown"


class Side(str, Enum):
    """Which side of a matchup a participant belongs to."""

    HOME = "home"
    AWAY = "away"


_POSTPONED_MARKERS = ("postpon", "cancel", "forfeit", "suspended")
_FINAL_MARKERS = ("final", "full_time", "end_of_game", "completed")
_IN_PROGRESS_MARKERS = (
    "in_progress",
    "in progress",
    "halftime",
    "end_period",
    "end_of_period",
    "delay",
    "live",
    "overtime",
)
_SCHEDULED_MARKERS = ("scheduled", "pre", "time_tbd", "tbd")


def normalize_status(raw: str | None) -> EventStatus:
    """
    Map a provider status string to an EventStatus.

    Accepts ESPN style names (STATUS_FINAL, STATUS_IN_PROGRESS, ...) as well as
    the short state values (pre / in / post).
    """
    if not raw:
        return EventStatus.UNKNOWN

    status = raw.strip().lower()
    if status.startswith("status_"):
        status = status[len("status_"):]

    if any(marker in status for marker in _POSTPONED_MARKERS):
        return EventStatus.POSTPONED
    if status == "post" or any(marker in status for marker in _FINAL_MARKERS):
        return EventStatus.FINAL
    if status == "in" or any(marker in status for marker in _IN_PROGRESS_MARKERS):
        return EventStatus.IN_PROGRESS
    if any(status.startswith(marker) for marker in _SCHEDULED_MARKERS):
        return EventStatus.SCHEDULED
    return EventStatus.UNKNOWN


@dataclass(frozen=True)
class Record:
    """Parsed win-loss(-tie) record."""

    wins: int
    losses: int
    ties: int = 0

    @property
    def games(self) -> int:
        return self.wins + self.losses + self.ties

    @property
    def win_pct(self) -> float | None:
        if self.games == 0:
            return None
        return (self.wins + 0.5 * self.ties) / self.games


def parse_record(summary: str | None) -> Record | None:
    """Parse '50-10' / '9-7-1' record strings. Returns None when unusable."""
    if not summary or not isinstance(summary, str):
        return None
    parts = summary.strip().split("-")
    if len(parts) not in (2, 3):
        return None
    try:
        numbers = [int(p) for p in parts]
    except ValueError:
        return None
    if any(n < 0 for n in numbers):
        return None
    return Record(*numbers)


@dataclass(frozen=True)
class TeamInfo:
    """One side of a matchup as reported by the provider."""

    name: str | None
    abbreviation: str | None
    record: str | None = None
    location: str | None = None
    provider_id: str | None = None

    @property
    def parsed_record(self) -> Record | None:
        return parse_record(self.record)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.abbreviation,
            "name": self.name,
            "abbreviation": self.abbreviation,
            "record": self.record,
            "city": self.location,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "TeamInfo | None":
        if not data:
            return None
        return cls(
            name=data.get("name"),
            abbreviation=data.get("abbreviation"),
            record=data.get("record"),
            location=data.get("city"),
        )


@dataclass(frozen=True)
class CandidateEvent:
    """
    A scheduled, live or finished event in one category.

    Built fresh on every refresh and never mutated.
    """

    id: str
    category: str
    home: TeamInfo | None
    away: TeamInfo | None
    start_time: datetime | None
    status: EventStatus = EventStatus.UNKNOWN
    raw_status: str | None = None
    home_score: int | None = None
    away_score: int | None = None
    network: str | None = None
    broadcasts: tuple[str, ...] = ()
    headline: str | None = None
    # Side -> probable starter name (MLB pitchers)
    probables: dict[Side, str] = field(default_factory=dict)

    def team(self, side: Side) -> TeamInfo | None:
        return self.home if side is Side.HOME else self.away

    @property
    def has_started_status(self) -> bool:
        return self.status in (EventStatus.IN_PROGRESS, EventStatus.FINAL)

    def to_dict(self) -> dict[str, Any]:
        """JSON-shaped payload, also used as the cached copy inside PickState."""
        return {
            "id": self.id,
            "category": self.category,
            "startTime": self.start_time.isoformat() if self.start_time else None,
            "status": self.status.value,
            "rawStatus": self.raw_status,
            "homeScore": self.home_score,
            "awayScore": self.away_score,
            "network": self.network,
            "broadcasts": list(self.broadcasts),
            "headline": self.headline,
            "homeTeam": self.home.to_dict() if self.home else None,
            "awayTeam": self.away.to_dict() if self.away else None,
            "probables": {side.value: name for side, name in self.probables.items()},
        }
