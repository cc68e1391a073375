"""Participant availability cache fed by roster fetches.

Owned and injected (one instance per process), never reached as ambient
global state by the scoring code. Records and roster snapshots older than the
TTL are ignored for exclusion, so stale data degrades to "unverified" rather
than hiding a participant.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Iterable

import structlog

logger = structlog.get_logger(__name__)

DEFAULT_TTL = timedelta(hours=4)

UNAVAILABLE_STATUSES = frozenset(
    {
        "out",
        "o",
        "injured reserve",
        "ir",
        "doubtful",
        "suspended",
        "susp",
        "not with team",
        "pup",
        "physically unable to perform",
        "nfi",
        "non football injury",
        "day to day",
        "dtd",
        "injured list",
        "inactive",
    }
)

AVAILABLE_STATUSES = frozenset({"active", "healthy", "available", "probable"})

_INJURED_LIST_RE = re.compile(r"^\d+\s*day\s*(il|injured list)$")


def normalize_name(name: str) -> str:
    """Case/whitespace-insensitive participant key."""
    return " ".join(name.replace(".", "").split()).casefold()


def normalize_availability_status(status: str | None) -> str:
    if not status:
        return ""
    return " ".join(status.replace("-", " ").replace("_", " ").split()).lower()


def is_unavailable_status(status: str | None) -> bool:
    normalized = normalize_availability_status(status)
    return normalized in UNAVAILABLE_STATUSES or bool(_INJURED_LIST_RE.match(normalized))


def is_available_status(status: str | None) -> bool:
    return normalize_availability_status(status) in AVAILABLE_STATUSES


@dataclass(frozen=True)
class RosterEntry:
    """One participant from a roster fetch."""

    name: str
    status: str = "Active"
    position: str | None = None
    detail: str | None = None


@dataclass(frozen=True)
class AvailabilityRecord:
    """Latest known participation status for one participant."""

    status: str
    detail: str | None
    on_roster: bool
    updated_at: datetime


@dataclass(frozen=True)
class RosterSnapshot:
    """Known participant names for one team."""

    names: frozenset[str]
    updated_at: datetime

    @property
    def count(self) -> int:
        return len(self.names)


@dataclass(frozen=True)
class Availability:
    """Answer to 'can this participant be featured?'."""

    available: bool
    verified: bool
    on_roster: bool


@dataclass(frozen=True)
class AvailabilityFilter:
    """Result of filtering a list of names for one team."""

    available: list[str]
    has_unverified: bool
    unverified: list[str] = field(default_factory=list)


class AvailabilityCache:
    """
    Per (category, team, participant) availability with TTL-aware lookups.

    Keys are isolated by category so tables for different sports never mix.
    """

    def __init__(self, ttl: timedelta = DEFAULT_TTL, clock=None):
        self.ttl = ttl
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._records: dict[tuple[str, str, str], AvailabilityRecord] = {}
        self._rosters: dict[tuple[str, str], RosterSnapshot] = {}

    @staticmethod
    def _team_key(category: str, team_code: str) -> tuple[str, str]:
        return category.lower(), team_code.upper()

    def _is_fresh(self, updated_at: datetime, now: datetime) -> bool:
        return now - updated_at <= self.ttl

    def record_roster(
        self,
        category: str,
        team_code: str,
        roster: Iterable[RosterEntry | dict[str, Any]],
        now: datetime | None = None,
    ) -> RosterSnapshot:
        """
        Overwrite the roster snapshot and every availability record for a team.

        Accepts RosterEntry objects or dicts with name/status/detail keys.
        """
        now = now or self._clock()
        team_key = self._team_key(category, team_code)

        # Drop the team's previous records so departed participants vanish
        for key in [k for k in self._records if k[:2] == team_key]:
            del self._records[key]

        names = set()
        for entry in roster:
            if isinstance(entry, dict):
                entry = RosterEntry(
                    name=entry.get("name") or "",
                    status=entry.get("status") or "Active",
                    position=entry.get("position"),
                    detail=entry.get("detail") or entry.get("injuryType"),
                )
            if not entry.name:
                continue
            name_key = normalize_name(entry.name)
            names.add(name_key)
            self._records[(*team_key, name_key)] = AvailabilityRecord(
                status=entry.status,
                detail=entry.detail,
                on_roster=True,
                updated_at=now,
            )

        snapshot = RosterSnapshot(names=frozenset(names), updated_at=now)
        self._rosters[team_key] = snapshot
        logger.debug(
            "roster_recorded",
            category=team_key[0],
            team=team_key[1],
            count=snapshot.count,
        )
        return snapshot

    def roster_is_fresh(self, category: str, team_code: str, now: datetime | None = None) -> bool:
        snapshot = self._rosters.get(self._team_key(category, team_code))
        return snapshot is not None and self._is_fresh(snapshot.updated_at, now or self._clock())

    def lookup(self, category: str, team_code: str, name: str) -> AvailabilityRecord | None:
        """Latest record regardless of staleness (for display softening)."""
        return self._records.get((*self._team_key(category, team_code), normalize_name(name)))

    def is_available(
        self,
        category: str,
        team_code: str,
        name: str,
        now: datetime | None = None,
    ) -> Availability:
        """
        Decide whether a participant can be featured.

        A fresh roster that does not list the name is a hard, verified
        exclusion. Otherwise a fresh record decides; unknown statuses and
        missing/stale data are shown but unverified.
        """
        now = now or self._clock()
        team_key = self._team_key(category, team_code)
        name_key = normalize_name(name)

        snapshot = self._rosters.get(team_key)
        if snapshot is not None and self._is_fresh(snapshot.updated_at, now):
            if name_key not in snapshot.names:
                return Availability(available=False, verified=True, on_roster=False)

        record = self._records.get((*team_key, name_key))
        if record is None:
            return Availability(available=True, verified=False, on_roster=False)

        if not self._is_fresh(record.updated_at, now):
            return Availability(available=True, verified=False, on_roster=record.on_roster)

        if is_unavailable_status(record.status):
            return Availability(available=False, verified=True, on_roster=record.on_roster)
        if is_available_status(record.status):
            return Availability(available=True, verified=True, on_roster=record.on_roster)
        return Availability(available=True, verified=False, on_roster=record.on_roster)

    def filter_available(
        self,
        names: Iterable[str],
        team_code: str,
        category: str,
        now: datetime | None = None,
    ) -> AvailabilityFilter:
        """Keep only featurable names, in order, and list the kept names that are unverified."""
        now = now or self._clock()
        available = []
        unverified = []
        for name in names:
            result = self.is_available(category, team_code, name, now)
            if not result.available:
                continue
            available.append(name)
            if not result.verified:
                unverified.append(name)
        return AvailabilityFilter(
            available=available,
            has_unverified=bool(unverified),
            unverified=unverified,
        )
