"""Notable-participant ("star power") scoring.

A 'vs' result always pairs exactly one individual from each side. When only
one side has an available notable, the result features exactly one
individual. Two individuals from the same side are never paired.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from gamenight.services.availability import AvailabilityCache
from gamenight.services.availability.cache import is_unavailable_status
from gamenight.services.events.models import CandidateEvent, Side
from gamenight.services.scoring.categories import CategoryProfile

DEFAULT_POINTS = {
    "max": 20,
    "premier_vs_premier": 20,
    "premier_vs_secondary": 16,
    "secondary_vs_secondary": 12,
    "single_premier": 10,
    "single_secondary": 6,
}


class MatchupType(str, Enum):
    VS = "vs"
    SINGLE = "single"
    NONE = "none"


@dataclass(frozen=True)
class Featured:
    """One featured individual."""

    name: str
    side: Side
    premier: bool
    verified: bool
    # Last status from an expired record, shown instead of a clean label
    status_note: str | None = None


@dataclass(frozen=True)
class NotableResult:
    """Outcome of the notable-participant scorer."""

    score: int
    reason: str
    matchup_type: MatchupType = MatchupType.NONE
    featured: tuple[Featured, ...] = ()
    label: str | None = None
    injury_status_verified: bool = True
    excluded: tuple[str, ...] = ()

    @property
    def unverified_pairing(self) -> bool:
        return self.matchup_type is MatchupType.VS and not self.injury_status_verified

    @property
    def availability_verified(self) -> bool:
        """True only when someone was featured and every featured status is confirmed."""
        return self.matchup_type is not MatchupType.NONE and self.injury_status_verified

    @property
    def names(self) -> list[str]:
        return [f.name for f in self.featured]

    def to_dict(self) -> dict[str, Any]:
        by_side = {f.side: f.name for f in self.featured}
        return {
            "score": self.score,
            "reason": self.reason,
            "matchupType": self.matchup_type.value,
            "label": self.label,
            "homePlayer": by_side.get(Side.HOME),
            "awayPlayer": by_side.get(Side.AWAY),
            "injuryStatusVerified": self.injury_status_verified,
            "excluded": list(self.excluded),
            "statusNotes": {f.name: f.status_note for f in self.featured if f.status_note},
        }


NO_NOTABLES = NotableResult(score=0, reason="No marquee names")


def _stale_note(
    availability: AvailabilityCache,
    profile: CategoryProfile,
    team_code: str,
    name: str,
) -> str | None:
    """Expired records never exclude, but a last-known absence still hedges the display."""
    record = availability.lookup(profile.name, team_code, name)
    if record is not None and is_unavailable_status(record.status):
        return f"Last reported {record.status}"
    return None


def _side_pool(
    event: CandidateEvent,
    side: Side,
    profile: CategoryProfile,
    availability: AvailabilityCache | None,
    now: datetime | None,
) -> tuple[list[Featured], list[Featured], list[str]]:
    """Available premier/secondary notables for one side plus excluded names."""
    tiers = profile.candidates(event, side)
    team = event.team(side)
    premier, secondary, excluded = [], [], []

    for names, bucket, is_premier in (
        (tiers.premier, premier, True),
        (tiers.secondary, secondary, False),
    ):
        if not names:
            continue
        if availability is None:
            bucket.extend(Featured(name, side, is_premier, verified=False) for name in names)
            continue
        kept = availability.filter_available(names, team.abbreviation, profile.name, now)
        excluded.extend(name for name in names if name not in kept.available)
        for name in kept.available:
            verified = name not in kept.unverified
            note = None if verified else _stale_note(availability, profile, team.abbreviation, name)
            bucket.append(Featured(name, side, is_premier, verified=verified, status_note=note))

    return premier, secondary, excluded


def score_notables(
    event: CandidateEvent,
    profile: CategoryProfile | None,
    availability: AvailabilityCache | None = None,
    config: dict[str, Any] | None = None,
    now: datetime | None = None,
) -> NotableResult:
    """
    Score notable-participant power (0-20).

    Priority: premier vs premier, premier vs secondary, secondary vs
    secondary, single premier, single secondary, none.
    """
    if profile is None:
        return NO_NOTABLES
    points = {**DEFAULT_POINTS, **(config or {})}

    home_p, home_s, home_x = _side_pool(event, Side.HOME, profile, availability, now)
    away_p, away_s, away_x = _side_pool(event, Side.AWAY, profile, availability, now)
    excluded = tuple(home_x + away_x)

    home_best = (home_p or home_s or [None])[0]
    away_best = (away_p or away_s or [None])[0]

    if home_best and away_best:
        featured = (away_best, home_best)
        if home_best.premier and away_best.premier:
            score, kind = points["premier_vs_premier"], "Marquee matchup"
        elif home_best.premier or away_best.premier:
            score, kind = points["premier_vs_secondary"], "Star matchup"
        else:
            score, kind = points["secondary_vs_secondary"], "Quality matchup"
        matchup_type = MatchupType.VS
    elif home_best or away_best:
        best = home_best or away_best
        featured = (best,)
        if best.premier:
            score, kind = points["single_premier"], "Star power"
        else:
            score, kind = points["single_secondary"], "Notable name"
        matchup_type = MatchupType.SINGLE
    else:
        if excluded:
            return NotableResult(
                score=0,
                reason="Marquee names unavailable",
                excluded=excluded,
            )
        return NO_NOTABLES

    verified = all(f.verified for f in featured)
    if matchup_type is MatchupType.VS:
        label = "Matchup" if verified else "Expected Matchup"
        detail = f"{featured[0].name} vs {featured[1].name}"
    else:
        label = "Star" if verified else "Expected Star"
        detail = featured[0].name

    return NotableResult(
        score=min(score, points["max"]),
        reason=f"{kind}: {detail}",
        matchup_type=matchup_type,
        featured=featured,
        label=label,
        injury_status_verified=verified,
        excluded=excluded,
    )
