"""Sanity checks on provider team data.

Critical gaps (a missing side or short code) short-circuit to fallback mode.
Plausibility problems are non-fatal: they switch the event to fallback mode
with DEGRADED quality and the event is still scored.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any

import structlog

from gamenight.config import get_settings
from gamenight.services.error_log import ErrorReporter, get_error_reporter
from gamenight.services.events.models import TeamInfo

logger = structlog.get_logger(__name__)


class DataQuality(str, Enum):
    """Overall quality of an event's provider data."""

    HIGH = "HIGH"
    DEGRADED = "DEGRADED"
    CRITICAL_MISSING = "CRITICAL_MISSING"


@dataclass(frozen=True)
class ValidationResult:
    """Validation outcome attached to every scored event."""

    valid: bool
    fallback_mode: bool
    data_quality: DataQuality
    issues: tuple[str, ...] = field(default_factory=tuple)
    # Set by the scoring engine once notable participants are resolved
    unverified_matchup: bool = False
    injury_status_verified: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "valid": self.valid,
            "fallbackMode": self.fallback_mode,
            "dataQuality": self.data_quality.value,
            "issues": list(self.issues),
            "unverifiedMatchup": self.unverified_matchup,
            "injuryStatusVerified": self.injury_status_verified,
        }


def _fallback_config() -> dict[str, Any]:
    return {
        "suspicious_min_games": 15,
        "suspicious_low_pct": 0.15,
        "suspicious_high_pct": 0.85,
        "seasons": {
            "nba": {"start": [10, 21], "length_days": 240,
                    "steps": [[0, 0], [21, 3], [45, 10], [90, 25]]},
            "nfl": {"start": [9, 4], "length_days": 160,
                    "steps": [[0, 0], [21, 1], [45, 3], [90, 8]]},
            "mlb": {"start": [3, 27], "length_days": 215,
                    "steps": [[0, 0], [21, 5], [45, 20], [90, 50]]},
        },
    }


def _load_default_config() -> dict[str, Any]:
    """Load the validation section from defaults.yaml."""
    loaded = get_settings().load_defaults_config().get("validation")
    return loaded or _fallback_config()


def min_games_expected(
    category: str | None,
    today: date,
    config: dict[str, Any] | None = None,
) -> int:
    """
    Minimum games a team should have played by `today`.

    Steps up with days since the category's season start. Outside the season
    window (preseason / offseason) there is no expectation.
    """
    if not category:
        return 0
    config = config or _load_default_config()
    season = config.get("seasons", {}).get(category.lower())
    if not season:
        return 0

    month, day = season["start"]
    start = date(today.year, month, day)
    if start > today:
        start = date(today.year - 1, month, day)
    days_in = (today - start).days
    if days_in > season.get("length_days", 240):
        return 0

    minimum = 0
    for step_days, step_games in season.get("steps", []):
        if days_in >= step_days:
            minimum = step_games
    return minimum


def validate(
    home: TeamInfo | None,
    away: TeamInfo | None,
    category: str | None = None,
    today: date | None = None,
    config: dict[str, Any] | None = None,
    reporter: ErrorReporter | None = None,
) -> ValidationResult:
    """
    Validate both sides of a matchup.

    Returns:
        ValidationResult with fallback_mode/data_quality set
    """
    reporter = reporter or get_error_reporter()
    config = config or _load_default_config()
    today = today or datetime.now(timezone.utc).date()

    critical = []
    for label, team in (("home", home), ("away", away)):
        if team is None:
            critical.append(f"missing_team:{label}")
        elif not team.abbreviation:
            critical.append(f"missing_abbreviation:{label}")

    if critical:
        reporter.report(
            "Critical team data missing",
            {"category": category, "issues": critical},
        )
        return ValidationResult(
            valid=False,
            fallback_mode=True,
            data_quality=DataQuality.CRITICAL_MISSING,
            issues=tuple(critical),
        )

    issues = []
    min_games = min_games_expected(category, today, config)
    suspicious_min_games = config.get("suspicious_min_games", 15)
    low = config.get("suspicious_low_pct", 0.15)
    high = config.get("suspicious_high_pct", 0.85)

    for team in (home, away):
        record = team.parsed_record
        if record is None:
            issues.append(f"missing_record:{team.abbreviation}")
            continue

        if record.games < min_games:
            issues.append(
                f"season_progress:{team.abbreviation}:{record.games}<{min_games}"
            )

        pct = record.win_pct
        if record.games >= suspicious_min_games and pct is not None and not low <= pct <= high:
            issues.append(f"suspicious_record:{team.abbreviation}:{team.record}")

    if issues:
        reporter.report(
            "Team data failed plausibility checks",
            {
                "category": category,
                "home": home.abbreviation,
                "away": away.abbreviation,
                "issues": issues,
            },
        )
        return ValidationResult(
            valid=False,
            fallback_mode=True,
            data_quality=DataQuality.DEGRADED,
            issues=tuple(issues),
        )

    return ValidationResult(valid=True, fallback_mode=False, data_quality=DataQuality.HIGH)
