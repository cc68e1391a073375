"""Pytest configuration and fixtures for Gamenight tests."""

from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from gamenight.services.events.dates import DateCategory, DateClassification
from gamenight.services.events.models import CandidateEvent, EventStatus, Side, TeamInfo
from gamenight.services.events.validation import DataQuality, ValidationResult
from gamenight.services.scoring.engine import ComponentScore, Components, ScoredEvent
from gamenight.services.scoring.notable import Featured, MatchupType, NotableResult

ET = ZoneInfo("America/New_York")

# Noon Eastern on an in-season NBA day
NOW = datetime(2026, 3, 1, 17, 0, tzinfo=timezone.utc)


@pytest.fixture
def now():
    """Fixed evaluation instant."""
    return NOW


@pytest.fixture
def make_team():
    """Factory for TeamInfo."""

    def _make(abbreviation, record="40-20", name=None, location=None):
        return TeamInfo(
            name=name or f"{abbreviation} Team",
            abbreviation=abbreviation,
            record=record,
            location=location or f"{abbreviation} City",
        )

    return _make


@pytest.fixture
def make_event(make_team):
    """Factory for CandidateEvent with sensible NBA defaults."""

    def _make(
        event_id="401",
        home=None,
        away=None,
        start=None,
        status=EventStatus.SCHEDULED,
        broadcasts=("ESPN",),
        headline=None,
        category="nba",
        probables=None,
    ):
        return CandidateEvent(
            id=event_id,
            category=category,
            home=home if home is not None else make_team("OKC", "50-10", "Oklahoma City Thunder", "Oklahoma City"),
            away=away if away is not None else make_team("DEN", "48-12", "Denver Nuggets", "Denver"),
            start_time=start or NOW + timedelta(hours=8),
            status=status,
            raw_status=status.value,
            network=broadcasts[0] if broadcasts else None,
            broadcasts=tuple(broadcasts),
            headline=headline,
            probables=probables or {},
        )

    return _make


@pytest.fixture
def make_scored():
    """
    Factory for ScoredEvent with a directly chosen score.

    Used by ranking, confidence and state machine tests that should not
    depend on scoring tables.
    """

    def _make(
        event_id,
        score,
        start=None,
        status=EventStatus.SCHEDULED,
        verified=True,
        data_quality=DataQuality.HIGH,
        fallback=False,
        unverified_matchup=False,
        eligible=True,
        no_start=False,
    ):
        event = CandidateEvent(
            id=event_id,
            category="nba",
            home=TeamInfo(f"Home {event_id}", f"H{event_id}", "40-20"),
            away=TeamInfo(f"Away {event_id}", f"A{event_id}", "38-22"),
            start_time=None if no_start else (start or NOW + timedelta(hours=7)),
            status=status,
        )
        notable = NotableResult(
            score=10,
            reason="Star power: Someone",
            matchup_type=MatchupType.SINGLE,
            featured=(Featured("Someone", Side.HOME, True, verified),),
            label="Star" if verified else "Expected Star",
            injury_status_verified=verified,
        )
        validation = ValidationResult(
            valid=data_quality is DataQuality.HIGH,
            fallback_mode=fallback,
            data_quality=data_quality,
            unverified_matchup=unverified_matchup,
            injury_status_verified=verified,
        )
        components = Components(
            stakes=ComponentScore(0, ""),
            star_power=ComponentScore(10, ""),
            competitiveness=ComponentScore(0, ""),
            narrative=ComponentScore(0, ""),
            accessibility=ComponentScore(0, ""),
        )
        classification = DateClassification(
            category=DateCategory.TODAY if eligible else DateCategory.TOMORROW,
            today="2026-03-01",
            event_date="2026-03-01" if eligible else "2026-03-02",
            eligible_for_today_pick=eligible,
        )
        return ScoredEvent(
            event=event,
            classification=classification,
            validation=validation,
            components=components,
            notable=notable,
            score=score,
            why_watch="Worth a look.",
        )

    return _make
