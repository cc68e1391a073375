"""Unit tests for the refresh pipeline."""

from datetime import timedelta
from unittest.mock import MagicMock

import pytest

from gamenight.services.availability import AvailabilityCache, RosterEntry
from gamenight.services.confidence import ConfidenceTier
from gamenight.services.espn_client.api import EventFeed, ProviderErrorType, SourceDataError
from gamenight.services.picks.machine import PickStateMachine, TransitionKind
from gamenight.services.picks.service import PickService
from gamenight.services.picks.state import LockReason
from gamenight.services.picks.store import MemoryPickStateStore
from gamenight.services.scoring.engine import WatchabilityEngine


class FakeSource:
    """In-memory event source recording roster requests."""

    def __init__(self, events=None, fetched_at=None, error=None, rosters=None, roster_error=None):
        self.events = events or []
        self.fetched_at = fetched_at
        self.error = error
        self.rosters = rosters or {}
        self.roster_error = roster_error
        self.roster_calls = []

    async def fetch_events(self, category):
        if self.error is not None:
            raise self.error
        return EventFeed(events=list(self.events), fetched_at=self.fetched_at)

    async def fetch_roster(self, category, team_code):
        self.roster_calls.append(team_code)
        if self.roster_error is not None:
            raise self.roster_error
        return self.rosters.get(team_code, [])


class TestPickService:
    """Test PickService.refresh()."""

    def build(self, source):
        self.availability = AvailabilityCache()
        self.store = MemoryPickStateStore()
        reporter = MagicMock()
        return PickService(
            source=source,
            store=self.store,
            availability=self.availability,
            engine=WatchabilityEngine(
                availability=self.availability, tz="America/New_York", reporter=reporter
            ),
            machine=PickStateMachine(tz="America/New_York", reset_hour=6),
            reporter=reporter,
        )

    @pytest.mark.asyncio
    async def test_refresh_picks_top_event(self, make_event, make_team, now):
        events = [
            make_event("1"),
            make_event(
                "2",
                home=make_team("CHA", "15-45"),
                away=make_team("WSH", "12-48"),
                broadcasts=("League Pass",),
            ),
        ]
        service = self.build(FakeSource(events, fetched_at=now))

        result = await service.refresh("nba", now)

        assert result.error is None
        assert result.pick["id"] == "1"
        assert result.pick_state.event_id == "1"
        assert [a["id"] for a in result.alternates] == ["2"]
        assert result.transition.kind == TransitionKind.NEW_PICK
        assert result.pick_metadata["isNewPick"] is True
        assert [e.id for e in result.ranked_events] == ["1", "2"]

    @pytest.mark.asyncio
    async def test_refresh_persists_state(self, make_event, now):
        service = self.build(FakeSource([make_event("1")], fetched_at=now))
        await service.refresh("nba", now)

        stored = await self.store.load("nba")
        assert stored is not None
        assert stored.event_id == "1"

    @pytest.mark.asyncio
    async def test_second_refresh_keeps_pick(self, make_event, now):
        service = self.build(FakeSource([make_event("1")], fetched_at=now))
        await service.refresh("nba", now)
        result = await service.refresh("nba", now + timedelta(minutes=5))

        assert result.transition.kind == TransitionKind.UNCHANGED
        assert result.pick_state.chosen_at == now

    @pytest.mark.asyncio
    async def test_provider_failure_returns_no_pick(self, now):
        """The data provider is unreachable: no pick, error surfaced, no exception."""
        error = SourceDataError("boom", ProviderErrorType.NETWORK, retryable=True)
        service = self.build(FakeSource(error=error))

        result = await service.refresh("nba", now)

        assert result.pick is None
        assert result.error == str(error)
        assert result.ranked_events == []
        assert result.confidence.tier == ConfidenceTier.WEAK
        assert result.transition.kind == TransitionKind.NO_EVENTS

    @pytest.mark.asyncio
    async def test_get_pick_before_refresh(self):
        service = self.build(FakeSource())

        assert service.get_pick("nba") is None
        assert service.get_confidence_tier("nba") is None

    @pytest.mark.asyncio
    async def test_get_pick_after_refresh(self, make_event, now):
        service = self.build(FakeSource([make_event("1")], fetched_at=now))
        await service.refresh("NBA", now)

        assert service.get_pick("nba")["id"] == "1"
        assert service.get_confidence_tier("nba") is not None

    @pytest.mark.asyncio
    async def test_rosters_fetched_for_notable_teams(self, make_event, now):
        rosters = {"OKC": [RosterEntry("Shai Gilgeous-Alexander", "Active")]}
        source = FakeSource([make_event("1")], fetched_at=now, rosters=rosters)
        service = self.build(source)

        await service.refresh("nba", now)

        assert sorted(source.roster_calls) == ["DEN", "OKC"]
        assert self.availability.roster_is_fresh("nba", "OKC", now)

    @pytest.mark.asyncio
    async def test_fresh_rosters_not_refetched(self, make_event, now):
        rosters = {
            "OKC": [RosterEntry("Shai Gilgeous-Alexander")],
            "DEN": [RosterEntry("Nikola Jokic")],
        }
        source = FakeSource([make_event("1")], fetched_at=now, rosters=rosters)
        service = self.build(source)

        await service.refresh("nba", now)
        await service.refresh("nba", now + timedelta(minutes=5))

        assert len(source.roster_calls) == 2

    @pytest.mark.asyncio
    async def test_roster_failure_tolerated(self, make_event, now):
        source = FakeSource([make_event("1")], fetched_at=now, roster_error=RuntimeError("down"))
        service = self.build(source)

        result = await service.refresh("nba", now)

        assert result.pick["id"] == "1"
        assert not self.availability.roster_is_fresh("nba", "OKC", now)

    @pytest.mark.asyncio
    async def test_unexpected_source_error_returns_no_pick(self, now):
        error = AttributeError("'NoneType' object has no attribute 'get'")
        service = self.build(FakeSource(error=error))

        result = await service.refresh("nba", now)

        assert result.pick is None
        assert result.error.startswith("Unusable event data")
        assert result.ranked_events == []
        assert result.transition.kind == TransitionKind.NO_EVENTS

    @pytest.mark.asyncio
    async def test_empty_slate_after_pick_has_no_pick(self, make_event, now):
        """Today's state is kept, but nothing is offered as tonight's pick."""
        source = FakeSource([make_event("1")], fetched_at=now)
        service = self.build(source)
        await service.refresh("nba", now)

        source.events = []
        result = await service.refresh("nba", now + timedelta(minutes=5))

        assert result.transition.kind == TransitionKind.NO_EVENTS
        assert result.pick is None
        assert result.pick_state.event_id == "1"
        assert result.alternates == []
        assert result.confidence.header == "No games today"
        assert service.get_pick("nba") is None

    @pytest.mark.asyncio
    async def test_lock_pick_persists_manual_lock(self, make_event, make_team, now):
        source = FakeSource([make_event("1")], fetched_at=now)
        service = self.build(source)
        await service.refresh("nba", now)

        transition = await service.lock_pick("NBA", now + timedelta(minutes=1))

        assert transition.kind == TransitionKind.LOCKED
        stored = await self.store.load("nba")
        assert stored.locked is True
        assert stored.locked_reason == LockReason.MANUAL
        assert service.last_result("nba").pick_state.locked is True

        source.events = [
            make_event("1"),
            make_event("2", home=make_team("BOS", "50-10"), away=make_team("NYK", "45-15")),
        ]
        result = await service.refresh("nba", now + timedelta(minutes=5))
        assert result.pick_state.event_id == "1"
        assert result.pick_state.locked_reason == LockReason.MANUAL

    @pytest.mark.asyncio
    async def test_lock_pick_without_state_is_noop(self, now):
        service = self.build(FakeSource())

        transition = await service.lock_pick("nba", now)

        assert transition.kind == TransitionKind.UNCHANGED
        assert transition.state is None
        assert await self.store.load("nba") is None
