"""Refresh orchestration.

One refresh runs fetch -> rosters -> score -> rank -> tier -> state machine to
completion for a category before the next refresh of that category may start.
"""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Protocol

import structlog

from gamenight.services.availability import AvailabilityCache, RosterEntry
from gamenight.services.confidence import ConfidenceResult, tier
from gamenight.services.error_log import ErrorReporter, get_error_reporter
from gamenight.services.espn_client.api import EventFeed, SourceDataError
from gamenight.services.events.freshness import Freshness, check_freshness
from gamenight.services.events.models import CandidateEvent
from gamenight.services.picks.machine import PickStateMachine, Transition, TransitionKind
from gamenight.services.picks.state import PickState
from gamenight.services.picks.store import PickStateStore
from gamenight.services.ranking import rank
from gamenight.services.scoring.categories import get_profile
from gamenight.services.scoring.engine import ScoredEvent, WatchabilityEngine

logger = structlog.get_logger(__name__)


class EventSource(Protocol):
    async def fetch_events(self, category: str) -> EventFeed: ...

    async def fetch_roster(self, category: str, team_code: str) -> list[RosterEntry]: ...


@dataclass
class RefreshResult:
    """Everything one refresh produced for a category."""

    category: str
    ranked_events: list[ScoredEvent] = field(default_factory=list)
    pick: dict[str, Any] | None = None
    pick_state: PickState | None = None
    confidence: ConfidenceResult | None = None
    alternates: list[dict[str, Any]] = field(default_factory=list)
    transition: Transition | None = None
    freshness: Freshness | None = None
    error: str | None = None

    @property
    def pick_metadata(self) -> dict[str, Any]:
        kind = self.transition.kind if self.transition else None
        return {
            "transition": kind.value if kind else None,
            "isNewPick": kind is TransitionKind.NEW_PICK,
            "wasReevaluated": kind is TransitionKind.REEVALUATED,
            "wasLocked": kind is TransitionKind.LOCKED,
            "wasOverridden": kind is TransitionKind.OVERRIDDEN,
            "reason": self.transition.reason if self.transition else None,
            "overrideMessage": self.transition.message if self.transition else None,
            "previousEventId": self.transition.previous_event_id if self.transition else None,
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "category": self.category,
            "rankedEvents": [e.to_dict() for e in self.ranked_events],
            "pick": self.pick,
            "pickState": self.pick_state.to_dict() if self.pick_state else None,
            "confidenceTier": self.confidence.to_dict() if self.confidence else None,
            "alternates": self.alternates,
            "pickMetadata": self.pick_metadata,
            "freshness": self.freshness.to_dict() if self.freshness else None,
            "error": self.error,
        }


class PickService:
    """Owns the per-category refresh pipeline and the last result per category."""

    def __init__(
        self,
        source: EventSource,
        store: PickStateStore,
        availability: AvailabilityCache | None = None,
        engine: WatchabilityEngine | None = None,
        machine: PickStateMachine | None = None,
        reporter: ErrorReporter | None = None,
    ):
        self.source = source
        self.store = store
        self.availability = availability or AvailabilityCache()
        self.reporter = reporter or get_error_reporter()
        self.engine = engine or WatchabilityEngine(
            availability=self.availability, reporter=self.reporter
        )
        self.machine = machine or PickStateMachine()
        self._locks: dict[str, asyncio.Lock] = {}
        self._last: dict[str, RefreshResult] = {}

    def _lock(self, category: str) -> asyncio.Lock:
        if category not in self._locks:
            self._locks[category] = asyncio.Lock()
        return self._locks[category]

    async def _fetch_events(self, category: str) -> EventFeed:
        try:
            return await self.source.fetch_events(category)
        except SourceDataError as e:
            self.reporter.report(e, {"category": category, "stage": "fetch_events"})
            return EventFeed(events=[], fetched_at=None, error=str(e))
        except Exception as e:
            # A source that fails outside its own error contract still yields an empty slate
            logger.error("fetch_events_unexpected_error", category=category, error=str(e))
            self.reporter.report(e, {"category": category, "stage": "fetch_events"})
            return EventFeed(events=[], fetched_at=None, error=f"Unusable event data: {e}")

    def _stale_teams(self, category: str, events: list[CandidateEvent], now: datetime) -> list[str]:
        """Teams with notable participants whose roster is missing or stale."""
        profile = get_profile(category)
        if profile is None:
            return []
        teams = []
        for event in events:
            for team in (event.home, event.away):
                code = team.abbreviation.upper() if team and team.abbreviation else None
                if not code or code in teams or code not in profile.notables:
                    continue
                if not self.availability.roster_is_fresh(category, code, now):
                    teams.append(code)
        return teams

    async def _refresh_rosters(
        self,
        category: str,
        events: list[CandidateEvent],
        now: datetime,
    ) -> None:
        """Fetch stale rosters concurrently; all complete before scoring starts."""
        teams = self._stale_teams(category, events, now)
        if not teams:
            return

        results = await asyncio.gather(
            *(self.source.fetch_roster(category, code) for code in teams),
            return_exceptions=True,
        )
        for code, result in zip(teams, results):
            if isinstance(result, BaseException):
                logger.warning(
                    "roster_fetch_failed",
                    category=category,
                    team=code,
                    error=str(result),
                )
                continue
            if result:
                self.availability.record_roster(category, code, result, now)

    async def _load_state(self, category: str) -> PickState | None:
        try:
            return await self.store.load(category)
        except Exception as e:
            logger.warning("pick_state_load_error", category=category, error=str(e))
            return None

    async def _persist(
        self,
        category: str,
        previous: PickState | None,
        transition: Transition,
    ) -> None:
        try:
            if transition.state is None:
                if previous is not None:
                    await self.store.delete(category)
            else:
                await self.store.save(transition.state)
        except Exception as e:
            logger.error("pick_state_save_error", category=category, error=str(e))
            self.reporter.report(e, {"category": category, "stage": "persist"})

    @staticmethod
    def _pick_payload(
        chosen: ScoredEvent | None,
        state: PickState | None,
        eligible: list[ScoredEvent],
    ) -> dict[str, Any] | None:
        """Tonight's pick; None whenever nothing on today's slate is eligible."""
        if state is None or not eligible:
            return None
        return chosen.to_dict() if chosen is not None else state.event

    async def refresh(self, category: str, now: datetime | None = None) -> RefreshResult:
        """
        Run the full pipeline for one category and persist the outcome.

        Never raises for provider or data problems; those surface in
        RefreshResult.error and the confidence subtext.
        """
        category = category.lower()
        async with self._lock(category):
            now = now or datetime.now(timezone.utc)
            feed = await self._fetch_events(category)
            await self._refresh_rosters(category, feed.events, now)

            ranked = rank(self.engine.score_events(feed.events, now))
            eligible = [e for e in ranked if e.classification.eligible_for_today_pick]

            previous = await self._load_state(category)
            freshness = None
            if eligible:
                freshness = check_freshness(feed.fetched_at, eligible[0].status, now)
            transition = self.machine.evaluate(previous, ranked, now, freshness, category)
            await self._persist(category, previous, transition)

            state = transition.state
            chosen = None
            if state is not None and eligible:
                chosen = next((e for e in eligible if e.id == state.event_id), None)
                if chosen is not None:
                    freshness = check_freshness(feed.fetched_at, chosen.status, now)

            if chosen is not None:
                others = [e for e in eligible if e.id != chosen.id]
                confidence = tier([chosen, *others], freshness)
            else:
                confidence = tier(eligible, freshness)

            by_id = {e.id: e for e in eligible}
            alternates = [
                by_id[event_id].to_dict()
                for event_id in (state.alternates if state else ())
                if event_id in by_id
            ]

            result = RefreshResult(
                category=category,
                ranked_events=ranked,
                pick=self._pick_payload(chosen, state, eligible),
                pick_state=state,
                confidence=confidence,
                alternates=alternates,
                transition=transition,
                freshness=freshness,
                error=feed.error,
            )
            self._last[category] = result

            logger.info(
                "picks_refreshed",
                category=category,
                events=len(ranked),
                eligible=len(eligible),
                pick=state.event_id if state else None,
                tier=confidence.tier.value,
                transition=transition.kind.value,
                error=feed.error,
            )
            return result

    async def lock_pick(self, category: str, now: datetime | None = None) -> Transition:
        """Lock the stored pick for today; it then only changes through an override."""
        category = category.lower()
        async with self._lock(category):
            now = now or datetime.now(timezone.utc)
            previous = await self._load_state(category)
            transition = self.machine.lock(previous, now, category)
            if transition.kind is TransitionKind.LOCKED:
                await self._persist(category, previous, transition)
                last = self._last.get(category)
                if last is not None:
                    last.pick_state = transition.state
            return transition

    def last_result(self, category: str) -> RefreshResult | None:
        return self._last.get(category.lower())

    def get_pick(self, category: str) -> dict[str, Any] | None:
        """Pick payload from the last refresh (None before the first refresh)."""
        result = self.last_result(category)
        return result.pick if result else None

    def get_confidence_tier(self, category: str) -> ConfidenceResult | None:
        """Confidence from the last refresh (None before the first refresh)."""
        result = self.last_result(category)
        return result.confidence if result else None
