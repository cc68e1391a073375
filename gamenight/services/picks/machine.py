"""Daily pick state machine.

Rules are evaluated once per refresh, in order:

1. Daily reset      - no state, new pick day, or reset hour crossed since selection
2. Orphaned pick    - chosen id gone from the eligible list or postponed, try an override
3. Auto-lock        - chosen event started or is in progress
4. Override         - locked pick postponed, dropped, missing critical data,
                      or beaten by a drastically better verified candidate
5. Re-evaluation    - unlocked and a different event now ranks first
6. Steady state     - same event, refreshed payload and alternates

A locked state only ever leaves the locked condition through an override,
which always produces a new unlocked state for a different event.
"""

from dataclasses import dataclass, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Sequence
from zoneinfo import ZoneInfo

import structlog

from gamenight.config import get_settings
from gamenight.services.confidence import ConfidenceTier, tier
from gamenight.services.events.dates import local_today, parse_instant, reference_zone
from gamenight.services.events.freshness import Freshness
from gamenight.services.events.models import EventStatus
from gamenight.services.events.validation import DataQuality
from gamenight.services.picks.state import LockReason, OverrideReason, PickState
from gamenight.services.scoring.engine import ScoredEvent

logger = structlog.get_logger(__name__)

DEFAULT_CONFIG = {
    "max_alternates": 3,
    "drastic_drop_points": 20,
    "drastic_margin_points": 20,
}


class TransitionKind(str, Enum):
    NEW_PICK = "NEW_PICK"
    REEVALUATED = "REEVALUATED"
    LOCKED = "LOCKED"
    OVERRIDDEN = "OVERRIDDEN"
    UNCHANGED = "UNCHANGED"
    NO_EVENTS = "NO_EVENTS"


@dataclass(frozen=True)
class Transition:
    """Outcome of one evaluation. `state` is what must be persisted (None clears it)."""

    kind: TransitionKind
    state: PickState | None
    previous_event_id: str | None = None
    reason: str | None = None
    message: str | None = None

    @property
    def changed_pick(self) -> bool:
        return self.kind in (
            TransitionKind.NEW_PICK,
            TransitionKind.REEVALUATED,
            TransitionKind.OVERRIDDEN,
        )


def matchup_label(payload: dict[str, Any] | None) -> str:
    """'AWAY @ HOME' from a cached event payload."""
    if not payload:
        return "the earlier pick"
    away = (payload.get("awayTeam") or {}).get("abbreviation") or "TBD"
    home = (payload.get("homeTeam") or {}).get("abbreviation") or "TBD"
    return f"{away} @ {home}"


class PickStateMachine:
    """Decide and maintain one pick per category per day."""

    def __init__(
        self,
        tz: ZoneInfo | str | None = None,
        reset_hour: int | None = None,
        config: dict[str, Any] | None = None,
        confidence_config: dict[str, Any] | None = None,
    ):
        settings = get_settings()
        self.tz = reference_zone(tz)
        self.reset_hour = settings.daily_reset_hour if reset_hour is None else reset_hour
        if config is None:
            config = settings.load_defaults_config().get("picks") or {}
        self.config = {**DEFAULT_CONFIG, **config}
        self.confidence_config = confidence_config

    # Selection helpers

    @staticmethod
    def has_started(event: ScoredEvent, now: datetime) -> bool:
        if event.status in (EventStatus.IN_PROGRESS, EventStatus.FINAL):
            return True
        start = parse_instant(event.start_time)
        return start is not None and start <= now

    def selectable(
        self,
        eligible: Sequence[ScoredEvent],
        now: datetime,
        exclude: str | None = None,
    ) -> list[ScoredEvent]:
        """Eligible, not postponed, not-yet-started first; keeps rank order otherwise."""
        candidates = [
            e for e in eligible if e.status is not EventStatus.POSTPONED and e.id != exclude
        ]
        not_started = [e for e in candidates if not self.has_started(e, now)]
        started = [e for e in candidates if self.has_started(e, now)]
        return not_started + started

    def tier_as_top(
        self,
        candidate: ScoredEvent,
        eligible: Sequence[ScoredEvent],
        freshness: Freshness | None,
    ) -> ConfidenceTier:
        """Confidence the candidate would carry if it were the pick."""
        others = [e for e in eligible if e.id != candidate.id]
        return tier([candidate, *others], freshness, self.confidence_config).tier

    def _new_state(
        self,
        category: str,
        chosen: ScoredEvent,
        eligible: Sequence[ScoredEvent],
        now: datetime,
        freshness: Freshness | None,
        override_reason: OverrideReason | None = None,
        override_message: str | None = None,
    ) -> PickState:
        return PickState(
            category=category,
            pick_date=local_today(self.tz, now).isoformat(),
            event_id=chosen.id,
            event=chosen.to_dict(),
            chosen_at=now,
            last_evaluated_at=now,
            score=chosen.score,
            tier=self.tier_as_top(chosen, eligible, freshness),
            alternates=self._alternates(chosen.id, eligible, now),
            locked=False,
            locked_reason=None,
            override_reason=override_reason,
            override_message=override_message,
        )

    def _alternates(
        self,
        chosen_id: str,
        eligible: Sequence[ScoredEvent],
        now: datetime,
    ) -> tuple[str, ...]:
        pool = self.selectable(eligible, now, exclude=chosen_id)
        return tuple(e.id for e in pool[: self.config["max_alternates"]])

    def needs_reset(self, state: PickState | None, now: datetime) -> bool:
        if state is None:
            return True
        if state.pick_date != local_today(self.tz, now).isoformat():
            return True
        local_now = now.astimezone(self.tz)
        chosen_local = state.chosen_at.astimezone(self.tz)
        return (
            chosen_local.date() == local_now.date()
            and chosen_local.hour < self.reset_hour <= local_now.hour
        )

    def _log(self, category: str, transition: Transition) -> Transition:
        logger.info(
            "pick_transition",
            category=category,
            kind=transition.kind.value,
            old_event_id=transition.previous_event_id,
            new_event_id=transition.state.event_id if transition.state else None,
            reason=transition.reason,
        )
        return transition

    def lock(self, state: PickState | None, now: datetime, category: str = "") -> Transition:
        """Lock today's pick on request. A missing, stale, or already locked state is unchanged."""
        category = category or (state.category if state else "")
        if state is None or state.locked or self.needs_reset(state, now):
            return Transition(
                kind=TransitionKind.UNCHANGED,
                state=state,
                previous_event_id=state.event_id if state else None,
            )
        locked = replace(
            state,
            last_evaluated_at=now,
            locked=True,
            locked_reason=LockReason.MANUAL,
        )
        return self._log(
            category,
            Transition(
                kind=TransitionKind.LOCKED,
                state=locked,
                previous_event_id=state.event_id,
                reason=LockReason.MANUAL.value,
            ),
        )

    # Override rules

    def override_reason(
        self,
        state: PickState,
        current: ScoredEvent | None,
        challenger: ScoredEvent | None,
        eligible: Sequence[ScoredEvent],
        freshness: Freshness | None,
    ) -> OverrideReason | None:
        """
        First override condition that holds, or None.

        The drastic-change test needs all four: the pick's score fell by the
        drop threshold since selection, the challenger leads it by the margin,
        the challenger would rate SOLID or better, and the challenger's
        featured participants are all verified on HIGH quality data.
        """
        if current is None:
            return OverrideReason.REMOVED_FROM_SLATE
        if current.status is EventStatus.POSTPONED:
            return OverrideReason.POSTPONED
        if current.validation.data_quality is DataQuality.CRITICAL_MISSING:
            return OverrideReason.CRITICAL_DATA_MISSING
        if challenger is None:
            return None

        dropped = state.score - current.score >= self.config["drastic_drop_points"]
        beaten = challenger.score - current.score >= self.config["drastic_margin_points"]
        if not (dropped and beaten):
            return None
        if not self.tier_as_top(challenger, eligible, freshness).at_least(ConfidenceTier.SOLID):
            return None
        verified = (
            challenger.notable.availability_verified
            and challenger.validation.data_quality is DataQuality.HIGH
        )
        return OverrideReason.DRASTIC_CHANGE if verified else None

    @staticmethod
    def override_message(
        reason: OverrideReason,
        previous: dict[str, Any] | None,
        replacement: ScoredEvent,
    ) -> str:
        old = matchup_label(previous)
        new = matchup_label(replacement.event.to_dict())
        return {
            OverrideReason.POSTPONED: f"{old} was postponed. Switched to {new}.",
            OverrideReason.REMOVED_FROM_SLATE: f"{old} is no longer on today's slate. Switched to {new}.",
            OverrideReason.CRITICAL_DATA_MISSING: f"{old} lost critical team data. Switched to {new}.",
            OverrideReason.DRASTIC_CHANGE: f"{new} has become a far better watch than {old}.",
        }[reason]

    # Evaluation

    def evaluate(
        self,
        state: PickState | None,
        ranked: Sequence[ScoredEvent],
        now: datetime | None = None,
        freshness: Freshness | None = None,
        category: str | None = None,
    ) -> Transition:
        """
        Apply one refresh worth of rules to the persisted state.

        Args:
            state: Persisted state for the category (None if absent)
            ranked: Ranked scored events; ineligible dates are filtered here
            now: Evaluation instant
            freshness: Snapshot freshness, forwarded to confidence
            category: Category name (taken from state/events when omitted)
        """
        now = now or datetime.now(timezone.utc)
        eligible = [e for e in ranked if e.classification.eligible_for_today_pick]
        category = (
            category
            or (state.category if state else None)
            or (ranked[0].event.category if ranked else "unknown")
        )
        previous_id = state.event_id if state else None

        # 1. Daily reset
        if self.needs_reset(state, now):
            pool = self.selectable(eligible, now)
            if not pool:
                return self._log(
                    category,
                    Transition(
                        kind=TransitionKind.NO_EVENTS,
                        state=None,
                        previous_event_id=previous_id,
                        reason="no_selectable_events",
                    ),
                )
            new_state = self._new_state(category, pool[0], eligible, now, freshness)
            return self._log(
                category,
                Transition(
                    kind=TransitionKind.NEW_PICK,
                    state=new_state,
                    previous_event_id=previous_id,
                    reason="daily_reset",
                ),
            )

        if not eligible:
            return self._log(
                category,
                Transition(
                    kind=TransitionKind.NO_EVENTS,
                    state=state,
                    previous_event_id=previous_id,
                    reason="no_eligible_events",
                ),
            )

        current = next((e for e in eligible if e.id == state.event_id), None)
        challengers = self.selectable(eligible, now, exclude=state.event_id)
        challenger = challengers[0] if challengers else None

        # 2. Orphaned pick
        if current is None and challenger is not None:
            reason = OverrideReason.REMOVED_FROM_SLATE
            return self._override(category, state, challenger, reason, eligible, now, freshness)
        if (
            current is not None
            and current.status is EventStatus.POSTPONED
            and challenger is not None
        ):
            reason = OverrideReason.POSTPONED
            return self._override(category, state, challenger, reason, eligible, now, freshness)

        # 3. Auto-lock (a postponed pick is never locked)
        if (
            current is not None
            and not state.locked
            and current.status is not EventStatus.POSTPONED
        ):
            lock_reason = None
            if current.status is EventStatus.IN_PROGRESS:
                lock_reason = LockReason.IN_PROGRESS
            elif self.has_started(current, now):
                lock_reason = LockReason.STARTED
            if lock_reason is not None:
                locked = replace(
                    state,
                    event=current.to_dict(),
                    last_evaluated_at=now,
                    alternates=self._alternates(current.id, eligible, now),
                    locked=True,
                    locked_reason=lock_reason,
                )
                return self._log(
                    category,
                    Transition(
                        kind=TransitionKind.LOCKED,
                        state=locked,
                        previous_event_id=previous_id,
                        reason=lock_reason.value,
                    ),
                )

        # 4. Override
        if current is not None and state.locked:
            reason = self.override_reason(state, current, challenger, eligible, freshness)
            if reason is not None and challenger is not None:
                return self._override(category, state, challenger, reason, eligible, now, freshness)
            if reason is not None:
                logger.warning(
                    "pick_override_without_replacement",
                    category=category,
                    event_id=state.event_id,
                    reason=reason.value,
                )

        # 5. Free re-evaluation
        if not state.locked:
            pool = self.selectable(eligible, now)
            if pool and pool[0].id != state.event_id:
                new_state = self._new_state(category, pool[0], eligible, now, freshness)
                return self._log(
                    category,
                    Transition(
                        kind=TransitionKind.REEVALUATED,
                        state=new_state,
                        previous_event_id=previous_id,
                        reason="better_candidate",
                    ),
                )

        # 6. Steady state
        steady = replace(
            state,
            event=current.to_dict() if current is not None else state.event,
            last_evaluated_at=now,
            alternates=self._alternates(state.event_id, eligible, now),
        )
        return self._log(
            category,
            Transition(
                kind=TransitionKind.UNCHANGED,
                state=steady,
                previous_event_id=previous_id,
                reason="steady",
            ),
        )

    def _override(
        self,
        category: str,
        state: PickState,
        replacement: ScoredEvent,
        reason: OverrideReason,
        eligible: Sequence[ScoredEvent],
        now: datetime,
        freshness: Freshness | None,
    ) -> Transition:
        message = self.override_message(reason, state.event, replacement)
        new_state = self._new_state(
            category,
            replacement,
            eligible,
            now,
            freshness,
            override_reason=reason,
            override_message=message,
        )
        return self._log(
            category,
            Transition(
                kind=TransitionKind.OVERRIDDEN,
                state=new_state,
                previous_event_id=state.event_id,
                reason=reason.value,
                message=message,
            ),
        )
