"""Deterministic ordering of scored events.

This is the only place events are sorted. Status never influences order;
callers that want "not started first" filter after ranking.
"""

from datetime import datetime, timezone
from typing import Iterable

from gamenight.services.events.dates import parse_instant
from gamenight.services.scoring.engine import ScoredEvent

_LAST = datetime.max.replace(tzinfo=timezone.utc)


def rank_key(scored: ScoredEvent) -> tuple:
    start = parse_instant(scored.start_time)
    return (-scored.score, start is None, start or _LAST, scored.id)


def rank(events: Iterable[ScoredEvent]) -> list[ScoredEvent]:
    """
    Order events by score descending, then earliest start, then id.

    Pure: returns a new list and never mutates its input. Any permutation of
    the same input gives the same output.
    """
    return sorted(events, key=rank_key)
