"""Watchability scoring module for Gamenight."""

from gamenight.services.scoring.categories import CategoryProfile, get_profile
from gamenight.services.scoring.engine import (
    ComponentScore,
    Components,
    ScoredEvent,
    WatchabilityEngine,
)
from gamenight.services.scoring.notable import MatchupType, NotableResult, score_notables

__all__ = [
    "CategoryProfile",
    "ComponentScore",
    "Components",
    "MatchupType",
    "NotableResult",
    "ScoredEvent",
    "WatchabilityEngine",
    "get_profile",
    "score_notables",
]
