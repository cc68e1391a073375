"""Confidence tier for the top-ranked event."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Sequence

import structlog

from gamenight.config import get_settings
from gamenight.services.events.freshness import Freshness
from gamenight.services.events.validation import DataQuality
from gamenight.services.scoring.engine import ScoredEvent

logger = structlog.get_logger(__name__)

DEFAULT_CONFIG = {
    "clear_min_score": 80,
    "clear_min_gap": 10,
    "solid_min_score": 65,
    "solid_min_gap": 8,
}


class ConfidenceTier(str, Enum):
    """How strongly the top event stands out. Ordered WEAK < SOLID < CLEAR."""

    CLEAR = "CLEAR"
    SOLID = "SOLID"
    WEAK = "WEAK"

    @property
    def rank(self) -> int:
        return {"WEAK": 0, "SOLID": 1, "CLEAR": 2}[self.value]

    def at_least(self, other: "ConfidenceTier") -> bool:
        return self.rank >= other.rank


@dataclass(frozen=True)
class ConfidenceResult:
    tier: ConfidenceTier
    header: str
    subtext: str
    gap: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "tier": self.tier.value,
            "header": self.header,
            "subtext": self.subtext,
            "gap": self.gap,
        }


NO_GAMES = ConfidenceResult(
    tier=ConfidenceTier.WEAK,
    header="No games today",
    subtext="Check back tomorrow.",
    gap=0,
)


def _load_config() -> dict[str, Any]:
    loaded = get_settings().load_defaults_config().get("confidence") or {}
    return {**DEFAULT_CONFIG, **loaded}


def tier(
    ranked: Sequence[ScoredEvent],
    freshness: Freshness | None = None,
    config: dict[str, Any] | None = None,
) -> ConfidenceResult:
    """
    Compute the confidence tier of the top of an already-ranked list.

    Args:
        ranked: Output of rank(), best first
        freshness: Snapshot freshness; None is treated as fresh
        config: Thresholds override (defaults.yaml 'confidence' section)
    """
    if not ranked:
        return NO_GAMES

    params = {**DEFAULT_CONFIG, **config} if config else _load_config()
    top = ranked[0]
    gap = top.score - ranked[1].score if len(ranked) > 1 else 0
    validation = top.validation
    is_fresh = freshness is None or freshness.fresh

    clear = (
        top.score >= params["clear_min_score"]
        and gap >= params["clear_min_gap"]
        and validation.data_quality is DataQuality.HIGH
        and not validation.fallback_mode
        and not validation.unverified_matchup
        and is_fresh
    )
    if clear:
        return ConfidenceResult(
            tier=ConfidenceTier.CLEAR,
            header="Clear pick tonight",
            subtext="This one stands out from the rest of the slate.",
            gap=gap,
        )

    if top.score >= params["solid_min_score"] or gap >= params["solid_min_gap"]:
        if not validation.injury_status_verified:
            subtext = "Check injury reports before game time."
        elif not is_fresh and freshness.age_label == "unknown":
            subtext = "Data update time unknown."
        elif not is_fresh:
            subtext = f"Data last updated {freshness.age_label} ago."
        elif validation.fallback_mode:
            subtext = "Limited team data; based on storylines and star power."
        else:
            subtext = "A strong option with some competition."
        return ConfidenceResult(
            tier=ConfidenceTier.SOLID,
            header="Solid pick",
            subtext=subtext,
            gap=gap,
        )

    return ConfidenceResult(
        tier=ConfidenceTier.WEAK,
        header="Close call",
        subtext="Several games are bunched together tonight.",
        gap=gap,
    )
