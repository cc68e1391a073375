"""Watchability scoring engine.

Turns a CandidateEvent into a composite 0-100 watchability score, a component
breakdown and a one-line "why watch" sentence.

Components (points, summed):
- stakes            0-30  how much both records say the game matters
- star_power        0-20  available notable participants
- competitiveness   0-20  closeness of the two records
- narrative         0-20  rivalry, headline, local derby
- accessibility     0-10  broadcast reach and prime-time start

Fallback mode (bad provider data) re-weights toward narrative/star power and
caps at 70. An unverified two-sided star pairing is discounted and capped at
85 so it can never produce a top-confidence signal on its own.
"""

from dataclasses import dataclass, replace
from datetime import date, datetime, timezone
from typing import Any, Callable
from zoneinfo import ZoneInfo

import structlog

from gamenight.config import get_settings
from gamenight.services.availability import AvailabilityCache
from gamenight.services.error_log import ErrorReporter
from gamenight.services.events.dates import DateClassification, classify, parse_instant, reference_zone
from gamenight.services.events.models import CandidateEvent, EventStatus
from gamenight.services.events.validation import ValidationResult, validate
from gamenight.services.scoring.categories import CategoryProfile, get_profile
from gamenight.services.scoring.notable import MatchupType, NotableResult, score_notables

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ComponentScore:
    """One sub-score with its human-readable reason."""

    score: float
    reason: str

    def to_dict(self) -> dict[str, Any]:
        return {"score": self.score, "reason": self.reason}


@dataclass(frozen=True)
class Components:
    """The five sub-scores of a watchability result."""

    stakes: ComponentScore
    star_power: ComponentScore
    competitiveness: ComponentScore
    narrative: ComponentScore
    accessibility: ComponentScore

    def as_points(self) -> dict[str, float]:
        return {
            "stakes": self.stakes.score,
            "star_power": self.star_power.score,
            "competitiveness": self.competitiveness.score,
            "narrative": self.narrative.score,
            "accessibility": self.accessibility.score,
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "stakes": self.stakes.to_dict(),
            "starPower": self.star_power.to_dict(),
            "competitiveness": self.competitiveness.to_dict(),
            "narrative": self.narrative.to_dict(),
            "accessibility": self.accessibility.to_dict(),
        }


@dataclass(frozen=True)
class ScoredEvent:
    """A candidate event plus everything derived from it in one refresh."""

    event: CandidateEvent
    classification: DateClassification
    validation: ValidationResult
    components: Components
    notable: NotableResult
    score: int
    why_watch: str
    rivalry_level: int = 0

    @property
    def id(self) -> str:
        return self.event.id

    @property
    def start_time(self) -> datetime | None:
        return self.event.start_time

    @property
    def status(self) -> EventStatus:
        return self.event.status

    def to_dict(self) -> dict[str, Any]:
        payload = self.event.to_dict()
        payload.update(
            {
                "score": self.score,
                "whyWatch": self.why_watch,
                "components": self.components.to_dict(),
                "notable": self.notable.to_dict(),
                "validation": self.validation.to_dict(),
                "dateClassification": self.classification.to_dict(),
                "signals": {
                    "starMatchup": self.notable.label,
                    "rivalry": self.rivalry_level or None,
                },
            }
        )
        return payload


class WatchabilityEngine:
    """
    Score candidate events for watchability.

    Sub-scorers are independent: an exception in one degrades that component
    to its neutral value and never aborts the event.
    """

    REQUIRED_SECTIONS = (
        "stakes",
        "star_power",
        "competitiveness",
        "narrative",
        "accessibility",
        "composite",
        "why_watch",
    )

    def __init__(
        self,
        config: dict[str, Any] | None = None,
        availability: AvailabilityCache | None = None,
        tz: ZoneInfo | str | None = None,
        validation_config: dict[str, Any] | None = None,
        reporter: ErrorReporter | None = None,
    ):
        """
        Initialize scoring engine.

        Args:
            config: Optional scoring configuration. If not provided,
                   loads from defaults.yaml
            availability: Availability cache consulted for notable participants
            tz: Reference timezone (settings default)
            validation_config: Optional override for the validator's tables
            reporter: Sink for validation warnings
        """
        if config is None:
            config = self._load_default_config()

        self.config = config
        self.availability = availability
        self.tz = reference_zone(tz)
        self.validation_config = validation_config
        self.reporter = reporter

        self._validate_config()

    def _load_default_config(self) -> dict[str, Any]:
        """Load scoring config from defaults.yaml."""
        full_config = get_settings().load_defaults_config()
        if full_config.get("scoring"):
            return full_config["scoring"]
        return self._get_fallback_config()

    def _get_fallback_config(self) -> dict[str, Any]:
        """Fallback configuration if defaults.yaml not found."""
        return {
            "stakes": {
                "max": 30,
                "both_above_550": 22,
                "both_above_500": 16,
                "one_above_500": 10,
                "neither": 6,
                "division_bonus": 6,
                "fallback_flat": 8,
            },
            "star_power": {
                "max": 20,
                "premier_vs_premier": 20,
                "premier_vs_secondary": 16,
                "secondary_vs_secondary": 12,
                "single_premier": 10,
                "single_secondary": 6,
            },
            "competitiveness": {
                "max": 20,
                "neutral": 10,
                "bands": [[5, 20], [10, 16], [15, 12], [25, 8]],
                "minimum": 4,
            },
            "narrative": {
                "max": 20,
                "points_per_rivalry_level": 6,
                "headline_bonus": 4,
                "same_locality_bonus": 8,
            },
            "accessibility": {
                "max": 10,
                "national": 9,
                "secondary": 6,
                "other": 3,
                "none": 0,
                "prime_time_bonus": 1,
                "prime_time_hours": [19, 20, 21, 22],
                "national_networks": ["ABC", "CBS", "ESPN", "FOX", "NBC", "TNT", "Prime Video"],
                "secondary_networks": [
                    "ESPN2", "ESPNU", "FS1", "TBS", "truTV", "NBA TV",
                    "NFL Network", "MLB Network", "Peacock", "Apple TV", "Netflix",
                ],
            },
            "composite": {
                "fallback_cap": 70,
                "fallback_weights": {
                    "stakes": 0.5,
                    "star_power": 1.25,
                    "competitiveness": 0.5,
                    "narrative": 1.25,
                    "accessibility": 1.0,
                },
                "unverified_pairing_discount": 0.3,
                "unverified_pairing_cap": 85,
            },
            "why_watch": {
                "rivalry_min": 12,
                "stakes_min": 22,
                "competitiveness_min": 16,
                "accessibility_min": 9,
            },
        }

    def _validate_config(self) -> None:
        """Validate configuration has all required sections."""
        for section in self.REQUIRED_SECTIONS:
            if section not in self.config:
                raise ValueError(f"Missing scoring section: {section}")

    @staticmethod
    def clamp(value: float, min_val: float, max_val: float) -> float:
        """Clamp value between min and max."""
        return max(min_val, min(value, max_val))

    @staticmethod
    def _win_pcts(event: CandidateEvent) -> tuple[float | None, float | None]:
        def pct(team):
            record = team.parsed_record if team else None
            return record.win_pct if record else None

        return pct(event.home), pct(event.away)

    def f_stakes(
        self,
        event: CandidateEvent,
        validation: ValidationResult,
        profile: CategoryProfile | None,
    ) -> ComponentScore:
        """
        Score what is at stake from both records (0-30).

        Both above .550 beats both above .500 beats one winning side.
        Division games add a flat bonus. Fallback mode returns a flat low score.
        """
        params = self.config["stakes"]
        if validation.fallback_mode:
            return ComponentScore(params["fallback_flat"], "Limited data on team records")

        home_pct, away_pct = self._win_pcts(event)
        home_pct = 0.5 if home_pct is None else home_pct
        away_pct = 0.5 if away_pct is None else away_pct

        if home_pct > 0.55 and away_pct > 0.55:
            score, reason = params["both_above_550"], "Two contenders"
        elif home_pct > 0.5 and away_pct > 0.5:
            score, reason = params["both_above_500"], "Two winning teams"
        elif home_pct > 0.5 or away_pct > 0.5:
            score, reason = params["one_above_500"], "One winning team"
        else:
            score, reason = params["neither"], "Both teams below .500"

        home_code = event.home.abbreviation if event.home else None
        away_code = event.away.abbreviation if event.away else None
        if profile is not None and profile.same_division(home_code, away_code):
            score += params["division_bonus"]
            reason += ", division game"

        return ComponentScore(min(score, params["max"]), reason)

    def f_competitiveness(self, event: CandidateEvent) -> ComponentScore:
        """
        Score how evenly matched the sides are (0-20).

        Inverse of the absolute win-percentage gap in points.
        """
        params = self.config["competitiveness"]
        home_pct, away_pct = self._win_pcts(event)
        if home_pct is None or away_pct is None:
            return ComponentScore(params["neutral"], "Form unknown")

        gap = abs(home_pct - away_pct) * 100
        for max_gap, points in params["bands"]:
            if gap <= max_gap:
                return ComponentScore(min(points, params["max"]), f"{gap:.0f}-point win% gap")
        return ComponentScore(params["minimum"], f"Lopsided on paper ({gap:.0f}-point gap)")

    def f_narrative(
        self,
        event: CandidateEvent,
        profile: CategoryProfile | None,
    ) -> tuple[ComponentScore, int]:
        """Score rivalry, headline and local-derby storylines (0-20)."""
        params = self.config["narrative"]
        home_code = event.home.abbreviation if event.home else None
        away_code = event.away.abbreviation if event.away else None
        level = profile.rivalry_level(home_code, away_code) if profile else 0

        score = level * params["points_per_rivalry_level"]
        reasons = []
        if level:
            reasons.append("Heated rivalry" if level >= 3 else "Rivalry")

        if event.headline:
            score += params["headline_bonus"]
            reasons.append("In the headlines")

        home_loc = (event.home.location or "").strip().casefold() if event.home else ""
        away_loc = (event.away.location or "").strip().casefold() if event.away else ""
        if level == 0 and home_loc and home_loc == away_loc:
            score += params["same_locality_bonus"]
            reasons.append("Local derby")

        reason = ", ".join(reasons) if reasons else "No special storyline"
        return ComponentScore(min(score, params["max"]), reason), level

    def broadcast_tier(self, network: str | None) -> str:
        """Classify a channel name as national / secondary / other / none."""
        if not network or not network.strip():
            return "none"
        params = self.config["accessibility"]
        name = network.strip().casefold()
        if name in {n.casefold() for n in params["secondary_networks"]}:
            return "secondary"
        if name in {n.casefold() for n in params["national_networks"]}:
            return "national"
        return "other"

    def f_accessibility(self, event: CandidateEvent) -> ComponentScore:
        """Score broadcast reach plus a prime-time bonus (0-10)."""
        params = self.config["accessibility"]
        ranking = ("none", "other", "secondary", "national")
        channels = list(event.broadcasts) or ([event.network] if event.network else [])
        tiers = [self.broadcast_tier(channel) for channel in channels] or ["none"]
        best = max(tiers, key=ranking.index)

        score = params[best]
        reason = {
            "national": "National broadcast",
            "secondary": "Cable/streaming broadcast",
            "other": "Local broadcast",
            "none": "No broadcast listed",
        }[best]

        start = parse_instant(event.start_time)
        if start is not None and start.astimezone(self.tz).hour in params["prime_time_hours"]:
            score += params["prime_time_bonus"]
            reason += ", prime time"

        return ComponentScore(min(score, params["max"]), reason)

    def _safe(
        self,
        component: str,
        fn: Callable[[], Any],
        neutral: Any,
        event_id: str,
    ) -> Any:
        try:
            return fn()
        except Exception as e:
            logger.warning(
                "component_score_failed",
                component=component,
                event_id=event_id,
                error=str(e),
            )
            return neutral

    def composite(
        self,
        components: Components,
        validation: ValidationResult,
        notable: NotableResult,
    ) -> int:
        """Combine the five components into the 0-100 watchability score."""
        params = self.config["composite"]
        points = components.as_points()

        if validation.fallback_mode:
            weights = params["fallback_weights"]
            total = sum(points[name] * weights.get(name, 1.0) for name in points)
            total = min(total, params["fallback_cap"])
        elif notable.unverified_pairing:
            discount = points["star_power"] * params["unverified_pairing_discount"]
            total = min(sum(points.values()) - discount, params["unverified_pairing_cap"])
        else:
            total = sum(points.values())

        return int(round(self.clamp(total, 0, 100)))

    def _supporting_reason(self, components: Components, rivalry_level: int) -> str | None:
        params = self.config["why_watch"]
        if rivalry_level and components.narrative.score >= params["rivalry_min"]:
            return "with real rivalry heat"
        if components.stakes.score >= params["stakes_min"]:
            return "between two winning teams"
        if components.competitiveness.score >= params["competitiveness_min"]:
            return "that should go down to the wire"
        if components.accessibility.score >= params["accessibility_min"]:
            return "on national TV"
        return None

    def why_watch(
        self,
        event: CandidateEvent,
        components: Components,
        notable: NotableResult,
        rivalry_level: int = 0,
    ) -> str:
        """
        One sentence explaining the pick.

        Star pairings are described abstractly; the featured names are already
        shown next to the sentence and are not repeated.
        """
        supporting = self._supporting_reason(components, rivalry_level)

        if notable.matchup_type is MatchupType.VS:
            if not notable.injury_status_verified:
                lead = "A potential star showdown"
            elif all(f.premier for f in notable.featured):
                lead = "Two of the league's biggest stars go head to head"
            else:
                lead = "A star-powered showdown"
        elif notable.matchup_type is MatchupType.SINGLE:
            lead = "A star turn worth tuning in for" if notable.injury_status_verified else (
                "A likely star turn"
            )
        else:
            lead = None

        if lead:
            return f"{lead} {supporting}." if supporting else f"{lead}."

        if event.headline:
            return event.headline

        away_name = (event.away.name or event.away.abbreviation) if event.away else None
        home_name = (event.home.name or event.home.abbreviation) if event.home else None
        away_name = away_name or "The visitors"
        home_name = home_name or "the hosts"

        home_pct, away_pct = self._win_pcts(event)
        if home_pct is not None and away_pct is not None and home_pct > 0.55 and away_pct > 0.55:
            return (
                f"Elite matchup! {away_name} ({event.away.record}) at "
                f"{home_name} ({event.home.record})."
            )
        if supporting:
            return f"{away_name} visits {home_name} tonight, {supporting}."
        return f"{away_name} visits {home_name} tonight."

    def score_event(
        self,
        event: CandidateEvent,
        now: datetime | None = None,
    ) -> ScoredEvent:
        """
        Score one event with component breakdown.

        Args:
            event: Normalized candidate event
            now: Evaluation instant (defaults to current UTC time)

        Returns:
            ScoredEvent with classification, validation, components and score
        """
        now = now or datetime.now(timezone.utc)
        classification = classify(event.start_time, self.tz, now)
        validation = validate(
            event.home,
            event.away,
            category=event.category,
            today=date.fromisoformat(classification.today),
            config=self.validation_config,
            reporter=self.reporter,
        )
        profile = get_profile(event.category)

        stakes = self._safe(
            "stakes",
            lambda: self.f_stakes(event, validation, profile),
            ComponentScore(self.config["stakes"]["fallback_flat"], "Unavailable"),
            event.id,
        )
        notable = self._safe(
            "star_power",
            lambda: score_notables(
                event, profile, self.availability, self.config["star_power"], now
            ),
            NotableResult(score=0, reason="Unavailable"),
            event.id,
        )
        competitiveness = self._safe(
            "competitiveness",
            lambda: self.f_competitiveness(event),
            ComponentScore(self.config["competitiveness"]["neutral"], "Unavailable"),
            event.id,
        )
        narrative, rivalry_level = self._safe(
            "narrative",
            lambda: self.f_narrative(event, profile),
            (ComponentScore(0, "Unavailable"), 0),
            event.id,
        )
        accessibility = self._safe(
            "accessibility",
            lambda: self.f_accessibility(event),
            ComponentScore(0, "Unavailable"),
            event.id,
        )

        components = Components(
            stakes=stakes,
            star_power=ComponentScore(notable.score, notable.reason),
            competitiveness=competitiveness,
            narrative=narrative,
            accessibility=accessibility,
        )
        validation = replace(
            validation,
            unverified_matchup=notable.unverified_pairing,
            injury_status_verified=notable.injury_status_verified,
        )
        score = self.composite(components, validation, notable)
        why = self._safe(
            "why_watch",
            lambda: self.why_watch(event, components, notable, rivalry_level),
            "Tonight's best option on the slate.",
            event.id,
        )

        result = ScoredEvent(
            event=event,
            classification=classification,
            validation=validation,
            components=components,
            notable=notable,
            score=score,
            why_watch=why,
            rivalry_level=rivalry_level,
        )

        logger.debug(
            "event_scored",
            event_id=event.id,
            category=event.category,
            total=score,
            fallback=validation.fallback_mode,
            data_quality=validation.data_quality.value,
            **components.as_points(),
        )

        return result

    def score_events(
        self,
        events: list[CandidateEvent],
        now: datetime | None = None,
    ) -> list[ScoredEvent]:
        """Score every event; one bad event never stops the others."""
        now = now or datetime.now(timezone.utc)
        scored = []
        for event in events:
            try:
                scored.append(self.score_event(event, now))
            except Exception as e:
                logger.error("event_scoring_failed", event_id=event.id, error=str(e))
        return scored
