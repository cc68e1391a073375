"""Unit tests for the confidence tier calculator."""

from datetime import datetime, timedelta, timezone

from gamenight.services.confidence import ConfidenceTier, tier
from gamenight.services.events.freshness import check_freshness
from gamenight.services.events.models import EventStatus
from gamenight.services.events.validation import DataQuality

NOW = datetime(2026, 3, 1, 17, 0, tzinfo=timezone.utc)

CONFIG = {
    "clear_min_score": 80,
    "clear_min_gap": 10,
    "solid_min_score": 65,
    "solid_min_gap": 8,
}


class TestConfidenceTier:
    """Test tier() rules."""

    def test_no_events(self):
        result = tier([], config=CONFIG)

        assert result.tier == ConfidenceTier.WEAK
        assert result.header == "No games today"
        assert result.gap == 0

    def test_clear_pick(self, make_scored):
        result = tier([make_scored("a", 88), make_scored("b", 70)], config=CONFIG)

        assert result.tier == ConfidenceTier.CLEAR
        assert result.gap == 18

    def test_single_candidate_has_zero_gap(self, make_scored):
        result = tier([make_scored("a", 90)], config=CONFIG)

        assert result.gap == 0
        assert result.tier == ConfidenceTier.SOLID

    def test_unverified_pairing_never_clear(self, make_scored):
        top = make_scored("a", 85, verified=False, unverified_matchup=True)
        result = tier([top, make_scored("b", 60)], config=CONFIG)

        assert result.tier == ConfidenceTier.SOLID
        assert "injury reports" in result.subtext

    def test_degraded_data_never_clear(self, make_scored):
        top = make_scored("a", 85, data_quality=DataQuality.DEGRADED, fallback=True)
        result = tier([top, make_scored("b", 60)], config=CONFIG)
        assert result.tier == ConfidenceTier.SOLID

    def test_stale_data_softens_subtext(self, make_scored):
        stale = check_freshness(NOW - timedelta(minutes=90), EventStatus.SCHEDULED, NOW)
        result = tier([make_scored("a", 90), make_scored("b", 60)], stale, CONFIG)

        assert result.tier == ConfidenceTier.SOLID
        assert result.subtext == "Data last updated 90 min ago."

    def test_bunched_slate_is_weak(self, make_scored):
        result = tier([make_scored("a", 60), make_scored("b", 58)], config=CONFIG)
        assert result.tier == ConfidenceTier.WEAK

    def test_large_gap_alone_is_solid(self, make_scored):
        result = tier([make_scored("a", 55), make_scored("b", 45)], config=CONFIG)
        assert result.tier == ConfidenceTier.SOLID

    def test_monotonic_in_gap(self, make_scored):
        """With everything else fixed, a wider gap never lowers the tier."""
        previous = ConfidenceTier.WEAK
        for second in range(84, 40, -1):
            current = tier([make_scored("a", 85), make_scored("b", second)], config=CONFIG).tier
            assert current.at_least(previous)
            previous = current
        assert previous == ConfidenceTier.CLEAR

    def test_tier_ordering(self):
        assert ConfidenceTier.CLEAR.at_least(ConfidenceTier.SOLID)
        assert ConfidenceTier.SOLID.at_least(ConfidenceTier.SOLID)
        assert not ConfidenceTier.WEAK.at_least(ConfidenceTier.SOLID)
