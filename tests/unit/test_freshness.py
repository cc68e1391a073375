"""Unit tests for snapshot freshness."""

import math
from datetime import datetime, timedelta, timezone

from gamenight.services.events.freshness import check_freshness, threshold_for
from gamenight.services.events.models import EventStatus

NOW = datetime(2026, 3, 1, 17, 0, tzinfo=timezone.utc)


class TestFreshness:
    """Test status-dependent staleness thresholds."""

    def test_live_event_goes_stale_quickly(self):
        result = check_freshness(NOW - timedelta(minutes=10), EventStatus.IN_PROGRESS, NOW)

        assert result.fresh is False
        assert result.threshold == 5
        assert result.age_label == "10 min"

    def test_scheduled_event_tolerates_an_hour(self):
        result = check_freshness(NOW - timedelta(minutes=30), EventStatus.SCHEDULED, NOW)
        assert result.fresh is True

    def test_unknown_status_uses_default(self):
        assert threshold_for(EventStatus.UNKNOWN) == 30
        assert threshold_for(None) == 30

    def test_missing_fetch_time_is_never_fresh(self):
        result = check_freshness(None, EventStatus.SCHEDULED, NOW)

        assert result.fresh is False
        assert math.isinf(result.age_minutes)
        assert result.to_dict()["ageMinutes"] is None

    def test_naive_fetch_time_treated_as_utc(self):
        result = check_freshness(datetime(2026, 3, 1, 16, 58), EventStatus.IN_PROGRESS, NOW)
        assert result.fresh is True

    def test_threshold_override(self):
        result = check_freshness(
            NOW - timedelta(minutes=3),
            EventStatus.IN_PROGRESS,
            NOW,
            config={"in_progress_minutes": 2},
        )
        assert result.fresh is False
