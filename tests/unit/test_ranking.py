"""Unit tests for the ranker."""

import itertools
from datetime import datetime, timedelta, timezone

from gamenight.services.events.models import EventStatus
from gamenight.services.ranking import rank

NOW = datetime(2026, 3, 1, 17, 0, tzinfo=timezone.utc)


class TestRank:
    """Test rank() ordering and purity."""

    def test_score_descending(self, make_scored):
        events = [make_scored("a", 60), make_scored("b", 90), make_scored("c", 75)]
        assert [e.id for e in rank(events)] == ["b", "c", "a"]

    def test_earlier_start_breaks_ties(self, make_scored):
        late = make_scored("late", 80, start=NOW + timedelta(hours=9))
        early = make_scored("early", 80, start=NOW + timedelta(hours=6))
        assert [e.id for e in rank([late, early])] == ["early", "late"]

    def test_missing_start_sorts_last_among_ties(self, make_scored):
        unknown = make_scored("unknown", 80, no_start=True)
        known = make_scored("known", 80)
        assert [e.id for e in rank([unknown, known])] == ["known", "unknown"]

    def test_status_does_not_influence_order(self, make_scored):
        live = make_scored("live", 85, status=EventStatus.IN_PROGRESS)
        upcoming = make_scored("upcoming", 70)
        assert [e.id for e in rank([upcoming, live])] == ["live", "upcoming"]

    def test_permutation_invariant(self, make_scored):
        """Exact ties resolve by id, so every input order gives one output."""
        events = [
            make_scored("c", 80),
            make_scored("a", 80),
            make_scored("b", 80),
            make_scored("d", 65),
        ]
        expected = [e.id for e in rank(events)]
        assert expected == ["a", "b", "c", "d"]
        for permutation in itertools.permutations(events):
            assert [e.id for e in rank(permutation)] == expected

    def test_idempotent_and_pure(self, make_scored):
        events = [make_scored("a", 60), make_scored("b", 90)]
        original = list(events)
        once = rank(events)

        assert rank(once) == once
        assert events == original

    def test_empty(self):
        assert rank([]) == []
