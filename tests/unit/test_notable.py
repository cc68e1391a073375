"""Unit tests for notable-participant scoring.

CRITICAL TESTS:
- A 'vs' result always features one individual from each side
- Two individuals from the same side are never paired
- Unavailable participants are never featured
"""

from datetime import datetime, timedelta, timezone

from gamenight.services.availability import AvailabilityCache, RosterEntry
from gamenight.services.events.models import Side
from gamenight.services.scoring.categories import MLB, NBA, get_profile
from gamenight.services.scoring.notable import MatchupType, score_notables

NOW = datetime(2026, 3, 1, 17, 0, tzinfo=timezone.utc)


def roster(*entries):
    return [RosterEntry(name, status) for name, status in entries]


class TestScoreNotables:
    """Test the notable pairing rules."""

    def setup_method(self):
        """Set up test fixtures."""
        self.cache = AvailabilityCache(clock=lambda: NOW)

    def test_one_sided_star_power_features_single_individual(self, make_event, make_team):
        """Two premier names on one side never become a 'vs' pairing."""
        event = make_event(home=make_team("LAL"), away=make_team("SAC"))
        result = score_notables(event, NBA, None, now=NOW)

        assert result.matchup_type == MatchupType.SINGLE
        assert len(result.featured) == 1
        assert result.featured[0].name == "Luka Doncic"
        assert result.score == 10

    def test_vs_pairs_one_from_each_side(self, make_event, make_team):
        event = make_event(home=make_team("LAL"), away=make_team("BOS"))
        result = score_notables(event, NBA, None, now=NOW)

        assert result.matchup_type == MatchupType.VS
        assert {f.side for f in result.featured} == {Side.HOME, Side.AWAY}
        assert result.score == 16

    def test_unavailable_premier_falls_back_to_teammate(self, make_event, make_team):
        self.cache.record_roster(
            "nba", "LAL", roster(("Luka Doncic", "Out"), ("LeBron James", "Active")), NOW
        )
        event = make_event(home=make_team("LAL"), away=make_team("SAC"))
        result = score_notables(event, NBA, self.cache, now=NOW)

        assert result.names == ["LeBron James"]
        assert "Luka Doncic" in result.excluded

    def test_secondary_vs_secondary_when_premiers_out(self, make_event, make_team):
        self.cache.record_roster(
            "nba",
            "LAL",
            roster(("Luka Doncic", "Out"), ("LeBron James", "Out"), ("Austin Reaves", "Active")),
            NOW,
        )
        event = make_event(home=make_team("LAL"), away=make_team("BOS"))
        result = score_notables(event, NBA, self.cache, now=NOW)

        assert result.matchup_type == MatchupType.VS
        assert result.score == 12
        assert "Austin Reaves" in result.names

    def test_everyone_out_scores_zero(self, make_event, make_team):
        self.cache.record_roster("nba", "MIL", roster(("Giannis Antetokounmpo", "Out")), NOW)
        event = make_event(home=make_team("MIL"), away=make_team("CHI"))
        result = score_notables(event, NBA, self.cache, now=NOW)

        assert result.matchup_type == MatchupType.NONE
        assert result.score == 0
        assert result.excluded == ("Giannis Antetokounmpo",)

    def test_verified_labels(self, make_event):
        self.cache.record_roster("nba", "OKC", roster(("Shai Gilgeous-Alexander", "Active")), NOW)
        self.cache.record_roster("nba", "DEN", roster(("Nikola Jokic", "Active")), NOW)
        result = score_notables(make_event(), NBA, self.cache, now=NOW)

        assert result.label == "Matchup"
        assert result.injury_status_verified is True
        assert result.unverified_pairing is False
        assert result.availability_verified is True

    def test_unverified_labels_are_hedged(self, make_event):
        result = score_notables(make_event(), NBA, None, now=NOW)

        assert result.label == "Expected Matchup"
        assert result.injury_status_verified is False
        assert result.unverified_pairing is True
        assert result.availability_verified is False

    def test_expired_absence_is_featured_but_noted(self, make_event, make_team):
        """An old 'Out' no longer excludes, but the display keeps the hedge."""
        self.cache.record_roster(
            "nba", "MIL", roster(("Giannis Antetokounmpo", "Out")), NOW - timedelta(hours=5)
        )
        event = make_event(home=make_team("MIL"), away=make_team("CHA"))
        result = score_notables(event, NBA, self.cache, now=NOW)

        assert result.names == ["Giannis Antetokounmpo"]
        assert result.label == "Expected Star"
        assert result.featured[0].status_note == "Last reported Out"
        assert result.to_dict()["statusNotes"] == {"Giannis Antetokounmpo": "Last reported Out"}

    def test_fresh_active_status_has_no_note(self, make_event, make_team):
        self.cache.record_roster("nba", "MIL", roster(("Giannis Antetokounmpo", "Active")), NOW)
        event = make_event(home=make_team("MIL"), away=make_team("CHA"))
        result = score_notables(event, NBA, self.cache, now=NOW)

        assert result.label == "Star"
        assert result.featured[0].status_note is None
        assert result.to_dict()["statusNotes"] == {}

    def test_payload_names_by_side(self, make_event):
        payload = score_notables(make_event(), NBA, None, now=NOW).to_dict()

        assert payload["homePlayer"] == "Shai Gilgeous-Alexander"
        assert payload["awayPlayer"] == "Nikola Jokic"

    def test_unknown_category(self, make_event):
        result = score_notables(make_event(), get_profile("cricket"), None, now=NOW)
        assert result.score == 0


class TestMlbProbables:
    """Pitchers only count on the day they start."""

    def test_pitcher_ignored_without_probable(self, make_event, make_team):
        event = make_event(category="mlb", home=make_team("DET"), away=make_team("CHW"))
        result = score_notables(event, MLB, None, now=NOW)
        assert result.matchup_type == MatchupType.NONE

    def test_pitcher_counts_when_probable(self, make_event, make_team):
        event = make_event(
            category="mlb",
            home=make_team("DET"),
            away=make_team("CHW"),
            probables={Side.HOME: "Tarik Skubal"},
        )
        result = score_notables(event, MLB, None, now=NOW)

        assert result.names == ["Tarik Skubal"]
        assert result.score == 10

    def test_position_players_always_count(self, make_event, make_team):
        event = make_event(category="mlb", home=make_team("NYY"), away=make_team("CHW"))
        result = score_notables(event, MLB, None, now=NOW)
        assert result.names == ["Aaron Judge"]
