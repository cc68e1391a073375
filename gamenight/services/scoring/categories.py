"""Category profiles: static tables used by the watchability scorers.

Each supported category has exactly one profile holding its own divisions,
rivalries and notable-participant tiers. Profiles never share tables, so a
basketball name can never leak into a football matchup.
"""

from dataclasses import dataclass, field

from gamenight.services.events.models import CandidateEvent, Side


def _divisions(groups: dict[str, list[str]]) -> dict[str, str]:
    return {team: division for division, teams in groups.items() for team in teams}


def _rivalries(pairs: dict[tuple[str, str], int]) -> dict[frozenset[str], int]:
    return {frozenset(pair): level for pair, level in pairs.items()}


@dataclass(frozen=True)
class NotableTiers:
    """Marquee individuals for one team."""

    premier: tuple[str, ...] = ()
    secondary: tuple[str, ...] = ()


@dataclass(frozen=True)
class CategoryProfile:
    """Static, category-specific scoring data and notable lookup."""

    name: str
    display_name: str
    divisions: dict[str, str]
    rivalries: dict[frozenset[str], int]
    notables: dict[str, NotableTiers]
    participant_noun: str = "star"

    def same_division(self, home_code: str | None, away_code: str | None) -> bool:
        if not home_code or not away_code:
            return False
        division = self.divisions.get(home_code.upper())
        return division is not None and division == self.divisions.get(away_code.upper())

    def rivalry_level(self, home_code: str | None, away_code: str | None) -> int:
        if not home_code or not away_code:
            return 0
        return self.rivalries.get(frozenset({home_code.upper(), away_code.upper()}), 0)

    def candidates(self, event: CandidateEvent, side: Side) -> NotableTiers:
        """Notable individuals that could feature for one side of this event."""
        team = event.team(side)
        if team is None or not team.abbreviation:
            return NotableTiers()
        return self.notables.get(team.abbreviation.upper(), NotableTiers())


@dataclass(frozen=True)
class MlbProfile(CategoryProfile):
    """
    Baseball: starting pitchers only matter on the day they pitch.

    Pitchers in `pitchers` count only when the event's probable-starter hint
    for that side names them.
    """

    pitchers: frozenset[str] = field(default_factory=frozenset)

    def candidates(self, event: CandidateEvent, side: Side) -> NotableTiers:
        tiers = super().candidates(event, side)
        probable = event.probables.get(side)

        def keep(name: str) -> bool:
            return name not in self.pitchers or name == probable

        return NotableTiers(
            premier=tuple(n for n in tiers.premier if keep(n)),
            secondary=tuple(n for n in tiers.secondary if keep(n)),
        )


NBA = CategoryProfile(
    name="nba",
    display_name="NBA",
    divisions=_divisions(
        {
            "atlantic": ["BOS", "BKN", "NY", "PHI", "TOR"],
            "central": ["CHI", "CLE", "DET", "IND", "MIL"],
            "southeast": ["ATL", "CHA", "MIA", "ORL", "WSH"],
            "northwest": ["DEN", "MIN", "OKC", "POR", "UTAH"],
            "pacific": ["GS", "LAC", "LAL", "PHX", "SAC"],
            "southwest": ["DAL", "HOU", "MEM", "NO", "SA"],
        }
    ),
    rivalries=_rivalries(
        {
            ("BOS", "LAL"): 3,
            ("BOS", "PHI"): 2,
            ("BOS", "NY"): 2,
            ("NY", "MIA"): 2,
            ("NY", "BKN"): 2,
            ("LAL", "LAC"): 2,
            ("LAL", "GS"): 2,
            ("CHI", "DET"): 2,
            ("DEN", "MIN"): 1,
            ("DAL", "SA"): 1,
            ("CLE", "GS"): 1,
        }
    ),
    notables={
        "OKC": NotableTiers(("Shai Gilgeous-Alexander",), ("Jalen Williams", "Chet Holmgren")),
        "DEN": NotableTiers(("Nikola Jokic",), ("Jamal Murray",)),
        "MIL": NotableTiers(("Giannis Antetokounmpo",), ()),
        "LAL": NotableTiers(("Luka Doncic", "LeBron James"), ("Austin Reaves",)),
        "GS": NotableTiers(("Stephen Curry",), ("Jimmy Butler",)),
        "MIN": NotableTiers(("Anthony Edwards",), ("Julius Randle",)),
        "SA": NotableTiers(("Victor Wembanyama",), ("De'Aaron Fox",)),
        "BOS": NotableTiers((), ("Jaylen Brown", "Jayson Tatum")),
        "NY": NotableTiers(("Jalen Brunson",), ("Karl-Anthony Towns",)),
        "PHI": NotableTiers((), ("Joel Embiid", "Tyrese Maxey")),
        "CLE": NotableTiers(("Donovan Mitchell",), ("Evan Mobley",)),
        "HOU": NotableTiers(("Kevin Durant",), ("Alperen Sengun",)),
        "DAL": NotableTiers((), ("Anthony Davis", "Kyrie Irving")),
        "PHX": NotableTiers((), ("Devin Booker",)),
        "IND": NotableTiers((), ("Pascal Siakam",)),
        "ORL": NotableTiers((), ("Paolo Banchero",)),
        "ATL": NotableTiers((), ("Trae Young",)),
        "MEM": NotableTiers((), ("Ja Morant",)),
    },
)


NFL = CategoryProfile(
    name="nfl",
    display_name="NFL",
    divisions=_divisions(
        {
            "afc_east": ["BUF", "MIA", "NE", "NYJ"],
            "afc_north": ["BAL", "CIN", "CLE", "PIT"],
            "afc_south": ["HOU", "IND", "JAX", "TEN"],
            "afc_west": ["DEN", "KC", "LV", "LAC"],
            "nfc_east": ["DAL", "NYG", "PHI", "WSH"],
            "nfc_north": ["CHI", "DET", "GB", "MIN"],
            "nfc_south": ["ATL", "CAR", "NO", "TB"],
            "nfc_west": ["ARI", "LAR", "SF", "SEA"],
        }
    ),
    rivalries=_rivalries(
        {
            ("DAL", "PHI"): 3,
            ("GB", "CHI"): 3,
            ("PIT", "BAL"): 3,
            ("DAL", "WSH"): 2,
            ("DAL", "NYG"): 2,
            ("KC", "LV"): 2,
            ("NE", "NYJ"): 2,
            ("BUF", "MIA"): 2,
            ("SF", "SEA"): 2,
            ("KC", "BUF"): 2,
            ("GB", "MIN"): 1,
            ("CIN", "CLE"): 1,
        }
    ),
    notables={
        "KC": NotableTiers(("Patrick Mahomes",), ("Travis Kelce",)),
        "BUF": NotableTiers(("Josh Allen",), ()),
        "BAL": NotableTiers(("Lamar Jackson",), ("Derrick Henry",)),
        "CIN": NotableTiers(("Joe Burrow",), ("Ja'Marr Chase",)),
        "PHI": NotableTiers(("Saquon Barkley",), ("Jalen Hurts", "A.J. Brown")),
        "DET": NotableTiers((), ("Jared Goff", "Amon-Ra St. Brown")),
        "SF": NotableTiers((), ("Christian McCaffrey", "Brock Purdy")),
        "DAL": NotableTiers((), ("Dak Prescott", "CeeDee Lamb")),
        "MIN": NotableTiers(("Justin Jefferson",), ()),
        "LAR": NotableTiers((), ("Matthew Stafford", "Puka Nacua")),
        "HOU": NotableTiers((), ("C.J. Stroud",)),
        "GB": NotableTiers((), ("Jordan Love",)),
        "PIT": NotableTiers((), ("Aaron Rodgers", "T.J. Watt")),
        "WSH": NotableTiers(("Jayden Daniels",), ()),
        "MIA": NotableTiers((), ("Tyreek Hill",)),
    },
)


MLB = MlbProfile(
    name="mlb",
    display_name="MLB",
    divisions=_divisions(
        {
            "al_east": ["BAL", "BOS", "NYY", "TB", "TOR"],
            "al_central": ["CHW", "CLE", "DET", "KC", "MIN"],
            "al_west": ["ATH", "HOU", "LAA", "SEA", "TEX"],
            "nl_east": ["ATL", "MIA", "NYM", "PHI", "WSH"],
            "nl_central": ["CHC", "CIN", "MIL", "PIT", "STL"],
            "nl_west": ["ARI", "COL", "LAD", "SD", "SF"],
        }
    ),
    rivalries=_rivalries(
        {
            ("NYY", "BOS"): 3,
            ("LAD", "SF"): 3,
            ("CHC", "STL"): 3,
            ("NYY", "NYM"): 2,
            ("LAD", "SD"): 2,
            ("CHC", "CHW"): 2,
            ("LAD", "LAA"): 1,
            ("ATL", "PHI"): 1,
        }
    ),
    notables={
        "LAD": NotableTiers(("Shohei Ohtani",), ("Mookie Betts", "Yoshinobu Yamamoto")),
        "NYY": NotableTiers(("Aaron Judge",), ("Gerrit Cole",)),
        "NYM": NotableTiers(("Juan Soto",), ("Francisco Lindor",)),
        "PHI": NotableTiers((), ("Bryce Harper", "Zack Wheeler")),
        "ATL": NotableTiers(("Ronald Acuna Jr.",), ("Chris Sale",)),
        "DET": NotableTiers(("Tarik Skubal",), ()),
        "PIT": NotableTiers(("Paul Skenes",), ()),
        "KC": NotableTiers(("Bobby Witt Jr.",), ()),
        "SEA": NotableTiers((), ("Julio Rodriguez", "Cal Raleigh")),
        "SD": NotableTiers((), ("Fernando Tatis Jr.", "Manny Machado")),
        "TOR": NotableTiers((), ("Vladimir Guerrero Jr.",)),
        "BAL": NotableTiers((), ("Gunnar Henderson",)),
        "HOU": NotableTiers((), ("Yordan Alvarez", "Jose Altuve")),
    },
    pitchers=frozenset(
        {
            "Yoshinobu Yamamoto",
            "Gerrit Cole",
            "Zack Wheeler",
            "Chris Sale",
            "Tarik Skubal",
            "Paul Skenes",
        }
    ),
)


PROFILES: dict[str, CategoryProfile] = {profile.name: profile for profile in (NBA, NFL, MLB)}


def get_profile(category: str) -> CategoryProfile | None:
    """Profile for a supported category, or None."""
    return PROFILES.get((category or "").lower())
