"""Scoreboard and roster payload normalization.

Provider strings are mapped onto CandidateEvent / RosterEntry here and
nowhere else.
"""

from typing import Any

import structlog

from gamenight.services.availability import RosterEntry
from gamenight.services.events.dates import parse_instant
from gamenight.services.events.models import CandidateEvent, Side, TeamInfo, normalize_status

logger = structlog.get_logger(__name__)


def _to_int(value: Any) -> int | None:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _obj(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _objs(value: Any) -> list[dict[str, Any]]:
    """Dict items of a list field; anything else in the payload is ignored."""
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


def _team(competitor: dict[str, Any] | None) -> TeamInfo | None:
    if not competitor:
        return None
    team = _obj(competitor.get("team"))
    records = _objs(competitor.get("records"))
    return TeamInfo(
        name=team.get("displayName") or team.get("name"),
        abbreviation=team.get("abbreviation"),
        record=records[0].get("summary") if records else None,
        location=team.get("location"),
        provider_id=str(team["id"]) if team.get("id") is not None else None,
    )


def _athlete_name(probable: dict[str, Any]) -> str | None:
    name = _obj(probable.get("athlete")).get("displayName")
    return name if isinstance(name, str) and name else None


def _probables(
    competition: dict[str, Any],
    home: TeamInfo | None,
    away: TeamInfo | None,
) -> dict[Side, str]:
    """Probable starters keyed by side, matched on team id or competitor side."""
    result: dict[Side, str] = {}
    sides = {}
    for team, side in ((home, Side.HOME), (away, Side.AWAY)):
        if team and team.provider_id:
            sides[team.provider_id] = side

    for competitor in _objs(competition.get("competitors")):
        side = Side.HOME if competitor.get("homeAway") == "home" else Side.AWAY
        for probable in _objs(competitor.get("probables")):
            name = _athlete_name(probable)
            if name:
                result.setdefault(side, name)

    for probable in _objs(competition.get("probables")):
        name = _athlete_name(probable)
        team_id = _obj(probable.get("team")).get("id") or probable.get("teamId")
        side = sides.get(str(team_id)) if team_id is not None else None
        if name and side:
            result.setdefault(side, name)
    return result


def _raw_status(competition: dict[str, Any], raw: dict[str, Any]) -> str | None:
    """status.type.name (or .state); a bare string status is taken as-is."""
    status = competition.get("status") or raw.get("status")
    if isinstance(status, str):
        return status
    status_type = _obj(_obj(status).get("type"))
    value = status_type.get("name") or status_type.get("state")
    return value if isinstance(value, str) else None


def transform_event(raw: Any, category: str) -> CandidateEvent | None:
    """
    Build a CandidateEvent from one scoreboard event.

    Missing sides or records are kept as None so validation can flag them.
    Returns None when the item is not an object or has no id or competition.
    """
    if not isinstance(raw, dict):
        logger.debug("scoreboard_event_skipped", reason="not_an_object")
        return None
    competitions = _objs(raw.get("competitions"))
    if not raw.get("id") or not competitions:
        logger.debug("scoreboard_event_skipped", event_id=raw.get("id"))
        return None

    competition = competitions[0]
    competitors = _objs(competition.get("competitors"))
    home_c = next((c for c in competitors if c.get("homeAway") == "home"), None)
    away_c = next((c for c in competitors if c.get("homeAway") == "away"), None)
    home, away = _team(home_c), _team(away_c)

    broadcasts: list[str] = []
    for broadcast in _objs(competition.get("broadcasts")):
        names = broadcast.get("names")
        for name in names if isinstance(names, list) else []:
            if isinstance(name, str) and name and name not in broadcasts:
                broadcasts.append(name)

    headlines = _objs(competition.get("headlines"))
    headline = headlines[0].get("shortLinkText") if headlines else None
    raw_status = _raw_status(competition, raw)

    return CandidateEvent(
        id=str(raw["id"]),
        category=category.lower(),
        home=home,
        away=away,
        start_time=parse_instant(raw.get("date") or competition.get("date")),
        status=normalize_status(raw_status),
        raw_status=raw_status,
        home_score=_to_int(home_c.get("score")) if home_c else None,
        away_score=_to_int(away_c.get("score")) if away_c else None,
        network=broadcasts[0] if broadcasts else None,
        broadcasts=tuple(broadcasts),
        headline=headline if isinstance(headline, str) and headline else None,
        probables=_probables(competition, home, away),
    )


def transform_scoreboard(payload: dict[str, Any], category: str) -> list[CandidateEvent]:
    """All usable events in a scoreboard payload."""
    raw_events = payload.get("events")
    if not isinstance(raw_events, list):
        return []
    events = []
    for raw in raw_events:
        event = transform_event(raw, category)
        if event is not None:
            events.append(event)
    return events


def _roster_entry(player: dict[str, Any], group_position: str | None = None) -> RosterEntry:
    position = player.get("position")
    if isinstance(position, dict):
        position = position.get("abbreviation") or position.get("name")
    injuries = _objs(player.get("injuries"))
    injury = injuries[0] if injuries else {}
    name = player.get("displayName") or player.get("fullName")
    status = injury.get("status")
    return RosterEntry(
        name=name if isinstance(name, str) else "",
        status=status if isinstance(status, str) and status else "Active",
        position=position if isinstance(position, str) else group_position,
        detail=injury.get("type") if isinstance(injury.get("type"), str) else None,
    )


def parse_roster(payload: dict[str, Any]) -> list[RosterEntry]:
    """
    Parse a roster payload into entries.

    Handles both a flat athlete list and athletes grouped by position
    (groups carry `items` or `athletes`).
    """
    athletes = _objs(payload.get("athletes"))
    if not athletes:
        return []

    first = athletes[0]
    if first.get("items") is not None or first.get("athletes") is not None:
        roster = []
        for group in athletes:
            position = group.get("position")
            for player in _objs(group.get("items") or group.get("athletes")):
                roster.append(_roster_entry(player, position if isinstance(position, str) else None))
        return [entry for entry in roster if entry.name]

    return [entry for entry in (_roster_entry(p) for p in athletes) if entry.name]
