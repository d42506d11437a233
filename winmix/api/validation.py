"""
Request validation for the HTTP layer.

Query strings and JSON bodies are checked here before anything reaches the
match engine. Every problem found is collected so a single 400 response can
list them all.
"""
from typing import Any, Dict, List, Mapping, Optional
from dataclasses import dataclass
from datetime import datetime, timezone
import uuid

from winmix.builders.match_builder import parse_utc_datetime
from winmix.contracts.errors import InvalidRequest
from winmix.contracts.filter_spec import DateRange, FilterSpec, TEAM_MATCH_MODES
from winmix.contracts.match import Match
from winmix.contracts.match_query import MatchQuery, PageRequest
from winmix.contracts.sort_config import SORT_DIRECTIONS, SortConfig

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100
MAX_TEAM_NAME_LENGTH = 100
MAX_LEAGUE_NAME_LENGTH = 50
MAX_GOALS = 50
MAX_EVENT_NAME_LENGTH = 100

OPEN_START = datetime.min.replace(tzinfo=timezone.utc)
OPEN_END = datetime.max.replace(tzinfo=timezone.utc)


def _text_param(args: Mapping[str, Any], name: str, max_length: int, errors: List[str]) -> Optional[str]:
    value = args.get(name)
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    if len(text) > max_length:
        errors.append(f"'{name}' must be at most {max_length} characters")
        return None
    return text


def _bool_param(args: Mapping[str, Any], name: str, errors: List[str]) -> Optional[bool]:
    value = args.get(name)
    if value is None or str(value).strip() == "":
        return None
    text = str(value).strip().lower()
    if text == "true":
        return True
    if text == "false":
        return False
    errors.append(f"'{name}' must be 'true' or 'false'")
    return None


def _int_param(args: Mapping[str, Any], name: str, default: int, errors: List[str]) -> int:
    value = args.get(name)
    if value is None or str(value).strip() == "":
        return default
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        errors.append(f"'{name}' must be an integer")
        return default


def _date_param(args: Mapping[str, Any], name: str, errors: List[str]) -> Optional[datetime]:
    value = args.get(name)
    if value is None or str(value).strip() == "":
        return None
    parsed = parse_utc_datetime(value)
    if parsed is None:
        errors.append(f"'{name}' must be an ISO-8601 date")
    return parsed


def parse_filter_spec(args: Mapping[str, Any], errors: List[str]) -> FilterSpec:
    date_from = _date_param(args, "date_from", errors)
    date_to = _date_param(args, "date_to", errors)
    date_range = None
    if date_from is not None or date_to is not None:
        # start > end is left for the engine to reject
        date_range = DateRange(start=date_from or OPEN_START, end=date_to or OPEN_END)

    return FilterSpec(
        home_team=_text_param(args, "home_team", MAX_TEAM_NAME_LENGTH, errors),
        away_team=_text_param(args, "away_team", MAX_TEAM_NAME_LENGTH, errors),
        league=_text_param(args, "league", MAX_LEAGUE_NAME_LENGTH, errors),
        btts=_bool_param(args, "btts", errors),
        comeback=_bool_param(args, "comeback", errors),
        date_range=date_range,
    )


def parse_match_query(args: Mapping[str, Any]) -> MatchQuery:
    """
    Build a MatchQuery from query-string arguments.

    'page' is 1-based on the wire and 0-based in the engine. 'limit' must be
    between 1 and MAX_PAGE_SIZE. Out-of-range values are rejected, not clamped.
    """
    errors: List[str] = []
    filter_spec = parse_filter_spec(args, errors)

    page = _int_param(args, "page", 1, errors)
    if page < 1:
        errors.append("'page' must be at least 1")
    limit = _int_param(args, "limit", DEFAULT_PAGE_SIZE, errors)
    if not 1 <= limit <= MAX_PAGE_SIZE:
        errors.append(f"'limit' must be between 1 and {MAX_PAGE_SIZE}")

    direction = str(args.get("direction") or "none").strip().lower()
    if direction not in SORT_DIRECTIONS:
        errors.append(f"'direction' must be one of {', '.join(SORT_DIRECTIONS)}")

    team_match = str(args.get("team_match") or "substring").strip().lower()
    if team_match not in TEAM_MATCH_MODES:
        errors.append(f"'team_match' must be one of {', '.join(TEAM_MATCH_MODES)}")

    if errors:
        raise InvalidRequest("Invalid query parameters", errors)

    return MatchQuery(
        filter_spec=filter_spec,
        sort=SortConfig(key=str(args.get("sort") or "").strip(), direction=direction),
        page=PageRequest(number=page - 1, size=limit),
        team_match=team_match,
    )


def _required_text(payload: Mapping[str, Any], name: str, max_length: int, errors: List[str]) -> str:
    value = payload.get(name)
    if not isinstance(value, str) or not value.strip():
        errors.append(f"'{name}' is required")
        return ""
    text = value.strip()
    if len(text) > max_length:
        errors.append(f"'{name}' must be at most {max_length} characters")
    return text


def _goal_field(payload: Mapping[str, Any], name: str, required: bool, errors: List[str]) -> int:
    value = payload.get(name)
    if value is None:
        if required:
            errors.append(f"'{name}' is required")
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        errors.append(f"'{name}' must be an integer")
        return 0
    if not 0 <= value <= MAX_GOALS:
        errors.append(f"'{name}' must be between 0 and {MAX_GOALS}")
        return 0
    return value


def parse_match_payload(payload: Any, match_id: Optional[str] = None) -> Match:
    """
    Validate a create/replace body and build the Match it describes.
    A new id is generated when match_id is not given.
    """
    if not isinstance(payload, Mapping):
        raise InvalidRequest("Invalid request data", ["body must be a JSON object"])

    errors: List[str] = []
    home_team = _required_text(payload, "home_team", MAX_TEAM_NAME_LENGTH, errors)
    away_team = _required_text(payload, "away_team", MAX_TEAM_NAME_LENGTH, errors)
    league = _required_text(payload, "league", MAX_LEAGUE_NAME_LENGTH, errors)
    ft_home = _goal_field(payload, "full_time_home_goals", True, errors)
    ft_away = _goal_field(payload, "full_time_away_goals", True, errors)
    ht_home = _goal_field(payload, "half_time_home_goals", False, errors)
    ht_away = _goal_field(payload, "half_time_away_goals", False, errors)

    match_date = None
    raw_date = payload.get("date")
    if not isinstance(raw_date, str) or not raw_date.strip():
        errors.append("'date' is required")
    else:
        match_date = parse_utc_datetime(raw_date)
        if match_date is None:
            errors.append("'date' must be an ISO-8601 datetime")

    season = payload.get("season")
    if season is not None and not isinstance(season, str):
        errors.append("'season' must be a string")

    if home_team and away_team and home_team == away_team:
        errors.append("Home and away teams cannot be the same")

    if errors:
        raise InvalidRequest("Invalid request data", errors)

    return Match(
        match_id=match_id or uuid.uuid4().hex,
        home_team=home_team,
        away_team=away_team,
        full_time_home_goals=ft_home,
        full_time_away_goals=ft_away,
        half_time_home_goals=ht_home,
        half_time_away_goals=ht_away,
        date=match_date,
        league=league,
        season=season.strip() if season else None,
    )


@dataclass(frozen=True)
class AnalyticsEvent:
    name: str
    properties: Dict[str, Any]
    timestamp: Optional[float] = None

    def to_dict(self) -> dict:
        return {
            "event": self.name,
            "properties": self.properties,
            "timestamp": self.timestamp,
        }


def parse_analytics_event(payload: Any) -> AnalyticsEvent:
    if not isinstance(payload, Mapping):
        raise InvalidRequest("Invalid event data", ["body must be a JSON object"])

    errors: List[str] = []
    name = payload.get("name")
    if not isinstance(name, str) or not 1 <= len(name) <= MAX_EVENT_NAME_LENGTH:
        errors.append(f"'name' must be a string of 1 to {MAX_EVENT_NAME_LENGTH} characters")

    properties = payload.get("properties")
    if properties is None:
        properties = {}
    elif not isinstance(properties, dict):
        errors.append("'properties' must be an object")

    timestamp = payload.get("timestamp")
    if timestamp is not None and (isinstance(timestamp, bool) or not isinstance(timestamp, (int, float))):
        errors.append("'timestamp' must be a number")

    if errors:
        raise InvalidRequest("Invalid event data", errors)

    return AnalyticsEvent(name=name, properties=properties, timestamp=timestamp)
