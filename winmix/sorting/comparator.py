from typing import Callable, Dict, List, Sequence
from functools import cmp_to_key

from winmix.contracts.match import Match, OUTCOME_ORDER
from winmix.contracts.sort_config import SortConfig
from winmix.sorting.collation import locale_compare


def _sign(value: int) -> int:
    return (value > 0) - (value < 0)


def _compare_text(a: str | None, b: str | None) -> int:
    return locale_compare(a or "", b or "")


def _compare_score(a_home: int, a_away: int, b_home: int, b_away: int) -> int:
    # Total goals first, then home goals: 1-3 < 2-2 < 3-1 < 0-5
    result = (a_home + a_away) - (b_home + b_away)
    if result == 0:
        result = a_home - b_home
    return _sign(result)


def _compare_date(a: Match, b: Match) -> int:
    # Undated matches sort before every dated match
    if a.date is None or b.date is None:
        return _sign((a.date is not None) - (b.date is not None))
    if a.date < b.date:
        return -1
    if a.date > b.date:
        return 1
    return 0


KEY_COMPARATORS: Dict[str, Callable[[Match, Match], int]] = {
    "home_team": lambda a, b: _compare_text(a.home_team, b.home_team),
    "away_team": lambda a, b: _compare_text(a.away_team, b.away_team),
    "league": lambda a, b: _compare_text(a.league, b.league),
    "half_time_score": lambda a, b: _compare_score(
        a.half_time_home_goals, a.half_time_away_goals,
        b.half_time_home_goals, b.half_time_away_goals,
    ),
    "full_time_score": lambda a, b: _compare_score(
        a.full_time_home_goals, a.full_time_away_goals,
        b.full_time_home_goals, b.full_time_away_goals,
    ),
    "result": lambda a, b: _sign(OUTCOME_ORDER[a.result] - OUTCOME_ORDER[b.result]),
    "btts": lambda a, b: _sign(int(a.btts) - int(b.btts)),
    "comeback": lambda a, b: _sign(int(a.comeback) - int(b.comeback)),
    "date": _compare_date,
}


def compare(a: Match, b: Match, config: SortConfig) -> int:
    """
    Three-way comparison of two matches under a sort config.

    Returns:
        -1, 0 or 1. Always 0 for an unknown key or direction 'none',
        which leaves the collection in its incoming order.
    """
    comparator = KEY_COMPARATORS.get(config.key)
    if comparator is None or config.direction == 'none':
        return 0

    result = comparator(a, b)
    return result if config.direction == 'asc' else -result


def sort_matches(matches: Sequence[Match], config: SortConfig) -> List[Match]:
    """
    Stable sort into a new list; ties keep their prior relative order.
    The input is never mutated.
    """
    if not config.is_active or config.key not in KEY_COMPARATORS:
        return list(matches)

    return sorted(matches, key=cmp_to_key(lambda a, b: compare(a, b, config)))
