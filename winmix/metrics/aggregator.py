from typing import Dict, Iterable, Tuple

from winmix.contracts.match import Match
from winmix.contracts.statistics import Statistics

TOP_SCORELINES = 5


def _percentage(count: int, total: int) -> float:
    if total == 0:
        return 0.0
    return count / total * 100


def _average(goals: int, total: int) -> float:
    if total == 0:
        return 0.0
    return goals / total


def _top_counts(counts: Dict[str, int], limit: int) -> Tuple[Tuple[str, int], ...]:
    # dicts keep insertion order and sorted() is stable, so ties stay first-seen
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return tuple(ranked[:limit])


def aggregate(collection: Iterable[Match], top_scorelines: int = TOP_SCORELINES) -> Statistics:
    """
    Reduce a match collection into summary statistics in a single pass.

    Percentages are count / total * 100 and averages are goals / total;
    both are 0 for an empty collection.

    Args:
        collection: the full filtered set (not a display page)
        top_scorelines: how many of the most frequent scorelines to keep
    """
    total = 0
    home_wins = draws = away_wins = 0
    btts_count = comeback_count = 0
    home_goals = away_goals = 0
    scorelines: Dict[str, int] = {}
    leagues: Dict[str, int] = {}

    for match in collection:
        total += 1

        if match.result == 'H':
            home_wins += 1
        elif match.result == 'A':
            away_wins += 1
        else:
            draws += 1

        if match.btts:
            btts_count += 1
        if match.comeback:
            comeback_count += 1

        home_goals += match.full_time_home_goals
        away_goals += match.full_time_away_goals

        scorelines[match.scoreline] = scorelines.get(match.scoreline, 0) + 1
        league = match.league or ""
        leagues[league] = leagues.get(league, 0) + 1

    return Statistics(
        total_matches=total,
        home_wins=home_wins,
        draws=draws,
        away_wins=away_wins,
        btts_count=btts_count,
        btts_percentage=_percentage(btts_count, total),
        comeback_count=comeback_count,
        comeback_percentage=_percentage(comeback_count, total),
        average_home_goals=_average(home_goals, total),
        average_away_goals=_average(away_goals, total),
        average_goals=_average(home_goals + away_goals, total),
        scoreline_frequency=_top_counts(scorelines, top_scorelines),
        league_distribution=tuple(leagues.items()),
    )


def result_split(stats: Statistics) -> Dict[str, int]:
    return {"home": stats.home_wins, "draw": stats.draws, "away": stats.away_wins}
