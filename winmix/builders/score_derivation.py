"""
Pure score derivations.

Every match outcome the dashboard shows is computed here from raw goal
counts: the 1X2 result, both-teams-to-score and the comeback flag.
"""
from winmix.contracts.match import Outcome


def derive_outcome(home_goals: int, away_goals: int) -> Outcome:
    """
    Three-way comparison of a goal pair.

    Returns:
        'H' when home scored more, 'A' when away scored more, 'D' otherwise
    """
    if home_goals > away_goals:
        return 'H'
    elif home_goals < away_goals:
        return 'A'
    else:
        return 'D'


def derive_btts(home_goals: int, away_goals: int) -> bool:
    return home_goals > 0 and away_goals > 0


def derive_comeback(ht_home: int, ht_away: int, ft_home: int, ft_away: int) -> bool:
    """
    True when a side led at half-time and the other side won.

    A draw at either checkpoint is never a comeback: "led at HT, drew at FT"
    does not count, and a match without half-time data (0-0) cannot be one.
    """
    ht_result = derive_outcome(ht_home, ht_away)
    ft_result = derive_outcome(ft_home, ft_away)
    return ht_result != 'D' and ft_result != 'D' and ht_result != ft_result
