from typing import Any, Dict, Tuple
from dataclasses import dataclass


@dataclass(frozen=True)
class Statistics:
    """
    Summary of a filtered match set. Always recomputed from scratch.
    """
    total_matches: int = 0
    home_wins: int = 0
    draws: int = 0
    away_wins: int = 0
    btts_count: int = 0
    btts_percentage: float = 0.0
    comeback_count: int = 0
    comeback_percentage: float = 0.0
    average_home_goals: float = 0.0
    average_away_goals: float = 0.0
    average_goals: float = 0.0
    # (scoreline, count), most frequent first
    scoreline_frequency: Tuple[Tuple[str, int], ...] = ()
    # (league, count), first-seen order
    league_distribution: Tuple[Tuple[str, int], ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_matches": self.total_matches,
            "home_wins": self.home_wins,
            "draws": self.draws,
            "away_wins": self.away_wins,
            "btts_count": self.btts_count,
            "btts_percentage": self.btts_percentage,
            "comeback_count": self.comeback_count,
            "comeback_percentage": self.comeback_percentage,
            "average_home_goals": self.average_home_goals,
            "average_away_goals": self.average_away_goals,
            "average_goals": self.average_goals,
            "scoreline_frequency": [
                {"scoreline": scoreline, "count": count}
                for scoreline, count in self.scoreline_frequency
            ],
            "league_distribution": [
                {"league": league, "count": count}
                for league, count in self.league_distribution
            ],
        }
