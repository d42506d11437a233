from typing import Any, Dict, Literal, Optional
from dataclasses import dataclass, field
from datetime import datetime, timezone

Outcome = Literal['H', 'D', 'A']

# Fixed enum order used for grouping, not alphabetical
OUTCOME_ORDER: Dict[str, int] = {'H': 0, 'D': 1, 'A': 2}


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass(frozen=True)
class Match:
    """
    Canonical, immutable match record.

    result, btts and comeback are derived from the goal fields in
    __post_init__ and cannot be passed in, so they never drift from the score.
    """
    match_id: str
    home_team: str
    away_team: str
    full_time_home_goals: int
    full_time_away_goals: int
    half_time_home_goals: int = 0
    half_time_away_goals: int = 0
    date: Optional[datetime] = None
    league: Optional[str] = None
    season: Optional[str] = None

    result: Outcome = field(init=False)
    btts: bool = field(init=False)
    comeback: bool = field(init=False)

    def __post_init__(self):
        # Local import: builders depend on contracts, not the other way round
        from winmix.builders.score_derivation import derive_btts, derive_comeback, derive_outcome

        if not self.home_team or not self.away_team:
            raise ValueError("Team names must be non-empty")

        for name in (
            "full_time_home_goals",
            "full_time_away_goals",
            "half_time_home_goals",
            "half_time_away_goals",
        ):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ValueError(f"{name} must be a non-negative integer, got {value!r}")

        object.__setattr__(self, "match_id", str(self.match_id))
        object.__setattr__(self, "date", ensure_utc(self.date))
        object.__setattr__(
            self, "result", derive_outcome(self.full_time_home_goals, self.full_time_away_goals)
        )
        object.__setattr__(
            self, "btts", derive_btts(self.full_time_home_goals, self.full_time_away_goals)
        )
        object.__setattr__(
            self,
            "comeback",
            derive_comeback(
                self.half_time_home_goals,
                self.half_time_away_goals,
                self.full_time_home_goals,
                self.full_time_away_goals,
            ),
        )

    @property
    def half_time_score(self) -> str:
        return f"{self.half_time_home_goals}-{self.half_time_away_goals}"

    @property
    def full_time_score(self) -> str:
        return f"{self.full_time_home_goals}-{self.full_time_away_goals}"

    @property
    def scoreline(self) -> str:
        """Full-time score as 'home-away', the frequency-table key"""
        return self.full_time_score

    @property
    def total_goals(self) -> int:
        return self.full_time_home_goals + self.full_time_away_goals

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.match_id,
            "home_team": self.home_team,
            "away_team": self.away_team,
            "half_time_home_goals": self.half_time_home_goals,
            "half_time_away_goals": self.half_time_away_goals,
            "full_time_home_goals": self.full_time_home_goals,
            "full_time_away_goals": self.full_time_away_goals,
            "half_time_score": self.half_time_score,
            "full_time_score": self.full_time_score,
            "result": self.result,
            "btts": self.btts,
            "comeback": self.comeback,
            "date": self.date.isoformat() if self.date else None,
            "league": self.league,
            "season": self.season,
        }
