from typing import Dict, Literal
from dataclasses import dataclass

from winmix.contracts.errors import InvalidFilterSpec

SortDirection = Literal['asc', 'desc', 'none']
SORT_DIRECTIONS = ('asc', 'desc', 'none')

SORT_KEYS = (
    "home_team",
    "away_team",
    "half_time_score",
    "full_time_score",
    "result",
    "btts",
    "comeback",
    "date",
    "league",
)

# camelCase names used by the presentation layer
SORT_KEY_ALIASES: Dict[str, str] = {
    "homeTeam": "home_team",
    "awayTeam": "away_team",
    "halfTimeScore": "half_time_score",
    "fullTimeScore": "full_time_score",
}


@dataclass(frozen=True)
class SortConfig:
    """
    Key + direction describing the desired ordering.
    An unknown key is kept as-is and sorts as a no-op.
    """
    key: str = ""
    direction: SortDirection = 'none'

    def __post_init__(self):
        object.__setattr__(self, "key", SORT_KEY_ALIASES.get(self.key, self.key))

    def validate(self) -> None:
        if self.direction not in SORT_DIRECTIONS:
            raise InvalidFilterSpec(
                f"Sort direction must be one of {SORT_DIRECTIONS}, got {self.direction!r}"
            )

    @property
    def is_active(self) -> bool:
        return bool(self.key) and self.direction != 'none'

    def to_dict(self) -> dict:
        return {"key": self.key, "direction": self.direction}

    @classmethod
    def from_dict(cls, payload: dict) -> "SortConfig":
        return cls(
            key=payload.get("key") or "",
            direction=payload.get("direction") or 'none',
        )
