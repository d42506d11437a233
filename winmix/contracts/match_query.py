from typing import Any, Dict, List, Optional, Sequence
from dataclasses import dataclass, field
import math

from winmix.contracts.errors import InvalidFilterSpec, MalformedRow
from winmix.contracts.filter_spec import FilterSpec, TeamMatchMode, TEAM_MATCH_MODES
from winmix.contracts.match import Match
from winmix.contracts.sort_config import SortConfig
from winmix.contracts.statistics import Statistics


@dataclass(frozen=True)
class PageRequest:
    """
    Zero-based page number and page size.
    """
    number: int = 0
    size: int = 20

    def validate(self) -> None:
        if isinstance(self.size, bool) or not isinstance(self.size, int) or self.size <= 0:
            raise InvalidFilterSpec(f"Page size must be a positive integer, got {self.size!r}")
        if isinstance(self.number, bool) or not isinstance(self.number, int) or self.number < 0:
            raise InvalidFilterSpec(f"Page number must be a non-negative integer, got {self.number!r}")

    @property
    def start(self) -> int:
        return self.number * self.size

    @property
    def stop(self) -> int:
        return (self.number + 1) * self.size


@dataclass(frozen=True)
class MatchQuery():
    filter_spec: FilterSpec = field(default_factory=FilterSpec)
    sort: SortConfig = field(default_factory=SortConfig)
    page: PageRequest = field(default_factory=PageRequest)
    team_match: TeamMatchMode = 'substring'

    def validate_self(self) -> None:
        """
        Validate every part of the request before it reaches the engine
        """
        if self.team_match not in TEAM_MATCH_MODES:
            raise InvalidFilterSpec(
                f"Team match mode must be one of {TEAM_MATCH_MODES}, got {self.team_match!r}"
            )
        self.filter_spec.validate()
        self.sort.validate()
        self.page.validate()

    def to_dict(self) -> dict:
        return {
            "filter": self.filter_spec.to_dict(),
            "sort": self.sort.to_dict(),
            "page": {"number": self.page.number, "size": self.page.size},
            "team_match": self.team_match,
        }

    @classmethod
    def from_dict(cls, payload: dict) -> "MatchQuery":
        page = payload.get("page") or {}
        return cls(
            filter_spec=FilterSpec.from_dict(payload.get("filter") or {}),
            sort=SortConfig.from_dict(payload.get("sort") or {}),
            page=PageRequest(
                number=page.get("number", 0),
                size=page.get("size", 20),
            ),
            team_match=payload.get("team_match", 'substring'),
        )


@dataclass(frozen=True)
class MatchPage:
    """
    One page of the filtered, sorted set.
    total_count and statistics always describe the full filtered set.
    """
    items: Sequence[Match]
    total_count: int
    statistics: Statistics
    page: PageRequest
    skipped: Sequence[MalformedRow] = ()

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_count / self.page.size) if self.page.size > 0 else 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "items": [m.to_dict() for m in self.items],
            "total_count": self.total_count,
            "total_pages": self.total_pages,
            "page": {"number": self.page.number, "size": self.page.size},
            "statistics": self.statistics.to_dict(),
            "skipped": len(self.skipped),
        }


@dataclass(frozen=True)
class IngestReport:
    """
    Result of a batch ingestion: accepted matches plus the rows skipped.
    """
    matches: List[Match]
    skipped: List[MalformedRow]

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)

    def reasons(self) -> List[Optional[str]]:
        return [s.reason for s in self.skipped]
