from abc import ABC, abstractmethod
from typing import List, Sequence, Type

from winmix.contracts.errors import InvalidFilterSpec
from winmix.contracts.filter_spec import FilterSpec, TeamMatchMode, TEAM_MATCH_MODES
from winmix.contracts.match import Match
from winmix.sorting.collation import primary_fold


class BaseFilter(ABC):
    """
    Base class for all filters.
    Each filter owns one FilterSpec field and decides inclusion for it.
    """

    # FilterSpec field this filter reads
    key: str

    # human readable name (UI-friendly)
    display_name: str

    @classmethod
    def applies(cls, spec: FilterSpec) -> bool:
        """
        Whether the spec constrains this field at all.
        None (and an empty text box) impose no constraint.
        """
        value = getattr(spec, cls.key)
        if isinstance(value, str):
            return bool(value.strip())
        return value is not None

    @classmethod
    @abstractmethod
    def test(cls, match: Match, spec: FilterSpec, mode: TeamMatchMode) -> bool:
        """
        Returns True when the match satisfies this field of the spec
        """
        pass


def _team_matches(name: str, wanted: str, mode: TeamMatchMode) -> bool:
    if mode == 'exact':
        return name == wanted
    # Pure in-memory comparison, nothing here is interpreted as a pattern
    return primary_fold(wanted.strip()) in primary_fold(name)


class HomeTeamFilter(BaseFilter):
    key = "home_team"
    display_name = "Hazai csapat"

    @classmethod
    def test(cls, match: Match, spec: FilterSpec, mode: TeamMatchMode) -> bool:
        return _team_matches(match.home_team, spec.home_team, mode)


class AwayTeamFilter(BaseFilter):
    key = "away_team"
    display_name = "Vendég csapat"

    @classmethod
    def test(cls, match: Match, spec: FilterSpec, mode: TeamMatchMode) -> bool:
        return _team_matches(match.away_team, spec.away_team, mode)


class LeagueFilter(BaseFilter):
    key = "league"
    display_name = "Liga"

    @classmethod
    def test(cls, match: Match, spec: FilterSpec, mode: TeamMatchMode) -> bool:
        # League is always an exact match, whatever the team mode
        return (match.league or "") == spec.league


class BttsFilter(BaseFilter):
    key = "btts"
    display_name = "Mindkét csapat gólt szerzett"

    @classmethod
    def test(cls, match: Match, spec: FilterSpec, mode: TeamMatchMode) -> bool:
        return match.btts == spec.btts


class ComebackFilter(BaseFilter):
    key = "comeback"
    display_name = "Fordítás"

    @classmethod
    def test(cls, match: Match, spec: FilterSpec, mode: TeamMatchMode) -> bool:
        return match.comeback == spec.comeback


class DateRangeFilter(BaseFilter):
    key = "date_range"
    display_name = "Dátum"

    @classmethod
    def test(cls, match: Match, spec: FilterSpec, mode: TeamMatchMode) -> bool:
        return spec.date_range.contains(match.date)


ALL_FILTERS: List[Type[BaseFilter]] = [
    HomeTeamFilter,
    AwayTeamFilter,
    LeagueFilter,
    BttsFilter,
    ComebackFilter,
    DateRangeFilter,
]


def matches(match: Match, spec: FilterSpec, mode: TeamMatchMode = 'substring') -> bool:
    """
    Conjunction of every field the spec sets.
    An empty spec excludes nothing.
    """
    if mode not in TEAM_MATCH_MODES:
        raise InvalidFilterSpec(f"Team match mode must be one of {TEAM_MATCH_MODES}, got {mode!r}")

    for filter_cls in ALL_FILTERS:
        if filter_cls.applies(spec) and not filter_cls.test(match, spec, mode):
            return False
    return True


def filter_matches(
    collection: Sequence[Match],
    spec: FilterSpec,
    mode: TeamMatchMode = 'substring',
) -> List[Match]:
    """
    Returns a new list with the matches satisfying spec, in incoming order.
    """
    try:
        spec.validate()
    except InvalidFilterSpec as e:
        raise InvalidFilterSpec(f"Invalid filter spec: {spec} -> {e}")

    if spec.is_empty():
        return list(collection)

    return [m for m in collection if matches(m, spec, mode)]
