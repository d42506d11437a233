from typing import Any, Iterable, List, Mapping, Optional, Sequence
import logging

import pandas as pd

from winmix.builders.match_builder import MatchBuilder
from winmix.contracts.errors import InvalidFilterSpec, MalformedRow
from winmix.contracts.filter_spec import FilterSpec, TeamMatchMode
from winmix.contracts.match import Match
from winmix.contracts.match_query import IngestReport, MatchPage, MatchQuery, PageRequest
from winmix.contracts.match_store_contract import MatchStoreContract
from winmix.contracts.sort_config import SortConfig
from winmix.filters.filters import filter_matches
from winmix.metrics.aggregator import aggregate
from winmix.sorting.collation import collation_key
from winmix.sorting.comparator import sort_matches

logger = logging.getLogger(__name__)


def run_query(
    collection: Sequence[Match],
    request: MatchQuery,
    skipped: Sequence[MalformedRow] = (),
) -> MatchPage:
    """
    Filter -> statistics over the full filtered set -> sort -> slice.

    Holds no state between calls and never mutates collection, so the same
    request over the same matches always gives the same page.
    """
    try:
        request.validate_self()
    except InvalidFilterSpec as e:
        logger.warning("Rejected match query %s: %s", request.to_dict(), e)
        raise

    filtered = filter_matches(collection, request.filter_spec, request.team_match)
    # Statistics describe every match the filter selects, not just this page
    statistics = aggregate(filtered)
    ordered = sort_matches(filtered, request.sort)
    items = ordered[request.page.start:request.page.stop]

    return MatchPage(
        items=items,
        total_count=len(filtered),
        statistics=statistics,
        page=request.page,
        skipped=tuple(skipped),
    )


def query(
    source: Iterable[Mapping[str, Any]],
    filter_spec: Optional[FilterSpec] = None,
    sort: Optional[SortConfig] = None,
    page: Optional[PageRequest] = None,
    team_match: TeamMatchMode = 'substring',
) -> MatchPage:
    """
    Runs a full query over raw rows: derive, filter, aggregate, sort, page.
    Malformed rows are skipped and reported on the returned page.
    """
    request = MatchQuery(
        filter_spec=filter_spec or FilterSpec(),
        sort=sort or SortConfig(),
        page=page or PageRequest(),
        team_match=team_match,
    )
    # Reject a bad request before doing any derivation work
    request.validate_self()

    report = MatchBuilder().build_many(source)
    return run_query(report.matches, request, skipped=report.skipped)


class MatchStore(MatchStoreContract):
    def __init__(self):
        self._matches: dict[str, Match] = {}
        self._builder = MatchBuilder()
        self.skipped: List[MalformedRow] = []

    def ingest(self, rows: Iterable[Mapping[str, Any]]) -> IngestReport:
        report = self._builder.build_many(rows)
        accepted: List[Match] = []
        skipped: List[MalformedRow] = list(report.skipped)
        for match in report.matches:
            if match.match_id in self._matches:
                if match.match_id in self._builder.generated_ids:
                    # A made-up id never replaces another row
                    exc = MalformedRow(f"id '{match.match_id}' collides with a generated row id")
                    logger.warning("Skipping row: %s", exc)
                    skipped.append(exc)
                    continue
                logger.warning("Duplicate match id %s, keeping the latest row", match.match_id)
            self._matches[match.match_id] = match
            accepted.append(match)
        self.skipped.extend(skipped)
        return IngestReport(matches=accepted, skipped=skipped)

    def ingest_frame(self, df: pd.DataFrame) -> IngestReport:
        return self.ingest(df.to_dict(orient="records"))

    def query(self, request: MatchQuery) -> MatchPage:
        return run_query(self.matches(), request)

    def select(self, request: MatchQuery) -> List[Match]:
        """
        The full filtered and sorted set, ignoring pagination.
        """
        request.validate_self()
        filtered = filter_matches(self._matches.values(), request.filter_spec, request.team_match)
        return sort_matches(filtered, request.sort)

    def add(self, match: Match) -> None:
        if match.match_id in self._matches:
            raise ValueError(f"Match {match.match_id} already exists")
        self._matches[match.match_id] = match

    def replace(self, match: Match) -> None:
        if match.match_id not in self._matches:
            raise KeyError(f"Match {match.match_id} not found")
        # Plain dict assignment keeps the match in its original position
        self._matches[match.match_id] = match

    def delete(self, match_id: str) -> None:
        match_id = str(match_id)
        if match_id not in self._matches:
            raise KeyError(f"Match {match_id} not found")
        del self._matches[match_id]

    def get(self, match_id: str) -> Optional[Match]:
        return self._matches.get(str(match_id))

    def matches(self) -> List[Match]:
        return list(self._matches.values())

    def teams(self) -> List[str]:
        names = set()
        for m in self._matches.values():
            names.add(m.home_team)
            names.add(m.away_team)
        return sorted(names, key=collation_key)

    def leagues(self) -> List[str]:
        names = {m.league for m in self._matches.values() if m.league}
        return sorted(names, key=collation_key)

    def __len__(self) -> int:
        return len(self._matches)

    def materialize(self, matches: Optional[Iterable[Match]] = None) -> pd.DataFrame:
        rows = [m.to_dict() for m in (self.matches() if matches is None else matches)]
        return pd.DataFrame(
            rows,
            columns=[
                "id",
                "home_team",
                "away_team",
                "half_time_score",
                "full_time_score",
                "result",
                "btts",
                "comeback",
                "date",
                "league",
                "season",
            ],
        )
