from abc import ABC, abstractmethod
from typing import Any, Iterable, List, Mapping, Optional

import pandas as pd

from winmix.contracts.match import Match
from winmix.contracts.match_query import IngestReport, MatchPage, MatchQuery


class MatchStoreContract(ABC):
    """
    In-memory match collection.
    Owns derived matches and executes match queries.
    """

    @abstractmethod
    def ingest(self, rows: Iterable[Mapping[str, Any]]) -> IngestReport:
        """
        Derives raw rows into matches and appends them.
        Malformed rows are skipped and reported.
        """
        pass

    @abstractmethod
    def query(self, request: MatchQuery) -> MatchPage:
        """
        Executes a match query and returns the requested page
        """
        pass

    @abstractmethod
    def add(self, match: Match) -> None:
        pass

    @abstractmethod
    def replace(self, match: Match) -> None:
        """
        Whole-object replace by match_id
        """
        pass

    @abstractmethod
    def delete(self, match_id: str) -> None:
        pass

    @abstractmethod
    def get(self, match_id: str) -> Optional[Match]:
        pass

    @abstractmethod
    def matches(self) -> List[Match]:
        """
        All stored matches in source order
        """
        pass

    @abstractmethod
    def materialize(self, matches: Optional[Iterable[Match]] = None) -> pd.DataFrame:
        """
        Builds a tabular view of the given (or all) matches
        """
        pass
