from typing import Any, Dict, Iterable, List, Mapping, Optional, Set
from datetime import datetime, timezone
import logging
import numbers

import pandas as pd

from winmix.contracts.errors import MalformedRow
from winmix.contracts.match import Match
from winmix.contracts.match_query import IngestReport

logger = logging.getLogger(__name__)

# Preferred first: kickoff time, then the row's insert time
DATE_COLUMN_CANDIDATES = (
    "match_time",
    "date",
    "created_at",
)


def parse_utc_datetime(value: Any) -> datetime | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    if isinstance(value, (int, float)) and not isinstance(value, bool):
        if pd.isna(value):
            return None
        number = float(value)
        unit = "ms" if abs(number) >= 1e12 else "s"
        parsed = pd.to_datetime(number, unit=unit, utc=True, errors="coerce")
    else:
        text = str(value).strip()
        if not text:
            return None
        parsed = pd.to_datetime(text, utc=True, errors="coerce")

    if pd.isna(parsed):
        return None
    return parsed.to_pydatetime()


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


class MatchBuilder:
    """
    Builds Match objects from raw data-source rows.
    This is the validated ingestion boundary: anything that does not conform
    is rejected with MalformedRow, never coerced.
    """
    def __init__(self):
        # Every row seen by this builder, across batches
        self.rows_seen = 0
        # Ids made up for rows that arrived without one
        self.generated_ids: Set[str] = set()

    @staticmethod
    def _goal_count(row: Mapping[str, Any], column: str, required: bool) -> int:
        value = row.get(column)
        if _is_missing(value):
            if required:
                raise MalformedRow(f"missing required field '{column}'")
            # Half-time data is optional; absent means 0-0
            return 0

        if isinstance(value, bool):
            raise MalformedRow(f"'{column}' is not numeric: {value!r}")

        if isinstance(value, str):
            text = value.strip()
            try:
                number = int(text)
            except ValueError:
                raise MalformedRow(f"'{column}' is not numeric: {value!r}")
        elif isinstance(value, numbers.Integral):
            number = int(value)
        elif isinstance(value, numbers.Real):
            # pandas reads integer columns holding NaN as float64
            if not float(value).is_integer():
                raise MalformedRow(f"'{column}' is not a whole number: {value!r}")
            number = int(value)
        else:
            raise MalformedRow(f"'{column}' is not numeric: {value!r}")

        if number < 0:
            raise MalformedRow(f"'{column}' is negative: {number}")
        return number

    @staticmethod
    def _team_name(row: Mapping[str, Any], column: str) -> str:
        value = row.get(column)
        if _is_missing(value):
            raise MalformedRow(f"missing required field '{column}'")
        return " ".join(str(value).split())

    @staticmethod
    def _optional_text(row: Mapping[str, Any], column: str) -> Optional[str]:
        value = row.get(column)
        if _is_missing(value):
            return None
        return str(value).strip()

    @staticmethod
    def _match_date(row: Mapping[str, Any]) -> datetime | None:
        for column in DATE_COLUMN_CANDIDATES:
            value = row.get(column)
            if _is_missing(value):
                continue
            parsed = parse_utc_datetime(value)
            if parsed is None:
                raise MalformedRow(f"'{column}' is not a valid timestamp: {value!r}")
            return parsed
        return None

    def build(self, row: Mapping[str, Any], index: Optional[int] = None) -> Match:
        """
        row: a single raw row. Must contain at least:
        -'home_team', 'away_team', 'full_time_home_goals', 'full_time_away_goals'
        """
        position = self.rows_seen
        self.rows_seen += 1
        try:
            home_team = self._team_name(row, "home_team")
            away_team = self._team_name(row, "away_team")
            ft_home = self._goal_count(row, "full_time_home_goals", required=True)
            ft_away = self._goal_count(row, "full_time_away_goals", required=True)
            ht_home = self._goal_count(row, "half_time_home_goals", required=False)
            ht_away = self._goal_count(row, "half_time_away_goals", required=False)
            match_date = self._match_date(row)
        except MalformedRow as exc:
            raise MalformedRow(exc.reason, index=index, row=row) from None

        raw_id = row.get("id")
        if _is_missing(raw_id):
            match_id = f"row-{position}"
            self.generated_ids.add(match_id)
        elif isinstance(raw_id, float) and raw_id.is_integer():
            match_id = str(int(raw_id))
        else:
            match_id = str(raw_id)

        return Match(
            match_id=match_id,
            home_team=home_team,
            away_team=away_team,
            full_time_home_goals=ft_home,
            full_time_away_goals=ft_away,
            half_time_home_goals=ht_home,
            half_time_away_goals=ht_away,
            date=match_date,
            league=self._optional_text(row, "league"),
            season=self._optional_text(row, "season"),
        )

    def build_many(self, rows: Iterable[Mapping[str, Any]]) -> IngestReport:
        """
        Skip-and-report policy: malformed rows are collected, never coerced.
        """
        matches: List[Match] = []
        skipped: List[MalformedRow] = []
        for index, row in enumerate(rows):
            try:
                matches.append(self.build(row, index=index))
            except MalformedRow as exc:
                logger.warning("Skipping malformed row: %s", exc)
                skipped.append(exc)

        logger.info("Ingested %d matches, skipped %d rows", len(matches), len(skipped))
        return IngestReport(matches=matches, skipped=skipped)

    def build_frame(self, df: pd.DataFrame) -> IngestReport:
        records: List[Dict[str, Any]] = df.to_dict(orient="records")
        return self.build_many(records)
