from typing import Any, Callable, Optional, Sequence
from dataclasses import dataclass
import csv
import io

from winmix.contracts.errors import EmptyExportSet
from winmix.contracts.match import Match

BOM = "\ufeff"


@dataclass(frozen=True)
class CsvColumn:
    """
    One export column: Match attribute, header label and optional formatter.
    """
    key: str
    label: str
    formatter: Optional[Callable[[Any], Any]] = None

    def value_for(self, match: Match) -> Any:
        value = getattr(match, self.key, None)
        if self.formatter is not None:
            return self.formatter(value)
        return value


def _yes_no(value: bool) -> str:
    return "Igen" if value else "Nem"


def _result_label(value: str) -> str:
    return {"H": "Hazai", "A": "Vendég"}.get(value, "Döntetlen")


def _iso_date(value) -> Optional[str]:
    return value.date().isoformat() if value is not None else None


DEFAULT_MATCH_COLUMNS = (
    CsvColumn("home_team", "Hazai csapat"),
    CsvColumn("away_team", "Vendég csapat"),
    CsvColumn("half_time_score", "Félidő eredmény"),
    CsvColumn("full_time_score", "Végeredmény"),
    CsvColumn("result", "Eredmény", _result_label),
    CsvColumn("btts", "Mindkét csapat gólt szerzett", _yes_no),
    CsvColumn("comeback", "Fordítás", _yes_no),
    CsvColumn("date", "Dátum", _iso_date),
    CsvColumn("league", "Liga"),
    CsvColumn("season", "Szezon"),
)


def to_csv(
    matches: Sequence[Match],
    columns: Sequence[CsvColumn] = DEFAULT_MATCH_COLUMNS,
    include_header: bool = True,
    delimiter: str = ",",
) -> str:
    """
    Serialize matches to CSV text prefixed with a UTF-8 byte-order mark.

    Every field is double-quoted with inner quotes doubled, so a missing value
    renders as "" rather than an empty field. Rows are joined by '\\n'.
    An empty collection gives just the header row.
    """
    buffer = io.StringIO()
    writer = csv.writer(
        buffer,
        delimiter=delimiter,
        quoting=csv.QUOTE_ALL,
        lineterminator="\n",
    )
    if include_header:
        writer.writerow([col.label for col in columns])
    for match in matches:
        writer.writerow(["" if v is None else v for v in (col.value_for(match) for col in columns)])

    # No trailing newline after the last row
    return BOM + buffer.getvalue().removesuffix("\n")


def export_matches(
    matches: Sequence[Match],
    columns: Sequence[CsvColumn] = DEFAULT_MATCH_COLUMNS,
) -> str:
    """
    Caller-level guard: refuses to export an empty selection.
    """
    if len(matches) == 0:
        raise EmptyExportSet("Nincs adat az exportáláshoz")
    return to_csv(matches, columns)
