from datetime import datetime, timezone

import pandas as pd
import pytest

from winmix.builders.match_builder import MatchBuilder, parse_utc_datetime
from winmix.contracts.errors import MalformedRow


def _row(**overrides):
    row = {
        "id": 7,
        "home_team": "Ferencváros",
        "away_team": "Paks",
        "half_time_home_goals": 1,
        "half_time_away_goals": 0,
        "full_time_home_goals": 2,
        "full_time_away_goals": 1,
        "league": "NB I",
        "season": "24/25",
        "match_time": "2024-08-03T18:00:00Z",
    }
    row.update(overrides)
    return row


def test_build_complete_row():
    match = MatchBuilder().build(_row())
    assert match.match_id == "7"
    assert match.scoreline == "2-1"
    assert match.half_time_score == "1-0"
    assert match.result == "H"
    assert match.btts is True
    assert match.comeback is False
    assert match.date == datetime(2024, 8, 3, 18, 0, tzinfo=timezone.utc)
    assert match.league == "NB I"
    assert match.season == "24/25"


def test_missing_half_time_is_read_as_zero():
    match = MatchBuilder().build(_row(half_time_home_goals=None, half_time_away_goals=float("nan")))
    assert match.half_time_score == "0-0"
    assert match.comeback is False


@pytest.mark.parametrize(
    "overrides, fragment",
    [
        ({"full_time_home_goals": None}, "full_time_home_goals"),
        ({"full_time_away_goals": -1}, "negative"),
        ({"full_time_home_goals": "abc"}, "not numeric"),
        ({"full_time_home_goals": True}, "not numeric"),
        ({"full_time_away_goals": 2.5}, "whole number"),
        ({"home_team": "  "}, "home_team"),
        ({"match_time": "not a date"}, "timestamp"),
    ],
)
def test_malformed_rows_are_rejected(overrides, fragment):
    with pytest.raises(MalformedRow) as exc_info:
        MatchBuilder().build(_row(**overrides), index=4)
    assert fragment in exc_info.value.reason
    assert exc_info.value.index == 4


def test_numeric_strings_and_integral_floats_are_accepted():
    match = MatchBuilder().build(_row(full_time_home_goals="3", full_time_away_goals=0.0, id=12.0))
    assert match.scoreline == "3-0"
    assert match.match_id == "12"


def test_team_names_are_whitespace_normalised():
    match = MatchBuilder().build(_row(home_team="  Real   Madrid "))
    assert match.home_team == "Real Madrid"


def test_date_columns_are_tried_in_order():
    match = MatchBuilder().build(
        _row(match_time=None, created_at="2024-01-02 10:00:00+01:00")
    )
    assert match.date == datetime(2024, 1, 2, 9, 0, tzinfo=timezone.utc)


def test_missing_date_is_none():
    assert MatchBuilder().build(_row(match_time=None)).date is None


def test_missing_ids_stay_unique_across_batches():
    builder = MatchBuilder()
    first = builder.build_many([_row(id=None)])
    second = builder.build_many([_row(id=None)])
    assert first.matches[0].match_id != second.matches[0].match_id


def test_build_many_skips_and_reports():
    rows = [_row(id=1), _row(id=2, full_time_home_goals="x"), _row(id=3)]
    report = MatchBuilder().build_many(rows)

    assert [m.match_id for m in report.matches] == ["1", "3"]
    assert report.skipped_count == 1
    assert report.skipped[0].index == 1
    assert report.skipped[0].row is rows[1]
    assert "not numeric" in report.reasons()[0]


def test_build_frame_handles_nan_half_time():
    df = pd.DataFrame(
        [
            _row(id=1),
            _row(id=2, half_time_home_goals=None, half_time_away_goals=None),
        ]
    )
    report = MatchBuilder().build_frame(df)

    assert report.skipped_count == 0
    assert [m.match_id for m in report.matches] == ["1", "2"]
    assert report.matches[0].half_time_score == "1-0"
    assert report.matches[1].half_time_score == "0-0"


def test_parse_utc_datetime():
    assert parse_utc_datetime(None) is None
    assert parse_utc_datetime("") is None
    assert parse_utc_datetime("garbage") is None
    naive = datetime(2024, 5, 1, 12, 0)
    assert parse_utc_datetime(naive) == datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
    assert parse_utc_datetime(0) == datetime(1970, 1, 1, tzinfo=timezone.utc)
