import pytest

from winmix.contracts.match import Match


def _make_match(
    match_id="1",
    home_team="Ferencváros",
    away_team="Újpest",
    ft="1-0",
    ht="0-0",
    date=None,
    league="NB I",
    season="24/25",
):
    ft_home, ft_away = (int(n) for n in ft.split("-"))
    ht_home, ht_away = (int(n) for n in ht.split("-"))
    return Match(
        match_id=match_id,
        home_team=home_team,
        away_team=away_team,
        full_time_home_goals=ft_home,
        full_time_away_goals=ft_away,
        half_time_home_goals=ht_home,
        half_time_away_goals=ht_away,
        date=date,
        league=league,
        season=season,
    )


@pytest.fixture
def make_match():
    return _make_match


@pytest.fixture
def raw_rows():
    return [
        {
            "id": 1,
            "home_team": "Arsenal",
            "away_team": "Chelsea",
            "half_time_home_goals": 1,
            "half_time_away_goals": 0,
            "full_time_home_goals": 2,
            "full_time_away_goals": 1,
            "league": "Premier League",
            "match_time": "2024-08-03T18:00:00Z",
        },
        {
            "id": 2,
            "home_team": "Liverpool",
            "away_team": "ManCity",
            "half_time_home_goals": 0,
            "half_time_away_goals": 0,
            "full_time_home_goals": 1,
            "full_time_away_goals": 2,
            "league": "Premier League",
            "match_time": "2024-08-02T18:00:00Z",
        },
        {
            "id": 3,
            "home_team": "Paks",
            "away_team": "Ferencváros",
            "half_time_home_goals": 1,
            "half_time_away_goals": 1,
            "full_time_home_goals": 1,
            "full_time_away_goals": 1,
            "league": "NB I",
            "match_time": "2024-08-01T18:00:00Z",
        },
    ]
