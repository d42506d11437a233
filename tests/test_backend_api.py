import pytest

from winmix.api.rate_limit import FixedWindowRateLimiter
from winmix.backend_api import build_store, create_app
from winmix.store.match_store import MatchStore


class _FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def store(raw_rows):
    store = MatchStore()
    store.ingest(raw_rows)
    return store


def _client(store, limit=1000, write_limit=1000, trust_proxy=False):
    clock = _FakeClock()
    app = create_app(
        store=store,
        rate_limiter=FixedWindowRateLimiter(limit=limit, interval_seconds=60, clock=clock),
        write_rate_limiter=FixedWindowRateLimiter(limit=write_limit, interval_seconds=60, clock=clock),
        trust_proxy=trust_proxy,
    )
    app.config["TESTING"] = True
    return app.test_client()


@pytest.fixture
def client(store):
    return _client(store)


def _new_match(**overrides):
    payload = {
        "home_team": "Vasas",
        "away_team": "MTK",
        "league": "NB II",
        "full_time_home_goals": 1,
        "full_time_away_goals": 2,
        "half_time_home_goals": 1,
        "half_time_away_goals": 0,
        "date": "2024-09-01T15:00:00Z",
    }
    payload.update(overrides)
    return payload


def test_health(client):
    resp = client.get("/api/health")
    assert resp.status_code == 200
    assert resp.get_json() == {"status": "ok", "matches": 3}


def test_list_matches(client):
    resp = client.get("/api/matches?btts=true")
    assert resp.status_code == 200

    body = resp.get_json()
    assert [m["home_team"] for m in body["data"]] == ["Arsenal", "Liverpool", "Paks"]
    assert body["pagination"] == {"page": 1, "limit": 20, "total": 3, "total_pages": 1}
    assert body["statistics"]["btts_count"] == 3
    assert body["statistics"]["comeback_count"] == 0
    assert resp.headers["X-RateLimit-Limit"] == "1000"
    assert resp.headers["X-RateLimit-Remaining"] == "999"
    assert resp.headers["Access-Control-Allow-Origin"]


def test_list_matches_pagination_and_sort(client):
    resp = client.get("/api/matches?page=2&limit=2&sort=homeTeam&direction=asc")
    body = resp.get_json()
    assert [m["home_team"] for m in body["data"]] == ["Paks"]
    assert body["pagination"]["page"] == 2
    assert body["pagination"]["total"] == 3
    assert body["pagination"]["total_pages"] == 2
    # Statistics cover the full filtered set, not the page
    assert body["statistics"]["total_matches"] == 3


def test_team_substring_filter(client):
    body = client.get("/api/matches?away_team=ferencvaros").get_json()
    assert [m["id"] for m in body["data"]] == ["3"]

    body = client.get("/api/matches?away_team=ferencvaros&team_match=exact").get_json()
    assert body["data"] == []


@pytest.mark.parametrize(
    "query",
    ["limit=0", "limit=101", "page=0", "btts=yes", "direction=sideways", "date_from=2024-09-01&date_to=2024-08-01"],
)
def test_invalid_query_is_400(client, query):
    resp = client.get(f"/api/matches?{query}")
    assert resp.status_code == 400
    body = resp.get_json()
    assert body["error"] == "Invalid query parameters"
    assert body["details"]


def test_rate_limit_returns_429(store):
    client = _client(store, limit=1)
    assert client.get("/api/matches").status_code == 200

    resp = client.get("/api/matches")
    assert resp.status_code == 429
    assert resp.headers["Retry-After"] == "60"
    assert resp.headers["X-RateLimit-Remaining"] == "0"


def test_spoofed_forwarded_header_does_not_reset_limit(store):
    client = _client(store, limit=1)
    statuses = [
        client.get("/api/matches", headers={"X-Forwarded-For": f"1.1.1.{i}"}).status_code
        for i in range(5)
    ]
    assert statuses == [200, 429, 429, 429, 429]


def test_forwarded_clients_are_limited_separately_behind_trusted_proxy(store):
    client = _client(store, limit=1, trust_proxy=True)
    assert client.get("/api/matches", headers={"X-Forwarded-For": "10.0.0.1"}).status_code == 200
    assert client.get("/api/matches", headers={"X-Forwarded-For": "10.0.0.2"}).status_code == 200
    assert client.get("/api/matches", headers={"X-Forwarded-For": "10.0.0.1"}).status_code == 429


def test_trust_proxy_from_environment(store, monkeypatch):
    monkeypatch.setenv("WINMIX_TRUST_PROXY", "true")
    client = _client(store, limit=1, trust_proxy=None)
    assert client.get("/api/matches", headers={"X-Forwarded-For": "10.0.0.1"}).status_code == 200
    assert client.get("/api/matches", headers={"X-Forwarded-For": "10.0.0.2"}).status_code == 200


def test_export_csv(client):
    resp = client.get("/api/matches/export?league=Premier%20League&sort=home_team&direction=desc")
    assert resp.status_code == 200
    assert resp.mimetype == "text/csv"
    assert "attachment" in resp.headers["Content-Disposition"]
    assert "winmix_merkozesek_" in resp.headers["Content-Disposition"]

    text = resp.get_data(as_text=True)
    assert text.startswith("\ufeff")
    lines = text.split("\n")
    assert len(lines) == 3
    assert lines[1].startswith('"Liverpool","ManCity"')


def test_export_empty_selection_is_404(client):
    resp = client.get("/api/matches/export?league=Serie%20A")
    assert resp.status_code == 404
    assert resp.get_json()["error"] == "Nincs adat az exportáláshoz"


def test_get_match(client):
    resp = client.get("/api/matches/1")
    assert resp.status_code == 200
    assert resp.get_json()["data"]["full_time_score"] == "2-1"

    assert client.get("/api/matches/nope").status_code == 404


def test_create_match(client, store):
    resp = client.post("/api/matches", json=_new_match())
    assert resp.status_code == 201

    data = resp.get_json()["data"]
    assert data["result"] == "A"
    assert data["comeback"] is True
    assert store.get(data["id"]) is not None
    assert len(store) == 4


def test_create_match_validation(client, store):
    resp = client.post("/api/matches", json=_new_match(away_team="Vasas", full_time_home_goals=99))
    assert resp.status_code == 400
    body = resp.get_json()
    assert body["error"] == "Invalid request data"
    assert len(body["details"]) == 2
    assert len(store) == 3

    assert client.post("/api/matches", data="not json").status_code == 400


def test_write_limit_is_separate(store):
    client = _client(store, limit=1000, write_limit=1)
    assert client.post("/api/matches", json=_new_match()).status_code == 201
    assert client.post("/api/matches", json=_new_match()).status_code == 429
    assert client.get("/api/matches").status_code == 200


def test_replace_match(client, store):
    resp = client.put("/api/matches/1", json=_new_match(home_team="Arsenal", away_team="Chelsea"))
    assert resp.status_code == 200
    assert store.get("1").scoreline == "1-2"

    assert client.put("/api/matches/zzz", json=_new_match()).status_code == 404


def test_delete_match(client, store):
    assert client.delete("/api/matches/2").status_code == 204
    assert store.get("2") is None
    assert client.delete("/api/matches/2").status_code == 404


def test_statistics(client):
    body = client.get("/api/statistics?league=NB%20I").get_json()
    assert body["total"] == 1
    assert body["statistics"]["draws"] == 1


def test_teams_and_leagues(client):
    assert client.get("/api/teams").get_json()["teams"] == [
        "Arsenal",
        "Chelsea",
        "Ferencváros",
        "Liverpool",
        "ManCity",
        "Paks",
    ]
    assert client.get("/api/leagues").get_json()["leagues"] == ["NB I", "Premier League"]


def test_analytics(client):
    resp = client.post("/api/analytics", json={"name": "filter_changed", "properties": {"btts": True}})
    assert resp.status_code == 200
    assert resp.get_json() == {"success": True}

    resp = client.post("/api/analytics", json={"properties": {}})
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Invalid event data"


def test_preflight(client):
    resp = client.options("/api/matches")
    assert resp.status_code == 204
    assert "OPTIONS" in resp.headers["Access-Control-Allow-Methods"]


def test_unknown_route_is_404(client):
    assert client.get("/api/nothing").status_code == 404


def test_build_store_orders_most_recent_first(tmp_path):
    path = tmp_path / "matches.csv"
    path.write_text(
        "id,home_team,away_team,full_time_home_goals,full_time_away_goals,match_time\n"
        "1,Paks,Vasas,1,0,2024-08-01T18:00:00Z\n"
        "2,Újpest,MTK,2,2,\n"
        "3,Debrecen,Kisvárda,0,1,2024-08-09T18:00:00Z\n"
        "4,Győr,,1,1,2024-08-05T18:00:00Z\n",
        encoding="utf-8",
    )
    store = build_store(path)

    assert [m.match_id for m in store.matches()] == ["3", "1", "2"]
    assert len(store.skipped) == 1


def test_build_store_falls_back_to_created_at_per_row(tmp_path):
    path = tmp_path / "matches.csv"
    path.write_text(
        "id,home_team,away_team,full_time_home_goals,full_time_away_goals,match_time,created_at\n"
        "1,Paks,Vasas,1,0,,2024-09-01T10:00:00Z\n"
        "2,Újpest,MTK,2,2,2024-08-01T18:00:00Z,2024-07-20T10:00:00Z\n"
        "3,Debrecen,Kisvárda,0,1,2024-08-15T18:00:00Z,\n",
        encoding="utf-8",
    )
    store = build_store(path)

    assert [(m.match_id, m.date.date().isoformat()) for m in store.matches()] == [
        ("1", "2024-09-01"),
        ("3", "2024-08-15"),
        ("2", "2024-08-01"),
    ]


def test_build_store_keeps_literal_na_names(tmp_path):
    path = tmp_path / "matches.csv"
    path.write_text(
        "id,home_team,away_team,full_time_home_goals,full_time_away_goals,league\n"
        "1,NA,None,1,0,null\n"
        "2,Paks,,1,1,NB I\n",
        encoding="utf-8",
    )
    store = build_store(path)

    assert len(store) == 1
    match = store.get("1")
    assert (match.home_team, match.away_team, match.league) == ("NA", "None", "null")
    assert len(store.skipped) == 1


def test_build_store_missing_file(tmp_path):
    store = build_store(tmp_path / "missing.csv")
    assert len(store) == 0
