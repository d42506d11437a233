from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import pandas as pd
from flask import Flask, Response, jsonify, request
from werkzeug.exceptions import HTTPException
from werkzeug.middleware.proxy_fix import ProxyFix

from winmix.api.rate_limit import FixedWindowRateLimiter, RateLimitResult
from winmix.api.validation import (
    parse_analytics_event,
    parse_match_payload,
    parse_match_query,
)
from winmix.builders.match_builder import DATE_COLUMN_CANDIDATES
from winmix.contracts.errors import EmptyExportSet, InvalidFilterSpec, InvalidRequest
from winmix.export.csv_export import export_matches
from winmix.store.match_store import MatchStore

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parent.parent
DATA_DIR = PROJECT_ROOT / "data" / "raw"
DEFAULT_DATA_PATH = DATA_DIR / "matches.csv"

RATE_LIMIT_INTERVAL_SECONDS = 60
DEFAULT_RATE_LIMIT = 100
DEFAULT_WRITE_RATE_LIMIT = 10


def _safe_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _load_raw_df(path: Path) -> pd.DataFrame:
    """
    Load raw rows, most recent first. The engine treats incoming order as the
    'unsorted' order, so the source is responsible for it.
    """
    if not path.exists():
        logger.warning("Match data file %s not found, starting with an empty store", path)
        return pd.DataFrame()

    # Only empty cells are missing; "NA" or "None" can be a real name
    df = pd.read_csv(path, keep_default_na=False, na_values=[""])

    # Same per-row fallback as MatchBuilder: first date column that has a value
    sort_key = None
    for column in DATE_COLUMN_CANDIDATES:
        if column not in df.columns:
            continue
        parsed = pd.to_datetime(df[column], utc=True, errors="coerce")
        sort_key = parsed if sort_key is None else sort_key.combine_first(parsed)

    if sort_key is not None:
        df = (
            df.assign(_sort_datetime=sort_key)
            .sort_values(by="_sort_datetime", ascending=False, na_position="last", kind="mergesort")
            .drop(columns=["_sort_datetime"])
        )
    return df


def build_store(path: Path | None = None) -> MatchStore:
    store = MatchStore()
    df = _load_raw_df(path or DEFAULT_DATA_PATH)
    if not df.empty:
        report = store.ingest_frame(df)
        if report.skipped_count:
            logger.warning("%d malformed rows skipped while loading %s", report.skipped_count, path)
    return store


def _client_id() -> str:
    # X-Forwarded-For is only honoured through ProxyFix, see create_app()
    return request.remote_addr or "127.0.0.1"


def _rate_limit_headers(result: RateLimitResult) -> dict[str, str]:
    return {
        "X-RateLimit-Limit": str(result.limit),
        "X-RateLimit-Remaining": str(result.remaining),
        "X-RateLimit-Reset": datetime.fromtimestamp(result.reset_at, tz=timezone.utc)
        .isoformat()
        .replace("+00:00", "Z"),
    }


def _too_many_requests(limiter: FixedWindowRateLimiter, result: RateLimitResult, identifier: str):
    logger.warning("Rate limit exceeded for %s", identifier)
    response = jsonify({"error": "Too many requests"})
    response.status_code = 429
    response.headers.update(_rate_limit_headers(result))
    response.headers["Retry-After"] = str(result.retry_after(limiter.now()))
    return response


def _bad_request(exc: Exception):
    details = getattr(exc, "details", None) or [str(exc)]
    logger.warning("Rejected request to %s: %s", request.path, details)
    message = str(exc) if isinstance(exc, InvalidRequest) else "Invalid query parameters"
    return jsonify({"error": message, "details": details}), 400


def create_app(
    store: MatchStore | None = None,
    rate_limiter: FixedWindowRateLimiter | None = None,
    write_rate_limiter: FixedWindowRateLimiter | None = None,
    trust_proxy: bool | None = None,
) -> Flask:
    app = Flask(__name__)

    if trust_proxy is None:
        trust_proxy = os.environ.get("WINMIX_TRUST_PROXY", "").strip().lower() in ("1", "true", "yes")
    if trust_proxy:
        # One reverse proxy in front: remote_addr becomes the address it appended
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1)

    cors_origin = os.environ.get("CORS_ORIGIN", "*")
    if store is None:
        data_path = Path(os.environ.get("WINMIX_DATA_PATH", str(DEFAULT_DATA_PATH)))
        store = build_store(data_path)
    if rate_limiter is None:
        rate_limiter = FixedWindowRateLimiter(
            limit=_safe_int(os.environ.get("WINMIX_RATE_LIMIT"), DEFAULT_RATE_LIMIT),
            interval_seconds=RATE_LIMIT_INTERVAL_SECONDS,
        )
    if write_rate_limiter is None:
        write_rate_limiter = FixedWindowRateLimiter(
            limit=_safe_int(os.environ.get("WINMIX_STRICT_RATE_LIMIT"), DEFAULT_WRITE_RATE_LIMIT),
            interval_seconds=RATE_LIMIT_INTERVAL_SECONDS,
        )

    app.config["MATCH_STORE"] = store

    @app.after_request
    def add_cors_headers(response):
        response.headers["Access-Control-Allow-Origin"] = cors_origin
        response.headers["Access-Control-Allow-Headers"] = "Content-Type"
        response.headers["Access-Control-Allow-Methods"] = "GET,POST,PUT,DELETE,OPTIONS"
        return response

    @app.errorhandler(Exception)
    def handle_unexpected(exc):
        if isinstance(exc, HTTPException):
            return exc
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return jsonify({"error": "Internal server error"}), 500

    @app.route("/api/health", methods=["GET"])
    def health():
        return jsonify({"status": "ok", "matches": len(store)})

    @app.route("/api/matches", methods=["GET", "OPTIONS"])
    def list_matches():
        if request.method == "OPTIONS":
            return ("", 204)

        identifier = _client_id()
        limit_result = rate_limiter.hit(identifier)
        if not limit_result.success:
            return _too_many_requests(rate_limiter, limit_result, identifier)

        try:
            match_query = parse_match_query(request.args)
            page = store.query(match_query)
        except (InvalidRequest, InvalidFilterSpec) as exc:
            return _bad_request(exc)

        response = jsonify(
            {
                "data": [m.to_dict() for m in page.items],
                "pagination": {
                    "page": page.page.number + 1,
                    "limit": page.page.size,
                    "total": page.total_count,
                    "total_pages": page.total_pages,
                },
                "statistics": page.statistics.to_dict(),
            }
        )
        response.headers.update(_rate_limit_headers(limit_result))
        return response

    @app.route("/api/matches", methods=["POST"])
    def create_match():
        identifier = f"post_{_client_id()}"
        limit_result = write_rate_limiter.hit(identifier)
        if not limit_result.success:
            return _too_many_requests(write_rate_limiter, limit_result, identifier)

        try:
            match = parse_match_payload(request.get_json(silent=True))
        except InvalidRequest as exc:
            return _bad_request(exc)

        store.add(match)
        logger.info("Created match %s: %s - %s", match.match_id, match.home_team, match.away_team)
        return jsonify({"data": match.to_dict()}), 201

    @app.route("/api/matches/export", methods=["GET"])
    def export_csv():
        identifier = _client_id()
        limit_result = rate_limiter.hit(identifier)
        if not limit_result.success:
            return _too_many_requests(rate_limiter, limit_result, identifier)

        try:
            match_query = parse_match_query(request.args)
            # The whole filtered set is exported, not one page
            ordered = store.select(match_query)
        except (InvalidRequest, InvalidFilterSpec) as exc:
            return _bad_request(exc)

        try:
            body = export_matches(ordered)
        except EmptyExportSet as exc:
            return jsonify({"error": str(exc)}), 404

        filename = f"winmix_merkozesek_{datetime.now(timezone.utc).date().isoformat()}.csv"
        return Response(
            body,
            mimetype="text/csv",
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )

    @app.route("/api/matches/<match_id>", methods=["GET"])
    def get_match(match_id: str):
        match = store.get(match_id)
        if match is None:
            return jsonify({"error": f"Match {match_id} not found"}), 404
        return jsonify({"data": match.to_dict()})

    @app.route("/api/matches/<match_id>", methods=["PUT"])
    def replace_match(match_id: str):
        identifier = f"post_{_client_id()}"
        limit_result = write_rate_limiter.hit(identifier)
        if not limit_result.success:
            return _too_many_requests(write_rate_limiter, limit_result, identifier)

        if store.get(match_id) is None:
            return jsonify({"error": f"Match {match_id} not found"}), 404
        try:
            match = parse_match_payload(request.get_json(silent=True), match_id=match_id)
        except InvalidRequest as exc:
            return _bad_request(exc)

        store.replace(match)
        return jsonify({"data": match.to_dict()})

    @app.route("/api/matches/<match_id>", methods=["DELETE"])
    def delete_match(match_id: str):
        identifier = f"post_{_client_id()}"
        limit_result = write_rate_limiter.hit(identifier)
        if not limit_result.success:
            return _too_many_requests(write_rate_limiter, limit_result, identifier)

        try:
            store.delete(match_id)
        except KeyError:
            return jsonify({"error": f"Match {match_id} not found"}), 404
        return ("", 204)

    @app.route("/api/statistics", methods=["GET"])
    def get_statistics():
        identifier = _client_id()
        limit_result = rate_limiter.hit(identifier)
        if not limit_result.success:
            return _too_many_requests(rate_limiter, limit_result, identifier)

        try:
            page = store.query(parse_match_query(request.args))
        except (InvalidRequest, InvalidFilterSpec) as exc:
            return _bad_request(exc)

        return jsonify({"statistics": page.statistics.to_dict(), "total": page.total_count})

    @app.route("/api/teams", methods=["GET"])
    def get_teams():
        return jsonify({"teams": store.teams()})

    @app.route("/api/leagues", methods=["GET"])
    def get_leagues():
        return jsonify({"leagues": store.leagues()})

    @app.route("/api/analytics", methods=["POST", "OPTIONS"])
    def track_event():
        if request.method == "OPTIONS":
            return ("", 204)

        identifier = f"analytics_{_client_id()}"
        limit_result = rate_limiter.hit(identifier)
        if not limit_result.success:
            return _too_many_requests(rate_limiter, limit_result, identifier)

        try:
            event = parse_analytics_event(request.get_json(silent=True))
        except InvalidRequest as exc:
            return _bad_request(exc)

        logger.info(
            "Analytics event %s from %s: %s",
            event.name,
            identifier,
            event.to_dict(),
        )
        return jsonify({"success": True})

    return app
