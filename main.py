"""
main.py  –  WinMix  –  Match browser from the command line
==========================================================

Loads the raw match CSV, applies the same filter / sort / page pipeline the
HTTP API uses, prints the statistics and one page of matches, and optionally
writes the filtered set to a CSV export.

Usage
-----
    python main.py                                   # everything, first page
    python main.py --home-team ferenc --btts true    # substring team filter
    python main.py --sort full_time_score --direction desc --page 2
    python main.py --comeback true --export comebacks.csv
    python main.py --serve --port 5000               # run the HTTP API
"""

import argparse
import logging
import os
import sys
from pathlib import Path

from winmix.backend_api import DEFAULT_DATA_PATH, build_store, create_app
from winmix.api.validation import parse_match_query
from winmix.contracts.errors import EmptyExportSet, WinMixError
from winmix.export.csv_export import export_matches
from winmix.metrics.aggregator import result_split


def _parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Browse, filter and export match records.")
    parser.add_argument("--data", type=Path, default=Path(os.environ.get("WINMIX_DATA_PATH", DEFAULT_DATA_PATH)))
    parser.add_argument("--home-team")
    parser.add_argument("--away-team")
    parser.add_argument("--league")
    parser.add_argument("--btts", choices=["true", "false"])
    parser.add_argument("--comeback", choices=["true", "false"])
    parser.add_argument("--date-from")
    parser.add_argument("--date-to")
    parser.add_argument("--team-match", choices=["exact", "substring"], default="substring")
    parser.add_argument("--sort", default="")
    parser.add_argument("--direction", choices=["asc", "desc", "none"], default="none")
    parser.add_argument("--page", type=int, default=1, help="1-based page number")
    parser.add_argument("--limit", type=int, default=20)
    parser.add_argument("--export", type=Path, help="write the whole filtered set to this CSV file")
    parser.add_argument("--serve", action="store_true", help="run the HTTP API instead")
    parser.add_argument("--port", type=int, default=5000)
    parser.add_argument("--log-level", default=os.environ.get("WINMIX_LOG_LEVEL", "INFO"))
    return parser.parse_args(argv)


def _query_args(args: argparse.Namespace) -> dict:
    return {
        "home_team": args.home_team,
        "away_team": args.away_team,
        "league": args.league,
        "btts": args.btts,
        "comeback": args.comeback,
        "date_from": args.date_from,
        "date_to": args.date_to,
        "team_match": args.team_match,
        "sort": args.sort,
        "direction": args.direction,
        "page": args.page,
        "limit": args.limit,
    }


def main(argv=None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    store = build_store(args.data)

    if args.serve:
        app = create_app(store=store)
        app.run(host="127.0.0.1", port=args.port)
        return 0

    print("=" * 60)
    print("  WinMix  –  Match Browser")
    print("=" * 60)
    print(f"\n[*] Loaded {len(store)} matches from {args.data}")
    if store.skipped:
        print(f"[!!] Skipped {len(store.skipped)} malformed rows")

    try:
        match_query = parse_match_query(_query_args(args))
        page = store.query(match_query)
    except WinMixError as exc:
        details = getattr(exc, "details", None) or [str(exc)]
        print(f"[!!] {exc}: {'; '.join(details)}")
        return 2

    stats = page.statistics
    split = result_split(stats)

    print("\n" + "=" * 60)
    print("  STATISTICS")
    print("=" * 60)
    print(f"  Matches         : {stats.total_matches}")
    print(f"  Home / Draw / Away : {split['home']} / {split['draw']} / {split['away']}")
    print(f"  BTTS            : {stats.btts_count} ({stats.btts_percentage:.1f}%)")
    print(f"  Comebacks       : {stats.comeback_count} ({stats.comeback_percentage:.1f}%)")
    print(f"  Avg goals H / A : {stats.average_home_goals:.2f} / {stats.average_away_goals:.2f}")
    if stats.scoreline_frequency:
        frequent = ", ".join(f"{score} ({count}x)" for score, count in stats.scoreline_frequency)
        print(f"  Frequent scores : {frequent}")

    print("\n" + "=" * 60)
    print(f"  MATCHES  (page {page.page.number + 1} of {max(page.total_pages, 1)})")
    print("=" * 60)
    if page.items:
        print(store.materialize(page.items).to_string(index=False))
    else:
        print("  No matches on this page.")

    if args.export:
        try:
            body = export_matches(store.select(match_query))
        except EmptyExportSet as exc:
            print(f"\n[!!] {exc}")
            return 1
        # BOM is already part of the text
        args.export.write_text(body, encoding="utf-8")
        print(f"\n[✓] Export saved → {args.export}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
