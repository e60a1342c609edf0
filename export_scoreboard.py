#!/usr/bin/env python3
"""
Export the scoreboard to CSV from the command line.
Uses the same filters, ranking and file format as the dashboard download.
"""

import argparse
import sys
from datetime import date
from pathlib import Path

from database import SheetsDocumentStore
from services.errors import PersistenceError
from services.export import export_csv, export_filename
from services.leaderboard import ALL_LEADERS, SORT_KEYS, ViewState, rank_teams
from services.logging_setup import setup_logging
from services.settings import load_settings


def iso_day(value: str) -> str:
    try:
        return date.fromisoformat(value).isoformat()
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid date '{value}', expected YYYY-MM-DD")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Export the marathon scoreboard to CSV")
    parser.add_argument("--search", default="", help="Only teams whose name contains this text")
    parser.add_argument("--leader", default=ALL_LEADERS, help="Only teams with this BV leader")
    parser.add_argument("--sort", choices=SORT_KEYS, default="points", help="Ranking metric")
    parser.add_argument("--date", dest="date_filter", type=iso_day, help="Only books recorded on YYYY-MM-DD")
    parser.add_argument("--output", type=Path, help="Output file (default: marathon-scoreboard-<today>.csv)")
    return parser.parse_args(argv)


def export_scoreboard(store, view: ViewState, output: Path) -> int:
    standings = rank_teams(store.list_teams(), view)
    output.write_text(export_csv(standings), encoding="utf-8")
    print(f"✅ Scoreboard exported: {output} ({len(standings)} teams)")
    return len(standings)


def main(argv=None) -> int:
    args = parse_args(argv)

    settings = load_settings()
    setup_logging(settings.log_level)

    view = ViewState(
        search_term=args.search,
        leader_filter=args.leader,
        sort_key=args.sort,
        date_filter=args.date_filter,
    )
    output = args.output or Path(export_filename())

    try:
        export_scoreboard(SheetsDocumentStore.from_settings(settings), view, output)
    except PersistenceError as e:
        print(f"❌ {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
