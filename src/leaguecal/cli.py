#!/usr/bin/env python3
"""League calendar generator.

Usage:
    leaguecal [--config leaguecal.yaml] [--db PATH] COMMAND ...

Commands:
    init-db                         Create the database tables
    load FIXTURE                    Load leagues/teams/availability from YAML
    generate LEAGUE START [--save]  Generate a round-robin calendar
    calendar LEAGUE                 Show the stored calendar
    assign LEAGUE MATCH DATE TIME   Manually date a match awaiting assignment
    standings LEAGUE                Show the league table
    clear LEAGUE                    Delete a league's matches and byes

Examples:
    leaguecal load league.yaml
    leaguecal generate spring 2026-11-07            # preview only
    leaguecal generate spring 2026-11-07 --save     # preview and persist
    leaguecal assign spring 3f2a... 2026-11-21 18:00
"""

import argparse
import sqlite3
import sys
from pathlib import Path

from leaguecal.calendar import (
    assign_match_date, clear_calendar, get_calendar, get_classifications,
)
from leaguecal.config import load_fixture, load_settings
from leaguecal.constraints import format_validation_report, validate_calendar
from leaguecal.db import SQLiteStore
from leaguecal.errors import CalendarError
from leaguecal.log import init_logging
from leaguecal.output import format_result, format_standings, format_stored_calendar
from leaguecal.scheduler import generate_calendar, save_calendar
from leaguecal.stats import compute_stats, format_stats_report


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="leaguecal",
        description="League round-robin calendar generator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""\
Exit codes:
  0  Success
  1  Validation, conflict or storage error
""",
    )
    parser.add_argument(
        "--config", default="leaguecal.yaml",
        help="Path to settings YAML (default: leaguecal.yaml, optional)"
    )
    parser.add_argument(
        "--db", default=None,
        help="SQLite database path (overrides config)"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init-db", help="Create database tables")

    p = sub.add_parser("load", help="Load a league fixture YAML")
    p.add_argument("fixture")

    p = sub.add_parser("generate", help="Generate a calendar for a league")
    p.add_argument("league")
    p.add_argument("start_date", help="First week start, YYYY-MM-DD (must be in the future)")
    p.add_argument("--save", action="store_true",
                   help="Persist matches, byes and league dates")

    p = sub.add_parser("calendar", help="Show a league's stored calendar")
    p.add_argument("league")

    p = sub.add_parser("assign", help="Assign a date to a match awaiting one")
    p.add_argument("league")
    p.add_argument("match")
    p.add_argument("date", help="YYYY-MM-DD")
    p.add_argument("time", help="e.g. 18:00 or 6pm")

    p = sub.add_parser("standings", help="Show league classifications")
    p.add_argument("league")

    p = sub.add_parser("clear", help="Delete a league's calendar")
    p.add_argument("league")

    return parser


def run(args, store: SQLiteStore, settings) -> int:
    gen = settings.generator

    if args.command == "init-db":
        print(f"Database ready: {store.db_path}")
        return 0

    if args.command == "load":
        if not Path(args.fixture).exists():
            print(f"Error: fixture file {args.fixture} not found")
            return 1
        fixture = load_fixture(args.fixture)
        store.load_fixture(fixture)
        print(f"Loaded {len(fixture['leagues'])} leagues, {len(fixture['teams'])} teams")
        return 0

    if args.command == "generate":
        print(f"Generating calendar for {args.league} from {args.start_date}...")
        result = generate_calendar(store, args.league, args.start_date, gen)
        print(format_result(result))

        rosters = {}
        for m in result.matches:
            for team_id in m.teams():
                if team_id not in rosters:
                    rosters[team_id] = set(store.get_team_roster_user_ids(team_id))
        report = validate_calendar(result, rosters)
        print("\n" + format_validation_report(report))
        print("\n" + format_stats_report(compute_stats(result)))

        if args.save:
            save_calendar(store, result, args.league)
            print(f"\nSaved {len(result.matches)} matches and {len(result.byes)} byes.")
        else:
            print("\nPreview only. Re-run with --save to persist.")
        return 0

    if args.command == "calendar":
        league = store.get_league(args.league)
        cal = get_calendar(store, args.league, gen.placeholder_date)
        print(format_stored_calendar(cal, league.name if league else ""))
        return 0

    if args.command == "assign":
        match = assign_match_date(store, args.league, args.match, args.date,
                                  args.time, gen.placeholder_date)
        print(f"Match {match.id} assigned to {match.match_date} {match.match_time}")
        return 0

    if args.command == "standings":
        print(format_standings(get_classifications(store, args.league)))
        return 0

    if args.command == "clear":
        removed = clear_calendar(store, args.league)
        print(f"Removed {removed} matches.")
        return 0

    return 1


def main(argv=None):
    args = build_parser().parse_args(argv)
    try:
        settings = load_settings(args.config)
        init_logging(settings.log_level)
    except ValueError as e:
        print(f"Error: invalid configuration: {e}")
        sys.exit(1)

    store = SQLiteStore(args.db or settings.database,
                        settings.generator.placeholder_date)
    try:
        store.init_db()
        code = run(args, store, settings)
    except (CalendarError, ValueError) as e:
        print(f"Error: {e}")
        code = 1
    except sqlite3.IntegrityError as e:
        print(f"Error: {e} (already loaded?)")
        code = 1
    finally:
        store.close()
    sys.exit(code)


if __name__ == "__main__":
    main()
