# pylint: disable=import-outside-toplevel
"""Main entry point for the squares CLI.

This module provides the command-line interface for squares, allowing users to
link an athlete account, reconcile workouts, fetch workout details and inspect
the local store.
"""

import argparse

from dotenv import load_dotenv

load_dotenv()


def main():
    """Main function for the squares CLI."""
    parser = argparse.ArgumentParser(description="squares CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("migrate", help="Bootstrap the database schema (safe to run on every start)")

    link_parser = subparsers.add_parser("link", help="Link an athlete account")
    link_parser.add_argument("athlete_id", type=str, help="Athlete id from the fitness provider")

    subparsers.add_parser("sync", help="Fetch workout summaries and merge them into the local store")

    enrich_parser = subparsers.add_parser("enrich", help="Fetch the detail record for one workout")
    enrich_parser.add_argument("workout_id", type=int, help="Workout id")
    enrich_parser.add_argument("--force", action="store_true", help="Refetch even if a detail is stored")

    disconnect_parser = subparsers.add_parser(
        "disconnect", help="Unlink the athlete account and delete all local workouts"
    )
    disconnect_parser.add_argument("--yes", action="store_true", help="Skip the confirmation prompt")
    subparsers.add_parser("status", help="Show account and local store status")

    month_parser = subparsers.add_parser("month", help="Show per-day workout totals for a month")
    month_parser.add_argument("year_month", type=str, help="Year and month in YYYY-MM format")

    args = parser.parse_args()

    if args.command == "migrate":
        from squares.commands.migrate import run

        run()
    elif args.command == "link":
        from squares.commands.link import run

        run(args.athlete_id)
    elif args.command == "sync":
        from squares.commands.sync import run

        run()
    elif args.command == "enrich":
        from squares.commands.enrich import run

        run(args.workout_id, force_refresh=args.force)
    elif args.command == "disconnect":
        from squares.commands.disconnect import run

        run(force=args.yes)
    elif args.command == "status":
        from squares.commands.status import run

        run()
    elif args.command == "month":
        from squares.commands.month import run

        run(args.year_month)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
