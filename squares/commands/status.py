"""CLI command: status — show the linked account and local store contents."""

from datetime import UTC

from tabulate import tabulate

from squares.core import Squares


def run() -> None:
    with Squares() as sq:
        recent = sq.store.most_recent()
        rows = [
            ["Athlete", sq.athlete_id or "— (not linked)"],
            ["Local workouts", f"{sq.store.count():,}"],
            ["With details", f"{sq.store.detail_count():,}"],
            ["Cached summaries", f"{len(sq.reconciler.cached_summaries):,}"],
            ["Summaries endpoint", sq.client.summaries_endpoint],
        ]
        print(tabulate(rows, tablefmt="simple"))

        if recent is not None:
            local = recent.date.replace(tzinfo=UTC).astimezone(sq.home_tz)
            print(
                f"\nMost recent workout: {recent.id} on {local:%Y-%m-%d %H:%M %Z} ({recent.distance / 1000:.2f} km)"
            )
