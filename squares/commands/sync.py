"""CLI command: sync — reconcile remote summaries into the local store."""

from squares.core import Squares
from squares.errors import StoreCommitFailedError, WorkoutSyncError


def run() -> None:
    with Squares() as sq:
        athlete_id = sq.athlete_id
        try:
            changed = sq.reconciler.reconcile(athlete_id)
        except WorkoutSyncError as e:
            print(f"Sync failed: {e}")
            return

        if not changed:
            print(f"Up to date: {len(sq.reconciler.cached_summaries)} workouts, nothing new.")
            return

        print(f"Found {len(changed)} new or changed workouts for athlete {athlete_id}")
        try:
            report = sq.reconciler.apply(changed)
        except StoreCommitFailedError as e:
            print(f"Could not save {len(e.pending)} workouts: {e}")
            print("The next sync will try again.")
            return

        print(f"Saved: {report}")
