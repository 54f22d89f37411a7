from squares.core import Squares
from squares.errors import StoreCommitFailedError


def run(force: bool = False):
    if not force:
        confirm = input("This will unlink the account and delete ALL local workouts. Are you sure? (yes/no): ")
        if confirm.lower() != "yes":
            print("Disconnect cancelled.")
            return

    with Squares() as sq:
        try:
            deleted = sq.reconciler.disconnect()
        except StoreCommitFailedError as e:
            print(f"Account unlinked, but local workouts could not be deleted: {e}")
            return
    print(f"Disconnected. Deleted {deleted} local workouts.")
