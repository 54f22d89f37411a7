"""Celery worker for squares background fetches.

Start the worker (one process, so cache and store writes never overlap):
    celery -A squares.worker worker --loglevel=info --concurrency=1

Tasks are never retried; a failed task is reported and the next user action
starts a fresh one.
"""

import logging
import os

from celery import Celery

BROKER_URL = os.environ.get("CELERY_BROKER_URL", "redis://localhost:6379/0")
RESULT_BACKEND = os.environ.get("CELERY_RESULT_BACKEND", "redis://localhost:6379/1")

celery_app = Celery("squares", broker=BROKER_URL, backend=RESULT_BACKEND)

celery_app.conf.update(
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    timezone="UTC",
    enable_utc=True,
    # Keep task results for an hour so the app can poll status
    result_expires=3600,
    task_track_started=True,
    worker_concurrency=1,
)

log = logging.getLogger(__name__)


def _open_squares():
    from squares.core import Squares

    return Squares()


@celery_app.task(bind=True, max_retries=0, name="squares.worker.reconcile_account")
def reconcile_account(self, athlete_id: str | None = None):
    """Reconcile remote summaries for *athlete_id* (default: the linked account)."""
    with _open_squares() as sq:
        athlete_id = athlete_id or sq.athlete_id
        try:
            report = sq.reconciler.sync(athlete_id)
        except Exception as exc:
            log.error(f"Reconciliation failed for athlete {athlete_id}: {exc}")
            raise
    return {
        "athlete_id": athlete_id,
        "created": report.created,
        "updated": report.updated,
        "unchanged": report.unchanged,
    }


@celery_app.task(bind=True, max_retries=0, name="squares.worker.enrich_workout")
def enrich_workout(self, workout_id: int, force_refresh: bool = False):
    """Fetch and store the detail record for one workout."""
    with _open_squares() as sq:
        try:
            detail = sq.enricher.enrich_by_id(workout_id, sq.athlete_id, force_refresh=force_refresh)
        except Exception as exc:
            log.error(f"Detail fetch failed for workout {workout_id}: {exc}")
            raise
    return {"workout_id": workout_id, "name": detail.name, "sport_type": detail.sport_type}


@celery_app.task(bind=True, max_retries=0, name="squares.worker.disconnect_account")
def disconnect_account(self):
    """Unlink the athlete account and delete every local workout."""
    with _open_squares() as sq:
        deleted = sq.reconciler.disconnect()
    return {"deleted": deleted}
