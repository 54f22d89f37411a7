"""Keyed durable store for LocalWorkout and LocalWorkoutDetail rows.

The store wraps an explicitly passed peewee database handle. Every operation
runs with the models bound to that handle only for its own duration, so two
stores on different databases can live side by side. Workouts and details
are keyed tables; details point at their workout by id and are deleted
explicitly alongside it.
"""

from __future__ import annotations

import contextlib
import functools
import logging
from collections.abc import Iterator
from datetime import UTC, datetime
from typing import Any

from peewee import Database, PeeweeException

from squares.database import get_all_models
from squares.errors import StoreCommitFailedError
from squares.workout import LocalWorkout, LocalWorkoutDetail

logger = logging.getLogger(__name__)


def _bound(method):
    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        with self.bound():
            return method(self, *args, **kwargs)

    return wrapper


class WorkoutStore:
    """Durable store handle shared by the reconciler and the enricher."""

    def __init__(self, database: Database):
        self.database = database
        self.models = get_all_models()

    def bound(self):
        """Bind the models (AppConfig included) to this store's database."""
        return self.database.bind_ctx(self.models)

    @_bound
    def migrate(self) -> None:
        """Create any missing tables."""
        self.database.connect(reuse_if_open=True)
        self.database.create_tables(self.models, safe=True)

    @contextlib.contextmanager
    def transaction(self) -> Iterator[None]:
        """All-or-nothing batch; any database error rolls back and is re-raised typed."""
        try:
            with self.bound(), self.database.atomic():
                yield
        except PeeweeException as e:
            logger.error(f"Durable store commit failed: exception_type={type(e).__name__}, error={e}")
            raise StoreCommitFailedError(f"Durable store commit failed: {e}") from e

    # ---- workouts -------------------------------------------------------------

    @_bound
    def get(self, workout_id: int) -> LocalWorkout | None:
        return LocalWorkout.get_or_none(LocalWorkout.id == workout_id)

    @_bound
    def create(self, workout_id: int, **fields: Any) -> LocalWorkout:
        return LocalWorkout.create(id=workout_id, **fields)

    @_bound
    def update(self, workout: LocalWorkout, fields: dict[str, Any]) -> None:
        """Write only *fields* back to the row."""
        for name, value in fields.items():
            setattr(workout, name, value)
        workout.save(only=[getattr(LocalWorkout, name) for name in fields])

    @_bound
    def count(self) -> int:
        return LocalWorkout.select().count()

    @_bound
    def workouts_between(self, start: datetime, end: datetime) -> list[LocalWorkout]:
        """Workouts with ``start <= date < end`` (naive UTC), oldest first."""
        return list(
            LocalWorkout.select()
            .where((LocalWorkout.date >= start) & (LocalWorkout.date < end))
            .order_by(LocalWorkout.date, LocalWorkout.id)
        )

    @_bound
    def most_recent(self) -> LocalWorkout | None:
        return LocalWorkout.select().where(LocalWorkout.date.is_null(False)).order_by(LocalWorkout.date.desc()).first()

    # ---- details --------------------------------------------------------------

    @_bound
    def get_detail(self, workout_id: int) -> LocalWorkoutDetail | None:
        return LocalWorkoutDetail.get_or_none(LocalWorkoutDetail.workout_id == workout_id)

    def replace_detail(self, workout_id: int, fields: dict[str, Any]) -> LocalWorkoutDetail:
        """Replace the whole detail record for *workout_id* in one transaction."""
        with self.transaction():
            LocalWorkoutDetail.delete().where(LocalWorkoutDetail.workout_id == workout_id).execute()
            detail = LocalWorkoutDetail.create(
                workout_id=workout_id,
                fetched_at=datetime.now(UTC).replace(tzinfo=None),
                **fields,
            )
        return detail

    @_bound
    def detail_count(self) -> int:
        return LocalWorkoutDetail.select().count()

    # ---- bulk -----------------------------------------------------------------

    def clear_all(self) -> int:
        """Delete every workout and every detail in one transaction.

        Returns the number of workouts deleted.
        """
        with self.transaction():
            details = LocalWorkoutDetail.delete().execute()
            workouts = LocalWorkout.delete().execute()
        logger.info(f"Cleared {workouts} local workouts and {details} details")
        return workouts
