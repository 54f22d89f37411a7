"""Reconcile remote workout summaries against the local cache and durable store.

A reconciliation pass is one GET of the athlete's summary list, merged into an
in-memory cache keyed by workout id. Only the new-or-changed summaries are
handed on to ``apply()``, which writes them to the durable store in a single
transaction. The cache is a display accelerator; the store is authoritative,
so a failed commit leaves the two diverged until the next successful pass.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from peewee import PeeweeException

from squares.appconfig import (
    clear_account,
    clear_summary_snapshot,
    load_pending_ids,
    load_summary_snapshot,
    save_pending_ids,
    save_summary_snapshot,
)
from squares.client import WorkoutApiClient
from squares.errors import NoAccountError, StoreCommitFailedError
from squares.store import WorkoutStore
from squares.summary import WorkoutSummary

logger = logging.getLogger(__name__)


@dataclass
class MergeReport:
    """Outcome of writing one batch of summaries to the durable store."""

    created: list[int] = field(default_factory=list)
    updated: list[int] = field(default_factory=list)
    unchanged: list[int] = field(default_factory=list)

    @property
    def changed_count(self) -> int:
        return len(self.created) + len(self.updated)

    def __str__(self) -> str:
        return f"{len(self.created)} created, {len(self.updated)} updated, {len(self.unchanged)} unchanged"


class SummaryReconciler:
    def __init__(self, client: WorkoutApiClient, store: WorkoutStore):
        self.client = client
        self.store = store
        self._cache: dict[int, WorkoutSummary] = {}
        self._ordered: list[WorkoutSummary] = []
        # Cached ids whose last durable write was rolled back
        self._pending: set[int] = set()

    @property
    def cached_summaries(self) -> list[WorkoutSummary]:
        """Cached summaries, newest first."""
        return list(self._ordered)

    @property
    def pending_ids(self) -> set[int]:
        return set(self._pending)

    def _resort(self) -> None:
        self._ordered = sorted(self._cache.values(), key=WorkoutSummary.sort_key, reverse=True)

    def _persist_snapshot(self) -> None:
        try:
            with self.store.bound():
                save_summary_snapshot([s.to_dict() for s in self._ordered])
        except PeeweeException as e:
            logger.warning(f"Could not persist workout summary snapshot: {e}")

    def _persist_pending(self) -> None:
        try:
            with self.store.bound():
                save_pending_ids(self._pending)
        except PeeweeException as e:
            logger.warning(f"Could not persist pending workout ids: {e}")

    def warm_start(self) -> list[WorkoutSummary]:
        """Fill the cache from the persisted snapshot without touching the network."""
        with self.store.bound():
            snapshot = load_summary_snapshot()
            pending = load_pending_ids()
        loaded: dict[int, WorkoutSummary] = {}
        for item in snapshot:
            try:
                summary = WorkoutSummary.from_dict(item)
            except (KeyError, TypeError, ValueError):
                logger.warning(f"Skipping malformed snapshot entry: {item!r}")
                continue
            loaded[summary.id] = summary
        self._cache = loaded
        self._pending = pending & loaded.keys()
        self._resort()
        logger.debug(f"Warm start loaded {len(loaded)} cached summaries, {len(self._pending)} pending")
        return self.cached_summaries

    def _merge(self, fetched: list[WorkoutSummary]) -> list[WorkoutSummary]:
        changed: dict[int, WorkoutSummary] = {}
        for summary in fetched:
            cached = self._cache.get(summary.id)
            if cached is None:
                logger.debug(f"New workout summary {summary.id}")
            elif cached.differs_from(summary):
                logger.debug(
                    f"Workout {summary.id} changed: distance {cached.distance} -> {summary.distance}, "
                    f"date {cached.date} -> {summary.date}"
                )
            else:
                continue
            self._cache[summary.id] = summary
            changed[summary.id] = summary
        for workout_id in self._pending - changed.keys():
            if workout_id in self._cache:
                logger.debug(f"Workout {workout_id} still waiting for a durable write")
                changed[workout_id] = self._cache[workout_id]
        self._resort()
        return sorted(changed.values(), key=WorkoutSummary.sort_key, reverse=True)

    def reconcile(self, athlete_id: str | None) -> list[WorkoutSummary]:
        """Fetch summaries for *athlete_id* and merge them into the cache.

        Returns the summaries that were new or whose distance or date changed,
        plus any whose durable write failed on an earlier pass. Fetch or decode
        failures propagate before any state changes.

        Raises:
            NoAccountError: no athlete id; nothing is fetched.
            InvalidURLError, FetchFailedError, DecodeFailedError: from the client.
        """
        if not athlete_id:
            raise NoAccountError()

        fetched = self.client.get_summaries(athlete_id)
        changed = self._merge(fetched)
        self._persist_snapshot()
        logger.info(f"Reconciled {len(fetched)} summaries for athlete {athlete_id}: {len(changed)} new or changed")
        return changed

    def apply(self, summaries: list[WorkoutSummary]) -> MergeReport:
        """Merge *summaries* into the durable store in one transaction.

        Unknown ids are created; known ids get only their differing fields
        (distance, date, activity type) overwritten.

        Raises:
            StoreCommitFailedError: the batch was rolled back. The cache is
                not reverted; the ids are kept pending and handed out again
                by the next ``reconcile``.
        """
        report = MergeReport()
        if not summaries:
            return report

        ids = {s.id for s in summaries}
        try:
            with self.store.transaction():
                for summary in summaries:
                    self._apply_one(summary, report)
        except StoreCommitFailedError as e:
            e.pending = list(summaries)
            self._pending |= ids
            self._persist_pending()
            raise

        if self._pending & ids:
            self._pending -= ids
            self._persist_pending()
        logger.info(f"Applied {len(summaries)} summaries to the store: {report}")
        return report

    def _apply_one(self, summary: WorkoutSummary, report: MergeReport) -> None:
        parsed_date = summary.parsed_date
        if summary.date and parsed_date is None:
            logger.warning(f"Workout {summary.id} has unparsable date {summary.date!r}; storing without a date")

        workout = self.store.get(summary.id)
        if workout is None:
            self.store.create(
                summary.id,
                date=parsed_date,
                distance=summary.distance,
                activity_type=summary.activity_type,
            )
            report.created.append(summary.id)
            return

        changes = {}
        if workout.distance != summary.distance:
            changes["distance"] = summary.distance
        if workout.date != parsed_date:
            changes["date"] = parsed_date
        if workout.activity_type != summary.activity_type:
            changes["activity_type"] = summary.activity_type

        if changes:
            self.store.update(workout, changes)
            report.updated.append(summary.id)
        else:
            report.unchanged.append(summary.id)

    def sync(self, athlete_id: str | None) -> MergeReport:
        """Reconcile and immediately apply the new-or-changed summaries."""
        return self.apply(self.reconcile(athlete_id))

    def disconnect(self) -> int:
        """Forget the linked account, empty the cache and delete all local workouts.

        Returns the number of workouts deleted. A failed delete is logged and
        re-raised; it is not retried.
        """
        with self.store.bound():
            clear_account()
            clear_summary_snapshot()
        self._cache.clear()
        self._ordered = []
        self._pending.clear()
        try:
            deleted = self.store.clear_all()
        except StoreCommitFailedError:
            logger.exception("Failed to clear local workouts on disconnect")
            raise
        logger.info(f"Disconnected athlete account; deleted {deleted} local workouts")
        return deleted
