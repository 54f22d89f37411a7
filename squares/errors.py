"""Typed exceptions raised by the reconciliation and enrichment code.

Every error is terminal for the operation that raised it: nothing in this
package retries. Callers (CLI commands, Celery tasks) catch at the edge and
decide how to report.
"""

from __future__ import annotations


class WorkoutSyncError(RuntimeError):
    """Base class for all workout sync failures."""


class NoAccountError(WorkoutSyncError):
    """No linked athlete account is available; raised before any I/O."""

    def __init__(self, message: str = "No linked athlete account. Run 'squares link' first.") -> None:
        super().__init__(message)


class InvalidURLError(WorkoutSyncError):
    """The configured endpoint could not be turned into a request URL."""

    def __init__(self, message: str, url: str | None = None) -> None:
        super().__init__(message)
        self.url = url


class FetchFailedError(WorkoutSyncError):
    """Transport-level failure: connection error, timeout or non-2xx status."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class DecodeFailedError(WorkoutSyncError):
    """The payload arrived but could not be decoded into the expected shape."""


class ParseFailedError(DecodeFailedError):
    """A detail payload is not a JSON object, even after textual repair."""


class StoreCommitFailedError(WorkoutSyncError):
    """A durable-store transaction failed and was rolled back.

    ``pending`` carries whatever the caller was trying to write, so it can be
    reported or retried by hand.
    """

    def __init__(self, message: str, pending: list | None = None) -> None:
        super().__init__(message)
        self.pending = pending or []


class UnknownWorkoutError(WorkoutSyncError):
    """No LocalWorkout exists for the requested id yet."""
