"""Remote workout summaries and their payload decoding."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from typing import Any

from dateutil import parser as dt_parser

from squares.errors import DecodeFailedError

_OLDEST = datetime.min.replace(tzinfo=UTC)


def _workout_id(value: Any) -> int:
    """Whole-number ids only; bools and fractional numbers are rejected."""
    if isinstance(value, bool):
        raise TypeError(f"workout_id must be a number, got {value!r}")
    if isinstance(value, float) and not value.is_integer():
        raise ValueError(f"workout_id must be a whole number, got {value!r}")
    return int(value)


def parse_iso8601(value: Any) -> datetime | None:
    """Parse an ISO-8601 string into a naive UTC datetime.

    Strings without an offset are taken to be UTC. Anything unparsable
    yields ``None``.
    """
    if not value or not isinstance(value, str):
        return None
    try:
        dt = dt_parser.isoparse(value)
        if dt.tzinfo is None:
            return dt
        return dt.astimezone(UTC).replace(tzinfo=None)
    except (ValueError, OverflowError):
        return None


@dataclass(frozen=True)
class WorkoutSummary:
    """A workout summary pulled from the remote API."""

    id: int
    distance: float  # meters
    date: str  # ISO-8601, as received
    activity_type: str

    @classmethod
    def from_payload(cls, item: dict[str, Any]) -> WorkoutSummary:
        """Build from one entry of the ``workouts`` array."""
        return cls(
            id=_workout_id(item["workout_id"]),
            distance=float(item.get("distance") or 0.0),
            date=str(item.get("start_date_local") or ""),
            activity_type=str(item.get("sport_type") or ""),
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> WorkoutSummary:
        return cls(
            id=int(data["id"]),
            distance=float(data["distance"]),
            date=str(data["date"]),
            activity_type=str(data.get("activity_type", "")),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @property
    def parsed_date(self) -> datetime | None:
        return parse_iso8601(self.date)

    def sort_key(self) -> datetime:
        """Aware UTC datetime for ordering; unparsable dates sort oldest."""
        parsed = self.parsed_date
        return parsed.replace(tzinfo=UTC) if parsed else _OLDEST

    def differs_from(self, other: WorkoutSummary) -> bool:
        return self.distance != other.distance or self.date != other.date


def decode_summaries(content: bytes | str) -> list[WorkoutSummary]:
    """Decode a ``{"workouts": [...]}`` payload.

    Raises:
        DecodeFailedError: the body is not JSON, lacks a ``workouts`` list, or
            an entry is missing ``workout_id`` or holds a non-numeric value.
    """
    try:
        payload = json.loads(content)
    except ValueError as e:
        raise DecodeFailedError(f"Workout summaries are not valid JSON: {e}") from e

    if not isinstance(payload, dict) or not isinstance(payload.get("workouts"), list):
        raise DecodeFailedError("Workout summaries payload has no 'workouts' list")

    summaries = []
    for item in payload["workouts"]:
        if not isinstance(item, dict):
            raise DecodeFailedError(f"Unexpected workout summary entry: {item!r}")
        try:
            summaries.append(WorkoutSummary.from_payload(item))
        except (KeyError, TypeError, ValueError) as e:
            raise DecodeFailedError(f"Malformed workout summary {item!r}: {e}") from e
    return summaries
