"""Fetch per-workout detail records and store them against their LocalWorkout.

The detail endpoint sometimes emits fields with no value at all
(``"max_heartrate": ,``). The payload is patched textually before parsing and
then read as a plain dict, since which fields are present varies between
responses.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from squares.client import WorkoutApiClient
from squares.errors import NoAccountError, ParseFailedError, UnknownWorkoutError
from squares.store import WorkoutStore
from squares.summary import parse_iso8601
from squares.workout import LocalWorkout, LocalWorkoutDetail

logger = logging.getLogger(__name__)

FLOAT_FIELDS = (
    "average_heartrate",
    "average_speed",
    "max_speed",
    "total_elevation_gain",
    "calories",
    "distance",
)
INT_FIELDS = ("max_heartrate", "elapsed_time", "moving_time")
TEXT_FIELDS = ("name", "sport_type", "type")
# Sent as strings by some responses and as numbers by others
NUMERIC_TEXT_FIELDS = ("elevation_high", "elevation_low")
DATE_FIELDS = ("start_date", "start_date_local")


def repair_json(text: str) -> str:
    """Replace empty field values (``: ,`` and ``:,``) with ``null``."""
    return text.replace(": ,", ": null,").replace(":,", ": null,")


def parse_detail_payload(content: bytes | str) -> dict[str, Any]:
    """Repair and parse a detail payload into a dict.

    Raises:
        ParseFailedError: not UTF-8, not JSON after repair, or not an object.
    """
    if isinstance(content, bytes):
        try:
            content = content.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ParseFailedError(f"Workout detail is not UTF-8: {e}") from e

    try:
        payload = json.loads(repair_json(content))
    except ValueError as e:
        raise ParseFailedError(f"Workout detail is not valid JSON after repair: {e}") from e

    if not isinstance(payload, dict):
        raise ParseFailedError(f"Workout detail is a {type(payload).__name__}, expected an object")
    return payload


def _number(value: Any) -> float | int | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value


def _float(value: Any) -> float:
    number = _number(value)
    return float(number) if number is not None else 0.0


def _int(value: Any) -> int:
    number = _number(value)
    return int(number) if number is not None else 0


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _numeric_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    number = _number(value)
    return str(number) if number is not None else ""


def _location(value: Any) -> str:
    """Start/end locations are kept as text; lists are stored as JSON."""
    if isinstance(value, str):
        return value
    if isinstance(value, list):
        return json.dumps(value)
    return ""


def _polyline(payload: dict[str, Any]) -> str:
    route_map = payload.get("map")
    if isinstance(route_map, dict):
        encoded = route_map.get("summary_polyline") or route_map.get("polyline")
        if isinstance(encoded, str):
            return encoded
    return _text(payload.get("polyline"))


def extract_detail_fields(payload: dict[str, Any]) -> dict[str, Any]:
    """Map a parsed detail payload onto LocalWorkoutDetail columns.

    Missing or wrongly typed values fall back to 0 / "" / None; no single field
    can fail the whole extraction.
    """
    fields: dict[str, Any] = {}
    for name in FLOAT_FIELDS:
        fields[name] = _float(payload.get(name))
    for name in INT_FIELDS:
        fields[name] = _int(payload.get(name))
    for name in TEXT_FIELDS:
        fields[name] = _text(payload.get(name))
    for name in NUMERIC_TEXT_FIELDS:
        fields[name] = _numeric_text(payload.get(name))
    for name in DATE_FIELDS:
        fields[name] = parse_iso8601(payload.get(name))

    fields["time_zone"] = _text(payload.get("time_zone")) or _text(payload.get("timezone"))
    fields["start_latlng"] = _location(payload.get("start_latlng", payload.get("start_lnglat")))
    fields["end_latlng"] = _location(payload.get("end_latlng", payload.get("end_lnglat")))
    fields["polyline"] = _polyline(payload)
    return fields


class DetailEnricher:
    def __init__(self, client: WorkoutApiClient, store: WorkoutStore):
        self.client = client
        self.store = store

    def enrich(
        self,
        workout: LocalWorkout,
        athlete_id: str | None,
        force_refresh: bool = False,
    ) -> LocalWorkoutDetail:
        """Return the detail for *workout*, fetching it unless already stored.

        A fetched detail replaces any stored one as a whole. On any error the
        stored detail is left as it was.

        Raises:
            NoAccountError, InvalidURLError, FetchFailedError, ParseFailedError,
            StoreCommitFailedError
        """
        existing = self.store.get_detail(workout.id)
        if existing is not None and not force_refresh:
            logger.debug(f"Detail for workout {workout.id} already stored")
            return existing

        if not athlete_id:
            raise NoAccountError()

        raw = self.client.get_detail_raw(athlete_id, workout.id)
        payload = parse_detail_payload(raw)
        fields = extract_detail_fields(payload)
        fields["athlete_id"] = str(athlete_id)
        fields["raw_json"] = json.dumps(payload)

        detail = self.store.replace_detail(workout.id, fields)
        logger.info(f"Stored detail for workout {workout.id} ({detail.name or 'unnamed'})")
        return detail

    def enrich_by_id(self, workout_id: int, athlete_id: str | None, force_refresh: bool = False) -> LocalWorkoutDetail:
        workout = self.store.get(workout_id)
        if workout is None:
            raise UnknownWorkoutError(f"No local workout with id {workout_id}; run a sync first")
        return self.enrich(workout, athlete_id, force_refresh=force_refresh)
