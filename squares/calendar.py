"""Calendar-grid queries over the local workout store.

These functions are free of any UI dependency; callers pass the store handle
and get plain dicts back, one entry per day of the month.
"""

from __future__ import annotations

import calendar as _cal
import datetime
from typing import Any

import pytz

from squares.store import WorkoutStore


def month_range(year_month: str, timezone: str = "UTC") -> tuple[datetime.datetime, datetime.datetime]:
    """Return naive UTC ``[start, end)`` bounds of a local calendar month.

    Args:
        year_month: Month in ``YYYY-MM`` format.
        timezone:   IANA timezone the month is measured in.
    """
    year, month = map(int, year_month.split("-"))
    tz = pytz.timezone(timezone)

    start_dt = tz.localize(datetime.datetime(year, month, 1))
    if month == 12:
        end_dt = tz.localize(datetime.datetime(year + 1, 1, 1))
    else:
        end_dt = tz.localize(datetime.datetime(year, month + 1, 1))

    return (
        start_dt.astimezone(pytz.UTC).replace(tzinfo=None),
        end_dt.astimezone(pytz.UTC).replace(tzinfo=None),
    )


def month_grid(store: WorkoutStore, year_month: str, home_timezone: str = "UTC") -> dict[str, Any]:
    """Per-day workout totals for one month, days bucketed in *home_timezone*.

    Returns:
        {
            "year_month": str,
            "month_name": str,
            "days": [{"day", "workout_ids", "distance"}, ...],  # every day of the month
            "total_distance": float,
            "active_days": int,
        }
    """
    year, month = map(int, year_month.split("-"))
    tz = pytz.timezone(home_timezone)
    start, end = month_range(year_month, home_timezone)

    last_day = _cal.monthrange(year, month)[1]
    days: dict[int, dict[str, Any]] = {
        day: {"day": day, "workout_ids": [], "distance": 0.0} for day in range(1, last_day + 1)
    }

    for workout in store.workouts_between(start, end):
        local_day = pytz.UTC.localize(workout.date).astimezone(tz).day
        bucket = days[local_day]
        bucket["workout_ids"].append(workout.id)
        bucket["distance"] += workout.distance or 0.0

    return {
        "year_month": year_month,
        "month_name": datetime.datetime(year, month, 1).strftime("%B"),
        "days": list(days.values()),
        "total_distance": sum(d["distance"] for d in days.values()),
        "active_days": sum(1 for d in days.values() if d["workout_ids"]),
    }
