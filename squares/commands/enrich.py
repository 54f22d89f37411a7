"""CLI command: enrich — fetch the detail record for one workout."""

from tabulate import tabulate

from squares.core import Squares
from squares.errors import WorkoutSyncError


def _format_duration(seconds: int) -> str:
    hours, rem = divmod(int(seconds), 3600)
    minutes, secs = divmod(rem, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def run(workout_id: int, force_refresh: bool = False) -> None:
    with Squares() as sq:
        try:
            detail = sq.enricher.enrich_by_id(workout_id, sq.athlete_id, force_refresh=force_refresh)
        except WorkoutSyncError as e:
            print(f"Could not fetch detail for workout {workout_id}: {e}")
            return

        rows = [
            ["Name", detail.name or "—"],
            ["Sport", detail.sport_type or detail.type or "—"],
            ["Start", detail.start_date_local.strftime("%Y-%m-%d %H:%M") if detail.start_date_local else "—"],
            ["Moving time", _format_duration(detail.moving_time)],
            ["Elapsed time", _format_duration(detail.elapsed_time)],
            ["Avg / max HR", f"{detail.average_heartrate:.0f} / {detail.max_heartrate}"],
            ["Avg / max speed (m/s)", f"{detail.average_speed:.2f} / {detail.max_speed:.2f}"],
            ["Elevation gain (m)", f"{detail.total_elevation_gain:.0f}"],
            ["Route points", len(detail.route)],
        ]
        print(tabulate(rows, tablefmt="simple"))
