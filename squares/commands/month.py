"""CLI command: month — per-day workout totals for one month."""

from tabulate import tabulate

from squares.calendar import month_grid
from squares.core import Squares


def run(year_month: str) -> None:
    with Squares() as sq:
        try:
            grid = month_grid(sq.store, year_month, str(sq.home_tz))
        except ValueError:
            print(f"Invalid month {year_month!r}; expected YYYY-MM.")
            return

    rows = [
        [day["day"], len(day["workout_ids"]), f"{day['distance'] / 1000:.2f}"]
        for day in grid["days"]
        if day["workout_ids"]
    ]
    print(f"{grid['month_name']} {year_month[:4]}")
    if rows:
        print(tabulate(rows, headers=["Day", "Workouts", "Distance (km)"], tablefmt="simple"))
    else:
        print("No workouts this month.")
    print(f"\n{grid['active_days']} active days, {grid['total_distance'] / 1000:.2f} km total")
