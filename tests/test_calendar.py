from datetime import datetime

import pytest

from squares.calendar import month_grid, month_range


class TestMonthRange:
    def test_utc(self):
        assert month_range("2024-02") == (datetime(2024, 2, 1), datetime(2024, 3, 1))

    def test_december_rolls_over(self):
        assert month_range("2023-12") == (datetime(2023, 12, 1), datetime(2024, 1, 1))

    def test_local_timezone(self):
        start, end = month_range("2024-03", "US/Eastern")
        # EST before the DST change, EDT after it
        assert start == datetime(2024, 3, 1, 5, 0)
        assert end == datetime(2024, 4, 1, 4, 0)

    def test_invalid_month(self):
        with pytest.raises(ValueError):
            month_range("2024-13")


class TestMonthGrid:
    def test_buckets_by_local_day(self, store):
        # 03:00 UTC on the 2nd is still the 1st in New York
        store.create(1, date=datetime(2024, 3, 2, 3, 0), distance=5000.0, activity_type="Run")
        store.create(2, date=datetime(2024, 3, 2, 15, 0), distance=2500.0, activity_type="Run")
        store.create(3, date=datetime(2024, 3, 2, 18, 0), distance=1000.0, activity_type="Walk")
        # Belongs to February locally
        store.create(4, date=datetime(2024, 3, 1, 2, 0), distance=9999.0, activity_type="Run")
        store.create(5, date=None, distance=1.0)

        grid = month_grid(store, "2024-03", "US/Eastern")

        assert grid["month_name"] == "March"
        assert len(grid["days"]) == 31
        assert grid["days"][0] == {"day": 1, "workout_ids": [1], "distance": 5000.0}
        assert grid["days"][1] == {"day": 2, "workout_ids": [2, 3], "distance": 3500.0}
        assert grid["active_days"] == 2
        assert grid["total_distance"] == 8500.0

    def test_empty_month(self, store):
        grid = month_grid(store, "2024-02")

        assert len(grid["days"]) == 29
        assert grid["active_days"] == 0
        assert grid["total_distance"] == 0.0
