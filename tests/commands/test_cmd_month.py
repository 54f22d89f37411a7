from datetime import datetime

import squares.commands.month as month


def test_month_prints_active_days(store, capsys):
    store.create(1, date=datetime(2024, 3, 2, 7, 0), distance=5000.0, activity_type="Run")
    store.create(2, date=datetime(2024, 3, 2, 18, 0), distance=2500.0, activity_type="Run")

    month.run("2024-03")

    out = capsys.readouterr().out
    assert "March 2024" in out
    assert "7.50" in out
    assert "1 active days, 7.50 km total" in out


def test_month_without_workouts(capsys):
    month.run("2024-02")

    assert "No workouts this month." in capsys.readouterr().out


def test_month_invalid(capsys):
    month.run("2024-13")

    assert "Invalid month" in capsys.readouterr().out
