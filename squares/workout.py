"""Durable workout models: one LocalWorkout per remote workout id, plus its detail."""

from peewee import (
    BigIntegerField,
    CharField,
    DateTimeField,
    FloatField,
    IntegerField,
    Model,
    TextField,
)

from squares.db import db


class LocalWorkout(Model):
    """
    Locally stored workout, created the first time a remote id is seen.

    Updated in place by later reconciliation passes; only removed by the bulk
    clear that runs when the athlete account is disconnected.
    """

    # Same value as the remote workout_id
    id = BigIntegerField(primary_key=True)

    date = DateTimeField(null=True, index=True)  # UTC, naive
    distance = FloatField(default=0.0)  # meters
    activity_type = CharField(null=True)

    class Meta:
        database = db
        table_name = "local_workouts"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "date": self.date.isoformat() if self.date else None,
            "distance": self.distance,
            "activity_type": self.activity_type,
        }


class LocalWorkoutDetail(Model):
    """Detail record for a single LocalWorkout.

    References its parent by id only; the store deletes details explicitly
    whenever workouts are cleared. Always written as a whole record.
    """

    workout_id = BigIntegerField(primary_key=True)
    athlete_id = CharField()

    # Heart rate
    average_heartrate = FloatField(default=0.0)
    max_heartrate = IntegerField(default=0)

    # Speed (m/s) and time (seconds)
    average_speed = FloatField(default=0.0)
    max_speed = FloatField(default=0.0)
    elapsed_time = IntegerField(default=0)
    moving_time = IntegerField(default=0)

    # Elevation; high/low come back as strings from the API
    total_elevation_gain = FloatField(default=0.0)
    elevation_high = CharField(default="")
    elevation_low = CharField(default="")

    name = CharField(default="")
    sport_type = CharField(default="")
    type = CharField(default="")
    time_zone = CharField(default="")
    start_date = DateTimeField(null=True)
    start_date_local = DateTimeField(null=True)

    calories = FloatField(default=0.0)
    distance = FloatField(default=0.0)

    # Route data, kept opaque
    start_latlng = TextField(default="")
    end_latlng = TextField(default="")
    polyline = TextField(default="")

    raw_json = TextField(null=True)  # repaired payload text
    fetched_at = DateTimeField(null=True)

    class Meta:
        database = db
        table_name = "local_workout_details"

    @property
    def route(self) -> list[tuple[float, float]]:
        """Decoded route coordinates as (lat, lng) pairs."""
        from squares.polyline import decode_polyline

        return decode_polyline(self.polyline)
