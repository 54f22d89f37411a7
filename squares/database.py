from peewee import Model

from .appconfig import AppConfig
from .db import get_db
from .workout import LocalWorkout, LocalWorkoutDetail


def get_all_models() -> list[type[Model]]:
    return [AppConfig, LocalWorkout, LocalWorkoutDetail]


def migrate_tables(models: list[type[Model]]) -> None:
    db = get_db()
    db.connect(reuse_if_open=True)
    db.create_tables(models, safe=True)
