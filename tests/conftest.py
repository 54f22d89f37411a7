import json
from unittest.mock import MagicMock

import pytest
import requests

import squares.appconfig as sqcfg
from squares.client import WorkoutApiClient
from squares.database import get_all_models, migrate_tables
from squares.db import configure_db, get_db
from squares.store import WorkoutStore

SUMMARIES_URL = "https://api.example.com/workouts"
DETAIL_URL = "https://api.example.com/workout"


@pytest.fixture(scope="session", autouse=True)
def test_db(tmp_path_factory):
    test_db_path = str(tmp_path_factory.mktemp("db") / "test.sqlite3")
    configure_db(test_db_path)
    db = get_db()
    # Rebind all models to the test DB
    for model in get_all_models():
        model._meta.set_database(db)
    db.connect()
    migrate_tables(get_all_models())
    yield
    db.close()


@pytest.fixture(autouse=True)
def clean_db(monkeypatch):
    """Start every test with empty tables and no config file on disk."""
    monkeypatch.setattr(sqcfg, "_FILE_PATHS", [])
    for model in get_all_models():
        model.delete().execute()
    yield


@pytest.fixture
def store():
    return WorkoutStore(get_db())


@pytest.fixture
def session():
    return MagicMock(spec=requests.Session)


@pytest.fixture
def client(session):
    return WorkoutApiClient(SUMMARIES_URL, DETAIL_URL, session=session)


def make_response(body, status_code: int = 200):
    """Build a requests.Response stand-in carrying *body*."""
    if isinstance(body, (dict, list)):
        body = json.dumps(body)
    if isinstance(body, str):
        body = body.encode("utf-8")
    response = MagicMock()
    response.status_code = status_code
    response.ok = status_code < 400
    response.content = body
    response.text = body.decode("utf-8", errors="replace")
    return response


def summaries_payload(*workouts: tuple) -> dict:
    """``(id, distance, date, sport_type)`` tuples → summaries endpoint body."""
    return {
        "workouts": [
            {"workout_id": wid, "distance": distance, "start_date_local": date, "sport_type": sport}
            for wid, distance, date, sport in workouts
        ]
    }
