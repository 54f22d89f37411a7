"""Application configuration model and helpers.

The DB (``appconfig`` table) is always the source of truth.

On every ``load_config()`` call the file is checked:
  - If a JSON config file exists *and* its contents differ from the DB,
    the DB is updated to match the file.
  - If the DB is empty and no file exists, built-in defaults are seeded.

The same table also holds the linked athlete account, the warm-start
snapshot of the last reconciled summary list and the ids whose store write
is still pending. These live under reserved keys: they are never returned by
``load_config()`` and never taken from the config file, so unlinking sticks
even when the file is edited by hand.
"""

import copy
import json
import logging
import os
from pathlib import Path
from typing import Any

from peewee import CharField, Model, TextField

from .db import db

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

DEFAULT_CONFIG: dict[str, Any] = {
    "home_timezone": "UTC",
    "debug": False,
    "api": {
        "summaries_endpoint": "https://api.squares.app/workouts",
        "detail_endpoint": "https://api.squares.app/workout",
        "timeout": None,  # None = transport default
    },
}

# Candidate JSON config file locations (searched in order)
_FILE_PATHS: list[Path] = [
    Path("squares_config.json"),
    Path("../squares_config.json"),
]

_ACCOUNT_KEY = "linked_account"
_SNAPSHOT_KEY = "workout_summaries"
_PENDING_KEY = "pending_workout_ids"
_RESERVED_KEYS = {_ACCOUNT_KEY, _SNAPSHOT_KEY, _PENDING_KEY}


# ---------------------------------------------------------------------------
# Model
# ---------------------------------------------------------------------------


class AppConfig(Model):
    """Key-value store for application configuration.

    Each top-level key from the config dict (e.g. ``home_timezone``,
    ``api``) is stored as one row with the value JSON-encoded.
    """

    key = CharField(max_length=128, unique=True)
    value = TextField()  # JSON-encoded value

    class Meta:
        database = db
        table_name = "appconfig"


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _load_from_db() -> dict[str, Any] | None:
    """Return config dict from DB rows, or ``None`` if the table is empty."""
    rows = [r for r in AppConfig.select() if r.key not in _RESERVED_KEYS]
    if not rows:
        return None
    return {r.key: json.loads(r.value) for r in rows}


def _load_from_file() -> dict[str, Any] | None:
    """Try each candidate path; return parsed JSON (reserved keys dropped) or ``None``."""
    for path in _FILE_PATHS:
        if path.exists():
            try:
                with open(path) as f:
                    file_cfg = json.load(f)
            except (OSError, ValueError) as e:
                logger.warning(f"Ignoring unreadable config file {path}: {e}")
                continue
            if not isinstance(file_cfg, dict):
                logger.warning(f"Ignoring config file {path}: expected a JSON object")
                continue
            return {k: v for k, v in file_cfg.items() if k not in _RESERVED_KEYS}
    return None


def _upsert(key: str, value: Any) -> None:
    encoded = json.dumps(value)
    (
        AppConfig.insert(key=key, value=encoded)
        .on_conflict(conflict_target=[AppConfig.key], update={AppConfig.value: encoded})
        .execute()
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config() -> dict[str, Any]:
    """Return the current configuration, always using the DB as source of truth.

    On every call:
      1. If a JSON config file exists and its top-level keys differ from what
         is stored in the DB, the DB is updated to match the file.
      2. If the DB is empty (first boot, no file), built-in defaults are seeded.
      3. The DB contents are returned.
    """
    file_cfg = _load_from_file()
    db_cfg = _load_from_db()

    if db_cfg is None:
        # First boot — seed from file or defaults
        source = file_cfg if file_cfg is not None else copy.deepcopy(DEFAULT_CONFIG)
        save_config(source)
        return source

    if file_cfg is not None and file_cfg != db_cfg:
        # Key-level merge so that keys only present in the DB survive
        merged = {**db_cfg, **file_cfg}
        save_config(merged)
        return merged

    return db_cfg


def save_config(config: dict[str, Any]) -> None:
    """Persist every top-level key of *config* to the DB as JSON values.

    Uses upsert semantics so it is safe to call repeatedly.
    """
    for key, value in config.items():
        if key in _RESERVED_KEYS:
            continue
        _upsert(key, value)


def get_api_config() -> dict[str, Any]:
    """Return the ``api`` block with defaults filled in."""
    api = copy.deepcopy(DEFAULT_CONFIG["api"])
    api.update(load_config().get("api", {}))
    return api


def _load_reserved(key: str) -> Any:
    row = AppConfig.get_or_none(AppConfig.key == key)
    if row is None:
        return None
    try:
        return json.loads(row.value)
    except ValueError:
        logger.warning(f"Discarding unreadable {key} value")
        return None


def get_athlete_id() -> str | None:
    """Return the linked athlete id, or ``None`` when no account is linked."""
    account = _load_reserved(_ACCOUNT_KEY)
    athlete_id = account.get("athlete_id") if isinstance(account, dict) else None
    return str(athlete_id) if athlete_id else None


def save_athlete_id(athlete_id: str) -> None:
    """Store the athlete id returned by the authentication provider."""
    _upsert(_ACCOUNT_KEY, {"athlete_id": str(athlete_id)})


def clear_account() -> None:
    """Forget the linked athlete account."""
    AppConfig.delete().where(AppConfig.key == _ACCOUNT_KEY).execute()


def load_summary_snapshot() -> list[dict[str, Any]]:
    """Return the last persisted summary list, or ``[]``."""
    snapshot = _load_reserved(_SNAPSHOT_KEY)
    return snapshot if isinstance(snapshot, list) else []


def save_summary_snapshot(summaries: list[dict[str, Any]]) -> None:
    """Persist the summary list for warm start on the next launch."""
    _upsert(_SNAPSHOT_KEY, summaries)


def clear_summary_snapshot() -> None:
    AppConfig.delete().where(AppConfig.key.in_([_SNAPSHOT_KEY, _PENDING_KEY])).execute()


def load_pending_ids() -> set[int]:
    """Ids of cached summaries whose durable write has not succeeded yet."""
    pending = _load_reserved(_PENDING_KEY)
    if not isinstance(pending, list):
        return set()
    return {item for item in pending if isinstance(item, int) and not isinstance(item, bool)}


def save_pending_ids(workout_ids: set[int]) -> None:
    if workout_ids:
        _upsert(_PENDING_KEY, sorted(workout_ids))
    else:
        AppConfig.delete().where(AppConfig.key == _PENDING_KEY).execute()


def get_db_path_from_env() -> str:
    """Return the SQLite path to use when no DATABASE_URL is set.

    Checks the ``SQUARES_DB`` environment variable first, then falls back
    to ``squares.sqlite3`` in the current working directory.
    """
    return os.environ.get("SQUARES_DB", "squares.sqlite3")
