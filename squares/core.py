"""Core squares wiring: config, database, API client and the two sync components."""

import logging
import os
from typing import Any
from zoneinfo import ZoneInfo

import requests

from .appconfig import get_api_config, get_athlete_id, get_db_path_from_env, load_config
from .client import WorkoutApiClient
from .db import configure_db, get_db
from .enrich import DetailEnricher
from .reconcile import SummaryReconciler
from .store import WorkoutStore


class Squares:
    """Builds the store, client, reconciler and enricher from configuration."""

    def __init__(self, session: requests.Session | None = None):
        configure_db(get_db_path_from_env())
        self.store = WorkoutStore(get_db())
        self.store.migrate()

        self.config: dict[str, Any] = load_config()
        self.home_tz = ZoneInfo(self.config.get("home_timezone", "UTC"))

        if self.config.get("debug", False) or os.environ.get("SQUARES_DEBUG") == "1":
            logging.basicConfig(level=logging.DEBUG)

        self.client = WorkoutApiClient.from_config(get_api_config(), session=session)
        self.reconciler = SummaryReconciler(self.client, self.store)
        self.enricher = DetailEnricher(self.client, self.store)
        self.reconciler.warm_start()

    @property
    def athlete_id(self) -> str | None:
        return get_athlete_id()

    def cleanup(self):
        """Clean up resources, close connections etc."""
        try:
            db = get_db()
            if not db.is_closed():
                db.close()
        except RuntimeError:
            # Database not configured, nothing to clean up
            pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.cleanup()
