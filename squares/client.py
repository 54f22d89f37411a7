"""HTTP client for the workout summaries and workout detail endpoints."""

from __future__ import annotations

import logging
from typing import Any

import requests

from squares.errors import FetchFailedError, InvalidURLError
from squares.summary import WorkoutSummary, decode_summaries

logger = logging.getLogger(__name__)


class WorkoutApiClient:
    """Thin GET-only client; one request per call, never retried."""

    def __init__(
        self,
        summaries_endpoint: str,
        detail_endpoint: str,
        timeout: float | None = None,
        session: requests.Session | None = None,
    ):
        self.summaries_endpoint = summaries_endpoint
        self.detail_endpoint = detail_endpoint
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_config(cls, api_config: dict[str, Any], session: requests.Session | None = None) -> WorkoutApiClient:
        return cls(
            summaries_endpoint=api_config.get("summaries_endpoint", ""),
            detail_endpoint=api_config.get("detail_endpoint", ""),
            timeout=api_config.get("timeout"),
            session=session,
        )

    @staticmethod
    def build_url(endpoint: str, params: dict[str, Any]) -> str:
        """Return the full request URL, or raise InvalidURLError."""
        try:
            prepared = requests.Request("GET", endpoint, params=params).prepare()
        except (
            requests.exceptions.MissingSchema,
            requests.exceptions.InvalidSchema,
            requests.exceptions.InvalidURL,
        ) as e:
            raise InvalidURLError(f"Cannot build request URL from {endpoint!r}: {e}", url=endpoint) from e
        if not prepared.url.lower().startswith(("http://", "https://")):
            raise InvalidURLError(f"Endpoint {endpoint!r} is not an http(s) URL", url=endpoint)
        return prepared.url

    def _get(self, url: str) -> bytes:
        logger.debug(f"GET {url}")
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"Request to {url} failed: exception_type={type(e).__name__}, error={e}")
            raise FetchFailedError(f"Request to {url} failed: {e}") from e

        if not response.ok:
            logger.error(f"API returned error for {url}: {response.status_code} {response.text}")
            raise FetchFailedError(
                f"API returned {response.status_code} for {url}",
                status_code=response.status_code,
            )
        return response.content

    def get_summaries(self, athlete_id: str) -> list[WorkoutSummary]:
        """Fetch and decode every workout summary for *athlete_id*."""
        url = self.build_url(self.summaries_endpoint, {"athleteId": athlete_id})
        summaries = decode_summaries(self._get(url))
        logger.info(f"Fetched {len(summaries)} workout summaries for athlete {athlete_id}")
        return summaries

    def get_detail_raw(self, athlete_id: str, workout_id: int) -> bytes:
        """Fetch the undecoded detail payload for one workout."""
        url = self.build_url(self.detail_endpoint, {"athlete_id": athlete_id, "workout_id": workout_id})
        return self._get(url)
