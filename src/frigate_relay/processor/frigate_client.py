"""
Frigate API client.

Thin wrapper over the Frigate HTTP API: event feed plus the three media
representations of an event (recorded clip, snapshot, thumbnail).
"""

import logging
from typing import Any

import requests

from ..utils.constants import DEFAULT_REQUEST_TIMEOUT

logger = logging.getLogger(__name__)


def _format_ts(value: float) -> str:
    # Frigate accepts fractional timestamps; keep integers compact
    value = float(value)
    return str(int(value)) if value.is_integer() else str(value)


class FrigateClient:
    """
    HTTP client for a Frigate instance.

    Methods raise requests.RequestException on network errors and non-2xx
    responses; callers decide whether to retry.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        session: requests.Session | None = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._session = session or requests.Session()

    @property
    def base_url(self) -> str:
        return self._base_url

    def events_url(self) -> str:
        return f"{self._base_url}/events"

    def clip_url(self, camera: str, start_time: float, end_time: float) -> str:
        return (
            f"{self._base_url}/{camera}/start/{_format_ts(start_time)}"
            f"/end/{_format_ts(end_time)}/clip.mp4"
        )

    def snapshot_url(self, event_id: str) -> str:
        return f"{self._base_url}/events/{event_id}/snapshot.jpg"

    def thumbnail_url(self, event_id: str) -> str:
        return f"{self._base_url}/events/{event_id}/thumbnail.jpg"

    def fetch_events(self) -> list[dict[str, Any]]:
        """
        Fetch the event feed (newest first).

        Raises:
            requests.RequestException: On network or HTTP errors
            ValueError: If the body is not a JSON list
        """
        response = self._session.get(self.events_url(), timeout=self._timeout)
        response.raise_for_status()
        data = response.json()
        if not isinstance(data, list):
            raise ValueError(f"Expected a list of events, got {type(data).__name__}")
        return data

    def _get_bytes(self, url: str) -> bytes:
        response = self._session.get(url, timeout=self._timeout)
        response.raise_for_status()
        return response.content

    def download_clip(self, camera: str, start_time: float, end_time: float) -> bytes:
        return self._get_bytes(self.clip_url(camera, start_time, end_time))

    def download_snapshot(self, event_id: str) -> bytes:
        return self._get_bytes(self.snapshot_url(event_id))

    def download_thumbnail(self, event_id: str) -> bytes:
        return self._get_bytes(self.thumbnail_url(event_id))
