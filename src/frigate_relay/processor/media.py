"""
Media Fetcher - best obtainable attachment for an event.

Kinds are tried strictly in order: recorded clip, snapshot, thumbnail.
Every kind goes through the same fetch + validate + retry routine; a kind is
abandoned only after its whole retry budget is spent.
"""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterator

import requests

from ..models.events import Event
from ..utils.constants import (
    DEFAULT_ASSUMED_CLIP_SECONDS,
    DEFAULT_CLIP_WAIT,
    DEFAULT_RETRY_ATTEMPTS,
    DEFAULT_RETRY_DELAY,
    MIN_MEDIA_BYTES,
)
from ..utils.retry import with_retry
from .frigate_client import FrigateClient

logger = logging.getLogger(__name__)


class MediaKind(Enum):
    """Media representations of an event, richest first."""

    CLIP = ("clip", "video.mp4", "Video")
    SNAPSHOT = ("snapshot", "snapshot.jpg", "Snapshot")
    THUMBNAIL = ("thumbnail", "thumbnail.jpg", "Thumbnail")

    def __init__(self, key: str, filename: str, title: str):
        self.key = key
        self.filename = filename
        self.title = title


CASCADE_ORDER = (MediaKind.CLIP, MediaKind.SNAPSHOT, MediaKind.THUMBNAIL)


class MediaFetchError(Exception):
    """One failed media download attempt (network, HTTP status or bad body)."""


@dataclass(frozen=True)
class MediaAttachment:
    """Downloaded media ready to be sent."""

    kind: MediaKind
    payload: bytes

    @property
    def filename(self) -> str:
        return self.kind.filename

    def __len__(self) -> int:
        return len(self.payload)


class MediaFetcher:
    """
    Downloads event media from Frigate with bounded retry.

    Config options (from Config):
        media_retry_attempts: attempts per kind
        media_retry_delay_seconds: linear backoff unit
        min_media_bytes: smaller bodies are treated as error pages
        clip_wait_seconds: wait before requesting an unfinished clip
        assumed_clip_seconds: clip length used when end_time is unknown
    """

    def __init__(
        self,
        client: FrigateClient,
        attempts: int = DEFAULT_RETRY_ATTEMPTS,
        base_delay: float = DEFAULT_RETRY_DELAY,
        min_bytes: int = MIN_MEDIA_BYTES,
        clip_wait: float = DEFAULT_CLIP_WAIT,
        assumed_clip_seconds: float = DEFAULT_ASSUMED_CLIP_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self._client = client
        self._attempts = attempts
        self._base_delay = base_delay
        self._min_bytes = min_bytes
        self._clip_wait = clip_wait
        self._assumed_clip_seconds = assumed_clip_seconds
        self._sleep = sleep

    @classmethod
    def from_config(
        cls, config, client: FrigateClient, sleep: Callable[[float], None] = time.sleep
    ) -> "MediaFetcher":
        return cls(
            client,
            attempts=config.media_retry_attempts,
            base_delay=config.media_retry_delay_seconds,
            min_bytes=config.min_media_bytes,
            clip_wait=config.clip_wait_seconds,
            assumed_clip_seconds=config.assumed_clip_seconds,
            sleep=sleep,
        )

    def _prepare_clip(self, event: Event) -> None:
        """Give an unfinished recording time to complete, then assume its end."""
        if event.end_time is not None:
            return
        logger.info(
            f"Event {event.id} still recording, waiting {self._clip_wait:g}s for clip"
        )
        self._sleep(self._clip_wait)
        if event.fill_end_time(event.start_time + self._assumed_clip_seconds):
            logger.debug(f"Event {event.id} end_time assumed as {event.end_time}")

    def _download(self, event: Event, kind: MediaKind) -> bytes:
        if kind is MediaKind.CLIP:
            return self._client.download_clip(event.camera, event.start_time, event.end_time)
        if kind is MediaKind.SNAPSHOT:
            return self._client.download_snapshot(event.id)
        return self._client.download_thumbnail(event.id)

    def _attempt(self, event: Event, kind: MediaKind) -> bytes:
        """One download attempt, validated."""
        try:
            payload = self._download(event, kind)
        except requests.RequestException as e:
            raise MediaFetchError(str(e)) from e

        if len(payload) < self._min_bytes:
            raise MediaFetchError(
                f"Response too small ({len(payload)} bytes), likely not valid media"
            )
        return payload

    def fetch(self, event: Event, kind: MediaKind) -> MediaAttachment | None:
        """
        Download one kind of media, retrying up to the attempt budget.

        Returns:
            The attachment, or None once every attempt has failed
        """
        if kind is MediaKind.CLIP:
            self._prepare_clip(event)

        try:
            payload = with_retry(
                lambda: self._attempt(event, kind),
                attempts=self._attempts,
                base_delay=self._base_delay,
                label=f"{kind.title} [{event.id}]",
                retry_on=(MediaFetchError,),
                sleep=self._sleep,
            )
        except MediaFetchError:
            logger.warning(f"{kind.title} download failed for event {event.id}")
            return None

        logger.debug(f"{kind.title} for event {event.id}: {len(payload)} bytes")
        return MediaAttachment(kind=kind, payload=payload)

    def attachments(self, event: Event) -> Iterator[MediaAttachment]:
        """
        Lazily yield attachments in cascade order.

        The next kind is only downloaded when the consumer asks for it, so a
        caller that is satisfied with the first attachment stops the cascade.
        """
        for kind in CASCADE_ORDER:
            attachment = self.fetch(event, kind)
            if attachment is not None:
                yield attachment

    def cascade(self, event: Event) -> MediaAttachment | None:
        """Best obtainable attachment, or None if every kind is exhausted."""
        return next(self.attachments(event), None)
