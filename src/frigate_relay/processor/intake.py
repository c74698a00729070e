"""
Event Intake

Polls Frigate's event feed on a fixed cadence and hands new, relevant events
to the dispatch pool. Uses threading.Event for sleep/wake so shutdown is
immediate.

Deduplication relies on the feed being newest first: the scan stops at the
event seen as newest on the previous cycle. The very first cycle only records
where the feed currently is, so a restart never floods chats with backlog.
"""

import logging
import threading
import time
from typing import Callable

import requests

from ..config.resolver import ScheduleResolver
from ..models.events import Event, PollResult, Watermark
from ..utils.constants import (
    DEFAULT_CUTOFF_MINUTES,
    DEFAULT_EVENT_GRACE,
    DEFAULT_POLL_INTERVAL,
)
from .frigate_client import FrigateClient

logger = logging.getLogger(__name__)


class EventIntake:
    """
    Poll loop: fetch, deduplicate, filter, submit.

    The watermark lives here and only the poll thread touches it. Each cycle
    takes the current watermark and returns the next one.
    """

    def __init__(
        self,
        client: FrigateClient,
        resolver: ScheduleResolver,
        submit: Callable[[Event], bool],
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        grace_seconds: float = DEFAULT_EVENT_GRACE,
        cutoff_minutes: float = DEFAULT_CUTOFF_MINUTES,
        clock: Callable[[], float] = time.time,
        sleep: Callable[[float], object] | None = None,
    ):
        """
        Initialize the poll loop.

        Args:
            client: Frigate API client
            resolver: Schedule resolver used for label/schedule screening
            submit: Non-blocking hand-off for surviving events
            poll_interval: Seconds between cycle starts
            grace_seconds: Wait after a non-empty fetch before scanning
            cutoff_minutes: Staleness horizon for the next cycle
            clock: Wall clock in unix seconds
            sleep: Wait function for the grace period (defaults to an
                   interruptible wait on the shutdown signal)
        """
        self._client = client
        self._resolver = resolver
        self._submit = submit
        self._interval = poll_interval
        self._grace = grace_seconds
        self._cutoff_seconds = cutoff_minutes * 60
        self._clock = clock

        # Shutdown signal (like a CancellationToken)
        self._shutdown = threading.Event()
        self._thread: threading.Thread | None = None
        self._sleep = sleep or self._shutdown.wait

        self._watermark = Watermark()

    @classmethod
    def from_config(
        cls,
        config,
        client: FrigateClient,
        resolver: ScheduleResolver,
        submit: Callable[[Event], bool],
    ) -> "EventIntake":
        return cls(
            client,
            resolver,
            submit,
            poll_interval=config.poll_interval_seconds,
            grace_seconds=config.event_grace_seconds,
            cutoff_minutes=config.cutoff_minutes,
        )

    @property
    def watermark(self) -> Watermark:
        return self._watermark

    def _screen(self, event: Event, watermark: Watermark) -> str | None:
        """Reason to drop an event, or None if it should be dispatched."""
        if not self._resolver.is_label_allowed(event):
            logger.info(
                f"Event {event.id} label '{event.label}' not in allowed list for {event.camera}"
            )
            return "label"
        if not self._resolver.should_alert_any(event.camera):
            logger.info(
                f"Event {event.id} outside schedule for {event.camera} (no groups to alert)"
            )
            return "schedule"
        if event.start_time < watermark.cutoff_timestamp:
            logger.debug(f"Event {event.id} older than cutoff, skipped")
            return "stale"
        return None

    def poll_once(self, watermark: Watermark) -> PollResult:
        """
        Run one poll cycle.

        Fetch or parse errors leave the watermark unchanged; the next tick
        simply tries again.

        Args:
            watermark: State left by the previous cycle

        Returns:
            PollResult carrying the watermark for the next cycle
        """
        try:
            records = self._client.fetch_events()
            events = [Event.from_dict(record) for record in records]
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Error fetching events: {e}")
            return PollResult(watermark=watermark, error=str(e))

        result = PollResult(watermark=watermark, fetched=len(events))
        if not events:
            return result

        # Let Frigate finalize in-progress clips
        self._sleep(self._grace)

        for event in events:
            if watermark.is_initial or event.id == watermark.last_event_id:
                break

            if self._screen(event, watermark) is not None:
                result.dropped.append(event.id)
                continue

            if self._submit(event):
                result.submitted.append(event.id)
            else:
                result.dropped.append(event.id)

        result.watermark = Watermark(
            last_event_id=events[0].id,
            cutoff_timestamp=self._clock() - self._cutoff_seconds,
        )

        if watermark.is_initial:
            logger.info(f"Initial poll: watermark set at event {events[0].id}")
        elif result.submitted:
            logger.info(f"Dispatched {len(result.submitted)} new event(s)")
        return result

    def start(self) -> None:
        """Start the poll thread."""
        if self._thread is not None:
            return

        logger.info(f"Polling {self._client.events_url()} every {self._interval:g}s")
        self._thread = threading.Thread(
            target=self._run,
            name="EventIntake",
            daemon=True,  # Dies with parent process
        )
        self._thread.start()

    def stop(self, timeout: float = 5.0) -> None:
        """Signal shutdown and wait briefly for the poll thread to exit."""
        if not self._thread:
            return

        logger.debug("Stopping event intake...")
        self._shutdown.set()  # Wakes thread immediately from wait()
        self._thread.join(timeout=timeout)

        if self._thread.is_alive():
            logger.warning("Event intake did not stop cleanly")
        else:
            logger.debug("Event intake stopped")

    def _run(self) -> None:
        """
        Main poll loop.

        Cycles start every poll_interval seconds; a cycle that overruns the
        interval is followed immediately by the next one.
        """
        next_tick = time.monotonic()

        while not self._shutdown.is_set():
            try:
                result = self.poll_once(self._watermark)
                self._watermark = result.watermark
            except Exception as e:
                logger.error(f"Unexpected error in poll cycle: {e}", exc_info=True)

            next_tick += self._interval
            delay = next_tick - time.monotonic()
            if delay < 0:
                next_tick = time.monotonic()
                delay = 0

            # Returns True if shutdown was signaled, False if timeout
            if self._shutdown.wait(timeout=delay):
                break

        logger.debug("Event intake loop exited")
