"""
Alert Dispatcher

Delivers one event to every eligible chat group. Recipients are resolved at
send time (not reused from poll-time screening), media is pulled from the
cascade one kind at a time, and text is the last resort.

Per-event flow:
    schedule check (no recipients -> dropped)
    -> media cascade: clip, snapshot, thumbnail
         all recipients accepted -> delivered
         someone rejected, kinds left -> next kind for those still waiting
    -> text fallback (no media at all, or media rejected)
    -> delivered | partially failed

Events are processed on a bounded worker pool; the poll loop never waits
for a dispatch to finish.
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable

from ..config.resolver import ScheduleResolver
from ..models.events import Event
from ..models.schedule import Recipient
from ..utils.constants import (
    DEFAULT_DISPATCH_QUEUE_SIZE,
    DEFAULT_MAX_CONCURRENT_DISPATCHES,
    MEDIA_FAILED_MARKER,
    NO_MEDIA_MARKER,
)
from .media import MediaFetcher
from .messages import format_alert_message, with_marker
from .notifiers import ChatNotifier, WebhookNotifier

logger = logging.getLogger(__name__)


class DeliveryStatus(Enum):
    """Terminal state of one event's delivery."""

    DROPPED = "dropped"
    DELIVERED = "delivered"
    PARTIALLY_FAILED = "partially_failed"


@dataclass
class DeliveryReport:
    """Per-recipient outcome of one fan-out."""

    accepted: list[Recipient] = field(default_factory=list)
    rejected: list[Recipient] = field(default_factory=list)

    @property
    def all_accepted(self) -> bool:
        return not self.rejected


class AlertDispatcher:
    """
    Fans an event out to its eligible recipients.

    Deliveries to different recipients run concurrently; one recipient's
    failure never stops the others.
    """

    def __init__(
        self,
        resolver: ScheduleResolver,
        notifier: ChatNotifier,
        fetcher: MediaFetcher,
        webhook: WebhookNotifier | None = None,
    ):
        self._resolver = resolver
        self._notifier = notifier
        self._fetcher = fetcher
        self._webhook = webhook
        # Webhook calls run beside chat delivery, never in front of it
        self._webhook_executor = (
            ThreadPoolExecutor(max_workers=2, thread_name_prefix="webhook")
            if webhook is not None
            else None
        )

    def recipients(self, event: Event) -> list[Recipient]:
        """Groups eligible for this event right now."""
        return self._resolver.recipients(event.camera)

    def _fan_out(
        self, recipients: list[Recipient], send: Callable[[Recipient], bool]
    ) -> DeliveryReport:
        report = DeliveryReport()
        if not recipients:
            return report

        def deliver(recipient: Recipient) -> bool:
            try:
                return bool(send(recipient))
            except Exception as e:
                logger.error(f"Delivery to {recipient.name} raised: {e}", exc_info=True)
                return False

        with ThreadPoolExecutor(
            max_workers=len(recipients), thread_name_prefix="deliver"
        ) as pool:
            results = list(pool.map(deliver, recipients))

        for recipient, ok in zip(recipients, results):
            if ok:
                report.accepted.append(recipient)
            else:
                report.rejected.append(recipient)
        return report

    def send_media(
        self,
        recipients: list[Recipient],
        payload: bytes,
        caption: str,
        filename: str,
    ) -> DeliveryReport:
        """Upload media to every recipient concurrently."""
        names = ", ".join(r.name for r in recipients)
        logger.info(f"Sending {filename} to {len(recipients)} group(s): {names}")
        return self._fan_out(
            recipients,
            lambda r: self._notifier.send_document(r.chat_id, payload, filename, caption),
        )

    def send_text(self, recipients: list[Recipient], message: str) -> DeliveryReport:
        """Send a text message to every recipient concurrently."""
        names = ", ".join(r.name for r in recipients)
        logger.info(f"Sending text alert to {len(recipients)} group(s): {names}")
        return self._fan_out(
            recipients, lambda r: self._notifier.send_text(r.chat_id, message)
        )

    def _send_webhook(self, event: Event, groups: list[str]) -> bool:
        try:
            return self._webhook.send(event, groups)
        except Exception as e:
            logger.error(f"Webhook for event {event.id} raised: {e}", exc_info=True)
            return False

    def trigger_webhook(self, event: Event) -> Future | None:
        """
        Fire the webhook with the camera's configured groups (not schedule-filtered).

        The call runs in the background; chat delivery does not wait for it.

        Returns:
            Future resolving to the webhook result, or None without a webhook
        """
        if self._webhook_executor is None:
            return None
        groups = [name for name, _ in self._resolver.groups_for_camera(event.camera)]
        try:
            return self._webhook_executor.submit(self._send_webhook, event, groups)
        except RuntimeError:
            logger.warning(f"Dispatcher closed, webhook skipped for event {event.id}")
            return None

    def close(self, wait: bool = True) -> None:
        """Stop the webhook worker; optionally wait for pending webhook calls."""
        if self._webhook_executor is not None:
            self._webhook_executor.shutdown(wait=wait)

    def process_event(self, event: Event) -> DeliveryStatus:
        """
        Deliver one event end to end.

        Returns:
            The terminal delivery status
        """
        self.trigger_webhook(event)

        if not self.recipients(event):
            logger.info(f"Event {event.id} on {event.camera}: no groups to alert, dropped")
            return DeliveryStatus.DROPPED

        message = format_alert_message(event, self._resolver.camera_schedule(event.camera))

        delivered: set[str] = set()
        failed: dict[str, Recipient] = {}
        fetched_any = False

        for attachment in self._fetcher.attachments(event):
            fetched_any = True
            pending = [r for r in self.recipients(event) if r.name not in delivered]
            if not pending:
                break

            report = self.send_media(pending, attachment.payload, message, attachment.filename)
            for recipient in report.accepted:
                delivered.add(recipient.name)
                failed.pop(recipient.name, None)
            for recipient in report.rejected:
                failed[recipient.name] = recipient

            if report.all_accepted:
                break
            logger.warning(
                f"{attachment.kind.title} for event {event.id} rejected by "
                f"{', '.join(r.name for r in report.rejected)}, trying next media kind"
            )

        if not fetched_any:
            logger.error(f"Failed to get any media for event {event.id}")
            targets = [r for r in self.recipients(event) if r.name not in delivered]
            fallback = with_marker(message, NO_MEDIA_MARKER)
        else:
            targets = list(failed.values())
            fallback = with_marker(message, MEDIA_FAILED_MARKER)

        if not targets:
            logger.info(f"Event {event.id} delivered to {len(delivered)} group(s)")
            return DeliveryStatus.DELIVERED

        report = self.send_text(targets, fallback)
        if report.all_accepted:
            logger.info(f"Event {event.id} delivered (text fallback to {len(targets)} group(s))")
            return DeliveryStatus.DELIVERED

        logger.error(
            f"Event {event.id} could not be delivered to: "
            f"{', '.join(r.name for r in report.rejected)}"
        )
        return DeliveryStatus.PARTIALLY_FAILED


class DispatchPool:
    """
    Bounded worker pool for event dispatch.

    At most max_workers events are processed at once and at most max_pending
    are in flight or waiting; submissions beyond that are refused so a burst
    of events cannot grow the backlog without limit.
    """

    def __init__(
        self,
        handler: Callable[[Event], object],
        max_workers: int = DEFAULT_MAX_CONCURRENT_DISPATCHES,
        max_pending: int = DEFAULT_DISPATCH_QUEUE_SIZE,
    ):
        self._handler = handler
        self._max_pending = max(max_pending, 1)
        self._pending = 0
        self._lock = threading.Lock()
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="dispatch"
        )

    @property
    def pending(self) -> int:
        with self._lock:
            return self._pending

    def submit(self, event: Event) -> bool:
        """
        Queue an event for processing without waiting for it.

        Returns:
            False if the pool is saturated and the event was refused
        """
        with self._lock:
            if self._pending >= self._max_pending:
                logger.warning(
                    f"Dispatch backlog full ({self._pending} events), dropping event {event.id}"
                )
                return False
            self._pending += 1

        try:
            self._executor.submit(self._run, event)
        except RuntimeError:
            # Executor already shut down
            with self._lock:
                self._pending -= 1
            logger.warning(f"Dispatch pool stopped, dropping event {event.id}")
            return False
        return True

    def _run(self, event: Event) -> None:
        try:
            self._handler(event)
        except Exception as e:
            logger.error(f"Error processing event {event.id}: {e}", exc_info=True)
        finally:
            with self._lock:
                self._pending -= 1

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting events; optionally wait for in-flight dispatches."""
        self._executor.shutdown(wait=wait)
