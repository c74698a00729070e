"""
Webhook Notifier - Generic HTTP webhook notifications.

Sends a JSON payload per processed event to the configured endpoint.
Compatible with Home Assistant, Node-RED, IFTTT and custom endpoints.
"""

import logging
from typing import Any

import requests

from ...models.events import Event
from ...utils.constants import WEBHOOK_TIMEOUT

logger = logging.getLogger(__name__)


def build_webhook_payload(event: Event, groups: list[str]) -> dict[str, Any]:
    """
    Build the webhook JSON body.

    Args:
        event: The processed event
        groups: Group names configured for the camera (not schedule-filtered)
    """
    return {
        "event_id": event.id,
        "camera": event.camera,
        "label": event.label,
        "start_time": event.start_time,
        "end_time": event.end_time,
        "groups": list(groups),
    }


class WebhookNotifier:
    """
    Posts event payloads to an HTTP webhook.

    Failures are logged and reported as False; they never affect chat
    delivery.
    """

    def __init__(
        self,
        url: str,
        timeout: float = WEBHOOK_TIMEOUT,
        session: requests.Session | None = None,
    ):
        self._url = url
        self._timeout = timeout
        self._session = session or requests.Session()

        logger.debug(f"WebhookNotifier initialized -> {self._url}")

    @property
    def url(self) -> str:
        return self._url

    def send(self, event: Event, groups: list[str]) -> bool:
        """
        Send the event payload to the webhook endpoint.

        Returns:
            True if the endpoint answered with a 2xx status
        """
        payload = build_webhook_payload(event, groups)

        try:
            response = self._session.post(
                self._url,
                json=payload,
                headers={"Content-Type": "application/json"},
                timeout=self._timeout,
            )

            if not response.ok:
                logger.warning(
                    f"Webhook failed: {response.status_code} {response.text[:100]}"
                )
                return False

            logger.info(f"Webhook triggered for event {event.id}")
            return True

        except requests.RequestException as e:
            logger.error(f"Webhook error: {e}")
            return False
