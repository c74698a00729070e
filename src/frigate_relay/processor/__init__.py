"""
Event Processor Module

Handles everything after the event feed:
- Event intake (poll loop, dedup watermark, label/schedule screening)
- Media cascade (clip, snapshot, thumbnail with bounded retry)
- Alert dispatch (concurrent fan-out to chat groups, text fallback)
- Notifiers (Telegram, webhook)
"""

from .dispatcher import AlertDispatcher, DeliveryReport, DeliveryStatus, DispatchPool
from .frigate_client import FrigateClient
from .intake import EventIntake
from .media import (
    CASCADE_ORDER,
    MediaAttachment,
    MediaFetcher,
    MediaFetchError,
    MediaKind,
)
from .messages import format_alert_message
from .notifiers import ChatNotifier, TelegramNotifier, WebhookNotifier

__all__ = [
    # Dispatcher
    "AlertDispatcher",
    # Media
    "CASCADE_ORDER",
    # Notifiers
    "ChatNotifier",
    "DeliveryReport",
    "DeliveryStatus",
    "DispatchPool",
    # Intake
    "EventIntake",
    "FrigateClient",
    "MediaAttachment",
    "MediaFetchError",
    "MediaFetcher",
    "MediaKind",
    "TelegramNotifier",
    "WebhookNotifier",
    "format_alert_message",
]
