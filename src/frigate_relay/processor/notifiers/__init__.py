"""
Notifiers - Notification backends.

- telegram: Chat delivery (text messages and document uploads)
- webhook: Generic HTTP webhook fired once per processed event

The dispatcher only depends on the ChatNotifier interface, so tests and
other chat services can plug in their own implementation.
"""

import logging
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)


class ChatNotifier(ABC):
    """
    Abstract base class for chat delivery backends.

    Both methods report failure by returning False; they never raise for
    delivery problems.
    """

    @abstractmethod
    def send_text(self, chat_id: str, text: str) -> bool:
        """
        Send a formatted text message.

        Args:
            chat_id: Destination chat identifier
            text: HTML-formatted message body

        Returns:
            True if the message was accepted
        """
        pass

    @abstractmethod
    def send_document(
        self,
        chat_id: str,
        payload: bytes,
        filename: str,
        caption: str | None = None,
    ) -> bool:
        """
        Send a binary document with an optional caption.

        Returns:
            True if the document was accepted
        """
        pass

    @property
    @abstractmethod
    def id(self) -> str:
        """Return the notifier identifier (for logs)."""
        pass


from .telegram import TelegramNotifier  # noqa: E402
from .webhook import WebhookNotifier, build_webhook_payload  # noqa: E402

__all__ = [
    "ChatNotifier",
    "TelegramNotifier",
    "WebhookNotifier",
    "build_webhook_payload",
]
