"""
Telegram Notifier - Chat delivery via the Telegram Bot API.

Text goes through sendMessage (HTML parse mode); media goes through
sendDocument so clips and images arrive uncompressed.
See: https://core.telegram.org/bots/api
"""

import logging
import time
from typing import Callable

import requests

from ...utils.constants import (
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_RETRY_ATTEMPTS,
    DEFAULT_RETRY_DELAY,
    TELEGRAM_API_URL,
)
from ...utils.retry import with_retry
from . import ChatNotifier

logger = logging.getLogger(__name__)


class TelegramAPIError(Exception):
    """Telegram rejected a request (non-2xx or ok=false)."""


class TelegramNotifier(ChatNotifier):
    """
    Notifier that delivers to Telegram chats.

    Text messages are sent once. Document uploads are retried with the
    media retry budget, since large clips are the usual casualties of
    flaky uplinks.
    """

    def __init__(
        self,
        bot_token: str,
        retry_attempts: int = DEFAULT_RETRY_ATTEMPTS,
        retry_delay: float = DEFAULT_RETRY_DELAY,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        session: requests.Session | None = None,
        api_url: str = TELEGRAM_API_URL,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self._token = bot_token
        self._retry_attempts = retry_attempts
        self._retry_delay = retry_delay
        self._timeout = timeout
        self._session = session or requests.Session()
        self._base_url = f"{api_url.rstrip('/')}/bot{bot_token}"
        self._sleep = sleep

    @classmethod
    def from_config(cls, config, session: requests.Session | None = None) -> "TelegramNotifier":
        return cls(
            bot_token=config.telegram_bot_token,
            retry_attempts=config.media_retry_attempts,
            retry_delay=config.media_retry_delay_seconds,
            timeout=config.request_timeout_seconds,
            session=session,
        )

    @property
    def id(self) -> str:
        return "telegram"

    def _redact(self, text: str) -> str:
        # Request errors echo the URL, which embeds the bot token
        return text.replace(self._token, "***") if self._token else text

    def _check_response(self, response: requests.Response) -> None:
        if response.ok:
            return
        try:
            description = response.json().get("description", "")
        except ValueError:
            description = response.text[:100]
        raise TelegramAPIError(f"{response.status_code} {description}".strip())

    def send_text(self, chat_id: str, text: str) -> bool:
        """Send an HTML message to a chat."""
        try:
            response = self._session.post(
                f"{self._base_url}/sendMessage",
                json={"chat_id": chat_id, "text": text or "", "parse_mode": "HTML"},
                timeout=self._timeout,
            )
            self._check_response(response)
        except (requests.RequestException, TelegramAPIError) as e:
            logger.error(f"Failed to send message to {chat_id}: {self._redact(str(e))}")
            return False

        logger.info(f"Message sent to chat {chat_id}")
        return True

    def _post_document(
        self, chat_id: str, payload: bytes, filename: str, caption: str | None
    ) -> None:
        data = {"chat_id": chat_id, "parse_mode": "HTML"}
        if caption:
            data["caption"] = caption
        try:
            response = self._session.post(
                f"{self._base_url}/sendDocument",
                data=data,
                files={"document": (filename, payload)},
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            raise TelegramAPIError(self._redact(str(e))) from e
        self._check_response(response)

    def send_document(
        self,
        chat_id: str,
        payload: bytes,
        filename: str,
        caption: str | None = None,
    ) -> bool:
        """Upload a document to a chat, retrying with linear backoff."""
        try:
            with_retry(
                lambda: self._post_document(chat_id, payload, filename, caption),
                attempts=self._retry_attempts,
                base_delay=self._retry_delay,
                label=f"Telegram send to {chat_id}",
                retry_on=(TelegramAPIError,),
                sleep=self._sleep,
            )
        except TelegramAPIError as e:
            logger.error(
                f"Failed to send media to {chat_id} after {self._retry_attempts} "
                f"attempt(s): {e}"
            )
            return False

        logger.info(f"Media sent to chat {chat_id}")
        return True
