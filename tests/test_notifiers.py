"""
Tests for the Frigate client and the Telegram / webhook notifiers.

HTTP is replaced by Mock sessions; no network access.
"""

import unittest
from unittest.mock import Mock

import requests
from fakes import make_config

from frigate_relay.models import Event
from frigate_relay.processor.frigate_client import FrigateClient
from frigate_relay.processor.notifiers import (
    TelegramNotifier,
    WebhookNotifier,
    build_webhook_payload,
)

TOKEN = "123:secret-token"


def ok_response():
    return Mock(ok=True, status_code=200)


def error_response(status=400, description="Bad Request: chat not found"):
    response = Mock(ok=False, status_code=status)
    response.json.return_value = {"ok": False, "description": description}
    return response


class TestFrigateClient(unittest.TestCase):
    """Test Frigate URL building and responses."""

    def test_urls(self):
        """Test media URLs follow the Frigate API layout."""
        client = FrigateClient("http://frigate.local/api/", session=Mock())

        self.assertEqual(client.events_url(), "http://frigate.local/api/events")
        self.assertEqual(
            client.clip_url("driveway", 1700000000.0, 1700000017.0),
            "http://frigate.local/api/driveway/start/1700000000/end/1700000017/clip.mp4",
        )
        self.assertEqual(
            client.clip_url("driveway", 1700000000.5, 1700000017.25),
            "http://frigate.local/api/driveway/start/1700000000.5/end/1700000017.25/clip.mp4",
        )
        self.assertEqual(
            client.snapshot_url("abc"), "http://frigate.local/api/events/abc/snapshot.jpg"
        )
        self.assertEqual(
            client.thumbnail_url("abc"), "http://frigate.local/api/events/abc/thumbnail.jpg"
        )

    def test_fetch_events(self):
        """Test the feed is returned as parsed JSON."""
        session = Mock()
        session.get.return_value.json.return_value = [{"id": "E1"}]
        client = FrigateClient("http://frigate.local/api", timeout=7, session=session)

        self.assertEqual(client.fetch_events(), [{"id": "E1"}])
        session.get.assert_called_once_with("http://frigate.local/api/events", timeout=7)

    def test_fetch_events_not_a_list(self):
        """Test a non-list body is rejected."""
        session = Mock()
        session.get.return_value.json.return_value = {"error": "nope"}
        client = FrigateClient("http://frigate.local/api", session=session)

        with self.assertRaises(ValueError):
            client.fetch_events()

    def test_http_error_propagates(self):
        """Test non-2xx responses raise for the caller to retry."""
        session = Mock()
        session.get.return_value.raise_for_status.side_effect = requests.HTTPError("500")
        client = FrigateClient("http://frigate.local/api", session=session)

        with self.assertRaises(requests.HTTPError):
            client.download_snapshot("abc")

    def test_download_returns_body(self):
        """Test downloads return raw bytes."""
        session = Mock()
        session.get.return_value.content = b"jpeg-bytes"
        client = FrigateClient("http://frigate.local/api", session=session)

        self.assertEqual(client.download_thumbnail("abc"), b"jpeg-bytes")


class TestTelegramNotifier(unittest.TestCase):
    """Test Telegram Bot API calls."""

    def setUp(self):
        self.session = Mock()
        self.sleeps = []
        self.notifier = TelegramNotifier(
            TOKEN,
            retry_attempts=3,
            retry_delay=2,
            timeout=5,
            session=self.session,
            sleep=self.sleeps.append,
        )

    def test_id(self):
        self.assertEqual(self.notifier.id, "telegram")

    def test_send_text(self):
        """Test sendMessage with HTML parse mode."""
        self.session.post.return_value = ok_response()

        self.assertTrue(self.notifier.send_text("-100", "<b>hi</b>"))

        args, kwargs = self.session.post.call_args
        self.assertEqual(args[0], f"https://api.telegram.org/bot{TOKEN}/sendMessage")
        self.assertEqual(
            kwargs["json"], {"chat_id": "-100", "text": "<b>hi</b>", "parse_mode": "HTML"}
        )
        self.assertEqual(kwargs["timeout"], 5)

    def test_send_text_rejected(self):
        """Test an API error reports False without retrying."""
        self.session.post.return_value = error_response()

        self.assertFalse(self.notifier.send_text("-100", "hi"))
        self.assertEqual(self.session.post.call_count, 1)

    def test_send_text_network_error(self):
        """Test a network error reports False."""
        self.session.post.side_effect = requests.ConnectionError("unreachable")

        self.assertFalse(self.notifier.send_text("-100", "hi"))

    def test_send_document(self):
        """Test sendDocument multipart upload with caption."""
        self.session.post.return_value = ok_response()

        self.assertTrue(
            self.notifier.send_document("-100", b"data", "video.mp4", caption="alert")
        )

        args, kwargs = self.session.post.call_args
        self.assertTrue(args[0].endswith("/sendDocument"))
        self.assertEqual(
            kwargs["data"], {"chat_id": "-100", "parse_mode": "HTML", "caption": "alert"}
        )
        self.assertEqual(kwargs["files"], {"document": ("video.mp4", b"data")})

    def test_send_document_retries(self):
        """Test failed uploads are retried with linear backoff."""
        self.session.post.side_effect = [
            requests.ConnectionError("reset"),
            error_response(status=500, description="Internal Server Error"),
            ok_response(),
        ]

        self.assertTrue(self.notifier.send_document("-100", b"data", "snapshot.jpg"))
        self.assertEqual(self.session.post.call_count, 3)
        self.assertEqual(self.sleeps, [2, 4])

    def test_send_document_exhausted(self):
        """Test False once every attempt has failed."""
        self.session.post.return_value = error_response()

        self.assertFalse(self.notifier.send_document("-100", b"data", "snapshot.jpg"))
        self.assertEqual(self.session.post.call_count, 3)

    def test_token_not_logged(self):
        """Test request errors echoing the URL do not leak the bot token."""
        url = f"https://api.telegram.org/bot{TOKEN}/sendDocument"
        self.session.post.side_effect = requests.ConnectionError(f"Max retries exceeded: {url}")

        with self.assertLogs("frigate_relay", level="INFO") as logs:
            self.notifier.send_document("-100", b"data", "snapshot.jpg")
            self.session.post.side_effect = requests.ConnectionError(f"failed: {url}")
            self.notifier.send_text("-100", "hi")

        output = "\n".join(logs.output)
        self.assertNotIn(TOKEN, output)
        self.assertIn("***", output)

    def test_from_config(self):
        """Test settings are taken from config."""
        config = make_config(media_retry_attempts=2, request_timeout_seconds=12)
        notifier = TelegramNotifier.from_config(config, session=self.session)
        self.session.post.return_value = ok_response()

        notifier.send_text("-100", "hi")

        self.assertEqual(self.session.post.call_args.kwargs["timeout"], 12)


class TestWebhookNotifier(unittest.TestCase):
    """Test webhook delivery."""

    def setUp(self):
        self.event = Event(
            id="E1", camera="front", label="person", start_time=1700000000.0, end_time=None
        )

    def test_payload(self):
        """Test the payload carries event fields and group names."""
        payload = build_webhook_payload(self.event, ["family", "security"])

        self.assertEqual(
            payload,
            {
                "event_id": "E1",
                "camera": "front",
                "label": "person",
                "start_time": 1700000000.0,
                "end_time": None,
                "groups": ["family", "security"],
            },
        )

    def test_send(self):
        """Test a JSON POST to the configured URL."""
        session = Mock()
        session.post.return_value = ok_response()
        webhook = WebhookNotifier("http://hooks.local/x", timeout=3, session=session)

        self.assertTrue(webhook.send(self.event, ["family"]))

        args, kwargs = session.post.call_args
        self.assertEqual(args[0], "http://hooks.local/x")
        self.assertEqual(kwargs["json"]["groups"], ["family"])
        self.assertEqual(kwargs["timeout"], 3)

    def test_send_non_ok(self):
        """Test a non-2xx response reports False."""
        session = Mock()
        session.post.return_value = Mock(ok=False, status_code=502, text="Bad Gateway")
        webhook = WebhookNotifier("http://hooks.local/x", session=session)

        self.assertFalse(webhook.send(self.event, []))

    def test_send_network_error(self):
        """Test connection errors are logged, not raised."""
        session = Mock()
        session.post.side_effect = requests.Timeout("timed out")
        webhook = WebhookNotifier("http://hooks.local/x", session=session)

        self.assertFalse(webhook.send(self.event, []))


if __name__ == "__main__":
    unittest.main()
