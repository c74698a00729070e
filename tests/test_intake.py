"""
Tests for the poll loop: deduplication, first-cycle behavior and screening.
"""

import time
import unittest

import requests
from fakes import CLOCK_NOW, FakeFrigateClient, at, make_config

from frigate_relay.config import ScheduleResolver
from frigate_relay.models import Watermark
from frigate_relay.processor.intake import EventIntake


def record(event_id, camera="front", label="person", age=30):
    return {
        "id": event_id,
        "camera": camera,
        "label": label,
        "start_time": CLOCK_NOW - age,
        "end_time": None,
        "has_clip": True,
    }


class TestPollOnce(unittest.TestCase):
    """Test a single poll cycle."""

    def setUp(self):
        self.submitted = []
        self.sleeps = []
        self.config = make_config(
            groups={
                "family": {
                    "chat_id": "100",
                    "schedule": {"start_time": "08:00", "end_time": "20:00"},
                },
                "security": {
                    "chat_id": "200",
                    "schedule": {"start_time": "22:00", "end_time": "06:00"},
                },
            },
            cameras={"garage": {"labels": ["car"]}},
        )
        self.resolver = ScheduleResolver(self.config, clock=lambda: at(12, 0))
        self.watermark = Watermark("E4", cutoff_timestamp=CLOCK_NOW - 600)

    def submit(self, event):
        self.submitted.append(event)
        return True

    def get_intake(self, client, submit=None):
        return EventIntake(
            client,
            self.resolver,
            submit or self.submit,
            poll_interval=10,
            grace_seconds=5,
            cutoff_minutes=10,
            clock=lambda: CLOCK_NOW,
            sleep=self.sleeps.append,
        )

    def test_only_events_newer_than_watermark(self):
        """Test [E5, E4, E3] with watermark E4 dispatches only E5."""
        client = FakeFrigateClient(events=[record("E5"), record("E4"), record("E3")])
        intake = self.get_intake(client)

        result = intake.poll_once(self.watermark)

        self.assertEqual([e.id for e in self.submitted], ["E5"])
        self.assertEqual(result.submitted, ["E5"])
        self.assertEqual(result.watermark.last_event_id, "E5")
        self.assertEqual(result.watermark.cutoff_timestamp, CLOCK_NOW - 600)
        self.assertEqual(result.fetched, 3)

    def test_first_cycle_sets_watermark_only(self):
        """Test the initial cycle dispatches nothing."""
        client = FakeFrigateClient(events=[record("E2"), record("E1")])
        intake = self.get_intake(client)

        result = intake.poll_once(Watermark())

        self.assertEqual(self.submitted, [])
        self.assertEqual(result.watermark.last_event_id, "E2")
        self.assertFalse(result.watermark.is_initial)

    def test_second_cycle_after_first(self):
        """Test the cycle after the first dispatches only new events."""
        intake = self.get_intake(FakeFrigateClient(events=[record("E1")]))
        first = intake.poll_once(Watermark())

        intake = self.get_intake(FakeFrigateClient(events=[record("E2"), record("E1")]))
        second = intake.poll_once(first.watermark)

        self.assertEqual(second.submitted, ["E2"])
        self.assertEqual(second.watermark.last_event_id, "E2")

    def test_empty_feed_keeps_watermark(self):
        """Test an empty feed leaves the watermark unchanged without grace wait."""
        intake = self.get_intake(FakeFrigateClient(events=[]))

        result = intake.poll_once(self.watermark)

        self.assertIs(result.watermark, self.watermark)
        self.assertEqual(self.sleeps, [])

    def test_grace_wait_after_non_empty_fetch(self):
        """Test one grace wait per non-empty cycle."""
        intake = self.get_intake(FakeFrigateClient(events=[record("E5"), record("E4")]))

        intake.poll_once(self.watermark)

        self.assertEqual(self.sleeps, [5])

    def test_fetch_error_keeps_watermark(self):
        """Test network errors leave the watermark unchanged."""
        client = FakeFrigateClient(events=requests.ConnectionError("refused"))
        intake = self.get_intake(client)

        result = intake.poll_once(self.watermark)

        self.assertIs(result.watermark, self.watermark)
        self.assertIn("refused", result.error)
        self.assertEqual(self.submitted, [])

    def test_malformed_record_keeps_watermark(self):
        """Test a record missing required fields fails the whole cycle."""
        client = FakeFrigateClient(events=[record("E5"), {"id": "E4"}])
        intake = self.get_intake(client)

        result = intake.poll_once(self.watermark)

        self.assertIs(result.watermark, self.watermark)
        self.assertIsNotNone(result.error)
        self.assertEqual(self.submitted, [])

    def test_label_filter(self):
        """Test events with a disallowed label are never dispatched."""
        client = FakeFrigateClient(
            events=[
                record("E6", camera="garage", label="person"),
                record("E5", camera="garage", label="car"),
                record("E4"),
            ]
        )
        intake = self.get_intake(client)

        result = intake.poll_once(self.watermark)

        self.assertEqual(result.submitted, ["E5"])
        self.assertEqual(result.dropped, ["E6"])

    def test_outside_schedule(self):
        """Test events are dropped when no group may be alerted."""
        self.resolver = ScheduleResolver(self.config, clock=lambda: at(21, 0))
        intake = self.get_intake(FakeFrigateClient(events=[record("E5"), record("E4")]))

        result = intake.poll_once(self.watermark)

        self.assertEqual(result.submitted, [])
        self.assertEqual(result.dropped, ["E5"])
        self.assertEqual(result.watermark.last_event_id, "E5")

    def test_stale_event(self):
        """Test events older than the cutoff are skipped."""
        client = FakeFrigateClient(
            events=[record("E6"), record("E5", age=3600), record("E4")]
        )
        intake = self.get_intake(client)

        result = intake.poll_once(self.watermark)

        self.assertEqual(result.submitted, ["E6"])
        self.assertEqual(result.dropped, ["E5"])

    def test_watermark_not_in_feed(self):
        """Test every event is considered when the watermark scrolled out of the feed."""
        client = FakeFrigateClient(events=[record("E9"), record("E8")])
        intake = self.get_intake(client)

        result = intake.poll_once(self.watermark)

        self.assertEqual(result.submitted, ["E9", "E8"])

    def test_refused_submission_is_dropped(self):
        """Test a saturated dispatch pool drops the event but advances the watermark."""
        intake = self.get_intake(
            FakeFrigateClient(events=[record("E5"), record("E4")]), submit=lambda e: False
        )

        result = intake.poll_once(self.watermark)

        self.assertEqual(result.dropped, ["E5"])
        self.assertEqual(result.watermark.last_event_id, "E5")


class TestIntakeThread(unittest.TestCase):
    """Test the background poll thread lifecycle."""

    def test_start_and_stop(self):
        """Test the loop polls immediately and stops promptly."""
        client = FakeFrigateClient(events=[])
        resolver = ScheduleResolver(make_config())
        intake = EventIntake(client, resolver, lambda e: True, poll_interval=30)

        intake.start()
        deadline = time.time() + 2
        while client.event_fetches == 0 and time.time() < deadline:
            time.sleep(0.01)
        intake.stop(timeout=2)

        self.assertGreaterEqual(client.event_fetches, 1)
        self.assertFalse(intake._thread.is_alive())

    def test_from_config(self):
        """Test poll settings are read from config."""
        config = make_config(poll_interval_seconds=15, cutoff_minutes=5)
        intake = EventIntake.from_config(
            config, FakeFrigateClient(), ScheduleResolver(config), lambda e: True
        )

        self.assertEqual(intake._interval, 15)
        self.assertEqual(intake._cutoff_seconds, 300)
        self.assertTrue(intake.watermark.is_initial)


if __name__ == "__main__":
    unittest.main()
