"""
Alert message formatting.

Messages use Telegram's HTML parse mode, so event fields are escaped.
"""

import html
from datetime import datetime

from ..models.events import Event
from ..models.schedule import Window

TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def format_event_time(timestamp: float) -> str:
    """Local time of an event start."""
    return datetime.fromtimestamp(timestamp).strftime(TIME_FORMAT)


def format_schedule_info(schedule: Window) -> str:
    if schedule.always_send:
        return "🔔 Always Send"
    return f"⏰ {schedule.start_time} - {schedule.end_time}"


def format_alert_message(event: Event, camera_schedule: Window) -> str:
    """
    Build the alert body used as media caption and as text message.

    Args:
        event: The event being relayed
        camera_schedule: Camera-level schedule shown in the footer
    """
    return "\n".join(
        [
            "🚨 <b>Frigate Alert!</b>",
            f"📷 Camera: {html.escape(event.camera)}",
            f"📌 Object: {html.escape(event.label)}",
            f"⏳ Time: {format_event_time(event.start_time)}",
            format_schedule_info(camera_schedule),
        ]
    )


def with_marker(message: str, marker: str) -> str:
    """Append a status marker (e.g. no media available) on its own line."""
    return f"{message}\n{marker}"
