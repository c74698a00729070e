"""
Schedule models - resolved time windows and alert recipients.
"""

from dataclasses import dataclass

from ..utils.constants import DEFAULT_SCHEDULE_END, DEFAULT_SCHEDULE_START


def parse_hhmm(value: str) -> int:
    """
    Convert an "HH:MM" string to minutes since midnight.

    Raises:
        ValueError: If the string is not a valid time of day
    """
    try:
        hours_str, minutes_str = value.split(":")
        hours, minutes = int(hours_str), int(minutes_str)
    except (AttributeError, ValueError) as e:
        raise ValueError(f"Invalid time '{value}', expected HH:MM") from e

    if not (0 <= hours <= 23 and 0 <= minutes <= 59):
        raise ValueError(f"Invalid time '{value}', expected HH:MM")
    return hours * 60 + minutes


@dataclass(frozen=True)
class Window:
    """
    Effective schedule for one (camera, group) pair.

    A recurring daily interval. end_time earlier than start_time means the
    window wraps past midnight. Both boundaries are inclusive.
    """

    start_time: str = DEFAULT_SCHEDULE_START
    end_time: str = DEFAULT_SCHEDULE_END
    always_send: bool = False

    @property
    def start_minutes(self) -> int:
        return parse_hhmm(self.start_time)

    @property
    def end_minutes(self) -> int:
        return parse_hhmm(self.end_time)

    @property
    def wraps_midnight(self) -> bool:
        return self.start_minutes > self.end_minutes

    def describe(self) -> str:
        """Short human-readable form, e.g. '22:00 - 06:00 [ALWAYS SEND]'."""
        text = f"{self.start_time} - {self.end_time}"
        if self.always_send:
            text += " [ALWAYS SEND]"
        return text


@dataclass(frozen=True)
class Recipient:
    """A chat group eligible to receive an alert, with its resolved schedule."""

    name: str
    chat_id: str
    schedule: Window
