"""
Consolidated data models for the relay.

This package contains the core data structures shared by the poll loop,
the media cascade and the dispatcher.
"""

from .events import Event, PollResult, Watermark
from .schedule import Recipient, Window, parse_hhmm

__all__ = [
    # Event models
    "Event",
    "PollResult",
    # Schedule models
    "Recipient",
    "Watermark",
    "Window",
    "parse_hhmm",
]
