"""
Frigate Relay

Relays Frigate NVR detection events to Telegram chat groups, with
per-camera/per-group schedules, label filters and a media cascade
(clip, snapshot, thumbnail) that degrades to text.

Package structure:
  config/     - Configuration loading, validation, schedule resolution
  processor/  - Poll loop, media cascade, dispatcher, notifiers
  models/     - Events, watermark, schedule windows
  utils/      - Constants and retry helper
"""

__version__ = "1.0.0"

from .config import (
    Config,
    ConfigError,
    ScheduleResolver,
    is_within_window,
    load_config,
)
from .models import Event, Recipient, Watermark, Window
from .processor import (
    AlertDispatcher,
    DispatchPool,
    EventIntake,
    MediaFetcher,
    MediaKind,
)

__all__ = [
    # Processor
    "AlertDispatcher",
    # Config
    "Config",
    "ConfigError",
    "DispatchPool",
    # Models
    "Event",
    "EventIntake",
    "MediaFetcher",
    "MediaKind",
    "Recipient",
    "ScheduleResolver",
    "Watermark",
    "Window",
    "is_within_window",
    "load_config",
]
