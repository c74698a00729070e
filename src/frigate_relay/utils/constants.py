"""
Constants used throughout the Frigate relay
"""

# Polling
DEFAULT_POLL_INTERVAL = 10.0  # Seconds between event feed polls
DEFAULT_EVENT_GRACE = 5.0  # Seconds to let Frigate finalize clips before scanning
DEFAULT_CUTOFF_MINUTES = 10  # Events older than this (relative to last poll) are stale

# Media retrieval
DEFAULT_RETRY_ATTEMPTS = 4
DEFAULT_RETRY_DELAY = 3.0  # Seconds, multiplied by the attempt number
MIN_MEDIA_BYTES = 1024  # Anything smaller is likely an error page
DEFAULT_CLIP_WAIT = 20.0  # Seconds to wait for an unfinished recording
DEFAULT_ASSUMED_CLIP_SECONDS = 17  # Clip length assumed when end_time is missing

# HTTP
DEFAULT_REQUEST_TIMEOUT = 30.0  # Seconds
WEBHOOK_TIMEOUT = 10.0  # Seconds
TELEGRAM_API_URL = "https://api.telegram.org"

# Dispatch pool
DEFAULT_MAX_CONCURRENT_DISPATCHES = 8
DEFAULT_DISPATCH_QUEUE_SIZE = 100  # Max events in flight or waiting for a worker

# Default schedule (whole day, only inside the window)
DEFAULT_SCHEDULE_START = "00:00"
DEFAULT_SCHEDULE_END = "23:59"

# Message markers
NO_MEDIA_MARKER = "⚠️ (No media available)"
MEDIA_FAILED_MARKER = "⚠️ (Media failed to send)"

# Environment variables (fallbacks for config file values)
ENV_CONFIG_PATH = "CONFIG_PATH"
ENV_TELEGRAM_BOT_TOKEN = "TELEGRAM_BOT_TOKEN"
ENV_FRIGATE_API_URL = "API_URL"
ENV_WEBHOOK_URL = "WEBHOOK_TRIGGER"
