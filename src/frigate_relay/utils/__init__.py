"""
Utility modules for constants and shared helpers.
"""

from .constants import (
    DEFAULT_ASSUMED_CLIP_SECONDS,
    DEFAULT_CLIP_WAIT,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_RETRY_ATTEMPTS,
    DEFAULT_RETRY_DELAY,
    MEDIA_FAILED_MARKER,
    MIN_MEDIA_BYTES,
    NO_MEDIA_MARKER,
)
from .retry import with_retry

__all__ = [
    "DEFAULT_ASSUMED_CLIP_SECONDS",
    "DEFAULT_CLIP_WAIT",
    "DEFAULT_POLL_INTERVAL",
    "DEFAULT_RETRY_ATTEMPTS",
    "DEFAULT_RETRY_DELAY",
    "MEDIA_FAILED_MARKER",
    "MIN_MEDIA_BYTES",
    "NO_MEDIA_MARKER",
    # Retry
    "with_retry",
]
