"""
Pydantic schemas for configuration validation.

Provides type-safe, declarative validation with clear error messages.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..models.schedule import parse_hhmm
from ..utils.constants import (
    DEFAULT_ASSUMED_CLIP_SECONDS,
    DEFAULT_CLIP_WAIT,
    DEFAULT_CUTOFF_MINUTES,
    DEFAULT_DISPATCH_QUEUE_SIZE,
    DEFAULT_EVENT_GRACE,
    DEFAULT_MAX_CONCURRENT_DISPATCHES,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_RETRY_ATTEMPTS,
    DEFAULT_RETRY_DELAY,
    DEFAULT_SCHEDULE_END,
    DEFAULT_SCHEDULE_START,
    MIN_MEDIA_BYTES,
)


class StrictModel(BaseModel):
    """Base model that rejects unknown fields."""

    model_config = ConfigDict(extra="forbid")


def _check_time(value: str | None) -> str | None:
    # Empty string means "not set" and falls through to the next layer
    if value:
        parse_hhmm(value)
    return value


class TimeWindowConfig(BaseModel):
    """Partial time window. Either boundary may be left to a lower layer."""

    start_time: str | None = None
    end_time: str | None = None

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time(cls, v: str | None) -> str | None:
        return _check_time(v)


class DefaultScheduleConfig(BaseModel):
    """Least specific schedule layer."""

    start_time: str | None = DEFAULT_SCHEDULE_START
    end_time: str | None = DEFAULT_SCHEDULE_END
    always_send: bool | None = False

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time(cls, v: str | None) -> str | None:
        return _check_time(v)


class GroupConfig(BaseModel):
    """Telegram chat group."""

    chat_id: str | None = None
    enabled: bool = True
    schedule: TimeWindowConfig | None = None
    always_send: bool | None = None
    description: str | None = None

    @field_validator("chat_id", mode="before")
    @classmethod
    def normalize_chat_id(cls, v):
        # Telegram chat ids are often negative integers in YAML
        if v is None or v == "":
            return None
        return str(v)


class GroupScheduleOverride(BaseModel):
    """Camera-specific schedule for one group (most specific layer)."""

    schedule: TimeWindowConfig | None = None
    always_send: bool | None = None


class CameraConfig(BaseModel):
    """Per-camera routing and filtering."""

    schedule: TimeWindowConfig | None = None
    always_send: bool | None = None
    groups: list[str] | None = None
    labels: list[str] | None = Field(
        default=None, description="Allowed labels (None = all labels)"
    )
    group_schedules: dict[str, GroupScheduleOverride] = Field(default_factory=dict)


class Config(StrictModel):
    """Complete configuration schema."""

    telegram_bot_token: str = Field(..., min_length=1)
    frigate_api_url: str = Field(..., min_length=1)
    webhook_url: str | None = None

    poll_interval_seconds: float = Field(default=DEFAULT_POLL_INTERVAL, gt=0)
    event_grace_seconds: float = Field(default=DEFAULT_EVENT_GRACE, ge=0)
    cutoff_minutes: float = Field(default=DEFAULT_CUTOFF_MINUTES, ge=0)

    media_retry_attempts: int = Field(default=DEFAULT_RETRY_ATTEMPTS, ge=1)
    media_retry_delay_seconds: float = Field(default=DEFAULT_RETRY_DELAY, ge=0)
    min_media_bytes: int = Field(default=MIN_MEDIA_BYTES, ge=0)
    clip_wait_seconds: float = Field(default=DEFAULT_CLIP_WAIT, ge=0)
    assumed_clip_seconds: float = Field(default=DEFAULT_ASSUMED_CLIP_SECONDS, gt=0)
    request_timeout_seconds: float = Field(default=DEFAULT_REQUEST_TIMEOUT, gt=0)

    max_concurrent_dispatches: int = Field(
        default=DEFAULT_MAX_CONCURRENT_DISPATCHES, ge=1
    )
    dispatch_queue_size: int = Field(default=DEFAULT_DISPATCH_QUEUE_SIZE, ge=1)

    default_schedule: DefaultScheduleConfig = Field(
        default_factory=DefaultScheduleConfig
    )
    default_groups: list[str] | None = None
    groups: dict[str, GroupConfig]
    cameras: dict[str, CameraConfig] = Field(default_factory=dict)

    @field_validator("frigate_api_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("groups")
    @classmethod
    def validate_groups(cls, v: dict[str, GroupConfig]) -> dict[str, GroupConfig]:
        if not v:
            raise ValueError("No groups defined")
        return v

    @model_validator(mode="after")
    def validate_references(self):
        """Validate that cameras and default_groups reference existing groups."""
        group_names = set(self.groups)

        for name in self.default_groups or []:
            if name not in group_names:
                raise ValueError(f"default_groups references non-existent group: '{name}'")

        for camera_name, camera in self.cameras.items():
            for name in camera.groups or []:
                if name not in group_names:
                    raise ValueError(
                        f"Camera '{camera_name}' references non-existent group: '{name}'"
                    )
            for name in camera.group_schedules:
                if name not in group_names:
                    raise ValueError(
                        f"Camera '{camera_name}' has group_schedules for non-existent group: '{name}'"
                    )

        return self


def validate_config_pydantic(config: dict) -> Config:
    """
    Validate configuration using Pydantic.

    Args:
        config: Raw configuration dictionary

    Returns:
        Validated Config object

    Raises:
        pydantic.ValidationError: If validation fails
    """
    return Config(**config)
