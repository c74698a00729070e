"""
Schedule Resolver - Effective alert rules per (camera, group).

Four configuration layers, most to least specific:
  1. cameras.<camera>.group_schedules.<group>
  2. cameras.<camera>.schedule / always_send
  3. groups.<group>.schedule / always_send
  4. default_schedule

Resolution is field-wise. The anchor is the most specific layer that defines
anything (a schedule block or an explicit always_send). Each field then takes
the first value found scanning from the anchor down, so start_time and
end_time of one effective schedule may come from different layers.

Everything here is pure and reads the config only; "now" comes from an
injectable clock and is evaluated on every call.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, time
from typing import Callable

from ..models.events import Event
from ..models.schedule import Recipient, Window, parse_hhmm
from ..utils.constants import DEFAULT_SCHEDULE_END, DEFAULT_SCHEDULE_START
from .schemas import CameraConfig, Config, GroupConfig

logger = logging.getLogger(__name__)

BUILTIN_DEFAULT = Window(DEFAULT_SCHEDULE_START, DEFAULT_SCHEDULE_END, False)


@dataclass(frozen=True)
class ScheduleLayer:
    """One layer of schedule configuration, flattened."""

    source: str
    start_time: str | None = None
    end_time: str | None = None
    always_send: bool | None = None
    defined: bool = False


def find_anchor(layers: list[ScheduleLayer]) -> int | None:
    """Index of the most specific layer that defines any field."""
    for index, layer in enumerate(layers):
        if layer.defined:
            return index
    return None


def resolve_start_time(layers: list[ScheduleLayer], anchor: int) -> str:
    for layer in layers[anchor:]:
        if layer.start_time:
            return layer.start_time
    return BUILTIN_DEFAULT.start_time


def resolve_end_time(layers: list[ScheduleLayer], anchor: int) -> str:
    for layer in layers[anchor:]:
        if layer.end_time:
            return layer.end_time
    return BUILTIN_DEFAULT.end_time


def resolve_always_send(layers: list[ScheduleLayer], anchor: int) -> bool:
    # Only an absent value falls through; an explicit False stops the scan
    for layer in layers[anchor:]:
        if layer.always_send is not None:
            return layer.always_send
    return BUILTIN_DEFAULT.always_send


def resolve_layers(layers: list[ScheduleLayer]) -> Window:
    """Merge layers (most specific first) into one effective window."""
    anchor = find_anchor(layers)
    if anchor is None:
        return BUILTIN_DEFAULT

    return Window(
        start_time=resolve_start_time(layers, anchor),
        end_time=resolve_end_time(layers, anchor),
        always_send=resolve_always_send(layers, anchor),
    )


def is_within_window(now: datetime | time, window: Window) -> bool:
    """
    Check whether a time of day falls inside a window.

    Both boundaries are inclusive. A window whose end is before its start
    wraps past midnight (e.g. 22:00 - 06:00).
    """
    now_minutes = now.hour * 60 + now.minute
    start = parse_hhmm(window.start_time)
    end = parse_hhmm(window.end_time)

    if start <= end:
        return start <= now_minutes <= end
    # Timeframe crosses midnight
    return now_minutes >= start or now_minutes <= end


class ScheduleResolver:
    """
    Answers "who should hear about this camera right now?".

    Used by the poll loop (screening) and by the dispatcher (recipient
    resolution at send time). Safe to share between threads.
    """

    def __init__(self, config: Config, clock: Callable[[], datetime] = datetime.now):
        self._config = config
        self._clock = clock

    @property
    def config(self) -> Config:
        return self._config

    def _camera(self, camera: str) -> CameraConfig | None:
        return self._config.cameras.get(camera)

    def _group(self, group: str) -> GroupConfig | None:
        return self._config.groups.get(group)

    def layers(self, camera: str, group: str) -> list[ScheduleLayer]:
        """Build the four layers for a (camera, group) pair, most specific first."""
        camera_config = self._camera(camera)
        group_config = self._group(group)
        override = camera_config.group_schedules.get(group) if camera_config else None
        default = self._config.default_schedule

        layers = []
        for source, block in (
            ("camera_group", override),
            ("camera", camera_config),
            ("group", group_config),
        ):
            if block is None:
                layers.append(ScheduleLayer(source))
                continue
            schedule = block.schedule
            layers.append(
                ScheduleLayer(
                    source=source,
                    start_time=schedule.start_time if schedule else None,
                    end_time=schedule.end_time if schedule else None,
                    always_send=block.always_send,
                    defined=schedule is not None or block.always_send is not None,
                )
            )

        layers.append(
            ScheduleLayer(
                source="default",
                start_time=default.start_time,
                end_time=default.end_time,
                always_send=default.always_send,
                defined=True,
            )
        )
        return layers

    def resolve(self, camera: str, group: str) -> Window:
        """Effective schedule for a (camera, group) pair."""
        return resolve_layers(self.layers(camera, group))

    def has_override(self, camera: str, group: str) -> bool:
        """True if the camera carries a group-specific schedule for this group."""
        camera_config = self._camera(camera)
        return bool(camera_config and group in camera_config.group_schedules)

    def should_alert(self, camera: str, group: str, now: datetime | None = None) -> bool:
        """True if the group may be alerted for this camera at the given time."""
        schedule = self.resolve(camera, group)
        if schedule.always_send:
            return True
        return is_within_window(now or self._clock(), schedule)

    def group_names_for_camera(self, camera: str) -> list[str]:
        """Configured group names for a camera: camera groups, default groups, or all."""
        camera_config = self._camera(camera)
        if camera_config and camera_config.groups:
            return list(camera_config.groups)
        if self._config.default_groups:
            return list(self._config.default_groups)
        return list(self._config.groups)

    def groups_for_camera(self, camera: str) -> list[tuple[str, str]]:
        """
        Enabled groups with a chat id assigned to a camera.

        Schedules are not consulted here.

        Returns:
            List of (group name, chat id)
        """
        groups = []
        for name in self.group_names_for_camera(camera):
            group = self._group(name)
            if group is None or not group.enabled or not group.chat_id:
                continue
            groups.append((name, group.chat_id))
        return groups

    def recipients(self, camera: str, now: datetime | None = None) -> list[Recipient]:
        """Groups whose resolved schedule currently permits alerting."""
        now = now or self._clock()
        recipients = []
        for name, chat_id in self.groups_for_camera(camera):
            schedule = self.resolve(camera, name)
            if schedule.always_send or is_within_window(now, schedule):
                recipients.append(Recipient(name=name, chat_id=chat_id, schedule=schedule))
        return recipients

    def should_alert_any(self, camera: str, now: datetime | None = None) -> bool:
        return bool(self.recipients(camera, now))

    def allowed_labels(self, camera: str) -> list[str] | None:
        """Label allow-list for a camera (None = all labels allowed)."""
        camera_config = self._camera(camera)
        return camera_config.labels if camera_config else None

    def is_label_allowed(self, event: Event) -> bool:
        allowed = self.allowed_labels(event.camera)
        if allowed is None:
            return True  # No filter = all labels allowed; [] allows none
        return event.label in allowed

    def camera_schedule(self, camera: str) -> Window:
        """Camera-level schedule for display (camera schedule, then default)."""
        camera_config = self._camera(camera)
        default = self._config.default_schedule
        schedule = camera_config.schedule if camera_config else None
        always_send = camera_config.always_send if camera_config else None

        if always_send is None:
            always_send = default.always_send
        return Window(
            start_time=(schedule and schedule.start_time)
            or default.start_time
            or BUILTIN_DEFAULT.start_time,
            end_time=(schedule and schedule.end_time)
            or default.end_time
            or BUILTIN_DEFAULT.end_time,
            always_send=bool(always_send),
        )
