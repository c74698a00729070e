"""
Event models - Frigate events and the poll watermark.

Events come from Frigate's /events feed (newest first). The watermark bounds
what the poll loop treats as "new" on its next cycle.
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class Event:
    """
    A detection event as reported by Frigate.

    Attributes:
        id: Opaque event identifier (ordered by the source)
        camera: Camera name
        label: Detected object label (person, car, ...)
        start_time: Unix seconds
        end_time: Unix seconds, None while Frigate is still recording
        has_clip: Whether Frigate keeps a recording for the event
    """

    id: str
    camera: str
    label: str
    start_time: float
    end_time: float | None = None
    has_clip: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Event":
        """
        Build an event from a Frigate API record.

        Raises:
            ValueError: If a required field is missing or malformed
        """
        if not isinstance(data, dict):
            raise ValueError(f"Event record must be an object, got {type(data).__name__}")

        try:
            end_time = data.get("end_time")
            return cls(
                id=str(data["id"]),
                camera=str(data["camera"]),
                label=str(data.get("label", "")),
                start_time=float(data["start_time"]),
                end_time=float(end_time) if end_time is not None else None,
                has_clip=bool(data.get("has_clip", False)),
            )
        except KeyError as e:
            raise ValueError(f"Event record missing field {e}") from e
        except (TypeError, ValueError) as e:
            raise ValueError(f"Malformed event record {data.get('id')}: {e}") from e

    def fill_end_time(self, end_time: float) -> bool:
        """
        Set end_time if Frigate has not reported one yet.

        A known end_time is never overwritten.

        Returns:
            True if end_time was filled in
        """
        if self.end_time is not None:
            return False
        self.end_time = end_time
        return True


@dataclass(frozen=True)
class Watermark:
    """
    Poll loop state: last seen event and the staleness cutoff.

    Owned by the poll loop only. Each cycle receives the current watermark
    and returns the next one; dispatch workers never see it.
    """

    last_event_id: str | None = None
    cutoff_timestamp: float = 0.0

    @property
    def is_initial(self) -> bool:
        """True before the first successful non-empty poll."""
        return self.last_event_id is None


@dataclass
class PollResult:
    """Outcome of one poll cycle (for logging and tests)."""

    watermark: Watermark
    fetched: int = 0
    submitted: list[str] = field(default_factory=list)
    dropped: list[str] = field(default_factory=list)
    error: str | None = None
