"""Event data model for calendar drafts."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from text2cal.core.date_codec import add_elapsed, elapsed_between, parse_iso8601, to_iso8601
from text2cal.exceptions.errors import InvalidDateFormatError


class Frequency(str, Enum):
    """How often a recurring event repeats."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"

    @classmethod
    def from_string(cls, value: Optional[str]) -> Optional["Frequency"]:
        """Case-insensitive lookup; unknown or empty values return None."""
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


@dataclass
class RecurrenceRule:
    """Recurrence carried through to the calendar store, never expanded here."""

    frequency: Frequency
    interval: int = 1
    end_date: Optional[datetime] = None

    def __post_init__(self):
        if self.interval < 1:
            raise ValueError(f"Recurrence interval must be >= 1, got {self.interval}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "frequency": self.frequency.value,
            "interval": self.interval,
            "end_date": _encode_instant(self.end_date),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RecurrenceRule":
        if not isinstance(data, dict):
            raise ValueError(f"Recurrence must be a mapping, got {type(data).__name__}")
        frequency = Frequency.from_string(data.get("frequency"))
        if frequency is None:
            raise ValueError(f"Unknown recurrence frequency: {data.get('frequency')!r}")
        return cls(
            frequency=frequency,
            interval=int(data.get("interval") or 1),
            end_date=_decode_instant(data.get("end_date"), "recurrence.end_date"),
        )


@dataclass
class EventDraft:
    """The event flowing from parse through preview edits to save.

    ``end`` may be None while undecided; ``was_end_time_inferred`` is True only
    while ``end`` holds the default-duration value.
    """

    title: str
    start: datetime
    end: Optional[datetime] = None
    location: Optional[str] = None
    notes: Optional[str] = None
    recurrence: Optional[RecurrenceRule] = None
    selected_calendar_id: Optional[str] = None
    was_end_time_inferred: bool = field(default=False)

    REQUIRED_FIELDS = frozenset({"title", "start"})

    def set_end(self, end: Optional[datetime]) -> None:
        """Set an explicit end; an explicit value is never an inferred one."""
        self.end = end
        self.was_end_time_inferred = False

    def set_start(self, start: datetime) -> None:
        """Move the start, carrying an inferred end along so the duration is kept."""
        if self.was_end_time_inferred and self.end is not None:
            self.end = add_elapsed(start, elapsed_between(self.start, self.end))
        self.start = start

    def resolved_end(self, duration) -> datetime:
        """Return the end to write: the explicit end, or ``start + duration``."""
        if self.end is not None:
            return self.end
        return add_elapsed(self.start, duration)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-compatible dictionary (microsecond precision)."""
        return {
            "title": self.title,
            "start": _encode_instant(self.start),
            "end": _encode_instant(self.end),
            "location": self.location,
            "notes": self.notes,
            "recurrence": self.recurrence.to_dict() if self.recurrence else None,
            "selected_calendar_id": self.selected_calendar_id,
            "was_end_time_inferred": self.was_end_time_inferred,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EventDraft":
        """Create an EventDraft from a dictionary produced by ``to_dict``.

        Args:
            data: Dictionary containing draft data.

        Returns:
            The restored EventDraft.

        Raises:
            ValueError: If required fields are missing or malformed.
        """
        if not isinstance(data, dict):
            raise ValueError(f"Draft must be a mapping, got {type(data).__name__}")
        missing = cls.REQUIRED_FIELDS - {k for k, v in data.items() if v is not None}
        if missing:
            raise ValueError(f"Draft is missing required fields: {sorted(missing)}")

        recurrence = data.get("recurrence")
        return cls(
            title=str(data["title"]),
            start=_decode_instant(data["start"], "start"),
            end=_decode_instant(data.get("end"), "end"),
            location=data.get("location"),
            notes=data.get("notes"),
            recurrence=RecurrenceRule.from_dict(recurrence) if recurrence else None,
            selected_calendar_id=data.get("selected_calendar_id"),
            was_end_time_inferred=bool(data.get("was_end_time_inferred", False)),
        )


def _encode_instant(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    return to_iso8601(value, timespec="microseconds")


def _decode_instant(value: Optional[str], field_name: str) -> Optional[datetime]:
    if value is None:
        return None
    decoded = parse_iso8601(value)
    if decoded is None:
        raise InvalidDateFormatError(value, field=field_name)
    return decoded
