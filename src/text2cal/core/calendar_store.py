"""Calendar store interface and a local iCalendar-file implementation."""

import json
import logging
import os
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path
from typing import List, Optional

import pytz
from icalendar import Calendar, Event, vRecur, vText

from text2cal.config.constants import (
    CALENDAR_META_FILE,
    DEFAULT_CALENDAR_COLOR,
    DEFAULT_CALENDAR_ID,
    DEFAULT_EVENT_TITLE,
    ICS_PRODID,
    ICS_VERSION,
)
from text2cal.core.date_codec import DEFAULT_DURATION
from text2cal.core.event_model import EventDraft
from text2cal.exceptions.errors import (
    DeleteFailedError,
    PermissionDeniedError,
    SaveFailedError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CalendarInfo:
    """A writable calendar collection."""

    id: str
    display_name: str
    color: str = DEFAULT_CALENDAR_COLOR


class CalendarStore(ABC):
    """Where saved events go. All methods may suspend."""

    @abstractmethod
    async def request_write_permission_if_needed(self) -> None:
        """Ensure write access.

        Raises:
            PermissionDeniedError: If access is denied or restricted.
            UnknownAuthStatusError: If the status can't be determined.
        """

    @abstractmethod
    async def list_calendars(self) -> List[CalendarInfo]:
        """Return the writable calendars."""

    @abstractmethod
    async def get_default_calendar_id(self) -> Optional[str]:
        """Return the id new events go to when none is selected."""

    @abstractmethod
    async def create_event(self, draft: EventDraft) -> str:
        """Write ``draft`` and return the store's event id.

        Raises:
            SaveFailedError: If the write fails.
        """

    @abstractmethod
    async def delete_event(self, event_id: str) -> None:
        """Remove a previously created event.

        Raises:
            DeleteFailedError: If the event can't be removed.
        """


class IcsCalendarStore(CalendarStore):
    """Stores each event as an ``.ics`` file; each sub-directory is a calendar."""

    def __init__(self, root: Path, default_duration: timedelta = DEFAULT_DURATION):
        self.root = Path(root)
        self.default_duration = default_duration

    async def request_write_permission_if_needed(self) -> None:
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error("Calendar root %s can't be created: %s", self.root, e)
            raise PermissionDeniedError(str(e)) from e

        if not os.access(self.root, os.W_OK | os.X_OK):
            logger.error("Calendar root %s is not writable", self.root)
            raise PermissionDeniedError(f"{self.root} is not writable")

    async def list_calendars(self) -> List[CalendarInfo]:
        if not self.root.exists():
            return [CalendarInfo(DEFAULT_CALENDAR_ID, DEFAULT_CALENDAR_ID.title())]

        calendars = [self._read_calendar_info(path) for path in sorted(self.root.iterdir()) if path.is_dir()]
        if not any(cal.id == DEFAULT_CALENDAR_ID for cal in calendars):
            calendars.insert(0, CalendarInfo(DEFAULT_CALENDAR_ID, DEFAULT_CALENDAR_ID.title()))
        return calendars

    async def get_default_calendar_id(self) -> Optional[str]:
        return DEFAULT_CALENDAR_ID

    async def create_event(self, draft: EventDraft) -> str:
        calendar_dir = self.root / DEFAULT_CALENDAR_ID
        if draft.selected_calendar_id:
            selected = self._calendar_dir(draft.selected_calendar_id)
            if selected is None:
                logger.warning("add: unknown calendar '%s', using default", draft.selected_calendar_id)
            else:
                calendar_dir = selected

        uid = f"{uuid.uuid4()}@text2cal"
        logger.info(
            "add: creating event title='%s' start=%s recurrence=%s calendar=%s",
            draft.title, draft.start, draft.recurrence, calendar_dir.name,
        )

        try:
            calendar_dir.mkdir(parents=True, exist_ok=True)
            cal = build_calendar(draft, uid, self.default_duration)
            (calendar_dir / _file_name(uid)).write_bytes(cal.to_ical())
        except OSError as e:
            logger.error("add: failed to save event: %s", e)
            raise SaveFailedError(str(e)) from e

        logger.info("add: successfully saved event with ID=%s", uid)
        return uid

    async def delete_event(self, event_id: str) -> None:
        name = _file_name(event_id)
        matches = list(self.root.glob(f"*/{name}")) if self.root.exists() else []
        if not matches:
            raise DeleteFailedError(f"event {event_id} not found")

        for path in matches:
            try:
                path.unlink()
            except OSError as e:
                logger.error("delete: failed to remove %s: %s", path, e)
                raise DeleteFailedError(str(e)) from e
        logger.info("delete: removed event %s", event_id)

    def _calendar_dir(self, calendar_id: str) -> Optional[Path]:
        """Return the existing calendar directory for ``calendar_id``, or None.

        Only a direct sub-directory of the root counts; ids such as ``..``
        or ``a/b`` never resolve to a calendar.
        """
        if calendar_id in ("", ".", ".."):
            return None
        calendar_dir = self.root / calendar_id
        if not calendar_dir.is_dir():
            return None
        if calendar_dir.resolve().parent != self.root.resolve():
            return None
        return calendar_dir

    def _read_calendar_info(self, path: Path) -> CalendarInfo:
        meta_path = path / CALENDAR_META_FILE
        display_name, color = path.name, DEFAULT_CALENDAR_COLOR
        if meta_path.exists():
            try:
                meta = json.loads(meta_path.read_text(encoding="utf-8"))
                display_name = meta.get("display_name") or display_name
                color = meta.get("color") or color
            except (OSError, ValueError) as e:
                logger.warning("Ignoring unreadable calendar metadata %s: %s", meta_path, e)
        return CalendarInfo(id=path.name, display_name=display_name, color=color)


def build_calendar(draft: EventDraft, uid: str, duration: timedelta = DEFAULT_DURATION) -> Calendar:
    """Build a VCALENDAR holding a single VEVENT for ``draft``.

    Args:
        draft: The event to serialize.
        uid: The UID to stamp on the event.
        duration: Length used when ``draft`` has no end.

    Returns:
        The icalendar Calendar object.
    """
    cal = Calendar()
    cal.add("PRODID", ICS_PRODID)
    cal.add("VERSION", ICS_VERSION)

    ve = Event()
    ve.add("UID", uid)
    ve.add("DTSTAMP", datetime.now(pytz.utc))
    ve.add("DTSTART", draft.start.astimezone(pytz.utc))
    ve.add("DTEND", draft.resolved_end(duration).astimezone(pytz.utc))
    ve.add("SUMMARY", vText(draft.title or DEFAULT_EVENT_TITLE))

    if draft.location:
        ve.add("LOCATION", vText(draft.location))
    if draft.notes:
        ve.add("DESCRIPTION", vText(draft.notes))

    if draft.recurrence:
        rule = {
            "FREQ": draft.recurrence.frequency.value.upper(),
            "INTERVAL": draft.recurrence.interval,
        }
        if draft.recurrence.end_date is not None:
            rule["UNTIL"] = draft.recurrence.end_date.astimezone(pytz.utc)
        ve.add("RRULE", vRecur(rule))

    cal.add_component(ve)
    return cal


def _file_name(event_id: str) -> str:
    # UIDs contain '@', which is fine in file names but not path separators
    return event_id.replace("/", "_") + ".ics"
