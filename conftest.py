"""Shared fakes and fixtures for the text2cal test suite."""

import asyncio
from typing import Dict, List, Optional

import pytest

from text2cal.config.settings import Configuration
from text2cal.core.calendar_store import CalendarInfo, CalendarStore
from text2cal.core.event_model import EventDraft
from text2cal.core.generator import EventGenerator, StructuredEventFields
from text2cal.exceptions.errors import DeleteFailedError


class FakeGenerator(EventGenerator):
    """Scripted generator: returns ``fields``, raises ``error``, or waits first."""

    def __init__(
        self,
        fields: Optional[StructuredEventFields] = None,
        error: Optional[BaseException] = None,
        delay: float = 0.0,
    ):
        self.fields = fields
        self.error = error
        self.delay = delay
        self.gate: Optional[asyncio.Event] = None
        self.prompts: List[str] = []
        self.finished = 0

    async def generate(self, prompt: str) -> StructuredEventFields:
        self.prompts.append(prompt)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.gate is not None:
            await self.gate.wait()
        self.finished += 1
        if self.error is not None:
            raise self.error
        return self.fields


class FakeCalendarStore(CalendarStore):
    """In-memory calendar store with injectable failures."""

    def __init__(self):
        self.events: Dict[str, EventDraft] = {}
        self.calendars = [
            CalendarInfo("default", "Default"),
            CalendarInfo("work", "Work", "#E53935"),
        ]
        self.default_id = "default"
        self.permission_error: Optional[BaseException] = None
        self.create_error: Optional[BaseException] = None
        self.delete_error: Optional[BaseException] = None
        self.create_delay = 0.0
        self.permission_requests = 0
        self._next_id = 0

    async def request_write_permission_if_needed(self) -> None:
        self.permission_requests += 1
        if self.permission_error is not None:
            raise self.permission_error

    async def list_calendars(self) -> List[CalendarInfo]:
        return list(self.calendars)

    async def get_default_calendar_id(self) -> Optional[str]:
        return self.default_id

    async def create_event(self, draft: EventDraft) -> str:
        if self.create_delay:
            await asyncio.sleep(self.create_delay)
        if self.create_error is not None:
            raise self.create_error
        self._next_id += 1
        event_id = f"evt-{self._next_id}"
        self.events[event_id] = draft
        return event_id

    async def delete_event(self, event_id: str) -> None:
        if self.delete_error is not None:
            raise self.delete_error
        if event_id not in self.events:
            raise DeleteFailedError(f"event {event_id} not found")
        del self.events[event_id]


@pytest.fixture
def lunch_fields() -> StructuredEventFields:
    return StructuredEventFields(
        title="Lunch with Alex",
        start="2025-12-09T13:00:00+09:00",
        location="Shibuya",
    )


@pytest.fixture
def fast_config(tmp_path) -> Configuration:
    """Configuration with short timeouts and paths under ``tmp_path``."""
    return Configuration(
        timezone_override="Asia/Tokyo",
        parse_timeout_seconds=0.2,
        save_timeout_seconds=0.2,
        undo_window_seconds=0.2,
        calendar_root=tmp_path / "calendars",
        draft_path=tmp_path / "config" / "draft.json",
    )


@pytest.fixture
def calendar_store() -> FakeCalendarStore:
    return FakeCalendarStore()
