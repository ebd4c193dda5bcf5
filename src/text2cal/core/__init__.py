"""Core business logic for text2cal."""

from text2cal.core.calendar_store import CalendarInfo, CalendarStore, IcsCalendarStore
from text2cal.core.date_codec import (
    apply_default_duration,
    is_past,
    parse_iso8601,
    to_iso8601,
)
from text2cal.core.event_model import EventDraft, Frequency, RecurrenceRule
from text2cal.core.feedback import ParseError, PartialParseResult
from text2cal.core.generator import EventGenerator, GeminiEventGenerator, StructuredEventFields
from text2cal.core.orchestrator import ParseOrchestrator
from text2cal.core.timeout import run_with_timeout

__all__ = [
    "CalendarInfo",
    "CalendarStore",
    "IcsCalendarStore",
    "apply_default_duration",
    "is_past",
    "parse_iso8601",
    "to_iso8601",
    "EventDraft",
    "Frequency",
    "RecurrenceRule",
    "ParseError",
    "PartialParseResult",
    "EventGenerator",
    "GeminiEventGenerator",
    "StructuredEventFields",
    "ParseOrchestrator",
    "run_with_timeout",
]
