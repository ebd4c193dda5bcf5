"""
text2cal - Natural Language Calendar Event Creator

Turns free-form, multi-language text into a calendar event draft using
Google's Gemini AI, previews it, saves it to a calendar and offers a short
undo window.
"""

__version__ = "1.0.0"

# Public API - import commonly used components
from text2cal.config.settings import DEFAULT_CONFIG, Configuration
from text2cal.exceptions.errors import (
    CalendarStoreError,
    GeneratorError,
    InputTooLongError,
    InvalidDateFormatError,
    OperationTimeoutError,
    Text2CalError,
)
from text2cal.core.event_model import EventDraft, RecurrenceRule
from text2cal.core.feedback import ParseError
from text2cal.core.orchestrator import ParseOrchestrator
from text2cal.workflow.event_workflow import EventWorkflow

__all__ = [
    # Version
    "__version__",
    # Config
    "DEFAULT_CONFIG",
    "Configuration",
    # Exceptions
    "Text2CalError",
    "InputTooLongError",
    "OperationTimeoutError",
    "InvalidDateFormatError",
    "GeneratorError",
    "CalendarStoreError",
    # Core
    "EventDraft",
    "RecurrenceRule",
    "ParseError",
    "ParseOrchestrator",
    "EventWorkflow",
]
