"""User-facing parse/save error values and the failure-to-feedback mapping."""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from text2cal.config import constants
from text2cal.core.text_scanner import (
    contains_date_keyword,
    contains_time_pattern,
    extract_potential_title,
)
from text2cal.exceptions.errors import (
    CalendarStoreError,
    InputTooLongError,
    InvalidDateFormatError,
    OperationTimeoutError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PartialParseResult:
    """What the scanner could still recognize in input that failed to parse."""

    title: Optional[str] = None
    found_date: bool = False
    found_time: bool = False


@dataclass(frozen=True)
class ParseError:
    """Immutable, displayable failure; a retry always produces a new one."""

    message: str
    suggestions: Tuple[str, ...] = field(default_factory=tuple)
    partial_result: Optional[PartialParseResult] = None

    def __post_init__(self):
        # Accept any iterable but store an immutable tuple
        object.__setattr__(self, "suggestions", tuple(self.suggestions))


def scan_partial_result(text: Optional[str]) -> PartialParseResult:
    """Run the multi-language scanner over raw input."""
    return PartialParseResult(
        title=extract_potential_title(text),
        found_date=contains_date_keyword(text),
        found_time=contains_time_pattern(text),
    )


def build_parse_error(error: BaseException, text: Optional[str]) -> ParseError:
    """Convert a parse-path exception into a ParseError.

    Timeouts, undecodable dates and generic failures all carry a partial
    result scanned from ``text``; oversized input does not.

    Args:
        error: The exception raised by the parse orchestrator.
        text: The original user input.

    Returns:
        A ParseError with message, suggestions and partial understanding.
    """
    if isinstance(error, InputTooLongError):
        return ParseError(
            message=constants.MESSAGE_INPUT_TOO_LONG,
            suggestions=_with_limit(constants.SUGGESTIONS_INPUT_TOO_LONG, error.limit),
        )

    if isinstance(error, OperationTimeoutError):
        message, suggestions = constants.MESSAGE_TIMEOUT, constants.SUGGESTIONS_TIMEOUT
    elif isinstance(error, InvalidDateFormatError):
        message, suggestions = constants.MESSAGE_INVALID_DATE, constants.SUGGESTIONS_INVALID_DATE
    else:
        logger.debug("Unclassified parse failure: %s (%s)", error, type(error).__name__)
        message, suggestions = constants.MESSAGE_GENERIC, constants.SUGGESTIONS_GENERIC

    return ParseError(
        message=message,
        suggestions=suggestions,
        partial_result=scan_partial_result(text),
    )


def build_save_error(error: BaseException) -> ParseError:
    """Convert a save-path exception into a ParseError naming the underlying reason."""
    if isinstance(error, (CalendarStoreError, OperationTimeoutError)):
        reason = error.user_message
    else:
        reason = str(error) or type(error).__name__

    return ParseError(
        message=constants.MESSAGE_SAVE_FAILED.format(reason=reason),
        suggestions=constants.SUGGESTIONS_SAVE_FAILED,
    )


def title_required_error() -> ParseError:
    return ParseError(
        message=constants.MESSAGE_TITLE_REQUIRED,
        suggestions=constants.SUGGESTIONS_TITLE_REQUIRED,
    )


def _with_limit(suggestions: List[str], limit: int) -> List[str]:
    return [f"Keep it under {limit} characters"] + list(suggestions)
