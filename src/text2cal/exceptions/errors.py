"""Exception hierarchy for text2cal.

Every exception carries a ``user_message`` suitable for display; ``str(exc)``
stays technical for logs.
"""

from typing import Optional


class Text2CalError(Exception):
    """Base class for all text2cal failures."""

    user_message = "Something went wrong."

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.user_message)


class InputTooLongError(Text2CalError):
    """Raised before generation when the input exceeds the configured limit."""

    user_message = "The text is too long."

    def __init__(self, length: int, limit: int):
        self.length = length
        self.limit = limit
        super().__init__(f"Input is {length} characters; the limit is {limit}")


class OperationTimeoutError(Text2CalError):
    """Raised when a generator or calendar-store call does not settle in time."""

    user_message = "Operation timed out. Please try again."

    def __init__(self, timeout: float, operation: str = "operation"):
        self.timeout = timeout
        self.operation = operation
        super().__init__(f"{operation} timed out after {timeout:g}s")


class InvalidDateFormatError(Text2CalError, ValueError):
    """Raised when a generator-supplied date string cannot be decoded."""

    user_message = "Could not understand the date format. Try being more specific."

    def __init__(self, value: Optional[str], field: str = "start"):
        self.value = value
        self.field = field
        super().__init__(f"Invalid ISO-8601 value for {field}: {value!r}")


class GeneratorError(Text2CalError):
    """Raised when the generator fails for any reason other than a timeout."""

    user_message = "Couldn't understand that. Try adding a time or date."


class CalendarStoreError(Text2CalError):
    """Base class for calendar-store failures."""

    user_message = "Couldn't save to Calendar."


class PermissionDeniedError(CalendarStoreError):
    """Raised when write access to the calendar store is denied or restricted."""

    user_message = "Calendar access denied. Please enable in Settings."


class UnknownAuthStatusError(CalendarStoreError):
    """Raised when the store cannot report its authorization state."""

    user_message = "Unable to determine calendar access status."


class SaveFailedError(CalendarStoreError):
    """Raised when the store rejects an event write."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Failed to save event: {reason}")

    @property
    def user_message(self) -> str:  # type: ignore[override]
        return f"Failed to save event: {self.reason}"


class DeleteFailedError(CalendarStoreError):
    """Raised when an event cannot be removed from the store."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Failed to delete event: {reason}")

    @property
    def user_message(self) -> str:  # type: ignore[override]
        return f"Failed to delete event: {self.reason}"
