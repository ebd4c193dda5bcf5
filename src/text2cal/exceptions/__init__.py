"""Custom exceptions for text2cal."""

from text2cal.exceptions.errors import (
    Text2CalError,
    InputTooLongError,
    OperationTimeoutError,
    InvalidDateFormatError,
    GeneratorError,
    CalendarStoreError,
    PermissionDeniedError,
    UnknownAuthStatusError,
    SaveFailedError,
    DeleteFailedError,
)

__all__ = [
    "Text2CalError",
    "InputTooLongError",
    "OperationTimeoutError",
    "InvalidDateFormatError",
    "GeneratorError",
    "CalendarStoreError",
    "PermissionDeniedError",
    "UnknownAuthStatusError",
    "SaveFailedError",
    "DeleteFailedError",
]
