"""ISO-8601 parsing/formatting and default-duration helpers.

Only the RFC 3339 "internet date-time" profile is accepted:
``YYYY-MM-DDTHH:MM:SS[.fraction](Z|+HH:MM|-HH:MM)``. The explicit offset in
the string decides the absolute instant; the timezone argument only decides
which zone the returned datetime is expressed in.
"""

import logging
import re
from datetime import datetime, timedelta, tzinfo
from typing import Optional

import pytz
from dateutil import tz as du_tz

logger = logging.getLogger(__name__)

# Default event duration (60 minutes)
DEFAULT_DURATION = timedelta(seconds=3600)

_DATE_TIME = r"(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2}):(\d{2})"
_OFFSET = r"(Z|[+-]\d{2}:\d{2})"

ISO8601_FRACTIONAL = re.compile(rf"^{_DATE_TIME}\.(\d+){_OFFSET}$")
ISO8601_PLAIN = re.compile(rf"^{_DATE_TIME}{_OFFSET}$")


def parse_iso8601(text: Optional[str], timezone: Optional[tzinfo] = None) -> Optional[datetime]:
    """Parse an ISO-8601 string into an aware datetime.

    The fractional-seconds grammar is tried first, then the plain one.
    Malformed strings and impossible calendar dates (month 13, Feb 29 in a
    non-leap year) return ``None`` instead of raising.

    Args:
        text: The string to parse.
        timezone: Zone the result is expressed in (default: the string's own offset).

    Returns:
        An aware datetime, or None if the string is not a valid date-time.
    """
    if not isinstance(text, str):
        logger.debug("parse_iso8601: non-string input %r", text)
        return None

    candidate = text.strip()
    logger.debug("parse_iso8601: attempting to parse input=%s", candidate)

    result = _build(ISO8601_FRACTIONAL.match(candidate), fractional=True)
    if result is None:
        logger.debug("parse_iso8601: fractional seconds failed, trying without fractional seconds")
        result = _build(ISO8601_PLAIN.match(candidate), fractional=False)

    if result is None:
        logger.debug("parse_iso8601: all parsing attempts failed for input=%s", candidate)
        return None

    if timezone is not None:
        result = result.astimezone(timezone)
    return result


def _build(match: Optional["re.Match"], fractional: bool) -> Optional[datetime]:
    if match is None:
        return None

    groups = match.groups()
    year, month, day, hour, minute, second = (int(g) for g in groups[:6])
    microsecond = 0
    if fractional:
        # Keep microsecond precision, drop anything finer
        microsecond = int(groups[6][:6].ljust(6, "0"))
    offset = _offset_tz(groups[-1])
    if offset is None:
        return None

    try:
        return datetime(year, month, day, hour, minute, second, microsecond, tzinfo=offset)
    except ValueError as e:
        logger.debug("parse_iso8601: invalid calendar value: %s", e)
        return None


def _offset_tz(designator: str) -> Optional[tzinfo]:
    if designator == "Z":
        return du_tz.tzutc()

    sign = -1 if designator[0] == "-" else 1
    hours, minutes = int(designator[1:3]), int(designator[4:6])
    if hours > 23 or minutes > 59:
        return None
    seconds = sign * (hours * 3600 + minutes * 60)
    if seconds == 0:
        return du_tz.tzutc()
    return du_tz.tzoffset(None, seconds)


def to_iso8601(
    instant: datetime,
    timezone: Optional[tzinfo] = None,
    timespec: str = "milliseconds",
) -> str:
    """Format an aware datetime as ISO-8601 with fractional seconds.

    The offset reflects ``timezone`` at that instant (DST aware); a zero
    offset is written as ``Z``.

    Args:
        instant: Aware datetime to format.
        timezone: Zone to express the instant in (default: the instant's own zone).
        timespec: "milliseconds" or "microseconds".

    Returns:
        The formatted string, e.g. ``2025-12-15T14:30:45.000+09:00``.

    Raises:
        ValueError: If ``instant`` is naive or ``timespec`` is unknown.
    """
    if instant.tzinfo is None or instant.utcoffset() is None:
        raise ValueError("Cannot format a naive datetime as ISO-8601")

    local = instant.astimezone(timezone) if timezone is not None else instant

    if timespec == "milliseconds":
        fraction = f"{local.microsecond // 1000:03d}"
    elif timespec == "microseconds":
        fraction = f"{local.microsecond:06d}"
    else:
        raise ValueError(f"Unknown timespec: {timespec}")

    result = (
        f"{local.year:04d}-{local.month:02d}-{local.day:02d}"
        f"T{local.hour:02d}:{local.minute:02d}:{local.second:02d}.{fraction}"
        f"{_format_offset(local.utcoffset())}"
    )
    logger.debug("to_iso8601: instant=%s result=%s", instant, result)
    return result


def _format_offset(offset: timedelta) -> str:
    total = int(offset.total_seconds())
    if total == 0:
        return "Z"
    sign = "-" if total < 0 else "+"
    hours, remainder = divmod(abs(total), 3600)
    return f"{sign}{hours:02d}:{remainder // 60:02d}"


def apply_default_duration(
    start: datetime,
    end: Optional[datetime],
    duration: timedelta = DEFAULT_DURATION,
) -> datetime:
    """Return ``end`` unchanged when present, otherwise ``start + duration``."""
    if end is not None:
        return end

    final_end = add_elapsed(start, duration)
    logger.debug(
        "apply_default_duration: applied %ss to start=%s -> end=%s",
        duration.total_seconds(), start, final_end,
    )
    return final_end


def is_past(instant: datetime, now: Optional[datetime] = None) -> bool:
    """Return True if ``instant`` is strictly before now (evaluated per call)."""
    reference = now if now is not None else datetime.now(pytz.utc)
    return instant < reference


def add_elapsed(instant: datetime, delta: timedelta) -> datetime:
    """Add real elapsed time, not wall-clock time, keeping the instant's zone."""
    if instant.tzinfo is None:
        return instant + delta
    return (instant.astimezone(pytz.utc) + delta).astimezone(instant.tzinfo)


def elapsed_between(earlier: datetime, later: datetime) -> timedelta:
    """Real elapsed time from ``earlier`` to ``later``, independent of DST."""
    return later.astimezone(pytz.utc) - earlier.astimezone(pytz.utc)
