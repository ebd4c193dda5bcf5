"""Timezone resolution utilities."""

import logging
from datetime import tzinfo
from typing import Optional, Tuple

import pytz
import tzlocal
from dateutil import tz as du_tz

from text2cal.config.constants import ABBR_TO_TZ

logger = logging.getLogger(__name__)


def resolve_timezone(tz_str: Optional[str]) -> Tuple[tzinfo, Optional[str]]:
    """Resolve a timezone string to a timezone object.

    Args:
        tz_str: The timezone string (e.g., "JST", "America/New_York", "local").
            ``None`` or an empty string means the system zone.

    Returns:
        Tuple of (timezone_object, warning_message or None).
    """
    tz_str_raw = (tz_str or "local").strip() or "local"
    tz_upper = tz_str_raw.upper()
    warning = None

    if tz_upper == "LOCAL":
        # User's system zone (DST aware)
        return local_timezone(), None

    if tz_upper in ("UTC", "Z"):
        return pytz.utc, None

    tz_name = ABBR_TO_TZ.get(tz_upper, tz_str_raw)

    try:
        resolved = pytz.timezone(tz_name)
    except pytz.UnknownTimeZoneError:
        # Last-ditch attempt with dateutil (may return fixed offset)
        resolved = du_tz.gettz(tz_name)
        if resolved is None:
            resolved = pytz.utc
            warning = f"Couldn't resolve timezone '{tz_str_raw}' - using UTC."
            logger.warning(warning)

    return resolved, warning


def local_timezone() -> tzinfo:
    """Return the system timezone, falling back to UTC when it can't be determined."""
    try:
        return tzlocal.get_localzone()
    except Exception as e:
        logger.warning("Could not determine system timezone, using UTC: %s", e)
        return pytz.utc


def timezone_name(tzobj: tzinfo) -> str:
    """Best-effort IANA identifier for a tzinfo, used in generator prompts.

    Args:
        tzobj: A pytz, zoneinfo or dateutil timezone.

    Returns:
        The identifier (e.g. "Asia/Tokyo"), or the tzinfo's string form.
    """
    for attr in ("key", "zone"):
        value = getattr(tzobj, attr, None)
        if isinstance(value, str) and value:
            return value
    return str(tzobj)
