"""Multi-language keyword and time-pattern detection.

These helpers only feed diagnostic hints after a failed parse ("we found a
date but no time"). They never construct a date.
"""

import re
from typing import List, Optional

from text2cal.config.constants import (
    DATE_KEYWORDS,
    MAX_TITLE_WORDS,
    NUMERIC_TIME_TOKEN_PATTERN,
    TIME_PATTERNS,
    TITLE_STOPWORDS,
)

# Flattened, lowercased keyword table
ALL_DATE_KEYWORDS: List[str] = [
    keyword.lower() for keywords in DATE_KEYWORDS.values() for keyword in keywords
]

TIME_REGEXES = [re.compile(pattern, re.IGNORECASE) for pattern in TIME_PATTERNS.values()]

NUMERIC_TIME_TOKEN = re.compile(NUMERIC_TIME_TOKEN_PATTERN, re.IGNORECASE)


def contains_date_keyword(text: Optional[str]) -> bool:
    """Check whether the text mentions a date word in any supported language.

    Args:
        text: Raw user input.

    Returns:
        True if any keyword from the English, Japanese, Chinese, Korean,
        Spanish, French or German tables occurs in the lowercased text.
    """
    if not text:
        return False
    lowered = text.lower()
    return any(keyword in lowered for keyword in ALL_DATE_KEYWORDS)


def contains_time_pattern(text: Optional[str]) -> bool:
    """Check whether the text contains a clock time or an hour marker.

    Args:
        text: Raw user input.

    Returns:
        True for generic ``14:30`` / ``2pm`` forms and for the Japanese
        (時/午前/午後), Chinese (点/上午/下午) and Korean (시/오전/오후) markers.
    """
    if not text:
        return False
    return any(regex.search(text) for regex in TIME_REGEXES)


def extract_potential_title(text: Optional[str]) -> Optional[str]:
    """Guess an event title from raw input.

    Date/time stopwords and bare clock tokens are dropped; the first
    five remaining words are joined with single spaces.

    Args:
        text: Raw user input.

    Returns:
        The guessed title, or None when nothing usable remains.
    """
    if not text:
        return None

    words = [
        word for word in text.split()
        if word.lower() not in TITLE_STOPWORDS and not NUMERIC_TIME_TOKEN.match(word)
    ]
    if not words:
        return None
    return " ".join(words[:MAX_TITLE_WORDS])
