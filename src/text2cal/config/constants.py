"""Centralized constants for text2cal.

Keyword tables, stopwords, user-facing messages and storage names live here so
the scanner, the orchestrator and the workflow share a single source.
"""

# Application / storage names
KEYRING_SERVICE_NAME = "Text2Cal"
KEYRING_ACCOUNT_NAME = "gemini_api_key"
DRAFT_STORAGE_KEY = "recoverable_draft"
DRAFT_FILE_NAME = "draft.json"
CALENDAR_DIR_NAME = "calendars"
CALENDAR_META_FILE = "calendar.json"
DEFAULT_CALENDAR_ID = "default"
DEFAULT_CALENDAR_COLOR = "#1E88E5"

# Environment variable names
ENV_PREFIX = "TEXT2CAL_"
PREFERRED_ENV_VAR = "GEMINI_API_KEY_FREE"
PRIMARY_ENV_VAR = "GEMINI_API_KEY"

# ICS calendar constants
ICS_PRODID = "-//Text2Cal//EN"
ICS_VERSION = "2.0"

# Default event title when none provided
DEFAULT_EVENT_TITLE = "No Title"

# Number of words kept by the title guess
MAX_TITLE_WORDS = 5

# Status callback messages
STATUS_PARSING = "Understanding your event..."
STATUS_PREVIEW = "Review the event before saving."
STATUS_SAVING = "Saving to calendar..."
STATUS_SAVED = "Event saved. Undo available for {seconds:.0f} seconds."
STATUS_UNDONE = "Event removed from calendar."
STATUS_UNDO_FAILED = "Couldn't undo: {reason}"
STATUS_CALENDARS_UNAVAILABLE = "Couldn't load calendars: {reason}"
STATUS_DRAFT_RECOVERED = "Recovered your unsaved event."

# Parse-failure messages and suggestions, keyed by failure class
MESSAGE_TIMEOUT = "The operation timed out."
SUGGESTIONS_TIMEOUT = [
    "Try a shorter, simpler sentence",
    "Put the date and time first, e.g. 'Tomorrow 3pm meeting'",
    "Try again in a moment",
]

MESSAGE_INVALID_DATE = "Could not understand the date format."
SUGGESTIONS_INVALID_DATE = [
    "Add an explicit date, e.g. 'Dec 15' or 'next Tuesday'",
    "Add an explicit time, e.g. '3pm' or '15:00'",
    "Avoid ambiguous phrases like 'sometime soon'",
]

MESSAGE_INPUT_TOO_LONG = "That text is too long to turn into a single event."
SUGGESTIONS_INPUT_TOO_LONG = [
    "Shorten the description to the essentials",
    "Split several events into separate entries",
    "Move long details into the notes after previewing",
]

MESSAGE_GENERIC = "Couldn't understand that."
SUGGESTIONS_GENERIC = [
    "Add a time, e.g. '2pm'",
    "Add a date, e.g. 'tomorrow' or 'Friday'",
    "Keep it simple, e.g. 'Lunch with Alex tomorrow 1pm'",
]

MESSAGE_TITLE_REQUIRED = "The event needs a title before it can be saved."
SUGGESTIONS_TITLE_REQUIRED = ["Enter a title in the preview"]

MESSAGE_SAVE_FAILED = "Couldn't save to Calendar: {reason}"
SUGGESTIONS_SAVE_FAILED = ["Check calendar permissions in Settings"]

# Recurrence frequencies accepted from the generator
RECURRENCE_FREQUENCIES = ("daily", "weekly", "monthly", "yearly")

# Date keywords per language, matched as lowercase substrings
DATE_KEYWORDS = {
    "en": [
        "tomorrow", "today", "tonight", "next", "this",
        "monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday",
        "week", "month",
    ],
    "ja": [
        "明日", "今日", "明後日", "来週", "今週", "来月",
        "月曜", "火曜", "水曜", "木曜", "金曜", "土曜", "日曜",
    ],
    "zh": [
        "明天", "今天", "后天", "下周", "这周", "本周", "下个月",
        "星期", "周一", "周二", "周三", "周四", "周五", "周六", "周日",
    ],
    "ko": [
        "내일", "오늘", "모레", "다음 주", "이번 주", "다음 달",
        "월요일", "화요일", "수요일", "목요일", "금요일", "토요일", "일요일",
    ],
    "es": [
        "mañana", "hoy", "próximo", "próxima", "semana",
        "lunes", "martes", "miércoles", "jueves", "viernes", "sábado", "domingo",
    ],
    "fr": [
        "demain", "aujourd'hui", "prochain", "prochaine", "semaine",
        "lundi", "mardi", "mercredi", "jeudi", "vendredi", "samedi", "dimanche",
    ],
    "de": [
        "morgen", "heute", "nächste", "nächsten", "woche",
        "montag", "dienstag", "mittwoch", "donnerstag", "freitag", "samstag", "sonntag",
    ],
}

# Generic clock pattern plus language-specific hour markers
TIME_PATTERNS = {
    "generic": r"\d{1,2}(:\d{2})?\s*(am|pm)?",
    "ja": r"\d{1,2}時|午前|午後",
    "zh": r"\d{1,2}点|上午|下午",
    "ko": r"\d{1,2}시|오전|오후",
}

# Words dropped when guessing a title from raw input
TITLE_STOPWORDS = {
    # English
    "tomorrow", "today", "tonight", "next", "at", "on", "am", "pm", "noon", "midnight",
    "monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday",
    # Japanese / Chinese / Korean
    "明日", "今日", "来週", "午前", "午後",
    "明天", "今天", "下周", "上午", "下午",
    "내일", "오늘", "오전", "오후",
    # Spanish / French / German
    "mañana", "hoy", "demain", "aujourd'hui", "à", "morgen", "heute", "um", "uhr",
}

# Tokens that are nothing but a clock time ("14:00", "3pm", "14時", "오후2시")
NUMERIC_TIME_TOKEN_PATTERN = r"^\d{1,2}([:.]\d{2})?\s*(am|pm|h|時|点|시)?$"

# Timezone abbreviation to IANA zone mapping
# Maps common (and DST) abbreviations to canonical IANA zones that understand DST
ABBR_TO_TZ = {
    # North America
    "EST": "America/New_York",
    "EDT": "America/New_York",
    "CST": "America/Chicago",
    "CDT": "America/Chicago",
    "MST": "America/Denver",
    "MDT": "America/Denver",
    "PST": "America/Los_Angeles",
    "PDT": "America/Los_Angeles",
    # United Kingdom / Europe
    "GMT": "Europe/London",
    "BST": "Europe/London",
    "CET": "Europe/Paris",
    "CEST": "Europe/Paris",
    # Asia / Pacific
    "JST": "Asia/Tokyo",
    "KST": "Asia/Seoul",
    "IST": "Asia/Kolkata",  # India (UTC+5:30 – no DST)
    "AEST": "Australia/Sydney",
    "AEDT": "Australia/Sydney",
}
