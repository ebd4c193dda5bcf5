"""Structured-event generation: the interface and a Gemini-backed implementation."""

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from string import Formatter
from typing import Any, Dict, Optional

from text2cal.config.settings import Configuration
from text2cal.exceptions.errors import GeneratorError
from text2cal.storage.credentials import mask_key

logger = logging.getLogger(__name__)

# Substrings that identify a rejected API key in provider error messages
API_KEY_ERROR_PATTERNS = [
    "api key expired",
    "api_key_invalid",
    "invalid api key",
    "api key not valid",
]


@dataclass
class StructuredEventFields:
    """Raw fields returned by a generator, before any validation."""

    title: str
    start: str
    end: Optional[str] = None
    location: Optional[str] = None
    notes: Optional[str] = None
    recurrence_frequency: Optional[str] = None
    recurrence_interval: Optional[int] = None
    recurrence_end_date: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StructuredEventFields":
        """Build from a generator's JSON object (camelCase or snake_case keys).

        Raises:
            GeneratorError: If ``title`` or ``start`` is missing.
        """
        def pick(*keys):
            for key in keys:
                value = data.get(key)
                if value not in (None, ""):
                    return value
            return None

        title = pick("title")
        start = pick("start")
        if title is None or start is None:
            raise GeneratorError(f"Generator output is missing title/start: {sorted(data)}")

        interval = pick("recurrenceInterval", "recurrence_interval")
        return cls(
            title=str(title),
            start=str(start),
            end=_optional_str(pick("end")),
            location=_optional_str(pick("location")),
            notes=_optional_str(pick("notes")),
            recurrence_frequency=_optional_str(pick("recurrenceFrequency", "recurrence_frequency")),
            recurrence_interval=interval if isinstance(interval, int) else _to_int(interval),
            recurrence_end_date=_optional_str(pick("recurrenceEndDate", "recurrence_end_date")),
        )


def _optional_str(value: Any) -> Optional[str]:
    return None if value is None else str(value)


def _to_int(value: Any) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


class EventGenerator(ABC):
    """Turns a prompt into structured event fields; may be slow or fail."""

    @abstractmethod
    async def generate(self, prompt: str) -> StructuredEventFields:
        """Generate fields for ``prompt``.

        Raises:
            Exception: Any failure; the caller classifies it.
        """


# Template for user prompts (with dynamic placeholders)
USER_PROMPT_TEMPLATE = """Parse this natural language text into a calendar event:
"{event_text}"

Context:
- Current timezone: {timezone_id}
- Today's date/time: {now_iso}
"""

PROMPT_KEYS = {"event_text", "timezone_id", "now_iso"}


def build_prompt(event_text: str, timezone_id: str, now_iso: str) -> str:
    """Fill the user prompt with the raw text and the caller's time context."""
    return USER_PROMPT_TEMPLATE.format(
        event_text=event_text,
        timezone_id=timezone_id,
        now_iso=now_iso,
    )


def _validate_prompt_template() -> None:
    found_keys = {fn for _, fn, _, _ in Formatter().parse(USER_PROMPT_TEMPLATE) if fn}
    if found_keys != PROMPT_KEYS:
        raise ValueError(f"Template mismatch! Expected keys {PROMPT_KEYS} but got {found_keys}")


_validate_prompt_template()


class GeminiEventGenerator(EventGenerator):
    """Generator backed by Google's Gemini models."""

    SYSTEM_PROMPT = """
You are a multilingual calendar event parser. Parse natural language text into one structured calendar event.
You understand English, Japanese, Chinese, Korean, Spanish, French and German.
Always use ISO-8601 format with a numeric timezone offset for dates (e.g., 2025-10-12T14:00:00+09:00).
Output the title in the SAME LANGUAGE as the input text.

Date interpretation:
- You are given the current date/time and timezone in each request
- If only a time is given, assume the next occurrence of that time
- If no end time is given, leave "end" out (a default duration is applied later)
- Interpret relative dates ("tomorrow", "明日", "demain", "nächste Woche") from the current date

Fields (JSON object, omit optional fields that are not mentioned):
  - "title"              : concise event name, typically 2-5 words (REQUIRED)
  - "start"              : ISO-8601 start with offset (REQUIRED)
  - "end"                : ISO-8601 end with offset
  - "location"           : venue, only if explicitly mentioned (@, で, 在, 에서, en, à, im/bei)
  - "notes"              : remaining details, participants, description
  - "recurrenceFrequency": one of "daily", "weekly", "monthly", "yearly"
  - "recurrenceInterval" : integer >= 1 (e.g. 2 for every other week)
  - "recurrenceEndDate"  : ISO-8601 date-time when the repetition stops

Example:
Input: "Lunch with Alex next Tue 1pm @Shibuya"
Output: {"title": "Lunch with Alex", "start": "2025-12-09T13:00:00+09:00", "location": "Shibuya"}

Return ONLY the JSON object, with no introductory text or explanations.
"""

    def __init__(self, api_key: str, config: Optional[Configuration] = None):
        """Initialize the generator with the given API key.

        Args:
            api_key: The Gemini API key.
            config: Model settings (default: ``Configuration()``).
        """
        # Import genai here for lazy loading
        import google.generativeai as genai

        config = config or Configuration()
        self.genai = genai
        self.api_key_masked = mask_key(api_key)
        self.genai.configure(api_key=api_key)

        self.generation_config = {
            "temperature": config.temperature,
            "max_output_tokens": config.max_output_tokens,
            "response_mime_type": "application/json",
        }
        self.model = self.genai.GenerativeModel(
            model_name=config.model_name,
            generation_config=self.generation_config,
            system_instruction=self.SYSTEM_PROMPT,
        )
        logger.debug("Gemini generator ready (model=%s, key=%s)", config.model_name, self.api_key_masked)

    async def generate(self, prompt: str) -> StructuredEventFields:
        logger.debug("Generated API prompt (first 200 chars): %s", prompt[:200])

        try:
            response = await self.model.generate_content_async(prompt)
        except Exception as e:
            if is_api_key_error(e):
                logger.error("API key error (%s): %s", self.api_key_masked, e)
                raise GeneratorError("API key is invalid or expired. Please check your Gemini API key.") from e
            raise

        response_text = self._extract_text(response)
        if not response_text:
            raise GeneratorError("Received empty response from API")

        logger.debug("Raw API Response: %s", response_text)
        return StructuredEventFields.from_dict(parse_json_object(response_text))

    def _extract_text(self, response) -> Optional[str]:
        """Extract text from an API response, falling back to its parts."""
        try:
            text = getattr(response, "text", None)
        except ValueError:
            # Blocked or empty candidates raise on .text
            text = None
        if text:
            return text

        parts = getattr(response, "parts", None) or []
        return "".join(part.text for part in parts if hasattr(part, "text")) or None


def parse_json_object(response_text: str) -> Dict[str, Any]:
    """Parse a generator reply into a dict, tolerating markdown code fences.

    Raises:
        GeneratorError: If the reply isn't a JSON object.
    """
    cleaned = response_text.strip()
    if cleaned.startswith("```"):
        first_newline = cleaned.find("\n")
        cleaned = cleaned[first_newline + 1:] if first_newline != -1 else cleaned[3:]
        if cleaned.endswith("```"):
            cleaned = cleaned[:-3]
        cleaned = cleaned.strip()

    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        logger.debug("Failed to decode JSON: %s; received text was: %s", e, cleaned)
        raise GeneratorError(f"LLM returned invalid JSON: {e}") from e

    # Tolerate a one-element array
    if isinstance(data, list) and len(data) == 1:
        data = data[0]
    if not isinstance(data, dict):
        raise GeneratorError(f"Expected a JSON object, got {type(data).__name__}")
    return data


def is_api_key_error(error: Exception) -> bool:
    """Check if error is related to API key issues."""
    error_str = str(error).lower()
    return any(pattern in error_str for pattern in API_KEY_ERROR_PATTERNS)
