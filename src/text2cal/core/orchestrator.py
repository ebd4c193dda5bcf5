"""Turns raw text into a validated EventDraft via the generator."""

import logging
from datetime import datetime, tzinfo
from typing import Optional

import pytz

from text2cal.config.settings import Configuration
from text2cal.core.date_codec import apply_default_duration, parse_iso8601, to_iso8601
from text2cal.core.event_model import EventDraft, Frequency, RecurrenceRule
from text2cal.core.generator import EventGenerator, StructuredEventFields, build_prompt
from text2cal.core.timeout import run_with_timeout
from text2cal.core.timezone_utils import timezone_name
from text2cal.exceptions.errors import (
    GeneratorError,
    InputTooLongError,
    InvalidDateFormatError,
    OperationTimeoutError,
)

logger = logging.getLogger(__name__)


class ParseOrchestrator:
    """Bounded, validated wrapper around an EventGenerator.

    ``parse`` either returns a complete EventDraft or raises one of
    InputTooLongError, OperationTimeoutError, InvalidDateFormatError or
    GeneratorError. It never retries.
    """

    def __init__(self, generator: EventGenerator, config: Optional[Configuration] = None):
        self.generator = generator
        self.config = config or Configuration()

    async def parse(
        self,
        text: str,
        timezone: Optional[tzinfo] = None,
        now: Optional[datetime] = None,
    ) -> EventDraft:
        """Parse natural-language text into an EventDraft.

        Args:
            text: The raw user input.
            timezone: The caller's zone (default: configured override or system zone).
            now: Reference instant sent to the generator (default: current time).

        Returns:
            A new EventDraft with ``end`` always set.

        Raises:
            ValueError: If ``text`` is empty after trimming.
            InputTooLongError: If ``text`` exceeds ``max_input_length``.
            OperationTimeoutError: If the generator exceeds ``parse_timeout_seconds``.
            InvalidDateFormatError: If ``start`` can't be decoded.
            GeneratorError: For any other generator failure.
        """
        trimmed = (text or "").strip()
        if not trimmed:
            raise ValueError("Cannot parse empty text")
        if len(text) > self.config.max_input_length:
            raise InputTooLongError(len(text), self.config.max_input_length)

        tz = timezone or self.config.timezone()
        reference = now or datetime.now(pytz.utc)
        prompt = build_prompt(trimmed, timezone_name(tz), to_iso8601(reference, tz))
        logger.info("parse: input=%r timezone=%s", trimmed, timezone_name(tz))

        try:
            fields = await run_with_timeout(
                self.generator.generate(prompt),
                self.config.parse_timeout_seconds,
                name="parse",
            )
        except (OperationTimeoutError, GeneratorError):
            raise
        except Exception as e:
            logger.error("parse: generator failed: %s (%s)", e, type(e).__name__)
            raise GeneratorError(str(e) or type(e).__name__) from e

        draft = self.build_draft(fields, tz)
        logger.info("parse: successfully parsed event: title=%s start=%s", draft.title, draft.start)
        return draft

    def build_draft(self, fields: StructuredEventFields, tz: tzinfo) -> EventDraft:
        """Validate generator fields and assemble an EventDraft.

        Raises:
            InvalidDateFormatError: If ``start`` can't be decoded. A bad ``end`` is
                dropped and replaced by the default duration.
        """
        start = parse_iso8601(fields.start, tz)
        if start is None:
            logger.error("parse: failed to parse start date: %s", fields.start)
            raise InvalidDateFormatError(fields.start, field="start")

        end = None
        if fields.end is not None:
            end = parse_iso8601(fields.end, tz)
            if end is None:
                logger.warning("parse: undecodable end date '%s', using default duration", fields.end)

        was_end_time_inferred = end is None
        end = apply_default_duration(start, end, self.config.default_duration)

        return EventDraft(
            title=fields.title.strip(),
            start=start,
            end=end,
            location=_clean(fields.location),
            notes=_clean(fields.notes),
            recurrence=self._build_recurrence(fields, start, tz),
            was_end_time_inferred=was_end_time_inferred,
        )

    def _build_recurrence(
        self,
        fields: StructuredEventFields,
        start: datetime,
        tz: tzinfo,
    ) -> Optional[RecurrenceRule]:
        if fields.recurrence_frequency is None:
            return None

        frequency = Frequency.from_string(fields.recurrence_frequency)
        if frequency is None:
            logger.warning(
                "parse: invalid recurrence frequency '%s', ignoring recurrence",
                fields.recurrence_frequency,
            )
            return None

        interval = fields.recurrence_interval
        if not isinstance(interval, int) or isinstance(interval, bool) or interval < 1:
            interval = 1

        end_date = None
        if fields.recurrence_end_date is not None:
            end_date = parse_iso8601(fields.recurrence_end_date, tz)
            if end_date is None:
                logger.warning(
                    "parse: undecodable recurrence end date '%s', dropping it",
                    fields.recurrence_end_date,
                )
        if end_date is not None and end_date <= start:
            logger.warning(
                "parse: recurrence end date %s is not after start %s, dropping it",
                end_date, start,
            )
            end_date = None

        logger.info("parse: parsed recurrence rule: frequency=%s interval=%d", frequency.value, interval)
        return RecurrenceRule(frequency=frequency, interval=interval, end_date=end_date)


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None
