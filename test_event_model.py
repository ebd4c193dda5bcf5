from datetime import datetime, timedelta

import pytest
import pytz

from text2cal.core.event_model import EventDraft, Frequency, RecurrenceRule
from text2cal.exceptions.errors import InvalidDateFormatError

TOKYO = pytz.timezone("Asia/Tokyo")


def _draft(**overrides) -> EventDraft:
    start = TOKYO.localize(datetime(2025, 12, 9, 13, 0, 0, 123456))
    values = dict(
        title="Lunch with Alex",
        start=start,
        end=start + timedelta(hours=1),
        location="Shibuya",
        was_end_time_inferred=True,
    )
    values.update(overrides)
    return EventDraft(**values)


def test_to_dict_round_trip_is_lossless():
    draft = _draft(
        notes="Bring the slides",
        selected_calendar_id="work",
        recurrence=RecurrenceRule(
            Frequency.WEEKLY,
            interval=2,
            end_date=TOKYO.localize(datetime(2026, 3, 1, 13, 0)),
        ),
    )

    restored = EventDraft.from_dict(draft.to_dict())

    assert restored == draft
    assert restored.start.microsecond == 123456


def test_from_dict_requires_title_and_start():
    data = _draft().to_dict()
    del data["start"]
    with pytest.raises(ValueError):
        EventDraft.from_dict(data)


def test_from_dict_rejects_non_mappings():
    with pytest.raises(ValueError):
        EventDraft.from_dict("x")
    with pytest.raises(ValueError):
        RecurrenceRule.from_dict("weekly")

    data = _draft().to_dict()
    data["recurrence"] = ["weekly"]
    with pytest.raises(ValueError):
        EventDraft.from_dict(data)


def test_from_dict_rejects_bad_dates():
    data = _draft().to_dict()
    data["end"] = "yesterday-ish"
    with pytest.raises(InvalidDateFormatError):
        EventDraft.from_dict(data)


def test_set_end_clears_inferred_flag():
    draft = _draft()
    assert draft.was_end_time_inferred

    draft.set_end(draft.start + timedelta(minutes=90))

    assert not draft.was_end_time_inferred
    assert draft.end - draft.start == timedelta(minutes=90)


def test_set_start_moves_inferred_end():
    draft = _draft()
    new_start = draft.start + timedelta(days=1)

    draft.set_start(new_start)

    assert draft.start == new_start
    assert draft.end - draft.start == timedelta(hours=1)


def test_set_start_leaves_explicit_end():
    draft = _draft(was_end_time_inferred=False)
    original_end = draft.end

    draft.set_start(draft.start - timedelta(hours=2))

    assert draft.end == original_end


def test_resolved_end_falls_back_to_duration():
    draft = _draft(end=None, was_end_time_inferred=False)
    assert draft.resolved_end(timedelta(minutes=45)) - draft.start == timedelta(minutes=45)


def test_frequency_lookup_is_case_insensitive():
    assert Frequency.from_string(" Weekly ") is Frequency.WEEKLY
    assert Frequency.from_string("fortnightly") is None
    assert Frequency.from_string(None) is None


def test_recurrence_interval_must_be_positive():
    with pytest.raises(ValueError):
        RecurrenceRule(Frequency.DAILY, interval=0)
