import asyncio

from conftest import FakeCalendarStore
from text2cal.__main__ import _list_calendars, parse_args
from text2cal.exceptions.errors import PermissionDeniedError, UnknownAuthStatusError


def test_list_calendars_marks_default(capsys):
    store = FakeCalendarStore()

    assert asyncio.run(_list_calendars(store)) == 0

    lines = capsys.readouterr().out.splitlines()
    assert lines[0].startswith("* default")
    assert lines[1].startswith("  work")


def test_list_calendars_reports_permission_denied(capsys):
    store = FakeCalendarStore()
    store.permission_error = PermissionDeniedError("/calendars is not writable")

    assert asyncio.run(_list_calendars(store)) == 1

    captured = capsys.readouterr()
    assert captured.out == ""
    assert PermissionDeniedError.user_message in captured.err


def test_list_calendars_reports_unknown_auth_status(capsys):
    store = FakeCalendarStore()
    store.permission_error = UnknownAuthStatusError()

    assert asyncio.run(_list_calendars(store)) == 1
    assert UnknownAuthStatusError.user_message in capsys.readouterr().err


def test_parse_args_collects_text_and_flags():
    args = parse_args(["Lunch", "tomorrow", "--yes", "--calendar", "work"])

    assert args.text == ["Lunch", "tomorrow"]
    assert args.yes
    assert args.calendar == "work"
    assert not args.list_calendars
