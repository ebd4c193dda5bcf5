"""End-to-end workflow scenarios against fake generator and calendar store."""

import asyncio
from datetime import timedelta

from conftest import FakeCalendarStore, FakeGenerator
from text2cal.config import constants
from text2cal.core.generator import StructuredEventFields
from text2cal.core.orchestrator import ParseOrchestrator
from text2cal.exceptions.errors import DeleteFailedError, PermissionDeniedError, SaveFailedError
from text2cal.storage.draft_store import MemoryDraftStore
from text2cal.workflow import Error, EventWorkflow, Idle, Preview, Saved


def _workflow(generator, store, config, draft_store=None, notices=None):
    return EventWorkflow(
        orchestrator=ParseOrchestrator(generator, config),
        calendar_store=store,
        draft_store=draft_store if draft_store is not None else MemoryDraftStore(),
        config=config,
        status_callback=notices.append if notices is not None else None,
    )


def test_parse_enters_preview_and_loads_calendars(lunch_fields, calendar_store, fast_config):
    workflow = _workflow(FakeGenerator(lunch_fields), calendar_store, fast_config)

    asyncio.run(workflow.parse("Lunch with Alex next Tue 1pm @Shibuya"))

    assert isinstance(workflow.state, Preview)
    assert workflow.editable_draft.title == "Lunch with Alex"
    assert [cal.id for cal in workflow.available_calendars] == ["default", "work"]
    assert workflow.selected_calendar_id == "default"
    assert workflow.has_recoverable_draft()


def test_empty_text_is_a_no_op(lunch_fields, calendar_store, fast_config):
    generator = FakeGenerator(lunch_fields)
    workflow = _workflow(generator, calendar_store, fast_config)

    asyncio.run(workflow.parse("   "))

    assert isinstance(workflow.state, Idle)
    assert generator.prompts == []


def test_timeout_enters_error_and_late_result_is_ignored(lunch_fields, calendar_store, fast_config):
    generator = FakeGenerator(lunch_fields, delay=0.5)
    config = fast_config.with_overrides(parse_timeout_seconds=0.05)
    workflow = _workflow(generator, calendar_store, config)

    async def scenario():
        await workflow.parse("Lunch tomorrow 1pm")
        # Give the abandoned call time to have finished had it not been cancelled
        await asyncio.sleep(0.6)

    asyncio.run(scenario())

    assert isinstance(workflow.state, Error)
    error = workflow.state.error
    assert error.message == constants.MESSAGE_TIMEOUT
    assert error.partial_result.found_date
    assert error.partial_result.found_time
    assert error.partial_result.title == "Lunch"
    assert workflow.editable_draft is None


def test_input_too_long_error_has_no_partial_result(lunch_fields, calendar_store, fast_config):
    config = fast_config.with_overrides(max_input_length=20)
    workflow = _workflow(FakeGenerator(lunch_fields), calendar_store, config)

    asyncio.run(workflow.parse("Lunch with Alex next Tuesday at one"))

    error = workflow.state.error
    assert error.message == constants.MESSAGE_INPUT_TOO_LONG
    assert error.partial_result is None
    assert error.suggestions[0] == "Keep it under 20 characters"


def test_invalid_date_error(calendar_store, fast_config):
    fields = StructuredEventFields(title="Lunch", start="sometime")
    workflow = _workflow(FakeGenerator(fields), calendar_store, fast_config)

    asyncio.run(workflow.parse("Lunch sometime"))

    assert workflow.state.error.message == constants.MESSAGE_INVALID_DATE
    assert workflow.state.error.partial_result is not None


def test_generic_failure_still_scans_input(calendar_store, fast_config):
    workflow = _workflow(FakeGenerator(error=RuntimeError("boom")), calendar_store, fast_config)

    asyncio.run(workflow.parse("Random text"))

    error = workflow.state.error
    assert error.message == constants.MESSAGE_GENERIC
    assert not error.partial_result.found_date
    assert not error.partial_result.found_time


def test_reset_discards_in_flight_parse(lunch_fields, calendar_store, fast_config):
    generator = FakeGenerator(lunch_fields)
    workflow = _workflow(generator, calendar_store, fast_config)

    async def scenario():
        generator.gate = asyncio.Event()
        task = asyncio.ensure_future(workflow.parse("Lunch with Alex"))
        await asyncio.sleep(0)
        workflow.reset()
        generator.gate.set()
        await task

    asyncio.run(scenario())

    assert isinstance(workflow.state, Idle)
    assert generator.finished == 1
    assert workflow.editable_draft is None
    assert workflow.text == ""


def test_save_then_undo_within_window(lunch_fields, calendar_store, fast_config):
    notices = []
    workflow = _workflow(FakeGenerator(lunch_fields), calendar_store, fast_config, notices=notices)

    async def scenario():
        await workflow.parse("Lunch with Alex next Tue 1pm @Shibuya")
        await workflow.save()
        assert isinstance(workflow.state, Saved)
        assert workflow.can_undo
        assert len(calendar_store.events) == 1
        return await workflow.undo()

    assert asyncio.run(scenario()) is True
    assert isinstance(workflow.state, Idle)
    assert calendar_store.events == {}
    assert not workflow.has_recoverable_draft()
    assert constants.STATUS_UNDONE in notices


def test_undo_after_window_is_a_no_op(lunch_fields, calendar_store, fast_config):
    workflow = _workflow(FakeGenerator(lunch_fields), calendar_store, fast_config)

    async def scenario():
        await workflow.parse("Lunch with Alex")
        await workflow.save()
        await asyncio.sleep(fast_config.undo_window_seconds + 0.1)
        assert not workflow.can_undo
        return await workflow.undo()

    assert asyncio.run(scenario()) is False
    assert isinstance(workflow.state, Saved)
    assert len(calendar_store.events) == 1


def test_undo_failure_stays_saved(lunch_fields, calendar_store, fast_config):
    notices = []
    workflow = _workflow(FakeGenerator(lunch_fields), calendar_store, fast_config, notices=notices)

    async def scenario():
        await workflow.parse("Lunch with Alex")
        await workflow.save()
        calendar_store.delete_error = DeleteFailedError("locked")
        return await workflow.undo()

    assert asyncio.run(scenario()) is False
    assert isinstance(workflow.state, Saved)
    assert workflow.last_undo_error == "Failed to delete event: locked"
    assert constants.STATUS_UNDO_FAILED.format(reason="Failed to delete event: locked") in notices


def test_saved_draft_gets_default_duration_when_end_missing(lunch_fields, calendar_store, fast_config):
    workflow = _workflow(FakeGenerator(lunch_fields), calendar_store, fast_config)

    async def scenario():
        await workflow.parse("Lunch with Alex")
        workflow.set_end(None)
        await workflow.save()

    asyncio.run(scenario())

    saved = next(iter(calendar_store.events.values()))
    assert saved.end - saved.start == timedelta(hours=1)
    assert saved.was_end_time_inferred


def test_save_failure_enters_error(lunch_fields, calendar_store, fast_config):
    calendar_store.create_error = SaveFailedError("disk full")
    workflow = _workflow(FakeGenerator(lunch_fields), calendar_store, fast_config)

    async def scenario():
        await workflow.parse("Lunch with Alex")
        await workflow.save()

    asyncio.run(scenario())

    assert isinstance(workflow.state, Error)
    assert workflow.state.error.message == "Couldn't save to Calendar: Failed to save event: disk full"
    assert workflow.state.error.suggestions == ("Check calendar permissions in Settings",)


def test_save_permission_denied(lunch_fields, calendar_store, fast_config):
    workflow = _workflow(FakeGenerator(lunch_fields), calendar_store, fast_config)

    async def scenario():
        await workflow.parse("Lunch with Alex")
        calendar_store.permission_error = PermissionDeniedError()
        await workflow.save()

    asyncio.run(scenario())

    assert PermissionDeniedError.user_message in workflow.state.error.message
    assert calendar_store.events == {}


def test_slow_save_times_out(lunch_fields, calendar_store, fast_config):
    calendar_store.create_delay = 1.0
    workflow = _workflow(FakeGenerator(lunch_fields), calendar_store, fast_config)

    async def scenario():
        await workflow.parse("Lunch with Alex")
        await workflow.save()

    asyncio.run(scenario())

    assert isinstance(workflow.state, Error)
    assert "timed out" in workflow.state.error.message


def test_permission_refresh_failure_keeps_preview(lunch_fields, calendar_store, fast_config):
    notices = []
    calendar_store.permission_error = PermissionDeniedError()
    workflow = _workflow(FakeGenerator(lunch_fields), calendar_store, fast_config, notices=notices)

    asyncio.run(workflow.parse("Lunch with Alex"))

    assert isinstance(workflow.state, Preview)
    assert workflow.available_calendars == []
    assert any(notice.startswith("Couldn't load calendars") for notice in notices)


def test_empty_title_is_not_saved(lunch_fields, calendar_store, fast_config):
    workflow = _workflow(FakeGenerator(lunch_fields), calendar_store, fast_config)

    async def scenario():
        await workflow.parse("Lunch with Alex")
        workflow.set_title("   ")
        await workflow.save()

    asyncio.run(scenario())

    assert isinstance(workflow.state, Error)
    assert workflow.state.error.message == constants.MESSAGE_TITLE_REQUIRED
    assert calendar_store.events == {}
    assert workflow.has_recoverable_draft()

    assert workflow.recover_draft()
    assert isinstance(workflow.state, Preview)
    assert workflow.state.draft.title == "   "
    assert workflow.state.draft.location == "Shibuya"


def test_edits_are_persisted_and_recovered(lunch_fields, calendar_store, fast_config):
    draft_store = MemoryDraftStore()
    first = _workflow(FakeGenerator(lunch_fields), calendar_store, fast_config, draft_store)

    asyncio.run(first.parse("Lunch with Alex"))
    first.set_title("Lunch with Alex and Sam")
    first.select_calendar("work")

    second = _workflow(FakeGenerator(lunch_fields), FakeCalendarStore(), fast_config, draft_store)
    assert second.has_recoverable_draft()
    assert second.recover_draft()

    assert isinstance(second.state, Preview)
    assert second.editable_draft.title == "Lunch with Alex and Sam"
    assert second.selected_calendar_id == "work"


def test_recover_without_draft_returns_false(lunch_fields, calendar_store, fast_config):
    workflow = _workflow(FakeGenerator(lunch_fields), calendar_store, fast_config)

    assert not workflow.recover_draft()
    assert isinstance(workflow.state, Idle)


def test_reset_clears_everything(lunch_fields, calendar_store, fast_config):
    workflow = _workflow(FakeGenerator(lunch_fields), calendar_store, fast_config)

    async def scenario():
        await workflow.parse("Lunch with Alex")
        await workflow.save()
        workflow.reset()

    asyncio.run(scenario())

    assert isinstance(workflow.state, Idle)
    assert not workflow.can_undo
    assert workflow.editable_draft is None
    assert not workflow.has_recoverable_draft()


def test_failing_status_callback_does_not_break_workflow(lunch_fields, calendar_store, fast_config):
    def broken(message):
        raise RuntimeError("display gone")

    workflow = EventWorkflow(
        ParseOrchestrator(FakeGenerator(lunch_fields), fast_config),
        calendar_store,
        config=fast_config,
        status_callback=broken,
    )

    asyncio.run(workflow.parse("Lunch with Alex"))

    assert isinstance(workflow.state, Preview)
