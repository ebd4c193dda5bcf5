"""State machine driving parse → preview → save → undo.

All public methods are meant to be called from a single event loop. The only
suspending calls are the generator and the calendar store; each operation
takes a generation token, and a result arriving after the token went stale
(reset, a newer parse) is dropped instead of mutating state.
"""

import asyncio
import copy
import logging
from datetime import datetime
from typing import Callable, List, Optional

from text2cal.config import constants
from text2cal.config.settings import Configuration
from text2cal.core.calendar_store import CalendarInfo, CalendarStore
from text2cal.core.date_codec import apply_default_duration
from text2cal.core.event_model import EventDraft, RecurrenceRule
from text2cal.core.feedback import build_parse_error, build_save_error, title_required_error
from text2cal.core.orchestrator import ParseOrchestrator
from text2cal.core.timeout import run_with_timeout
from text2cal.storage.draft_store import DraftStore, MemoryDraftStore
from text2cal.workflow.states import (
    IDLE,
    PARSING,
    SAVING,
    Error,
    Idle,
    Parsing,
    Preview,
    Saved,
    Saving,
    WorkflowState,
    state_name,
)

logger = logging.getLogger(__name__)


class EventWorkflow:
    """Owns the UI-facing state and every transition between states."""

    def __init__(
        self,
        orchestrator: ParseOrchestrator,
        calendar_store: CalendarStore,
        draft_store: Optional[DraftStore] = None,
        config: Optional[Configuration] = None,
        status_callback: Optional[Callable[[str], None]] = None,
    ):
        self.orchestrator = orchestrator
        self.calendar_store = calendar_store
        self.draft_store = draft_store if draft_store is not None else MemoryDraftStore()
        self.config = config or orchestrator.config
        self.status_callback = status_callback

        self.text: str = ""
        self.state: WorkflowState = IDLE
        self.editable_draft: Optional[EventDraft] = None
        self.available_calendars: List[CalendarInfo] = []
        self.default_calendar_id: Optional[str] = None
        self.last_saved_event_id: Optional[str] = None
        self.last_undo_error: Optional[str] = None

        self._generation = 0
        self._undo_open = False
        self._undo_handle: Optional[asyncio.TimerHandle] = None
        self._undo_in_progress = False

    # ------------------------------------------------------------------
    # Queries

    @property
    def can_undo(self) -> bool:
        return self._undo_open and isinstance(self.state, Saved)

    @property
    def selected_calendar_id(self) -> Optional[str]:
        if self.editable_draft is None:
            return None
        return self.editable_draft.selected_calendar_id

    def has_recoverable_draft(self) -> bool:
        return self.draft_store.has_draft()

    # ------------------------------------------------------------------
    # Transitions

    async def parse(self, text: Optional[str] = None) -> None:
        """Parse ``text`` (or the current ``self.text``) and move to Preview or Error.

        Empty input is a no-op. A call while another parse or a save is in
        flight is ignored.
        """
        if text is not None:
            self.text = text

        trimmed = self.text.strip()
        if not trimmed:
            logger.debug("parse: empty text, ignoring")
            return
        if isinstance(self.state, (Parsing, Saving)):
            logger.warning("parse: ignored while %s", state_name(self.state))
            return

        token = self._begin_operation()
        self._cancel_undo_window()
        self._set_state(PARSING)
        self._notify(constants.STATUS_PARSING)

        try:
            draft = await self.orchestrator.parse(trimmed, self.config.timezone())
        except asyncio.CancelledError:
            raise
        except Exception as e:
            if not self._is_current(token):
                logger.debug("parse: discarding stale failure %s", type(e).__name__)
                return
            logger.error("parse: failed with error=%s (%s)", e, type(e).__name__)
            self._set_state(Error(build_parse_error(e, trimmed)))
            return

        if not self._is_current(token):
            logger.debug("parse: discarding stale result for '%s'", draft.title)
            return

        logger.info("parse: success, transitioning to preview state")
        self._enter_preview(draft)
        self._notify(constants.STATUS_PREVIEW)
        await self._refresh_calendars(token)

    async def save(self) -> None:
        """Write the previewed draft to the calendar store.

        Only valid in Preview with an editable draft; otherwise a no-op.
        """
        if not isinstance(self.state, Preview) or self.editable_draft is None:
            logger.warning("save: called but not in preview state")
            return

        draft = self.editable_draft
        if not draft.title.strip():
            logger.warning("save: refusing to save a draft without a title")
            self._set_state(Error(title_required_error()))
            return

        if draft.end is None:
            draft.end = apply_default_duration(draft.start, None, self.config.default_duration)
            draft.was_end_time_inferred = True

        snapshot = copy.deepcopy(draft)
        token = self._begin_operation()
        self._cancel_undo_window()
        logger.info("save: starting for event title='%s'", snapshot.title)
        self._set_state(SAVING)
        self._notify(constants.STATUS_SAVING)

        try:
            event_id = await run_with_timeout(
                self._write_event(snapshot),
                self.config.save_timeout_seconds,
                name="save",
            )
        except asyncio.CancelledError:
            raise
        except Exception as e:
            if not self._is_current(token):
                logger.debug("save: discarding stale failure %s", type(e).__name__)
                return
            logger.error("save: failed with error=%s (%s)", e, type(e).__name__)
            self._set_state(Error(build_save_error(e)))
            return

        if not self._is_current(token):
            logger.warning("save: event %s was written after the workflow moved on", event_id)
            return

        logger.info("save: success, transitioning to saved state")
        self.last_saved_event_id = event_id
        self._set_state(Saved(snapshot))
        self._open_undo_window()
        self._notify(constants.STATUS_SAVED.format(seconds=self.config.undo_window_seconds))

    async def undo(self) -> bool:
        """Delete the just-saved event while the undo window is open.

        Returns:
            True if the event was deleted and the workflow returned to Idle.
            False if undo wasn't available or the delete failed; in the
            latter case the state stays Saved and a notice is sent.
        """
        if not self.can_undo or self.last_saved_event_id is None or self._undo_in_progress:
            logger.debug("undo: not available")
            return False

        token = self._generation
        event_id = self.last_saved_event_id
        self._undo_in_progress = True
        try:
            await run_with_timeout(
                self._delete_event(event_id),
                self.config.save_timeout_seconds,
                name="undo",
            )
        except asyncio.CancelledError:
            raise
        except Exception as e:
            reason = getattr(e, "user_message", None) or str(e) or type(e).__name__
            logger.warning("undo: failed to delete event %s: %s", event_id, reason)
            self.last_undo_error = reason
            self._notify(constants.STATUS_UNDO_FAILED.format(reason=reason))
            return False
        finally:
            self._undo_in_progress = False

        if not self._is_current(token):
            logger.debug("undo: event %s deleted after the workflow moved on", event_id)
            return True

        logger.info("undo: removed event %s", event_id)
        self._cancel_undo_window()
        self.last_saved_event_id = None
        self.last_undo_error = None
        self.editable_draft = None
        self._set_state(IDLE)
        self._notify(constants.STATUS_UNDONE)
        return True

    def reset(self) -> None:
        """Return to Idle from any state, clearing input and the recoverable draft."""
        logger.debug("reset: returning to idle state")
        self._begin_operation()
        self._cancel_undo_window()
        self.text = ""
        self.editable_draft = None
        self.last_saved_event_id = None
        self.draft_store.clear()
        self._set_state(IDLE)

    def recover_draft(self) -> bool:
        """Re-enter Preview with a persisted draft, bypassing Parsing.

        Returns:
            True if a draft was recovered.
        """
        if isinstance(self.state, (Parsing, Saving)):
            logger.warning("recover_draft: ignored while %s", state_name(self.state))
            return False

        draft = self.draft_store.load()
        if draft is None:
            return False

        self._begin_operation()
        self._cancel_undo_window()
        logger.info("recover_draft: restoring '%s'", draft.title)
        self._enter_preview(draft)
        self._notify(constants.STATUS_DRAFT_RECOVERED)
        return True

    async def refresh_calendars(self) -> None:
        """Re-acquire permission and reload writable calendars (best effort)."""
        await self._refresh_calendars(self._generation)

    # ------------------------------------------------------------------
    # Preview editing

    def set_title(self, title: str) -> None:
        self._edit(lambda draft: setattr(draft, "title", title))

    def set_start(self, start: datetime) -> None:
        self._edit(lambda draft: draft.set_start(start))

    def set_end(self, end: Optional[datetime]) -> None:
        self._edit(lambda draft: draft.set_end(end))

    def set_location(self, location: Optional[str]) -> None:
        self._edit(lambda draft: setattr(draft, "location", location or None))

    def set_notes(self, notes: Optional[str]) -> None:
        self._edit(lambda draft: setattr(draft, "notes", notes or None))

    def set_recurrence(self, recurrence: Optional[RecurrenceRule]) -> None:
        self._edit(lambda draft: setattr(draft, "recurrence", recurrence))

    def select_calendar(self, calendar_id: Optional[str]) -> None:
        self._edit(lambda draft: setattr(draft, "selected_calendar_id", calendar_id))

    def _edit(self, change: Callable[[EventDraft], None]) -> None:
        if not isinstance(self.state, Preview) or self.editable_draft is None:
            logger.warning("edit: ignored outside preview state")
            return
        change(self.editable_draft)
        self._persist_draft(self.editable_draft)

    # ------------------------------------------------------------------
    # Internals

    def _begin_operation(self) -> int:
        self._generation += 1
        return self._generation

    def _is_current(self, token: int) -> bool:
        return token == self._generation

    def _set_state(self, new_state: WorkflowState) -> None:
        old_state = self.state
        self.state = new_state
        logger.info("state: %s -> %s", state_name(old_state), state_name(new_state))
        self._on_transition(new_state)

    def _on_transition(self, new_state: WorkflowState) -> None:
        # Draft persistence follows the transitions, not the call sites
        if isinstance(new_state, Preview):
            self._persist_draft(new_state.draft)
        elif isinstance(new_state, (Saved, Idle)):
            self.draft_store.clear()

    def _enter_preview(self, draft: EventDraft) -> None:
        self.editable_draft = draft
        self._set_state(Preview(draft))

    def _persist_draft(self, draft: EventDraft) -> None:
        try:
            self.draft_store.save(draft)
        except (OSError, TypeError, ValueError) as e:
            logger.warning("Could not persist recoverable draft: %s", e)

    async def _refresh_calendars(self, token: int) -> None:
        try:
            await run_with_timeout(
                self.calendar_store.request_write_permission_if_needed(),
                self.config.save_timeout_seconds,
                name="permission",
            )
            calendars = await self.calendar_store.list_calendars()
            default_id = await self.calendar_store.get_default_calendar_id()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            reason = getattr(e, "user_message", None) or str(e) or type(e).__name__
            logger.warning("Calendar refresh failed: %s", reason)
            self._notify(constants.STATUS_CALENDARS_UNAVAILABLE.format(reason=reason))
            return

        if not self._is_current(token):
            return
        self.available_calendars = list(calendars)
        self.default_calendar_id = default_id
        if self.selected_calendar_id is None and default_id is not None:
            self.select_calendar(default_id)
        logger.debug("Loaded %d writable calendar(s), default=%s", len(calendars), default_id)

    async def _write_event(self, draft: EventDraft) -> str:
        await self.calendar_store.request_write_permission_if_needed()
        return await self.calendar_store.create_event(draft)

    async def _delete_event(self, event_id: str) -> None:
        await self.calendar_store.request_write_permission_if_needed()
        await self.calendar_store.delete_event(event_id)

    def _open_undo_window(self) -> None:
        self._cancel_undo_window()
        loop = asyncio.get_running_loop()
        self._undo_open = True
        self._undo_handle = loop.call_later(self.config.undo_window_seconds, self._close_undo_window)

    def _close_undo_window(self) -> None:
        logger.debug("undo window closed")
        self._undo_open = False
        self._undo_handle = None

    def _cancel_undo_window(self) -> None:
        if self._undo_handle is not None:
            self._undo_handle.cancel()
            self._undo_handle = None
        self._undo_open = False

    def _notify(self, message: str) -> None:
        if self.status_callback is None:
            return
        try:
            self.status_callback(message)
        except Exception as e:
            logger.warning("Status callback failed: %s. Message: %s", e, message)
