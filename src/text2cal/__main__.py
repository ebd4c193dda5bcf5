"""Entry point for running text2cal as a module.

Usage: python -m text2cal "Lunch with Alex next Tue 1pm @Shibuya"
"""

import argparse
import asyncio
import logging
import sys
import threading
from pathlib import Path
from typing import Optional

from text2cal.config.settings import Configuration
from text2cal.core.calendar_store import CalendarStore, IcsCalendarStore
from text2cal.core.feedback import ParseError
from text2cal.core.generator import EventGenerator, GeminiEventGenerator
from text2cal.core.orchestrator import ParseOrchestrator
from text2cal.exceptions.errors import CalendarStoreError
from text2cal.storage.credentials import get_api_key_source, mask_key, save_api_key
from text2cal.storage.draft_store import JsonFileDraftStore
from text2cal.workflow import Error, EventWorkflow, Preview, Saved

logger = logging.getLogger(__name__)

DISPLAY_FORMAT = "%a %d %b %Y, %H:%M %Z"


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="text2cal",
        description="Create a calendar event from a natural-language description",
    )
    parser.add_argument("text", nargs="*", help="Event description, e.g. 'Dinner Friday 7pm @Luigi's'")
    parser.add_argument("--recover", action="store_true", help="Resume the last unsaved draft")
    parser.add_argument("--list-calendars", action="store_true", help="Print writable calendars and exit")
    parser.add_argument("--calendar", help="Calendar id to save into (default: the store default)")
    parser.add_argument("--timezone", help="Timezone override (IANA name, 'local', or e.g. JST)")
    parser.add_argument("--yes", "-y", action="store_true", help="Save without asking for confirmation")
    parser.add_argument("--env-file", type=Path, help="Dotenv file with TEXT2CAL_* settings and the API key")
    parser.add_argument("--set-api-key", metavar="KEY", help="Store the Gemini API key and exit")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose logging")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    """Main entry point for the command-line front end."""
    args = parse_args(argv)

    # Configure logging
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    if args.set_api_key:
        if not save_api_key(args.set_api_key, env_file=args.env_file):
            print("Failed to save the API key.", file=sys.stderr)
            return 1
        print(f"API key {mask_key(args.set_api_key)} saved.")
        return 0

    config = Configuration.from_env(env_file=args.env_file)
    if args.timezone:
        config = config.with_overrides(timezone_override=args.timezone)

    try:
        return asyncio.run(_run(args, config))
    except KeyboardInterrupt:
        print()
        return 130


async def _run(args: argparse.Namespace, config: Configuration) -> int:
    store = IcsCalendarStore(config.calendar_root, default_duration=config.default_duration)

    if args.list_calendars:
        return await _list_calendars(store)

    workflow = EventWorkflow(
        orchestrator=ParseOrchestrator(_build_generator(args, config), config),
        calendar_store=store,
        draft_store=JsonFileDraftStore(config.draft_path),
        config=config,
        status_callback=lambda message: print(f"» {message}"),
    )

    if args.recover:
        if not workflow.recover_draft():
            print("No recoverable draft found.", file=sys.stderr)
            return 1
        await workflow.refresh_calendars()
    else:
        text = " ".join(args.text).strip()
        if not text:
            print("Nothing to parse. Pass an event description or --recover.", file=sys.stderr)
            return 2
        await workflow.parse(text)

    if isinstance(workflow.state, Error):
        _print_error(workflow.state.error)
        return 1
    if not isinstance(workflow.state, Preview):
        return 1

    if args.calendar:
        workflow.select_calendar(args.calendar)
    _print_preview(workflow)

    if not args.yes:
        answer = await _ask("Save this event? [y/N] ")
        if (answer or "").strip().lower() not in ("y", "yes"):
            print("Not saved. The draft can be resumed with --recover.")
            return 0

    await workflow.save()
    if isinstance(workflow.state, Error):
        _print_error(workflow.state.error)
        return 1
    if not isinstance(workflow.state, Saved):
        return 1

    seconds = config.undo_window_seconds
    answer = await _ask(f"Type 'u' and Enter within {seconds:.0f}s to undo: ", timeout=seconds)
    if answer is not None and answer.strip().lower() in ("u", "undo"):
        if not await workflow.undo():
            return 1
    return 0


def _build_generator(args: argparse.Namespace, config: Configuration) -> EventGenerator:
    if args.recover:
        # Recovery never calls the generator
        return _NoGenerator()

    api_key, source = get_api_key_source(args.env_file)
    if not api_key:
        raise SystemExit(
            "No Gemini API key found. Set GEMINI_API_KEY or run: text2cal --set-api-key <KEY>"
        )
    logger.info("Using API key %s from %s", mask_key(api_key), source)
    return GeminiEventGenerator(api_key, config)


class _NoGenerator(EventGenerator):
    async def generate(self, prompt: str):
        raise RuntimeError("generator unavailable while recovering a draft")


async def _list_calendars(store: CalendarStore) -> int:
    try:
        await store.request_write_permission_if_needed()
        default_id = await store.get_default_calendar_id()
        calendars = await store.list_calendars()
    except CalendarStoreError as e:
        logger.error("list_calendars: %s", e)
        print(f"✗ {e.user_message}", file=sys.stderr)
        return 1

    for cal in calendars:
        marker = "*" if cal.id == default_id else " "
        print(f"{marker} {cal.id:<20} {cal.display_name} ({cal.color})")
    return 0


def _print_preview(workflow: EventWorkflow) -> None:
    draft = workflow.editable_draft
    print()
    print(f"  Title:    {draft.title}")
    print(f"  Start:    {draft.start.strftime(DISPLAY_FORMAT)}")
    if draft.end is not None:
        suffix = " (default duration)" if draft.was_end_time_inferred else ""
        print(f"  End:      {draft.end.strftime(DISPLAY_FORMAT)}{suffix}")
    if draft.location:
        print(f"  Location: {draft.location}")
    if draft.notes:
        print(f"  Notes:    {draft.notes}")
    if draft.recurrence:
        rule = draft.recurrence
        line = f"{rule.frequency.value}, every {rule.interval}"
        if rule.end_date is not None:
            line += f", until {rule.end_date.strftime(DISPLAY_FORMAT)}"
        print(f"  Repeats:  {line}")
    print(f"  Calendar: {workflow.selected_calendar_id or workflow.default_calendar_id or '-'}")
    print()


def _print_error(error: ParseError) -> None:
    print(f"✗ {error.message}", file=sys.stderr)
    for suggestion in error.suggestions:
        print(f"  • {suggestion}", file=sys.stderr)

    partial = error.partial_result
    if partial is None:
        return
    understood = []
    if partial.title:
        understood.append(f"title '{partial.title}'")
    if partial.found_date:
        understood.append("a date")
    if partial.found_time:
        understood.append("a time")
    if understood:
        print(f"  Understood so far: {', '.join(understood)}", file=sys.stderr)


async def _ask(prompt: str, timeout: Optional[float] = None) -> Optional[str]:
    """Read a line from stdin without blocking the event loop.

    Returns:
        The line, or None if ``timeout`` passed first.
    """
    loop = asyncio.get_running_loop()
    answer = loop.create_future()

    def deliver(line: str) -> None:
        if not answer.done():
            answer.set_result(line)

    def read() -> None:
        try:
            line = input(prompt)
        except EOFError:
            line = ""
        try:
            loop.call_soon_threadsafe(deliver, line)
        except RuntimeError:
            # Loop already closed
            pass

    # Daemon thread: an unanswered prompt must not keep the process alive
    threading.Thread(target=read, daemon=True).start()
    if timeout is None:
        return await answer
    try:
        return await asyncio.wait_for(answer, timeout)
    except asyncio.TimeoutError:
        print()
        return None


if __name__ == "__main__":
    sys.exit(main())
