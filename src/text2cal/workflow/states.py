"""Workflow states as a tagged union; payload-carrying states hold their data."""

from dataclasses import dataclass
from typing import Union

from text2cal.core.event_model import EventDraft
from text2cal.core.feedback import ParseError


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Parsing:
    pass


@dataclass(frozen=True)
class Preview:
    draft: EventDraft


@dataclass(frozen=True)
class Saving:
    pass


@dataclass(frozen=True)
class Saved:
    draft: EventDraft


@dataclass(frozen=True)
class Error:
    error: ParseError


WorkflowState = Union[Idle, Parsing, Preview, Saving, Saved, Error]

IDLE = Idle()
PARSING = Parsing()
SAVING = Saving()


def state_name(state: WorkflowState) -> str:
    return type(state).__name__.lower()
