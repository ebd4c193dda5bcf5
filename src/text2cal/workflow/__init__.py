"""Parse → preview → save → undo state machine."""

from text2cal.workflow.event_workflow import EventWorkflow
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

__all__ = [
    "EventWorkflow",
    "WorkflowState",
    "Idle",
    "Parsing",
    "Preview",
    "Saving",
    "Saved",
    "Error",
    "IDLE",
    "PARSING",
    "SAVING",
    "state_name",
]
