"""Status, completion, and rejection text shown next to the focus timer."""

from __future__ import annotations

from focus import PhaseCompleted, TimerPhase, TimerState, format_clock
from focus.constants import (
    ACTION_PAUSE,
    ACTION_SWITCH_MODE,
    ACTION_UPDATE_SETTINGS,
    DEFAULT_TASK_LABEL,
    REASON_INVALID_PAYLOAD,
    REASON_INVALID_PHASE,
    REASON_INVALID_SETTINGS,
    REASON_NOT_RUNNING,
    REASON_UNSUPPORTED_ACTION,
)


def focus_status_message(state: TimerState) -> str:
    """Build status text for the current controller snapshot."""
    clock = format_clock(state.remaining_seconds)
    if state.phase is TimerPhase.WORK:
        topic = state.current_task_label or DEFAULT_TASK_LABEL
        if state.is_running:
            return f"Focusing on '{topic}' ({clock} remaining)"
        if state.remaining_seconds < state.duration_seconds:
            return f"Focus paused ({clock} remaining)"
        return f"Ready to focus ({clock})"

    label = state.phase.label
    if state.is_running:
        return f"{label} running ({clock} remaining)"
    if state.remaining_seconds < state.duration_seconds:
        return f"{label} paused ({clock} remaining)"
    return f"{label} ready ({clock})"


def completion_message(completion: PhaseCompleted) -> str:
    """Return the announcement for a finished phase."""
    if completion.finished_phase is TimerPhase.WORK:
        label = completion.session.task_label if completion.session else DEFAULT_TASK_LABEL
        if completion.long_break_due:
            return (
                f"Pomodoro complete: {label}. "
                f"That's {completion.completed_count} today, take a long break."
            )
        return f"Pomodoro complete: {label}. Time for a short break."
    return "Break is over. Ready for the next focus session?"


def rejection_message(action: str, reason: str) -> str:
    """Return text for an intent the dispatcher refused."""
    if reason == REASON_INVALID_PHASE and action == ACTION_SWITCH_MODE:
        return "Unknown timer mode. Choose work, short break, or long break."
    if reason == REASON_INVALID_SETTINGS and action == ACTION_UPDATE_SETTINGS:
        return "Those timer settings are out of range."
    if reason == REASON_NOT_RUNNING and action == ACTION_PAUSE:
        return "The timer is not running."
    if reason == REASON_INVALID_PAYLOAD:
        return "That request is missing required fields."
    if reason == REASON_UNSUPPORTED_ACTION:
        return f"Unsupported timer action: {action}"
    return "That timer action is not possible right now."
