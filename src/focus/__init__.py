from .controller import FocusListener, FocusSessionController
from .errors import FocusError, InvalidPhaseError, InvalidSettingsError
from .ledger import SessionLedger
from .models import (
    PhaseCompleted,
    PomodoroSession,
    TimerPhase,
    TimerSettings,
    TimerState,
)
from .scheduler import ScheduledHandle, Scheduler, ThreadingScheduler
from .stats import FocusStats, format_clock

__all__ = [
    "FocusError",
    "FocusListener",
    "FocusSessionController",
    "FocusStats",
    "InvalidPhaseError",
    "InvalidSettingsError",
    "PhaseCompleted",
    "PomodoroSession",
    "ScheduledHandle",
    "Scheduler",
    "SessionLedger",
    "ThreadingScheduler",
    "TimerPhase",
    "TimerSettings",
    "TimerState",
    "format_clock",
]
