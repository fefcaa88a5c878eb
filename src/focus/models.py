"""Phase, settings, state, and ledger entry types for the focus timer."""

from __future__ import annotations

import datetime as dt
import math
import uuid
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Optional

from .constants import (
    DEFAULT_LONG_BREAK_INTERVAL,
    DEFAULT_LONG_BREAK_MINUTES,
    DEFAULT_SHORT_BREAK_MINUTES,
    DEFAULT_SOUND_VOLUME,
    DEFAULT_WORK_MINUTES,
    MAX_PHASE_MINUTES,
    MIN_PHASE_SECONDS,
)
from .errors import InvalidPhaseError, InvalidSettingsError


class TimerPhase(str, Enum):
    WORK = "work"
    SHORT_BREAK = "short_break"
    LONG_BREAK = "long_break"

    @property
    def is_break(self) -> bool:
        return self is not TimerPhase.WORK

    @property
    def label(self) -> str:
        return _PHASE_LABELS[self]

    @classmethod
    def parse(cls, raw: Any) -> "TimerPhase":
        """Map a UI or config value onto a phase, rejecting anything unknown."""
        if isinstance(raw, cls):
            return raw
        if not isinstance(raw, str):
            raise InvalidPhaseError(f"Timer phase must be a string, got: {raw!r}")
        phase = _PHASE_ALIASES.get(raw.strip().lower().replace("-", "_"))
        if phase is None:
            allowed = ", ".join(member.value for member in cls)
            raise InvalidPhaseError(f"Timer phase must be one of: {allowed}; got: {raw!r}")
        return phase


_PHASE_LABELS = {
    TimerPhase.WORK: "Work",
    TimerPhase.SHORT_BREAK: "Short break",
    TimerPhase.LONG_BREAK: "Long break",
}

_PHASE_ALIASES = {
    "work": TimerPhase.WORK,
    "focus": TimerPhase.WORK,
    "short_break": TimerPhase.SHORT_BREAK,
    "shortbreak": TimerPhase.SHORT_BREAK,
    "long_break": TimerPhase.LONG_BREAK,
    "longbreak": TimerPhase.LONG_BREAK,
}


@dataclass(frozen=True)
class TimerSettings:
    """Immutable duration and cadence snapshot consulted when a phase (re)starts."""
    work_minutes: float = DEFAULT_WORK_MINUTES
    short_break_minutes: float = DEFAULT_SHORT_BREAK_MINUTES
    long_break_minutes: float = DEFAULT_LONG_BREAK_MINUTES
    long_break_interval: int = DEFAULT_LONG_BREAK_INTERVAL
    sound_enabled: bool = True
    sound_volume: int = DEFAULT_SOUND_VOLUME

    def duration_seconds(self, phase: TimerPhase) -> int:
        if phase is TimerPhase.WORK:
            minutes = self.work_minutes
        elif phase is TimerPhase.SHORT_BREAK:
            minutes = self.short_break_minutes
        else:
            minutes = self.long_break_minutes
        # A zero-length phase would complete on every tick.
        return max(MIN_PHASE_SECONDS, int(round(minutes * 60)))

    @property
    def effective_long_break_interval(self) -> int:
        return max(1, int(self.long_break_interval))

    def validate(self) -> "TimerSettings":
        """Raise ``InvalidSettingsError`` unless every field is in range."""
        for name in ("work_minutes", "short_break_minutes", "long_break_minutes"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise InvalidSettingsError(f"{name} must be a number, got: {value!r}")
            if not math.isfinite(value) or not 0 < value <= MAX_PHASE_MINUTES:
                raise InvalidSettingsError(
                    f"{name} must be in (0, {MAX_PHASE_MINUTES}] minutes, got: {value}"
                )

        interval = self.long_break_interval
        if isinstance(interval, bool) or not isinstance(interval, int) or interval < 1:
            raise InvalidSettingsError(
                f"long_break_interval must be an integer >= 1, got: {interval!r}"
            )

        if not isinstance(self.sound_enabled, bool):
            raise InvalidSettingsError("sound_enabled must be a boolean")

        volume = self.sound_volume
        if isinstance(volume, bool) or not isinstance(volume, int) or not 0 <= volume <= 100:
            raise InvalidSettingsError(f"sound_volume must be in [0, 100], got: {volume!r}")
        return self

    def with_updates(self, **changes: Any) -> "TimerSettings":
        unknown = sorted(set(changes) - _SETTINGS_FIELDS)
        if unknown:
            raise InvalidSettingsError(f"Unknown timer settings: {', '.join(unknown)}")
        return replace(self, **changes).validate()


_SETTINGS_FIELDS = frozenset(
    {
        "work_minutes",
        "short_break_minutes",
        "long_break_minutes",
        "long_break_interval",
        "sound_enabled",
        "sound_volume",
    }
)


@dataclass(frozen=True)
class TimerState:
    """Read-only controller snapshot handed to the presentation layer."""
    phase: TimerPhase
    remaining_seconds: int
    is_running: bool
    current_task_label: str
    duration_seconds: int
    completed_count: int


def _new_session_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class PomodoroSession:
    """Ledger entry for a finished Work phase."""
    completed_at: dt.datetime
    duration_seconds: int
    was_completed: bool
    task_label: str
    id: str = field(default_factory=_new_session_id)

    def to_payload(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "completed_at": self.completed_at.isoformat(timespec="seconds"),
            "duration_seconds": self.duration_seconds,
            "was_completed": self.was_completed,
            "task_label": self.task_label,
        }


@dataclass(frozen=True)
class PhaseCompleted:
    """Outcome of one completion-policy run."""
    finished_phase: TimerPhase
    next_phase: TimerPhase
    session: Optional[PomodoroSession]
    completed_count: int

    @property
    def long_break_due(self) -> bool:
        return self.next_phase is TimerPhase.LONG_BREAK
