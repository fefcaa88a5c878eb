"""Pure statistics derived from the session ledger for display."""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Sequence

from .constants import DEFAULT_DAILY_GOAL, RECENT_SESSIONS_LIMIT
from .models import PomodoroSession, TimerPhase, TimerSettings


@dataclass(frozen=True)
class FocusStats:
    """Aggregates shown next to the timer."""
    todays_sessions: int
    todays_completed: int
    todays_focus_seconds: int
    total_completed: int
    daily_goal: int
    daily_goal_fraction: float

    @property
    def todays_focus_minutes(self) -> int:
        return self.todays_focus_seconds // 60

    def to_payload(self) -> dict[str, object]:
        return {
            "todays_sessions": self.todays_sessions,
            "todays_completed": self.todays_completed,
            "todays_focus_seconds": self.todays_focus_seconds,
            "todays_focus_minutes": self.todays_focus_minutes,
            "total_completed": self.total_completed,
            "daily_goal": self.daily_goal,
            "daily_goal_fraction": self.daily_goal_fraction,
        }


def _local_date(moment: dt.datetime) -> dt.date:
    if moment.tzinfo is None:
        return moment.date()
    return moment.astimezone().date()


def todays_sessions(
    sessions: Sequence[PomodoroSession],
    now: dt.datetime,
) -> list[PomodoroSession]:
    """Return sessions completed on the local calendar day of ``now``."""
    today = _local_date(now)
    return [session for session in sessions if _local_date(session.completed_at) == today]


def todays_completed_count(sessions: Sequence[PomodoroSession], now: dt.datetime) -> int:
    return sum(1 for session in todays_sessions(sessions, now) if session.was_completed)


def todays_focus_seconds(sessions: Sequence[PomodoroSession], now: dt.datetime) -> int:
    return sum(session.duration_seconds for session in todays_sessions(sessions, now))


def recent_sessions(
    sessions: Sequence[PomodoroSession],
    limit: int = RECENT_SESSIONS_LIMIT,
) -> list[PomodoroSession]:
    ordered = sorted(sessions, key=lambda session: session.completed_at, reverse=True)
    return ordered[: max(0, limit)]


def progress_fraction(
    settings: TimerSettings,
    phase: TimerPhase,
    remaining_seconds: int,
) -> float:
    total = settings.duration_seconds(phase)
    fraction = (total - remaining_seconds) / total
    return max(0.0, min(1.0, fraction))


def daily_goal_fraction(completed: int, goal: int = DEFAULT_DAILY_GOAL) -> float:
    if goal <= 0:
        return 1.0
    return max(0.0, min(1.0, completed / goal))


def format_clock(seconds: int) -> str:
    minutes, remainder = divmod(max(0, int(seconds)), 60)
    return f"{minutes:02d}:{remainder:02d}"


def build_focus_stats(
    sessions: Sequence[PomodoroSession],
    now: dt.datetime,
    *,
    total_completed: int,
    daily_goal: int = DEFAULT_DAILY_GOAL,
) -> FocusStats:
    today = todays_sessions(sessions, now)
    completed = sum(1 for session in today if session.was_completed)
    return FocusStats(
        todays_sessions=len(today),
        todays_completed=completed,
        todays_focus_seconds=sum(session.duration_seconds for session in today),
        total_completed=total_completed,
        daily_goal=daily_goal,
        daily_goal_fraction=daily_goal_fraction(completed, daily_goal),
    )
