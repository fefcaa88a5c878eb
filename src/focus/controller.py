"""Thread-safe Pomodoro state machine with a session ledger and daily stats."""

from __future__ import annotations

import datetime as dt
import logging
import threading
from typing import Callable, Optional

from .constants import DEFAULT_DAILY_GOAL, DEFAULT_TASK_LABEL, TICK_PERIOD_MS
from .ledger import SessionLedger
from .models import (
    PhaseCompleted,
    PomodoroSession,
    TimerPhase,
    TimerSettings,
    TimerState,
)
from .scheduler import ScheduledHandle, Scheduler
from .stats import (
    FocusStats,
    build_focus_stats,
    progress_fraction,
    todays_completed_count,
    todays_focus_seconds,
    todays_sessions,
)

FocusListener = Callable[[TimerState, Optional[PhaseCompleted]], None]


def _local_now() -> dt.datetime:
    return dt.datetime.now().astimezone()


class FocusSessionController:
    """Owns the single authoritative timer state and the completion policy.

    Every operation, including ``tick()``, runs under one non-reentrant lock.
    When a scheduler is supplied the controller arms it on ``start()`` and
    cancels it whenever the timer stops running; tests may leave it out and
    drive ``tick()`` directly.
    """

    def __init__(
        self,
        settings: Optional[TimerSettings] = None,
        *,
        scheduler: Optional[Scheduler] = None,
        ledger: Optional[SessionLedger] = None,
        clock: Optional[Callable[[], dt.datetime]] = None,
        daily_goal: int = DEFAULT_DAILY_GOAL,
        listener: Optional[FocusListener] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._settings = (settings or TimerSettings()).validate()
        self._scheduler = scheduler
        self._ledger = ledger if ledger is not None else SessionLedger()
        self._clock = clock or _local_now
        self._daily_goal = daily_goal
        self._listener = listener
        self._logger = logger or logging.getLogger("focus")
        self._lock = threading.Lock()

        self._phase = TimerPhase.WORK
        self._remaining_seconds = self._settings.duration_seconds(self._phase)
        self._is_running = False
        self._task_label = ""
        self._completed_count = 0

        self._tick_handle: Optional[ScheduledHandle] = None
        self._tick_generation = 0

    @property
    def settings(self) -> TimerSettings:
        with self._lock:
            return self._settings

    @property
    def completed_count(self) -> int:
        with self._lock:
            return self._completed_count

    @property
    def sessions(self) -> tuple[PomodoroSession, ...]:
        return self._ledger.entries()

    def set_listener(self, listener: Optional[FocusListener]) -> None:
        self._listener = listener

    def snapshot(self) -> TimerState:
        with self._lock:
            return self._snapshot_locked()

    def start(self) -> TimerState:
        with self._lock:
            if self._remaining_seconds <= 0:
                self._remaining_seconds = self._duration_locked(self._phase)
            was_running = self._is_running
            self._is_running = True
            self._arm_tick_source_locked()
            state = self._snapshot_locked()
        if not was_running:
            self._logger.info(
                "Focus timer started: phase=%s remaining=%ss",
                state.phase.value,
                state.remaining_seconds,
            )
        return state

    def pause(self) -> TimerState:
        with self._lock:
            was_running = self._is_running
            self._is_running = False
            stale = self._detach_tick_source_locked()
            state = self._snapshot_locked()
        self._cancel(stale)
        if was_running:
            self._logger.info(
                "Focus timer paused: phase=%s remaining=%ss",
                state.phase.value,
                state.remaining_seconds,
            )
        return state

    def reset(self) -> TimerState:
        with self._lock:
            self._is_running = False
            stale = self._detach_tick_source_locked()
            self._remaining_seconds = self._duration_locked(self._phase)
            state = self._snapshot_locked()
        self._cancel(stale)
        self._logger.info("Focus timer reset: phase=%s", state.phase.value)
        return state

    def switch_mode(self, phase: TimerPhase) -> TimerState:
        if not isinstance(phase, TimerPhase):
            raise TypeError(f"switch_mode expects a TimerPhase, got: {phase!r}")
        with self._lock:
            stale = self._switch_mode_locked(phase)
            state = self._snapshot_locked()
        self._cancel(stale)
        self._logger.info("Focus timer switched to %s", phase.value)
        return state

    def set_task_label(self, text: str) -> TimerState:
        with self._lock:
            self._task_label = text
            state = self._snapshot_locked()
        return state

    def apply_settings(self, settings: TimerSettings) -> TimerState:
        settings = settings.validate()
        with self._lock:
            old_duration = self._duration_locked(self._phase)
            new_duration = settings.duration_seconds(self._phase)
            # Only an untouched, paused phase picks up the new length.
            if not self._is_running and self._remaining_seconds == old_duration:
                self._remaining_seconds = new_duration
            else:
                self._remaining_seconds = min(self._remaining_seconds, new_duration)
            self._settings = settings
            state = self._snapshot_locked()
        self._logger.info(
            "Timer settings applied: work=%sm short=%sm long=%sm interval=%s",
            settings.work_minutes,
            settings.short_break_minutes,
            settings.long_break_minutes,
            settings.long_break_interval,
        )
        return state

    def reinitialize(self) -> TimerState:
        """Start a fresh day: clear the completion counter, keep the ledger."""
        with self._lock:
            stale = self._switch_mode_locked(TimerPhase.WORK)
            self._task_label = ""
            self._completed_count = 0
            state = self._snapshot_locked()
        self._cancel(stale)
        self._logger.info("Focus controller reinitialized")
        return state

    def tick(self) -> TimerState:
        """Advance the countdown by one second and run the completion policy at zero."""
        return self._advance(None)

    def _advance(self, generation: Optional[int]) -> TimerState:
        stale: Optional[ScheduledHandle] = None
        completion: Optional[PhaseCompleted] = None
        with self._lock:
            if generation is not None and generation != self._tick_generation:
                # Tick from a schedule that was cancelled after it woke up.
                return self._snapshot_locked()
            if not self._is_running:
                return self._snapshot_locked()

            self._remaining_seconds = max(0, self._remaining_seconds - 1)
            if self._remaining_seconds == 0:
                self._is_running = False
                stale = self._detach_tick_source_locked()
                completion = self._complete_phase_locked()
            state = self._snapshot_locked()

        self._cancel(stale)
        if completion is not None:
            self._logger.info(
                "Focus phase completed: %s -> %s (completed=%d)",
                completion.finished_phase.value,
                completion.next_phase.value,
                completion.completed_count,
            )
        else:
            self._logger.debug(
                "Focus tick: phase=%s remaining=%ss",
                state.phase.value,
                state.remaining_seconds,
            )
        self._notify(state, completion)
        return state

    def todays_sessions(self) -> list[PomodoroSession]:
        return todays_sessions(self._ledger.entries(), self._clock())

    def todays_completed_count(self) -> int:
        return todays_completed_count(self._ledger.entries(), self._clock())

    def todays_focus_seconds(self) -> int:
        return todays_focus_seconds(self._ledger.entries(), self._clock())

    def progress_fraction(
        self,
        phase: Optional[TimerPhase] = None,
        remaining_seconds: Optional[int] = None,
    ) -> float:
        with self._lock:
            settings = self._settings
            if phase is None:
                phase = self._phase
            if remaining_seconds is None:
                remaining_seconds = self._remaining_seconds
        return progress_fraction(settings, phase, remaining_seconds)

    def stats(self) -> FocusStats:
        return build_focus_stats(
            self._ledger.entries(),
            self._clock(),
            total_completed=self.completed_count,
            daily_goal=self._daily_goal,
        )

    def close(self) -> None:
        """Stop the tick source; the controller state is kept."""
        with self._lock:
            self._is_running = False
            stale = self._detach_tick_source_locked()
        self._cancel(stale)

    def _complete_phase_locked(self) -> PhaseCompleted:
        finished = self._phase
        session: Optional[PomodoroSession] = None

        if finished is TimerPhase.WORK:
            session = PomodoroSession(
                completed_at=self._clock(),
                duration_seconds=self._duration_locked(TimerPhase.WORK),
                was_completed=True,
                task_label=self._task_label or DEFAULT_TASK_LABEL,
            )
            self._ledger.append(session)
            self._completed_count += 1
            interval = self._settings.effective_long_break_interval
            if self._completed_count % interval == 0:
                next_phase = TimerPhase.LONG_BREAK
            else:
                next_phase = TimerPhase.SHORT_BREAK
            self._task_label = ""
        else:
            next_phase = TimerPhase.WORK

        self._switch_mode_locked(next_phase)
        return PhaseCompleted(
            finished_phase=finished,
            next_phase=next_phase,
            session=session,
            completed_count=self._completed_count,
        )

    def _switch_mode_locked(self, phase: TimerPhase) -> Optional[ScheduledHandle]:
        self._phase = phase
        self._remaining_seconds = self._duration_locked(phase)
        self._is_running = False
        return self._detach_tick_source_locked()

    def _duration_locked(self, phase: TimerPhase) -> int:
        return self._settings.duration_seconds(phase)

    def _arm_tick_source_locked(self) -> None:
        if self._scheduler is None or self._tick_handle is not None:
            return
        self._tick_generation += 1
        generation = self._tick_generation
        self._tick_handle = self._scheduler.schedule(
            lambda: self._scheduled_tick(generation),
            TICK_PERIOD_MS,
        )

    def _detach_tick_source_locked(self) -> Optional[ScheduledHandle]:
        handle = self._tick_handle
        self._tick_handle = None
        self._tick_generation += 1
        return handle

    def _scheduled_tick(self, generation: int) -> None:
        self._advance(generation)

    @staticmethod
    def _cancel(handle: Optional[ScheduledHandle]) -> None:
        # Called without the controller lock: the tick thread may be waiting on it.
        if handle is not None:
            handle.cancel()

    def _snapshot_locked(self) -> TimerState:
        return TimerState(
            phase=self._phase,
            remaining_seconds=self._remaining_seconds,
            is_running=self._is_running,
            current_task_label=self._task_label,
            duration_seconds=self._duration_locked(self._phase),
            completed_count=self._completed_count,
        )

    def _notify(self, state: TimerState, completion: Optional[PhaseCompleted]) -> None:
        listener = self._listener
        if listener is None:
            return
        try:
            listener(state, completion)
        except Exception as error:
            self._logger.error("Focus listener failed: %s", error, exc_info=True)
