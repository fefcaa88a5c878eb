"""Handlers that publish controller changes and announce finished phases."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from contracts.ui_protocol import (
    EVENT_ASSISTANT_REPLY,
    STATE_FOCUSING,
    STATE_IDLE,
    STATE_ON_BREAK,
    STATE_REPLYING,
)
from focus import FocusStats, PhaseCompleted, TimerPhase, TimerSettings, TimerState
from focus.constants import ACTION_COMPLETED, ACTION_TICK, REASON_COMPLETED, REASON_TICK
from focus.stats import progress_fraction

from .messages import completion_message, focus_status_message
from .ui import RuntimeUIPublisher


@dataclass(frozen=True)
class TickDependencies:
    """Dependencies required for processing focus controller events."""
    logger: logging.Logger
    ui: RuntimeUIPublisher
    current_settings: Callable[[], TimerSettings]
    current_stats: Callable[[], FocusStats]
    play_chime: Optional[Callable[[int], None]] = None


class FocusEventProcessor:
    """Turns controller notifications into UI events and completion chimes."""
    def __init__(self, dependencies: TickDependencies):
        self._dependencies = dependencies

    def handle(self, state: TimerState, completion: Optional[PhaseCompleted]) -> None:
        if completion is not None:
            self.handle_completion(state, completion)
            return
        self.handle_tick(state)

    def handle_tick(self, state: TimerState) -> None:
        deps = self._dependencies
        deps.ui.publish_focus_update(
            state,
            action=ACTION_TICK,
            progress=_progress(deps.current_settings(), state),
            accepted=True,
            reason=REASON_TICK,
        )
        self.publish_runtime_state(state)

    def handle_completion(self, state: TimerState, completion: PhaseCompleted) -> None:
        deps = self._dependencies
        message = completion_message(completion)
        deps.ui.publish_focus_update(
            state,
            action=ACTION_COMPLETED,
            progress=_progress(deps.current_settings(), state),
            accepted=True,
            reason=REASON_COMPLETED,
            message=message,
        )
        if completion.session is not None:
            deps.ui.publish_session_recorded(completion.session)
        deps.ui.publish_stats(deps.current_stats())
        deps.ui.publish_state(STATE_REPLYING, message=f"{completion.finished_phase.label} completed")
        deps.ui.publish(EVENT_ASSISTANT_REPLY, text=message)

        settings = deps.current_settings()
        if deps.play_chime is not None and settings.sound_enabled:
            try:
                deps.play_chime(settings.sound_volume)
            except Exception as error:
                deps.logger.error("Completion chime failed: %s", error)
        self.publish_runtime_state(state)

    def publish_runtime_state(self, state: TimerState) -> None:
        if not state.is_running:
            runtime_state = STATE_IDLE
        elif state.phase is TimerPhase.WORK:
            runtime_state = STATE_FOCUSING
        else:
            runtime_state = STATE_ON_BREAK
        self._dependencies.ui.publish_state(runtime_state, message=focus_status_message(state))


def _progress(settings: TimerSettings, state: TimerState) -> float:
    return progress_fraction(settings, state.phase, state.remaining_seconds)
