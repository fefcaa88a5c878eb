"""Dispatcher that validates UI intents and applies them to the focus controller."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional

from contracts.ui_protocol import EVENT_INTENT_RESULT
from focus import (
    FocusSessionController,
    InvalidPhaseError,
    InvalidSettingsError,
    TimerPhase,
    TimerState,
)
from focus.constants import (
    ACTION_NEW_DAY,
    ACTION_PAUSE,
    ACTION_RESET,
    ACTION_SET_TASK,
    ACTION_START,
    ACTION_SWITCH_MODE,
    ACTION_SYNC,
    ACTION_TOGGLE,
    ACTION_UPDATE_SETTINGS,
    MAX_TASK_LABEL_LENGTH,
    REASON_ALREADY_RUNNING,
    REASON_INVALID_PAYLOAD,
    REASON_INVALID_PHASE,
    REASON_INVALID_SETTINGS,
    REASON_NEW_DAY,
    REASON_NOT_RUNNING,
    REASON_PAUSED,
    REASON_RESET,
    REASON_SETTINGS_UPDATED,
    REASON_STARTED,
    REASON_STARTUP,
    REASON_SWITCHED,
    REASON_TASK_UPDATED,
    REASON_UNSUPPORTED_ACTION,
)

from .messages import focus_status_message, rejection_message
from .ui import RuntimeUIPublisher


@dataclass(frozen=True)
class IntentResult:
    """Outcome of one UI intent."""
    action: str
    accepted: bool
    reason: str
    state: Optional[TimerState] = None

    def to_payload(self) -> dict[str, Any]:
        return {
            "action": self.action,
            "accepted": self.accepted,
            "reason": self.reason,
        }


def normalize_task_label(raw: Any) -> Optional[str]:
    """Compact whitespace and clip to the label limit; ``None`` for non-strings."""
    if not isinstance(raw, str):
        return None
    return " ".join(raw.split())[:MAX_TASK_LABEL_LENGTH]


class FocusIntentDispatcher:
    """Routes UI intents to controller operations and publishes the outcome."""
    def __init__(
        self,
        *,
        controller: FocusSessionController,
        ui: RuntimeUIPublisher,
        logger: Optional[logging.Logger] = None,
        publish_runtime_state: Optional[Callable[[TimerState], None]] = None,
    ):
        self._controller = controller
        self._ui = ui
        self._logger = logger or logging.getLogger("runtime.intents")
        self._publish_runtime_state = publish_runtime_state
        self._handlers: dict[str, Callable[[Mapping[str, Any]], IntentResult]] = {
            ACTION_START: self._start,
            ACTION_PAUSE: self._pause,
            ACTION_TOGGLE: self._toggle,
            ACTION_RESET: self._reset,
            ACTION_SWITCH_MODE: self._switch_mode,
            ACTION_SET_TASK: self._set_task,
            ACTION_UPDATE_SETTINGS: self._update_settings,
            ACTION_NEW_DAY: self._new_day,
            ACTION_SYNC: self._sync,
        }

    def handle(self, message: Mapping[str, Any]) -> IntentResult:
        raw_action = message.get("action")
        action = raw_action.strip().lower() if isinstance(raw_action, str) else ""
        handler = self._handlers.get(action)
        if handler is None:
            self._logger.warning("Unsupported focus intent: %r", raw_action)
            result = IntentResult(
                action=action or str(raw_action),
                accepted=False,
                reason=REASON_UNSUPPORTED_ACTION,
            )
        else:
            result = handler(message)

        self._publish(result)
        return result

    def publish_sync(self, reason: str = REASON_STARTUP) -> None:
        state = self._controller.snapshot()
        self._ui.publish_focus_update(
            state,
            action=ACTION_SYNC,
            progress=self._controller.progress_fraction(state.phase, state.remaining_seconds),
            accepted=True,
            reason=reason,
            message=focus_status_message(state),
        )
        self._ui.publish_stats(self._controller.stats())
        if self._publish_runtime_state is not None:
            self._publish_runtime_state(state)

    def _start(self, message: Mapping[str, Any]) -> IntentResult:
        if self._controller.snapshot().is_running:
            return self._rejected(ACTION_START, REASON_ALREADY_RUNNING)
        return IntentResult(ACTION_START, True, REASON_STARTED, self._controller.start())

    def _pause(self, message: Mapping[str, Any]) -> IntentResult:
        if not self._controller.snapshot().is_running:
            return self._rejected(ACTION_PAUSE, REASON_NOT_RUNNING)
        return IntentResult(ACTION_PAUSE, True, REASON_PAUSED, self._controller.pause())

    def _toggle(self, message: Mapping[str, Any]) -> IntentResult:
        if self._controller.snapshot().is_running:
            return IntentResult(ACTION_TOGGLE, True, REASON_PAUSED, self._controller.pause())
        return IntentResult(ACTION_TOGGLE, True, REASON_STARTED, self._controller.start())

    def _reset(self, message: Mapping[str, Any]) -> IntentResult:
        return IntentResult(ACTION_RESET, True, REASON_RESET, self._controller.reset())

    def _switch_mode(self, message: Mapping[str, Any]) -> IntentResult:
        try:
            phase = TimerPhase.parse(message.get("phase"))
        except InvalidPhaseError as error:
            self._logger.warning("Rejected mode switch: %s", error)
            return self._rejected(ACTION_SWITCH_MODE, REASON_INVALID_PHASE)
        return IntentResult(
            ACTION_SWITCH_MODE,
            True,
            REASON_SWITCHED,
            self._controller.switch_mode(phase),
        )

    def _set_task(self, message: Mapping[str, Any]) -> IntentResult:
        label = normalize_task_label(message.get("label"))
        if label is None:
            return self._rejected(ACTION_SET_TASK, REASON_INVALID_PAYLOAD)
        return IntentResult(
            ACTION_SET_TASK,
            True,
            REASON_TASK_UPDATED,
            self._controller.set_task_label(label),
        )

    def _update_settings(self, message: Mapping[str, Any]) -> IntentResult:
        changes = message.get("settings")
        if not isinstance(changes, dict) or not changes:
            return self._rejected(ACTION_UPDATE_SETTINGS, REASON_INVALID_PAYLOAD)
        try:
            settings = self._controller.settings.with_updates(**changes)
        except InvalidSettingsError as error:
            self._logger.warning("Rejected timer settings: %s", error)
            return self._rejected(ACTION_UPDATE_SETTINGS, REASON_INVALID_SETTINGS)
        return IntentResult(
            ACTION_UPDATE_SETTINGS,
            True,
            REASON_SETTINGS_UPDATED,
            self._controller.apply_settings(settings),
        )

    def _new_day(self, message: Mapping[str, Any]) -> IntentResult:
        return IntentResult(ACTION_NEW_DAY, True, REASON_NEW_DAY, self._controller.reinitialize())

    def _sync(self, message: Mapping[str, Any]) -> IntentResult:
        return IntentResult(ACTION_SYNC, True, REASON_STARTUP, self._controller.snapshot())

    def _rejected(self, action: str, reason: str) -> IntentResult:
        return IntentResult(action, False, reason, self._controller.snapshot())

    def _publish(self, result: IntentResult) -> None:
        state = result.state or self._controller.snapshot()
        if result.accepted:
            text = focus_status_message(state)
        else:
            text = rejection_message(result.action, result.reason)

        self._ui.publish_focus_update(
            state,
            action=result.action,
            progress=self._controller.progress_fraction(state.phase, state.remaining_seconds),
            accepted=result.accepted,
            reason=result.reason,
            message=text,
        )
        self._ui.publish(EVENT_INTENT_RESULT, message=text, **result.to_payload())

        if result.accepted and result.action in {ACTION_NEW_DAY, ACTION_SYNC}:
            self._ui.publish_stats(self._controller.stats())
        if self._publish_runtime_state is not None:
            self._publish_runtime_state(state)
