from __future__ import annotations

from typing import Any, Optional, Protocol

from contracts.ui_protocol import EVENT_FOCUS, EVENT_SESSION_RECORDED, EVENT_STATS
from focus import FocusStats, PomodoroSession, TimerState


class UIServerLike(Protocol):
    def publish(self, event_type: str, **payload: Any) -> None:
        ...

    def publish_state(
        self,
        state: str,
        *,
        message: Optional[str] = None,
        **payload: Any,
    ) -> None:
        ...


class RuntimeUIPublisher:
    def __init__(self, ui_server: Optional[UIServerLike]):
        self._ui_server = ui_server

    def publish(self, event_type: str, **payload: Any) -> None:
        if self._ui_server:
            self._ui_server.publish(event_type, **payload)

    def publish_state(
        self,
        state: str,
        *,
        message: Optional[str] = None,
        **payload: Any,
    ) -> None:
        if self._ui_server:
            self._ui_server.publish_state(state, message=message, **payload)

    def publish_focus_update(
        self,
        state: TimerState,
        *,
        action: str,
        progress: float,
        accepted: Optional[bool] = None,
        reason: str = "",
        message: Optional[str] = None,
    ) -> None:
        payload: dict[str, Any] = {
            "action": action,
            "phase": state.phase.value,
            "remaining_seconds": state.remaining_seconds,
            "duration_seconds": state.duration_seconds,
            "is_running": state.is_running,
            "task_label": state.current_task_label,
            "completed_count": state.completed_count,
            "progress": round(progress, 4),
        }
        if accepted is not None:
            payload["accepted"] = accepted
        if reason:
            payload["reason"] = reason
        if message:
            payload["message"] = message
        self.publish(EVENT_FOCUS, **payload)

    def publish_stats(self, stats: FocusStats) -> None:
        self.publish(EVENT_STATS, **stats.to_payload())

    def publish_session_recorded(self, session: PomodoroSession) -> None:
        self.publish(EVENT_SESSION_RECORDED, **session.to_payload())
