"""In-memory, append-only record of finished Work sessions."""

from __future__ import annotations

import threading
from typing import Iterable, Iterator

from .models import PomodoroSession


class SessionLedger:
    """Thread-safe session history; newest entries first."""

    def __init__(self, sessions: Iterable[PomodoroSession] = ()):
        self._lock = threading.Lock()
        self._sessions: list[PomodoroSession] = sorted(
            sessions,
            key=lambda session: session.completed_at,
            reverse=True,
        )

    def append(self, session: PomodoroSession) -> None:
        with self._lock:
            self._sessions.insert(0, session)

    def entries(self) -> tuple[PomodoroSession, ...]:
        with self._lock:
            return tuple(self._sessions)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __iter__(self) -> Iterator[PomodoroSession]:
        return iter(self.entries())
