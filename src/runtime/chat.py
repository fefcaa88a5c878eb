"""Background handling of study-assistant requests sent from the UI."""

from __future__ import annotations

import concurrent.futures
import logging
from typing import Any, Callable, Mapping, Optional

from assistant import AssistantError, ChatSession, generate_flashcards, study_recommendations
from contracts.ui_protocol import EVENT_ASSISTANT_REPLY, EVENT_ERROR, STATE_ERROR, STATE_THINKING

from .ui import RuntimeUIPublisher

CHAT_ASK = "ask"
CHAT_FLASHCARDS = "flashcards"
CHAT_STUDY_PLAN = "study_plan"
CHAT_CLEAR = "clear"

DEFAULT_FLASHCARD_COUNT = 10
MAX_FLASHCARD_COUNT = 30


class ChatRequestHandler:
    """Runs one assistant request at a time on a dedicated worker thread."""
    def __init__(
        self,
        *,
        session: Optional[ChatSession],
        ui: RuntimeUIPublisher,
        logger: Optional[logging.Logger] = None,
        build_context: Optional[Callable[[], str]] = None,
        publish_idle_state: Optional[Callable[[], None]] = None,
        executor: Optional[concurrent.futures.Executor] = None,
    ):
        self._session = session
        self._ui = ui
        self._logger = logger or logging.getLogger("runtime.chat")
        self._build_context = build_context
        self._publish_idle_state = publish_idle_state
        self._executor = executor or concurrent.futures.ThreadPoolExecutor(
            max_workers=1,
            thread_name_prefix="assistant",
        )
        self._pending: Optional[concurrent.futures.Future[None]] = None

    @property
    def is_busy(self) -> bool:
        return self._pending is not None and not self._pending.done()

    def submit(self, message: Mapping[str, Any]) -> bool:
        """Queue a request; returns ``False`` when it was refused up front."""
        if self._session is None:
            self._publish_error("The study assistant is disabled.")
            return False

        kind = message.get("kind", CHAT_ASK)
        if kind == CHAT_CLEAR:
            if self.is_busy:
                self._refuse_while_busy()
                return False
            self._session.clear_history()
            self._ui.publish(EVENT_ASSISTANT_REPLY, kind=CHAT_CLEAR, text="Conversation cleared.")
            return True

        job = self._build_job(kind, message)
        if job is None:
            return False

        if self.is_busy:
            self._refuse_while_busy()
            return False

        self._ui.publish_state(STATE_THINKING, message="Thinking...")
        try:
            self._pending = self._executor.submit(self._run, kind, job)
        except RuntimeError as error:
            self._logger.error("Failed to submit assistant request: %s", error)
            self._publish_error(f"Failed to submit assistant request: {error}")
            self._pending = None
            return False
        return True

    def finalize(self) -> None:
        """Surface an unexpected worker failure; call from the runtime loop."""
        pending = self._pending
        if pending is None or not pending.done():
            return
        try:
            pending.result()
        except Exception as error:
            self._logger.error("Assistant worker failed: %s", error, exc_info=True)
            self._publish_error(f"Assistant worker failed: {error}")
        finally:
            self._pending = None

    def shutdown(self) -> None:
        self._executor.shutdown(wait=False, cancel_futures=True)

    def _build_job(
        self,
        kind: Any,
        message: Mapping[str, Any],
    ) -> Optional[Callable[[ChatSession], dict[str, Any]]]:
        if kind == CHAT_ASK:
            text = message.get("text")
            if not isinstance(text, str) or not text.strip():
                self._publish_error("Ask the assistant something first.")
                return None
            context = self._build_context() if self._build_context else None
            return lambda session: {
                "text": session.ask(text, context=context).content,
            }

        if kind == CHAT_FLASHCARDS:
            topic = message.get("topic")
            if not isinstance(topic, str) or not topic.strip():
                self._publish_error("Flashcards need a topic.")
                return None
            count = _clamp_count(message.get("count"))
            return lambda session: _flashcard_payload(session, topic.strip(), count)

        if kind == CHAT_STUDY_PLAN:
            subject = message.get("subject")
            if not isinstance(subject, str) or not subject.strip():
                self._publish_error("A study plan needs a subject.")
                return None
            level = message.get("level") if isinstance(message.get("level"), str) else "any"
            raw_goals = message.get("goals")
            goals = (
                [goal for goal in raw_goals if isinstance(goal, str)]
                if isinstance(raw_goals, list)
                else []
            )
            minutes = message.get("minutes_available")
            if isinstance(minutes, bool) or not isinstance(minutes, int) or minutes < 1:
                minutes = 60
            return lambda session: {
                "text": study_recommendations(
                    session,
                    subject=subject.strip(),
                    level=level,
                    goals=goals,
                    minutes_available=minutes,
                ).content,
            }

        self._logger.warning("Unsupported assistant request kind: %r", kind)
        self._publish_error(f"Unsupported assistant request: {kind}")
        return None

    def _run(self, kind: str, job: Callable[[ChatSession], dict[str, Any]]) -> None:
        session = self._session
        if session is None:
            self._publish_error("The study assistant is disabled.")
            return
        try:
            payload = job(session)
        except AssistantError as error:
            self._publish_error(str(error))
            return
        self._ui.publish(EVENT_ASSISTANT_REPLY, kind=kind, **payload)
        if self._publish_idle_state is not None:
            self._publish_idle_state()

    def _refuse_while_busy(self) -> None:
        self._logger.warning("Skipping assistant request while previous one is running.")
        self._ui.publish_state(STATE_THINKING, message="Previous request still processing")

    def _publish_error(self, message: str) -> None:
        self._ui.publish(EVENT_ERROR, state=STATE_ERROR, message=message)
        if self._publish_idle_state is not None:
            self._publish_idle_state()


def _clamp_count(raw: Any) -> int:
    if isinstance(raw, bool) or not isinstance(raw, int):
        return DEFAULT_FLASHCARD_COUNT
    return max(1, min(raw, MAX_FLASHCARD_COUNT))


def _flashcard_payload(session: ChatSession, topic: str, count: int) -> dict[str, Any]:
    cards = generate_flashcards(session, topic, count)
    if not cards:
        raise AssistantError("The assistant did not return any flashcards.")
    return {
        "topic": topic,
        "cards": [{"front": card.front, "back": card.back} for card in cards],
        "text": f"{len(cards)} flashcards about {topic}",
    }
