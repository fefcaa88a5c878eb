"""Runtime orchestration loop for UI intents, timer ticks, and assistant jobs."""

from __future__ import annotations

import concurrent.futures
import logging
import threading
from dataclasses import dataclass
from queue import Empty, Queue
from typing import Any, Callable, Optional

from app_config import AppConfig
from assistant import ChatSession
from chime import ChimePlayer
from contracts.ui_protocol import EVENT_ERROR, MESSAGE_CHAT, MESSAGE_INTENT, STATE_ERROR
from focus import FocusSessionController, ThreadingScheduler, TimerSettings
from focus.constants import REASON_STARTUP
from server import UIServer

from .chat import ChatRequestHandler
from .intents import FocusIntentDispatcher
from .messages import focus_status_message
from .ticks import FocusEventProcessor, TickDependencies
from .ui import RuntimeUIPublisher


@dataclass(frozen=True)
class RuntimeHooks:
    """Process-level hooks the engine calls while starting up."""
    setup_signal_handlers: Callable[[Callable[[], None]], None]


@dataclass(frozen=True)
class RuntimeBootstrap:
    """Everything main() builds before handing control to the engine."""
    logger: logging.Logger
    app_config: AppConfig
    chime_player: Optional[ChimePlayer]
    chat_session: Optional[ChatSession]
    ui_server: Optional[UIServer]
    hooks: RuntimeHooks


@dataclass
class RuntimeResources:
    """Queue, workers and stop flag owned by one engine run."""
    inbound_queue: Queue[dict[str, Any]]
    chime_executor: concurrent.futures.ThreadPoolExecutor
    stop_requested: threading.Event


def timer_settings_from_config(app_config: AppConfig) -> TimerSettings:
    """Build the controller settings from the `[timer]` and `[chime]` sections."""
    return TimerSettings(
        work_minutes=app_config.timer.work_minutes,
        short_break_minutes=app_config.timer.short_break_minutes,
        long_break_minutes=app_config.timer.long_break_minutes,
        long_break_interval=app_config.timer.long_break_interval,
        sound_enabled=app_config.chime.enabled,
        sound_volume=app_config.chime.volume,
    )


class RuntimeEngine:
    """Main runtime loop that serializes UI messages onto the focus controller."""
    def __init__(
        self,
        bootstrap: RuntimeBootstrap,
        *,
        controller: Optional[FocusSessionController] = None,
    ):
        self._bootstrap = bootstrap
        self._logger = bootstrap.logger
        self._ui = RuntimeUIPublisher(bootstrap.ui_server)

        self._controller = controller or FocusSessionController(
            timer_settings_from_config(bootstrap.app_config),
            scheduler=ThreadingScheduler(logger=logging.getLogger("focus.scheduler")),
            daily_goal=bootstrap.app_config.timer.daily_goal,
            logger=logging.getLogger("focus"),
        )

        self._resources = RuntimeResources(
            inbound_queue=Queue(),
            chime_executor=concurrent.futures.ThreadPoolExecutor(
                max_workers=1,
                thread_name_prefix="chime",
            ),
            stop_requested=threading.Event(),
        )

        self._processor = FocusEventProcessor(
            TickDependencies(
                logger=self._logger,
                ui=self._ui,
                current_settings=lambda: self._controller.settings,
                current_stats=self._controller.stats,
                play_chime=self._play_chime if bootstrap.chime_player else None,
            )
        )
        self._controller.set_listener(self._processor.handle)

        self._dispatcher = FocusIntentDispatcher(
            controller=self._controller,
            ui=self._ui,
            logger=logging.getLogger("runtime.intents"),
            publish_runtime_state=self._processor.publish_runtime_state,
        )
        self._chat = ChatRequestHandler(
            session=bootstrap.chat_session,
            ui=self._ui,
            logger=logging.getLogger("runtime.chat"),
            build_context=self._build_assistant_context,
            publish_idle_state=self._publish_idle_state,
        )

    @property
    def controller(self) -> FocusSessionController:
        return self._controller

    def enqueue_message(self, message: dict[str, Any]) -> None:
        """UI server callback; hands the message to the runtime thread."""
        self._resources.inbound_queue.put(message)

    def request_stop(self) -> None:
        self._resources.stop_requested.set()

    def run(self) -> int:
        ui_server = self._bootstrap.ui_server
        if ui_server is not None:
            ui_server.set_message_handler(self.enqueue_message)

        try:
            self._bootstrap.hooks.setup_signal_handlers(self.request_stop)
            self._dispatcher.publish_sync(REASON_STARTUP)
            self._logger.info("Focus runtime ready")

            while not self._resources.stop_requested.is_set():
                self._chat.finalize()
                message = self._poll_message()
                if message is None:
                    continue
                self._handle_message(message)
            self._logger.info("Shutdown requested.")
            return 0

        except KeyboardInterrupt:
            self._logger.info("Shutdown requested by keyboard interrupt.")
            return 0
        except Exception as error:
            self._logger.error("Unexpected error: %s", error, exc_info=True)
            return 1
        finally:
            self._shutdown()

    def process_pending(self) -> int:
        """Drain queued UI messages without blocking; returns how many ran."""
        handled = 0
        while True:
            try:
                message = self._resources.inbound_queue.get_nowait()
            except Empty:
                return handled
            self._handle_message(message)
            handled += 1

    def _poll_message(self) -> Optional[dict[str, Any]]:
        try:
            return self._resources.inbound_queue.get(timeout=0.25)
        except Empty:
            return None

    def _handle_message(self, message: dict[str, Any]) -> None:
        message_type = message.get("type")
        try:
            if message_type == MESSAGE_INTENT:
                self._dispatcher.handle(message)
                return
            if message_type == MESSAGE_CHAT:
                self._chat.submit(message)
                return
        except Exception as error:
            self._logger.error(
                "Failed to handle %s message: %s",
                message_type,
                error,
                exc_info=True,
            )
            self._ui.publish(
                EVENT_ERROR,
                state=STATE_ERROR,
                message=f"Failed to handle {message_type} message: {error}",
            )
            self._publish_idle_state()
            return

        self._logger.warning("Ignoring unknown UI message type: %s", message_type)
        self._ui.publish(
            EVENT_ERROR,
            message=f"Unsupported message type: {message_type}",
        )

    def _play_chime(self, volume: int) -> None:
        player = self._bootstrap.chime_player
        if player is None:
            return
        future = self._resources.chime_executor.submit(player.play, volume)
        future.add_done_callback(self._log_chime_failure)

    def _log_chime_failure(self, future: concurrent.futures.Future) -> None:
        if future.cancelled():
            return
        error = future.exception()
        if error is not None:
            self._logger.error("Completion chime failed: %s", error)

    def _publish_idle_state(self) -> None:
        self._processor.publish_runtime_state(self._controller.snapshot())

    def _build_assistant_context(self) -> str:
        state = self._controller.snapshot()
        stats = self._controller.stats()
        return (
            f"Timer: {focus_status_message(state)}\n"
            f"Pomodoros completed today: {stats.todays_completed} of {stats.daily_goal}\n"
            f"Focus minutes today: {stats.todays_focus_minutes}"
        )

    def _shutdown(self) -> None:
        self._logger.info("Stopping focus timer...")
        self._controller.close()

        self._logger.info("Stopping background workers...")
        self._chat.shutdown()
        self._resources.chime_executor.shutdown(wait=False, cancel_futures=True)

        ui_server = self._bootstrap.ui_server
        if ui_server is not None:
            self._logger.info("Stopping UI server...")
            try:
                ui_server.stop(timeout_seconds=5.0)
            except Exception as error:
                self._logger.error("Error stopping UI server: %s", error, exc_info=True)
