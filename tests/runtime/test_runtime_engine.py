import datetime as dt
import logging
import sys
import threading
import types
import unittest
from pathlib import Path
from unittest.mock import patch

from app_config_schema import (
    AppConfig,
    AssistantSettings,
    ChimeSettings,
    TimerSectionSettings,
    UIServerSettings,
)
from focus import FocusSessionController, TimerPhase, TimerSettings

# Import runtime.loop without executing src/runtime/__init__.py.
_RUNTIME_DIR = Path(__file__).resolve().parents[2] / "src" / "runtime"
if "runtime" not in sys.modules:
    _pkg = types.ModuleType("runtime")
    _pkg.__path__ = [str(_RUNTIME_DIR)]  # type: ignore[attr-defined]
    sys.modules["runtime"] = _pkg


def _build_chime_stub():
    module = types.ModuleType("chime")

    class ChimePlayer:  # pragma: no cover - type placeholder
        pass

    module.ChimePlayer = ChimePlayer
    return module


with patch.dict(sys.modules, {"chime": _build_chime_stub()}):
    from runtime.loop import (
        RuntimeBootstrap,
        RuntimeEngine,
        RuntimeHooks,
        timer_settings_from_config,
    )

_NOW = dt.datetime(2026, 3, 2, 9, 0)


class _UIServerStub:
    def __init__(self):
        self.events: list[tuple[str, dict[str, object]]] = []
        self.states: list[str] = []
        self.handler = None
        self.stopped = False

    def set_message_handler(self, handler):
        self.handler = handler

    def publish(self, event_type: str, **payload):
        self.events.append((event_type, payload))

    def publish_state(self, state: str, *, message=None, **payload):
        self.states.append(state)

    def stop(self, timeout_seconds: float = 5.0):
        self.stopped = True


class _ChimeStub:
    def __init__(self):
        self.volumes: list[int] = []
        self.played = threading.Event()

    def play(self, volume: int) -> bool:
        self.volumes.append(volume)
        self.played.set()
        return True


def _app_config(**timer) -> AppConfig:
    return AppConfig(
        timer=TimerSectionSettings(**timer),
        chime=ChimeSettings(volume=30),
        assistant=AssistantSettings(),
        ui_server=UIServerSettings(),
        source_file="config.toml",
    )


def _engine(*, controller=None, chime=None, stop_immediately=False):
    ui = _UIServerStub()

    def setup_signal_handlers(request_stop):
        if stop_immediately:
            request_stop()

    engine = RuntimeEngine(
        RuntimeBootstrap(
            logger=logging.getLogger("test"),
            app_config=_app_config(),
            chime_player=chime,
            chat_session=None,
            ui_server=ui,
            hooks=RuntimeHooks(setup_signal_handlers=setup_signal_handlers),
        ),
        controller=controller or FocusSessionController(clock=lambda: _NOW),
    )
    return engine, ui


class RuntimeEngineTests(unittest.TestCase):
    def test_timer_settings_from_config(self) -> None:
        settings = timer_settings_from_config(_app_config(work_minutes=40, long_break_interval=2))
        self.assertEqual(40, settings.work_minutes)
        self.assertEqual(2, settings.long_break_interval)
        self.assertTrue(settings.sound_enabled)
        self.assertEqual(30, settings.sound_volume)

    def test_run_registers_handler_syncs_and_shuts_down(self) -> None:
        engine, ui = _engine(stop_immediately=True)

        self.assertEqual(0, engine.run())

        self.assertEqual(engine.enqueue_message, ui.handler)
        focus_events = [payload for kind, payload in ui.events if kind == "focus"]
        self.assertEqual("sync", focus_events[0]["action"])
        self.assertTrue(ui.stopped)

    def test_queued_intents_are_applied_in_order(self) -> None:
        engine, ui = _engine()
        engine.enqueue_message({"type": "intent", "action": "switch_mode", "phase": "short_break"})
        engine.enqueue_message({"type": "intent", "action": "set_task", "label": "ignored later"})
        engine.enqueue_message({"type": "intent", "action": "start"})

        self.assertEqual(3, engine.process_pending())

        state = engine.controller.snapshot()
        self.assertIs(TimerPhase.SHORT_BREAK, state.phase)
        self.assertTrue(state.is_running)
        engine.controller.close()

    def test_unknown_message_type_publishes_error(self) -> None:
        engine, ui = _engine()
        engine.enqueue_message({"type": "telemetry"})
        engine.process_pending()
        self.assertEqual("error", ui.events[-1][0])
        self.assertIn("telemetry", ui.events[-1][1]["message"])

    def test_chat_without_assistant_publishes_error(self) -> None:
        engine, ui = _engine()
        engine.enqueue_message({"type": "chat", "kind": "ask", "text": "hello"})
        engine.process_pending()
        self.assertEqual("The study assistant is disabled.", ui.events[-1][1]["message"])

    def test_completion_plays_chime_and_publishes_session(self) -> None:
        chime = _ChimeStub()
        controller = FocusSessionController(
            TimerSettings(work_minutes=0.05, sound_volume=30),
            clock=lambda: _NOW,
        )
        engine, ui = _engine(controller=controller, chime=chime)
        controller.start()
        for _ in range(3):
            controller.tick()

        self.assertTrue(chime.played.wait(2.0))
        self.assertEqual([30], chime.volumes)
        kinds = [kind for kind, _ in ui.events]
        self.assertIn("session_recorded", kinds)
        self.assertIn("stats", kinds)


if __name__ == "__main__":
    unittest.main()
