"""Runtime engine exports."""

from .chat import ChatRequestHandler
from .intents import FocusIntentDispatcher, IntentResult
from .loop import RuntimeBootstrap, RuntimeEngine, RuntimeHooks, timer_settings_from_config

__all__ = [
    "ChatRequestHandler",
    "FocusIntentDispatcher",
    "IntentResult",
    "RuntimeBootstrap",
    "RuntimeEngine",
    "RuntimeHooks",
    "timer_settings_from_config",
]
