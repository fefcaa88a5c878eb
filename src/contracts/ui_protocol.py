"""Web UI websocket event, state, and intent constants."""

from __future__ import annotations

# Outbound websocket event types
EVENT_HELLO = "hello"
EVENT_STATE_UPDATE = "state_update"
EVENT_FOCUS = "focus"
EVENT_SESSION_RECORDED = "session_recorded"
EVENT_STATS = "stats"
EVENT_INTENT_RESULT = "intent_result"
EVENT_ASSISTANT_REPLY = "assistant_reply"
EVENT_ERROR = "error"

# Inbound websocket message types
MESSAGE_INTENT = "intent"
MESSAGE_CHAT = "chat"

# UI runtime states
STATE_IDLE = "idle"
STATE_FOCUSING = "focusing"
STATE_ON_BREAK = "on_break"
STATE_THINKING = "thinking"
STATE_REPLYING = "replying"
STATE_ERROR = "error"

STICKY_EVENT_TYPES: frozenset[str] = frozenset(
    {
        EVENT_STATE_UPDATE,
        EVENT_FOCUS,
        EVENT_STATS,
        EVENT_SESSION_RECORDED,
        EVENT_ASSISTANT_REPLY,
        EVENT_ERROR,
    }
)

STICKY_EVENT_ORDER: tuple[str, ...] = (
    EVENT_FOCUS,
    EVENT_STATS,
    EVENT_SESSION_RECORDED,
    EVENT_ASSISTANT_REPLY,
    EVENT_ERROR,
    EVENT_STATE_UPDATE,
)
