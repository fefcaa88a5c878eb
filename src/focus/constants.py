"""Defaults, action names, and reasons used by the focus session controller."""

from __future__ import annotations

DEFAULT_WORK_MINUTES = 25
DEFAULT_SHORT_BREAK_MINUTES = 5
DEFAULT_LONG_BREAK_MINUTES = 15
DEFAULT_LONG_BREAK_INTERVAL = 4
DEFAULT_SOUND_VOLUME = 50
DEFAULT_DAILY_GOAL = 8

DEFAULT_TASK_LABEL = "Focus Session"
MAX_TASK_LABEL_LENGTH = 120

TICK_PERIOD_MS = 1000
MIN_PHASE_SECONDS = 1
MAX_PHASE_MINUTES = 24 * 60
RECENT_SESSIONS_LIMIT = 5

ACTION_START = "start"
ACTION_PAUSE = "pause"
ACTION_TOGGLE = "toggle"
ACTION_RESET = "reset"
ACTION_SWITCH_MODE = "switch_mode"
ACTION_SET_TASK = "set_task"
ACTION_UPDATE_SETTINGS = "update_settings"
ACTION_NEW_DAY = "new_day"
ACTION_SYNC = "sync"
ACTION_TICK = "tick"
ACTION_COMPLETED = "completed"

REASON_STARTED = "started"
REASON_PAUSED = "paused"
REASON_RESET = "reset"
REASON_SWITCHED = "switched"
REASON_TASK_UPDATED = "task_updated"
REASON_SETTINGS_UPDATED = "settings_updated"
REASON_NEW_DAY = "new_day"
REASON_ALREADY_RUNNING = "already_running"
REASON_NOT_RUNNING = "not_running"
REASON_INVALID_PHASE = "invalid_phase"
REASON_INVALID_SETTINGS = "invalid_settings"
REASON_INVALID_PAYLOAD = "invalid_payload"
REASON_UNSUPPORTED_ACTION = "unsupported_action"
REASON_TICK = "tick"
REASON_COMPLETED = "completed"
REASON_STARTUP = "startup"
