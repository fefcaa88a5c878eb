"""Dataclass schema objects used by runtime configuration loading."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

DEFAULT_CONFIG_FILE = "config.toml"


class AppConfigurationError(Exception):
    """Raised when application configuration fails."""


@dataclass(frozen=True)
class TimerSectionSettings:
    """Focus timer durations and cadence from `[timer]`."""
    work_minutes: float = 25
    short_break_minutes: float = 5
    long_break_minutes: float = 15
    long_break_interval: int = 4
    daily_goal: int = 8


@dataclass(frozen=True)
class ChimeSettings:
    """Completion chime settings from `[chime]`."""
    enabled: bool = True
    volume: int = 50
    output_device: Optional[int] = None


@dataclass(frozen=True)
class AssistantSettings:
    """Local study-assistant model settings from `[assistant]`."""
    enabled: bool = False
    model_path: str = ""
    model_name: str = "local"
    system_prompt: str = ""
    n_threads: int = 4
    n_ctx: int = 2048
    n_batch: int = 256
    temperature: float = 0.7
    top_p: float = 0.9
    max_tokens: int = 512
    max_history_turns: int = 10
    verbose: bool = False


@dataclass(frozen=True)
class UIServerSettings:
    """Built-in UI server settings from `[ui_server]`."""
    enabled: bool = True
    host: str = "127.0.0.1"
    port: int = 8765
    index_file: str = ""


@dataclass(frozen=True)
class AppConfig:
    """Complete typed runtime configuration loaded from `config.toml`."""
    timer: TimerSectionSettings
    chime: ChimeSettings
    assistant: AssistantSettings
    ui_server: UIServerSettings
    source_file: str
