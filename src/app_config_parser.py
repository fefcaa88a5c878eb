"""Turns the raw config.toml mapping into the frozen settings in app_config_schema."""

from __future__ import annotations

import math
from pathlib import Path
from typing import Any, Mapping, Optional

from app_config_schema import (
    AppConfig,
    AppConfigurationError,
    AssistantSettings,
    ChimeSettings,
    TimerSectionSettings,
    UIServerSettings,
)

_TRUE_WORDS = ("true", "1", "yes", "on")
_FALSE_WORDS = ("false", "0", "no", "off")

_SECRET_FIELDS = {"assistant": ("api_key",)}
_MAX_PHASE_MINUTES = 24 * 60


class _SectionReader:
    """Reads typed values out of one TOML table, naming errors ``section.field``."""

    def __init__(self, root: Mapping[str, Any], name: str, *, base_dir: Path):
        raw = root.get(name)
        if raw is None:
            raw = {}
        elif not isinstance(raw, Mapping):
            raise AppConfigurationError(f"[{name}] must be a table.")
        self._name = name
        self._values = raw
        self._base_dir = base_dir
        self._reject_secrets()

    def _field(self, key: str) -> str:
        return f"{self._name}.{key}"

    def _reject_secrets(self) -> None:
        present = [key for key in _SECRET_FIELDS.get(self._name, ()) if key in self._values]
        if not present:
            return
        joined = ", ".join(self._field(key) for key in present)
        raise AppConfigurationError(
            f"Secret values must not be stored in config.toml: {joined}. "
            "Move them to environment variables."
        )

    def has(self, key: str) -> bool:
        return key in self._values

    def text(self, key: str, default: str = "") -> str:
        value = self._values.get(key, default)
        if value is None:
            return ""
        if not isinstance(value, str):
            raise AppConfigurationError(f"{self._field(key)} must be a string.")
        return value.strip()

    def flag(self, key: str, default: bool) -> bool:
        value = self._values.get(key, default)
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            word = value.strip().lower()
            if word in _TRUE_WORDS:
                return True
            if word in _FALSE_WORDS:
                return False
        raise AppConfigurationError(f"{self._field(key)} must be a boolean.")

    def integer(self, key: str, default: Optional[int], *, minimum: Optional[int] = None) -> int:
        value = self._values.get(key, default)
        number = _coerce(value, int, f"{self._field(key)} must be an integer.")
        if minimum is not None and number < minimum:
            raise AppConfigurationError(
                f"{self._field(key)} must be >= {minimum}, got: {number}."
            )
        return number

    def number(
        self,
        key: str,
        default: float,
        *,
        positive: bool = False,
        maximum: Optional[float] = None,
    ) -> float:
        value = self._values.get(key, default)
        if isinstance(value, int) and not isinstance(value, bool):
            value = float(value)
        number = _coerce(value, float, f"{self._field(key)} must be a float.")
        if not math.isfinite(number):
            raise AppConfigurationError(f"{self._field(key)} must be a finite number.")
        if positive and number <= 0:
            raise AppConfigurationError(
                f"{self._field(key)} must be greater than zero, got: {number}."
            )
        if maximum is not None and number > maximum:
            raise AppConfigurationError(
                f"{self._field(key)} must be <= {maximum}, got: {number}."
            )
        return number

    def path(self, key: str) -> str:
        raw = self.text(key)
        if not raw:
            return ""
        path = Path(raw).expanduser()
        if not path.is_absolute():
            path = (self._base_dir / path).resolve()
        return str(path)


def _coerce(value: Any, kind: type, message: str):
    if isinstance(value, bool):
        raise AppConfigurationError(message)
    if isinstance(value, kind):
        return value
    if isinstance(value, str):
        try:
            return kind(value.strip())
        except ValueError as error:
            raise AppConfigurationError(message) from error
    raise AppConfigurationError(message)


def parse_app_config(
    raw: Mapping[str, Any],
    *,
    base_dir: Path,
    source_file: str,
) -> AppConfig:
    def reader(name: str) -> _SectionReader:
        return _SectionReader(raw, name, base_dir=base_dir)

    return AppConfig(
        timer=_timer(reader("timer")),
        chime=_chime(reader("chime")),
        assistant=_assistant(reader("assistant")),
        ui_server=_ui_server(reader("ui_server")),
        source_file=source_file,
    )


def _timer(section: _SectionReader) -> TimerSectionSettings:
    def minutes(key: str, default: float) -> float:
        return section.number(key, default, positive=True, maximum=_MAX_PHASE_MINUTES)

    return TimerSectionSettings(
        work_minutes=minutes("work_minutes", 25),
        short_break_minutes=minutes("short_break_minutes", 5),
        long_break_minutes=minutes("long_break_minutes", 15),
        long_break_interval=section.integer("long_break_interval", 4, minimum=1),
        daily_goal=section.integer("daily_goal", 8, minimum=1),
    )


def _chime(section: _SectionReader) -> ChimeSettings:
    volume = section.integer("volume", 50)
    if volume < 0 or volume > 100:
        raise AppConfigurationError("chime.volume must be in [0, 100].")
    output_device = section.integer("output_device", None) if section.has("output_device") else None
    return ChimeSettings(
        enabled=section.flag("enabled", True),
        volume=volume,
        output_device=output_device,
    )


def _assistant(section: _SectionReader) -> AssistantSettings:
    return AssistantSettings(
        enabled=section.flag("enabled", False),
        model_path=section.path("model_path"),
        model_name=section.text("model_name", "local") or "local",
        system_prompt=section.path("system_prompt"),
        n_threads=section.integer("n_threads", 4),
        n_ctx=section.integer("n_ctx", 2048),
        n_batch=section.integer("n_batch", 256),
        temperature=section.number("temperature", 0.7),
        top_p=section.number("top_p", 0.9),
        max_tokens=section.integer("max_tokens", 512, minimum=1),
        max_history_turns=section.integer("max_history_turns", 10, minimum=0),
        verbose=section.flag("verbose", False),
    )


def _ui_server(section: _SectionReader) -> UIServerSettings:
    return UIServerSettings(
        enabled=section.flag("enabled", True),
        host=section.text("host", "127.0.0.1"),
        port=section.integer("port", 8765),
        index_file=section.path("index_file"),
    )
