"""Locates and loads config.toml for the focus timer."""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Iterator, Mapping

try:  # Python 3.11+
    import tomllib
except ModuleNotFoundError:  # pragma: no cover - fallback for older runtimes
    import tomli as tomllib  # type: ignore

from app_config_parser import parse_app_config
from app_config_schema import (
    DEFAULT_CONFIG_FILE,
    AppConfig,
    AppConfigurationError,
    AssistantSettings,
    ChimeSettings,
    TimerSectionSettings,
    UIServerSettings,
)

CONFIG_ENV_VAR = "APP_CONFIG_FILE"

__all__ = [
    "AppConfig",
    "AppConfigurationError",
    "AssistantSettings",
    "CONFIG_ENV_VAR",
    "ChimeSettings",
    "TimerSectionSettings",
    "UIServerSettings",
    "load_app_config",
    "resolve_config_path",
]


def _absolute(raw: str | Path) -> Path:
    path = Path(raw).expanduser()
    if path.is_absolute():
        return path
    return (Path.cwd() / path).resolve()


def _packaged_candidates() -> Iterator[Path]:
    # Frozen builds keep config.toml beside the executable or inside the bundle.
    if getattr(sys, "frozen", False):
        yield Path(sys.executable).resolve().parent / DEFAULT_CONFIG_FILE
    bundle_root = getattr(sys, "_MEIPASS", None)
    if bundle_root:
        yield Path(bundle_root) / DEFAULT_CONFIG_FILE


def resolve_config_path(config_path: str | None = None) -> Path:
    """Pick the config file: explicit argument, then $APP_CONFIG_FILE, then ./config.toml.

    Only the implicit default falls back to packaged locations; an explicit or
    environment path is returned as-is so a typo surfaces as "not found".
    """
    explicit = config_path or os.getenv(CONFIG_ENV_VAR)
    if explicit:
        return _absolute(explicit)

    default = _absolute(DEFAULT_CONFIG_FILE)
    if default.exists():
        return default
    for candidate in _packaged_candidates():
        if candidate.exists():
            return candidate
    return default


def _read_toml(path: Path) -> Mapping:
    if not path.exists():
        raise AppConfigurationError(f"Config file not found: {path}")
    if not path.is_file():
        raise AppConfigurationError(f"Config path is not a file: {path}")
    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except (OSError, tomllib.TOMLDecodeError) as error:
        raise AppConfigurationError(f"Failed to parse config TOML: {error}") from error


def load_app_config(config_path: str | None = None) -> AppConfig:
    path = resolve_config_path(config_path)
    return parse_app_config(_read_toml(path), base_dir=path.parent, source_file=str(path))
