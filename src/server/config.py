"""Settings for the local focus page server."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path


class ServerConfigurationError(Exception):
    """Raised when the focus page server cannot be configured."""


WEBSOCKET_PATH = "/ws"
ROOT_PATH = "/"
INDEX_PATH = "/index.html"
HEALTHZ_PATH = "/healthz"

_BUNDLED_PAGE = ("web_ui", "index.html")


def bundled_index_file() -> Path:
    # Frozen builds unpack data next to sys._MEIPASS instead of the source tree.
    root = getattr(sys, "_MEIPASS", None)
    base_dir = Path(root) if root else Path(__file__).resolve().parents[2]
    return base_dir.joinpath(*_BUNDLED_PAGE)


def _check_index_file(index_file: str) -> None:
    if not index_file:
        raise ServerConfigurationError("ui_server.index_file cannot be empty")
    path = Path(index_file)
    if not path.exists():
        raise ServerConfigurationError(f"UI index file not found: {path}")
    if not path.is_file():
        raise ServerConfigurationError(f"UI index path is not a file: {path}")


@dataclass(frozen=True)
class UIServerConfig:
    enabled: bool = True
    host: str = "127.0.0.1"
    port: int = 8765
    index_file: str = ""
    websocket_path: str = WEBSOCKET_PATH

    def __post_init__(self) -> None:
        if not self.host.strip():
            raise ServerConfigurationError("ui_server.host cannot be empty")
        if self.port < 1 or self.port > 65535:
            raise ServerConfigurationError(
                f"ui_server.port must be in [1, 65535], got: {self.port}"
            )
        if not self.websocket_path.startswith("/"):
            raise ServerConfigurationError(
                f"websocket path must start with '/', got: {self.websocket_path!r}"
            )
        # A disabled server never reads the page, so a stale path is harmless.
        if self.enabled:
            _check_index_file(self.index_file)

    @property
    def ui_root(self) -> Path:
        """Directory that static assets next to the index page are served from."""
        return Path(self.index_file).resolve().parent

    @property
    def base_url(self) -> str:
        return f"http://{self.host}:{self.port}"

    @classmethod
    def from_settings(cls, settings) -> "UIServerConfig":
        index_file = (settings.index_file or "").strip() or str(bundled_index_file())
        return cls(
            enabled=bool(settings.enabled),
            host=settings.host,
            port=settings.port,
            index_file=index_file,
        )
