import sys
import tempfile
import types
import unittest
from pathlib import Path

from app_config_schema import UIServerSettings

# Import server.config without executing src/server/__init__.py.
_SERVER_DIR = Path(__file__).resolve().parents[2] / "src" / "server"
if "server" not in sys.modules:
    _pkg = types.ModuleType("server")
    _pkg.__path__ = [str(_SERVER_DIR)]  # type: ignore[attr-defined]
    sys.modules["server"] = _pkg

from server.config import ServerConfigurationError, UIServerConfig


class UIServerConfigTests(unittest.TestCase):
    def test_from_settings_uses_bundled_index_page(self) -> None:
        config = UIServerConfig.from_settings(UIServerSettings())

        self.assertEqual(("web_ui", "index.html"), Path(config.index_file).parts[-2:])
        self.assertTrue(Path(config.index_file).is_file())
        self.assertEqual("/ws", config.websocket_path)
        self.assertEqual(Path(config.index_file).resolve().parent, config.ui_root)

    def test_from_settings_prefers_explicit_index_file(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            custom = Path(temp_dir) / "index.html"
            custom.write_text("<html></html>", encoding="utf-8")

            config = UIServerConfig.from_settings(UIServerSettings(index_file=str(custom)))
            self.assertEqual(str(custom), config.index_file)

    def test_rejects_invalid_host_port_and_missing_index(self) -> None:
        with self.assertRaises(ServerConfigurationError):
            UIServerConfig.from_settings(UIServerSettings(host="  "))
        with self.assertRaises(ServerConfigurationError):
            UIServerConfig.from_settings(UIServerSettings(port=70000))
        with self.assertRaises(ServerConfigurationError):
            UIServerConfig.from_settings(UIServerSettings(index_file="/nonexistent/index.html"))

    def test_websocket_path_and_base_url(self) -> None:
        config = UIServerConfig(enabled=False, host="0.0.0.0", port=9000)
        self.assertEqual("http://0.0.0.0:9000", config.base_url)
        with self.assertRaises(ServerConfigurationError):
            UIServerConfig(enabled=False, websocket_path="ws")

    def test_disabled_server_skips_index_check(self) -> None:
        config = UIServerConfig(enabled=False, index_file="/nonexistent/index.html")
        self.assertFalse(config.enabled)


if __name__ == "__main__":
    unittest.main()
