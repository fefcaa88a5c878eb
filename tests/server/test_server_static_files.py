import sys
import tempfile
import types
import unittest
from pathlib import Path

# Import server.static_files without executing src/server/__init__.py.
_SERVER_DIR = Path(__file__).resolve().parents[2] / "src" / "server"
if "server" not in sys.modules:
    _pkg = types.ModuleType("server")
    _pkg.__path__ = [str(_SERVER_DIR)]  # type: ignore[attr-defined]
    sys.modules["server"] = _pkg

from server.static_files import guess_content_type, resolve_static_file


class ResolveStaticFileTests(unittest.TestCase):
    def setUp(self) -> None:
        self._temp_dir = tempfile.TemporaryDirectory()
        self.addCleanup(self._temp_dir.cleanup)
        self.base = Path(self._temp_dir.name)
        self.ui_root = self.base / "web_ui"
        self.ui_root.mkdir()

    def _write(self, relative: str, content: str = "x") -> Path:
        path = self.ui_root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    def test_serves_nested_sound_and_script_assets(self) -> None:
        script = self._write("js/timer.js", "tick();")
        sound = self._write("sounds/bell.wav")

        self.assertEqual(script.resolve(), resolve_static_file(self.ui_root, "/js/timer.js"))
        self.assertEqual(sound.resolve(), resolve_static_file(self.ui_root, "sounds/bell.wav"))

    def test_refuses_paths_escaping_the_page_directory(self) -> None:
        (self.base / "config.toml").write_text("[timer]", encoding="utf-8")

        for request_path in ("/../config.toml", "/js/../../config.toml"):
            with self.subTest(request_path=request_path):
                self.assertIsNone(resolve_static_file(self.ui_root, request_path))

    def test_refuses_empty_directories_and_missing_paths(self) -> None:
        (self.ui_root / "js").mkdir()
        for request_path in ("", "/", "/js", "/stats.json"):
            with self.subTest(request_path=request_path):
                self.assertIsNone(resolve_static_file(self.ui_root, request_path))

    def test_refuses_dotfiles_at_any_depth(self) -> None:
        self._write(".env", "ASSISTANT_TOKEN=x")
        self._write("js/.cache/state.json")

        self.assertIsNone(resolve_static_file(self.ui_root, "/.env"))
        self.assertIsNone(resolve_static_file(self.ui_root, "/js/.cache/state.json"))


class GuessContentTypeTests(unittest.TestCase):
    def test_text_like_types_carry_utf8_charset(self) -> None:
        self.assertEqual("text/html; charset=utf-8", guess_content_type(Path("index.html")))
        self.assertEqual("image/svg+xml; charset=utf-8", guess_content_type(Path("tomato.svg")))
        self.assertIn("javascript", guess_content_type(Path("timer.js")))

    def test_binary_and_unknown_types(self) -> None:
        self.assertEqual("image/png", guess_content_type(Path("icon.png")))
        self.assertEqual(
            "application/octet-stream",
            guess_content_type(Path("session.focuslog")),
        )


if __name__ == "__main__":
    unittest.main()
