import json
import logging
import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from sshtabs.config import (
    DEFAULT_SERVER,
    Settings,
    configure_logging,
    default_config_path,
    load_settings,
)


class TestConfigPaths(unittest.TestCase):
    def test_default_path_uses_xdg_config_home(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with patch.dict(os.environ, {"XDG_CONFIG_HOME": tmp}):
                self.assertEqual(
                    default_config_path(), Path(tmp) / "sshtabs" / "config.json"
                )


class TestLoadSettings(unittest.TestCase):
    def test_defaults_when_file_missing(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            settings = load_settings(Path(tmp) / "missing.json", environ={})

        self.assertEqual(settings.server, DEFAULT_SERVER)
        self.assertIsNone(settings.cookie)

    def test_malformed_file_yields_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.json"
            path.write_text("{broken")
            settings = load_settings(path, environ={})

        self.assertEqual(settings.server, DEFAULT_SERVER)

    def test_precedence_file_env_override(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.json"
            path.write_text(
                json.dumps(
                    {
                        "server": "http://file:1",
                        "cookie": "from-file",
                        "download_dir": "/data/downloads",
                    }
                )
            )
            settings = load_settings(
                path,
                environ={"SSHTABS_SERVER": "http://env:2"},
                server=None,
                cookie="from-cli",
            )

        self.assertEqual(settings.server, "http://env:2")
        self.assertEqual(settings.cookie, "from-cli")
        self.assertEqual(settings.download_dir, Path("/data/downloads"))

    def test_override_wins_over_env(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            settings = load_settings(
                Path(tmp) / "none.json",
                environ={"SSHTABS_SERVER": "http://env:2"},
                server="https://cli:3",
            )

        self.assertEqual(settings.server, "https://cli:3")


class TestSettings(unittest.TestCase):
    def test_websocket_url_http(self) -> None:
        settings = Settings(server="http://gateway:8080/")
        self.assertEqual(settings.websocket_url("7"), "ws://gateway:8080/ws?id=7")

    def test_websocket_url_https_with_prefix(self) -> None:
        settings = Settings(server="https://example.com/ssh")
        self.assertEqual(
            settings.websocket_url("a b"), "wss://example.com/ssh/ws?id=a+b"
        )

    def test_cookie_headers(self) -> None:
        self.assertEqual(Settings().websocket_headers(), {})
        self.assertEqual(Settings().cookies, {})
        settings = Settings(cookie="abc")
        self.assertEqual(settings.websocket_headers(), {"Cookie": "webssh_session=abc"})
        self.assertEqual(settings.cookies, {"webssh_session": "abc"})


class TestConfigureLogging(unittest.TestCase):
    def test_logs_go_to_file(self) -> None:
        root = logging.getLogger()
        before = list(root.handlers)
        level = root.level
        with tempfile.TemporaryDirectory() as tmp:
            log_file = Path(tmp) / "logs" / "sshtabs.log"
            try:
                configure_logging(Settings(log_file=log_file, log_level="DEBUG"))
                logging.getLogger("sshtabs.test").info("hello log")
                for handler in root.handlers:
                    handler.flush()
                self.assertIn("hello log", log_file.read_text())
                self.assertEqual(logging.getLogger("httpx").level, logging.WARNING)
            finally:
                for handler in list(root.handlers):
                    if handler not in before:
                        root.removeHandler(handler)
                        handler.close()
                root.setLevel(level)


if __name__ == "__main__":
    unittest.main()
