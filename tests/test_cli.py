import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from sshtabs.app import main


class TestCli(unittest.TestCase):
    def test_main_runs_app_with_overrides(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config = Path(tmp) / "config.json"
            with (
                patch("sshtabs.app.TerminalTabs") as app_cls,
                patch("sshtabs.app.configure_logging") as configure,
            ):
                code = main(
                    [
                        "--config",
                        str(config),
                        "--server",
                        "https://gateway.example",
                        "--download-dir",
                        tmp,
                        "--debug",
                    ]
                )

        self.assertEqual(code, 0)
        settings = app_cls.call_args.kwargs["settings"]
        self.assertEqual(settings.server, "https://gateway.example")
        self.assertEqual(settings.download_dir, Path(tmp))
        self.assertEqual(settings.log_level, "DEBUG")
        configure.assert_called_once_with(settings)
        app_cls.return_value.run.assert_called_once_with()


if __name__ == "__main__":
    unittest.main()
