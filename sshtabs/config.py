from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional
from urllib.parse import urlencode, urlsplit, urlunsplit

DEFAULT_SERVER = "http://localhost:8080"
SESSION_COOKIE_NAME = "webssh_session"
WEBSOCKET_PATH = "/ws"


def config_base_dir() -> Path:
    config_home = os.environ.get("XDG_CONFIG_HOME")
    if config_home:
        base = Path(config_home).expanduser()
    else:
        base = Path.home() / ".config"
    return base / "sshtabs"


def default_config_path() -> Path:
    return config_base_dir() / "config.json"


@dataclass(frozen=True)
class Settings:
    server: str = DEFAULT_SERVER
    cookie: Optional[str] = None
    download_dir: Path = Path.home() / "Downloads"
    log_file: Path = config_base_dir() / "sshtabs.log"
    log_level: str = "INFO"

    @property
    def base_url(self) -> str:
        return self.server.rstrip("/")

    @property
    def cookies(self) -> dict[str, str]:
        if not self.cookie:
            return {}
        return {SESSION_COOKIE_NAME: self.cookie}

    def websocket_url(self, connection_id: str) -> str:
        parts = urlsplit(self.base_url)
        scheme = "wss" if parts.scheme == "https" else "ws"
        base_path = parts.path.rstrip("/")
        query = urlencode({"id": connection_id})
        return urlunsplit(
            (scheme, parts.netloc, f"{base_path}{WEBSOCKET_PATH}", query, "")
        )

    def websocket_headers(self) -> dict[str, str]:
        if not self.cookie:
            return {}
        return {"Cookie": f"{SESSION_COOKIE_NAME}={self.cookie}"}


def _read_config_file(path: Path) -> dict[str, object]:
    try:
        payload = json.loads(path.read_text())
    except Exception:
        return {}
    if not isinstance(payload, dict):
        return {}
    return payload


def _str_value(value: object) -> Optional[str]:
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


def load_settings(
    config_path: Optional[Path] = None,
    environ: Optional[dict[str, str]] = None,
    **overrides: object,
) -> Settings:
    """Build settings from the config file, then the environment, then overrides.

    A missing or malformed config file yields the defaults. ``None``
    overrides are ignored so argparse namespaces can be passed straight in.
    """
    env = os.environ if environ is None else environ
    payload = _read_config_file(config_path or default_config_path())
    settings = Settings()

    values: dict[str, object] = {}
    for key in ("server", "cookie", "log_level"):
        value = _str_value(payload.get(key))
        if value:
            values[key] = value
    for key in ("download_dir", "log_file"):
        value = _str_value(payload.get(key))
        if value:
            values[key] = Path(value).expanduser()

    env_server = _str_value(env.get("SSHTABS_SERVER"))
    if env_server:
        values["server"] = env_server
    env_cookie = _str_value(env.get("SSHTABS_COOKIE"))
    if env_cookie:
        values["cookie"] = env_cookie
    env_download = _str_value(env.get("SSHTABS_DOWNLOAD_DIR"))
    if env_download:
        values["download_dir"] = Path(env_download).expanduser()

    for key, value in overrides.items():
        if value is None:
            continue
        if key in ("download_dir", "log_file"):
            value = Path(str(value)).expanduser()
        values[key] = value

    return replace(settings, **values)


def configure_logging(settings: Settings) -> None:
    # The TUI owns the terminal, so log records go to a file.
    log_file = Path(settings.log_file)
    try:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(log_file, encoding="utf-8")
    except OSError:
        handler = logging.NullHandler()
    handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
    )
    root = logging.getLogger()
    root.addHandler(handler)
    root.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("websockets").setLevel(logging.WARNING)
