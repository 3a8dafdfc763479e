from __future__ import annotations

import locale
from pathlib import Path, PurePosixPath
from typing import Iterable, Optional

from .protocol import FileEntry, download_frame, list_frame, upload_frame

ROOT = "/"


def parent_path(path: str) -> str:
    index = path.rfind("/")
    if index > 0:
        return path[:index]
    return ROOT


def join_path(parent: str, name: str) -> str:
    if parent == ROOT:
        return f"/{name}"
    return f"{parent}/{name}"


def _name_key(entry: FileEntry) -> str:
    try:
        return locale.strxfrm(entry.name)
    except ValueError:
        return entry.name.casefold()


def sort_entries(entries: Iterable[FileEntry]) -> list[FileEntry]:
    items = list(entries)
    dirs = sorted((entry for entry in items if entry.is_dir), key=_name_key)
    files = sorted((entry for entry in items if not entry.is_dir), key=_name_key)
    return dirs + files


class Navigator:
    """Remote path and listing state for one session's file browser.

    Operations that talk to the server return the frame to send (or
    ``None``). ``navigate`` commits the path, so callers that may drop the
    frame check first and only then navigate.
    """

    def __init__(self) -> None:
        self.current_path = ""
        self.entries: list[FileEntry] = []
        self.visible = False

    def open(self) -> None:
        self.visible = True
        self.entries = []

    def close(self) -> None:
        self.visible = False
        self.entries = []
        self.current_path = ""

    def navigate(self, path: str) -> str:
        self.current_path = path
        return list_frame(path)

    def refresh(self) -> str:
        return self.navigate(self.current_path)

    def up_path(self) -> Optional[str]:
        # Relative paths echoed by the server have no parent to move to.
        if self.current_path in ("", ROOT) or "/" not in self.current_path:
            return None
        return parent_path(self.current_path)

    def go_up(self) -> Optional[str]:
        path = self.up_path()
        if path is None:
            return None
        return self.navigate(path)

    def child_path(self, entry: FileEntry) -> str:
        return join_path(self.current_path, entry.name)

    def enter_path(self, entry: FileEntry) -> Optional[str]:
        if not entry.is_dir:
            return None
        return self.child_path(entry)

    def enter(self, entry: FileEntry) -> Optional[str]:
        path = self.enter_path(entry)
        if path is None:
            return None
        return self.navigate(path)

    def on_listing_reply(self, path: str, files: Iterable[FileEntry]) -> None:
        self.entries = sort_entries(files)
        self.current_path = path

    def request_download(self, path: str) -> str:
        return download_frame(path)

    def request_upload(self, filename: str, content: bytes) -> str:
        return upload_frame(filename, content, self.current_path)


def _safe_filename(filename: str) -> str:
    name = PurePosixPath(filename.replace("\\", "/")).name
    if name in {"", ".", ".."}:
        return "download"
    return name


def resolve_download_path(directory: Path, filename: str) -> Path:
    name = _safe_filename(filename)
    candidate = directory / name
    if not candidate.exists():
        return candidate
    stem = Path(name).stem
    suffix = Path(name).suffix
    counter = 1
    while True:
        candidate = directory / f"{stem} ({counter}){suffix}"
        if not candidate.exists():
            return candidate
        counter += 1


def save_download(directory: Path, filename: str, data: bytes) -> Path:
    directory = Path(directory).expanduser()
    directory.mkdir(parents=True, exist_ok=True)
    destination = resolve_download_path(directory, filename)
    temp_path = destination.with_name(f".{destination.name}.part")
    temp_path.write_bytes(data)
    temp_path.replace(destination)
    return destination
