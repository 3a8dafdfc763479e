from __future__ import annotations

import base64
import binascii
import json
import logging
from dataclasses import dataclass, field
from typing import Optional, Union

logger = logging.getLogger(__name__)

FRAME_STDOUT = "stdout"
FRAME_STATUS = "status"
FRAME_LIST = "list"
FRAME_DOWNLOAD = "download"
FRAME_ERROR = "error"
FRAME_DATA = "data"
FRAME_RESIZE = "resize"
FRAME_UPLOAD = "upload"


@dataclass(frozen=True)
class FileEntry:
    name: str
    is_dir: bool
    size: int = 0


@dataclass(frozen=True)
class StdoutFrame:
    text: str


@dataclass(frozen=True)
class StatusFrame:
    text: str


@dataclass(frozen=True)
class ListFrame:
    path: str
    files: list[FileEntry] = field(default_factory=list)


@dataclass(frozen=True)
class DownloadFrame:
    filename: str
    data: bytes


@dataclass(frozen=True)
class ErrorFrame:
    message: str


@dataclass(frozen=True)
class UnknownFrame:
    type: str
    payload: object


@dataclass(frozen=True)
class RawFrame:
    text: str


Frame = Union[
    StdoutFrame,
    StatusFrame,
    ListFrame,
    DownloadFrame,
    ErrorFrame,
    UnknownFrame,
    RawFrame,
]


class ProtocolError(ValueError):
    pass


def encode_base64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def decode_base64(text: str) -> bytes:
    try:
        return base64.b64decode(text.encode("ascii"), validate=True)
    except (binascii.Error, UnicodeEncodeError) as exc:
        raise ProtocolError(f"invalid base64 payload: {exc}") from exc


def payload_text(payload: object) -> str:
    if payload is None:
        return ""
    if isinstance(payload, str):
        return payload
    return json.dumps(payload)


def decode_frame(message: Union[str, bytes]) -> Optional[Frame]:
    """Decode one inbound socket message.

    Text that is not a JSON object comes back as a ``RawFrame`` so it can be
    written to the terminal unchanged. Objects missing ``type`` or
    ``payload`` are logged and dropped (``None``). Unrecognised types, and
    ``list``/``download`` frames whose nested payload cannot be read, come
    back as ``UnknownFrame``.
    """
    if isinstance(message, bytes):
        message = message.decode("utf-8", errors="replace")
    try:
        msg = json.loads(message)
    except ValueError:
        return RawFrame(message)
    if not isinstance(msg, dict):
        return RawFrame(message)

    frame_type = msg.get("type")
    if not frame_type or "payload" not in msg:
        logger.warning("Ignoring frame without type or payload: %.200s", message)
        return None
    payload = msg["payload"]

    if frame_type == FRAME_STDOUT:
        return StdoutFrame(payload_text(payload))
    if frame_type == FRAME_STATUS:
        return StatusFrame(payload_text(payload))
    if frame_type == FRAME_ERROR:
        return ErrorFrame(payload_text(payload))
    if frame_type == FRAME_LIST:
        try:
            return _decode_listing(payload)
        except ProtocolError as exc:
            logger.warning("Malformed listing payload: %s", exc)
            return UnknownFrame(str(frame_type), payload)
    if frame_type == FRAME_DOWNLOAD:
        try:
            return _decode_download(payload)
        except ProtocolError as exc:
            logger.warning("Malformed download payload: %s", exc)
            return UnknownFrame(str(frame_type), payload)
    return UnknownFrame(str(frame_type), payload)


def _nested_object(payload: object) -> dict:
    if isinstance(payload, str):
        try:
            payload = json.loads(payload)
        except ValueError as exc:
            raise ProtocolError(f"payload is not JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise ProtocolError("payload is not a JSON object")
    return payload


def _decode_listing(payload: object) -> ListFrame:
    data = _nested_object(payload)
    path = data.get("path")
    if not isinstance(path, str):
        raise ProtocolError("listing has no path")
    raw_files = data.get("files") or []
    if not isinstance(raw_files, list):
        raise ProtocolError("listing files is not a list")
    files: list[FileEntry] = []
    for entry in raw_files:
        if not isinstance(entry, dict):
            continue
        name = entry.get("name")
        if not isinstance(name, str) or not name:
            continue
        size = entry.get("size")
        files.append(
            FileEntry(
                name=name,
                is_dir=bool(entry.get("isDir")),
                size=size if isinstance(size, int) else 0,
            )
        )
    return ListFrame(path=path, files=files)


def _decode_download(payload: object) -> DownloadFrame:
    data = _nested_object(payload)
    filename = data.get("filename")
    content = data.get("payload")
    if not isinstance(filename, str) or not filename:
        raise ProtocolError("download has no filename")
    if not isinstance(content, str):
        raise ProtocolError("download has no payload")
    return DownloadFrame(filename=filename, data=decode_base64(content))


def _envelope(frame_type: str, **fields: object) -> str:
    return json.dumps({"type": frame_type, **fields}, separators=(",", ":"))


def data_frame(payload: str) -> str:
    return _envelope(FRAME_DATA, payload=payload)


def resize_frame(cols: int, rows: int) -> str:
    return _envelope(FRAME_RESIZE, cols=int(cols), rows=int(rows))


def list_frame(path: str) -> str:
    return _envelope(FRAME_LIST, path=path)


def download_frame(path: str) -> str:
    return _envelope(FRAME_DOWNLOAD, path=path)


def upload_frame(filename: str, content: bytes, path: str) -> str:
    return _envelope(
        FRAME_UPLOAD,
        filename=filename,
        payload=encode_base64(content),
        path=path,
    )
