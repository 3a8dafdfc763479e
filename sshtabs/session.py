from __future__ import annotations

import asyncio
import contextlib
import enum
import logging
from functools import partial
from pathlib import Path
from typing import Any, AsyncIterator, Awaitable, Callable, Optional, Protocol

from .directory import Connection
from .navigator import Navigator
from .navigator import save_download as save_download_to
from .protocol import (
    DownloadFrame,
    ErrorFrame,
    FileEntry,
    ListFrame,
    RawFrame,
    StatusFrame,
    StdoutFrame,
    UnknownFrame,
    data_frame,
    decode_frame,
    payload_text,
    resize_frame,
)

logger = logging.getLogger(__name__)

RED = "\x1b[31m"
GREEN = "\x1b[32m"
YELLOW = "\x1b[33m"
RESET = "\x1b[0m"

CONNECTION_CLOSED_NOTICE = f"\r\n{RED}Connection closed.{RESET}\r\n"
CONNECTION_ERROR_NOTICE = f"\r\n{RED}Connection error.{RESET}\r\n"


def notice(text: str, color: str = RED) -> str:
    return f"\r\n{color}{text}{RESET}\r\n"


class SocketState(enum.Enum):
    CLOSED = "closed"
    CONNECTING = "connecting"
    OPEN = "open"
    ERRORED = "errored"


class TerminalHandle(Protocol):
    def write(self, text: str) -> None: ...

    def focus(self) -> Any: ...

    def fit(self) -> Optional[tuple[int, int]]: ...

    def subscribe(self, callback: Callable[[str], None]) -> Callable[[], None]: ...

    def dispose(self) -> None: ...


class SocketConnection(Protocol):
    async def send(self, message: str) -> None: ...

    async def close(self) -> None: ...

    def __aiter__(self) -> AsyncIterator[Any]: ...


Connector = Callable[[str, dict[str, str]], Awaitable[SocketConnection]]
Notifier = Callable[..., None]
DownloadSaver = Callable[[str, bytes], Path]


async def websocket_connector(url: str, headers: dict[str, str]) -> SocketConnection:
    from websockets.asyncio.client import connect

    return await connect(
        url,
        additional_headers=headers or None,
        ping_interval=20,
        ping_timeout=20,
        close_timeout=5,
        max_size=None,
    )


def log_notification(message: str, severity: str = "information", **_kwargs) -> None:
    level = logging.ERROR if severity == "error" else logging.INFO
    logger.log(level, "%s", message)


class Session:
    """One tab: a socket, a terminal widget and a file-browser navigator.

    The socket is opened once by :meth:`open` and torn down once by
    :meth:`close`. Resources are registered on an exit stack as they are
    acquired, so teardown releases them in the reverse order (socket, input
    subscription, terminal) whatever state the session reached.
    """

    def __init__(
        self,
        session_id: int,
        connection: Connection,
        terminal: TerminalHandle,
        url: str,
        connector: Connector = websocket_connector,
        headers: Optional[dict[str, str]] = None,
        notify: Notifier = log_notification,
        save_download: Optional[DownloadSaver] = None,
        download_dir: Optional[Path] = None,
    ) -> None:
        self.id = session_id
        self.connection = connection
        self.terminal = terminal
        self.navigator = Navigator()
        self.url = url
        self.on_listing: Optional[Callable[[Session], None]] = None
        self.on_state_change: Optional[Callable[[Session], None]] = None
        self._connector = connector
        self._headers = dict(headers or {})
        self._notify = notify
        if save_download is None:
            save_download = partial(
                save_download_to, download_dir or Path.home() / "Downloads"
            )
        self._save_download = save_download
        self._state = SocketState.CLOSED
        self._socket: Optional[SocketConnection] = None
        self._outbox: asyncio.Queue[str] = asyncio.Queue()
        self._task: Optional[asyncio.Task] = None
        self._writer: Optional[asyncio.Task] = None
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._peer_closed = False
        self._opened = False
        self._closed = False
        self._resources = contextlib.AsyncExitStack()
        self._resources.callback(self.terminal.dispose)
        self._resources.callback(self._release_input)

    @property
    def state(self) -> SocketState:
        return self._state

    @property
    def is_open(self) -> bool:
        return self._state is SocketState.OPEN

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def title(self) -> str:
        return self.connection.name or self.connection.label

    def _set_state(self, state: SocketState) -> None:
        if state is self._state:
            return
        self._state = state
        if self.on_state_change is not None:
            self.on_state_change(self)

    # lifecycle

    def open(self) -> None:
        if self._opened or self._closed:
            return
        self._opened = True
        self._set_state(SocketState.CONNECTING)
        self._task = asyncio.create_task(self._run(), name=f"session-{self.id}")

    async def wait_closed(self) -> None:
        if self._task is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await self._task

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        tasks = [task for task in (self._task, self._writer) if task is not None]
        current = asyncio.current_task()
        for task in tasks:
            if task is not current:
                task.cancel()
        for task in tasks:
            if task is current:
                continue
            with contextlib.suppress(asyncio.CancelledError, Exception):
                await task
        self._outbox = asyncio.Queue()
        try:
            await self._resources.aclose()
        finally:
            if self._state is not SocketState.ERRORED:
                self._set_state(SocketState.CLOSED)

    async def _run(self) -> None:
        try:
            socket = await self._connector(self.url, self._headers)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.error("Session %s: connect to %s failed: %s", self.id, self.url, exc)
            self._fail()
            return

        self._socket = socket
        self._resources.push_async_callback(self._close_socket)
        self._set_state(SocketState.OPEN)
        self._writer = asyncio.create_task(
            self._write_loop(socket), name=f"session-{self.id}-writer"
        )
        self.fit()
        self._unsubscribe = self.terminal.subscribe(self.send_input)

        try:
            async for message in socket:
                try:
                    await self.route(message)
                except Exception:
                    logger.exception("Session %s: failed to handle frame", self.id)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.error("Session %s: socket error: %s", self.id, exc)
            self._peer_closed = True
            self._fail()
            return
        finally:
            if self._writer is not None and not self._closed:
                self._writer.cancel()
        self._peer_closed = True
        self._outbox = asyncio.Queue()
        self._set_state(SocketState.CLOSED)
        self.terminal.write(CONNECTION_CLOSED_NOTICE)

    def _fail(self) -> None:
        self._outbox = asyncio.Queue()
        self._set_state(SocketState.ERRORED)
        self.terminal.write(CONNECTION_ERROR_NOTICE)
        self.terminal.write(CONNECTION_CLOSED_NOTICE)

    async def _write_loop(self, socket: SocketConnection) -> None:
        while True:
            outbox = self._outbox
            message = await outbox.get()
            try:
                await socket.send(message)
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                logger.error("Session %s: send failed: %s", self.id, exc)
                self._fail()
                if self._task is not None:
                    self._task.cancel()
                return
            finally:
                outbox.task_done()

    async def _close_socket(self) -> None:
        socket = self._socket
        self._socket = None
        if socket is None or self._peer_closed:
            return
        try:
            await socket.close()
        except Exception as exc:
            logger.warning("Session %s: close failed: %s", self.id, exc)

    def _release_input(self) -> None:
        unsubscribe = self._unsubscribe
        self._unsubscribe = None
        if unsubscribe is not None:
            unsubscribe()

    # outbound

    def send(self, message: Optional[str]) -> bool:
        if message is None or self._state is not SocketState.OPEN:
            return False
        self._outbox.put_nowait(message)
        return True

    async def flush(self) -> None:
        await self._outbox.join()

    def send_input(self, data: str) -> bool:
        return self.send(data_frame(data))

    def resize(self, cols: int, rows: int) -> bool:
        return self.send(resize_frame(cols, rows))

    def fit(self) -> bool:
        size = self.terminal.fit()
        if not size:
            return False
        cols, rows = size
        return self.resize(cols, rows)

    def activate(self) -> None:
        self.terminal.focus()
        self.fit()

    def _request_listing(self, path: Optional[str]) -> bool:
        # The optimistic path only moves when the request actually goes out.
        if path is None or not self.is_open:
            return False
        return self.send(self.navigator.navigate(path))

    def open_browser(self) -> bool:
        self.navigator.open()
        return self._request_listing("")

    def close_browser(self) -> None:
        self.navigator.close()

    def navigate(self, path: str) -> bool:
        return self._request_listing(path)

    def go_up(self) -> bool:
        return self._request_listing(self.navigator.up_path())

    def refresh_listing(self) -> bool:
        return self._request_listing(self.navigator.current_path)

    def enter(self, entry: FileEntry) -> bool:
        return self._request_listing(self.navigator.enter_path(entry))

    def request_download(self, path: str) -> bool:
        return self.send(self.navigator.request_download(path))

    async def upload(self, local_path: Path | str) -> bool:
        path = Path(local_path).expanduser()
        if not self.is_open:
            self._notify("No active connection to upload file to.", severity="error")
            return False
        try:
            content = await asyncio.to_thread(path.read_bytes)
        except OSError as exc:
            logger.error("Session %s: reading %s failed: %s", self.id, path, exc)
            self.terminal.write(notice(f"Error reading file: {path.name}"))
            return False
        sent = self.send(self.navigator.request_upload(path.name, content))
        if sent:
            self.terminal.write(notice(f"Uploading {path.name}...", YELLOW))
        return sent

    # inbound

    async def route(self, message: str | bytes) -> None:
        frame = decode_frame(message)
        if frame is None:
            return
        if isinstance(frame, StdoutFrame):
            self.terminal.write(frame.text)
        elif isinstance(frame, StatusFrame):
            self._handle_status(frame)
        elif isinstance(frame, ListFrame):
            self.navigator.on_listing_reply(frame.path, frame.files)
            if self.on_listing is not None:
                self.on_listing(self)
        elif isinstance(frame, DownloadFrame):
            await self._handle_download(frame)
        elif isinstance(frame, ErrorFrame):
            self.terminal.write(notice(f"SERVER ERROR: {frame.message}"))
            self._notify(f"Server Error: {frame.message}", severity="error")
        elif isinstance(frame, UnknownFrame):
            logger.warning(
                "Session %s: unknown message type received: %s", self.id, frame.type
            )
            self.terminal.write(payload_text(frame.payload))
        elif isinstance(frame, RawFrame):
            self.terminal.write(frame.text)

    def _handle_status(self, frame: StatusFrame) -> None:
        self.terminal.write(frame.text)
        if not self.is_open:
            return
        if self.navigator.visible:
            self.refresh_listing()
        self.send_input("\r")

    async def _handle_download(self, frame: DownloadFrame) -> None:
        try:
            destination = await asyncio.to_thread(
                self._save_download, frame.filename, frame.data
            )
        except OSError as exc:
            logger.error("Session %s: saving %s failed: %s", self.id, frame.filename, exc)
            self.terminal.write(notice(f"Error saving file: {frame.filename}"))
            self._notify(f"Failed to save {frame.filename}: {exc}", severity="error")
            return
        self._notify(f"Downloaded to {destination}", severity="information")
