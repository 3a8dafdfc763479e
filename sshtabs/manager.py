from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Callable, Optional

from .directory import Connection
from .session import (
    Connector,
    Notifier,
    Session,
    TerminalHandle,
    log_notification,
    websocket_connector,
)

logger = logging.getLogger(__name__)


class SessionManager:
    """Ordered tabs plus the single active pointer.

    All mutation of ``sessions`` and ``active`` happens synchronously inside
    these methods; only socket teardown in :meth:`close` awaits, after the
    session is already out of the collection.
    """

    def __init__(
        self,
        terminal_factory: Callable[[int], TerminalHandle],
        url_for: Callable[[Connection], str],
        connector: Connector = websocket_connector,
        headers: Optional[dict[str, str]] = None,
        notify: Notifier = log_notification,
        download_dir: Optional[Path] = None,
    ) -> None:
        self.sessions: list[Session] = []
        self._active: Optional[Session] = None
        self._next_id = 1
        self._terminal_factory = terminal_factory
        self._url_for = url_for
        self._connector = connector
        self._headers = dict(headers or {})
        self._notify = notify
        self._download_dir = download_dir
        self.on_view_change: Optional[Callable[[bool], None]] = None
        self.on_session_created: Optional[Callable[[Session], None]] = None
        self.on_session_closed: Optional[Callable[[Session], None]] = None
        self.on_activate: Optional[Callable[[Session], None]] = None

    @property
    def active(self) -> Optional[Session]:
        return self._active

    @property
    def active_id(self) -> Optional[int]:
        if self._active is None:
            return None
        return self._active.id

    def __len__(self) -> int:
        return len(self.sessions)

    def get(self, session_id: int) -> Optional[Session]:
        for session in self.sessions:
            if session.id == session_id:
                return session
        return None

    def _index_of(self, session_id: int) -> int:
        for index, session in enumerate(self.sessions):
            if session.id == session_id:
                return index
        return -1

    def create_session(self, connection: Connection) -> Session:
        session_id = self._next_id
        self._next_id += 1
        terminal = self._terminal_factory(session_id)
        session = Session(
            session_id,
            connection,
            terminal,
            self._url_for(connection),
            connector=self._connector,
            headers=self._headers,
            notify=self._notify,
            download_dir=self._download_dir,
        )
        self.sessions.append(session)
        logger.info("Session %s created for %s", session_id, connection.label)
        if self.on_session_created is not None:
            self.on_session_created(session)
        session.open()
        self.switch_to(session_id)
        if self.on_view_change is not None:
            self.on_view_change(True)
        return session

    def switch_to(self, session_id: int) -> None:
        session = self.get(session_id)
        if session is None:
            return
        self._active = session
        if self.on_activate is not None:
            self.on_activate(session)
        # The terminal only reports real dimensions once its container is
        # shown, which happens after this handler returns.
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._activate_if_current(session)
            return
        loop.call_soon(self._activate_if_current, session)

    def _activate_if_current(self, session: Session) -> None:
        if session is not self._active or session.closed:
            return
        session.activate()

    def show_directory(self) -> None:
        if self.on_view_change is not None:
            self.on_view_change(False)

    async def close(self, session_id: int) -> None:
        index = self._index_of(session_id)
        if index == -1:
            return
        session = self.sessions.pop(index)
        if self._active is session:
            if self.sessions:
                if index < len(self.sessions):
                    promoted = self.sessions[index]
                elif index - 1 >= 0:
                    promoted = self.sessions[index - 1]
                else:
                    promoted = self.sessions[0]
                self.switch_to(promoted.id)
            else:
                self._active = None
                if self.on_view_change is not None:
                    self.on_view_change(False)
        if self.on_session_closed is not None:
            self.on_session_closed(session)
        logger.info("Session %s closed", session_id)
        await session.close()

    async def close_all(self) -> None:
        for session in list(self.sessions):
            await self.close(session.id)
