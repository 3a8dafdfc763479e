from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Optional

from rich.text import Text
from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import (
    Button,
    ContentSwitcher,
    DataTable,
    Footer,
    Header,
    Input,
    Static,
    Tab,
    Tabs,
)

from .commands import CommandRegistry
from .config import Settings, configure_logging, load_settings
from .directory import Connection, DirectoryClient, DirectoryError, Features
from .manager import SessionManager
from .protocol import FileEntry
from .session import Connector, Session, SocketState, websocket_connector
from .terminal import TerminalView

logger = logging.getLogger(__name__)

ONE_MB = 1024**2
HUNDRED_MB = 100 * ONE_MB
ONE_GB = 1024**3


def format_size(size: int) -> str:
    units = ["B", "KB", "MB", "GB", "TB", "PB"]
    value = float(size)
    for unit in units:
        if value < 1024 or unit == units[-1]:
            if unit == "B":
                return f"{int(value)} {unit}"
            return f"{value:.1f} {unit}"
        value /= 1024
    return f"{value:.1f} PB"


def size_style(size: int) -> str:
    if size < ONE_MB:
        return "green"
    if size < HUNDRED_MB:
        return "#ffd700"
    if size < ONE_GB:
        return "#ff8c00"
    return "red"


def entry_icon(entry: FileEntry) -> str:
    return "📁" if entry.is_dir else "📄"


def tab_id(session_id: int) -> str:
    return f"tab-{session_id}"


def terminal_id(session_id: int) -> str:
    return f"term-{session_id}"


def session_id_from_tab(value: Optional[str]) -> Optional[int]:
    if not value or not value.startswith("tab-"):
        return None
    try:
        return int(value[4:])
    except ValueError:
        return None


class PathDialog(ModalScreen[Optional[str]]):
    BINDINGS = [
        ("escape", "cancel", "Cancel"),
    ]
    CSS = """
    PathDialog {
        align: center middle;
    }

    #path-dialog {
        width: 60;
        max-width: 80;
        min-width: 40;
        height: auto;
        min-height: 7;
        margin: 1 2;
        padding: 1 2;
        border: round $panel;
        background: $panel;
        color: $text;
    }

    #path-actions {
        width: 100%;
        align: center middle;
        margin-top: 1;
        height: auto;
    }

    #path-value {
        width: 100%;
    }

    #path-ok {
        margin-left: 2;
    }
    """

    def __init__(self, default_path: str, label: str, ok_label: str) -> None:
        super().__init__()
        self._default_path = default_path
        self._label = label
        self._ok_label = ok_label

    def compose(self) -> ComposeResult:
        with Vertical(id="path-dialog"):
            yield Static(self._label)
            yield Input(value=self._default_path, id="path-value")
            with Horizontal(id="path-actions"):
                yield Button("Cancel", id="path-cancel", compact=True)
                yield Button(self._ok_label, id="path-ok", compact=True)

    def on_mount(self) -> None:
        self.query_one("#path-value", Input).focus()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "path-cancel":
            self.dismiss(None)
        elif event.button.id == "path-ok":
            self._submit()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id != "path-value":
            return
        self._submit()

    def _submit(self) -> None:
        value = self.query_one("#path-value", Input).value.strip()
        if not value:
            return
        self.dismiss(value)

    def action_cancel(self) -> None:
        self.dismiss(None)


class MessageDialog(ModalScreen[bool]):
    """Blocking notice; with ``confirm_label`` it becomes a yes/no question."""

    BINDINGS = [("escape", "cancel", "Cancel")]

    CSS = """
    MessageDialog {
        align: center middle;
        background: $background 45%;
    }

    #message-box {
        width: 60;
        max-width: 90;
        min-width: 34;
        height: auto;
        padding: 1 2;
        border: round $panel;
        background: $panel;
        color: $text;
    }

    #message-title {
        width: 100%;
        text-style: bold;
    }

    #message-detail {
        width: 100%;
        margin-top: 1;
    }

    #message-actions {
        width: 100%;
        height: auto;
        align: center middle;
        margin-top: 1;
    }

    #message-ok {
        margin-left: 2;
    }
    """

    def __init__(
        self, title: str, detail: str, confirm_label: Optional[str] = None
    ) -> None:
        super().__init__()
        self._title = title
        self._detail = detail
        self._confirm_label = confirm_label

    def compose(self) -> ComposeResult:
        with Vertical(id="message-box"):
            yield Static(self._title, id="message-title", markup=False)
            yield Static(self._detail, id="message-detail", markup=False)
            with Horizontal(id="message-actions"):
                if self._confirm_label:
                    yield Button("Cancel", id="message-cancel", compact=True)
                    yield Button(self._confirm_label, id="message-ok", compact=True)
                else:
                    yield Button("OK", id="message-ok", compact=True)

    def on_mount(self) -> None:
        self.query_one("#message-ok", Button).focus()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss(event.button.id == "message-ok")

    def action_cancel(self) -> None:
        self.dismiss(False)


class FileBrowserScreen(ModalScreen[None]):
    BINDINGS = [
        ("escape", "close", "Close"),
        ("backspace", "up", "Up"),
        ("f5", "refresh", "Refresh"),
        ("ctrl+u", "upload", "Upload"),
        ("ctrl+d", "download", "Download"),
    ]

    CSS = """
    FileBrowserScreen {
        align: center middle;
    }

    #fb-dialog {
        width: 90%;
        height: 80%;
        padding: 0 1;
        border: round $panel;
        background: $panel;
        color: $text;
    }

    #fb-path-bar {
        height: 3;
        padding: 1 0 0 0;
    }

    #fb-path-input {
        width: 1fr;
        height: 1;
        border: none;
        background: $surface;
    }

    #fb-path-bar Button {
        height: 1;
        min-width: 3;
        margin-left: 1;
    }

    #fb-list {
        height: 1fr;
        border: round $panel;
    }

    #fb-status {
        height: 1;
        color: $text-muted;
    }
    """

    BUTTON_COMMANDS = {
        "fb-cdup-btn": "go_up",
        "fb-refresh-btn": "refresh_listing",
    }

    def __init__(
        self, session: Session, commands: CommandRegistry, features: Features
    ) -> None:
        super().__init__()
        self.session = session
        self._commands = commands
        self._features = features
        self._row_entries: dict[str, FileEntry] = {}

    def compose(self) -> ComposeResult:
        with Vertical(id="fb-dialog"):
            with Horizontal(id="fb-path-bar"):
                yield Button("↑", id="fb-cdup-btn", compact=True)
                yield Input(placeholder="remote path", id="fb-path-input")
                yield Button("⟳", id="fb-refresh-btn", compact=True)
                if self._features.file_browser:
                    yield Button("Upload", id="fb-upload-btn", compact=True)
                if self._features.can_download:
                    yield Button("Download", id="fb-download-btn", compact=True)
                yield Button("×", id="fb-close-btn", compact=True)
            yield DataTable(id="fb-list", cursor_type="row", zebra_stripes=True)
            yield Static("", id="fb-status", markup=False)

    def on_mount(self) -> None:
        self.path_input = self.query_one("#fb-path-input", Input)
        self.file_list = self.query_one("#fb-list", DataTable)
        self.status_bar = self.query_one("#fb-status", Static)
        self.file_list.add_column("", width=2)
        self.file_list.add_columns("Name", "Size")
        self.session.on_listing = self.render_listing
        self.path_input.value = self.session.navigator.current_path
        self.render_listing(self.session)
        self.file_list.focus()

    def on_unmount(self) -> None:
        if self.session.on_listing == self.render_listing:
            self.session.on_listing = None

    def render_listing(self, session: Session) -> None:
        navigator = session.navigator
        self.path_input.value = navigator.current_path
        self.file_list.clear()
        self._row_entries = {}
        for entry in navigator.entries:
            path = navigator.child_path(entry)
            self._row_entries[path] = entry
            size = "" if entry.is_dir else format_size(entry.size)
            self.file_list.add_row(
                entry_icon(entry),
                entry.name,
                Text(size, style=size_style(entry.size)),
                key=path,
            )
        dirs = sum(1 for entry in navigator.entries if entry.is_dir)
        files = len(navigator.entries) - dirs
        self.status_bar.update(f"{dirs} dirs, {files} files")

    def _selected(self) -> tuple[Optional[str], Optional[FileEntry]]:
        table = self.file_list
        if table.row_count == 0:
            return None, None
        try:
            row_key, _ = table.coordinate_to_cell_key(table.cursor_coordinate)
        except Exception:
            return None, None
        path = row_key.value
        if path is None:
            return None, None
        return path, self._row_entries.get(path)

    async def on_data_table_row_selected(self, event: DataTable.RowSelected) -> None:
        event.stop()
        path = event.row_key.value
        entry = self._row_entries.get(path or "")
        if entry is None or not entry.is_dir:
            return
        await self._commands.dispatch("enter_dir", entry)

    async def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id != "fb-path-input":
            return
        event.stop()
        await self._commands.dispatch("navigate", event.value.strip())
        self.file_list.focus()

    async def on_button_pressed(self, event: Button.Pressed) -> None:
        event.stop()
        button_id = event.button.id or ""
        if button_id in self.BUTTON_COMMANDS:
            await self._commands.dispatch(self.BUTTON_COMMANDS[button_id])
        elif button_id == "fb-upload-btn":
            self.action_upload()
        elif button_id == "fb-download-btn":
            await self.action_download()
        elif button_id == "fb-close-btn":
            await self.action_close()

    async def action_up(self) -> None:
        if self.path_input.has_focus:
            return
        await self._commands.dispatch("go_up")

    async def action_refresh(self) -> None:
        await self._commands.dispatch("refresh_listing")

    async def action_download(self) -> None:
        if not self._features.can_download:
            return
        path, _entry = self._selected()
        if path is None:
            self.app.notify("Select a file or folder to download.", severity="warning")
            return
        await self._commands.dispatch("download", path)

    def action_upload(self) -> None:
        if not self._features.file_browser:
            return
        self.run_worker(self._upload_flow(), exclusive=True)

    async def _upload_flow(self) -> None:
        target = await self.app.push_screen_wait(
            PathDialog(
                str(Path.home()) + "/",
                label=f"Upload to {self.session.navigator.current_path or 'home'}:",
                ok_label="Upload",
            )
        )
        if not target:
            return
        await self._commands.dispatch("upload", target)

    async def action_close(self) -> None:
        await self._commands.dispatch("close_browser")


def build_commands(app: "TerminalTabs") -> CommandRegistry:
    commands = CommandRegistry()
    commands.register("connect", app.connect)
    commands.register("new_tab", app.manager.show_directory)
    commands.register("switch_tab", app.manager.switch_to)
    commands.register("close_tab", app.close_tab)
    commands.register("open_browser", app.open_browser)
    commands.register("close_browser", app.close_browser)
    commands.register("enter_dir", app.enter_dir)
    commands.register("go_up", app.go_up)
    commands.register("refresh_listing", app.refresh_listing)
    commands.register("navigate", app.navigate)
    commands.register("upload", app.upload)
    commands.register("download", app.download)
    commands.register("refresh_connections", app.refresh_directory)
    commands.register("save_connection", app.save_connection)
    commands.register("delete_connection", app.delete_connection)
    return commands


class TerminalTabs(App):
    TITLE = "sshtabs"

    CSS = """
    #views {
        height: 1fr;
    }

    #directory-view {
        height: 1fr;
        padding: 0 1;
    }

    #connections {
        height: 1fr;
        border: round $panel;
    }

    #directory-actions {
        height: 1;
        margin: 1 0;
    }

    #directory-actions Button {
        margin-right: 1;
    }

    #connection-form {
        height: auto;
        border: round $panel;
        padding: 0 1;
    }

    #connection-form Input {
        width: 1fr;
        height: 1;
        border: none;
        background: $surface;
        margin-right: 1;
    }

    #session-view {
        height: 1fr;
    }

    #tab-bar {
        height: 3;
    }

    #tabs {
        width: 1fr;
    }

    #tab-bar Button {
        height: 1;
        min-width: 3;
        margin: 1 0 0 1;
    }

    #terminals {
        height: 1fr;
    }
    """

    BINDINGS = [
        Binding("f2", "new_tab", "Connections", priority=True),
        Binding("f3", "open_browser", "Files", priority=True),
        Binding("f4", "close_tab", "Close tab", priority=True),
        Binding("ctrl+pagedown", "next_tab", "Next tab", priority=True),
        Binding("ctrl+pageup", "previous_tab", "Prev tab", priority=True),
        Binding("ctrl+q", "quit", "Quit", priority=True),
    ]

    BUTTON_COMMANDS = {
        "new-tab-btn": "new_tab",
        "file-browser-btn": "open_browser",
        "close-tab-btn": "close_tab",
        "refresh-connections-btn": "refresh_connections",
    }

    def __init__(
        self,
        settings: Optional[Settings] = None,
        directory: Optional[DirectoryClient] = None,
        connector: Connector = websocket_connector,
        commands: Optional[CommandRegistry] = None,
    ) -> None:
        super().__init__()
        self.settings = settings or Settings()
        self.directory = directory or DirectoryClient(
            self.settings.base_url, cookies=self.settings.cookies
        )
        self.gateway_features = Features()
        self.connections: list[Connection] = []
        self.manager = SessionManager(
            self._make_terminal,
            lambda connection: self.settings.websocket_url(connection.id),
            connector=connector,
            headers=self.settings.websocket_headers(),
            notify=self._session_notify,
            download_dir=self.settings.download_dir,
        )
        self.manager.on_view_change = self._show_view
        self.manager.on_session_created = self._add_tab
        self.manager.on_session_closed = self._remove_tab
        self.manager.on_activate = self._on_activate
        self.commands = commands or build_commands(self)

    def compose(self) -> ComposeResult:
        yield Header()
        with ContentSwitcher(id="views", initial="directory-view"):
            with Vertical(id="directory-view"):
                yield DataTable(id="connections", cursor_type="row", zebra_stripes=True)
                with Horizontal(id="directory-actions"):
                    yield Button("Connect", id="connect-btn", compact=True)
                    yield Button("Delete", id="delete-btn", compact=True)
                    yield Button("Refresh", id="refresh-connections-btn", compact=True)
                with Vertical(id="connection-form"):
                    yield Static("New connection")
                    with Horizontal():
                        yield Input(placeholder="name", id="name")
                        yield Input(placeholder="host[:port]", id="host")
                        yield Input(placeholder="user", id="user")
                    with Horizontal():
                        yield Input(placeholder="password", password=True, id="password")
                        yield Input(placeholder="private key (PEM)", id="key")
                        yield Button("Save", id="save-connection", compact=True)
            with Vertical(id="session-view"):
                with Horizontal(id="tab-bar"):
                    yield Tabs(id="tabs")
                    yield Button("+", id="new-tab-btn", compact=True)
                    yield Button("Files", id="file-browser-btn", compact=True)
                    yield Button("×", id="close-tab-btn", compact=True)
                yield ContentSwitcher(id="terminals")
        yield Footer()

    async def on_mount(self) -> None:
        self.views = self.query_one("#views", ContentSwitcher)
        self.tabs = self.query_one("#tabs", Tabs)
        self.terminals = self.query_one("#terminals", ContentSwitcher)
        self.connection_table = self.query_one("#connections", DataTable)
        self.connection_table.add_columns("Name", "Target")
        self.set_focus(self.connection_table)
        self.run_worker(self.refresh_directory(), exclusive=True, group="directory")

    # directory view

    async def refresh_directory(self) -> None:
        self.gateway_features = await self.directory.features()
        self.query_one("#file-browser-btn", Button).display = self.gateway_features.file_browser
        try:
            self.connections = await self.directory.list_connections()
        except DirectoryError as exc:
            self.notify(f"{exc}", severity="error")
            self.connections = []
        self._render_connections()

    def _render_connections(self) -> None:
        table = self.connection_table
        table.clear()
        for connection in self.connections:
            table.add_row(connection.name, connection.label, key=connection.id)
        if not self.connections:
            table.add_row("No saved connections", "", key="")

    def _selected_connection(self) -> Optional[Connection]:
        table = self.connection_table
        if table.row_count == 0:
            return None
        try:
            row_key, _ = table.coordinate_to_cell_key(table.cursor_coordinate)
        except Exception:
            return None
        for connection in self.connections:
            if connection.id == row_key.value:
                return connection
        return None

    async def on_data_table_row_selected(self, event: DataTable.RowSelected) -> None:
        if event.data_table.id != "connections":
            return
        connection = self._selected_connection()
        if connection is not None:
            await self.commands.dispatch("connect", connection)

    async def save_connection(
        self, name: str, host: str, user: str, password: str = "", key: str = ""
    ) -> bool:
        if not name or not host or not user:
            self.notify("Name, host and user are required.", severity="warning")
            return False
        try:
            await self.directory.create_connection(name, host, user, password, key)
        except DirectoryError as exc:
            self.notify(f"{exc}", severity="error")
            return False
        await self.refresh_directory()
        return True

    async def delete_connection(self, connection_id: str) -> bool:
        try:
            await self.directory.delete_connection(connection_id)
        except DirectoryError as exc:
            self.notify(f"{exc}", severity="error")
            return False
        await self.refresh_directory()
        return True

    async def _save_form(self) -> None:
        fields = {
            name: self.query_one(f"#{name}", Input)
            for name in ("name", "host", "user", "password", "key")
        }
        saved = await self.commands.dispatch(
            "save_connection", *(field.value.strip() for field in fields.values())
        )
        if saved:
            for field in fields.values():
                field.value = ""

    async def _confirm_delete(self, connection: Connection) -> None:
        confirmed = await self.push_screen_wait(
            MessageDialog(
                "Delete connection",
                f'Are you sure you want to delete "{connection.name}"?',
                confirm_label="Delete",
            )
        )
        if confirmed:
            await self.commands.dispatch("delete_connection", connection.id)

    async def on_button_pressed(self, event: Button.Pressed) -> None:
        button_id = event.button.id or ""
        if button_id in self.BUTTON_COMMANDS:
            await self.commands.dispatch(self.BUTTON_COMMANDS[button_id])
            return
        if button_id == "connect-btn":
            connection = self._selected_connection()
            if connection is None:
                self.notify("Select a connection first.", severity="warning")
                return
            await self.commands.dispatch("connect", connection)
        elif button_id == "delete-btn":
            connection = self._selected_connection()
            if connection is None:
                self.notify("Select a connection first.", severity="warning")
                return
            self.run_worker(self._confirm_delete(connection), exclusive=True)
        elif button_id == "save-connection":
            await self._save_form()

    # sessions

    def connect(self, connection: Connection) -> Session:
        return self.manager.create_session(connection)

    def _make_terminal(self, session_id: int) -> TerminalView:
        view = TerminalView(session_id, id=terminal_id(session_id))
        view.display = False
        self.terminals.mount(view)
        return view

    def _add_tab(self, session: Session) -> None:
        session.on_state_change = self._on_session_state
        self.tabs.add_tab(Tab(session.title, id=tab_id(session.id)))

    def _remove_tab(self, session: Session) -> None:
        if isinstance(self.screen, FileBrowserScreen) and self.screen.session is session:
            self.screen.dismiss(None)
        if self.tabs.query(f"#{tab_id(session.id)}"):
            self.tabs.remove_tab(tab_id(session.id))

    def _on_session_state(self, session: Session) -> None:
        tabs = self.tabs.query(f"#{tab_id(session.id)}").results(Tab)
        for tab in tabs:
            if session.state is SocketState.ERRORED:
                tab.label = f"{session.title} ⚠"
            else:
                tab.label = session.title

    def _show_view(self, sessions_visible: bool) -> None:
        if sessions_visible:
            self.views.current = "session-view"
            return
        self.views.current = "directory-view"
        self.set_focus(self.connection_table)

    def _on_activate(self, session: Session) -> None:
        self.views.current = "session-view"
        self._show_session(session)

    def _show_session(self, session: Session) -> None:
        if session is not self.manager.active:
            return
        view = session.terminal
        if not isinstance(view, TerminalView) or view.disposed:
            return
        if not view.is_mounted:
            self.call_after_refresh(self._show_session, session)
            return
        self.terminals.current = view.id
        if self.tabs.active != tab_id(session.id):
            self.tabs.active = tab_id(session.id)
        self.call_after_refresh(self._fit_active)

    def _fit_active(self) -> None:
        session = self.manager.active
        if session is not None:
            session.activate()

    def on_tabs_tab_activated(self, event: Tabs.TabActivated) -> None:
        session_id = session_id_from_tab(event.tab.id if event.tab else None)
        if session_id is None or session_id == self.manager.active_id:
            return
        self.manager.switch_to(session_id)

    def on_resize(self, event: events.Resize) -> None:
        session = self.manager.active
        if session is not None:
            self.call_after_refresh(session.fit)

    def _session_notify(
        self, message: str, severity: str = "information", **kwargs
    ) -> None:
        if severity == "error":
            self.push_screen(MessageDialog("Error", message))
            return
        self.notify(message, severity=severity, **kwargs)

    async def close_tab(self, session_id: Optional[int] = None) -> None:
        if session_id is None:
            session_id = self.manager.active_id
        if session_id is None:
            return
        await self.manager.close(session_id)

    def _step_tab(self, offset: int) -> None:
        sessions = self.manager.sessions
        active = self.manager.active
        if not sessions or active is None:
            return
        index = (sessions.index(active) + offset) % len(sessions)
        self.manager.switch_to(sessions[index].id)

    # file browser

    def _active_session(self) -> Optional[Session]:
        return self.manager.active

    def open_browser(self) -> bool:
        session = self._active_session()
        if session is None:
            self._session_notify("Please open a connection tab first.", severity="error")
            return False
        if not self.gateway_features.file_browser:
            return False
        if isinstance(self.screen, FileBrowserScreen):
            return False
        session.open_browser()
        self.push_screen(FileBrowserScreen(session, self.commands, self.gateway_features))
        return True

    def close_browser(self) -> None:
        session = self._active_session()
        if session is not None:
            session.close_browser()
        if isinstance(self.screen, FileBrowserScreen):
            self.screen.dismiss(None)

    def enter_dir(self, entry: FileEntry) -> bool:
        session = self._active_session()
        return session is not None and session.enter(entry)

    def go_up(self) -> bool:
        session = self._active_session()
        return session is not None and session.go_up()

    def refresh_listing(self) -> bool:
        session = self._active_session()
        return session is not None and session.refresh_listing()

    def navigate(self, path: str) -> bool:
        session = self._active_session()
        return session is not None and session.navigate(path)

    async def upload(self, local_path: str) -> bool:
        session = self._active_session()
        if session is None:
            self._session_notify("No active connection to upload file to.", severity="error")
            return False
        return await session.upload(local_path)

    def download(self, path: str) -> bool:
        session = self._active_session()
        if session is None or not self.gateway_features.can_download:
            return False
        return session.request_download(path)

    # bindings

    def _browser_open(self) -> bool:
        return isinstance(self.screen, ModalScreen)

    async def action_new_tab(self) -> None:
        if self._browser_open():
            return
        await self.commands.dispatch("new_tab")

    async def action_open_browser(self) -> None:
        await self.commands.dispatch("open_browser")

    async def action_close_tab(self) -> None:
        if self._browser_open():
            return
        await self.commands.dispatch("close_tab")

    def action_next_tab(self) -> None:
        if not self._browser_open():
            self._step_tab(1)

    def action_previous_tab(self) -> None:
        if not self._browser_open():
            self._step_tab(-1)

    async def action_quit(self) -> None:
        await self.manager.close_all()
        await self.directory.aclose()
        self.exit()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Tabbed terminal client for a web-SSH gateway")
    parser.add_argument(
        "--server",
        help="Gateway base URL, e.g. https://ssh.example.com (default from config)",
    )
    parser.add_argument(
        "--cookie",
        help="Value of the gateway's session cookie",
    )
    parser.add_argument(
        "--download-dir",
        help="Directory where downloaded files are saved",
    )
    parser.add_argument(
        "--config",
        help="Path to config.json (default: $XDG_CONFIG_HOME/sshtabs/config.json)",
    )
    parser.add_argument(
        "--log-file",
        help="Write logs to this file",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Log at DEBUG level",
    )
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = load_settings(
        Path(args.config).expanduser() if args.config else None,
        server=args.server,
        cookie=args.cookie,
        download_dir=args.download_dir,
        log_file=args.log_file,
        log_level="DEBUG" if args.debug else None,
    )
    configure_logging(settings)
    logger.info("Starting against %s", settings.base_url)
    app = TerminalTabs(settings=settings)
    app.run()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
