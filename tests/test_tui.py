import json
import unittest

import httpx
from fakes import FakeConnector, wait_for

from sshtabs.app import FileBrowserScreen, MessageDialog, TerminalTabs
from sshtabs.config import Settings
from sshtabs.directory import DirectoryClient
from sshtabs.session import SocketState
from sshtabs.terminal import TerminalView

CONNECTIONS = [
    {"id": "7", "name": "web", "host": "10.0.0.2", "user": "root"},
    {"id": "8", "name": "db", "host": "10.0.0.3", "user": "admin"},
]


def _gateway(request: httpx.Request) -> httpx.Response:
    if request.url.path == "/api/features":
        return httpx.Response(200, json={"download": True, "fileBrowser": True})
    if request.url.path == "/api/connections" and request.method == "GET":
        return httpx.Response(200, json=CONNECTIONS)
    return httpx.Response(204)


class TuiTestCase(unittest.IsolatedAsyncioTestCase):
    def make_app(self) -> TerminalTabs:
        self.connector = FakeConnector()
        directory = DirectoryClient(
            "http://gateway", transport=httpx.MockTransport(_gateway)
        )
        return TerminalTabs(
            settings=Settings(server="http://gateway"),
            directory=directory,
            connector=self.connector,
        )

    async def start(self, app: TerminalTabs, pilot) -> None:
        await pilot.pause()
        await app.workers.wait_for_complete()
        await pilot.pause()


class TestTuiDirectory(TuiTestCase):
    async def test_connections_are_listed(self) -> None:
        app = self.make_app()
        async with app.run_test() as pilot:
            await self.start(app, pilot)

            self.assertEqual(app.connection_table.row_count, 2)
            self.assertEqual(app.views.current, "directory-view")
            self.assertTrue(app.gateway_features.file_browser)
            self.assertIsInstance(app.features, frozenset)

    async def test_open_browser_without_session_shows_alert(self) -> None:
        app = self.make_app()
        async with app.run_test() as pilot:
            await self.start(app, pilot)

            self.assertFalse(app.open_browser())
            await pilot.pause()

            self.assertIsInstance(app.screen, MessageDialog)


class TestTuiSessions(TuiTestCase):
    async def test_connect_opens_tab_and_close_returns_to_directory(self) -> None:
        app = self.make_app()
        async with app.run_test() as pilot:
            await self.start(app, pilot)

            session = app.connect(app.connections[0])
            await wait_for(lambda: session.state is SocketState.OPEN)
            await pilot.pause()

            self.assertEqual(app.views.current, "session-view")
            self.assertEqual(app.tabs.tab_count, 1)
            self.assertEqual(self.connector.calls[0][0], "ws://gateway/ws?id=7")
            self.assertIsInstance(session.terminal, TerminalView)

            await app.close_tab()
            await pilot.pause()

            self.assertEqual(app.views.current, "directory-view")
            self.assertEqual(app.tabs.tab_count, 0)
            self.assertIsNone(app.manager.active)

    async def test_stdout_reaches_terminal(self) -> None:
        app = self.make_app()
        async with app.run_test() as pilot:
            await self.start(app, pilot)
            session = app.connect(app.connections[0])
            await wait_for(lambda: session.is_open)

            self.connector.sockets[0].feed('{"type":"stdout","payload":"hello\\r\\n"}')
            await wait_for(lambda: "hello" in session.terminal.plain_text)

            await app.manager.close_all()

    async def test_new_tab_button_keeps_active_session(self) -> None:
        app = self.make_app()
        async with app.run_test() as pilot:
            await self.start(app, pilot)
            session = app.connect(app.connections[0])
            await pilot.pause()

            await app.commands.dispatch("new_tab")
            await pilot.pause()

            self.assertEqual(app.views.current, "directory-view")
            self.assertIs(app.manager.active, session)

            await app.manager.close_all()

    async def test_file_browser_renders_listing(self) -> None:
        app = self.make_app()
        async with app.run_test() as pilot:
            await self.start(app, pilot)
            session = app.connect(app.connections[1])
            await wait_for(lambda: session.is_open)
            socket = self.connector.sockets[0]

            self.assertTrue(app.open_browser())
            await pilot.pause()
            screen = app.screen
            self.assertIsInstance(screen, FileBrowserScreen)
            await session.flush()
            self.assertIn({"type": "list", "path": ""}, socket.frames)

            nested = json.dumps(
                {
                    "path": "/home/admin",
                    "files": [
                        {"name": "notes.txt", "isDir": False, "size": 5},
                        {"name": "src", "isDir": True},
                    ],
                }
            )
            socket.feed(json.dumps({"type": "list", "payload": nested}))
            await wait_for(lambda: screen.file_list.row_count == 2)

            self.assertEqual(screen.path_input.value, "/home/admin")

            await app.commands.dispatch("go_up")
            await session.flush()
            self.assertEqual(socket.frames[-1], {"type": "list", "path": "/home"})

            await app.commands.dispatch("navigate", "")
            await session.flush()
            self.assertEqual(socket.frames[-1], {"type": "list", "path": ""})

            await app.commands.dispatch("close_browser")
            await pilot.pause()
            self.assertFalse(session.navigator.visible)

            await app.manager.close_all()


if __name__ == "__main__":
    unittest.main()
