import json
import unittest

import httpx

from sshtabs.directory import Connection, DirectoryClient, DirectoryError, Features


class _Recorder:
    def __init__(self, responses: dict[tuple[str, str], httpx.Response]) -> None:
        self.responses = responses
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = (request.method, request.url.path)
        if key not in self.responses:
            return httpx.Response(404, text="not found")
        return self.responses[key]


class DirectoryTestCase(unittest.IsolatedAsyncioTestCase):
    def make_client(self, responses, cookies=None) -> DirectoryClient:
        self.recorder = _Recorder(responses)
        self.client = DirectoryClient(
            "http://gateway",
            cookies=cookies,
            transport=httpx.MockTransport(self.recorder),
        )
        return self.client

    async def asyncTearDown(self) -> None:
        await self.client.aclose()


class TestFeatures(DirectoryTestCase):
    async def test_features_are_read(self) -> None:
        client = self.make_client(
            {
                ("GET", "/api/features"): httpx.Response(
                    200, json={"download": False, "fileBrowser": True}
                )
            }
        )

        features = await client.features()

        self.assertEqual(features, Features(download=False, file_browser=True))
        self.assertFalse(features.can_download)

    async def test_features_fall_back_to_defaults(self) -> None:
        client = self.make_client(
            {("GET", "/api/features"): httpx.Response(500, text="boom")}
        )

        with self.assertLogs("sshtabs.directory", level="ERROR"):
            features = await client.features()

        self.assertEqual(features, Features())
        self.assertTrue(features.can_download)


class TestConnections(DirectoryTestCase):
    async def test_list_connections(self) -> None:
        client = self.make_client(
            {
                ("GET", "/api/connections"): httpx.Response(
                    200,
                    json=[
                        {"id": 7, "name": "web", "host": "10.0.0.2", "user": "root"},
                        {"name": "no id"},
                    ],
                )
            }
        )

        connections = await client.list_connections()

        self.assertEqual(
            connections,
            [Connection(id="7", name="web", host="10.0.0.2", user="root")],
        )
        self.assertEqual(connections[0].label, "root@10.0.0.2")

    async def test_null_list_is_empty(self) -> None:
        client = self.make_client(
            {("GET", "/api/connections"): httpx.Response(200, text="null")}
        )

        self.assertEqual(await client.list_connections(), [])

    async def test_create_posts_json(self) -> None:
        client = self.make_client(
            {("POST", "/api/connections"): httpx.Response(201, json={"id": "9"})}
        )

        await client.create_connection("db", "db.local", "admin", password="pw")

        request = self.recorder.requests[0]
        self.assertEqual(
            json.loads(request.content),
            {
                "name": "db",
                "host": "db.local",
                "user": "admin",
                "password": "pw",
                "key": "",
            },
        )

    async def test_delete_passes_id_param(self) -> None:
        client = self.make_client(
            {("DELETE", "/api/connections"): httpx.Response(204)}
        )

        await client.delete_connection("9")

        self.assertEqual(self.recorder.requests[0].url.params["id"], "9")

    async def test_http_errors_raise_directory_error(self) -> None:
        client = self.make_client(
            {("GET", "/api/connections"): httpx.Response(401, text="login required")}
        )

        with self.assertRaises(DirectoryError) as ctx:
            await client.list_connections()

        self.assertIn("401", str(ctx.exception))
        self.assertIn("login required", str(ctx.exception))

    async def test_session_cookie_is_sent(self) -> None:
        client = self.make_client(
            {("GET", "/api/connections"): httpx.Response(200, json=[])},
            cookies={"webssh_session": "abc"},
        )

        await client.list_connections()

        self.assertIn(
            "webssh_session=abc", self.recorder.requests[0].headers.get("cookie", "")
        )


if __name__ == "__main__":
    unittest.main()
