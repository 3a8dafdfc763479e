from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import httpx

logger = logging.getLogger(__name__)

CONNECTIONS_PATH = "/api/connections"
FEATURES_PATH = "/api/features"


@dataclass(frozen=True)
class Connection:
    id: str
    name: str
    host: str
    user: str

    @property
    def label(self) -> str:
        return f"{self.user}@{self.host}"


@dataclass(frozen=True)
class Features:
    download: bool = True
    file_browser: bool = True

    @property
    def can_download(self) -> bool:
        return self.file_browser and self.download


class DirectoryError(Exception):
    pass


def _decode_connection(value: object) -> Optional[Connection]:
    if not isinstance(value, dict):
        return None
    conn_id = value.get("id")
    if conn_id is None or conn_id == "":
        return None
    return Connection(
        id=str(conn_id),
        name=str(value.get("name") or ""),
        host=str(value.get("host") or ""),
        user=str(value.get("user") or ""),
    )


class DirectoryClient:
    """Client for the gateway's connection list and feature flags."""

    def __init__(
        self,
        base_url: str,
        cookies: Optional[dict[str, str]] = None,
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url,
            cookies=cookies or {},
            timeout=timeout,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            response = await self._client.request(method, path, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            detail = exc.response.text.strip() or exc.response.reason_phrase
            raise DirectoryError(
                f"{method} {path} failed ({exc.response.status_code}): {detail}"
            ) from exc
        except httpx.HTTPError as exc:
            raise DirectoryError(f"{method} {path} failed: {exc}") from exc
        return response

    async def features(self) -> Features:
        try:
            response = await self._request("GET", FEATURES_PATH)
            payload = response.json()
        except (DirectoryError, ValueError) as exc:
            logger.error("Failed to load server features: %s", exc)
            return Features()
        if not isinstance(payload, dict):
            return Features()
        return Features(
            download=bool(payload.get("download", True)),
            file_browser=bool(payload.get("fileBrowser", True)),
        )

    async def list_connections(self) -> list[Connection]:
        response = await self._request("GET", CONNECTIONS_PATH)
        try:
            payload = response.json()
        except ValueError as exc:
            raise DirectoryError(f"Invalid connection list: {exc}") from exc
        if not isinstance(payload, list):
            return []
        connections: list[Connection] = []
        for item in payload:
            connection = _decode_connection(item)
            if connection is not None:
                connections.append(connection)
        return connections

    async def create_connection(
        self,
        name: str,
        host: str,
        user: str,
        password: str = "",
        key: str = "",
    ) -> None:
        await self._request(
            "POST",
            CONNECTIONS_PATH,
            json={
                "name": name,
                "host": host,
                "user": user,
                "password": password,
                "key": key,
            },
        )

    async def delete_connection(self, connection_id: str) -> None:
        await self._request("DELETE", CONNECTIONS_PATH, params={"id": connection_id})
