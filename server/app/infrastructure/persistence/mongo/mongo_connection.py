"""MongoDB store connector.

Makes exactly one connection attempt per ``connect()`` call. There is no
retry: a failure surfaces as ``StoreConnectionError`` and restart policy
belongs to whatever supervises the process.
"""
from __future__ import annotations

import inspect
from typing import Any
from urllib.parse import urlsplit, urlunsplit

from loguru import logger
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.errors import InvalidOperation

from server.app.config.settings import Settings
from server.app.core import SERVICE_NAME
from server.app.core.errors import StoreConnectionError
from server.app.infrastructure.persistence.mongo.constants import ConnectionState


def _log(event: str, **kwargs: Any) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).info("")


def build_store_uri(base_uri: str, database_name: str) -> str:
    """Append ``database_name`` as the URI path, keeping any query string."""
    parts = urlsplit(base_uri)
    return urlunsplit((parts.scheme, parts.netloc, f"/{database_name}", parts.query, parts.fragment))


def redact_uri(uri: str) -> str:
    parts = urlsplit(uri)
    if "@" not in parts.netloc:
        return uri
    userinfo, _, hosts = parts.netloc.rpartition("@")
    user = userinfo.split(":", 1)[0]
    return urlunsplit((parts.scheme, f"{user}:***@{hosts}", parts.path, parts.query, parts.fragment))


class MongoConnection:
    """DatabaseConnection implementation using MongoDB."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._state = ConnectionState.DISCONNECTED
        self._client: AsyncIOMotorClient | None = None
        self._uri = build_store_uri(settings.mongodb_uri, settings.database_name)

    @property
    def ready(self) -> bool:
        return self._state == ConnectionState.CONNECTED

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def database(self) -> AsyncIOMotorDatabase:
        if not self._client or not self.ready:
            raise RuntimeError("db_not_connected")
        return self._client[self._settings.database_name]

    async def connect(self) -> None:
        if self.ready:
            return
        self._state = ConnectionState.CONNECTING
        timeout_ms = self._settings.database_connection_timeout_ms
        _log("db_connect_attempt", uri=redact_uri(self._uri), timeout_ms=timeout_ms)
        client: AsyncIOMotorClient | None = None
        try:
            client = AsyncIOMotorClient(
                self._uri,
                serverSelectionTimeoutMS=timeout_ms,
                connectTimeoutMS=timeout_ms,
            )
            await client.admin.command("ping")
        except Exception as e:
            self._state = ConnectionState.DISCONNECTED
            if client is not None:
                await _close_client(client)
            logger.bind(
                service_name=SERVICE_NAME,
                event="db_connect_failed",
                uri=redact_uri(self._uri),
                error=repr(e),
            ).error("")
            raise StoreConnectionError(redact_uri(self._uri), e) from e

        self._client = client
        self._state = ConnectionState.CONNECTED
        host, port = _server_address(client)
        _log("db_connected", host=host, port=port, database=self._settings.database_name)

    async def ping(self) -> bool:
        """Return True if the store responds to ping; False if not connected or any error."""
        if not self._client:
            return False
        try:
            await self._client.admin.command("ping")
            return True
        except Exception:
            return False

    async def close(self) -> None:
        if self._client:
            await _close_client(self._client)
            self._client = None
        self._state = ConnectionState.DISCONNECTED


def _server_address(client: AsyncIOMotorClient) -> tuple[str | None, int | None]:
    try:
        return client.address or (None, None)
    except InvalidOperation:
        # load-balanced across several mongos
        return None, None


async def _close_client(client: AsyncIOMotorClient) -> None:
    res = client.close()
    if inspect.isawaitable(res):
        await res
