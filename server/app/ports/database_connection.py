"""Port: backing-store connection. Implementations live in infrastructure."""
from __future__ import annotations

from typing import Protocol


class DatabaseConnection(Protocol):
    """Interface for store connection lifecycle and ping.

    ``connect`` raises ``StoreConnectionError`` when the store is unreachable.
    """

    @property
    def ready(self) -> bool: ...

    async def connect(self) -> None: ...

    async def ping(self) -> bool: ...

    async def close(self) -> None: ...
