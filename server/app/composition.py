"""
Composition root: single place where concrete implementations are wired.

Builds the database connection and origin policy from the resolved settings
and owns the connect/close lifecycle. The bootstrap sequence drives it;
nothing else constructs concrete adapters.
"""

from server.app.config.settings import Settings
from server.app.core.origin_policy import OriginPolicy
from server.app.infrastructure.persistence.factory import create_database_connection
from server.app.ports.database_connection import DatabaseConnection


class AppDependencies:
    """Holds wired dependencies and their lifecycle. Built only in composition root."""

    def __init__(
        self,
        *,
        settings: Settings,
        database: DatabaseConnection,
        origin_policy: OriginPolicy,
    ) -> None:
        self._settings = settings
        self._database = database
        self._origin_policy = origin_policy
        self._database_connected = False

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def database(self) -> DatabaseConnection:
        return self._database

    @property
    def origin_policy(self) -> OriginPolicy:
        return self._origin_policy

    async def connect(self) -> None:
        """Connect the store. Raises ``StoreConnectionError`` on failure."""
        await self._database.connect()
        self._database_connected = True

    async def close(self) -> None:
        if self._database_connected:
            await self._database.close()
            self._database_connected = False


def create_app_dependencies(settings: Settings) -> AppDependencies:
    return AppDependencies(
        settings=settings,
        database=create_database_connection(settings),
        origin_policy=OriginPolicy.from_settings(settings),
    )
