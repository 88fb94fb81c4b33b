from __future__ import annotations

from typing import Any

import pytest
from fastapi import FastAPI
from loguru import logger

from server.app.application import create_app
from server.app.composition import AppDependencies
from server.app.config.settings import Settings
from server.app.core.errors import StoreConnectionError
from server.app.core.origin_policy import OriginPolicy

_SETTINGS_ENV_VARS = [name.upper() for name in Settings.model_fields] + ["APP_ENV", "CONFIG_DIR"]


class FakeDatabase:
    """Implements DatabaseConnection for tests. Full protocol so connect/close/ready won't break callers."""

    def __init__(
        self,
        ping_ok: bool = True,
        *,
        ready: bool = False,
        connect_error: Exception | None = None,
    ) -> None:
        self._ping_ok = ping_ok
        self._ready = ready
        self._connect_error = connect_error
        self.connect_calls = 0
        self.close_calls = 0

    @property
    def ready(self) -> bool:
        return self._ready

    async def connect(self) -> None:
        self.connect_calls += 1
        if self._connect_error is not None:
            raise self._connect_error
        self._ready = True

    async def ping(self) -> bool:
        return self._ping_ok

    async def close(self) -> None:
        self.close_calls += 1
        self._ready = False


class UnreachableDatabase(FakeDatabase):
    def __init__(self) -> None:
        super().__init__(
            connect_error=StoreConnectionError(
                "mongodb://unreachable:27017/taskflow",
                OSError("connection refused"),
            )
        )


class FakeListener:
    """Implements bootstrap Listener; records binds and what the app saw at bind time."""

    def __init__(self, app: FastAPI) -> None:
        self.app = app
        self.binds: list[tuple[str, int]] = []
        self.database_ready_at_bind: bool | None = None
        self.served = False

    def bind(self, host: str, port: int) -> None:
        self.database_ready_at_bind = self.app.state.database.ready
        self.binds.append((host, port))

    async def serve(self) -> None:
        self.served = True


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep host environment variables from leaking into Settings."""
    for name in _SETTINGS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture()
def make_settings(tmp_path):
    def _make(**overrides: Any) -> Settings:
        values: dict[str, Any] = {
            "log_file": None,
            "static_dir": tmp_path / "public",
        }
        values.update(overrides)
        return Settings(_env_file=None, **values)

    return _make


@pytest.fixture()
def make_app(make_settings):
    def _make(database: FakeDatabase | None = None, **overrides: Any) -> FastAPI:
        settings = make_settings(**overrides)
        dependencies = AppDependencies(
            settings=settings,
            database=database or FakeDatabase(ready=True),
            origin_policy=OriginPolicy.from_settings(settings),
        )
        return create_app(dependencies)

    return _make


@pytest.fixture()
def test_app(make_app) -> FastAPI:
    return make_app()


@pytest.fixture()
def log_records():
    records: list[dict[str, Any]] = []
    handler_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
    yield records
    logger.remove(handler_id)


def events(records: list[dict[str, Any]], event: str) -> list[dict[str, Any]]:
    return [r for r in records if r["extra"].get("event") == event]
