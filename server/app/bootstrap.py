"""Bootstrap sequence.

    INIT -> CONFIG_LOADED -> STORE_CONNECTED -> LISTENING
    INIT | CONFIG_LOADED -> FAILED (process exits non-zero)

Steps run strictly one after another on the event loop. The listener socket
is bound only after the store connection is ready, so no request can be
admitted earlier. A store failure is the only fatal outcome and the sequencer
alone turns it into a process exit.
"""
from __future__ import annotations

import socket
import sys
from collections.abc import Callable
from enum import Enum
from typing import Any, Protocol

import uvicorn
from fastapi import FastAPI
from loguru import logger

from server.app.application import create_app
from server.app.composition import AppDependencies, create_app_dependencies
from server.app.config.resolver import resolve_settings
from server.app.config.settings import Settings
from server.app.core import SERVICE_NAME
from server.app.core.errors import StoreConnectionError
from server.app.core.logging import configure_logging

EXIT_STORE_UNAVAILABLE = 1


def _log(event: str, **kwargs: Any) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).info("")


class BootstrapState(str, Enum):
    INIT = "INIT"
    CONFIG_LOADED = "CONFIG_LOADED"
    STORE_CONNECTED = "STORE_CONNECTED"
    LISTENING = "LISTENING"
    FAILED = "FAILED"


class Listener(Protocol):
    def bind(self, host: str, port: int) -> None: ...

    async def serve(self) -> None: ...


class UvicornListener:
    """Binds the socket up front, then hands it to uvicorn to serve."""

    def __init__(self, app: FastAPI) -> None:
        self._app = app
        self._server: uvicorn.Server | None = None
        self._socket: socket.socket | None = None

    def bind(self, host: str, port: int) -> None:
        config = uvicorn.Config(self._app, host=host, port=port, access_log=False)
        self._socket = config.bind_socket()
        self._server = uvicorn.Server(config)

    @property
    def address(self) -> tuple[str, int]:
        if self._socket is None:
            raise RuntimeError("listener_not_bound")
        host, port = self._socket.getsockname()[:2]
        return host, port

    @property
    def started(self) -> bool:
        return self._server is not None and self._server.started

    def stop(self) -> None:
        if self._server is not None:
            self._server.should_exit = True

    async def serve(self) -> None:
        if self._server is None or self._socket is None:
            raise RuntimeError("listener_not_bound")
        try:
            await self._server.serve(sockets=[self._socket])
        finally:
            self._socket.close()
            self._socket = None


class BootstrapSequencer:
    def __init__(
        self,
        *,
        resolve: Callable[[], Settings] = resolve_settings,
        dependencies_factory: Callable[[Settings], AppDependencies] = create_app_dependencies,
        listener_factory: Callable[[FastAPI], Listener] = UvicornListener,
        exit_process: Callable[[int], Any] = sys.exit,
        setup_logging: Callable[[Settings], None] = configure_logging,
    ) -> None:
        self._resolve = resolve
        self._dependencies_factory = dependencies_factory
        self._listener_factory = listener_factory
        self._exit_process = exit_process
        self._setup_logging = setup_logging
        self._state = BootstrapState.INIT
        self._settings: Settings | None = None

    @property
    def state(self) -> BootstrapState:
        return self._state

    @property
    def settings(self) -> Settings | None:
        return self._settings

    def _transition(self, state: BootstrapState, **kwargs: Any) -> None:
        _log("bootstrap_state", previous=self._state.value, state=state.value, **kwargs)
        self._state = state

    async def run(self) -> None:
        settings = self._resolve()
        self._settings = settings
        self._setup_logging(settings)
        self._transition(BootstrapState.CONFIG_LOADED, environment=settings.app_env)

        dependencies = self._dependencies_factory(settings)
        try:
            await dependencies.connect()
        except StoreConnectionError as e:
            logger.bind(
                service_name=SERVICE_NAME,
                event="startup_failed",
                reason="store_unavailable",
                error=str(e),
            ).error("")
            self._transition(BootstrapState.FAILED)
            self._exit_process(EXIT_STORE_UNAVAILABLE)
            return
        self._transition(BootstrapState.STORE_CONNECTED)

        try:
            listener = self._listener_factory(create_app(dependencies))
            listener.bind(settings.host, settings.port)
            self._transition(BootstrapState.LISTENING)
            _log("server_listening", environment=settings.app_env, host=settings.host, port=settings.port)
            await listener.serve()
        finally:
            await dependencies.close()
            _log("server_stopped")
