"""Reject request bodies larger than the configured limit.

A declared Content-Length over the limit is refused straight away. Otherwise
the body is read before routing, counting the bytes that actually arrive, so
chunked uploads are held to the same limit. At most ``max_body_bytes`` plus
one chunk is buffered before the request is either refused or replayed to
the app.
"""
from __future__ import annotations

from fastapi.responses import JSONResponse
from loguru import logger
from starlette.datastructures import Headers
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from server.app.core import SERVICE_NAME


class BodySizeLimitMiddleware:
    def __init__(self, app: ASGIApp, max_body_bytes: int) -> None:
        self.app = app
        self._max_body_bytes = max_body_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        declared = Headers(scope=scope).get("content-length")
        if declared is not None:
            try:
                length = int(declared)
            except ValueError:
                await JSONResponse(status_code=400, content={"detail": "Invalid Content-Length"})(scope, receive, send)
                return
            if length > self._max_body_bytes:
                await self._reject(scope, receive, send, length)
                return

        chunks: list[bytes] = []
        received = 0
        pending: list[Message] = []
        while True:
            message = await receive()
            if message["type"] != "http.request":
                pending.append(message)
                break
            body = message.get("body", b"")
            received += len(body)
            if received > self._max_body_bytes:
                await self._reject(scope, receive, send, received)
                return
            chunks.append(body)
            if not message.get("more_body", False):
                break

        pending.insert(0, {"type": "http.request", "body": b"".join(chunks), "more_body": False})

        async def replay() -> Message:
            if pending:
                return pending.pop(0)
            return await receive()

        await self.app(scope, replay, send)

    async def _reject(self, scope: Scope, receive: Receive, send: Send, length: int) -> None:
        logger.bind(
            service_name=SERVICE_NAME,
            event="request_body_too_large",
            length=length,
            limit=self._max_body_bytes,
            path=scope.get("path", ""),
        ).warning("")
        await JSONResponse(status_code=413, content={"detail": "Request body too large"})(scope, receive, send)
