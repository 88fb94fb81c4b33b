"""Per-request access log.

Outside production a short line is logged (``GET /health/live 200 1.234 ms``);
in production the Apache combined log format is used.
"""
from __future__ import annotations

import time
from datetime import datetime, timezone

from fastapi import Request, Response
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp

from server.app.core import SERVICE_NAME


def dev_line(request: Request, status_code: int, elapsed_ms: float, length: str) -> str:
    return f"{request.method} {request.url.path} {status_code} {elapsed_ms:.3f} ms - {length}"


def combined_line(request: Request, status_code: int, length: str, when: datetime) -> str:
    client = request.client.host if request.client else "-"
    target = request.url.path
    if request.url.query:
        target = f"{target}?{request.url.query}"
    version = request.scope.get("http_version", "1.1")
    referrer = request.headers.get("referer", "-")
    agent = request.headers.get("user-agent", "-")
    stamp = when.strftime("%d/%b/%Y:%H:%M:%S %z")
    return (
        f'{client} - - [{stamp}] "{request.method} {target} HTTP/{version}" '
        f'{status_code} {length} "{referrer}" "{agent}"'
    )


class RequestLogMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, combined: bool) -> None:
        super().__init__(app)
        self._combined = combined

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        length = response.headers.get("content-length", "-")
        if self._combined:
            line = combined_line(request, response.status_code, length, datetime.now(timezone.utc))
        else:
            line = dev_line(request, response.status_code, elapsed_ms, length)
        logger.bind(
            service_name=SERVICE_NAME,
            event="http_request",
            status=response.status_code,
            duration_ms=round(elapsed_ms, 3),
        ).info(line)
        return response
