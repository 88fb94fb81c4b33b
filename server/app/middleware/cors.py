"""CORS middleware enforcing the origin policy.

The allowed methods, allowed headers and credentials mode are fixed, and a
successful preflight answers 204. The request origin is echoed back rather
than ``*`` because credentials are always enabled.
"""
from __future__ import annotations

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp

from server.app.constants import CorsContract
from server.app.core import SERVICE_NAME
from server.app.core.errors import OriginPolicyViolation
from server.app.core.origin_policy import OriginPolicy

ORIGIN_HEADER = "origin"
REQUEST_METHOD_HEADER = "access-control-request-method"


def is_preflight(request: Request) -> bool:
    return (
        request.method == "OPTIONS"
        and ORIGIN_HEADER in request.headers
        and REQUEST_METHOD_HEADER in request.headers
    )


def _origin_headers(origin: str) -> dict[str, str]:
    headers = {"Access-Control-Allow-Origin": origin}
    if CorsContract.ALLOW_CREDENTIALS:
        headers["Access-Control-Allow-Credentials"] = "true"
    return headers


def preflight_headers(origin: str) -> dict[str, str]:
    headers = _origin_headers(origin)
    headers["Access-Control-Allow-Methods"] = ",".join(CorsContract.ALLOWED_METHODS)
    headers["Access-Control-Allow-Headers"] = ",".join(CorsContract.ALLOWED_HEADERS)
    headers["Vary"] = "Origin"
    return headers


class OriginPolicyMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, policy: OriginPolicy) -> None:
        super().__init__(app)
        self._policy = policy

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        origin = request.headers.get(ORIGIN_HEADER, "")
        try:
            self._policy.enforce(origin)
        except OriginPolicyViolation as exc:
            logger.bind(
                service_name=SERVICE_NAME,
                event="origin_rejected",
                origin=exc.origin,
                environment=exc.environment_name,
                method=request.method,
                path=request.url.path,
            ).warning("")
            return JSONResponse(status_code=403, content={"detail": str(exc)})

        if is_preflight(request):
            return Response(status_code=CorsContract.PREFLIGHT_STATUS, headers=preflight_headers(origin))

        response = await call_next(request)
        if origin:
            for name, value in _origin_headers(origin).items():
                response.headers[name] = value
            response.headers.add_vary_header("Origin")
        return response
