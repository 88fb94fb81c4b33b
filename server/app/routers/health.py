import asyncio

from typing import Any
from fastapi import APIRouter, Request, Response
from loguru import logger

from server.app.core import SERVICE_NAME
from server.app.routers.utils import readiness_ping_timeout_seconds

health_router = APIRouter(tags=["Health"])


def _log(event: str, **kwargs: Any) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).warning("")


@health_router.get(
    "/health/live",
    summary="Liveness probe",
    description="Returns 200 if the server process is running.",
    responses={200: {"description": "Service is alive."}},
)
async def live() -> dict:
    return {"status": "ok"}


@health_router.get(
    "/health/ready",
    summary="Readiness probe",
    description="Returns 200 only when the backing store (MongoDB) answers a ping.",
    responses={
        200: {"description": "Store is reachable."},
        503: {"description": "Store not connected or not answering."},
    },
)
async def ready(request: Request) -> Response:
    database = getattr(request.app.state, "database", None)
    if database is None:
        _log("readiness_failed", reason="components_not_initialized")
        return Response(status_code=503, content="Not ready")
    if not database.ready:
        _log("readiness_failed", reason="db_not_connected")
        return Response(status_code=503, content="Database not ready")

    timeout_s = readiness_ping_timeout_seconds(request)
    try:
        ping_ok = await asyncio.wait_for(database.ping(), timeout=timeout_s)
    except asyncio.TimeoutError:
        _log("readiness_failed", reason="db_ping_timeout")
        return Response(status_code=503, content="Database not ready")
    if not ping_ok:
        _log("readiness_failed", reason="db_ping_failed")
        return Response(status_code=503, content="Database not ready")
    return Response(status_code=200, content="OK")
