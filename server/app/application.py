"""FastAPI application factory.

The app is only built once the store is connected, so it never starts a
connection itself; ``app.state`` just exposes what the bootstrap wired.
"""
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from server.app.composition import AppDependencies
from server.app.middleware import BodySizeLimitMiddleware, OriginPolicyMiddleware, RequestLogMiddleware
from server.app.routers import health_router


def create_app(dependencies: AppDependencies) -> FastAPI:
    settings = dependencies.settings
    app = FastAPI(
        title="Taskflow Server",
        version="0.1.0",
    )
    app.state.settings = settings
    app.state.database = dependencies.database
    app.state.origin_policy = dependencies.origin_policy

    # Last added runs first: CORS, then body limit, then the access log.
    app.add_middleware(RequestLogMiddleware, combined=settings.is_production)
    app.add_middleware(BodySizeLimitMiddleware, max_body_bytes=settings.max_body_bytes)
    app.add_middleware(OriginPolicyMiddleware, policy=dependencies.origin_policy)

    app.include_router(health_router)

    if settings.static_dir.is_dir():
        app.mount("/", StaticFiles(directory=settings.static_dir), name="static")
    return app
