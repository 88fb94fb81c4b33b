from server.app.routers.health import health_router

__all__ = ["health_router"]
