"""Server-level constants shared across modules."""
from __future__ import annotations

DB_NAME = "taskflow"

DEFAULT_PORT = 8080
DEFAULT_HOST = "0.0.0.0"


class Environment:
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    TEST = "test"


DEFAULT_ENVIRONMENT = Environment.DEVELOPMENT


class CorsContract:
    ALLOWED_METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE")
    ALLOWED_HEADERS = ("Content-Type", "Authorization")
    ALLOW_CREDENTIALS = True
    PREFLIGHT_STATUS = 204
