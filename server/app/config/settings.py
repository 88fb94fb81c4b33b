"""Settings for the server."""

import json
from pathlib import Path
from typing import Annotated, Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from server.app.constants import DB_NAME, DEFAULT_ENVIRONMENT, DEFAULT_HOST, DEFAULT_PORT, Environment


class Settings(BaseSettings):
    """Immutable environment profile, resolved once at process start.

    Field names match their environment variables case-insensitively
    (``app_env`` reads ``APP_ENV``). The env file is chosen per instance via
    ``_env_file``; see ``server.app.config.resolver``.
    """

    model_config = SettingsConfigDict(extra="ignore", frozen=True)

    app_env: str = Field(DEFAULT_ENVIRONMENT)

    database_backend: str = Field("mongo")
    mongodb_uri: str = Field("mongodb://localhost:27017")
    database_name: str = Field(DB_NAME)
    database_connection_timeout_ms: int = Field(10_000, gt=0)

    host: str = Field(DEFAULT_HOST)
    port: int = Field(DEFAULT_PORT, ge=0, le=65535)

    # JSON list or comma-separated; empty means no origins.
    cors_whitelist: Annotated[tuple[str, ...], NoDecode] = Field(())
    # Production admits requests that carry no Origin header (curl, server-to-server).
    cors_allow_missing_origin: bool = Field(True)

    max_body_bytes: int = Field(16 * 1024, gt=0)
    static_dir: Path = Field(Path("public"))

    log_level: str = Field("INFO")
    # Empty LOG_FILE disables the file sink.
    log_file: Path | None = Field(Path("logs/server.log"))

    readiness_ping_timeout_seconds: float = Field(5.0, gt=0)

    @field_validator("cors_whitelist", mode="before")
    @classmethod
    def _parse_whitelist(cls, value: Any) -> Any:
        if not isinstance(value, str):
            return value
        text = value.strip()
        if not text:
            return ()
        if text.startswith("["):
            return json.loads(text)
        return tuple(part.strip() for part in text.split(",") if part.strip())

    @field_validator("log_file", mode="before")
    @classmethod
    def _blank_log_file(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def is_production(self) -> bool:
        return self.app_env == Environment.PRODUCTION
