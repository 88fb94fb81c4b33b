"""Configuration resolver.

Picks the configuration file for the active environment and builds the
immutable :class:`Settings` from it plus the process environment. Process
environment variables always win over file values.

Production never reads a local file: its configuration is supplied by the
deployment. A missing file elsewhere is not an error, defaults apply.
"""
from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from loguru import logger

from server.app.config.settings import Settings
from server.app.constants import DEFAULT_ENVIRONMENT, Environment
from server.app.core import SERVICE_NAME

ENVIRONMENT_VARIABLE = "APP_ENV"
CONFIG_DIR_VARIABLE = "CONFIG_DIR"
DEFAULT_CONFIG_DIR = Path("config")


def _log(event: str, **kwargs: Any) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).info("")


@dataclass(frozen=True)
class ConfigurationSource:
    environment_name: str
    path: Path | None
    loaded: bool


def current_environment_name(environ: Mapping[str, str] | None = None) -> str:
    env = os.environ if environ is None else environ
    name = (env.get(ENVIRONMENT_VARIABLE) or "").strip()
    return name or DEFAULT_ENVIRONMENT


def environment_file_path(environment_name: str, config_dir: Path | str) -> Path:
    return Path(config_dir) / f".env.{environment_name}"


def locate_configuration_source(environment_name: str, config_dir: Path | str) -> ConfigurationSource:
    if environment_name == Environment.PRODUCTION:
        return ConfigurationSource(environment_name=environment_name, path=None, loaded=False)
    path = environment_file_path(environment_name, config_dir).resolve()
    return ConfigurationSource(environment_name=environment_name, path=path, loaded=path.is_file())


def resolve_settings(
    environment_name: str | None = None,
    config_dir: Path | str | None = None,
) -> Settings:
    """Build the settings for ``environment_name`` (default: ``APP_ENV`` or development)."""
    name = environment_name or current_environment_name()
    directory = Path(config_dir or os.environ.get(CONFIG_DIR_VARIABLE) or DEFAULT_CONFIG_DIR)

    source = locate_configuration_source(name, directory)
    if source.path is None:
        _log("config_source_skipped", environment=name)
    elif source.loaded:
        _log("config_source_loaded", environment=name, path=str(source.path))
    else:
        logger.bind(
            service_name=SERVICE_NAME,
            event="config_source_absent",
            environment=name,
            path=str(source.path),
        ).warning("")

    env_file = source.path if source.loaded else None
    return Settings(_env_file=env_file, app_env=name)
