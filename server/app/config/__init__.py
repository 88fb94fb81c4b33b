from server.app.config.resolver import (
    ConfigurationSource,
    current_environment_name,
    environment_file_path,
    locate_configuration_source,
    resolve_settings,
)
from server.app.config.settings import Settings

__all__ = [
    "ConfigurationSource",
    "Settings",
    "current_environment_name",
    "environment_file_path",
    "locate_configuration_source",
    "resolve_settings",
]
