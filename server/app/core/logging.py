"""Loguru sink setup.

Every environment writes JSON lines (level, message, timestamp and bound
fields) to ``settings.log_file``. Outside production the same records are
mirrored to the console in a readable form. Production without a log file
writes the JSON lines to stdout instead.
"""
from __future__ import annotations

import sys

from loguru import logger

from server.app.config.settings import Settings

CONSOLE_FORMAT = "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | {message}{extra}"


def configure_logging(settings: Settings) -> None:
    logger.remove()
    level = settings.log_level.upper()
    if settings.log_file is not None:
        logger.add(settings.log_file, level=level, serialize=True, enqueue=True)
    elif settings.is_production:
        logger.add(sys.stdout, level=level, serialize=True)
    if not settings.is_production:
        logger.add(sys.stderr, level=level, format=CONSOLE_FORMAT, colorize=True)
