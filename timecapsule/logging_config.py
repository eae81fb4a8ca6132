"""Loguru logging setup."""

import os
import sys

from loguru import logger

DEFAULT_LEVEL = "WARNING"


def setup_logging(level: str | None = None) -> None:
    """Configure the loguru sink. Without a level, LOG_LEVEL or WARNING is used."""
    if level is None:
        level = os.environ.get("LOG_LEVEL", DEFAULT_LEVEL).upper()

    logger.remove()
    logger.add(
        sys.stderr,
        format="<level>{time:YYYY-MM-DD HH:mm:ss} | {name}:{function}:{line} | {message}</level>",
        level=level,
        colorize=True,
    )
