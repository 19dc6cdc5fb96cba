"""Logging configuration helpers."""

import logging
from typing import TextIO

PACKAGE_LOGGER = "recipe_nutrition"
_LOG_FORMAT = "%(asctime)s %(levelname)s: %(name)s: %(message)s"


def configure_logging(
    level: int | str = logging.INFO, stream: TextIO | None = None
) -> logging.Logger:
    """Attach one stream handler to the package logger and set its level.

    Calling it again only changes the level. Lookup services log retries,
    cancellations and search fallbacks here; parsing and aggregation never log.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)
    if not logger.handlers:
        handler = logging.StreamHandler(stream)
        handler.setFormatter(logging.Formatter(_LOG_FORMAT))
        logger.addHandler(handler)
        logger.propagate = False
    return logger
