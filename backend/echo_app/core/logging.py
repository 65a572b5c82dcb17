"""Console logging setup shared by the server and the database check script."""
from __future__ import annotations

import logging
import sys

ROOT_LOGGER_NAME = "echo_app"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | int = "INFO") -> logging.Logger:
    """Attach a stdout handler to the package logger.

    Calling this more than once only updates the level.
    """

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(level.upper() if isinstance(level, str) else level)

    if not any(getattr(handler, "_echo_app", False) for handler in logger.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._echo_app = True  # type: ignore[attr-defined]
        logger.addHandler(handler)

    return logger
