"""Logging setup shared by the API process and scripts."""

from __future__ import annotations

import logging
import sys

from app.config import get_settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
ROOT_LOGGER_NAME = "botflow"


class LoggingConfig:
    """Configure the root logger once; later instantiations are no-ops."""

    _configured = False

    def __init__(self, level: str | None = None) -> None:
        if LoggingConfig._configured:
            return
        settings = get_settings()
        resolved = (level or settings.log_level or "INFO").upper()

        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))

        root = logging.getLogger()
        root.setLevel(resolved)
        root.addHandler(handler)

        # Uvicorn/SQLAlchemy are noisy at DEBUG
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
        LoggingConfig._configured = True


def get_logger(name: str) -> logging.Logger:
    """Return a logger namespaced under the application logger."""
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
