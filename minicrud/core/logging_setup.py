"""Logging setup for the service (stdlib logging, configured once per process)."""

from __future__ import annotations

import logging

from minicrud.core.config import get_settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_configured = False


def configure_logging() -> None:
    global _configured
    if _configured:
        return
    settings = get_settings()
    level = getattr(logging, settings.log_level, logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger("minicrud").setLevel(level)
    _configured = True
    logging.getLogger(__name__).info("Logging initialized with level %s", logging.getLevelName(level))
