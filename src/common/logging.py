"""
Logging setup for the pricing CLI and API processes.
Configures the root handler once per process; later calls only adjust the level.
"""

from __future__ import annotations

import logging

from src.common.settings import get_settings

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
QUIET_LOGGERS = ("sqlalchemy.engine", "httpx")

_LOGGING_CONFIGURED = False


def configure_logging(level: str | None = None) -> None:
    """Configure process-wide logging.

    `level` overrides `LOG_LEVEL` from settings, e.g. for a CLI `--log-level` flag.
    """

    global _LOGGING_CONFIGURED
    level_name = (level or get_settings().LOG_LEVEL).upper()
    numeric_level = getattr(logging, level_name, logging.INFO)

    if not _LOGGING_CONFIGURED:
        logging.basicConfig(format=LOG_FORMAT)
        _LOGGING_CONFIGURED = True

    logging.getLogger().setLevel(numeric_level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))
