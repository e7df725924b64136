"""Logging configuration for coursecraft entry points.

Library modules only create ``logging.getLogger(__name__)`` loggers; handlers
are installed here, once, by whichever entry point runs.
"""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler

from .settings import Settings, settings as default_settings

_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(
    level: int | str | None = None,
    *,
    log_to_file: bool = False,
    config: Settings | None = None,
) -> logging.Logger:
    """Configure the ``coursecraft`` logger.

    Args:
        level: Logging level; defaults to ``COURSECRAFT_LOG_LEVEL``.
        log_to_file: Also write to a rotating file under the data dir.
        config: Settings to read paths and rotation sizes from.

    Returns:
        The package logger.
    """
    config = config or default_settings
    logger = logging.getLogger("coursecraft")
    logger.setLevel(level if level is not None else config.log_level.upper())

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(_FORMAT)
    stream = logging.StreamHandler(sys.stderr)
    stream.setFormatter(formatter)
    logger.addHandler(stream)

    if log_to_file:
        config.log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            config.log_path,
            maxBytes=config.log_max_bytes,
            backupCount=config.log_backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
