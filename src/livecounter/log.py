"""
Logging setup for LiveCounter.

Modules log through ``logging.getLogger(__name__)``; this installs the
handlers described by ``LoggingConfig`` on the package logger.
"""

import logging
from logging.handlers import RotatingFileHandler
from typing import Optional

from .config import LoggingConfig

PACKAGE_LOGGER = "livecounter"


def configure_logging(config: Optional[LoggingConfig] = None) -> logging.Logger:
    """Attach stream (and optional rotating file) handlers to the package logger."""
    config = config or LoggingConfig()
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(config.level)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(config.format)

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)

    if config.file_path:
        file_handler = RotatingFileHandler(
            config.file_path,
            maxBytes=config.max_file_size,
            backupCount=config.backup_count
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.propagate = False
    return logger
