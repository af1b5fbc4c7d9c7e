"""Application-wide logging setup."""

import logging
import sys

from src.core.config import settings

LOGGER_NAME = "school_fees"


def setup_logging(level: str | None = None) -> logging.Logger:
    """
    Configure the application root logger.

    Safe to call more than once: the stream handler is attached only on the
    first call, later calls just adjust the level.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel((level or settings.log_level).upper())

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
        logger.addHandler(handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Child logger under the application namespace, e.g. ``school_fees.fees``."""
    return logging.getLogger(f"{LOGGER_NAME}.{name}")
