"""Centralized logging configuration."""

import logging
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: str = "WARNING") -> None:
    """Setup logging for the knowsys package.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ...)
    """
    logger = logging.getLogger("knowsys")
    logger.setLevel(getattr(logging, level.upper(), logging.WARNING))

    for handler in list(logger.handlers):
        if getattr(handler, "_knowsys", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._knowsys = True
    logger.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    """Get a logger with proper configuration.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)
