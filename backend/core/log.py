"""Logging setup shared by the table core and the API."""

import logging
import sys


LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s"

_configured: set[str] = set()


def get_logger(name: str, level: str | None = None) -> logging.Logger:
    """Get a logger with a single stdout handler.

    Args:
        name: Logger name (typically __name__ of the calling module)
        level: Optional log level override (DEBUG, INFO, WARNING, ERROR)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    log_level = getattr(logging, (level or "INFO").upper(), logging.INFO)
    logger.setLevel(log_level)

    # Avoid duplicate handlers
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(log_level)
        handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        logger.addHandler(handler)

    _configured.add(name)
    return logger


def set_level(level: str) -> None:
    """Apply the configured level to every logger made by get_logger."""
    for name in _configured:
        get_logger(name, level)
        for handler in logging.getLogger(name).handlers:
            handler.setLevel(getattr(logging, level.upper(), logging.INFO))
