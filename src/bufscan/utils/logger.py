"""Minimal logging utilities for bufscan.

Provides a simple get_logger function that wraps the standard library logging.
The library never installs handlers; applications configure logging.

Example:
    >>> from bufscan.utils.logger import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.debug("Growing scan buffer")
"""

from __future__ import annotations

import logging


def get_logger(name: str) -> logging.Logger:
    """Get a logger for the given name.

    Returns a standard library logger with the "bufscan." prefix.

    Args:
        name: Logger name (typically __name__)

    Returns:
        logging.Logger instance

    Example:
        >>> logger = get_logger("reader")
        >>> logger.name
        'bufscan.reader'
    """
    if not (name == "bufscan" or name.startswith("bufscan.")):
        name = f"bufscan.{name}"
    return logging.getLogger(name)
