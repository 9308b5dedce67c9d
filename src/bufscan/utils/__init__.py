"""Utility modules for bufscan.

Provides:
- logger: get_logger for logging
"""

from bufscan.utils.logger import get_logger

__all__ = [
    "get_logger",
]
