"""Minimal logging utilities for lintian-ssg.

Provides a simple get_logger function that wraps the standard library logging.

Example:
    >>> from lintian_ssg.utils.logger import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.debug("opened code block")
"""

from __future__ import annotations

import logging

_ROOT = "lintian_ssg"


def get_logger(name: str) -> logging.Logger:
    """Get a logger for the given name.

    Returns a standard library logger under the "lintian_ssg." namespace.

    Args:
        name: Logger name (typically __name__)

    Returns:
        logging.Logger instance

    Example:
        >>> logger = get_logger("streams")
        >>> logger.name
        'lintian_ssg.streams'
    """
    if not (name == _ROOT or name.startswith(f"{_ROOT}.")):
        name = f"{_ROOT}.{name}"
    return logging.getLogger(name)
