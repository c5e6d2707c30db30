"""Utility modules for lintian-ssg.

Provides:
- charsets: frozen character classes used by the parsers
- logger: get_logger for logging
"""

from lintian_ssg.utils.logger import get_logger

__all__ = [
    "get_logger",
]
