"""Logging configuration for PyCompanion.

Quiet by default (WARNING level only).

Usage:
    from pycompanion.logging import logger, enable_debug_logging

    logger.warning("This will show")
    logger.debug("This won't show")

    enable_debug_logging()
    logger.debug("Now this shows")
"""

import logging
import sys

logger = logging.getLogger("pycompanion")

# Default: WARNING level only (quiet operation)
logger.setLevel(logging.WARNING)

if not logger.handlers:
    _default_handler = logging.StreamHandler(sys.stderr)
    _default_handler.setLevel(logging.WARNING)
    _default_handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    logger.addHandler(_default_handler)


def enable_debug_logging():
    """Show DEBUG messages: system sizes, substeps per frame, solver failures."""
    set_log_level(logging.DEBUG)


def set_log_level(level: int):
    """Set the logging level.

    Args:
        level: logging.DEBUG, logging.INFO, logging.WARNING, etc.
    """
    logger.setLevel(level)
    for handler in logger.handlers:
        handler.setLevel(level)
