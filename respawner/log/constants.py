"""
Constants and configuration values for the logging system.
"""

import logging


class LogConstants:
    """Constants for the logging system."""

    # Rule widths for aligning extra fields after the message
    DEFAULT_RULE_WIDTH: int = 70
    MICRO_RULE_WIDTH: int = 74

    # Log level names for resolution
    LEVEL_NAMES: dict[str, int | bool] = {
        "critical": logging.CRITICAL,
        "error": logging.ERROR,
        "warning": logging.WARNING,
        "info": logging.INFO,
        "debug": logging.DEBUG,
        "false": False,  # Special value to disable all logging
    }

    # ANSI escape sequences
    RESET: str = "\x1b[0m"

    # Gray level range for metadata fields
    GRAY_BASE: int = 232
    GRAY_MAX_LEVELS: int = 24
