"""
Color management for the logging system.

Centralizes ANSI color codes and the per-level color selection used by
LogFormatter.
"""

import logging

from .constants import LogConstants


class ColorManager:
    """Centralized ANSI color code management."""

    RED = "\x1b[31"
    GREEN = "\x1b[32"
    YELLOW = "\x1b[33"
    BLUE = "\x1b[34"
    MAGENTA = "\x1b[35"
    CYAN = "\x1b[36"
    WHITE = "\x1b[37"
    DEFAULT = "\x1b[38"

    RESET = LogConstants.RESET

    COLORS: dict[int, str] = {
        logging.DEBUG: "\x1b[38;5;32",
        logging.INFO: CYAN,
        logging.WARNING: YELLOW,
        logging.ERROR: RED,
        logging.CRITICAL: MAGENTA,
    }

    @staticmethod
    def get_color_for_level(level: int) -> str | None:
        """
        Get appropriate color for log level.

        Args:
            level: Log level number

        Returns:
            Color escape sequence (without the trailing "m") or None if not found
        """
        return ColorManager.COLORS.get(level)

    @staticmethod
    def create_gray_level(level: int) -> str:
        """
        Create gray color escape sequence.

        Args:
            level: Gray level (0-23 range, clamped)

        Returns:
            Gray color escape sequence
        """
        level = max(0, min(level, LogConstants.GRAY_MAX_LEVELS - 1))
        return f"\x1b[38;5;{LogConstants.GRAY_BASE + level}"

    @staticmethod
    def create_bold_color(color: str) -> str:
        """Create bold variant of a color escape sequence."""
        return color + ";1m"
