"""
Configuration for the logging system.

LogConfig is immutable; loggers and formatters share one instance so every
line written by the supervisor uses the same settings.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from .constants import LogConstants
from .exceptions import InvalidLogLevelError


@dataclass(frozen=True)
class LogConfig:
    """
    Immutable logger configuration.

    Attributes:
        level: Log level (int), or False to disable logging entirely
        micros: Whether timestamps carry sub-second precision
        colors: Whether to emit ANSI colors
    """

    level: int | bool = logging.INFO
    micros: bool = False
    colors: bool = True

    @staticmethod
    def resolve_level(level: str | int | bool) -> int | bool:
        """Resolve level parameter to int or False."""
        if isinstance(level, bool):
            return False if not level else logging.INFO
        if isinstance(level, str):
            name = level.lower()
            if name.isnumeric():
                return int(name)
            if name in LogConstants.LEVEL_NAMES:
                return LogConstants.LEVEL_NAMES[name]
            raise InvalidLogLevelError(level)
        return level

    @classmethod
    def from_params(
        cls,
        level: str | int | bool,
        micros: bool = False,
        colors: bool = True,
    ) -> LogConfig:
        """
        Create LogConfig from individual parameters.

        Args:
            level: Log level (string name, numeric value, or False to disable logging)
            micros: Whether to show sub-second precision
            colors: Whether to enable colored output

        Returns:
            LogConfig instance
        """
        return cls(level=cls.resolve_level(level), micros=micros, colors=colors)

    @classmethod
    def from_config(
        cls, config_dict: dict[str, Any], section: str = "logging"
    ) -> LogConfig:
        """
        Create LogConfig from a configuration dictionary.

        Missing sections or keys fall back to defaults.

        Args:
            config_dict: Configuration dictionary (e.g. from load_config)
            section: Top-level section to read (default: "logging")

        Returns:
            LogConfig instance
        """
        current = config_dict.get(section) or {}
        if not isinstance(current, dict):
            current = {}

        level = current.get("level", "info")
        micros = current.get("microseconds", current.get("micros", False))
        colors = current.get("colors", True)
        if isinstance(colors, dict):
            colors = colors.get("enabled", True)

        return cls.from_params(level=level, micros=bool(micros), colors=bool(colors))
