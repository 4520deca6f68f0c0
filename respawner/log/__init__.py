"""
Logging for the supervisor.

Builds on Python's standard logging with structured extra fields and an
aligned, optionally colored console format. Use quick_console_logger() to get
a ready-to-use logger writing to stderr:

    lg = quick_console_logger("respawner", LogConfig.from_params("debug"))
    lg.info("started process", extra={"pid": 1234})

Log levels: debug, info, warning, error, critical, or "false" to disable.
"""

import logging
import sys
from typing import IO, Any

from .colors import ColorManager
from .config import LogConfig
from .constants import LogConstants
from .exceptions import InvalidLogLevelError, LogError
from .formatters import LogFormatter
from .logger import Logger


def quick_console_logger(
    name: str,
    config: LogConfig | dict[str, Any] | None = None,
    stream: IO[str] | None = None,
) -> Logger:
    """
    Create a console logger.

    Args:
        name: Logger name
        config: LogConfig, or configuration dictionary with keys:
            - level: Log level (default: "info")
            - micros: Whether to show sub-second precision (default: False)
            - colors: Whether to enable colored output (default: True)
        stream: Output stream (default: sys.stderr)

    Returns:
        Logger instance
    """
    if config is None:
        config = LogConfig()
    elif isinstance(config, dict):
        config = LogConfig.from_params(
            config.get("level", "info"),
            micros=config.get("micros", False),
            colors=config.get("colors", True),
        )

    lg = Logger(name, config)
    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(LogFormatter(config))
    lg.addHandler(handler)
    lg.propagate = False
    return lg


__all__ = [
    "ColorManager",
    "InvalidLogLevelError",
    "LogConfig",
    "LogConstants",
    "LogError",
    "LogFormatter",
    "Logger",
    "quick_console_logger",
]
