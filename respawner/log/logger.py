"""
Logger class for the logging system.

Extends the standard Python logger with pre-populated extra fields that are
merged into every record and rendered by LogFormatter as [key:value] pairs.
"""

import logging
from typing import Any

from .config import LogConfig

# Record attribute carrying the merged extra fields
EXTRA_ATTR = "__respawner__extra"


class Logger(logging.Logger):
    """
    Logger with structured extra field handling.

    Extends the standard Python logger with:
    - Merging of logger-level extra fields with per-call extra fields
    - Disabling all output via LogConfig(level=False)
    """

    def __init__(
        self,
        name: str,
        config: LogConfig | None = None,
        extra: dict[str, Any] | None = None,
    ):
        """
        Initialize the logger.

        Args:
            name: Logger name
            config: Logger configuration (defaults to LogConfig())
            extra: Pre-populated extra fields to include in all log records
        """
        if config is None:
            config = LogConfig()

        if config.level is False:
            super().__init__(name, logging.CRITICAL + 1)
            self._logging_disabled = True
        else:
            super().__init__(name, config.level)
            self._logging_disabled = False

        self._config = config
        self._extra = extra or {}

    @property
    def config(self) -> LogConfig:
        """Get logger configuration."""
        return self._config

    @property
    def disabled(self) -> bool:  # type: ignore[override]
        """Check if logging is disabled."""
        return self._logging_disabled

    @disabled.setter
    def disabled(self, value: bool) -> None:
        self._logging_disabled = value

    def bind(self, **extra: Any) -> "Logger":
        """
        Create a logger sharing this logger's handlers with additional extra fields.

        Args:
            **extra: Fields added to every record of the returned logger

        Returns:
            New Logger instance writing through this logger's handlers
        """
        merged = self._extra.copy()
        merged.update(extra)
        child = Logger(self.name, self._config, extra=merged)
        for handler in self.handlers:
            child.addHandler(handler)
        child.propagate = self.propagate
        return child

    def makeRecord(  # type: ignore[override]
        self,
        name: str,
        level: int,
        fn: str,
        lno: int,
        msg: str,
        args: tuple,
        exc_info: Any | None,
        func: str | None = None,
        extra: dict[str, Any] | None = None,
        sinfo: str | None = None,
    ) -> logging.LogRecord:
        """Create log record with logger-level and per-call extra fields merged."""
        merged = self._extra.copy()
        if extra:
            merged.update(extra)
        record = super().makeRecord(
            name, level, fn, lno, msg, args, exc_info, func=func, sinfo=sinfo
        )
        setattr(record, EXTRA_ATTR, merged)
        return record

