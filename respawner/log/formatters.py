"""
Log formatter for console output.

Renders records as:

    [12:34:56,789] [I] message             [key:value] [1234] [respawner]

with optional ANSI colors chosen by level.
"""

import logging
import re
from typing import Any

from .colors import ColorManager
from .config import LogConfig
from .constants import LogConstants
from .logger import EXTRA_ATTR

# Pattern to match ANSI escape sequences
_ANSI_PATTERN = re.compile(r"\x1b\[[0-9;]*m")


def _visual_len(text: str) -> int:
    """Calculate visual width of text, excluding ANSI escape codes."""
    if "\x1b" not in text:
        return len(text)
    return len(_ANSI_PATTERN.sub("", text))


def _format_value(value: Any) -> str:
    if isinstance(value, BaseException):
        return f"{value.__class__.__name__}: {value}"
    if isinstance(value, (list, tuple)):
        return ",".join(str(v) for v in value)
    return str(value)


class LogFormatter(logging.Formatter):
    """
    Log formatter with level colors and structured extra fields.

    Extra fields attached by Logger are appended as [key:value] after the
    message, padded to a fixed rule width so they line up across records.
    """

    def __init__(self, config: LogConfig):
        """
        Initialize the log formatter.

        Args:
            config: Logger configuration (colors and micros are read from it)
        """
        super().__init__()
        self._config = config

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        """Format timestamp as HH:MM:SS,mmm with optional extra precision."""
        s = super().formatTime(record, "%H:%M:%S")
        s += f",{int(record.msecs):03d}"
        if self._config.micros:
            micros = int((record.created % 1) * 1000000) % 1000
            s += f".{micros:03d}"
        return s

    def format(self, record: logging.LogRecord) -> str:
        """
        Format a log record.

        Args:
            record: Log record to format

        Returns:
            Formatted log line, followed by the traceback if exc_info is set
        """
        message = record.getMessage()
        head = f"[{self.formatTime(record)}] [{record.levelname[:1]}] "
        rule = (
            LogConstants.MICRO_RULE_WIDTH
            if self._config.micros
            else LogConstants.DEFAULT_RULE_WIDTH
        )
        pad = " " * max(1, rule - _visual_len(head + message))

        extra = getattr(record, EXTRA_ATTR, None) or {}
        fields = [(k, _format_value(v)) for k, v in sorted(extra.items())]
        meta = [str(record.process), record.name]

        if self._config.colors:
            line = self._render_colored(record, head, message, pad, fields, meta)
        else:
            line = self._render_plain(head, message, pad, fields, meta)

        if record.exc_info:
            if not record.exc_text:
                record.exc_text = self.formatException(record.exc_info)
        if record.exc_text:
            line += "\n" + record.exc_text
        if record.stack_info:
            line += "\n" + self.formatStack(record.stack_info)
        return line

    @staticmethod
    def _render_plain(
        head: str,
        message: str,
        pad: str,
        fields: list[tuple[str, str]],
        meta: list[str],
    ) -> str:
        parts = [f"[{k}:{v}]" for k, v in fields] + [f"[{m}]" for m in meta]
        return head + message + pad + " ".join(parts)

    @staticmethod
    def _render_colored(
        record: logging.LogRecord,
        head: str,
        message: str,
        pad: str,
        fields: list[tuple[str, str]],
        meta: list[str],
    ) -> str:
        base = ColorManager.get_color_for_level(record.levelno) or ColorManager.DEFAULT
        col = base + "m"
        bold = ColorManager.create_bold_color(base)
        gray = ColorManager.create_gray_level(9) + "m"
        gray_bold = ColorManager.create_bold_color(ColorManager.create_gray_level(9))
        reset = ColorManager.RESET

        parts = [f"{reset}{col}{k}[{bold}{v}{reset}{col}]" for k, v in fields]
        parts += [f"{reset}{gray}[{gray_bold}{m}{reset}{gray}]" for m in meta]
        return col + head + bold + message + reset + col + pad + " ".join(parts) + reset
