"""
Supervisor configuration.

Settings come from three layers, later ones winning: the defaults below, an
optional YAML config file, and command-line flags. A config file looks like:

    supervisor:
      trigger_file: /run/myapp/restart
      command: exec /usr/local/bin/myapp --serve
      interval: 0.5
      grace_period: 3.0

    logging:
      level: debug
      colors: false
"""

from __future__ import annotations

import dataclasses
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from .exceptions import ConfigError

DEFAULT_TRIGGER_FILE = "./trigger"
DEFAULT_COMMAND = "sleep 10"
DEFAULT_INTERVAL = 0.5
DEFAULT_GRACE_PERIOD = 3.0
DEFAULT_GRACE_POLL = 0.1

# Config files larger than this are refused
MAX_CONFIG_SIZE_BYTES = 10 * 1024 * 1024


def _check_file_size(path: Path) -> None:
    """Check file size limit before parsing."""
    file_size = os.path.getsize(path)
    if file_size > MAX_CONFIG_SIZE_BYTES:
        raise ConfigError(
            f"config file is {file_size} bytes, exceeding maximum size of "
            f"{MAX_CONFIG_SIZE_BYTES} bytes",
            path=path,
        )


def load_config(path: str | Path) -> dict[str, Any]:
    """
    Load a YAML config file.

    Args:
        path: Path to the YAML file

    Returns:
        Parsed top-level mapping (empty dict for an empty file)

    Raises:
        ConfigError: If the file is missing, too large, not valid YAML,
            or its top level is not a mapping
    """
    path = Path(path)
    try:
        _check_file_size(path)
        with open(path) as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError("cannot read config file", path=path, error=e) from e
    except yaml.YAMLError as e:
        raise ConfigError("invalid YAML in config file", path=path) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError("config file must contain a mapping", path=path)
    return data


def _as_number(section: str, key: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"{section}.{key} must be a number", value=value)
    return float(value)


def _as_string(section: str, key: str, value: Any) -> str:
    if not isinstance(value, str):
        raise ConfigError(f"{section}.{key} must be a string", value=value)
    return value


@dataclass(frozen=True)
class SupervisorConfig:
    """
    Immutable supervisor settings.

    Attributes:
        trigger_file: Path polled for the restart trigger
        command: Shell command line run as the managed process
        cycles: Number of poll ticks before shutting down, None to run forever
        interval: Seconds between poll ticks
        grace_period: Seconds to wait after SIGTERM before sending SIGKILL
        grace_poll: Seconds between exit checks during the grace period
    """

    trigger_file: str = DEFAULT_TRIGGER_FILE
    command: str = DEFAULT_COMMAND
    cycles: int | None = None
    interval: float = DEFAULT_INTERVAL
    grace_period: float = DEFAULT_GRACE_PERIOD
    grace_poll: float = DEFAULT_GRACE_POLL

    def __post_init__(self) -> None:
        if not self.trigger_file:
            raise ConfigError("trigger_file must not be empty")
        if not self.command or not self.command.strip():
            raise ConfigError("command must not be empty")
        if self.cycles is not None and (
            isinstance(self.cycles, bool)
            or not isinstance(self.cycles, int)
            or self.cycles < 0
        ):
            raise ConfigError(
                "cycles must be a non-negative integer", cycles=self.cycles
            )
        if self.interval <= 0:
            raise ConfigError("interval must be positive", interval=self.interval)
        if self.grace_period < 0:
            raise ConfigError(
                "grace_period must not be negative", grace_period=self.grace_period
            )
        if self.grace_poll <= 0:
            raise ConfigError("grace_poll must be positive", grace_poll=self.grace_poll)

    def replace(self, **changes: Any) -> SupervisorConfig:
        """Return a copy with the given fields changed; None values are ignored."""
        return dataclasses.replace(
            self, **{k: v for k, v in changes.items() if v is not None}
        )

    @classmethod
    def from_config(
        cls, config_dict: dict[str, Any], section: str = "supervisor"
    ) -> SupervisorConfig:
        """
        Create SupervisorConfig from a configuration dictionary.

        Args:
            config_dict: Configuration dictionary (e.g. from load_config)
            section: Top-level section to read (default: "supervisor")

        Returns:
            SupervisorConfig instance

        Raises:
            ConfigError: On unknown keys or invalid values
        """
        current = config_dict.get(section) or {}
        if not isinstance(current, dict):
            raise ConfigError(f"{section} section must be a mapping")

        known = {f.name for f in dataclasses.fields(cls)}
        unknown = sorted(set(current) - known)
        if unknown:
            raise ConfigError(f"unknown {section} settings", keys=",".join(unknown))

        values: dict[str, Any] = {}
        for key in ("trigger_file", "command"):
            if key in current:
                values[key] = _as_string(section, key, current[key])
        if current.get("cycles") is not None:
            cycles = current["cycles"]
            if isinstance(cycles, bool) or not isinstance(cycles, int):
                raise ConfigError(f"{section}.cycles must be an integer", value=cycles)
            values["cycles"] = cycles
        for key in ("interval", "grace_period", "grace_poll"):
            if key in current:
                values[key] = _as_number(section, key, current[key])

        return cls(**values)
