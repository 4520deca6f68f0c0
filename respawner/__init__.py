"""
respawner - keep one background process running, restart it on demand.

The supervisor polls for a trigger file; whenever it appears the file is
consumed and the managed process is replaced by a fresh one. At most one
managed child is alive at a time and every child is reaped.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("respawner")
except PackageNotFoundError:
    # Package not installed, use fallback (development mode)
    __version__ = "0.1.0-dev"

from .config import SupervisorConfig, load_config
from .exceptions import (
    ConfigError,
    SignalError,
    SpawnError,
    SupervisorError,
    TriggerError,
)
from .lifecycle import LifecycleController
from .loop import LoopState, PollLoop
from .process import EXEC_FAILURE_STATUS, ProcessHandle, Reaper
from .state import SupervisorState
from .trigger import TriggerFile

__all__ = [
    "__version__",
    # Core
    "LifecycleController",
    "LoopState",
    "PollLoop",
    "ProcessHandle",
    "Reaper",
    "SupervisorState",
    "TriggerFile",
    "EXEC_FAILURE_STATUS",
    # Config
    "SupervisorConfig",
    "load_config",
    # Exceptions
    "SupervisorError",
    "ConfigError",
    "SpawnError",
    "SignalError",
    "TriggerError",
]
