"""
Managed process handles and the reaper thread that waits on them.

A ProcessHandle identifies one child spawned by the supervisor. Each live child
has exactly one Reaper: a background thread blocked in Popen.wait() that clears
the supervisor's current-process slot when the child dies on its own.
"""

from __future__ import annotations

import signal
import subprocess
import threading
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .log import Logger
    from .state import SupervisorState

# Status a POSIX shell exits with when the command cannot be found or run
EXEC_FAILURE_STATUS = 127


@dataclass(frozen=True)
class ProcessHandle:
    """
    Identifies one spawned child.

    A handle with pid <= 0 (or without a process object) means "no process";
    start() returns one when spawning fails. Handles compare by pid.
    """

    pid: int = 0
    process: subprocess.Popen | None = field(default=None, compare=False, repr=False)

    @property
    def is_empty(self) -> bool:
        return self.pid <= 0 or self.process is None


def spawn_shell(command: str) -> ProcessHandle:
    """
    Run a command line under `sh -c`.

    `sh` is looked up on PATH. A command the shell cannot execute makes the
    child exit with EXEC_FAILURE_STATUS; that is only visible once the child is
    reaped.

    Args:
        command: Shell command line

    Returns:
        Handle for the new child

    Raises:
        OSError: If the child could not be created or `sh` could not be executed
    """
    proc = subprocess.Popen(["sh", "-c", command], stdin=subprocess.DEVNULL)
    return ProcessHandle(pid=proc.pid, process=proc)


def describe_exit(returncode: int) -> str:
    """Describe a Popen return code, e.g. "exited with 0" or "killed by SIGTERM"."""
    if returncode < 0:
        try:
            name = signal.Signals(-returncode).name
        except ValueError:
            name = f"signal {-returncode}"
        return f"killed by {name}"
    return f"exited with {returncode}"


class Reaper:
    """
    Waits for one child to exit, off the supervisor's main thread.

    The wait has no timeout: the only way to unblock a reaper is for its child
    to exit, which LifecycleController.stop() guarantees by escalating to
    SIGKILL. A reaper is joined exactly once, either by stop() for its pid or
    by the shutdown join of all outstanding reapers.

    Example:
        reaper = Reaper(handle, state, lg)
        state.install(handle, reaper)
        reaper.start()
        ...
        reaper.join()
        print(reaper.returncode)
    """

    def __init__(self, handle: ProcessHandle, state: SupervisorState, lg: Logger) -> None:
        if handle.is_empty:
            raise ValueError("cannot reap an empty process handle")

        self._handle = handle
        self._state = state
        self._lg = lg.bind(pid=handle.pid)
        self._returncode: int | None = None
        self._done = threading.Event()
        self._thread = threading.Thread(
            target=self._run, name=f"reaper-{handle.pid}", daemon=True
        )

    @property
    def pid(self) -> int:
        return self._handle.pid

    @property
    def returncode(self) -> int | None:
        """Child's return code once reaped, None before that."""
        return self._returncode

    def is_done(self) -> bool:
        """Check whether the child has been reaped."""
        return self._done.is_set()

    def start(self) -> None:
        """Start the background wait."""
        self._thread.start()

    def join(self, timeout: float | None = None) -> None:
        """Wait for the reaper thread to finish."""
        self._thread.join(timeout)

    def _run(self) -> None:
        assert self._handle.process is not None
        returncode = self._handle.process.wait()
        self._returncode = returncode
        cleared = self._state.clear_if_current(self.pid)
        self._done.set()

        extra = {"code": returncode}
        if returncode == EXEC_FAILURE_STATUS:
            self._lg.warning("managed command could not be executed", extra=extra)
        elif cleared:
            self._lg.info(f"managed process {describe_exit(returncode)}", extra=extra)
        else:
            self._lg.debug(f"reaped process, {describe_exit(returncode)}", extra=extra)
