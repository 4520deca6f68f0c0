"""
Start, stop and replace the managed process.

stop() escalates in a fixed order: SIGTERM, a bounded grace period of
non-blocking exit checks, then SIGKILL and a blocking wait, and finally a join
of the pid's reaper. It never returns while the child is alive or its reaper
unjoined.
"""

from __future__ import annotations

import signal
import time

from .config import DEFAULT_GRACE_PERIOD, DEFAULT_GRACE_POLL
from .exceptions import SignalError, SpawnError
from .log import Logger
from .process import ProcessHandle, Reaper, describe_exit, spawn_shell
from .state import SupervisorState


class LifecycleController:
    """
    Owns the start/stop/replace protocol for the single managed process.

    Example:
        state = SupervisorState()
        controller = LifecycleController(state, lg)
        controller.replace("exec myapp --serve")
        ...
        controller.shutdown()
    """

    def __init__(
        self,
        state: SupervisorState,
        lg: Logger,
        grace_period: float = DEFAULT_GRACE_PERIOD,
        grace_poll: float = DEFAULT_GRACE_POLL,
    ) -> None:
        """
        Initialize the controller.

        Args:
            state: Shared supervisor state
            lg: Logger
            grace_period: Seconds to wait after SIGTERM before SIGKILL
            grace_poll: Seconds between exit checks during the grace period
        """
        self._state = state
        self._lg = lg
        self._grace_period = grace_period
        self._grace_poll = grace_poll

    @property
    def state(self) -> SupervisorState:
        return self._state

    def start(self, command: str) -> ProcessHandle:
        """
        Spawn the command and make it the current process.

        Spawn failures are logged, not raised: an empty handle is returned, no
        reaper is started and the slot is left as it was.

        Args:
            command: Shell command line

        Returns:
            Handle of the new child, or an empty handle if spawning failed
        """
        try:
            handle = self._spawn(command)
        except SpawnError as e:
            self._lg.error("failed to start managed process", extra={"error": e})
            return ProcessHandle()

        reaper = Reaper(handle, self._state, self._lg)
        self._state.install(handle, reaper)
        try:
            reaper.start()
        except RuntimeError as e:
            # No thread to join; stop() still waits on the process itself.
            self._state.pop_reaper(handle.pid)
            self._lg.error(
                "failed to start reaper", extra={"pid": handle.pid, "error": e}
            )

        self._lg.info(
            "started managed process", extra={"pid": handle.pid, "cmd": command}
        )
        return handle

    def stop(self, handle: ProcessHandle | None) -> int | None:
        """
        Terminate a child and join its reaper.

        No-op for None or empty handles.

        Args:
            handle: Handle of the child to stop

        Returns:
            The child's return code, or None if there was nothing to stop
        """
        if handle is None or handle.is_empty:
            return None
        proc = handle.process
        assert proc is not None

        self._send_signal(handle, signal.SIGTERM)
        if self._wait_grace(handle):
            self._lg.debug(
                "process exited within grace period", extra={"pid": handle.pid}
            )
        else:
            self._lg.warning(
                f"process did not exit within {self._grace_period}s, sending SIGKILL",
                extra={"pid": handle.pid},
            )
            self._send_signal(handle, signal.SIGKILL)
            proc.wait()

        reaper = self._state.pop_reaper(handle.pid)
        if reaper is not None:
            reaper.join()

        returncode = proc.returncode
        self._lg.info(
            f"stopped managed process, {describe_exit(returncode)}",
            extra={"pid": handle.pid},
        )
        return returncode

    def replace(self, command: str) -> ProcessHandle:
        """
        Stop the current process, if any, and start the command in its place.

        The slot is cleared before the old child is torn down and only set
        again once the new child exists. The lock is not held while stopping
        or starting; only the poll loop calls this.

        Args:
            command: Shell command line for the new process

        Returns:
            Handle of the new child, or an empty handle if spawning failed
        """
        old = self._state.take_current()
        if old is not None:
            self._lg.info("replacing managed process", extra={"pid": old.pid})
        self.stop(old)
        return self.start(command)

    def join_all(self) -> None:
        """Join every outstanding reaper."""
        for reaper in self._state.pop_all_reapers():
            reaper.join()

    def shutdown(self) -> None:
        """Stop the current process, if any, and join every outstanding reaper."""
        self.stop(self._state.take_current())
        self.join_all()

    def _spawn(self, command: str) -> ProcessHandle:
        try:
            return spawn_shell(command)
        except OSError as e:
            raise SpawnError(str(e), cmd=command) from e

    def _wait_grace(self, handle: ProcessHandle) -> bool:
        """Poll for exit until the grace period elapses; True if the child exited."""
        assert handle.process is not None
        deadline = time.monotonic() + self._grace_period
        while True:
            if handle.process.poll() is not None:
                return True
            if time.monotonic() >= deadline:
                return False
            time.sleep(self._grace_poll)

    def _send_signal(self, handle: ProcessHandle, sig: signal.Signals) -> None:
        assert handle.process is not None
        try:
            handle.process.send_signal(sig)
        except OSError as e:
            err = SignalError(str(e), pid=handle.pid, sig=sig.name)
            self._lg.error("failed to signal managed process", extra={"error": err})
