"""
The supervisor's poll loop.

Every tick checks the trigger file and, if it was there, replaces the managed
process. With a cycle bound the loop shuts down after that many ticks; without
one it runs until SIGTERM/SIGINT. Either way shutdown stops the managed process
and joins every reaper before run() returns.
"""

from __future__ import annotations

import enum

from .config import SupervisorConfig
from .lifecycle import LifecycleController
from .log import Logger
from .ticker import Ticker
from .trigger import TriggerFile


class LoopState(enum.Enum):
    RUNNING = "running"
    SHUTTING_DOWN = "shutting_down"
    STOPPED = "stopped"


class PollLoop:
    """
    Drives the supervisor.

    Example:
        state = SupervisorState()
        controller = LifecycleController(state, lg)
        loop = PollLoop(SupervisorConfig(cycles=3), controller, lg)
        ticks = loop.run()
    """

    def __init__(
        self,
        config: SupervisorConfig,
        controller: LifecycleController,
        lg: Logger,
        handle_signals: bool = True,
    ) -> None:
        """
        Initialize the loop.

        Args:
            config: Supervisor settings (trigger file, command, cycles, interval)
            controller: Lifecycle controller for the managed process
            lg: Logger
            handle_signals: Whether SIGTERM/SIGINT stop the loop. Must be False
                when run() is called outside the main thread.
        """
        self._config = config
        self._controller = controller
        self._lg = lg
        self._trigger = TriggerFile(config.trigger_file, lg)
        self._ticker = Ticker(lg, config.interval, handle_signals=handle_signals)
        self._state = LoopState.RUNNING
        self._ticks = 0

    @property
    def state(self) -> LoopState:
        return self._state

    @property
    def ticks(self) -> int:
        """Number of ticks performed so far."""
        return self._ticks

    @property
    def stop_signal(self) -> int | None:
        """Signal that ended the loop, None if it ended on its own."""
        return self._ticker.stop_signal

    def stop(self) -> None:
        """Ask the loop to shut down after the current tick."""
        self._ticker.stop()

    def run(self) -> int:
        """
        Run until the cycle bound is reached or the loop is stopped.

        Returns:
            Number of ticks performed
        """
        self._lg.info(
            "supervisor started",
            extra={
                "path": self._trigger.path,
                "cmd": self._config.command,
                "cycles": "inf" if self._config.cycles is None else self._config.cycles,
            },
        )
        # Signal handlers stay installed until shutdown has joined every reaper.
        with self._ticker:
            try:
                for _ in self._ticker:
                    if self._bound_reached():
                        break
                    self.tick()
                    self._ticks += 1
            finally:
                self._shutdown()
        return self._ticks

    def tick(self) -> None:
        """Check the trigger once, replacing the managed process if it was set."""
        try:
            if self._trigger.poll():
                self._controller.replace(self._config.command)
        except Exception:
            self._lg.exception("error in poll tick")

    def _bound_reached(self) -> bool:
        cycles = self._config.cycles
        return cycles is not None and self._ticks >= cycles

    def _shutdown(self) -> None:
        self._state = LoopState.SHUTTING_DOWN
        self._lg.debug("shutting down", extra={"ticks": self._ticks})
        self._controller.shutdown()
        self._state = LoopState.STOPPED
        self._lg.info("supervisor stopped", extra={"ticks": self._ticks})
