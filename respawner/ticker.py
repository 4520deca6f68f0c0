"""
Fixed-interval ticker for the poll loop.

Yields a tick count every `secs` seconds until stopped. Used as a context
manager it also stops on SIGTERM/SIGINT, so a long-running loop can unwind and
clean up instead of being killed mid-tick:

    with Ticker(lg, secs=0.5) as ticker:
        for tick in ticker:
            do_work()
"""

import signal
import threading
from collections.abc import Iterator
from types import FrameType
from typing import Any


class Ticker:
    """
    Interval iterator with graceful stopping.

    The first tick fires immediately; each following tick fires `secs` after
    the previous one was yielded back. stop() may be called from any thread or
    from a signal handler and ends the iteration at the next wait.
    """

    def __init__(self, lg: Any, secs: float, handle_signals: bool = True) -> None:
        """
        Initialize the ticker.

        Args:
            lg: Logger instance
            secs: Interval between ticks in seconds
            handle_signals: Whether entering the context installs SIGTERM/SIGINT
                handlers. Handlers can only be installed from the main thread.
        """
        if secs <= 0:
            raise ValueError("secs must be positive")

        self._lg = lg
        self._secs = secs
        self._handle_signals = handle_signals
        self._stop_event = threading.Event()
        self._stop_signal: int | None = None
        self._prev_handlers: dict[signal.Signals, Any] = {}

    @property
    def secs(self) -> float:
        return self._secs

    @property
    def stop_signal(self) -> int | None:
        """Signal number that stopped the ticker, None if not stopped by a signal."""
        return self._stop_signal

    def stop(self) -> None:
        """Stop the ticker; an in-progress wait returns immediately."""
        self._stop_event.set()

    def is_stopped(self) -> bool:
        return self._stop_event.is_set()

    def wait(self) -> bool:
        """
        Sleep for one interval.

        Returns:
            True if the ticker was stopped during (or before) the wait
        """
        return self._stop_event.wait(timeout=self._secs)

    def __enter__(self) -> "Ticker":
        """Install signal handlers for graceful shutdown."""
        if self._handle_signals:
            for sig in (signal.SIGTERM, signal.SIGINT):
                self._prev_handlers[sig] = signal.signal(sig, self._handle_signal)
        return self

    def __exit__(self, *args: object) -> None:
        """Restore previous signal handlers."""
        for sig, handler in self._prev_handlers.items():
            signal.signal(sig, handler)
        self._prev_handlers.clear()

    def __iter__(self) -> Iterator[int]:
        """
        Yield tick count on each interval until stopped.

        Yields:
            int: Tick count starting from 0.
        """
        tick = 0
        if self._stop_event.is_set():
            return

        yield tick
        tick += 1

        while not self.wait():
            yield tick
            tick += 1

    def _handle_signal(self, signum: int, frame: FrameType | None) -> None:
        """Handle signal by stopping iteration; the first signal is kept."""
        sig_name = signal.Signals(signum).name
        if self._stop_signal is not None:
            self._lg.info(f"received {sig_name}, already stopping")
            return
        self._lg.info(f"received {sig_name}, stopping")
        self._stop_signal = signum
        self._stop_event.set()
