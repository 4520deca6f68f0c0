"""
Shared supervisor state.

Holds the current-process slot and the registry of outstanding reapers. Both
are guarded by one lock; every method here holds it only for a few dictionary
or attribute operations and never across a blocking call.
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .process import ProcessHandle, Reaper


class SupervisorState:
    """
    Lock-guarded current-process slot plus reaper registry.

    Invariants:
    - At most one handle is current at any time.
    - A pid is in the registry iff its reaper was registered and not yet
      popped for joining.

    The state is created once at program start and passed to every component
    that needs it.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._current: ProcessHandle | None = None
        self._reapers: dict[int, Reaper] = {}

    @property
    def current(self) -> ProcessHandle | None:
        """Snapshot of the current handle."""
        with self._lock:
            return self._current

    def take_current(self) -> ProcessHandle | None:
        """Clear the slot and return what it held."""
        with self._lock:
            handle, self._current = self._current, None
            return handle

    def set_current(self, handle: ProcessHandle | None) -> None:
        """Store a handle in the slot; empty handles clear it."""
        with self._lock:
            self._current = None if handle is None or handle.is_empty else handle

    def clear_if_current(self, pid: int) -> bool:
        """
        Clear the slot if it holds the given pid.

        Returns:
            True if the slot was cleared
        """
        with self._lock:
            if self._current is not None and self._current.pid == pid:
                self._current = None
                return True
            return False

    def install(self, handle: ProcessHandle, reaper: Reaper) -> None:
        """Register a reaper and make its handle current in one critical section."""
        with self._lock:
            self._reapers[handle.pid] = reaper
            self._current = handle

    def pop_reaper(self, pid: int) -> Reaper | None:
        """Remove and return the reaper registered for pid, if any."""
        with self._lock:
            return self._reapers.pop(pid, None)

    def pop_all_reapers(self) -> list[Reaper]:
        """Remove and return every registered reaper."""
        with self._lock:
            reapers = list(self._reapers.values())
            self._reapers.clear()
            return reapers

    def pending_pids(self) -> list[int]:
        """Pids whose reapers have not been joined yet."""
        with self._lock:
            return sorted(self._reapers)
