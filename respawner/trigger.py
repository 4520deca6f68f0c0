"""Trigger file handling."""

from __future__ import annotations

from pathlib import Path

from .exceptions import TriggerError
from .log import Logger


class TriggerFile:
    """
    A path whose existence requests a restart of the managed process.

    The file is consumed (deleted) once observed, so another restart needs the
    writer to create it again.
    """

    def __init__(self, path: str | Path, lg: Logger) -> None:
        self._path = Path(path)
        self._lg = lg

    @property
    def path(self) -> Path:
        return self._path

    def exists(self) -> bool:
        return self._path.exists()

    def consume(self) -> None:
        """
        Delete the trigger file.

        An empty directory is removed as well. A file that has already vanished
        is not an error. Any other failure is logged and otherwise ignored.
        """
        try:
            if self._path.is_dir():
                self._path.rmdir()
            else:
                self._path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            err = TriggerError(str(e), path=self._path)
            self._lg.error("failed to remove trigger file", extra={"error": err})

    def poll(self) -> bool:
        """
        Check for the trigger and consume it if present.

        Returns:
            True if the trigger file existed
        """
        if not self.exists():
            return False
        self._lg.debug("trigger file found", extra={"path": self._path})
        self.consume()
        return True
