"""
Exception hierarchy for the supervisor.

Runtime errors in the poll/replace cycle are logged rather than raised out of
the loop; these classes give them a common shape (message plus context) so
callers and logs can treat them uniformly.
"""

from typing import Any


class SupervisorError(Exception):
    """
    Base exception for all supervisor errors.

    Example:
        try:
            controller.start(command)
        except SupervisorError as e:
            lg.error(f"supervisor error: {e}")
    """

    def __init__(self, message: str, **context: Any) -> None:
        """
        Initialize the exception with a message and optional context.

        Args:
            message: Human-readable error message
            **context: Additional context information (stored in self.context)
        """
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        """String representation with context if available."""
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} ({context_str})"
        return self.message


class ConfigError(SupervisorError):
    """
    Configuration errors.

    Examples:
        - Config file not found or too large
        - Invalid YAML syntax
        - Negative cycle count or non-positive interval
    """

    pass


class SpawnError(SupervisorError):
    """Raised when the managed command could not be spawned."""

    pass


class SignalError(SupervisorError):
    """Raised when a signal could not be delivered to the managed process."""

    pass


class TriggerError(SupervisorError):
    """Raised when the trigger file exists but could not be removed."""

    pass
