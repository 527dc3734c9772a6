"""
Process Interfaces - Contracts for running the measured binary
"""

from collections.abc import Sequence
from typing import Protocol


class Cancellable(Protocol):
    """Cancellation signal shared by the loop and every invocation."""

    @property
    def is_cancelled(self) -> bool: ...

    def wait(self, timeout: float | None = None) -> bool:
        """Block for up to ``timeout`` seconds; return True if cancelled."""
        ...


class CommandOutcome(Protocol):
    """Exit status and wall-clock duration of one invocation."""

    @property
    def returncode(self) -> int: ...

    @property
    def duration_seconds(self) -> float: ...


class CommandExecutor(Protocol):
    """Runs an external command to completion."""

    def run(self, args: Sequence[str], token: Cancellable | None = None) -> CommandOutcome:
        """
        Run ``args`` and report how it ended.

        Raises:
            CommandExecutionException: The command could not be launched or
                was cancelled.
        """
        ...
