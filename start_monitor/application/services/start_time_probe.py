"""
Start Time Probe

Times one `minikube start` of the monitoring profile and always deletes the
profile afterwards.
"""

import logging
from enum import Enum

from ..config import ToolConfig
from ..exceptions_application import CommandExecutionException, StartCommandFailedException
from ..interfaces import Cancellable, CommandExecutor

logger = logging.getLogger(__name__)


class ProbeState(Enum):
    """Phase of the current measurement."""

    IDLE = "idle"
    RUNNING = "running"
    CLEANING_UP = "cleaning_up"


class StartTimeProbe:
    """
    Measures how long `minikube start` takes.

    The start command runs first (RUNNING), then the delete command runs
    exactly once whatever the outcome (CLEANING_UP). A failed delete is
    logged and never replaces the start result or exception.
    """

    def __init__(self, runner: CommandExecutor, tool: ToolConfig) -> None:
        self._runner = runner
        self.tool = tool
        self.state = ProbeState.IDLE

    def start_command(self) -> list[str]:
        return [self.tool.binary, "start", f"--driver={self.tool.driver}", "-p", self.tool.profile]

    def delete_command(self) -> list[str]:
        return [self.tool.binary, "delete", "-p", self.tool.profile]

    def measure(self, token: Cancellable | None = None) -> float:
        """
        Run `minikube start` and return its wall-clock duration in seconds.

        Raises:
            StartCommandFailedException: start exited non-zero.
            CommandExecutionException: start could not be launched or was
                cancelled.
        """
        try:
            self.state = ProbeState.RUNNING
            logger.info("Running minikube start....")

            result = self._runner.run(self.start_command(), token)
            if result.returncode != 0:
                raise StartCommandFailedException(
                    self.start_command(), result.returncode, result.duration_seconds
                )
            return result.duration_seconds
        finally:
            self.state = ProbeState.CLEANING_UP
            self._delete_profile(token)
            self.state = ProbeState.IDLE

    def _delete_profile(self, token: Cancellable | None) -> None:
        try:
            result = self._runner.run(self.delete_command(), token)
        except CommandExecutionException as e:
            logger.error(f"error deleting: {e}", extra={"profile": self.tool.profile})
            return

        if result.returncode != 0:
            logger.error(
                f"error deleting: exit status {result.returncode}",
                extra={"profile": self.tool.profile, "returncode": result.returncode},
            )
