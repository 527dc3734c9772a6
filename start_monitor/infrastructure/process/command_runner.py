"""
External Command Runner

Runs the minikube binary as a child process and measures how long it takes.
The child's output is passed through to our stderr for observability; it is
never captured or parsed.
"""

import logging
import subprocess
import sys
import time
from collections.abc import Sequence
from dataclasses import dataclass
from typing import IO, Any

from ..exceptions_infrastructure import CommandCancelledException, CommandLaunchException
from .cancellation import CancellationToken

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommandResult:
    """Outcome of one external invocation."""

    args: tuple[str, ...]
    returncode: int
    duration_seconds: float

    @property
    def succeeded(self) -> bool:
        return self.returncode == 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "args": list(self.args),
            "returncode": self.returncode,
            "duration_seconds": self.duration_seconds,
        }


class CommandRunner:
    """
    Runs external commands synchronously.

    Args:
        output: Where the child's stdout and stderr go. Defaults to this
            process's stderr. Accepts anything ``subprocess.Popen`` accepts.
        poll_interval: Seconds between cancellation checks while waiting.
        terminate_timeout: Seconds to wait after SIGTERM before killing.
    """

    def __init__(
        self,
        output: int | IO[Any] | None = None,
        poll_interval: float = 0.5,
        terminate_timeout: float = 10.0,
    ) -> None:
        if poll_interval <= 0:
            raise ValueError("poll_interval must be positive")
        self._output = output
        self.poll_interval = poll_interval
        self.terminate_timeout = terminate_timeout

    def run(self, args: Sequence[str], token: CancellationToken | None = None) -> CommandResult:
        """
        Run ``args`` to completion and time it.

        Raises:
            CommandLaunchException: The binary could not be executed.
            CommandCancelledException: ``token`` was cancelled before or
                during the run. A running child is terminated first.
        """
        command = tuple(str(arg) for arg in args)
        if token is not None and token.is_cancelled:
            raise CommandCancelledException(command, started=False)

        output = self._output if self._output is not None else sys.stderr
        logger.debug(f"Running command: {' '.join(command)}")

        start_time = time.perf_counter()
        try:
            process = subprocess.Popen(command, stdout=output, stderr=output)
        except OSError as e:
            raise CommandLaunchException(command, str(e)) from e

        try:
            returncode = self._wait(process, command, token)
        except KeyboardInterrupt:
            self._terminate(process)
            raise
        duration = max(0.0, time.perf_counter() - start_time)

        logger.debug(
            f"Command exited with {returncode} after {duration:.3f}s",
            extra={"returncode": returncode, "duration_seconds": duration},
        )
        return CommandResult(args=command, returncode=returncode, duration_seconds=duration)

    def _wait(
        self,
        process: subprocess.Popen,
        command: tuple[str, ...],
        token: CancellationToken | None,
    ) -> int:
        if token is None:
            return process.wait()

        while True:
            try:
                return process.wait(timeout=self.poll_interval)
            except subprocess.TimeoutExpired:
                if token.is_cancelled:
                    logger.warning(f"Cancelling running command: {' '.join(command)}")
                    self._terminate(process)
                    raise CommandCancelledException(command, started=True)

    def _terminate(self, process: subprocess.Popen) -> None:
        if process.poll() is not None:
            return
        process.terminate()
        try:
            process.wait(timeout=self.terminate_timeout)
        except subprocess.TimeoutExpired:
            logger.warning(f"Process {process.pid} ignored SIGTERM, killing it")
            process.kill()
            process.wait()
