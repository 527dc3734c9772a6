"""
Infrastructure-specific exception hierarchy for the start-time monitor.

This module provides exceptions for infrastructure-level errors: running the
external minikube binary and setting up the telemetry exporters.
"""

from collections.abc import Sequence
from typing import Any

from ..application.exceptions_application import CommandExecutionException


class InfrastructureException(Exception):
    """Base exception for all infrastructure-level errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.details = details or {}


# ============================================================================
# External Command Exceptions
# ============================================================================


class ExternalCommandException(CommandExecutionException):
    """Base exception for errors running the external binary as a subprocess."""

    pass


class CommandLaunchException(ExternalCommandException):
    """Raised when the external binary cannot be executed at all."""

    def __init__(self, args: Sequence[str], reason: str) -> None:
        command = " ".join(args)
        super().__init__(args, f"Failed to launch '{command}': {reason}", {"reason": reason})
        self.reason = reason


class CommandCancelledException(ExternalCommandException):
    """Raised when a command is interrupted by a cancellation request."""

    def __init__(self, args: Sequence[str], started: bool = True) -> None:
        command = " ".join(args)
        if started:
            message = f"Command '{command}' was cancelled"
        else:
            message = f"Command '{command}' not started: cancellation requested"
        super().__init__(args, message, {"started": started})
        self.started = started


# ============================================================================
# Telemetry Exceptions
# ============================================================================


class TelemetryException(InfrastructureException):
    """Base exception for telemetry errors."""

    pass


class TelemetrySetupException(TelemetryException):
    """Raised when the measurement view or an exporter cannot be registered."""

    def __init__(self, component: str, reason: str) -> None:
        super().__init__(
            f"Failed to set up {component}: {reason}",
            {"component": component, "reason": reason},
        )
        self.component = component
        self.reason = reason


class TelemetryNotStartedException(TelemetryException):
    """Raised when a sample is recorded before the exporter was started."""

    def __init__(self) -> None:
        super().__init__("Telemetry has not been started; call start() first")
