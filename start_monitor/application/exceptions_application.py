"""
Application-level exception hierarchy for the start-time monitor.

This module provides exceptions for configuration errors and for failures of
the measured minikube operation.
"""

from collections.abc import Sequence
from typing import Any


class ApplicationException(Exception):
    """Base exception for all application-level errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.details = details or {}


# ============================================================================
# Configuration Exceptions
# ============================================================================


class ConfigurationException(ApplicationException):
    """Base exception for configuration errors."""

    pass


class InvalidConfigurationException(ConfigurationException):
    """Raised when configuration is invalid."""

    def __init__(
        self, config_key: str, value: Any, reason: str, config_section: str | None = None
    ) -> None:
        message = f"Invalid configuration {config_key}={value}: {reason}"
        if config_section:
            message = f"Invalid configuration in {config_section}: {config_key}={value} - {reason}"

        details = {
            "config_key": config_key,
            "value": str(value),
            "reason": reason,
            "config_section": config_section,
        }
        super().__init__(message, details)
        self.config_key = config_key
        self.value = value
        self.reason = reason
        self.config_section = config_section


# ============================================================================
# Measurement Exceptions
# ============================================================================


class MeasurementException(ApplicationException):
    """Base exception for failures of the measured operation."""

    pass


class CommandExecutionException(MeasurementException):
    """
    Base exception for an external command that could not run to completion.

    Raised by command executors when the binary cannot be launched or the run
    is cancelled. A non-zero exit is reported as a status, not raised.
    """

    def __init__(
        self, args: Sequence[str], message: str, details: dict[str, Any] | None = None
    ) -> None:
        super().__init__(message, {"args": list(args), **(details or {})})
        self.command_args = tuple(args)


class StartCommandFailedException(MeasurementException):
    """Raised when `minikube start` exits with a non-zero status."""

    def __init__(self, args: Sequence[str], returncode: int, duration_seconds: float) -> None:
        command = " ".join(args)
        super().__init__(
            f"'{command}' exited with status {returncode}",
            {
                "args": list(args),
                "returncode": returncode,
                "duration_seconds": duration_seconds,
            },
        )
        self.command_args = tuple(args)
        self.returncode = returncode
        self.duration_seconds = duration_seconds
