"""
Domain-level exceptions for the start-time monitor.

These exceptions are raised within domain entities and value objects when a
measurement violates its invariants.
"""

from typing import Any


class DomainException(Exception):
    """Base exception for all domain-level errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.details = details or {}


class InvalidSampleException(DomainException):
    """Raised when a sample value cannot be reported."""

    def __init__(self, value: float, reason: str) -> None:
        super().__init__(
            f"Invalid sample value {value!r}: {reason}",
            details={"value": value, "reason": reason},
        )
        self.value = value
        self.reason = reason


class InvalidLabelException(DomainException):
    """Raised when a static sample label is empty."""

    def __init__(self, label: str) -> None:
        super().__init__(f"Sample label '{label}' must not be empty", details={"label": label})
        self.label = label
