"""Interfaces the application layer depends on."""

from .process import Cancellable, CommandExecutor, CommandOutcome
from .telemetry import SampleReporter, StartTimeSpanAttributes

__all__ = [
    "Cancellable",
    "CommandExecutor",
    "CommandOutcome",
    "SampleReporter",
    "StartTimeSpanAttributes",
]
