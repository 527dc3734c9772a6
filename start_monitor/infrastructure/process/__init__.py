"""
External process execution: timed command runs and cancellation.
"""

from .cancellation import CancellationToken, install_signal_handlers
from .command_runner import CommandResult, CommandRunner

__all__ = ["CancellationToken", "install_signal_handlers", "CommandResult", "CommandRunner"]
