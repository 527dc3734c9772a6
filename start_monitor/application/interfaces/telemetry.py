"""
Telemetry Interface - Contract for the metric reporter
"""

from contextlib import AbstractContextManager
from typing import Any, Protocol

from ...domain.entities import Sample


class StartTimeSpanAttributes:
    """Span attribute names shared by the loop and the reporter."""

    OS = "minikube.os"
    DRIVER = "minikube.driver"
    ITERATION = "minikube.iteration"
    START_SECONDS = "minikube.start_seconds"


class SampleReporter(Protocol):
    """Hands measured samples to the monitoring backend."""

    def record(self, value_seconds: float) -> Sample:
        """Record one start duration."""
        ...

    def span(self, name: str, **attributes: Any) -> AbstractContextManager[Any]:
        """Trace the enclosed block."""
        ...
