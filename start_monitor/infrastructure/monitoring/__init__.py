"""
Infrastructure Monitoring Module

Observability for the start-time monitor:
- OpenTelemetry metric export of the start-time measurement (last value)
- Tracing of each measurement
- Structured logging with correlation IDs
"""

from .logging import correlation_context, get_correlation_id, setup_structured_logging
from .telemetry import StartTimeSpanAttributes, StartTimeTelemetry

__all__ = [
    "StartTimeTelemetry",
    "StartTimeSpanAttributes",
    "setup_structured_logging",
    "correlation_context",
    "get_correlation_id",
]
