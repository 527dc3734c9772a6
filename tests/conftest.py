"""Global pytest configuration and fixtures."""

import logging
import sys
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pytest

# Make the package importable without installation
sys.path.insert(0, str(Path(__file__).parent.parent))
from opentelemetry.sdk.metrics.export import InMemoryMetricReader
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

from start_monitor.application.config import ExporterType, TelemetryConfig, ToolConfig
from start_monitor.domain.value_objects import SampleLabels
from start_monitor.infrastructure.monitoring.telemetry import StartTimeTelemetry
from start_monitor.infrastructure.process import CommandResult


@dataclass
class ScriptedRunner:
    """Command runner double that replays scripted outcomes in call order.

    Each outcome is either a CommandResult-compatible ``(returncode, seconds)``
    tuple or an exception instance to raise.
    """

    outcomes: list[Any] = field(default_factory=list)
    calls: list[tuple[str, ...]] = field(default_factory=list)
    tokens: list[Any] = field(default_factory=list)

    def run(self, args: Sequence[str], token: Any = None) -> CommandResult:
        self.calls.append(tuple(args))
        self.tokens.append(token)
        outcome = self.outcomes.pop(0) if self.outcomes else (0, 0.0)
        if isinstance(outcome, BaseException):
            raise outcome
        returncode, seconds = outcome
        return CommandResult(args=tuple(args), returncode=returncode, duration_seconds=seconds)

    def subcommands(self) -> list[str]:
        return [call[1] for call in self.calls]


@pytest.fixture
def tool_config() -> ToolConfig:
    """Tool configuration rooted in a fixed home directory."""
    return ToolConfig(home="/home/tester")


@pytest.fixture
def labels() -> SampleLabels:
    return SampleLabels(os="linux", driver="docker")


@pytest.fixture
def telemetry_config() -> TelemetryConfig:
    return TelemetryConfig(exporter=ExporterType.CONSOLE)


@pytest.fixture
def metric_reader() -> InMemoryMetricReader:
    return InMemoryMetricReader()


@pytest.fixture
def span_exporter() -> InMemorySpanExporter:
    return InMemorySpanExporter()


@pytest.fixture
def telemetry(telemetry_config, labels, metric_reader, span_exporter):
    """Started telemetry backed by in-memory exporters."""
    reporter = StartTimeTelemetry(
        telemetry_config, labels, metric_reader=metric_reader, span_exporter=span_exporter
    )
    reporter.start()
    yield reporter
    reporter.shutdown()


@pytest.fixture
def scripted_runner() -> ScriptedRunner:
    return ScriptedRunner()


@pytest.fixture(autouse=True)
def restore_logging():
    """Undo root logger and record factory changes made by a test."""
    root_logger = logging.getLogger()
    handlers = root_logger.handlers[:]
    level = root_logger.level
    factory = logging.getLogRecordFactory()
    yield
    for handler in root_logger.handlers[:]:
        if handler not in handlers:
            root_logger.removeHandler(handler)
    for handler in handlers:
        if handler not in root_logger.handlers:
            root_logger.addHandler(handler)
    root_logger.setLevel(level)
    logging.setLogRecordFactory(factory)


@pytest.fixture
def collect_points(metric_reader):
    """Return a callable collecting ``(metric, data_point)`` pairs from the reader."""

    def _collect() -> list[tuple[Any, Any]]:
        data = metric_reader.get_metrics_data()
        if data is None:
            return []
        points = []
        for resource_metrics in data.resource_metrics:
            for scope_metrics in resource_metrics.scope_metrics:
                for metric in scope_metrics.metrics:
                    points.extend((metric, point) for point in metric.data.data_points)
        return points

    return _collect
