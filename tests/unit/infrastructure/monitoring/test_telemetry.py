"""
Comprehensive unit tests for the telemetry module.

Tests view registration, last-value export of the start-time measurement,
exporter selection, tracing and the flush-on-exit lifecycle.
"""

from unittest.mock import Mock, patch

import pytest
from opentelemetry.exporter.cloud_monitoring import CloudMonitoringMetricsExporter
from opentelemetry.sdk.metrics.export import InMemoryMetricReader
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter
from opentelemetry.trace import StatusCode

from start_monitor.application.config import ExporterType, TelemetryConfig
from start_monitor.domain.exceptions import InvalidSampleException
from start_monitor.infrastructure.exceptions_infrastructure import (
    TelemetryNotStartedException,
    TelemetrySetupException,
)
from start_monitor.infrastructure.monitoring.telemetry import (
    StartTimeSpanAttributes,
    StartTimeTelemetry,
)


class TestStartTimeSpanAttributes:
    """Test span attribute constants."""

    def test_span_attributes(self):
        """Test attribute names."""
        assert StartTimeSpanAttributes.OS == "minikube.os"
        assert StartTimeSpanAttributes.DRIVER == "minikube.driver"
        assert StartTimeSpanAttributes.ITERATION == "minikube.iteration"
        assert StartTimeSpanAttributes.START_SECONDS == "minikube.start_seconds"


class TestRecording:
    """Test recording samples."""

    def test_record_exports_last_value(self, telemetry, collect_points):
        """Test that the view keeps only the latest sample."""
        telemetry.record(44.0)
        telemetry.record(45.0)

        points = collect_points()

        assert len(points) == 1
        metric, point = points[0]
        assert metric.name == "minikube_performance_trace"
        assert metric.description == "Minikube start time"
        assert metric.unit == "s"
        assert point.value == pytest.approx(45.0)
        assert dict(point.attributes) == {"os": "linux", "driver": "docker"}

    def test_record_returns_sample(self, telemetry, labels):
        """Test the returned sample."""
        sample = telemetry.record(12.5)

        assert sample.value_seconds == 12.5
        assert sample.labels == labels

    def test_record_rejects_negative(self, telemetry, collect_points):
        """Test that invalid samples are not exported."""
        with pytest.raises(InvalidSampleException):
            telemetry.record(-1.0)

        assert collect_points() == []

    def test_record_before_start(self, telemetry_config, labels):
        """Test recording without a started exporter."""
        reader = InMemoryMetricReader()
        telemetry = StartTimeTelemetry(telemetry_config, labels, metric_reader=reader)

        with pytest.raises(TelemetryNotStartedException):
            telemetry.record(1.0)

    def test_record_after_shutdown(self, telemetry):
        """Test recording after the exporter was stopped."""
        telemetry.shutdown()

        with pytest.raises(TelemetryNotStartedException):
            telemetry.record(1.0)


class TestLifecycle:
    """Test start/shutdown."""

    def test_context_manager(self, telemetry_config, labels):
        """Test that the context manager starts and flushes."""
        reader = InMemoryMetricReader()
        telemetry = StartTimeTelemetry(telemetry_config, labels, metric_reader=reader)

        with telemetry as started:
            assert started is telemetry
            assert telemetry.started is True
            telemetry.record(3.0)

        assert telemetry.started is False

    def test_context_manager_flushes_on_error(self, telemetry_config, labels):
        """Test that shutdown runs when the body raises."""
        telemetry = StartTimeTelemetry(
            telemetry_config, labels, metric_reader=InMemoryMetricReader()
        )

        with patch.object(telemetry, "shutdown", wraps=telemetry.shutdown) as mock_shutdown:
            with pytest.raises(RuntimeError):
                with telemetry:
                    raise RuntimeError("minikube exploded")

        mock_shutdown.assert_called_once()

    def test_shutdown_flushes_then_shuts_down(self, telemetry):
        """Test the flush order of shutdown."""
        provider = Mock()
        telemetry._meter_provider = provider

        telemetry.shutdown()

        assert [c[0] for c in provider.method_calls] == ["force_flush", "shutdown"]

    def test_shutdown_is_idempotent(self, telemetry):
        """Test repeated shutdown calls."""
        provider = Mock()
        telemetry._meter_provider = provider

        telemetry.shutdown()
        telemetry.shutdown()

        provider.shutdown.assert_called_once()

    def test_shutdown_logs_flush_errors(self, telemetry, caplog):
        """Test that flush failures are logged, not raised."""
        provider = Mock()
        provider.force_flush.side_effect = RuntimeError("backend unavailable")
        telemetry._meter_provider = provider

        telemetry.shutdown()

        assert "Error flushing metrics: backend unavailable" in caplog.text
        provider.shutdown.assert_called_once()

    def test_start_is_idempotent(self, telemetry):
        """Test that a second start keeps the first provider."""
        provider = telemetry._meter_provider

        telemetry.start()

        assert telemetry._meter_provider is provider


class TestExporterSelection:
    """Test metric and span exporter construction."""

    @patch("start_monitor.infrastructure.monitoring.telemetry.PeriodicExportingMetricReader")
    @patch("opentelemetry.exporter.cloud_monitoring.CloudMonitoringMetricsExporter")
    def test_cloud_monitoring_exporter(self, mock_exporter, mock_reader, labels):
        """Test the Cloud Monitoring exporter with project and prefix."""
        config = TelemetryConfig(exporter=ExporterType.CLOUD_MONITORING, enable_tracing=False)
        mock_reader.return_value = InMemoryMetricReader()

        telemetry = StartTimeTelemetry(config, labels)
        telemetry.start()
        try:
            mock_exporter.assert_called_once_with(
                project_id="priya-wadhwa",
                prefix="custom.googleapis.com/opencensus/minikube_performance_trace",
            )
            mock_reader.assert_called_once_with(
                exporter=mock_exporter.return_value, export_interval_millis=60000
            )
        finally:
            telemetry.shutdown()

    @patch("start_monitor.infrastructure.monitoring.telemetry.PeriodicExportingMetricReader")
    @patch("opentelemetry.exporter.otlp.proto.grpc.metric_exporter.OTLPMetricExporter")
    def test_otlp_exporter(self, mock_exporter, mock_reader, labels):
        """Test the OTLP metric exporter."""
        config = TelemetryConfig(
            exporter=ExporterType.OTLP, otlp_endpoint="http://localhost:4317", enable_tracing=False
        )
        mock_reader.return_value = InMemoryMetricReader()

        telemetry = StartTimeTelemetry(config, labels)
        telemetry.start()
        try:
            mock_exporter.assert_called_once_with(endpoint="http://localhost:4317", timeout=10)
        finally:
            telemetry.shutdown()

    @patch("start_monitor.infrastructure.monitoring.telemetry.ConsoleMetricExporter")
    @patch("start_monitor.infrastructure.monitoring.telemetry.PeriodicExportingMetricReader")
    def test_console_exporter(self, mock_reader, mock_console, labels):
        """Test the console exporter."""
        config = TelemetryConfig(exporter=ExporterType.CONSOLE, enable_tracing=False)
        mock_reader.return_value = InMemoryMetricReader()

        telemetry = StartTimeTelemetry(config, labels)
        telemetry.start()
        try:
            mock_console.assert_called_once_with()
        finally:
            telemetry.shutdown()

    @patch("opentelemetry.exporter.cloud_monitoring.CloudMonitoringMetricsExporter")
    def test_exporter_failure_is_setup_error(self, mock_exporter, labels):
        """Test that exporter construction errors are fatal setup errors."""
        mock_exporter.side_effect = RuntimeError("default credentials not found")
        telemetry = StartTimeTelemetry(TelemetryConfig(), labels)

        with pytest.raises(TelemetrySetupException) as exc_info:
            telemetry.start()

        assert exc_info.value.component == "cloud_monitoring metric exporter"
        assert "default credentials not found" in str(exc_info.value)

    def test_metric_setup_failure_propagates(self, labels):
        """Test that a view the SDK refuses fails setup."""
        config = TelemetryConfig(exporter=ExporterType.CONSOLE, enable_tracing=False)
        telemetry = StartTimeTelemetry(config, labels, metric_reader=InMemoryMetricReader())
        error = TelemetrySetupException("metric view", "bad name")

        with patch.object(StartTimeTelemetry, "_setup_metrics", side_effect=error):
            with pytest.raises(TelemetrySetupException, match="metric view"):
                telemetry.start()

    @patch("opentelemetry.exporter.cloud_trace.CloudTraceSpanExporter")
    @patch("start_monitor.infrastructure.monitoring.telemetry.BatchSpanProcessor")
    def test_cloud_trace_exporter(self, mock_processor, mock_span_exporter, labels):
        """Test that spans go to Cloud Trace for the same project."""
        config = TelemetryConfig(exporter=ExporterType.CLOUD_MONITORING)
        mock_processor.return_value = Mock()

        telemetry = StartTimeTelemetry(config, labels, metric_reader=InMemoryMetricReader())
        telemetry.start()
        try:
            mock_span_exporter.assert_called_once_with(project_id="priya-wadhwa")
            mock_processor.assert_called_once_with(mock_span_exporter.return_value)
        finally:
            telemetry.shutdown()


class TestTracing:
    """Test span creation."""

    def test_span_attributes(self, telemetry, span_exporter):
        """Test that spans carry the static labels and extra attributes."""
        with telemetry.span("minikube.start_time", **{"minikube.iteration": 2}) as span:
            span.set_attribute("minikube.start_seconds", 45.0)

        (finished,) = span_exporter.get_finished_spans()
        assert finished.name == "minikube.start_time"
        assert finished.attributes["minikube.os"] == "linux"
        assert finished.attributes["minikube.driver"] == "docker"
        assert finished.attributes["minikube.iteration"] == 2
        assert finished.attributes["minikube.start_seconds"] == 45.0

    def test_span_records_errors(self, telemetry, span_exporter):
        """Test that exceptions mark the span as errored and propagate."""
        with pytest.raises(ValueError):
            with telemetry.span("minikube.start_time"):
                raise ValueError("boom")

        (finished,) = span_exporter.get_finished_spans()
        assert finished.status.status_code == StatusCode.ERROR
        assert finished.events[0].name == "exception"

    def test_span_when_tracing_disabled(self, labels, span_exporter):
        """Test that disabled tracing yields a non-recording span."""
        config = TelemetryConfig(exporter=ExporterType.CONSOLE, enable_tracing=False)
        telemetry = StartTimeTelemetry(
            config, labels, metric_reader=InMemoryMetricReader(), span_exporter=span_exporter
        )
        telemetry.start()
        try:
            with telemetry.span("minikube.start_time") as span:
                span.set_attribute("minikube.start_seconds", 1.0)
                assert span.is_recording() is False
        finally:
            telemetry.shutdown()

        assert span_exporter.get_finished_spans() == ()


class TestCloudMonitoringMetricType:
    """Test the metric type written to Cloud Monitoring."""

    def test_default_metric_type(self, labels):
        """Test that the default prefix continues the existing time series."""
        config = TelemetryConfig()
        reader = InMemoryMetricReader()
        telemetry = StartTimeTelemetry(
            config, labels, metric_reader=reader, span_exporter=InMemorySpanExporter()
        )
        telemetry.start()
        try:
            telemetry.record(45.0)
            metrics_data = reader.get_metrics_data()
        finally:
            telemetry.shutdown()

        client = Mock()
        client.common_project_path.return_value = f"projects/{config.project_id}"
        exporter = CloudMonitoringMetricsExporter(
            project_id=config.project_id, client=client, prefix=config.metric_prefix
        )
        exporter.export(metrics_data)

        (request,), _ = client.create_metric_descriptor.call_args
        assert request.metric_descriptor.type == (
            "custom.googleapis.com/opencensus/minikube_performance_trace/"
            "minikube_performance_trace"
        )
        (series_request,), _ = client.create_time_series.call_args
        (series,) = series_request.time_series
        assert series.metric.type == request.metric_descriptor.type
        assert dict(series.metric.labels) == {"os": "linux", "driver": "docker"}
