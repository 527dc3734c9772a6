"""
OpenTelemetry Instrumentation for the Start-Time Monitor

Registers the start-time measurement with a last-value view, exports it
periodically to the monitoring backend, and traces each measurement.
"""

import logging
from collections.abc import Generator
from contextlib import contextmanager
from types import TracebackType
from typing import Any

from opentelemetry import trace
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import (
    ConsoleMetricExporter,
    MetricExporter,
    MetricReader,
    PeriodicExportingMetricReader,
)
from opentelemetry.sdk.metrics.view import LastValueAggregation, View
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    ConsoleSpanExporter,
    SimpleSpanProcessor,
    SpanExporter,
)
from opentelemetry.trace import Status, StatusCode

from ...application.config import ExporterType, TelemetryConfig
from ...application.interfaces import StartTimeSpanAttributes
from ...domain.entities import Sample
from ...domain.value_objects import SampleLabels
from ..exceptions_infrastructure import TelemetryNotStartedException, TelemetrySetupException

logger = logging.getLogger(__name__)


class StartTimeTelemetry:
    """
    Metric reporter for minikube start durations.

    Lifecycle: construct, ``start()`` (registers the view and begins
    background export), ``record()`` per sample, ``shutdown()`` (flushes).
    Use it as a context manager so the flush runs on every exit path.

    ``metric_reader`` and ``span_exporter`` replace the configured exporters,
    which lets tests read samples back in memory.
    """

    def __init__(
        self,
        config: TelemetryConfig,
        labels: SampleLabels,
        metric_reader: MetricReader | None = None,
        span_exporter: SpanExporter | None = None,
    ) -> None:
        self.config = config
        self.labels = labels
        self._metric_reader = metric_reader
        self._span_exporter = span_exporter
        self._attributes = labels.to_attributes()

        self._meter_provider: MeterProvider | None = None
        self._tracer_provider: TracerProvider | None = None
        self._tracer: trace.Tracer | None = None
        self._gauge: Any = None
        self._shut_down = False

    @property
    def started(self) -> bool:
        return self._meter_provider is not None and not self._shut_down

    def start(self) -> None:
        """Register the measurement and start exporting. Failures are fatal."""
        if self._meter_provider is not None:
            return

        try:
            resource = Resource.create(
                {
                    SERVICE_NAME: self.config.service_name,
                    SERVICE_VERSION: self.config.service_version,
                }
            )
        except Exception as e:
            raise TelemetrySetupException("resource", str(e)) from e

        try:
            self._setup_metrics(resource)
            if self.config.enable_tracing:
                self._setup_tracing(resource)
        except TelemetrySetupException:
            self.shutdown()
            raise

        logger.info(
            f"Exporting '{self.config.view_name}' via {self.config.exporter.value} "
            f"every {self.config.export_interval_seconds:g}s",
            extra={"labels": self._attributes},
        )

    def _setup_metrics(self, resource: Resource) -> None:
        view = View(
            instrument_name=self.config.measure_name,
            name=self.config.view_name,
            description=self.config.view_description,
            aggregation=LastValueAggregation(),
        )

        try:
            reader = self._metric_reader or PeriodicExportingMetricReader(
                exporter=self._create_metric_exporter(),
                export_interval_millis=self.config.export_interval_millis,
            )
            self._meter_provider = MeterProvider(
                resource=resource, metric_readers=[reader], views=[view]
            )
            meter = self._meter_provider.get_meter(__name__, self.config.service_version)
            self._gauge = meter.create_gauge(
                name=self.config.measure_name,
                unit=self.config.measure_unit,
                description=self.config.measure_description,
            )
        except TelemetrySetupException:
            raise
        except Exception as e:
            raise TelemetrySetupException("metric view", str(e)) from e

    def _create_metric_exporter(self) -> MetricExporter:
        exporter = self.config.exporter
        try:
            if exporter == ExporterType.CLOUD_MONITORING:
                from opentelemetry.exporter.cloud_monitoring import (
                    CloudMonitoringMetricsExporter,
                )

                return CloudMonitoringMetricsExporter(
                    project_id=self.config.project_id, prefix=self.config.metric_prefix
                )
            if exporter == ExporterType.OTLP:
                from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import (
                    OTLPMetricExporter,
                )

                return OTLPMetricExporter(endpoint=self.config.otlp_endpoint, timeout=10)
            return ConsoleMetricExporter()
        except Exception as e:
            raise TelemetrySetupException(f"{exporter.value} metric exporter", str(e)) from e

    def _setup_tracing(self, resource: Resource) -> None:
        try:
            self._tracer_provider = TracerProvider(resource=resource)
            if self._span_exporter is not None:
                processor = SimpleSpanProcessor(self._span_exporter)
            else:
                processor = BatchSpanProcessor(self._create_span_exporter())
            self._tracer_provider.add_span_processor(processor)
            self._tracer = self._tracer_provider.get_tracer(__name__, self.config.service_version)
        except TelemetrySetupException:
            raise
        except Exception as e:
            raise TelemetrySetupException("tracer", str(e)) from e

    def _create_span_exporter(self) -> SpanExporter:
        exporter = self.config.exporter
        try:
            if exporter == ExporterType.CLOUD_MONITORING:
                from opentelemetry.exporter.cloud_trace import CloudTraceSpanExporter

                return CloudTraceSpanExporter(project_id=self.config.project_id)
            if exporter == ExporterType.OTLP:
                from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import (
                    OTLPSpanExporter,
                )

                return OTLPSpanExporter(endpoint=self.config.otlp_endpoint, timeout=10)
            return ConsoleSpanExporter()
        except Exception as e:
            raise TelemetrySetupException(f"{exporter.value} span exporter", str(e)) from e

    def record(self, value_seconds: float) -> Sample:
        """Record one start duration with the static labels."""
        if not self.started:
            raise TelemetryNotStartedException()

        sample = Sample(value_seconds=value_seconds, labels=self.labels)
        self._gauge.set(float(sample.value_seconds), self._attributes)
        logger.debug("Recorded sample", extra={"sample": sample.to_dict()})
        return sample

    @contextmanager
    def span(self, name: str, **attributes: Any) -> Generator[trace.Span, None, None]:
        """
        Open a span carrying the static labels plus ``attributes``.

        Exceptions mark the span as errored and propagate. Yields a
        non-recording span when tracing is disabled.
        """
        if self._tracer is None:
            yield trace.INVALID_SPAN
            return

        span_attributes = {
            StartTimeSpanAttributes.OS: self.labels.os,
            StartTimeSpanAttributes.DRIVER: self.labels.driver,
            **{key: value for key, value in attributes.items() if value is not None},
        }
        with self._tracer.start_as_current_span(
            name, attributes=span_attributes, record_exception=False, set_status_on_exception=False
        ) as span:
            try:
                yield span
            except BaseException as e:
                span.set_status(Status(StatusCode.ERROR, str(e)))
                span.record_exception(e)
                raise

    def shutdown(self) -> None:
        """Flush buffered samples and stop the exporters."""
        if self._shut_down:
            return
        self._shut_down = True

        if self._meter_provider is not None:
            try:
                self._meter_provider.force_flush()
            except Exception as e:
                logger.error(f"Error flushing metrics: {e}")
            try:
                self._meter_provider.shutdown()
            except Exception as e:
                logger.error(f"Error shutting down meter provider: {e}")

        if self._tracer_provider is not None:
            try:
                self._tracer_provider.shutdown()
            except Exception as e:
                logger.error(f"Error shutting down tracer provider: {e}")

        logger.info("Telemetry providers shut down")

    def __enter__(self) -> "StartTimeTelemetry":
        self.start()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.shutdown()
