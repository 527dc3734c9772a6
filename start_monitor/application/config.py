"""
Application Configuration - Central configuration management.

The measured command and its driver/profile are fixed. Environment variables
only select ambient behaviour (logging, exporter backend), and every default
matches the values the monitor has always reported with.
"""

import logging
import os
from dataclasses import dataclass, field
from enum import Enum

from dotenv import load_dotenv

from .exceptions_application import InvalidConfigurationException

MINIKUBE_RELATIVE_PATH = os.path.join("minikube", "out", "minikube")
DEFAULT_DRIVER = "docker"
DEFAULT_PROFILE = "cloud-monitoring"

MEASURE_NAME = "repl/start_time"
MEASURE_DESCRIPTION = "start time in seconds"
MEASURE_UNIT = "s"
VIEW_NAME = "minikube_performance_trace"
VIEW_DESCRIPTION = "Minikube start time"
DEFAULT_PROJECT_ID = "priya-wadhwa"
# Exported metric type is "{prefix}/{view name}"
DEFAULT_METRIC_PREFIX = "custom.googleapis.com/opencensus/minikube_performance_trace"


class ExporterType(Enum):
    """Monitoring backends the samples can be exported to."""

    CLOUD_MONITORING = "cloud_monitoring"
    OTLP = "otlp"
    CONSOLE = "console"


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


@dataclass
class ToolConfig:
    """Location and fixed arguments of the measured binary."""

    home: str = ""
    relative_path: str = MINIKUBE_RELATIVE_PATH
    driver: str = DEFAULT_DRIVER
    profile: str = DEFAULT_PROFILE

    @property
    def binary(self) -> str:
        """Absolute path of the binary, or a relative one when HOME is unset."""
        return os.path.join(self.home, self.relative_path)

    @classmethod
    def from_env(cls) -> "ToolConfig":
        """Create configuration from environment variables."""
        return cls(home=os.getenv("HOME", ""))


@dataclass
class TelemetryConfig:
    """Metric and trace export configuration."""

    exporter: ExporterType = ExporterType.CLOUD_MONITORING
    project_id: str = DEFAULT_PROJECT_ID
    metric_prefix: str = DEFAULT_METRIC_PREFIX
    measure_name: str = MEASURE_NAME
    measure_description: str = MEASURE_DESCRIPTION
    measure_unit: str = MEASURE_UNIT
    view_name: str = VIEW_NAME
    view_description: str = VIEW_DESCRIPTION
    export_interval_seconds: float = 60.0
    otlp_endpoint: str | None = None
    enable_tracing: bool = True
    service_name: str = "minikube-start-monitor"
    service_version: str = "1.0.0"

    @classmethod
    def from_env(cls) -> "TelemetryConfig":
        """Create configuration from environment variables."""
        exporter_name = os.getenv("MONITOR_EXPORTER", ExporterType.CLOUD_MONITORING.value)
        try:
            exporter = ExporterType(exporter_name.lower())
        except ValueError:
            raise InvalidConfigurationException(
                "MONITOR_EXPORTER",
                exporter_name,
                f"must be one of {[e.value for e in ExporterType]}",
                config_section="telemetry",
            )

        endpoint = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT")
        return cls(
            exporter=exporter,
            project_id=os.getenv("MONITOR_PROJECT_ID", DEFAULT_PROJECT_ID),
            otlp_endpoint=endpoint if endpoint else None,
            enable_tracing=_env_bool("MONITOR_ENABLE_TRACING", "true"),
        )

    @property
    def export_interval_millis(self) -> int:
        return int(self.export_interval_seconds * 1000)


@dataclass
class LoopConfig:
    """Measurement loop cadence."""

    interval_seconds: float = 30.0


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "INFO"
    format_type: str = "json"
    file: str | None = None

    @classmethod
    def from_env(cls) -> "LoggingConfig":
        """Create configuration from environment variables."""
        file_path = os.getenv("LOG_FILE")
        return cls(
            level=os.getenv("LOG_LEVEL", "INFO"),
            format_type=os.getenv("LOG_FORMAT_TYPE", "json"),
            file=file_path if file_path else None,
        )


@dataclass
class MonitorConfig:
    """Complete monitor configuration."""

    tool: ToolConfig = field(default_factory=ToolConfig)
    telemetry: TelemetryConfig = field(default_factory=TelemetryConfig)
    loop: LoopConfig = field(default_factory=LoopConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_env(cls) -> "MonitorConfig":
        """Create configuration from environment variables."""
        return cls(
            tool=ToolConfig.from_env(),
            telemetry=TelemetryConfig.from_env(),
            loop=LoopConfig(),
            logging=LoggingConfig.from_env(),
        )

    @classmethod
    def load(cls) -> "MonitorConfig":
        """Load a .env file if present, then read and validate the environment."""
        load_dotenv()
        config = cls.from_env()
        config.validate()
        return config

    def validate(self) -> bool:
        """
        Validate the configuration.

        Returns:
            True if valid, raises exception otherwise
        """
        if not self.tool.driver:
            raise InvalidConfigurationException("driver", self.tool.driver, "cannot be empty", "tool")
        if not self.tool.profile:
            raise InvalidConfigurationException(
                "profile", self.tool.profile, "cannot be empty", "tool"
            )

        telemetry = self.telemetry
        if telemetry.exporter == ExporterType.CLOUD_MONITORING and not telemetry.project_id:
            raise InvalidConfigurationException(
                "MONITOR_PROJECT_ID",
                telemetry.project_id,
                "required for the cloud_monitoring exporter",
                "telemetry",
            )
        if telemetry.exporter == ExporterType.OTLP and not telemetry.otlp_endpoint:
            raise InvalidConfigurationException(
                "OTEL_EXPORTER_OTLP_ENDPOINT",
                telemetry.otlp_endpoint,
                "required for the otlp exporter",
                "telemetry",
            )
        if telemetry.export_interval_seconds <= 0:
            raise InvalidConfigurationException(
                "export_interval_seconds",
                telemetry.export_interval_seconds,
                "must be positive",
                "telemetry",
            )

        if self.loop.interval_seconds < 0:
            raise InvalidConfigurationException(
                "interval_seconds", self.loop.interval_seconds, "cannot be negative", "loop"
            )

        level = self.logging.level.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise InvalidConfigurationException("LOG_LEVEL", self.logging.level, "unknown level", "logging")
        if self.logging.format_type not in ("json", "text"):
            raise InvalidConfigurationException(
                "LOG_FORMAT_TYPE", self.logging.format_type, "must be 'json' or 'text'", "logging"
            )

        return True
