"""
Start-time monitor entry point.

Wires configuration, logging, the telemetry reporter and the measurement
loop, and maps failures to exit codes:

- 0: stopped by SIGINT/SIGTERM
- 1: setup failure or failed `minikube start`
"""

import logging
import sys
from collections.abc import Sequence

from .application.config import MonitorConfig
from .application.exceptions_application import (
    ConfigurationException,
    StartCommandFailedException,
)
from .application.services import MeasurementLoop, StartTimeProbe
from .domain.value_objects import SampleLabels
from .infrastructure.exceptions_infrastructure import (
    CommandCancelledException,
    CommandLaunchException,
    TelemetrySetupException,
)
from .infrastructure.monitoring import (
    StartTimeTelemetry,
    correlation_context,
    setup_structured_logging,
)
from .infrastructure.process import CancellationToken, CommandRunner, install_signal_handlers

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FATAL = 1


def run(
    config: MonitorConfig,
    token: CancellationToken,
    runner: CommandRunner | None = None,
    telemetry: StartTimeTelemetry | None = None,
    max_iterations: int | None = None,
) -> int:
    """Run the monitor with an already validated configuration."""
    labels = SampleLabels.for_current_platform(config.tool.driver)
    telemetry = telemetry or StartTimeTelemetry(config.telemetry, labels)
    probe = StartTimeProbe(runner or CommandRunner(), config.tool)

    try:
        with telemetry:
            loop = MeasurementLoop(
                probe,
                telemetry,
                token,
                interval_seconds=config.loop.interval_seconds,
                iteration_context=correlation_context,
            )
            loop.run(max_iterations=max_iterations)
    except TelemetrySetupException as e:
        logger.critical(
            f"Failed to register the start-time metric: {e}", extra={"details": e.details}
        )
        return EXIT_FATAL
    except (StartCommandFailedException, CommandLaunchException) as e:
        logger.critical(str(e), extra={"details": e.details})
        return EXIT_FATAL
    except CommandCancelledException:
        logger.info(f"Measurement cancelled ({token.reason})")
        return EXIT_OK

    return EXIT_OK


def main(argv: Sequence[str] | None = None) -> int:
    """Console entry point. Takes no arguments."""
    try:
        config = MonitorConfig.load()
    except ConfigurationException as e:
        setup_structured_logging()
        logger.critical(f"Invalid configuration: {e}", extra={"details": e.details})
        return EXIT_FATAL

    try:
        setup_structured_logging(
            level=config.logging.level,
            format_type=config.logging.format_type,
            log_file=config.logging.file,
        )
    except OSError as e:
        setup_structured_logging()
        logger.critical(
            f"Cannot open log file {config.logging.file}: {e}",
            extra={"details": {"log_file": config.logging.file}},
        )
        return EXIT_FATAL

    logger.info(
        f"Monitoring '{config.tool.binary}' profile '{config.tool.profile}' "
        f"every {config.loop.interval_seconds:g}s"
    )

    token = CancellationToken()
    install_signal_handlers(token)
    return run(config, token)


if __name__ == "__main__":
    sys.exit(main())
