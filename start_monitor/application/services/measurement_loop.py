"""
Measurement Loop

Measures, prints, and records the minikube start time, then sleeps, forever.
"""

import logging
import sys
from collections.abc import Callable
from contextlib import AbstractContextManager, nullcontext
from typing import IO, Any

from ..interfaces import Cancellable, SampleReporter, StartTimeSpanAttributes
from .start_time_probe import StartTimeProbe

logger = logging.getLogger(__name__)

ITERATION_SPAN_NAME = "minikube.start_time"


class MeasurementLoop:
    """
    Drives the probe at a fixed cadence.

    Each iteration runs inside a fresh ``iteration_context()`` (the entry
    point passes a correlation-id scope) and its own trace span. Exceptions
    from the probe end the loop before anything is recorded for that
    iteration.
    """

    def __init__(
        self,
        probe: StartTimeProbe,
        reporter: SampleReporter,
        token: Cancellable,
        interval_seconds: float = 30.0,
        output: IO[str] | None = None,
        iteration_context: Callable[[], AbstractContextManager[Any]] = nullcontext,
    ) -> None:
        self.probe = probe
        self.reporter = reporter
        self.token = token
        self.interval_seconds = interval_seconds
        self._output = output
        self._iteration_context = iteration_context

    def run(self, max_iterations: int | None = None) -> int:
        """
        Run until cancelled, or for ``max_iterations`` iterations.

        Returns:
            Number of completed iterations.
        """
        iterations = 0
        while max_iterations is None or iterations < max_iterations:
            self.run_once(iterations + 1)
            iterations += 1

            if max_iterations is not None and iterations >= max_iterations:
                break
            if self.token.wait(self.interval_seconds):
                logger.info(f"Measurement loop stopped after {iterations} iterations")
                break

        return iterations

    def run_once(self, iteration: int) -> float:
        """Measure, print and record a single sample."""
        attributes = {StartTimeSpanAttributes.ITERATION: iteration}
        with self._iteration_context():
            with self.reporter.span(ITERATION_SPAN_NAME, **attributes) as span:
                seconds = self.probe.measure(self.token)
                span.set_attribute(StartTimeSpanAttributes.START_SECONDS, seconds)

                output = self._output if self._output is not None else sys.stdout
                print(f"Latency: {seconds:f}", file=output, flush=True)

                self.reporter.record(seconds)
                logger.info(
                    f"Recorded start time of {seconds:.3f}s",
                    extra={"iteration": iteration, "value_seconds": seconds},
                )
                return seconds
