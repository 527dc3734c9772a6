"""Application services: the timed probe and the measurement loop."""

from .measurement_loop import ITERATION_SPAN_NAME, MeasurementLoop
from .start_time_probe import ProbeState, StartTimeProbe

__all__ = ["MeasurementLoop", "StartTimeProbe", "ProbeState", "ITERATION_SPAN_NAME"]
