"""Value objects for the start-time monitor domain."""

from .labels import DRIVER_LABEL, OS_LABEL, SampleLabels, current_os

__all__ = ["SampleLabels", "current_os", "OS_LABEL", "DRIVER_LABEL"]
