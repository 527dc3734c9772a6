"""
Sample Entity - One measured start duration
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from ..exceptions import InvalidSampleException
from ..value_objects import SampleLabels


@dataclass(frozen=True)
class Sample:
    """
    A single elapsed-seconds measurement.

    Samples are handed to the reporter as soon as they are produced and are
    never stored locally.
    """

    value_seconds: float
    labels: SampleLabels
    recorded_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __post_init__(self) -> None:
        if not isinstance(self.value_seconds, (int, float)) or isinstance(
            self.value_seconds, bool
        ):
            raise InvalidSampleException(self.value_seconds, "value must be a number")
        if math.isnan(self.value_seconds) or math.isinf(self.value_seconds):
            raise InvalidSampleException(self.value_seconds, "value must be finite")
        if self.value_seconds < 0:
            raise InvalidSampleException(self.value_seconds, "value cannot be negative")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging"""
        return {
            "value_seconds": float(self.value_seconds),
            "labels": self.labels.to_attributes(),
            "recorded_at": self.recorded_at.isoformat(),
        }
