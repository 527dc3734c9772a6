"""
Sample Labels Value Object - Static tags attached to every reported sample
"""

from __future__ import annotations

import platform
from dataclasses import dataclass

from ..exceptions import InvalidLabelException

OS_LABEL = "os"
DRIVER_LABEL = "driver"

# platform.system() names mapped to the identifiers minikube reports
_OS_NAMES = {
    "linux": "linux",
    "darwin": "darwin",
    "windows": "windows",
    "freebsd": "freebsd",
}


def current_os() -> str:
    """Return the operating-system identifier of this process."""
    system = platform.system().lower()
    return _OS_NAMES.get(system, system or "unknown")


@dataclass(frozen=True)
class SampleLabels:
    """
    Labels shared by every sample of a process.

    Both values are fixed for the lifetime of the process, so they are
    computed once and carried by the reporter.
    """

    os: str
    driver: str

    def __post_init__(self) -> None:
        if not self.os:
            raise InvalidLabelException(OS_LABEL)
        if not self.driver:
            raise InvalidLabelException(DRIVER_LABEL)

    @classmethod
    def for_current_platform(cls, driver: str) -> SampleLabels:
        """Build labels for the running operating system."""
        return cls(os=current_os(), driver=driver)

    def to_attributes(self) -> dict[str, str]:
        """Convert to metric attributes."""
        return {OS_LABEL: self.os, DRIVER_LABEL: self.driver}
