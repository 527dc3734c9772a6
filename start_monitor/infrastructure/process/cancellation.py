"""
Cancellation token shared by the measurement loop and external commands.
"""

import logging
import signal
import threading
from types import FrameType

logger = logging.getLogger(__name__)


class CancellationToken:
    """Thread-safe cancellation flag.

    Signal handlers only set the flag; the loop and the command runner poll it
    while they wait.
    """

    def __init__(self) -> None:
        self._event = threading.Event()
        self._reason: str | None = None

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> str | None:
        return self._reason

    def cancel(self, reason: str = "cancelled") -> None:
        if not self._event.is_set():
            self._reason = reason
            self._event.set()

    def wait(self, timeout: float | None = None) -> bool:
        """Block for up to ``timeout`` seconds; return True if cancelled."""
        return self._event.wait(timeout)


def install_signal_handlers(
    token: CancellationToken,
    signals: tuple[signal.Signals, ...] = (signal.SIGINT, signal.SIGTERM),
) -> None:
    """Cancel ``token`` when any of ``signals`` is delivered."""

    def _handler(signum: int, frame: FrameType | None) -> None:
        name = signal.Signals(signum).name
        logger.warning(f"Received {name}, shutting down")
        token.cancel(reason=name)

    for sig in signals:
        signal.signal(sig, _handler)
