"""
Cooperative cancellation.

SIGINT and SIGTERM set a flag; the pipeline checks it between steps so a
run never stops half way through publishing.
"""

import signal
import threading

from .errors import RunCancelled


class Cancellation:
    """Flag set by an external interrupt and polled between steps."""

    def __init__(self):
        self._event = threading.Event()
        self.reason = ""

    def cancel(self, reason: str = "cancelled") -> None:
        self.reason = reason
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self, step: str) -> None:
        """Raise RunCancelled if an interrupt arrived before ``step``."""
        if self._event.is_set():
            raise RunCancelled(f"run cancelled ({self.reason}) before {step}")

    def install_signal_handlers(self) -> None:
        """Route SIGINT and SIGTERM to this flag. Main thread only."""
        def _handler(signum, frame):
            self.cancel(signal.Signals(signum).name)

        signal.signal(signal.SIGINT, _handler)
        signal.signal(signal.SIGTERM, _handler)
