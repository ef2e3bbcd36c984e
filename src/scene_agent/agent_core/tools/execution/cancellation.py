"""Cooperative cancellation for a running turn."""

import threading
from typing import Optional


class CancellationToken:
    """
    Flag checked by the engine between tool calls and by the controller between phases.

    Cancelling never interrupts a running handler. It can be set from any thread,
    e.g. an editor UI thread while the turn runs on an event loop.
    """

    def __init__(self) -> None:
        self._event = threading.Event()
        self.reason: Optional[str] = None

    def cancel(self, reason: str = "Cancelled by user.") -> None:
        self.reason = reason
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()
