"""A timer that calls a function once after a delay; kicking it restarts the delay."""

from __future__ import annotations

import threading
from typing import Callable


class Watchdog:
    """Call ``callback`` once ``interval`` seconds after the last kick.

    The timer starts on creation. Kicking after the callback has run arms it again.
    """

    def __init__(self, interval: float, callback: Callable[[], object]) -> None:
        self.interval = interval
        self._callback = callback
        self._lock = threading.Lock()
        self._timer = self._start()

    def _start(self) -> threading.Timer:
        timer = threading.Timer(self.interval, self._callback)
        timer.daemon = True
        timer.start()
        return timer

    def stop(self) -> None:
        """Cancel the pending call, if any."""
        with self._lock:
            self._timer.cancel()

    def kick(self) -> None:
        """Restart the delay from now."""
        with self._lock:
            self._timer.cancel()
            self._timer = self._start()