"""Cancellable periodic timers."""

import logging
import threading
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class RepeatingTimer:
    """
    Calls ``callback`` every ``interval`` seconds on a daemon thread.

    cancel() stops the timer without waiting for the current interval to
    elapse; exceptions from the callback are logged and the timer keeps
    running.
    """

    def __init__(self, interval: float, callback: Callable[[], object], name: str = "timer"):
        if interval <= 0:
            raise ValueError(f"interval must be positive, got: {interval}")
        self.interval = interval
        self.callback = callback
        self.name = name
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive() and not self._stop.is_set()

    def start(self) -> "RepeatingTimer":
        if self.running:
            return self
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name=self.name, daemon=True)
        self._thread.start()
        logger.debug(f"Timer {self.name} started ({self.interval}s interval)")
        return self

    def _run(self):
        while not self._stop.wait(self.interval):
            try:
                self.callback()
            except Exception as e:
                logger.error(f"Error in timer {self.name}: {e}")

    def cancel(self, timeout: float = 1.0):
        """Stop the timer. Safe to call from the timer's own callback."""
        self._stop.set()
        thread = self._thread
        self._thread = None
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=timeout)
            logger.debug(f"Timer {self.name} stopped")
