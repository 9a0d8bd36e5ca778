"""polling.py

Cancellable fixed-interval polling.

``start_polling()`` returns a :class:`PollingTask` handle. The loop runs on
a daemon thread and ends on the first of:

* ``cancel()`` (view teardown, logout),
* ``max_attempts`` actions performed,
* ``stop_when()`` returning true after an attempt.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class PollingTask:
    """Timer + cancellation token around a repeated *action*."""

    def __init__(
        self,
        action: Callable[[], object],
        interval: float,
        *,
        max_attempts: Optional[int] = None,
        stop_when: Optional[Callable[[], bool]] = None,
        name: Optional[str] = None,
    ):
        if interval < 0:
            raise ValueError("interval must be >= 0")
        if max_attempts is not None and max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self.action = action
        self.interval = interval
        self.max_attempts = max_attempts
        self.stop_when = stop_when
        self.name = name or getattr(action, "__name__", "poll")
        self.attempts = 0
        self.stopped_reason: Optional[str] = None
        self._stop_event = threading.Event()
        self._thread = threading.Thread(target=self._run, name=f"poll-{self.name}", daemon=True)

    # ------------------------------------------------------------------
    def start(self) -> "PollingTask":
        self._thread.start()
        return self

    def cancel(self) -> None:
        if not self._stop_event.is_set():
            logger.debug("Cancelling polling task %s", self.name)
        self._finish("cancelled")

    def join(self, timeout: Optional[float] = None) -> None:
        self._thread.join(timeout)

    @property
    def running(self) -> bool:
        return self._thread.is_alive() and not self._stop_event.is_set()

    # ------------------------------------------------------------------
    def _finish(self, reason: str) -> None:
        if self.stopped_reason is None:
            self.stopped_reason = reason
        self._stop_event.set()

    def _run(self) -> None:
        # ``wait`` returns True as soon as the task is cancelled.
        while not self._stop_event.wait(self.interval):
            self.attempts += 1
            try:
                self.action()
            except Exception:  # keep polling – next tick may succeed
                logger.exception("Polling task %s: attempt %d failed", self.name, self.attempts)

            if self.stop_when is not None and self.stop_when():
                logger.info("Polling task %s: condition met after %d attempts", self.name, self.attempts)
                self._finish("condition_met")
            elif self.max_attempts is not None and self.attempts >= self.max_attempts:
                logger.info("Polling task %s: giving up after %d attempts", self.name, self.attempts)
                self._finish("max_attempts")


def start_polling(
    action: Callable[[], object],
    interval: float,
    *,
    max_attempts: Optional[int] = None,
    stop_when: Optional[Callable[[], bool]] = None,
    name: Optional[str] = None,
) -> PollingTask:
    """Create a :class:`PollingTask` and start it immediately."""
    return PollingTask(
        action, interval, max_attempts=max_attempts, stop_when=stop_when, name=name
    ).start()
