"""Cancellable pacing delays shared by every traversal component."""

from __future__ import annotations

import logging
import random
import threading
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


@dataclass
class Pacer:
    """Registry of pending delays.

    Every ``sleep`` is registered while it waits. ``cancel`` wakes all of them,
    empties the registry and makes later sleeps return immediately, so no delay
    outlives shutdown.
    """

    rng: random.Random = field(default_factory=random.Random)
    _stop: threading.Event = field(default_factory=threading.Event, init=False, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)
    _pending: dict[int, float] = field(default_factory=dict, init=False, repr=False)
    _next_id: int = field(default=0, init=False, repr=False)

    @property
    def cancelled(self) -> bool:
        return self._stop.is_set()

    @property
    def pending(self) -> int:
        with self._lock:
            return len(self._pending)

    def sleep(self, seconds: float) -> bool:
        """Waits ``seconds``; returns ``False`` when interrupted by ``cancel``."""

        if self._stop.is_set():
            return False
        if seconds <= 0:
            return True

        with self._lock:
            timer_id = self._next_id
            self._next_id += 1
            self._pending[timer_id] = seconds

        try:
            interrupted = self._stop.wait(seconds)
        finally:
            with self._lock:
                self._pending.pop(timer_id, None)
        return not interrupted

    def jitter(self, low: float, high: float) -> bool:
        return self.sleep(self.rng.uniform(low, high))

    def interrupt(self) -> None:
        """Wakes pending sleeps without touching the registry.

        Only sets the stop event, so it is safe to call from a signal handler
        that may run while this thread holds the registry lock.
        """

        self._stop.set()

    def cancel(self) -> None:
        with self._lock:
            cleared = len(self._pending)
            self._pending.clear()
        self._stop.set()
        logger.info("Cleared %d pending delay(s)", cleared)
