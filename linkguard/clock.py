"""
Clocks
======
Monotonic time sources for time-based state transitions.

Recovery timeouts and detection windows are plain elapsed-time checks
evaluated lazily on the next relevant call, so every component takes a
clock instead of calling ``time.monotonic()`` directly.
"""

import threading
import time
from typing import Protocol


class Clock(Protocol):
    """Anything that can report monotonic seconds."""

    def monotonic(self) -> float:
        ...


class MonotonicClock:
    """Process clock backed by ``time.monotonic``."""

    def monotonic(self) -> float:
        return time.monotonic()


class ManualClock:
    """
    Clock that only moves when told to.

    Example:
        clock = ManualClock()
        breaker = CircuitBreaker("user_data", clock=clock)
        clock.advance(30.0)
    """

    def __init__(self, start: float = 0.0):
        self._now = start
        self._lock = threading.Lock()

    def monotonic(self) -> float:
        with self._lock:
            return self._now

    def advance(self, seconds: float) -> float:
        """Move time forward and return the new reading."""
        if seconds < 0:
            raise ValueError("ManualClock cannot move backwards")
        with self._lock:
            self._now += seconds
            return self._now

    def set(self, now: float) -> None:
        with self._lock:
            if now < self._now:
                raise ValueError("ManualClock cannot move backwards")
            self._now = now


DEFAULT_CLOCK = MonotonicClock()
