"""
Circuit Breaker Core
====================
The main CircuitBreaker class guarding one category of remote operation.
"""

import threading
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar

import structlog

from ..clock import DEFAULT_CLOCK, Clock
from ..config import HALF_OPEN_SUCCESSES_TO_CLOSE
from ..exceptions import CircuitOpenError
from .models import CircuitBreakerConfig, CircuitBreakerState, CircuitState

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class CircuitBreaker:
    """
    Async-compatible circuit breaker.

    While closed, every success decays the failure count by one instead of
    clearing it, so intermittent errors still add up. The count only drops
    to zero when the breaker closes from half-open (or on ``reset()``).

    Example:
        breaker = CircuitBreaker("user_data")

        try:
            profile = await breaker.execute(lambda: client.get_profile(user_id))
        except CircuitOpenError:
            profile = cached_profile
    """

    def __init__(
        self,
        name: str,
        config: Optional[CircuitBreakerConfig] = None,
        clock: Optional[Clock] = None,
    ):
        self.name = name
        self.config = config or CircuitBreakerConfig()
        self._clock = clock or DEFAULT_CLOCK
        self._state = CircuitBreakerState()
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        return f"CircuitBreaker(name={self.name!r}, state={self._state.state.value!r})"

    @property
    def state(self) -> CircuitState:
        """Current circuit state. Reading it never triggers a transition."""
        return self._state.state

    @property
    def failure_count(self) -> int:
        return self._state.failure_count

    @property
    def half_open_successes(self) -> int:
        return self._state.half_open_successes

    @property
    def last_failure_at(self) -> Optional[float]:
        return self._state.last_failure_at

    @property
    def metrics(self) -> Dict[str, Any]:
        """Get circuit breaker metrics."""
        with self._lock:
            return {
                "name": self.name,
                "state": self._state.state.value,
                "failure_count": self._state.failure_count,
                "half_open_successes": self._state.half_open_successes,
                "total_calls": self._state.total_calls,
                "total_failures": self._state.total_failures,
                "total_successes": self._state.total_successes,
                "total_rejections": self._state.total_rejections,
                "last_failure_at": self._state.last_failure_at,
            }

    def _retry_after(self, now: float) -> float:
        if self._state.last_failure_at is None:
            return 0.0
        elapsed = now - self._state.last_failure_at
        return max(0.0, self.config.recovery_timeout - elapsed)

    def _acquire(self) -> None:
        """Admit a call or raise CircuitOpenError. Moves OPEN to HALF_OPEN when due."""
        with self._lock:
            if self._state.state != CircuitState.OPEN:
                return

            now = self._clock.monotonic()
            retry_after = self._retry_after(now)
            if retry_after > 0:
                self._state.total_rejections += 1
                logger.debug(
                    "circuit_rejected",
                    breaker=self.name,
                    retry_after=round(retry_after, 3),
                )
                raise CircuitOpenError(self.name, self._state.state, retry_after)

            self._state.state = CircuitState.HALF_OPEN
            self._state.half_open_successes = 0
            logger.info("circuit_half_open", breaker=self.name)

    def _record_success(self) -> None:
        with self._lock:
            self._state.total_calls += 1
            self._state.total_successes += 1

            if self._state.state == CircuitState.HALF_OPEN:
                self._state.half_open_successes += 1
                if self._state.half_open_successes >= HALF_OPEN_SUCCESSES_TO_CLOSE:
                    self._state.state = CircuitState.CLOSED
                    self._state.failure_count = 0
                    self._state.half_open_successes = 0
                    logger.info("circuit_closed", breaker=self.name)
            else:
                self._state.failure_count = max(0, self._state.failure_count - 1)

    def _record_failure(self, exc: BaseException) -> None:
        with self._lock:
            self._state.total_calls += 1
            self._state.total_failures += 1
            self._state.failure_count += 1
            self._state.last_failure_at = self._clock.monotonic()

            if self._state.state == CircuitState.HALF_OPEN:
                self._state.state = CircuitState.OPEN
                self._state.half_open_successes = 0
                logger.warning("circuit_reopened", breaker=self.name, error=str(exc))
            elif (
                self._state.state == CircuitState.CLOSED
                and self._state.failure_count >= self.config.failure_threshold
            ):
                self._state.state = CircuitState.OPEN
                logger.warning(
                    "circuit_opened",
                    breaker=self.name,
                    failures=self._state.failure_count,
                    error=str(exc),
                )

    async def execute(self, operation: Callable[[], Awaitable[T]]) -> T:
        """
        Run ``operation`` with circuit breaker protection.

        Args:
            operation: Zero-argument async callable

        Returns:
            Whatever ``operation`` returns

        Raises:
            CircuitOpenError: If the circuit is open and still cooling down
            Exception: The operation's own error, unchanged
        """
        self._acquire()

        try:
            result = await operation()
        except Exception as exc:
            self._record_failure(exc)
            raise

        self._record_success()
        return result

    async def call(self, func: Callable[..., Awaitable[T]], *args, **kwargs) -> T:
        """Execute ``func(*args, **kwargs)`` through the breaker."""
        return await self.execute(lambda: func(*args, **kwargs))

    def reset(self) -> None:
        """Force the breaker back to CLOSED with all counters cleared."""
        with self._lock:
            previous = self._state.state
            self._state.state = CircuitState.CLOSED
            self._state.failure_count = 0
            self._state.half_open_successes = 0
            self._state.last_failure_at = None
        logger.info("circuit_reset", breaker=self.name, previous=previous.value)

    async def __aenter__(self):
        """Context manager entry."""
        self._acquire()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        if exc_type is None:
            self._record_success()
        elif issubclass(exc_type, Exception):
            self._record_failure(exc_val)
        return False
