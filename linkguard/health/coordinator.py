"""
Health Coordinator
==================
Fuses breaker states, the reachability verdict and an active probe into a
single user-facing connection status.

Derivation, in priority order:

1. any breaker OPEN, or backend unreachable  -> OFFLINE
2. any breaker HALF_OPEN                     -> DEGRADED
3. probe succeeds                            -> CONNECTED
   probe fails or times out                  -> DEGRADED

Until the first evaluation completes the status is CHECKING.
"""

import asyncio
import contextlib
from datetime import datetime, timezone
from typing import Callable, Iterable, List, Optional, Tuple

import structlog

from ..circuit_breaker import CircuitBreaker, CircuitState
from ..clock import DEFAULT_CLOCK, Clock
from ..exceptions import ConfigError
from ..reachability import ReachabilityMonitor
from ..subscriptions import Subscribers, Unsubscribe
from .models import (
    RETRYABLE_STATUSES,
    STATUS_DESCRIPTIONS,
    BreakerSnapshot,
    ConnectionSnapshot,
    ConnectionStatus,
)
from .probe import DEFAULT_PROBE_TIMEOUT, Probe, run_probe

logger = structlog.get_logger(__name__)

DEFAULT_POLL_INTERVAL = 30.0


class HealthCoordinator:
    """
    Periodic, non-overlapping status evaluation.

    Holds no truth of its own: ``status`` is a materialized view over the
    breakers and the monitor, refreshed on a timer or on demand.

    Example:
        coordinator = HealthCoordinator(registry, monitor, HttpProbe(url))
        await coordinator.start()
        coordinator.subscribe(lambda status: banner.render(status))
        ...
        await coordinator.retry()
        await coordinator.stop()
    """

    def __init__(
        self,
        breakers: Iterable[CircuitBreaker],
        monitor: Optional[ReachabilityMonitor],
        probe: Probe,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        probe_timeout: float = DEFAULT_PROBE_TIMEOUT,
        clock: Optional[Clock] = None,
    ):
        if poll_interval <= 0:
            raise ConfigError("poll_interval must be > 0")
        if probe_timeout <= 0:
            raise ConfigError("probe_timeout must be > 0")

        # Registries are re-read on every evaluation; one-shot iterators are not
        if iter(breakers) is breakers:
            breakers = list(breakers)
        self._breakers = breakers
        self._monitor = monitor
        self._probe = probe
        self.poll_interval = poll_interval
        self.probe_timeout = probe_timeout
        self._clock = clock or DEFAULT_CLOCK

        self._status = ConnectionStatus.CHECKING
        self._last_checked_at: Optional[datetime] = None
        self._last_error: Optional[str] = None
        self._last_evaluated: Optional[float] = None
        self._evaluation_lock = asyncio.Lock()
        self._subscribers: Subscribers[ConnectionStatus] = Subscribers("connection_status")
        self._task: Optional[asyncio.Task] = None

    @property
    def status(self) -> ConnectionStatus:
        return self._status

    @property
    def last_checked_at(self) -> Optional[datetime]:
        return self._last_checked_at

    @property
    def last_error(self) -> Optional[str]:
        return self._last_error

    @property
    def retry_available(self) -> bool:
        return self._status in RETRYABLE_STATUSES

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def breakers(self) -> List[CircuitBreaker]:
        return list(self._breakers)

    def describe(self) -> str:
        """Human-readable text for the current status."""
        return STATUS_DESCRIPTIONS[self._status]

    def subscribe(self, callback: Callable[[ConnectionStatus], None]) -> Unsubscribe:
        """Register ``callback(status)`` for every status change."""
        return self._subscribers.add(callback)

    def snapshot(self) -> ConnectionSnapshot:
        return ConnectionSnapshot(
            status=self._status,
            description=self.describe(),
            retry_available=self.retry_available,
            last_checked_at=self._last_checked_at,
            last_error=self._last_error,
            reachable=self._monitor.is_reachable if self._monitor is not None else True,
            breakers={
                breaker.name: BreakerSnapshot(
                    state=breaker.state.value,
                    failure_count=breaker.failure_count,
                    total_rejections=breaker.metrics["total_rejections"],
                )
                for breaker in self._breakers
            },
        )

    async def _derive(self) -> Tuple[ConnectionStatus, Optional[str]]:
        breakers = list(self._breakers)

        open_breakers = [b.name for b in breakers if b.state == CircuitState.OPEN]
        if open_breakers:
            return ConnectionStatus.OFFLINE, f"Circuit open: {', '.join(open_breakers)}"
        if self._monitor is not None and not self._monitor.is_reachable:
            return ConnectionStatus.OFFLINE, "Backend unreachable"

        trial_breakers = [b.name for b in breakers if b.state == CircuitState.HALF_OPEN]
        if trial_breakers:
            return (
                ConnectionStatus.DEGRADED,
                f"Circuit recovering: {', '.join(trial_breakers)}",
            )

        result = await run_probe(self._probe, timeout=self.probe_timeout)
        if result.success:
            return ConnectionStatus.CONNECTED, None
        return ConnectionStatus.DEGRADED, result.error

    async def _evaluate_locked(self) -> ConnectionStatus:
        try:
            status, error = await self._derive()
        except Exception as e:
            logger.exception("health_evaluation_failed")
            status, error = ConnectionStatus.OFFLINE, str(e)

        previous = self._status
        self._status = status
        self._last_error = error
        self._last_checked_at = datetime.now(timezone.utc)
        self._last_evaluated = self._clock.monotonic()

        if status != previous:
            logger.info(
                "connection_status_changed",
                previous=previous.value,
                status=status.value,
                error=error,
            )
            self._subscribers.notify(status)
        return status

    async def evaluate(self) -> ConnectionStatus:
        """Evaluate now, waiting for any in-flight evaluation to finish first."""
        async with self._evaluation_lock:
            return await self._evaluate_locked()

    async def retry(self) -> ConnectionStatus:
        """
        Reset every managed breaker and the monitor, then evaluate afresh.

        Runs under the evaluation lock, so an in-flight scheduled tick
        completes before the reset and cannot overwrite the fresh result.
        The scheduler measures its interval from this evaluation.
        """
        async with self._evaluation_lock:
            for breaker in list(self._breakers):
                breaker.reset()
            if self._monitor is not None:
                self._monitor.reset()
            logger.info("connection_retry_requested")
            return await self._evaluate_locked()

    async def _tick(self) -> None:
        if self._evaluation_lock.locked():
            logger.debug("health_tick_skipped", reason="evaluation_in_flight")
            # Wait out the in-flight evaluation; the caller re-reads the due time
            async with self._evaluation_lock:
                return
        await self.evaluate()

    def _seconds_until_due(self) -> float:
        if self._last_evaluated is None:
            return 0.0
        return self._last_evaluated + self.poll_interval - self._clock.monotonic()

    async def _run(self) -> None:
        while True:
            await self._tick()
            delay = self._seconds_until_due()
            # A retry() during the sleep moves the due time; re-check after waking
            while delay > 0:
                await asyncio.sleep(delay)
                delay = self._seconds_until_due()

    async def start(self) -> None:
        """Start polling: evaluate immediately, then every ``poll_interval``."""
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name="linkguard-health-poll")
        logger.info("health_polling_started", poll_interval=self.poll_interval)

    async def stop(self) -> None:
        """Cancel polling and wait for the task to finish."""
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        logger.info("health_polling_stopped")

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.stop()
        return False
