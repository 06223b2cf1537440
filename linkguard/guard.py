"""
Connection Guard
================
Composition root wiring breakers, reachability and health together.

Lifecycle: construct once at application startup, ``await guard.start()``,
pass ``guard`` (or its parts) to the code that talks to the backend, and
``await guard.stop()`` on shutdown.
"""

from typing import Awaitable, Callable, Optional, TypeVar

import structlog

from .circuit_breaker import BreakerRegistry, CircuitBreaker
from .clock import Clock
from .config import GuardSettings
from .exceptions import CircuitOpenError, ConfigError
from .health import ConnectionStatus, HealthCoordinator, HttpProbe, Probe
from .reachability import ConnectivitySignal, ReachabilityMonitor, is_network_error

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class ConnectionGuard:
    """
    Owns one BreakerRegistry, one ReachabilityMonitor and one HealthCoordinator.

    Example:
        guard = ConnectionGuard(GuardSettings.from_env(), probe=check_backend)
        async with guard:
            rows = await guard.call("user_data", lambda: db.fetch_issues())
            print(guard.status)
    """

    def __init__(
        self,
        settings: Optional[GuardSettings] = None,
        probe: Optional[Probe] = None,
        clock: Optional[Clock] = None,
        signal: Optional[ConnectivitySignal] = None,
    ):
        self.settings = settings or GuardSettings()
        self.settings.validate()

        self._owned_probe: Optional[HttpProbe] = None
        if probe is None:
            if not self.settings.probe_url:
                raise ConfigError("ConnectionGuard needs a probe or settings.probe_url")
            self._owned_probe = HttpProbe(
                self.settings.probe_url, timeout=self.settings.probe_timeout
            )
            probe = self._owned_probe

        self.breakers = BreakerRegistry.with_defaults(
            clock=clock, settings=self.settings.breakers
        )
        self.monitor = ReachabilityMonitor(
            failure_threshold=self.settings.reachability_failure_threshold,
            window=self.settings.reachability_window,
            clock=clock,
            signal=signal,
        )
        self.coordinator = HealthCoordinator(
            self.breakers,
            self.monitor,
            probe,
            poll_interval=self.settings.poll_interval,
            probe_timeout=self.settings.probe_timeout,
            clock=clock,
        )

    @property
    def status(self) -> ConnectionStatus:
        return self.coordinator.status

    def breaker(self, name: str) -> CircuitBreaker:
        return self.breakers.get(name)

    async def call(self, name: str, operation: Callable[[], Awaitable[T]]) -> T:
        """
        Run ``operation`` through the named breaker and feed the monitor.

        Rejections by an open breaker are not connection failures and are not
        reported. Other errors are reported only when they look network-related.
        """
        breaker = self.breakers.get(name)
        try:
            result = await breaker.execute(operation)
        except CircuitOpenError:
            raise
        except Exception as exc:
            if is_network_error(exc):
                self.monitor.report_failure()
            raise
        self.monitor.report_success()
        return result

    async def retry(self) -> ConnectionStatus:
        return await self.coordinator.retry()

    async def start(self) -> None:
        logger.info(
            "connection_guard_starting",
            breakers=self.breakers.names(),
            poll_interval=self.settings.poll_interval,
        )
        await self.coordinator.start()

    async def stop(self) -> None:
        await self.coordinator.stop()
        self.monitor.close()
        if self._owned_probe is not None:
            await self._owned_probe.aclose()
        logger.info("connection_guard_stopped")

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.stop()
        return False
