"""
Reachability Monitor
====================
Process-wide "is the backend reachable" verdict.

The application reports failures it considers network-related and any
success; the monitor flips to unreachable once enough failures land inside
the detection window and back to reachable on the first success. Platform
connectivity signals override the verdict immediately.
"""

import threading
from collections import deque
from typing import Any, Callable, Deque, Dict, Optional

import structlog

from ..clock import DEFAULT_CLOCK, Clock
from ..exceptions import ConfigError
from ..subscriptions import Subscribers, Unsubscribe
from .signals import ConnectivitySignal

logger = structlog.get_logger(__name__)


class ReachabilityMonitor:
    """
    Edge-triggered reachability tracker.

    Subscribers are called in the order the verdict changed, even with
    reporters on several threads. Callbacks may report back into the
    monitor but must not block on another thread that does.

    Example:
        monitor = ReachabilityMonitor()
        unsubscribe = monitor.subscribe(lambda online: banner.update(online))

        try:
            await client.ping()
        except httpx.TransportError:
            monitor.report_failure()
        else:
            monitor.report_success()
    """

    def __init__(
        self,
        failure_threshold: int = 3,
        window: float = 30.0,
        clock: Optional[Clock] = None,
        signal: Optional[ConnectivitySignal] = None,
    ):
        if failure_threshold < 1:
            raise ConfigError("failure_threshold must be >= 1")
        if window <= 0:
            raise ConfigError("window must be > 0")

        self.failure_threshold = failure_threshold
        self.window = window
        self._clock = clock or DEFAULT_CLOCK
        self._lock = threading.Lock()
        # Held from a verdict change until its subscribers are notified
        self._dispatch_lock = threading.RLock()
        self._failures: Deque[float] = deque()
        self._last_failure_at: Optional[float] = None
        self._reachable = True
        self._subscribers: Subscribers[bool] = Subscribers("reachability")
        self._signal: Optional[ConnectivitySignal] = None
        self._signal_unsubscribe: Optional[Unsubscribe] = None

        if signal is not None:
            self.attach(signal)

    @property
    def is_reachable(self) -> bool:
        return self._reachable

    @property
    def recent_failure_count(self) -> int:
        with self._lock:
            self._prune(self._clock.monotonic())
            return len(self._failures)

    @property
    def last_failure_at(self) -> Optional[float]:
        return self._last_failure_at

    @property
    def should_use_offline_mode(self) -> bool:
        """True when callers should serve fallback data instead of hitting the backend."""
        return not self._reachable or self.recent_failure_count >= self.failure_threshold

    @property
    def metrics(self) -> Dict[str, Any]:
        return {
            "is_reachable": self._reachable,
            "recent_failure_count": self.recent_failure_count,
            "last_failure_at": self._last_failure_at,
            "should_use_offline_mode": self.should_use_offline_mode,
        }

    def _prune(self, now: float) -> None:
        while self._failures and now - self._failures[0] > self.window:
            self._failures.popleft()

    def _set_reachable(self, reachable: bool) -> bool:
        """Update the verdict. Caller holds the lock. Returns True on change."""
        if self._reachable == reachable:
            return False
        self._reachable = reachable
        return True

    def _publish(self, reachable: bool, reason: str) -> None:
        if reachable:
            logger.info("backend_reachable", reason=reason)
        else:
            logger.warning("backend_unreachable", reason=reason)
        self._subscribers.notify(reachable)

    def report_failure(self) -> None:
        """Record one network-related failure."""
        with self._dispatch_lock:
            with self._lock:
                now = self._clock.monotonic()
                self._failures.append(now)
                self._last_failure_at = now
                self._prune(now)
                count = len(self._failures)
                changed = count >= self.failure_threshold and self._set_reachable(False)

            logger.debug("connection_failure_reported", recent_failures=count)
            if changed:
                self._publish(False, "failure_threshold")

    def report_success(self) -> None:
        """Record a successful round-trip; the backend is reachable again."""
        with self._dispatch_lock:
            with self._lock:
                had_failures = bool(self._failures)
                self._failures.clear()
                self._last_failure_at = None
                changed = self._set_reachable(True)

            if had_failures:
                logger.debug("connection_failures_cleared")
            if changed:
                self._publish(True, "success_reported")

    def set_connectivity(self, available: bool) -> None:
        """Authoritative platform override, bypassing failure counting."""
        with self._dispatch_lock:
            with self._lock:
                if available:
                    self._failures.clear()
                    self._last_failure_at = None
                changed = self._set_reachable(available)

            if changed:
                self._publish(available, "platform_signal")

    def subscribe(self, callback: Callable[[bool], None]) -> Unsubscribe:
        """Register ``callback(is_reachable)`` for every change."""
        return self._subscribers.add(callback)

    def attach(self, signal: ConnectivitySignal) -> None:
        """Follow a platform connectivity signal, replacing any previous one."""
        self.detach()
        self._signal = signal
        self._signal_unsubscribe = signal.subscribe(self.set_connectivity)
        self.set_connectivity(signal.current())

    def detach(self) -> None:
        if self._signal_unsubscribe is not None:
            self._signal_unsubscribe()
        self._signal = None
        self._signal_unsubscribe = None

    def reset(self) -> None:
        """Forget all failures and fall back to the platform's view (or reachable)."""
        with self._dispatch_lock:
            with self._lock:
                self._failures.clear()
                self._last_failure_at = None
                target = self._signal.current() if self._signal is not None else True
                changed = self._set_reachable(target)

            logger.info("reachability_reset", reachable=target)
            if changed:
                self._publish(target, "reset")

    def close(self) -> None:
        """Detach from the platform signal and drop all subscribers."""
        self.detach()
        self._subscribers.clear()
