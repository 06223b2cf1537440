"""
Circuit Breaker Decorator
=========================
Decorator for wrapping async functions with circuit breaker protection.
"""

from functools import wraps
from typing import TYPE_CHECKING, Awaitable, Callable, Optional, TypeVar

from ..exceptions import CircuitOpenError
from ..reachability.errors import is_network_error
from .breaker import CircuitBreaker

if TYPE_CHECKING:
    from ..reachability.monitor import ReachabilityMonitor

T = TypeVar("T")


def guarded(
    breaker: CircuitBreaker,
    monitor: Optional["ReachabilityMonitor"] = None,
):
    """
    Decorator to run an async function through a breaker.

    When a monitor is given, successes are reported to it and failures that
    look network-related are reported as connection failures.

    Example:
        @guarded(registry.get("user_data"), monitor=monitor)
        async def load_profile(user_id: str):
            return await backend.get_profile(user_id)
    """
    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @wraps(func)
        async def wrapper(*args, **kwargs) -> T:
            try:
                result = await breaker.execute(lambda: func(*args, **kwargs))
            except CircuitOpenError:
                raise
            except Exception as exc:
                if monitor is not None and is_network_error(exc):
                    monitor.report_failure()
                raise
            if monitor is not None:
                monitor.report_success()
            return result

        wrapper.breaker = breaker
        return wrapper

    return decorator
