"""
LinkGuard - Circuit Breaker
===========================
Async circuit breaker for calls to a flaky backend.

States:

1. CLOSED: Normal operation, calls flow through
2. OPEN: Backend is failing, calls are rejected without being attempted
3. HALF-OPEN: Trial calls go through; three successes close the circuit,
   one failure reopens it

Usage:
    from linkguard.circuit_breaker import BreakerRegistry, CircuitOpenError

    registry = BreakerRegistry.with_defaults()
    breaker = registry.get("user_data")

    result = await breaker.execute(lambda: client.fetch_inspections())

    # Or with context manager
    async with breaker:
        response = await client.get("/rest/v1/organizations")
"""

from ..exceptions import CircuitOpenError
from .models import (
    CircuitState,
    CircuitBreakerConfig,
    CircuitBreakerState,
)
from .breaker import CircuitBreaker
from .registry import BreakerRegistry
from .decorators import guarded

__all__ = [
    # Models
    "CircuitState",
    "CircuitOpenError",
    "CircuitBreakerConfig",
    "CircuitBreakerState",
    # Breaker
    "CircuitBreaker",
    # Registry
    "BreakerRegistry",
    # Decorator
    "guarded",
]
