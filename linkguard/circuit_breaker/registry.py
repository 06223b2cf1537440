"""
Circuit Breaker Registry
========================
Named breakers owned by the application's composition root.

Build one registry at startup and hand it to the code that needs breakers.
"""

from typing import Any, Dict, Iterator, List, Mapping, Optional

import structlog

from ..clock import Clock
from ..config import DEFAULT_BREAKERS, BreakerSettings
from .breaker import CircuitBreaker
from .models import CircuitBreakerConfig

logger = structlog.get_logger(__name__)


class BreakerRegistry:
    """
    One CircuitBreaker per operation category.

    Example:
        registry = BreakerRegistry.with_defaults()
        breaker = registry.get_or_create("user_data")
    """

    def __init__(self, clock: Optional[Clock] = None):
        self._clock = clock
        self._breakers: Dict[str, CircuitBreaker] = {}

    @classmethod
    def with_defaults(
        cls,
        clock: Optional[Clock] = None,
        settings: Optional[Mapping[str, BreakerSettings]] = None,
    ) -> "BreakerRegistry":
        """Create a registry holding the preset ``user_data`` and ``connection`` breakers."""
        registry = cls(clock=clock)
        for name, breaker_settings in (settings or DEFAULT_BREAKERS).items():
            registry.get_or_create(name, CircuitBreakerConfig.from_settings(breaker_settings))
        return registry

    def __iter__(self) -> Iterator[CircuitBreaker]:
        return iter(list(self._breakers.values()))

    def __len__(self) -> int:
        return len(self._breakers)

    def __contains__(self, name: str) -> bool:
        return name in self._breakers

    def get_or_create(
        self,
        name: str,
        config: Optional[CircuitBreakerConfig] = None,
    ) -> CircuitBreaker:
        """
        Get or create a circuit breaker for an operation category.

        Args:
            name: Category name, e.g. "user_data"
            config: Only used if the breaker does not exist yet

        Returns:
            CircuitBreaker instance
        """
        breaker = self._breakers.get(name)
        if breaker is None:
            breaker = CircuitBreaker(name=name, config=config, clock=self._clock)
            self._breakers[name] = breaker
            logger.debug(
                "circuit_registered",
                breaker=name,
                failure_threshold=breaker.config.failure_threshold,
                recovery_timeout=breaker.config.recovery_timeout,
            )
        return breaker

    def get(self, name: str) -> CircuitBreaker:
        """Look up an existing breaker. Raises KeyError if unknown."""
        return self._breakers[name]

    def names(self) -> List[str]:
        return list(self._breakers)

    def reset(self, name: str) -> None:
        """Reset a circuit breaker to closed state."""
        breaker = self._breakers.get(name)
        if breaker is not None:
            breaker.reset()

    def reset_all(self) -> None:
        """Reset all circuit breakers to closed state."""
        for breaker in self:
            breaker.reset()

    def metrics(self) -> Dict[str, Dict[str, Any]]:
        """Get metrics for all registered circuit breakers."""
        return {breaker.name: breaker.metrics for breaker in self}
