"""
Circuit Breaker Models
======================
Data models and enums for the circuit breaker pattern.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..config import BreakerSettings
from ..exceptions import ConfigError


class CircuitState(str, Enum):
    """Circuit breaker states."""
    CLOSED = "closed"        # Normal operation
    OPEN = "open"            # Failing, reject requests
    HALF_OPEN = "half_open"  # Testing recovery


@dataclass(frozen=True)
class CircuitBreakerConfig:
    """Configuration for a circuit breaker. Fixed for the breaker's lifetime."""
    failure_threshold: int = 3          # Failures before opening
    recovery_timeout: float = 30.0      # Seconds to stay open before half-open

    def __post_init__(self):
        if self.failure_threshold < 1:
            raise ConfigError("failure_threshold must be >= 1")
        if self.recovery_timeout < 0:
            raise ConfigError("recovery_timeout must be >= 0")

    @classmethod
    def from_settings(cls, settings: BreakerSettings) -> "CircuitBreakerConfig":
        return cls(
            failure_threshold=settings.failure_threshold,
            recovery_timeout=settings.recovery_timeout,
        )


@dataclass
class CircuitBreakerState:
    """Runtime state of a circuit breaker."""
    state: CircuitState = CircuitState.CLOSED
    failure_count: int = 0
    half_open_successes: int = 0
    last_failure_at: Optional[float] = None

    # Metrics
    total_calls: int = 0
    total_failures: int = 0
    total_successes: int = 0
    total_rejections: int = 0
