"""
LinkGuard
=========
Client-side resilience layer for applications talking to a flaky backend:
circuit breakers, a reachability monitor and a health coordinator that
fuses them into one connection status.
"""

__version__ = "0.1.0"

# Clock
from linkguard.clock import Clock, ManualClock, MonotonicClock

# Configuration
from linkguard.config import (
    BreakerSettings,
    GuardSettings,
    DEFAULT_BREAKERS,
    USER_DATA_BREAKER,
    CONNECTION_BREAKER,
)

# Exceptions
from linkguard.exceptions import (
    LinkGuardError,
    CircuitOpenError,
    ProbeError,
    ProbeTimeoutError,
    ConfigError,
)

# Subscriptions
from linkguard.subscriptions import Subscribers, Unsubscribe

# Circuit Breaker
from linkguard.circuit_breaker import (
    CircuitBreaker,
    CircuitBreakerConfig,
    CircuitState,
    BreakerRegistry,
    guarded,
)

# Reachability
from linkguard.reachability import (
    ReachabilityMonitor,
    ConnectivitySignal,
    ManualConnectivitySignal,
    is_network_error,
)

# Health
from linkguard.health import (
    ConnectionStatus,
    ConnectionSnapshot,
    HealthCoordinator,
    HttpProbe,
    ProbeResult,
    create_status_router,
    run_probe,
)

# Composition root
from linkguard.guard import ConnectionGuard

__all__ = [
    "Clock",
    "ManualClock",
    "MonotonicClock",
    "BreakerSettings",
    "GuardSettings",
    "DEFAULT_BREAKERS",
    "USER_DATA_BREAKER",
    "CONNECTION_BREAKER",
    "LinkGuardError",
    "CircuitOpenError",
    "ProbeError",
    "ProbeTimeoutError",
    "ConfigError",
    "Subscribers",
    "Unsubscribe",
    "CircuitBreaker",
    "CircuitBreakerConfig",
    "CircuitState",
    "BreakerRegistry",
    "guarded",
    "ReachabilityMonitor",
    "ConnectivitySignal",
    "ManualConnectivitySignal",
    "is_network_error",
    "ConnectionStatus",
    "ConnectionSnapshot",
    "HealthCoordinator",
    "HttpProbe",
    "ProbeResult",
    "create_status_router",
    "run_probe",
    "ConnectionGuard",
]
