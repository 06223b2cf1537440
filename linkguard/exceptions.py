"""
LinkGuard Exceptions
====================
Error taxonomy for breakers, probes and configuration.

Failures raised by wrapped operations are never wrapped: breakers re-raise
the original exception after updating their counters.
"""

from typing import Optional


class LinkGuardError(Exception):
    """Base exception for all linkguard errors."""
    pass


class CircuitOpenError(LinkGuardError):
    """Raised when a breaker rejects a call without attempting it."""

    def __init__(self, name: str, state, retry_after: float):
        self.name = name
        self.state = state
        self.retry_after = retry_after
        super().__init__(
            f"Circuit breaker '{name}' is {getattr(state, 'value', state)}. "
            f"Retry after {retry_after:.1f}s"
        )


class ProbeError(LinkGuardError):
    """Raised by probes when the backend health check fails."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class ProbeTimeoutError(ProbeError):
    """Raised when a probe exceeds its time budget."""
    pass


class ConfigError(LinkGuardError):
    """Raised when settings are out of range."""
    pass
