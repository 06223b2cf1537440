"""
LinkGuard Configuration
=======================
Settings for breakers, the reachability monitor and the health coordinator.

Defaults can be overridden with environment variables via
``GuardSettings.from_env()``.
"""

import os
from dataclasses import dataclass, field
from typing import Dict, Optional

from .exceptions import ConfigError

HALF_OPEN_SUCCESSES_TO_CLOSE = 3


@dataclass(frozen=True)
class BreakerSettings:
    """Thresholds for one breaker category."""
    failure_threshold: int = 3
    recovery_timeout: float = 30.0  # seconds

    def validate(self, name: str = "breaker") -> None:
        if self.failure_threshold < 1:
            raise ConfigError(f"{name}: failure_threshold must be >= 1")
        if self.recovery_timeout < 0:
            raise ConfigError(f"{name}: recovery_timeout must be >= 0")


# General data operations trip quickly; low-level connection checks get
# more slack and a longer cool-down.
USER_DATA_BREAKER = BreakerSettings(failure_threshold=3, recovery_timeout=30.0)
CONNECTION_BREAKER = BreakerSettings(failure_threshold=5, recovery_timeout=60.0)

DEFAULT_BREAKERS: Dict[str, BreakerSettings] = {
    "user_data": USER_DATA_BREAKER,
    "connection": CONNECTION_BREAKER,
}


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from exc


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from exc


@dataclass
class GuardSettings:
    """Top-level settings for a ConnectionGuard."""
    reachability_failure_threshold: int = 3
    reachability_window: float = 30.0   # seconds
    poll_interval: float = 30.0         # seconds
    probe_timeout: float = 5.0          # seconds
    probe_url: Optional[str] = None
    breakers: Dict[str, BreakerSettings] = field(
        default_factory=lambda: dict(DEFAULT_BREAKERS)
    )

    @classmethod
    def from_env(cls) -> "GuardSettings":
        """Build settings from ``LINKGUARD_*`` environment variables."""
        settings = cls(
            reachability_failure_threshold=_env_int(
                "LINKGUARD_REACHABILITY_THRESHOLD", 3
            ),
            reachability_window=_env_float("LINKGUARD_REACHABILITY_WINDOW", 30.0),
            poll_interval=_env_float("LINKGUARD_POLL_INTERVAL", 30.0),
            probe_timeout=_env_float("LINKGUARD_PROBE_TIMEOUT", 5.0),
            probe_url=os.environ.get("LINKGUARD_PROBE_URL") or None,
        )
        settings.validate()
        return settings

    def validate(self) -> None:
        if self.reachability_failure_threshold < 1:
            raise ConfigError("reachability_failure_threshold must be >= 1")
        if self.reachability_window <= 0:
            raise ConfigError("reachability_window must be > 0")
        if self.poll_interval <= 0:
            raise ConfigError("poll_interval must be > 0")
        if self.probe_timeout <= 0:
            raise ConfigError("probe_timeout must be > 0")
        for name, breaker in self.breakers.items():
            breaker.validate(name)
