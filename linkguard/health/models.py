"""
Health Models
=============
Status enum, probe results and response schemas for the status feed.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Union

from pydantic import BaseModel, Field


class ConnectionStatus(str, Enum):
    CHECKING = "checking"
    CONNECTED = "connected"
    DEGRADED = "degraded"
    OFFLINE = "offline"


STATUS_DESCRIPTIONS: Dict[ConnectionStatus, str] = {
    ConnectionStatus.CHECKING: "Checking connection...",
    ConnectionStatus.CONNECTED: "Connected - All services operational",
    ConnectionStatus.DEGRADED: "Degraded - Some services may be slow",
    ConnectionStatus.OFFLINE: "Offline - Using fallback mode",
}

# Statuses for which a presentation layer should offer a manual retry
RETRYABLE_STATUSES = frozenset({ConnectionStatus.DEGRADED, ConnectionStatus.OFFLINE})


@dataclass(frozen=True)
class ProbeResult:
    """Outcome of one health probe."""
    success: bool
    error: Optional[str] = None
    latency_ms: Optional[float] = None

    @classmethod
    def coerce(cls, value: Union["ProbeResult", Mapping[str, Any]]) -> "ProbeResult":
        """Accept a ProbeResult or a ``{"success": bool, "error": str}`` mapping."""
        if isinstance(value, ProbeResult):
            return value
        if isinstance(value, Mapping):
            success = value.get("success")
            if not isinstance(success, bool):
                raise TypeError(
                    f"Probe 'success' must be a bool, got {type(success).__name__}"
                )
            return cls(
                success=success,
                error=value.get("error"),
                latency_ms=value.get("latency_ms"),
            )
        raise TypeError(f"Probe returned {type(value).__name__}, expected ProbeResult")


class BreakerSnapshot(BaseModel):
    state: str
    failure_count: int
    total_rejections: int = 0


class ConnectionSnapshot(BaseModel):
    status: ConnectionStatus
    description: str
    retry_available: bool
    last_checked_at: Optional[datetime] = None
    last_error: Optional[str] = None
    reachable: bool = True
    breakers: Dict[str, BreakerSnapshot] = Field(default_factory=dict)
