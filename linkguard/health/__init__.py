"""
LinkGuard - Health
==================
Connection status derivation, probes and the status router.
"""

from .models import (
    ConnectionStatus,
    ProbeResult,
    BreakerSnapshot,
    ConnectionSnapshot,
    STATUS_DESCRIPTIONS,
)
from .probe import Probe, HttpProbe, run_probe
from .coordinator import HealthCoordinator
from .router import create_status_router

__all__ = [
    "ConnectionStatus",
    "ProbeResult",
    "BreakerSnapshot",
    "ConnectionSnapshot",
    "STATUS_DESCRIPTIONS",
    "Probe",
    "HttpProbe",
    "run_probe",
    "HealthCoordinator",
    "create_status_router",
]
