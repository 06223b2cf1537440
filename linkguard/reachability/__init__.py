"""
LinkGuard - Reachability
========================
Process-wide backend reachability tracking.
"""

from .errors import is_network_error
from .monitor import ReachabilityMonitor
from .signals import ConnectivitySignal, ManualConnectivitySignal

__all__ = [
    "ReachabilityMonitor",
    "ConnectivitySignal",
    "ManualConnectivitySignal",
    "is_network_error",
]
