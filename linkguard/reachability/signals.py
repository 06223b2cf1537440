"""
Connectivity Signals
====================
Platform "network available / unavailable" notifications.

The monitor treats these as authoritative overrides; concrete hosts plug in
whatever event source they have (OS network events, a container
orchestrator, a UI toggle).
"""

from abc import ABC, abstractmethod
from typing import Callable

import structlog

from ..subscriptions import Subscribers, Unsubscribe

logger = structlog.get_logger(__name__)


class ConnectivitySignal(ABC):
    """Source of platform connectivity events."""

    @abstractmethod
    def current(self) -> bool:
        """Whether the platform currently reports connectivity."""

    @abstractmethod
    def subscribe(self, callback: Callable[[bool], None]) -> Unsubscribe:
        """Register ``callback(available)``; return an unsubscribe handle."""


class ManualConnectivitySignal(ConnectivitySignal):
    """In-process signal whose value is pushed with ``set()``."""

    def __init__(self, available: bool = True):
        self._available = available
        self._subscribers: Subscribers[bool] = Subscribers("connectivity_signal")

    def current(self) -> bool:
        return self._available

    def subscribe(self, callback: Callable[[bool], None]) -> Unsubscribe:
        return self._subscribers.add(callback)

    def set(self, available: bool) -> None:
        if available == self._available:
            return
        self._available = available
        logger.info("connectivity_signal_changed", available=available)
        self._subscribers.notify(available)
