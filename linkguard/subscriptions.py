"""
Subscriptions
=============
Callback registry with idempotent unsubscribe tokens.

Dispatch iterates over a snapshot of the registry, so a callback may
unsubscribe itself (or anyone else) while being notified.
"""

import threading
from typing import Callable, Generic, List, TypeVar

import structlog

logger = structlog.get_logger(__name__)

T = TypeVar("T")

Callback = Callable[[T], None]


class Unsubscribe:
    """Handle returned by ``subscribe``. Safe to call any number of times."""

    def __init__(self, registry: "Subscribers", token: int):
        self._registry = registry
        self._token = token
        self._done = False

    @property
    def active(self) -> bool:
        return not self._done

    def __call__(self) -> None:
        if self._done:
            return
        self._done = True
        self._registry._remove(self._token)


class Subscribers(Generic[T]):
    """
    Ordered set of change callbacks.

    Example:
        subscribers: Subscribers[bool] = Subscribers("reachability")
        unsubscribe = subscribers.add(lambda online: print(online))
        subscribers.notify(False)
        unsubscribe()
    """

    def __init__(self, name: str = "subscribers"):
        self.name = name
        self._callbacks: dict = {}
        self._next_token = 0
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._callbacks)

    def add(self, callback: Callback) -> Unsubscribe:
        if not callable(callback):
            raise TypeError("callback must be callable")
        with self._lock:
            token = self._next_token
            self._next_token += 1
            self._callbacks[token] = callback
        return Unsubscribe(self, token)

    def _remove(self, token: int) -> None:
        with self._lock:
            self._callbacks.pop(token, None)

    def clear(self) -> None:
        with self._lock:
            self._callbacks.clear()

    def notify(self, value: T) -> int:
        """Call every subscriber with ``value``. Returns how many were called."""
        with self._lock:
            callbacks: List[Callback] = list(self._callbacks.values())

        for callback in callbacks:
            try:
                callback(value)
            except Exception:
                # One broken listener must not starve the others
                logger.exception("subscriber_failed", registry=self.name)
        return len(callbacks)
