"""
Network Error Classification
============================
Decides which failures say something about reachability.
"""

import asyncio
import socket

import httpx

from ..exceptions import ProbeTimeoutError

NETWORK_ERRORS = (
    httpx.TransportError,
    ConnectionError,
    TimeoutError,
    asyncio.TimeoutError,
    socket.gaierror,
    ProbeTimeoutError,
)

# Messages raised by fetch-style clients that wrap the real transport error
NETWORK_MESSAGE_MARKERS = (
    "failed to fetch",
    "network error",
    "connection refused",
    "connection reset",
    "timed out",
)


def is_network_error(exc: BaseException) -> bool:
    """Return True when ``exc`` looks like the backend could not be reached."""
    if isinstance(exc, NETWORK_ERRORS):
        return True

    message = str(exc).lower()
    return any(marker in message for marker in NETWORK_MESSAGE_MARKERS)
