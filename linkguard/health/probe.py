"""
Health Probes
=============
Bounded execution of the backend health check, plus an httpx-based probe.
"""

import asyncio
import time
from typing import Any, Awaitable, Callable, Container, Mapping, Optional, Union

import httpx
import structlog

from ..exceptions import ProbeError, ProbeTimeoutError
from .models import ProbeResult

logger = structlog.get_logger(__name__)

Probe = Callable[[], Awaitable[Union[ProbeResult, Mapping[str, Any]]]]

DEFAULT_PROBE_TIMEOUT = 5.0


async def run_probe(probe: Probe, timeout: float = DEFAULT_PROBE_TIMEOUT) -> ProbeResult:
    """
    Run a probe with a hard time limit. Never raises.

    Args:
        probe: Zero-argument async callable
        timeout: Seconds before the probe counts as failed

    Returns:
        ProbeResult; timeouts and exceptions become failed results
    """
    start = time.perf_counter()
    try:
        raw = await asyncio.wait_for(probe(), timeout=timeout)
        result = ProbeResult.coerce(raw)
    except asyncio.TimeoutError:
        logger.warning("probe_timeout", timeout=timeout)
        return ProbeResult(
            success=False,
            error=f"Probe timed out after {timeout:.1f}s",
            latency_ms=round((time.perf_counter() - start) * 1000, 2),
        )
    except Exception as e:
        logger.warning("probe_failed", error=str(e), error_type=type(e).__name__)
        return ProbeResult(
            success=False,
            error=str(e) or type(e).__name__,
            latency_ms=round((time.perf_counter() - start) * 1000, 2),
        )

    if result.latency_ms is None:
        result = ProbeResult(
            success=result.success,
            error=result.error,
            latency_ms=round((time.perf_counter() - start) * 1000, 2),
        )
    if not result.success:
        logger.info("probe_unhealthy", error=result.error)
    return result


class HttpProbe:
    """
    One lightweight GET against a backend health endpoint.

    Example:
        probe = HttpProbe("https://api.example.com/health")
        coordinator = HealthCoordinator(registry, monitor, probe)
    """

    def __init__(
        self,
        url: str,
        timeout: float = DEFAULT_PROBE_TIMEOUT,
        client: Optional[httpx.AsyncClient] = None,
        healthy_statuses: Container[int] = range(200, 400),
        headers: Optional[Mapping[str, str]] = None,
    ):
        self.url = url
        self.timeout = timeout
        self.healthy_statuses = healthy_statuses
        self.headers = dict(headers or {})
        self._client = client
        self._owns_client = client is None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this probe created it."""
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    async def check(self) -> None:
        """Raise ProbeError unless the endpoint answers with a healthy status."""
        try:
            response = await self._get_client().get(self.url, headers=self.headers)
        except httpx.TimeoutException as exc:
            raise ProbeTimeoutError(
                "Connection timeout. Backend service may be unavailable."
            ) from exc
        except httpx.TransportError as exc:
            raise ProbeError(
                f"Network connection failed: {exc}. Check your internet connection."
            ) from exc

        if response.status_code not in self.healthy_statuses:
            raise ProbeError(
                f"Backend returned HTTP {response.status_code}",
                status_code=response.status_code,
            )

    async def __call__(self) -> ProbeResult:
        start = time.perf_counter()
        try:
            await self.check()
        except ProbeError as e:
            return ProbeResult(
                success=False,
                error=e.message,
                latency_ms=round((time.perf_counter() - start) * 1000, 2),
            )
        return ProbeResult(
            success=True,
            latency_ms=round((time.perf_counter() - start) * 1000, 2),
        )
