"""
Tests for the ConnectionGuard composition root.
"""

import httpx
import pytest

from conftest import StubProbe
from linkguard import (
    CircuitOpenError,
    CircuitState,
    ConfigError,
    ConnectionGuard,
    ConnectionStatus,
    GuardSettings,
)


@pytest.fixture
def guard(clock, probe):
    return ConnectionGuard(GuardSettings(), probe=probe, clock=clock)


class TestWiring:
    """Tests for construction."""

    def test_builds_preset_breakers(self, guard):
        """Should own user_data and connection breakers."""
        assert guard.breaker("user_data").config.failure_threshold == 3
        assert guard.breaker("connection").config.failure_threshold == 5
        assert guard.status == ConnectionStatus.CHECKING

    def test_requires_probe_or_url(self):
        """Should refuse to start without any way to probe."""
        with pytest.raises(ConfigError):
            ConnectionGuard(GuardSettings())

    @pytest.mark.asyncio
    async def test_probe_url_builds_http_probe(self):
        """A probe URL alone should be enough."""
        guard = ConnectionGuard(GuardSettings(probe_url="http://127.0.0.1:9/health"))

        await guard.stop()


class TestCall:
    """Tests for guard.call()."""

    @pytest.mark.asyncio
    async def test_network_failures_feed_monitor(self, guard):
        """Three transport errors should trip both the breaker and reachability."""
        async def unreachable():
            raise httpx.ConnectError("connection refused")

        for _ in range(3):
            with pytest.raises(httpx.ConnectError):
                await guard.call("user_data", unreachable)

        assert guard.breaker("user_data").state == CircuitState.OPEN
        assert guard.monitor.is_reachable is False

        with pytest.raises(CircuitOpenError):
            await guard.call("user_data", unreachable)
        assert guard.monitor.recent_failure_count == 3

    @pytest.mark.asyncio
    async def test_success_restores_reachability(self, guard):
        """A successful call should mark the backend reachable."""
        guard.monitor.set_connectivity(False)

        async def fetch():
            return [{"id": 1}]

        assert await guard.call("connection", fetch) == [{"id": 1}]
        assert guard.monitor.is_reachable is True

    @pytest.mark.asyncio
    async def test_end_to_end_retry(self, guard, probe):
        """Offline after failures, connected again after retry."""
        async def unreachable():
            raise httpx.ConnectError("connection refused")

        for _ in range(3):
            with pytest.raises(httpx.ConnectError):
                await guard.call("user_data", unreachable)

        assert await guard.coordinator.evaluate() == ConnectionStatus.OFFLINE
        assert await guard.retry() == ConnectionStatus.CONNECTED
        assert probe.calls == 1


@pytest.mark.asyncio
async def test_lifecycle(clock):
    """start/stop should run and cancel the polling task."""
    guard = ConnectionGuard(GuardSettings(), probe=StubProbe(), clock=clock)

    async with guard:
        assert guard.coordinator.running is True

    assert guard.coordinator.running is False
