"""
Tests for probe execution and the HTTP probe.
"""

import asyncio

import httpx
import pytest

from linkguard.health import HttpProbe, ProbeResult, run_probe


class TestRunProbe:
    """Tests for run_probe."""

    @pytest.mark.asyncio
    async def test_mapping_result_is_coerced(self):
        """A {'success': ...} dict should become a ProbeResult."""
        async def probe():
            return {"success": False, "error": "Auth service error"}

        result = await run_probe(probe, timeout=1.0)

        assert isinstance(result, ProbeResult)
        assert result.success is False
        assert result.error == "Auth service error"
        assert result.latency_ms is not None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("flag", ["false", "true", 1, None])
    async def test_non_bool_success_counts_as_failure(self, flag):
        """Only a real bool True should mark the probe healthy."""
        async def sloppy():
            return {"success": flag}

        result = await run_probe(sloppy, timeout=1.0)

        assert result.success is False
        assert "must be a bool" in result.error

    def test_coerce_rejects_non_bool_success(self):
        with pytest.raises(TypeError):
            ProbeResult.coerce({"success": "false"})

    @pytest.mark.asyncio
    async def test_timeout_counts_as_failure(self):
        """A hung probe should be cut off and reported as failed."""
        async def hung():
            await asyncio.sleep(10)
            return ProbeResult(success=True)

        result = await run_probe(hung, timeout=0.05)

        assert result.success is False
        assert "timed out" in result.error

    @pytest.mark.asyncio
    async def test_exception_is_absorbed(self):
        """Probe exceptions should never propagate."""
        async def broken():
            raise RuntimeError("dns failure")

        result = await run_probe(broken, timeout=1.0)

        assert result.success is False
        assert result.error == "dns failure"

    @pytest.mark.asyncio
    async def test_success_passes_through(self):
        async def healthy():
            return ProbeResult(success=True, latency_ms=12.5)

        result = await run_probe(healthy)

        assert result == ProbeResult(success=True, latency_ms=12.5)


def mock_client(handler):
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestHttpProbe:
    """Tests for HttpProbe against a mocked transport."""

    @pytest.mark.asyncio
    async def test_healthy_endpoint(self):
        """200 should be a success."""
        client = mock_client(lambda request: httpx.Response(200, json={"ok": True}))
        probe = HttpProbe("https://backend.test/health", client=client)

        result = await probe()

        assert result.success is True
        await client.aclose()

    @pytest.mark.asyncio
    async def test_server_error(self):
        """5xx should fail with the status in the message."""
        client = mock_client(lambda request: httpx.Response(503))
        probe = HttpProbe("https://backend.test/health", client=client)

        result = await probe()

        assert result.success is False
        assert "503" in result.error
        await client.aclose()

    @pytest.mark.asyncio
    async def test_network_failure(self):
        """Transport errors should map to a friendly network message."""
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = mock_client(refuse)
        probe = HttpProbe("https://backend.test/health", client=client)

        result = await probe()

        assert result.success is False
        assert result.error.startswith("Network connection failed")
        await client.aclose()

    @pytest.mark.asyncio
    async def test_timeout(self):
        """httpx timeouts should map to the timeout message."""
        def slow(request):
            raise httpx.ReadTimeout("read timed out", request=request)

        client = mock_client(slow)
        probe = HttpProbe("https://backend.test/health", client=client)

        result = await probe()

        assert result.success is False
        assert result.error.startswith("Connection timeout")
        await client.aclose()

    @pytest.mark.asyncio
    async def test_sends_headers(self):
        """Configured headers should be sent with the probe."""
        seen = {}

        def capture(request):
            seen["apikey"] = request.headers.get("apikey")
            return httpx.Response(204)

        client = mock_client(capture)
        probe = HttpProbe(
            "https://backend.test/rest/v1/",
            client=client,
            headers={"apikey": "anon"},
        )

        assert (await probe()).success is True
        assert seen["apikey"] == "anon"
        await client.aclose()
