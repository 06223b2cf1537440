"""
Shared fixtures for linkguard tests.
"""

import asyncio

import pytest

from linkguard.clock import ManualClock


class BackendDown(Exception):
    """Stand-in for whatever error a backend client raises."""


class CountingOperation:
    """Async operation that records calls and succeeds or fails on demand."""

    def __init__(self, fail: bool = False, result="ok"):
        self.fail = fail
        self.result = result
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if self.fail:
            raise BackendDown("backend down")
        return self.result


class StubProbe:
    """Probe returning canned results and counting invocations."""

    def __init__(self, success: bool = True, error: str = None, delay: float = 0.0):
        self.success = success
        self.error = error
        self.delay = delay
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        return {"success": self.success, "error": self.error}


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def ok():
    return CountingOperation()


@pytest.fixture
def failing():
    return CountingOperation(fail=True)


@pytest.fixture
def probe():
    return StubProbe()
