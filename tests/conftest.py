"""Shared fixtures for Host Monitor tests."""

import asyncio

import pytest

from models import ProbeResult


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeProber:
    """
    Prober returning scripted outcomes per URL.

    `behaviors` maps a URL to "up", "down", "hang", "raise", or a
    ProbeResult to return as-is.
    """

    def __init__(self, behaviors=None, elapsed: float = 0.01):
        self.behaviors = behaviors or {}
        self.elapsed = elapsed
        self.calls = []
        self.closed = False

    async def probe(self, url: str, timeout: float) -> ProbeResult:
        self.calls.append((url, timeout))
        behavior = self.behaviors.get(url, "up")
        if isinstance(behavior, ProbeResult):
            return behavior
        if behavior == "hang":
            await asyncio.sleep(3600)
        if behavior == "raise":
            raise RuntimeError("prober exploded")
        if behavior == "down":
            return ProbeResult(url=url, elapsed=self.elapsed, status_code=503,
                               error="Non 2xx status returned: 503")
        return ProbeResult(url=url, elapsed=self.elapsed, success=True, status_code=200)

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_prober():
    return FakeProber
