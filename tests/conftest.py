"""
Shared pytest fixtures for the SimplifyQA client tests.

This module provides:
- A fake monotonic clock whose sleep advances time instantly
- A factory for clients that send requests through ``httpx.MockTransport``
- structlog reset between tests

Usage:
    def test_poll(make_client, clock):
        client = make_client(lambda request: httpx.Response(500))
        client.poll_status("1", "2")
        assert clock.sleeps == [5.0] * 12
"""

from __future__ import annotations

from typing import Any, Callable, Generator

import httpx
import pytest
import structlog

from simplifyqa.execution.client import ExecutionClient
from simplifyqa.execution.retry import DeadlineRetry

API_URL = "https://qa.example.com"
API_KEY = "secret-key"


class FakeClock:
    """Monotonic clock that only moves when ``sleep`` or ``advance`` is called."""

    def __init__(self, start: float = 0.0):
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(autouse=True)
def reset_structlog() -> Generator[None, None, None]:
    """Undo any ``configure_logging`` call made by a test."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def retry_policy(clock: FakeClock) -> DeadlineRetry:
    """Default 60s / 5s policy driven by the fake clock."""
    return DeadlineRetry(max_duration=60.0, delay=5.0, clock=clock, sleep=clock.sleep)


@pytest.fixture
def make_client(retry_policy: DeadlineRetry) -> Callable[..., ExecutionClient]:
    """Build a client whose requests are answered by ``handler``."""

    def _make(handler: Callable[[httpx.Request], httpx.Response], **kwargs: Any) -> ExecutionClient:
        kwargs.setdefault("retry_policy", retry_policy)
        return ExecutionClient(
            API_URL,
            API_KEY,
            transport=httpx.MockTransport(handler),
            **kwargs,
        )

    return _make


def sequence(*responses: httpx.Response | Exception) -> Callable[[httpx.Request], httpx.Response]:
    """Handler returning (or raising) the given items in order, repeating the last."""
    items = list(responses)
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        item = items[min(len(calls), len(items)) - 1]
        if isinstance(item, Exception):
            raise item
        # a fresh Response per request; httpx binds each one to its request
        return httpx.Response(item.status_code, headers=item.headers, content=item.content)

    handler.calls = calls  # type: ignore[attr-defined]
    return handler
