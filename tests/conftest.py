"""Shared test fixtures and configuration for all tests.

Provides stub backoff policies, response/handler factories and a patched
asyncio.sleep so retry loops run instantly.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from retry_middleware.config import Settings
from retry_middleware.policies import DoNotRetry, RetryAfterInstant


class StubPolicy:
    """Backoff policy returning a fixed offset from now (or declining)."""

    def __init__(self, offset_seconds: float | None):
        self.offset_seconds = offset_seconds
        self.calls: list[int] = []

    def should_retry(self, n_past_retries: int):
        self.calls.append(n_past_retries)
        if self.offset_seconds is None:
            return DoNotRetry()
        return RetryAfterInstant(
            execute_after=datetime.now(timezone.utc) + timedelta(seconds=self.offset_seconds)
        )


@pytest.fixture
def test_settings() -> Settings:
    """Settings with test-friendly values (metrics off, small pool)."""
    return Settings(
        APP_NAME="HTTP Retry Middleware (Test)",
        LOG_LEVEL="DEBUG",
        ENVIRONMENT="development",
        RETRY_MAX_RETRIES=3,
        RETRY_FALLBACK_INTERVAL=1,
        BACKOFF_JITTER=False,
        HTTP_TIMEOUT=5,
        HTTP_MAX_CONNECTIONS=2,
        HTTP_MAX_KEEPALIVE_CONNECTIONS=1,
        PROMETHEUS_ENABLED=False,
    )


@pytest.fixture
def declining_policy() -> StubPolicy:
    """Policy that always declines to retry."""
    return StubPolicy(None)


@pytest.fixture
def make_policy():
    """Factory fixture for StubPolicy.

    Usage:
        def test_something(make_policy):
            policy = make_policy(10.5)  # retry 10.5s from now
    """
    return StubPolicy


@pytest.fixture
def mock_sleep():
    """Replace asyncio.sleep with an AsyncMock recording requested delays."""
    with patch("asyncio.sleep", new_callable=AsyncMock) as sleep:
        yield sleep


@pytest.fixture
def sequence_handler():
    """Factory fixture for MockTransport handlers replaying canned responses.

    The returned handler records every request it sees in `handler.requests`.
    The last response is repeated once the sequence runs out.

    Usage:
        handler = sequence_handler([httpx.Response(429), httpx.Response(200)])
        transport = httpx.MockTransport(handler)
    """
    def _create(responses: list[httpx.Response]):
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            index = min(len(requests), len(responses)) - 1
            template = responses[index]
            return httpx.Response(
                template.status_code,
                headers=template.headers,
                content=template.content,
            )

        handler.requests = requests
        return handler

    return _create
