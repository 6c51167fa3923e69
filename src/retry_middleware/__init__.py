"""
Retry middleware for async HTTP clients.

Wraps the "send and get a response" step of an httpx client with a bounded
retry loop:
- Retryable responses: 429 Too Many Requests and 408 Request Timeout
- Wait interval: server `Retry-After` hint first, then a pluggable backoff
  policy, then a fixed fallback interval (never less than 1 second)
- Cooperative waiting via asyncio, so concurrent requests keep progressing

Architecture: RetryMiddleware (orchestrator) + classifier + delay resolver,
plugged into an httpx transport through MiddlewareTransport.

Usage:
    >>> from retry_middleware import ExponentialBackoff, RetryMiddleware, build_client
    >>> retry = RetryMiddleware(3, ExponentialBackoff.build_with_max_retries(3), 1)
    >>> async with build_client(retry) as client:
    ...     response = await client.get("https://example.api")
"""

from retry_middleware.logging_config import configure_logging, configure_logging_from_settings
from retry_middleware.models.retry_models import RetryConfig
from retry_middleware.policies import (
    BackoffPolicy,
    DoNotRetry,
    ExponentialBackoff,
    FixedIntervalBackoff,
    PolicyDecision,
    RetryAfterInstant,
)
from retry_middleware.retry import (
    RETRY_CODES,
    RetryAfterParseError,
    RetryConfigError,
    RetryMiddleware,
    RetryMiddlewareError,
    is_retryable,
    parse_retry_after,
    resolve_delay,
)
from retry_middleware.transport import (
    Middleware,
    MiddlewareTransport,
    Next,
    build_client,
)

__version__ = "0.2.1"

__all__ = [
    "configure_logging",
    "configure_logging_from_settings",
    "RetryConfig",
    "BackoffPolicy",
    "DoNotRetry",
    "ExponentialBackoff",
    "FixedIntervalBackoff",
    "PolicyDecision",
    "RetryAfterInstant",
    "RETRY_CODES",
    "RetryAfterParseError",
    "RetryConfigError",
    "RetryMiddleware",
    "RetryMiddlewareError",
    "is_retryable",
    "parse_retry_after",
    "resolve_delay",
    "Middleware",
    "MiddlewareTransport",
    "Next",
    "build_client",
]
