"""
Retry logic for HTTP responses.

Main Components:
    - RetryMiddleware: Orchestrates the bounded send/wait/resend loop
    - is_retryable / RETRY_CODES: Classifies response status codes
    - resolve_delay / parse_retry_after: Computes the wait before a retry
    - RetryMiddlewareError and subclasses: Error taxonomy

Usage:
    >>> from retry_middleware.retry import RetryMiddleware
    >>> retry = RetryMiddleware.default()
    >>> response = await retry.handle(request, send)
"""

from retry_middleware.retry.classifier import RETRY_CODES, is_retryable
from retry_middleware.retry.delay import (
    RETRY_AFTER_HEADER,
    parse_retry_after,
    resolve_delay,
    resolve_delay_with_source,
)
from retry_middleware.retry.exceptions import (
    RetryAfterParseError,
    RetryConfigError,
    RetryMiddlewareError,
)
from retry_middleware.retry.middleware import RetryMiddleware, clone_request

__all__ = [
    "RETRY_CODES",
    "is_retryable",
    "RETRY_AFTER_HEADER",
    "parse_retry_after",
    "resolve_delay",
    "resolve_delay_with_source",
    "RetryAfterParseError",
    "RetryConfigError",
    "RetryMiddlewareError",
    "RetryMiddleware",
    "clone_request",
]
