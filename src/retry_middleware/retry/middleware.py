"""
Retry orchestrator.

RetryMiddleware drives the bounded retry loop for a single request:

    Sending -> Evaluating -> (Waiting -> Sending) | Done

- Sending: a fresh clone of the original request goes to `next`. Transport
  failures propagate immediately and are never retried here.
- Evaluating: a non-retryable status, or the retry ceiling, ends the loop.
- Waiting: the delay is resolved (Retry-After > policy > fallback), the
  discarded response is closed and the task yields via asyncio.sleep.
- Done: the last response received is returned, retryable or not.

Usage:
    retry = RetryMiddleware(3, ExponentialBackoff.build_with_max_retries(3), 1)
    client = build_client(retry)
"""

import asyncio
from collections.abc import Collection
from typing import TYPE_CHECKING

import httpx
import structlog
from pydantic import ValidationError

from retry_middleware.models.retry_models import RetryAttempt, RetryConfig, RetryDecision
from retry_middleware.monitoring.metrics import (
    http_retries_total,
    http_retry_delay_seconds,
    http_retry_exhausted_total,
    http_retry_transport_errors_total,
)
from retry_middleware.policies.base import BackoffPolicy
from retry_middleware.policies.exponential import ExponentialBackoff
from retry_middleware.retry.classifier import RETRY_CODES, is_retryable
from retry_middleware.retry.delay import resolve_delay_with_source
from retry_middleware.retry.exceptions import RetryConfigError
from retry_middleware.transport.chain import SendFn

if TYPE_CHECKING:
    from retry_middleware.config import Settings

logger = structlog.get_logger(__name__)

def clone_request(request: httpx.Request) -> httpx.Request:
    """
    Copy `request` for a resend without touching the original.

    The body must already be buffered. Headers are copied verbatim; the
    stream is passed explicitly so httpx does not add any defaults.
    """
    clone = httpx.Request(
        method=request.method,
        url=request.url,
        headers=request.headers.copy(),
        stream=httpx.ByteStream(request.content),
        extensions=dict(request.extensions),
    )
    clone.read()
    return clone


class RetryMiddleware:
    """
    Retry middleware for rate-limited and timed-out responses.

    `max_retries` bounds the re-sends after the initial request. When a
    `Retry-After` header is present it decides the wait; otherwise the
    backoff `policy` does. If neither yields an interval, the
    `fallback_interval_seconds` is used.

    A response that is still retryable when the ceiling is reached is
    returned as-is; it is up to the caller to inspect its status.

    Attributes:
        config: Frozen RetryConfig shared by all requests
        metrics_enabled: Record Prometheus metrics
    """

    def __init__(
        self,
        max_retries: int,
        policy: BackoffPolicy,
        fallback_interval_seconds: int,
        *,
        retryable_status_codes: Collection[int] = RETRY_CODES,
        metrics_enabled: bool = True,
    ):
        """
        Initialize retry middleware.

        Args:
            max_retries: Re-sends allowed after the initial request (>= 0)
            policy: Backoff policy consulted when no Retry-After is usable
            fallback_interval_seconds: Delay when no interval can be determined (>= 1)
            retryable_status_codes: Statuses that trigger a retry
            metrics_enabled: Record Prometheus metrics

        Raises:
            RetryConfigError: Invalid parameters
        """
        try:
            self.config = RetryConfig(
                max_retries=max_retries,
                policy=policy,
                fallback_interval_seconds=fallback_interval_seconds,
                retryable_status_codes=frozenset(retryable_status_codes),
            )
        except ValidationError as e:
            raise RetryConfigError(
                f"Invalid retry middleware configuration: {e.error_count()} error(s)",
                details={"errors": e.errors(include_url=False, include_input=False)},
            ) from e

        self.metrics_enabled = metrics_enabled

        logger.info(
            "RetryMiddleware initialized",
            max_retries=self.config.max_retries,
            policy=type(policy).__name__,
            fallback_interval_seconds=self.config.fallback_interval_seconds,
            retryable_status_codes=sorted(self.config.retryable_status_codes),
        )

    @classmethod
    def default(cls) -> "RetryMiddleware":
        """3 retries, exponential backoff limited to 3 retries, 1 second fallback."""
        return cls(3, ExponentialBackoff.build_with_max_retries(3), 1)

    @classmethod
    def from_settings(cls, settings: "Settings") -> "RetryMiddleware":
        return cls(
            settings.RETRY_MAX_RETRIES,
            ExponentialBackoff.from_settings(settings),
            settings.RETRY_FALLBACK_INTERVAL,
            retryable_status_codes=settings.RETRY_STATUS_CODES,
            metrics_enabled=settings.PROMETHEUS_ENABLED,
        )

    @property
    def max_retries(self) -> int:
        return self.config.max_retries

    @property
    def policy(self) -> BackoffPolicy:
        return self.config.policy

    @property
    def fallback_interval_seconds(self) -> int:
        return self.config.fallback_interval_seconds

    async def handle(self, request: httpx.Request, next: SendFn) -> httpx.Response:
        """
        Send `request` through `next`, retrying retryable responses.

        Args:
            request: Request to send; never mutated
            next: Downstream send operation (next middleware or transport)

        Returns:
            First non-retryable response, or the last response once
            `max_retries` re-sends have been made

        Raises:
            Any exception raised by `next` (transport failures), unchanged
            asyncio.CancelledError: Cancelled while waiting; no further send
        """
        # Buffer streaming bodies once so every resend is byte-identical
        await request.aread()

        attempt = RetryAttempt(request=request)
        await self._send(attempt, next)

        while True:
            decision = self.evaluate(attempt)
            if not decision.should_retry:
                return decision.response

            attempt.retries += 1
            previous = attempt.response

            logger.info(
                "Retrying request",
                method=request.method,
                url=str(request.url),
                status_code=previous.status_code,
                attempt=attempt.retries,
                max_retries=self.config.max_retries,
                delay_seconds=decision.delay_seconds,
                delay_source=decision.delay_source.value,
            )
            if self.metrics_enabled:
                http_retries_total.labels(
                    status_code=str(previous.status_code),
                    delay_source=decision.delay_source.value,
                ).inc()
                http_retry_delay_seconds.labels(
                    delay_source=decision.delay_source.value,
                ).observe(decision.delay_seconds)

            await previous.aclose()

            try:
                await asyncio.sleep(decision.delay_seconds)
            except asyncio.CancelledError:
                logger.info(
                    "Retry cancelled while waiting",
                    method=request.method,
                    url=str(request.url),
                    attempt=attempt.retries,
                )
                raise

            await self._send(attempt, next)

    def evaluate(self, attempt: RetryAttempt) -> RetryDecision:
        """
        Decide what to do with `attempt.response`.

        The delay is resolved for the retry about to be made, so the policy
        sees a 1-based retry index.
        """
        response = attempt.response
        if not is_retryable(response.status_code, self.config.retryable_status_codes):
            return RetryDecision.stop(response)

        if attempt.retries >= self.config.max_retries:
            if self.config.max_retries > 0:
                logger.warning(
                    "Retry ceiling reached, returning retryable response",
                    status_code=response.status_code,
                    sends=attempt.sends,
                    max_retries=self.config.max_retries,
                )
                if self.metrics_enabled:
                    http_retry_exhausted_total.labels(status_code=str(response.status_code)).inc()
            return RetryDecision.stop(response)

        delay_seconds, source = resolve_delay_with_source(
            response, attempt.retries + 1, self.config
        )
        return RetryDecision.retry_after(delay_seconds, source)

    async def _send(self, attempt: RetryAttempt, next: SendFn) -> httpx.Response:
        try:
            response = await next(clone_request(attempt.request))
        except Exception as e:
            logger.warning(
                "Transport failure, not retrying",
                method=attempt.request.method,
                url=str(attempt.request.url),
                attempt=attempt.retries,
                error_type=type(e).__name__,
                error=str(e),
            )
            if self.metrics_enabled:
                http_retry_transport_errors_total.labels(error_type=type(e).__name__).inc()
            raise

        attempt.response = response
        return response

    def __repr__(self) -> str:
        return (
            f"RetryMiddleware(max_retries={self.config.max_retries}, "
            f"policy={self.config.policy!r}, "
            f"fallback_interval_seconds={self.config.fallback_interval_seconds})"
        )
