"""
Data models for the retry loop.

RetryConfig is validated once at construction and frozen afterwards, so a
single instance can be shared by every concurrent request flowing through a
middleware. RetryAttempt and RetryDecision are per-request and transient.
"""

from dataclasses import dataclass
from typing import Any, Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field, field_validator

from retry_middleware.models.enums import DelaySource

DEFAULT_RETRY_CODES: frozenset[int] = frozenset({429, 408})


class RetryConfig(BaseModel):
    """
    Immutable retry settings owned by one middleware instance.

    Attributes:
        max_retries: Upper bound on re-sends after the initial request
        policy: Backoff policy consulted when the server gives no hint
        fallback_interval_seconds: Delay used whenever no other interval
            can be determined
        retryable_status_codes: Statuses that trigger a retry
    """
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    max_retries: int = Field(..., ge=0, description="Re-sends allowed after the initial request")
    policy: Any = Field(..., description="BackoffPolicy implementation")
    fallback_interval_seconds: int = Field(..., ge=1, description="Fallback delay in seconds")
    retryable_status_codes: frozenset[int] = Field(
        default=DEFAULT_RETRY_CODES,
        description="HTTP status codes that are retried",
    )

    @field_validator("policy")
    @classmethod
    def _check_policy(cls, value: Any) -> Any:
        if not callable(getattr(value, "should_retry", None)):
            raise ValueError("policy must provide a callable should_retry(n_past_retries)")
        return value


@dataclass
class RetryAttempt:
    """
    State of one request traversal through the middleware.

    `retries` counts re-sends already scheduled; the initial send is not
    counted.
    """
    request: httpx.Request
    retries: int = 0
    response: Optional[httpx.Response] = None

    @property
    def sends(self) -> int:
        return self.retries + 1


@dataclass(frozen=True)
class RetryDecision:
    """Either stop and return `response`, or retry after `delay_seconds`."""

    response: Optional[httpx.Response] = None
    delay_seconds: Optional[int] = None
    delay_source: Optional[DelaySource] = None

    @property
    def should_retry(self) -> bool:
        return self.delay_seconds is not None

    @classmethod
    def stop(cls, response: httpx.Response) -> "RetryDecision":
        return cls(response=response)

    @classmethod
    def retry_after(cls, delay_seconds: int, source: DelaySource) -> "RetryDecision":
        return cls(delay_seconds=delay_seconds, delay_source=source)
