"""
Ready-made backoff policies.

ExponentialBackoff:
    interval = min_retry_interval * backoff_exponent ** n_past_retries,
    capped at max_retry_interval, optionally jittered uniformly between
    min_retry_interval and that value. Declines once n_past_retries reaches
    max_n_retries.

FixedIntervalBackoff:
    Same interval for every retry, declines after max_n_retries.
"""

import random
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

from retry_middleware.policies.base import DoNotRetry, PolicyDecision, RetryAfterInstant

if TYPE_CHECKING:
    from retry_middleware.config import Settings


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ExponentialBackoff:
    """
    Exponential backoff with an upper bound on the number of retries.

    Attributes:
        max_n_retries: Retries allowed before the policy declines
        min_retry_interval: Lower bound of the interval in seconds
        max_retry_interval: Upper bound of the interval in seconds
        backoff_exponent: Base of the exponential growth
        jitter: Randomize the interval within [min_retry_interval, interval]
    """

    max_n_retries: int = 3
    min_retry_interval: float = 1.0
    max_retry_interval: float = 30 * 60.0
    backoff_exponent: int = 3
    jitter: bool = True

    def __post_init__(self) -> None:
        if self.max_n_retries < 0:
            raise ValueError("max_n_retries must be >= 0")
        if self.min_retry_interval <= 0:
            raise ValueError("min_retry_interval must be > 0")
        if self.max_retry_interval < self.min_retry_interval:
            raise ValueError("max_retry_interval must be >= min_retry_interval")
        if self.backoff_exponent < 1:
            raise ValueError("backoff_exponent must be >= 1")

    @classmethod
    def build_with_max_retries(cls, max_n_retries: int, **kwargs) -> "ExponentialBackoff":
        """Build a policy with default bounds and the given retry limit."""
        return cls(max_n_retries=max_n_retries, **kwargs)

    @classmethod
    def from_settings(cls, settings: "Settings") -> "ExponentialBackoff":
        return cls(
            max_n_retries=settings.BACKOFF_MAX_N_RETRIES,
            min_retry_interval=settings.BACKOFF_MIN_INTERVAL,
            max_retry_interval=settings.BACKOFF_MAX_INTERVAL,
            backoff_exponent=settings.BACKOFF_EXPONENT,
            jitter=settings.BACKOFF_JITTER,
        )

    def interval_for(self, n_past_retries: int) -> float:
        """Interval in seconds for the given retry count, before jitter."""
        # Cap the exponent so huge retry counts cannot overflow to inf
        exponent = min(n_past_retries, 64)
        interval = self.min_retry_interval * (self.backoff_exponent ** exponent)
        return min(interval, self.max_retry_interval)

    def should_retry(self, n_past_retries: int) -> PolicyDecision:
        if n_past_retries >= self.max_n_retries:
            return DoNotRetry()

        interval = self.interval_for(n_past_retries)
        if self.jitter:
            interval = random.uniform(self.min_retry_interval, interval)

        return RetryAfterInstant(execute_after=_utcnow() + timedelta(seconds=interval))


@dataclass(frozen=True)
class FixedIntervalBackoff:
    """Retry every `interval_seconds`, up to `max_n_retries` times."""

    interval_seconds: float = 1.0
    max_n_retries: int = 3

    def should_retry(self, n_past_retries: int) -> PolicyDecision:
        if n_past_retries >= self.max_n_retries:
            return DoNotRetry()
        return RetryAfterInstant(
            execute_after=_utcnow() + timedelta(seconds=self.interval_seconds)
        )
