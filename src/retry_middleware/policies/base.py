"""
Backoff policy abstraction.

A backoff policy answers one question: given how many retries have already
been performed, when should the next one happen (if at all)? The retry
middleware depends only on this protocol, so exponential, fixed or custom
strategies can be swapped without touching the orchestration logic.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol, Union, runtime_checkable


@dataclass(frozen=True)
class RetryAfterInstant:
    """Retry once the absolute instant `execute_after` (aware, UTC) is reached."""

    execute_after: datetime


@dataclass(frozen=True)
class DoNotRetry:
    """The policy declines to schedule another retry."""


PolicyDecision = Union[RetryAfterInstant, DoNotRetry]


@runtime_checkable
class BackoffPolicy(Protocol):
    """
    Protocol for backoff policies.

    Implementations must be stateless across calls apart from parameters
    fixed at construction, since a single policy is shared by every request
    flowing through a middleware instance.
    """

    def should_retry(self, n_past_retries: int) -> PolicyDecision:
        """
        Decide on the next retry.

        Args:
            n_past_retries: Retries already performed (1 on the first retry
                as called by RetryMiddleware)

        Returns:
            RetryAfterInstant with the instant to retry at, or DoNotRetry
        """
        ...
