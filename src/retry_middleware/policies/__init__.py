"""
Backoff policies.

Components:
- BackoffPolicy: Protocol consumed by RetryMiddleware
- RetryAfterInstant / DoNotRetry: Policy decisions
- ExponentialBackoff: Exponential backoff with jitter and a retry limit
- FixedIntervalBackoff: Constant interval with a retry limit
"""

from retry_middleware.policies.base import (
    BackoffPolicy,
    DoNotRetry,
    PolicyDecision,
    RetryAfterInstant,
)
from retry_middleware.policies.exponential import (
    ExponentialBackoff,
    FixedIntervalBackoff,
)

__all__ = [
    "BackoffPolicy",
    "DoNotRetry",
    "PolicyDecision",
    "RetryAfterInstant",
    "ExponentialBackoff",
    "FixedIntervalBackoff",
]
