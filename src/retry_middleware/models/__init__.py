"""
Data models for the retry middleware.
"""

from retry_middleware.models.enums import DelaySource
from retry_middleware.models.retry_models import (
    DEFAULT_RETRY_CODES,
    RetryAttempt,
    RetryConfig,
    RetryDecision,
)

__all__ = [
    "DelaySource",
    "DEFAULT_RETRY_CODES",
    "RetryAttempt",
    "RetryConfig",
    "RetryDecision",
]
