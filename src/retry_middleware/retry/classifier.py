"""Classification of responses into retryable and final."""

from collections.abc import Collection

from retry_middleware.models.retry_models import DEFAULT_RETRY_CODES

# 429 Too Many Requests, 408 Request Timeout
RETRY_CODES: frozenset[int] = DEFAULT_RETRY_CODES


def is_retryable(status_code: int, retryable_codes: Collection[int] = RETRY_CODES) -> bool:
    """Return True when `status_code` warrants re-sending the request."""
    return status_code in retryable_codes
