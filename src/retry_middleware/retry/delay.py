"""
Delay resolution between retries.

Precedence (first applicable wins):
    1. `Retry-After` header: decimal seconds, else an HTTP-date in the future
    2. Backoff policy: `RetryAfterInstant` not yet in the past
    3. `fallback_interval_seconds` from RetryConfig

Whatever the source, the resolved delay is a whole number of seconds and
never less than 1. Parse and clock failures fall through to the next step
instead of raising.
"""

import re
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Optional

import httpx
import structlog

from retry_middleware.models.enums import DelaySource
from retry_middleware.models.retry_models import RetryConfig
from retry_middleware.policies.base import RetryAfterInstant
from retry_middleware.retry.exceptions import RetryAfterParseError

logger = structlog.get_logger(__name__)

RETRY_AFTER_HEADER = "Retry-After"
MIN_DELAY_SECONDS = 1
# Largest delta-seconds value accepted, as for an unsigned 64-bit parse
MAX_DELTA_SECONDS = 2**64 - 1

_DELTA_SECONDS = re.compile(r"^\d+$", re.ASCII)
_MAX_DELTA_DIGITS = len(str(MAX_DELTA_SECONDS))


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_retry_after(value: str, now: Optional[datetime] = None) -> int:
    """
    Convert a `Retry-After` header value into seconds to wait.

    Integer seconds are tried first, then an HTTP-date (IMF-fixdate,
    RFC 850 or asctime). The result is clamped to at least 1 second.

    Args:
        value: Raw header value
        now: Reference time for HTTP-dates (defaults to current UTC time)

    Returns:
        Seconds to wait (>= 1)

    Raises:
        RetryAfterParseError: Value is neither form, or the date is in the past
    """
    value = value.strip()

    if _DELTA_SECONDS.match(value):
        # Length is checked first: int() refuses very long digit strings
        digits = value.lstrip("0") or "0"
        if len(digits) > _MAX_DELTA_DIGITS or int(digits) > MAX_DELTA_SECONDS:
            raise RetryAfterParseError(
                f"Retry-After seconds out of range: {value[:32]!r}",
                details={"value": value[:32], "reason": "out_of_range"},
            )
        seconds = int(digits)
    else:
        try:
            date = parsedate_to_datetime(value)
        except (TypeError, ValueError, IndexError) as e:
            raise RetryAfterParseError(
                f"Invalid Retry-After value: {value[:64]!r}",
                details={"value": value[:64], "reason": "unparsable"},
            ) from e

        if date.tzinfo is None:
            date = date.replace(tzinfo=timezone.utc)

        delta = date - (now or _utcnow())
        if delta.total_seconds() < 0:
            raise RetryAfterParseError(
                f"Retry-After date is in the past: {value!r}",
                details={"value": value, "reason": "past_date"},
            )
        seconds = int(delta.total_seconds())

    return max(seconds, MIN_DELAY_SECONDS)


def delay_from_policy(attempt_index: int, config: RetryConfig) -> tuple[int, DelaySource]:
    """
    Ask the backoff policy for the next delay.

    A declining policy, or an instant already in the past, yields the
    fallback interval. The retry still happens in that case; whether to
    retry is decided by status code and retry ceiling, not by the policy.
    """
    decision = config.policy.should_retry(attempt_index)

    if isinstance(decision, RetryAfterInstant):
        try:
            remaining = (decision.execute_after - _utcnow()).total_seconds()
        except (TypeError, OverflowError) as e:
            # Naive or otherwise incomparable instant from a custom policy
            logger.warning(
                "Policy returned an unusable instant, using fallback interval",
                attempt=attempt_index,
                execute_after=repr(decision.execute_after),
                error=str(e),
            )
            return config.fallback_interval_seconds, DelaySource.FALLBACK
        if remaining >= 0:
            return int(remaining), DelaySource.POLICY
        logger.debug(
            "Policy instant already passed, using fallback interval",
            attempt=attempt_index,
            overdue_seconds=-remaining,
        )
    else:
        logger.debug(
            "Policy declined retry, using fallback interval",
            attempt=attempt_index,
            fallback_seconds=config.fallback_interval_seconds,
        )

    return config.fallback_interval_seconds, DelaySource.FALLBACK


def resolve_delay_with_source(
    response: httpx.Response,
    attempt_index: int,
    config: RetryConfig,
) -> tuple[int, DelaySource]:
    """Resolve the delay for `attempt_index` and report where it came from."""
    header = response.headers.get(RETRY_AFTER_HEADER)

    if header is not None:
        try:
            return parse_retry_after(header), DelaySource.HEADER
        except RetryAfterParseError as e:
            logger.info(
                "Ignoring unusable Retry-After header",
                value=header[:64],
                reason=e.details.get("reason"),
                attempt=attempt_index,
            )

    seconds, source = delay_from_policy(attempt_index, config)
    return max(seconds, MIN_DELAY_SECONDS), source


def resolve_delay(response: httpx.Response, attempt_index: int, config: RetryConfig) -> int:
    """
    Seconds to wait before retry number `attempt_index` (1-based).

    Args:
        response: Retryable response just received
        attempt_index: Retries performed including the one being scheduled
        config: Middleware retry configuration

    Returns:
        Whole seconds to wait (>= 1)
    """
    seconds, _ = resolve_delay_with_source(response, attempt_index, config)
    return seconds
