"""
Custom exceptions for the retry middleware.

Only construction errors ever reach the caller. Header parsing errors are
recovered inside the delay resolver, and transport failures raised by the
wrapped client propagate unchanged (they are not wrapped here).
"""


class RetryMiddlewareError(Exception):
    """
    Base exception for all retry middleware errors.

    Carries a human-readable message plus a details dict for structured
    logging.
    """
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class RetryConfigError(RetryMiddlewareError):
    """
    Raised when the middleware is constructed with invalid parameters.

    Examples:
    - Negative max_retries
    - Fallback interval below 1 second
    - Policy object without a `should_retry` method
    """
    pass


class RetryAfterParseError(RetryMiddlewareError):
    """
    Raised when a `Retry-After` header value cannot be turned into a delay.

    Covers values that are neither decimal seconds nor an HTTP-date, and
    HTTP-dates that lie in the past. The delay resolver catches this and
    falls through to the backoff policy.
    """
    pass
