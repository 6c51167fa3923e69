"""Prometheus metrics for the retry middleware.

Collectors are registered on the default registry at import time and can be
exposed by the host application (e.g. prometheus_client.start_http_server).
Useful alerts:
- http_retries_total (sustained retry rate indicates upstream rate limiting)
- http_retry_exhausted_total (requests returned still rate-limited)
"""

from prometheus_client import Counter, Histogram

# === Retry Metrics ===

http_retries_total = Counter(
    "http_retries_total",
    "Total scheduled retries by triggering status code and delay source",
    ["status_code", "delay_source"],
)
"""
Retries scheduled by the middleware.

Labels:
- status_code: 429, 408 (or any configured retryable status)
- delay_source: header (Retry-After), policy (backoff policy), fallback
"""

http_retry_delay_seconds = Histogram(
    "http_retry_delay_seconds",
    "Delay waited before a retry in seconds",
    ["delay_source"],
    buckets=[1, 2, 5, 10, 30, 60, 120, 300, 900, 1800],
)

http_retry_exhausted_total = Counter(
    "http_retry_exhausted_total",
    "Requests that hit the retry ceiling while still retryable",
    ["status_code"],
)

# === Transport Metrics ===

http_retry_transport_errors_total = Counter(
    "http_retry_transport_errors_total",
    "Transport failures propagated through the retry middleware",
    ["error_type"],
)
"""
Transport failures are not retried by the middleware; this counter only
records them on their way out.

Labels:
- error_type: exception class name (ConnectError, ReadTimeout, ...)
"""
