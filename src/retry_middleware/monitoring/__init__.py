"""
Monitoring module - Prometheus metrics for retry behavior.
"""

from retry_middleware.monitoring.metrics import (
    http_retries_total,
    http_retry_delay_seconds,
    http_retry_exhausted_total,
    http_retry_transport_errors_total,
)

__all__ = [
    "http_retries_total",
    "http_retry_delay_seconds",
    "http_retry_exhausted_total",
    "http_retry_transport_errors_total",
]
