"""Prometheus metrics for HTTP requests and notification writes."""

from prometheus_client import Counter, Histogram

from relay.utils.metrics._helpers import get_or_create

http_requests_total = get_or_create(
    Counter,
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status_code"],
)

http_request_duration_seconds = get_or_create(
    Histogram,
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
)

notifications_created_total = get_or_create(
    Counter, "notifications_created_total", "Total notifications persisted"
)

__all__ = [
    "http_requests_total",
    "http_request_duration_seconds",
    "notifications_created_total",
]
