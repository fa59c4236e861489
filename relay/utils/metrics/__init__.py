"""
Prometheus metrics for the relay.

Metrics are grouped by concern in submodules and re-exported here so
callers can `from relay.utils.metrics import ...`.
"""

from relay.utils.metrics.http import (
    http_request_duration_seconds,
    http_requests_total,
    notifications_created_total,
)
from relay.utils.metrics.websocket import (
    broadcast_deliveries_total,
    broadcast_delivery_failures_total,
    broadcast_messages_total,
    ws_connections_active,
    ws_connections_total,
    ws_messages_received_total,
)

__all__ = [
    "http_requests_total",
    "http_request_duration_seconds",
    "notifications_created_total",
    "ws_connections_active",
    "ws_connections_total",
    "ws_messages_received_total",
    "broadcast_messages_total",
    "broadcast_deliveries_total",
    "broadcast_delivery_failures_total",
]
