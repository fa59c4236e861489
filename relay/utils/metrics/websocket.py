"""
Prometheus metrics for WebSocket connections and broadcast fan-out.
"""

from prometheus_client import Counter, Gauge

from relay.utils.metrics._helpers import get_or_create

# WebSocket Connection Metrics
ws_connections_active = get_or_create(
    Gauge, "ws_connections_active", "Number of active WebSocket connections"
)

ws_connections_total = get_or_create(
    Counter,
    "ws_connections_total",
    "Total WebSocket connections",
    ["status"],  # accepted, rejected_origin
)

ws_messages_received_total = get_or_create(
    Counter, "ws_messages_received_total", "Total WebSocket messages received"
)

# Broadcast Metrics
broadcast_messages_total = get_or_create(
    Counter,
    "broadcast_messages_total",
    "Total broadcasts published",
    ["event"],
)

broadcast_deliveries_total = get_or_create(
    Counter,
    "broadcast_deliveries_total",
    "Total frames enqueued for delivery to connections",
)

broadcast_delivery_failures_total = get_or_create(
    Counter,
    "broadcast_delivery_failures_total",
    "Total per-connection delivery failures",
    ["reason"],  # closed, queue_full, send_error, send_timeout, error
)


__all__ = [
    "ws_connections_active",
    "ws_connections_total",
    "ws_messages_received_total",
    "broadcast_messages_total",
    "broadcast_deliveries_total",
    "broadcast_delivery_failures_total",
]
