"""
Application-level constants for hardcoded protocol behavior.

These values are not configurable via environment variables. For
configurable values (queue sizes, timeouts, backends, etc.) see
relay/settings.
"""

# ============================================================================
# WebSocket Protocol Constants
# ============================================================================

# RFC 6455 close codes used by the relay
WS_NORMAL_CLOSURE_CODE = 1000
WS_GOING_AWAY_CODE = 1001
WS_POLICY_VIOLATION_CODE = 1008
WS_TRY_AGAIN_LATER_CODE = 1013

# Timeout (seconds) when closing WebSocket connections gracefully
# Ensures connections don't hang indefinitely during shutdown
WS_CLOSE_TIMEOUT_SECONDS = 5


# ============================================================================
# Redis Pub/Sub Behavior
# ============================================================================

# Timeout (seconds) for a single get_message poll on the broadcast channel
REDIS_PUBSUB_POLL_TIMEOUT_SECONDS = 1.0

# Backoff delay (seconds) after the listener loop hits an error
REDIS_LISTENER_ERROR_BACKOFF_SECONDS = 0.5


# ============================================================================
# Logging
# ============================================================================

# Maximum size of one JSON log line before the message is truncated
MAX_LOG_SIZE_BYTES = 250_000
