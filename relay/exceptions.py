"""
Custom exception classes for the relay.

HTTP-facing exceptions derive from AppException and carry the status code
used when they are rendered as a `{message, success: false}` envelope.
Delivery exceptions are raised and handled inside the broadcast path and
never reach an HTTP caller.
"""


class AppException(Exception):
    """
    Base exception class for all HTTP-facing application exceptions.

    Attributes:
        message: Human-readable error message.
        http_status: HTTP status code for REST API responses.
    """

    http_status: int = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(AppException):
    """
    Data validation failed.

    Raised when a write request is missing required fields. The request is
    rejected before persistence and broadcast.

    HTTP Status: 400 Bad Request
    """

    http_status = 400


class NotFoundError(AppException):
    """
    Resource not found.

    HTTP Status: 404 Not Found
    """

    http_status = 404


class DatabaseError(AppException):
    """
    Database operation failed.

    Raised when the notification store cannot be read or written. A
    notification whose write failed is never broadcast.

    HTTP Status: 500 Internal Server Error
    """

    http_status = 500


class DeliveryError(Exception):
    """
    Sending a frame to a single connection failed.

    Caught and logged by the dispatcher, never propagated to callers.
    """

    def __init__(self, connection_id: str | None, reason: str):
        self.connection_id = connection_id
        self.reason = reason
        super().__init__(f"Delivery to {connection_id} failed: {reason}")


class ConnectionClosedError(DeliveryError):
    """The target connection is no longer alive."""

    def __init__(self, connection_id: str | None):
        super().__init__(connection_id, "connection closed")


class OutboundQueueFullError(DeliveryError):
    """The target connection's outbound buffer is full."""

    def __init__(self, connection_id: str | None):
        super().__init__(connection_id, "outbound queue full")


class BroadcastBackendError(Exception):
    """
    The broadcast backend could not publish an envelope.

    Caught and logged by the dispatcher; the notification has already been
    persisted and the HTTP caller has already been answered.
    """
