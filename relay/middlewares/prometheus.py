"""
Prometheus metrics middleware for HTTP requests.

Tracks request counts and durations per method, endpoint and status.
"""

import time

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from relay.utils.metrics import (
    http_request_duration_seconds,
    http_requests_total,
)


class PrometheusMiddleware(BaseHTTPMiddleware):
    """
    Middleware to track Prometheus metrics for HTTP requests.

    Tracks the following metrics:
    - http_requests_total: Counter of total requests by method, endpoint, and status
    - http_request_duration_seconds: Histogram of request durations
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        method = request.method
        path = request.url.path
        start_time = time.time()

        try:
            response = await call_next(request)
        except Exception:
            http_requests_total.labels(
                method=method, endpoint=path, status_code=500
            ).inc()
            raise
        finally:
            http_request_duration_seconds.labels(
                method=method, endpoint=path
            ).observe(time.time() - start_time)

        http_requests_total.labels(
            method=method, endpoint=path, status_code=response.status_code
        ).inc()

        return response
