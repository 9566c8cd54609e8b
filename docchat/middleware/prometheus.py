"""Prometheus metrics middleware."""

import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.routing import Match

from docchat.services.metrics import (
    active_requests,
    request_duration_seconds,
    requests_total,
)

UNMATCHED_ENDPOINT = "unmatched"


def endpoint_label(request: Request) -> str:
    """
    Route template serving a request.

    Paths that match no route share one label so scanners and typos cannot
    grow the series count.
    """
    for route in request.app.router.routes:
        match, _ = route.matches(request.scope)
        if match is Match.FULL:
            return route.path
    return UNMATCHED_ENDPOINT


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Count HTTP requests and observe their latency per route template."""

    async def dispatch(self, request: Request, call_next):
        endpoint = endpoint_label(request)
        # Scrapes are not traffic
        if endpoint.startswith("/metrics"):
            return await call_next(request)

        active_requests.inc()
        start_time = time.time()

        try:
            response = await call_next(request)

            requests_total.labels(
                method=request.method, endpoint=endpoint, status=response.status_code
            ).inc()
            request_duration_seconds.labels(
                method=request.method, endpoint=endpoint
            ).observe(time.time() - start_time)

            return response

        finally:
            active_requests.dec()
