"""Rate limiting middleware."""

import logging
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from docchat.services import rate_limiter as rate_limiter_module

logger = logging.getLogger(__name__)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Surface rate limit state on responses.

    Endpoint limits are enforced by the ``rate_limit`` decorator, which leaves
    its headers on ``request.state``; this middleware copies them onto the
    outgoing response and flags when the limiter backend is unavailable.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process request and attach rate limit headers."""
        response = await call_next(request)

        if not rate_limiter_module.rate_limiter.available:
            response.headers.setdefault("X-RateLimit-Status", "unavailable")
            return response

        headers = getattr(request.state, "rate_limit_headers", None)
        if headers:
            for header, value in headers.items():
                response.headers.setdefault(header, value)

        return response
