"""Decorators for API endpoints."""

import functools
import logging
import time
from typing import Callable, Literal, Optional

from fastapi import Request, status
from fastapi.responses import JSONResponse

from docchat.config import settings
from docchat.services import rate_limiter as rate_limiter_module
from docchat.services.metrics import rate_limited_requests_total

logger = logging.getLogger(__name__)

RateLimitScope = Literal["ip", "endpoint"]

RATE_LIMIT_MESSAGE = "Terlalu banyak permintaan. Silakan coba lagi nanti."


def client_ip(request: Request) -> str:
    """
    Best-effort client address behind proxies.

    Prefers ``cf-connecting-ip``, then the first ``x-forwarded-for`` hop,
    then the socket peer.
    """
    connecting_ip = request.headers.get("cf-connecting-ip")
    if connecting_ip:
        return connecting_ip.strip()

    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        first_hop = forwarded_for.split(",")[0].strip()
        if first_hop:
            return first_hop

    return request.client.host if request.client else "unknown"


def _find_request(args: tuple, kwargs: dict) -> Optional[Request]:
    request = kwargs.get("request")
    if isinstance(request, Request):
        return request
    for arg in args:
        if isinstance(arg, Request):
            return arg
    return None


def rate_limit(
    limit: int,
    window: int = 60,
    scope: RateLimitScope = "ip",
):
    """
    Rate limit decorator for API endpoints.

    The decorated endpoint must accept a ``request: Request`` parameter.

    Args:
        limit: Maximum requests allowed in window
        window: Time window in seconds
        scope: Rate limit scope (ip/endpoint)

    Example:
        @router.post("/chat")
        @rate_limit(limit=20, window=60, scope="ip")
        async def chat(request: Request, ...):
            ...
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            request = _find_request(args, kwargs)

            if not request:
                logger.warning("Rate limit decorator: Request object not found")
                return await func(*args, **kwargs)

            if request.headers.get("X-Admin-Token") == settings.ADMIN_BYPASS_TOKEN:
                request.state.rate_limit_headers = {"X-RateLimit-Status": "bypassed"}
                return await func(*args, **kwargs)

            # Build rate limit key based on scope
            path_key = request.url.path.replace("/", ":")
            if scope == "ip":
                rate_limit_key = f"ip:{client_ip(request)}{path_key}"
            else:
                rate_limit_key = f"endpoint{path_key}"

            limiter = rate_limiter_module.rate_limiter
            allowed, remaining, reset_time = limiter.check_rate_limit(
                rate_limit_key, limit, window
            )

            headers = {
                "X-RateLimit-Limit": str(limit),
                "X-RateLimit-Remaining": str(remaining),
                "X-RateLimit-Reset": str(reset_time),
            }
            request.state.rate_limit_headers = headers

            if not allowed:
                retry_after = max(1, reset_time - int(time.time()))
                rate_limited_requests_total.labels(endpoint=request.url.path).inc()
                logger.warning(
                    f"Rate limit exceeded for {rate_limit_key}, retry in {retry_after}s"
                )
                return JSONResponse(
                    status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                    content={"error": RATE_LIMIT_MESSAGE},
                    headers={
                        **headers,
                        "X-RateLimit-Remaining": "0",
                        "Retry-After": str(retry_after),
                    },
                )

            return await func(*args, **kwargs)

        return wrapper

    return decorator
