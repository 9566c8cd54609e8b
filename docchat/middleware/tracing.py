"""Request tracing middleware."""

import logging
import time
from typing import Optional
from uuid import uuid4

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from docchat.config import settings
from docchat.core.decorators import client_ip
from docchat.core.logging_config import LogContext

logger = logging.getLogger(__name__)


def platform_for_path(path: str) -> Optional[str]:
    """Chat platform served by a path, used to tag request logs."""
    if path.startswith("/webhook/line"):
        return "line"
    if path.startswith(f"{settings.API_PREFIX}/chat"):
        return "web"
    return None


class RequestTracingMiddleware(BaseHTTPMiddleware):
    """
    Assign every request an ``X-Request-ID`` and log its lifecycle.

    An incoming ``X-Request-ID`` is reused so traces line up with upstream
    proxies. Chat and webhook requests are tagged with their platform. Both
    fields are bound with ``LogContext`` for every record the request logs.
    """

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or str(uuid4())
        request.state.request_id = request_id

        context = {"request_id": request_id}
        platform = platform_for_path(request.url.path)
        if platform:
            context["platform"] = platform

        with LogContext(**context):
            return await self._trace(request, call_next, request_id)

    async def _trace(self, request: Request, call_next, request_id: str):
        extra = {
            "method": request.method,
            "path": request.url.path,
            "client_ip": client_ip(request),
        }
        start_time = time.time()
        logger.info(f"Request started: {request.method} {request.url.path}", extra=extra)

        try:
            response = await call_next(request)
        except Exception as e:
            extra["duration_ms"] = round((time.time() - start_time) * 1000, 2)
            logger.error(
                f"Request failed: {request.method} {request.url.path} error={e}",
                extra=extra,
                exc_info=True,
            )
            raise

        duration_ms = round((time.time() - start_time) * 1000, 2)
        response.headers["X-Request-ID"] = request_id
        extra.update(status_code=response.status_code, duration_ms=duration_ms)

        if response.status_code >= 500:
            log_level = logging.ERROR
        elif response.status_code >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        logger.log(
            log_level,
            f"Request completed: {request.method} {request.url.path} "
            f"status={response.status_code} duration={duration_ms}ms",
            extra=extra,
        )
        return response
