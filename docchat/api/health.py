"""Health check endpoints for monitoring."""

import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Depends
from redis.exceptions import RedisError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from docchat.api.deps import get_llm_client
from docchat.config import settings
from docchat.core.error_handler import get_error_counts
from docchat.database import get_db
from docchat.services import rate_limiter as rate_limiter_module
from docchat.services.llm.ollama_client import OllamaClient

router = APIRouter(tags=["health"])
logger = logging.getLogger(__name__)

app_start_time = datetime.now(timezone.utc)


@router.get("/health")
async def health_check() -> Dict[str, str]:
    """
    Basic health check for load balancer.

    Returns:
        Status, service name and version
    """
    return {
        "status": "healthy",
        "service": settings.PROJECT_NAME,
        "version": settings.VERSION,
    }


@router.get("/health/live")
async def liveness_check() -> Dict[str, str]:
    """Liveness probe - checks if API can respond."""
    return {"status": "alive"}


@router.get("/health/ready")
async def readiness_check(
    db: AsyncSession = Depends(get_db),
    llm_client: OllamaClient = Depends(get_llm_client),
) -> Dict[str, Any]:
    """
    Readiness probe - checks if all dependencies are healthy.

    Redis is optional (rate limiting fails open), so it never makes the
    service unhealthy.

    Args:
        db: Database session
        llm_client: LLM client

    Returns:
        Detailed status of all dependencies
    """
    checks: Dict[str, Any] = {}
    all_healthy = True

    # Check database
    try:
        start = time.time()
        await db.execute(text("SELECT 1"))
        latency = (time.time() - start) * 1000
        checks["database"] = {"status": "up", "latency_ms": round(latency, 2)}
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}")
        checks["database"] = {"status": "down", "error": str(e)}
        all_healthy = False

    # Check Redis
    limiter = rate_limiter_module.rate_limiter
    try:
        start = time.time()
        if limiter.available:
            limiter.redis_client.ping()
            latency = (time.time() - start) * 1000
            checks["redis"] = {"status": "up", "latency_ms": round(latency, 2)}
        else:
            checks["redis"] = {"status": "unavailable"}
    except RedisError as e:
        logger.error(f"Redis health check failed: {e}")
        checks["redis"] = {"status": "down", "error": str(e)}

    # Check Ollama
    start = time.time()
    if await llm_client.health_check():
        latency = (time.time() - start) * 1000
        checks["ollama"] = {
            "status": "up",
            "model": llm_client.model,
            "latency_ms": round(latency, 2),
        }
    else:
        checks["ollama"] = {"status": "down", "model": llm_client.model}
        all_healthy = False

    uptime_seconds = (datetime.now(timezone.utc) - app_start_time).total_seconds()

    return {
        "status": "healthy" if all_healthy else "unhealthy",
        "checks": checks,
        "chat_mode": settings.CHAT_MODE,
        "uptime_seconds": round(uptime_seconds, 2),
        "error_counts": get_error_counts(),
    }
