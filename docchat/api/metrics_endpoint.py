"""Admin-gated Prometheus scrape and error tracking endpoints."""

import secrets
from typing import Any, Dict

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Response, status
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from docchat.config import settings
from docchat.core.error_handler import get_error_counts, get_recent_errors

router = APIRouter(prefix="/metrics", tags=["metrics"])


def verify_metrics_access(
    x_admin_token: str = Header("", alias="X-Admin-Token")
) -> None:
    """Only callers holding the admin token may read metrics."""
    if not x_admin_token or not secrets.compare_digest(
        x_admin_token, settings.ADMIN_BYPASS_TOKEN
    ):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid metrics access token",
        )


@router.get("")
async def metrics(_: None = Depends(verify_metrics_access)) -> Response:
    """
    Expose Prometheus metrics.

    Returns:
        Prometheus text exposition
    """
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


@router.get("/errors")
async def error_summary(
    limit: int = Query(20, ge=1, le=100),
    _: None = Depends(verify_metrics_access),
) -> Dict[str, Any]:
    """
    Summarize errors recorded since startup.

    Chat and webhook failures are answered with an apology or acknowledged,
    so this is where their causes surface.

    Args:
        limit: Number of most recent errors to include

    Returns:
        Totals by exception type and the most recent errors with their
        request context
    """
    counts = get_error_counts()
    return {
        "total_errors": sum(counts.values()),
        "error_counts": counts,
        "recent_errors": get_recent_errors(limit=limit),
    }
