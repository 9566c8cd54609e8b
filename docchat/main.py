"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Dict

from fastapi import FastAPI
from sqlalchemy.exc import SQLAlchemyError

from docchat.api import api_router, root_router
from docchat.config import settings
from docchat.core.error_handler import global_exception_handler
from docchat.core.logging_config import setup_logging
from docchat.database import async_engine
from docchat.middleware.cors import PathScopedCORSMiddleware
from docchat.middleware.prometheus import PrometheusMiddleware
from docchat.middleware.rate_limit import RateLimitMiddleware
from docchat.middleware.tracing import RequestTracingMiddleware

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan context manager.

    Checks the database on startup and disposes the engine on shutdown.
    """
    logger.info(
        f"Starting {settings.PROJECT_NAME} {settings.VERSION} "
        f"(env={settings.ENVIRONMENT}, chat_mode={settings.CHAT_MODE})"
    )

    # Server starts even if the database is down; readiness reports it
    try:
        async with async_engine.begin() as conn:
            await conn.run_sync(lambda _: None)
        logger.info("Database connection successful")
    except (SQLAlchemyError, OSError) as e:
        logger.warning(f"Database connection failed: {e}")

    yield

    logger.info(f"Shutting down {settings.PROJECT_NAME}")
    await async_engine.dispose()


# Configure logging before app initialization
setup_logging()

app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description="Document Q&A assistant with inline citations for web and LINE",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url=f"{settings.API_PREFIX}/openapi.json",
    lifespan=lifespan,
)

# Core middleware stack (last added runs first)
app.add_middleware(RateLimitMiddleware)
app.add_middleware(PrometheusMiddleware)
app.add_middleware(RequestTracingMiddleware)
app.add_middleware(
    PathScopedCORSMiddleware,
    path_prefix=settings.API_PREFIX,
    allow_origins=[settings.ALLOWED_ORIGIN],
    allow_methods=["POST", "GET", "OPTIONS"],
    allow_headers=["Content-Type"],
)

app.add_exception_handler(Exception, global_exception_handler)


@app.get("/", tags=["Root"])
async def root() -> Dict[str, str]:
    """Service liveness marker."""
    return {"status": "ok", "project": settings.PROJECT_NAME}


app.include_router(api_router, prefix=settings.API_PREFIX)
app.include_router(root_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "docchat.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )
