"""Structured logging configuration for production observability."""

import logging
import logging.handlers
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict

from pythonjsonlogger import jsonlogger

from docchat.config import settings

# Fields a LogContext may carry onto records, in output order
CONTEXT_FIELDS = ("request_id", "platform", "user_id", "route", "duration_ms")

_log_context: ContextVar[Dict[str, Any]] = ContextVar("docchat_log_context", default={})


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with additional context."""

    def add_fields(
        self,
        log_record: Dict[str, Any],
        record: logging.LogRecord,
        message_dict: Dict[str, Any],
    ) -> None:
        """Add custom fields to log record."""
        super().add_fields(log_record, record, message_dict)

        log_record["timestamp"] = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
        log_record["service"] = settings.PROJECT_NAME
        log_record["level"] = record.levelname

        # Add context from record if available
        for key in CONTEXT_FIELDS:
            if hasattr(record, key):
                log_record[key] = getattr(record, key)


def setup_logging() -> None:
    """Configure application logging."""
    log_dir = Path("logs")
    log_dir.mkdir(exist_ok=True)

    if settings.ENVIRONMENT == "production":
        # JSON logging for production
        formatter = CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s")
    else:
        # Human-readable logging for development
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper()))
    root_logger.handlers.clear()

    context_filter = ContextFilter()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    console_handler.addFilter(context_filter)
    root_logger.addHandler(console_handler)

    file_handler = logging.handlers.RotatingFileHandler(
        log_dir / "app.log",
        maxBytes=10 * 1024 * 1024,  # 10MB
        backupCount=30,
    )
    file_handler.setFormatter(formatter)
    file_handler.addFilter(context_filter)
    root_logger.addHandler(file_handler)

    error_handler = logging.handlers.RotatingFileHandler(
        log_dir / "error.log",
        maxBytes=10 * 1024 * 1024,  # 10MB
        backupCount=30,
    )
    error_handler.setLevel(logging.ERROR)
    error_handler.setFormatter(formatter)
    error_handler.addFilter(context_filter)
    root_logger.addHandler(error_handler)

    # Suppress noisy loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    logging.info("Logging configured successfully")


class ContextFilter(logging.Filter):
    """Copy the active LogContext fields onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in _log_context.get().items():
            # Explicit ``extra`` values win
            if not hasattr(record, key):
                setattr(record, key, value)
        return True


def current_log_context() -> Dict[str, Any]:
    """Fields of the innermost active LogContext."""
    return dict(_log_context.get())


class LogContext:
    """
    Context manager for adding context to logs.

    Fields are kept in a context variable, so they follow the request across
    awaits and into tasks it starts. Nested contexts add to the outer one and
    restore it on exit.

    Example:
        with LogContext(request_id=request_id, platform="line"):
            logger.info("Handling webhook")
    """

    def __init__(self, **kwargs: Any) -> None:
        """Initialize log context."""
        unknown = set(kwargs) - set(CONTEXT_FIELDS)
        if unknown:
            raise ValueError(f"Unsupported log context fields: {sorted(unknown)}")
        self.context = kwargs
        self._token = None

    def __enter__(self) -> "LogContext":
        """Enter context."""
        self._token = _log_context.set({**_log_context.get(), **self.context})
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit context."""
        _log_context.reset(self._token)
