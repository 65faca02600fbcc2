"""
VetShop - Structured Logging Configuration
==========================================
JSON-formatted structured logging with request context.

Usage:
    from vetshop.logging_config import get_logger, log_event

    logger = get_logger(__name__)
    logger.info("Order fetched", extra={"order_id": order_id})

    log_event("admin_access_denied", path="/dashboard", reason="role_mismatch")
"""

from __future__ import annotations

import json
import logging
import os
import sys
import time
import traceback
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any

from vetshop.config import settings


class LogLevel(str, Enum):
    """Standard log levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


# =============================================================================
# Context Variables
# =============================================================================


class LogContext:
    """
    Request-scoped log context.

    Backed by context variables so values set in a request handler follow the
    request into worker threads started with ``run_in_threadpool``.
    """

    _request_id: ContextVar[str | None] = ContextVar("log_request_id", default=None)
    _user_id: ContextVar[str | None] = ContextVar("log_user_id", default=None)
    _endpoint: ContextVar[str | None] = ContextVar("log_endpoint", default=None)

    @classmethod
    def set_request_id(cls, request_id: str | None) -> None:
        cls._request_id.set(request_id)

    @classmethod
    def get_request_id(cls) -> str | None:
        return cls._request_id.get()

    @classmethod
    def set_user_id(cls, user_id: str | None) -> None:
        cls._user_id.set(user_id)

    @classmethod
    def get_user_id(cls) -> str | None:
        return cls._user_id.get()

    @classmethod
    def set_endpoint(cls, endpoint: str | None) -> None:
        cls._endpoint.set(endpoint)

    @classmethod
    def get_endpoint(cls) -> str | None:
        return cls._endpoint.get()

    @classmethod
    def clear(cls) -> None:
        """Clear all context."""
        cls._request_id.set(None)
        cls._user_id.set(None)
        cls._endpoint.set(None)

    @classmethod
    def get_all(cls) -> dict[str, Any]:
        return {
            "request_id": cls.get_request_id(),
            "user_id": cls.get_user_id(),
            "endpoint": cls.get_endpoint(),
        }


# =============================================================================
# JSON Formatter
# =============================================================================


class StructuredFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Outputs logs in a consistent JSON format with timestamps,
    log levels, and contextual fields.
    """

    _STANDARD_ATTRS = frozenset(
        {
            "name", "msg", "args", "levelname", "levelno", "pathname",
            "filename", "module", "lineno", "funcName", "created", "msecs",
            "relativeCreated", "thread", "threadName", "processName",
            "process", "getMessage", "exc_info", "exc_text", "stack_info",
            "taskName", "message",
        }
    )

    def __init__(
        self,
        *,
        service_name: str = "vetshop",
        environment: str = "production",
        include_extra_fields: bool = True,
    ) -> None:
        super().__init__()
        self.service_name = service_name
        self.environment = environment
        self.include_extra_fields = include_extra_fields
        self._iso_format = "%Y-%m-%dT%H:%M:%S.%fZ"

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record as JSON."""
        log_entry: dict[str, Any] = {
            "timestamp": self._format_timestamp(record.created),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service": self.service_name,
            "environment": self.environment,
        }

        if record.pathname:
            log_entry["file"] = Path(record.pathname).name
            log_entry["line"] = record.lineno
            log_entry["function"] = record.funcName

        if record.exc_info:
            log_entry["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": "".join(traceback.format_exception(*record.exc_info)),
            }

        for key, value in LogContext.get_all().items():
            if value is not None:
                log_entry[key] = value

        if self.include_extra_fields:
            for key, value in record.__dict__.items():
                if key not in self._STANDARD_ATTRS and not key.startswith("_"):
                    log_entry[key] = value

        return json.dumps(log_entry, default=self._json_serializer, ensure_ascii=False)

    def _format_timestamp(self, created: float) -> str:
        dt = datetime.fromtimestamp(created, tz=timezone.utc)
        return dt.strftime(self._iso_format)

    @staticmethod
    def _json_serializer(obj: Any) -> str:
        if isinstance(obj, datetime):
            return obj.isoformat()
        return str(obj)


# =============================================================================
# Console Formatter (human-readable fallback)
# =============================================================================


class ConsoleFormatter(logging.Formatter):
    """
    Human-readable formatter for console output during development.
    """

    LEVEL_COLORS = {
        "DEBUG": "\033[36m",     # Cyan
        "INFO": "\033[32m",      # Green
        "WARNING": "\033[33m",   # Yellow
        "ERROR": "\033[31m",     # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        level_color = self.LEVEL_COLORS.get(record.levelname, "")
        timestamp = datetime.fromtimestamp(record.created, tz=timezone.utc).strftime("%H:%M:%S.%f")[:-3]
        request_id = LogContext.get_request_id() or "-"

        base = (
            f"{level_color}{record.levelname:<8}{self.RESET} "
            f"{timestamp} "
            f"[{request_id}] "
            f"{record.name}: "
            f"{record.getMessage()}"
        )

        if record.exc_info:
            base += "\n" + "".join(traceback.format_exception(*record.exc_info))

        return base


# =============================================================================
# Logger Factory
# =============================================================================


def _get_log_level() -> int:
    level_str = os.environ.get("LOG_LEVEL", "INFO").upper()
    return getattr(logging, level_str, logging.INFO)


def _should_use_json() -> bool:
    log_format = os.environ.get("LOG_FORMAT", "").lower()
    if log_format == "console":
        return False
    if log_format == "json":
        return True
    # Default to JSON in production, console in dev
    return not settings.debug_mode


def _convert_level(level: str | int) -> int:
    if isinstance(level, int):
        return level
    return getattr(logging, str(level).upper(), logging.INFO)


_configured = False


def configure_logging(
    *,
    level: str | int | None = None,
    service_name: str = "vetshop",
    environment: str = "production",
    log_format: str | None = None,
) -> None:
    """
    Configure the root logger with structured logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        service_name: Service name for log identification
        environment: Environment label (production, staging, development)
        log_format: Format type ("json" or "console")
    """
    global _configured

    resolved = _get_log_level() if level is None else _convert_level(level)
    root = logging.getLogger()
    root.setLevel(resolved)
    root.handlers.clear()

    use_json = _should_use_json() if log_format is None else log_format == "json"

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(resolved)
    if use_json:
        handler.setFormatter(StructuredFormatter(service_name=service_name, environment=environment))
    else:
        handler.setFormatter(ConsoleFormatter())

    root.addHandler(handler)
    _configured = True


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger, configuring the root logger on first use.

    Args:
        name: Logger name (usually __name__)
    """
    if not _configured:
        configure_logging()
    return logging.getLogger(name)


# =============================================================================
# Helper Functions
# =============================================================================


def log_event(
    event_name: str,
    level: str | LogLevel = LogLevel.INFO,
    **extra_fields: Any,
) -> None:
    """
    Log a structured event with additional fields.

    Example:
        log_event("order_lookup_denied", order_id="...", reason="no_match")
    """
    logger = get_logger("event")
    log_func = getattr(logger, str(getattr(level, "value", level)).lower(), logger.info)
    log_func(event_name, extra=extra_fields)


def log_error(
    event_name: str,
    exc: Exception | None = None,
    **extra_fields: Any,
) -> None:
    """Log an error event with optional exception info."""
    logger = get_logger("error")
    exc_info = (type(exc), exc, exc.__traceback__) if exc is not None else None
    logger.error(event_name, exc_info=exc_info, extra=extra_fields)


# =============================================================================
# Context Managers
# =============================================================================


class LogContextManager:
    """
    Sets and clears request-scoped log context.

    Example:
        with LogContextManager(user_id=user.id, endpoint="streamlit:/cuenta/pedidos"):
            logger.info("Rendering order history")
    """

    def __init__(
        self,
        *,
        request_id: str | None = None,
        user_id: str | None = None,
        endpoint: str | None = None,
    ) -> None:
        self.request_id = request_id or str(uuid.uuid4())
        self.user_id = user_id
        self.endpoint = endpoint

    def __enter__(self) -> LogContextManager:
        LogContext.set_request_id(self.request_id)
        LogContext.set_user_id(self.user_id)
        LogContext.set_endpoint(self.endpoint)
        return self

    def __exit__(self, *args: Any) -> None:
        LogContext.clear()


class PerformanceTracker:
    """
    Tracks the duration of a backend call and logs it on exit.

    Example:
        with PerformanceTracker("db_query", table="pedidos"):
            rows = cur.fetchall()
    """

    def __init__(self, operation: str, **extra_fields: Any) -> None:
        self.operation = operation
        self.extra = extra_fields
        self._start_time: float | None = None

    def __enter__(self) -> PerformanceTracker:
        self._start_time = time.perf_counter()
        return self

    def __exit__(self, *args: Any) -> None:
        if self._start_time is None:
            return

        self.extra["duration_ms"] = round((time.perf_counter() - self._start_time) * 1000, 2)

        if args[0] is not None:
            self.extra["error"] = str(args[1])
            get_logger("performance").warning(f"{self.operation}_failed", extra=self.extra)
        else:
            get_logger("performance").debug(f"{self.operation}_completed", extra=self.extra)
