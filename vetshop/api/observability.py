"""
Request observability: request ids, timing and structured request logs.
"""

from __future__ import annotations

import time
import uuid
from collections.abc import Callable
from contextvars import ContextVar
from typing import Any

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from vetshop.exceptions import VetShopError
from vetshop.logging_config import LogContext, get_logger, log_error

_request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)

logger = get_logger(__name__)

_SENSITIVE_PARAMS = {"token", "password", "secret", "access_token", "refresh_token", "code"}


def generate_request_id() -> str:
    return str(uuid.uuid4())


def get_request_id() -> str | None:
    """Get the current request ID from context."""
    return _request_id_ctx.get()


def _sanitize_query_params(query: str) -> str:
    sanitized = []
    for part in query.split("&"):
        key, sep, _ = part.partition("=")
        if sep and key.lower() in _SENSITIVE_PARAMS:
            sanitized.append(f"{key}=***REDACTED***")
        else:
            sanitized.append(part)
    return "&".join(sanitized)


class ObservabilityMiddleware(BaseHTTPMiddleware):
    """
    Adds request ID tracking, timing and structured logging to every request.

    - Uses the incoming X-Request-ID header or generates one
    - Echoes the request ID on the response
    - Logs completion (warning above the slow threshold) or failure
    """

    def __init__(self, app: ASGIApp, *, slow_request_threshold_ms: float = 1000.0) -> None:
        super().__init__(app)
        self.slow_request_threshold_ms = slow_request_threshold_ms

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("x-request-id") or generate_request_id()
        _request_id_ctx.set(request_id)
        LogContext.set_request_id(request_id)
        LogContext.set_user_id(None)
        LogContext.set_endpoint(request.url.path)

        meta: dict[str, Any] = {
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
        }
        if request.url.query:
            meta["query_params"] = _sanitize_query_params(str(request.url.query))

        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as exc:
            meta["duration_ms"] = round((time.perf_counter() - start) * 1000, 2)
            meta["error_type"] = type(exc).__name__
            if isinstance(exc, VetShopError):
                exc.request_id = request_id
                exc.log()
            else:
                log_error("request_failed", exc, **meta)
            raise

        response.headers["X-Request-ID"] = request_id
        meta["status_code"] = response.status_code
        meta["duration_ms"] = round((time.perf_counter() - start) * 1000, 2)
        if meta["duration_ms"] >= self.slow_request_threshold_ms:
            meta["slow_request"] = True
            logger.warning("request_completed_slow", extra=meta)
        else:
            logger.info("request_completed", extra=meta)
        return response
