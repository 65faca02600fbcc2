"""
Middleware and request helpers for the API.
"""

from __future__ import annotations

from collections.abc import Callable

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse
from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from vetshop.api.access import evaluate_admin_access
from vetshop.api.dependencies import get_state, resolve_session
from vetshop.config import Settings, get_settings


def setup_cors(app: FastAPI, settings: Settings) -> None:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_allow_origins),
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Requested-With", "X-Request-ID"],
        max_age=settings.cors_max_age,
    )


def setup_security_headers(app: FastAPI) -> None:
    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Permissions-Policy"] = "geolocation=(), microphone=(), camera=()"
        return response


class AdminAccessMiddleware(BaseHTTPMiddleware):
    """
    Gates every request under the admin path prefix.

    Resolves the session from the request cookies (or a bearer token), looks
    up the profile role and either passes the request through untouched or
    answers with a redirect. Other paths skip all lookups.
    """

    def __init__(self, app: ASGIApp, *, settings: Settings | None = None) -> None:
        super().__init__(app)
        self.settings = settings or get_settings()

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        path = request.url.path
        if not self.settings.is_admin_path(path):
            return await call_next(request)

        state = get_state(request)
        session = await run_in_threadpool(resolve_session, request, state.auth_client, self.settings)
        decision = await run_in_threadpool(
            evaluate_admin_access,
            path,
            session,
            state.owner_repo.get_role,
            settings=self.settings,
        )
        if decision.allowed:
            return await call_next(request)

        target = str(request.url.replace(path=decision.redirect_to, query=""))
        return RedirectResponse(target, status_code=307, headers={"Cache-Control": "no-store"})
