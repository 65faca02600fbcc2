"""
Dependency helpers for API routes.

Stateful components live on ``request.app.state.state`` (an ``AppState``);
these helpers fetch them and resolve the caller's session.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, Request

from vetshop.api.state import AppState
from vetshop.backend.auth import AuthClient
from vetshop.config import Settings, get_settings
from vetshop.domain import Session
from vetshop.exceptions import AuthenticationRequiredError, ConfigurationError, VetShopError
from vetshop.logging_config import LogContext


def get_state(request: Request) -> AppState:
    state = getattr(request.app.state, "state", None)
    if state is None:
        raise ConfigurationError("Application state is not initialised")
    return state


def get_app_settings(request: Request) -> Settings:
    return getattr(request.app.state, "settings", None) or get_settings()


def read_session_tokens(request: Request, settings: Settings) -> tuple[Optional[str], Optional[str]]:
    """Access and refresh tokens from the session cookies, or a bearer header."""
    access_token = request.cookies.get(settings.session_cookie_name)
    refresh_token = request.cookies.get(settings.refresh_cookie_name)
    if not access_token:
        auth_header = request.headers.get("authorization") or ""
        scheme, _, token = auth_header.partition(" ")
        if scheme.lower() == "bearer" and token.strip():
            access_token = token.strip()
    return access_token, refresh_token


def resolve_session(request: Request, auth_client: AuthClient, settings: Settings) -> Optional[Session]:
    """Look up the caller's session; any lookup failure counts as no session."""
    access_token, refresh_token = read_session_tokens(request, settings)
    if not access_token and not refresh_token:
        return None
    try:
        session = auth_client.get_session(access_token, refresh_token)
    except VetShopError:
        return None
    if session is not None:
        LogContext.set_user_id(session.user.id)
    return session


def get_optional_session(request: Request) -> Optional[Session]:
    state = get_state(request)
    return resolve_session(request, state.auth_client, get_app_settings(request))


def get_required_session(session: Optional[Session] = Depends(get_optional_session)) -> Session:
    if session is None:
        raise AuthenticationRequiredError()
    return session
