"""
Sign-in, sign-out and the post-login role router.

Sessions are carried in two HttpOnly cookies (access and refresh token);
every other route and the dashboard middleware read them back.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import RedirectResponse

from vetshop.api.access import post_login_destination
from vetshop.api.dependencies import get_app_settings, get_optional_session, get_state, read_session_tokens
from vetshop.api.models import LoginRequest, LoginResponse
from vetshop.config import Settings
from vetshop.domain import Session
from vetshop.logging_config import get_logger, log_event

logger = get_logger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _set_session_cookies(response: Response, session: Session, settings: Settings) -> None:
    secure = not settings.debug_mode
    response.set_cookie(
        settings.session_cookie_name,
        session.access_token,
        httponly=True,
        secure=secure,
        samesite="lax",
        path="/",
    )
    if session.refresh_token:
        response.set_cookie(
            settings.refresh_cookie_name,
            session.refresh_token,
            httponly=True,
            secure=secure,
            samesite="lax",
            path="/",
        )


def _clear_session_cookies(response: Response, settings: Settings) -> None:
    response.delete_cookie(settings.session_cookie_name, path="/")
    response.delete_cookie(settings.refresh_cookie_name, path="/")


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={401: {"description": "Invalid credentials"}, 502: {"description": "Auth service unavailable"}},
)
def login(body: LoginRequest, request: Request, response: Response) -> dict:
    cfg = get_app_settings(request)
    state = get_state(request)
    session = state.auth_client.sign_in_with_password(body.email.strip(), body.password)
    _set_session_cookies(response, session, cfg)
    response.headers["Cache-Control"] = "no-store"
    log_event("user_signed_in", user_id=session.user.id)
    return {
        "user_id": session.user.id,
        "email": session.user.email,
        "redirect_to": post_login_destination(session, state.owner_repo.get_role, settings=cfg),
    }


@router.post("/logout")
def logout(request: Request, response: Response) -> dict:
    cfg = get_app_settings(request)
    access_token, _ = read_session_tokens(request, cfg)
    if access_token:
        get_state(request).auth_client.sign_out(access_token)
    _clear_session_cookies(response, cfg)
    response.headers["Cache-Control"] = "no-store"
    return {"redirect_to": cfg.login_path}


@router.get("/callback", response_class=RedirectResponse, status_code=307)
def callback(
    request: Request,
    session: Optional[Session] = Depends(get_optional_session),
) -> RedirectResponse:
    """Send a freshly signed-in user to the dashboard or to their orders, by role."""
    cfg = get_app_settings(request)
    if session is None:
        target = cfg.login_path
    else:
        target = post_login_destination(session, get_state(request).owner_repo.get_role, settings=cfg)
    response = RedirectResponse(target, status_code=307, headers={"Cache-Control": "no-store"})
    if session is not None:
        # A refresh inside the lookup may have rotated the tokens
        _set_session_cookies(response, session, cfg)
    return response
