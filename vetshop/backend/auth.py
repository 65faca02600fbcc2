"""
Client for the hosted auth service (Supabase GoTrue REST API).

Issues sessions from email/password credentials, resolves an access token to
its user, refreshes tokens and signs sessions out.
"""

from __future__ import annotations

import json
import logging
import time
from typing import Any

import requests

from vetshop.config import Settings, get_settings
from vetshop.domain import Session, User
from vetshop.exceptions import AuthServiceError, ConfigurationError, InvalidCredentialsError

logger = logging.getLogger(__name__)


class AuthClient:
    """
    Thin wrapper over the auth REST endpoints.

    Lookups never raise for an invalid or expired token: they return ``None``
    so callers treat a failed fetch exactly like "no session".
    """

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        *,
        timeout: float | None = None,
        http: requests.Session | None = None,
        settings: Settings | None = None,
    ) -> None:
        cfg = settings or get_settings()
        self._base_url = (base_url or cfg.supabase_url).rstrip("/") + "/auth/v1"
        self._api_key = api_key if api_key is not None else cfg.supabase_anon_key
        self._timeout = timeout if timeout is not None else cfg.http_timeout_seconds
        self._http = http or requests.Session()

    def _headers(self, access_token: str | None = None) -> dict[str, str]:
        if not self._api_key:
            raise ConfigurationError("Missing API key for the auth service", setting_name="SUPABASE_ANON_KEY")
        headers = {"apikey": self._api_key, "Content-Type": "application/json"}
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"
        return headers

    def _token_request(self, grant_type: str, payload: dict[str, Any]) -> requests.Response:
        try:
            return self._http.post(
                f"{self._base_url}/token",
                params={"grant_type": grant_type},
                json=payload,
                headers=self._headers(),
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            logger.warning("Auth token request failed: %s", e)
            raise AuthServiceError(f"Auth service unreachable: {e}") from e

    def sign_in_with_password(self, email: str, password: str) -> Session:
        response = self._token_request("password", {"email": email, "password": password})
        if response.status_code in (400, 401, 422):
            raise InvalidCredentialsError()
        if response.status_code != 200:
            raise AuthServiceError("Sign-in failed", status_code=response.status_code)
        return self._session_from_payload(response)

    def refresh_session(self, refresh_token: str) -> Session | None:
        """Exchange a refresh token for a new session; ``None`` when it is no longer valid."""
        if not refresh_token:
            return None
        try:
            response = self._token_request("refresh_token", {"refresh_token": refresh_token})
        except AuthServiceError:
            return None
        if response.status_code != 200:
            return None
        try:
            return self._session_from_payload(response)
        except AuthServiceError:
            return None

    def get_user(self, access_token: str) -> User | None:
        if not access_token:
            return None
        try:
            response = self._http.get(
                f"{self._base_url}/user",
                headers=self._headers(access_token),
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            logger.warning("Session lookup failed: %s", e)
            return None
        if response.status_code != 200:
            return None
        try:
            data = response.json()
        except (json.JSONDecodeError, ValueError) as e:
            logger.warning("Session lookup returned invalid JSON: %s", e)
            return None
        user_id = data.get("id")
        if not user_id:
            return None
        return User(id=str(user_id), email=data.get("email"))

    def get_session(self, access_token: str | None, refresh_token: str | None = None) -> Session | None:
        """Resolve tokens to a live session, refreshing once if the access token was rejected."""
        if access_token:
            user = self.get_user(access_token)
            if user is not None:
                return Session(access_token=access_token, user=user, refresh_token=refresh_token)
        if refresh_token:
            return self.refresh_session(refresh_token)
        return None

    def sign_out(self, access_token: str) -> None:
        if not access_token:
            return
        try:
            response = self._http.post(
                f"{self._base_url}/logout",
                headers=self._headers(access_token),
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            # The local session is dropped either way.
            logger.warning("Sign-out request failed: %s", e)
            return
        if response.status_code not in (200, 204, 401, 403, 404):
            logger.warning("Sign-out returned unexpected status %s", response.status_code)

    @staticmethod
    def _session_from_payload(response: requests.Response) -> Session:
        try:
            data = response.json()
        except (json.JSONDecodeError, ValueError) as e:
            raise AuthServiceError("Auth service returned invalid JSON") from e

        user = data.get("user") or {}
        access_token = data.get("access_token")
        if not access_token or not user.get("id"):
            raise AuthServiceError("Auth service returned an incomplete session")

        expires_at = data.get("expires_at")
        if expires_at is None and data.get("expires_in"):
            expires_at = int(time.time()) + int(data["expires_in"])

        return Session(
            access_token=access_token,
            refresh_token=data.get("refresh_token"),
            expires_at=int(expires_at) if expires_at is not None else None,
            user=User(id=str(user["id"]), email=user.get("email")),
        )
