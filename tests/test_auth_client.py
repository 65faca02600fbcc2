"""
Tests for the auth service client (vetshop.backend.auth).

HTTP is mocked at the requests.Session level.
"""

from __future__ import annotations

from unittest import mock

import pytest
import requests

from vetshop.backend.auth import AuthClient
from vetshop.exceptions import AuthServiceError, ConfigurationError, InvalidCredentialsError

TOKEN_PAYLOAD = {
    "access_token": "at-1",
    "refresh_token": "rt-1",
    "expires_in": 3600,
    "user": {"id": "user-1", "email": "ana@example.com"},
}


def _response(status: int, payload=None) -> mock.Mock:
    resp = mock.Mock(status_code=status)
    if payload is None:
        resp.json.side_effect = ValueError("no json")
    else:
        resp.json.return_value = payload
    return resp


@pytest.fixture
def http() -> mock.Mock:
    return mock.Mock(spec=requests.Session)


@pytest.fixture
def client(http, settings) -> AuthClient:
    return AuthClient("https://project.supabase.co/", "anon-key", http=http, settings=settings)


class TestSignIn:
    def test_password_grant(self, client, http):
        http.post.return_value = _response(200, TOKEN_PAYLOAD)

        session = client.sign_in_with_password("ana@example.com", "secret")

        assert session.access_token == "at-1"
        assert session.refresh_token == "rt-1"
        assert session.user.id == "user-1"
        assert session.expires_at is not None
        args, kwargs = http.post.call_args
        assert args[0] == "https://project.supabase.co/auth/v1/token"
        assert kwargs["params"] == {"grant_type": "password"}
        assert kwargs["headers"]["apikey"] == "anon-key"
        assert kwargs["json"] == {"email": "ana@example.com", "password": "secret"}

    @pytest.mark.parametrize("status", [400, 401, 422])
    def test_rejected_credentials(self, client, http, status):
        http.post.return_value = _response(status, {"error": "invalid_grant"})
        with pytest.raises(InvalidCredentialsError):
            client.sign_in_with_password("ana@example.com", "wrong")

    def test_server_error(self, client, http):
        http.post.return_value = _response(503, {})
        with pytest.raises(AuthServiceError):
            client.sign_in_with_password("ana@example.com", "secret")

    def test_unreachable(self, client, http):
        http.post.side_effect = requests.ConnectionError("refused")
        with pytest.raises(AuthServiceError):
            client.sign_in_with_password("ana@example.com", "secret")

    def test_incomplete_payload(self, client, http):
        http.post.return_value = _response(200, {"access_token": "at-1"})
        with pytest.raises(AuthServiceError):
            client.sign_in_with_password("ana@example.com", "secret")

    def test_missing_api_key(self, http, settings):
        client = AuthClient("https://project.supabase.co", "", http=http, settings=settings)
        with pytest.raises(ConfigurationError):
            client.sign_in_with_password("ana@example.com", "secret")


class TestGetUser:
    def test_valid_token(self, client, http):
        http.get.return_value = _response(200, {"id": "user-1", "email": "ana@example.com"})
        user = client.get_user("at-1")
        assert user.id == "user-1"
        assert http.get.call_args.kwargs["headers"]["Authorization"] == "Bearer at-1"

    @pytest.mark.parametrize("status", [401, 403, 500])
    def test_rejected_token_is_none(self, client, http, status):
        http.get.return_value = _response(status, {"msg": "invalid JWT"})
        assert client.get_user("bad") is None

    def test_network_error_is_none(self, client, http):
        http.get.side_effect = requests.Timeout("slow")
        assert client.get_user("at-1") is None

    def test_invalid_json_is_none(self, client, http):
        http.get.return_value = _response(200)
        assert client.get_user("at-1") is None


class TestGetSession:
    def test_uses_access_token_when_valid(self, client, http):
        http.get.return_value = _response(200, {"id": "user-1"})
        session = client.get_session("at-1", "rt-1")
        assert session.access_token == "at-1"
        http.post.assert_not_called()

    def test_refreshes_once_when_access_token_rejected(self, client, http):
        http.get.return_value = _response(401, {})
        http.post.return_value = _response(200, TOKEN_PAYLOAD)
        session = client.get_session("expired", "rt-0")
        assert session.access_token == "at-1"
        assert http.post.call_count == 1
        assert http.post.call_args.kwargs["params"] == {"grant_type": "refresh_token"}

    def test_failed_refresh_is_none(self, client, http):
        http.get.return_value = _response(401, {})
        http.post.return_value = _response(400, {})
        assert client.get_session("expired", "rt-0") is None

    def test_no_tokens(self, client, http):
        assert client.get_session(None, None) is None
        http.get.assert_not_called()


class TestSignOut:
    def test_posts_logout(self, client, http):
        http.post.return_value = _response(204)
        client.sign_out("at-1")
        assert http.post.call_args.args[0] == "https://project.supabase.co/auth/v1/logout"

    def test_network_error_is_swallowed(self, client, http):
        http.post.side_effect = requests.ConnectionError("refused")
        client.sign_out("at-1")
