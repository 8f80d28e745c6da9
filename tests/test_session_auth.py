from __future__ import annotations

import asyncio
import time

import pytest

from clientdesk.api.errors import ApiError
from clientdesk.auth.session import (
    SessionResolver,
    create_session_dependencies,
    extract_bearer_token,
)
from clientdesk.core.config import AuthConfig
from clientdesk.core.security import TokenError, sign_token, verify_token

SECRET = "test-secret"


def _config() -> AuthConfig:
    return AuthConfig(secret_key=SECRET, issuer="clientdesk", admin_emails=["boss@example.com"])


def _token(**claims: object) -> str:
    payload = {"iss": "clientdesk", "sub": "u-1", "email": "ken@example.com"}
    payload.update(claims)
    return sign_token(payload, SECRET)


def test_verify_token_round_trip_and_expiry() -> None:
    token = _token(exp=int(time.time()) + 60)

    assert verify_token(token, SECRET)["email"] == "ken@example.com"
    with pytest.raises(TokenError):
        verify_token(token, SECRET, now=int(time.time()) + 120)


def test_verify_token_rejects_forgery_and_garbage() -> None:
    with pytest.raises(TokenError):
        verify_token(_token(), "other-secret")
    with pytest.raises(TokenError):
        verify_token("not-a-token", SECRET)


def test_extract_bearer_token() -> None:
    assert extract_bearer_token("Bearer abc") == "abc"
    assert extract_bearer_token("bearer  abc ") == "abc"
    assert extract_bearer_token("Basic abc") == ""
    assert extract_bearer_token(None) == ""


def test_resolver_builds_sessions_and_admin_flag() -> None:
    resolver = SessionResolver(_config())

    agent = resolver.resolve(_token())
    by_role = resolver.resolve(_token(role="admin"))
    by_email = resolver.resolve(_token(email="Boss@Example.com"))

    assert agent is not None and agent.is_admin is False
    assert agent.user_id == "u-1"
    assert by_role is not None and by_role.is_admin is True
    assert by_email is not None and by_email.is_admin is True


def test_resolver_rejects_wrong_issuer_and_empty_token() -> None:
    resolver = SessionResolver(_config())

    assert resolver.resolve(_token(iss="someone-else")) is None
    assert resolver.resolve("") is None


def test_session_dependencies() -> None:
    optional_session, require_session = create_session_dependencies(
        SessionResolver(_config())
    )

    assert asyncio.run(optional_session(authorization=None)) is None
    session = asyncio.run(require_session(authorization=f"Bearer {_token()}"))
    assert session.email == "ken@example.com"
    with pytest.raises(ApiError) as exc:
        asyncio.run(require_session(authorization="Bearer broken"))
    assert exc.value.status_code == 401
