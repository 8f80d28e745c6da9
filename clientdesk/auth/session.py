"""Per-request session resolution from bearer tokens."""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable

from fastapi import Header

from clientdesk.api.errors import ApiError, ApiErrorCode
from clientdesk.auth.models import Session
from clientdesk.core.config import AuthConfig
from clientdesk.core.logging import set_session_email
from clientdesk.core.security import TokenError, verify_token

LOGGER = logging.getLogger(__name__)


def extract_bearer_token(authorization: str | None) -> str:
    """Extract bearer token from an Authorization header value."""
    parts = (authorization or "").strip().split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return ""
    return parts[1].strip()


class SessionResolver:
    """Turn provider-issued tokens into ``Session`` objects."""

    def __init__(self, config: AuthConfig) -> None:
        self._config = config

    def session_from_claims(self, claims: dict[str, Any]) -> Session:
        email = str(claims.get("email") or "").strip().lower()
        role = str(claims.get("role") or "agent").strip().lower() or "agent"
        return Session(
            user_id=str(claims.get("sub") or ""),
            email=email,
            role=role,
            is_admin=role == "admin" or email in self._config.admin_emails,
        )

    def resolve(self, token: str) -> Session | None:
        """Return the session for ``token`` or ``None`` if it does not verify."""
        if not token:
            return None
        try:
            claims = verify_token(token, self._config.secret_key)
        except TokenError as exc:
            LOGGER.info("Rejected session token: %s", exc)
            return None
        if str(claims.get("iss") or "") != self._config.issuer:
            LOGGER.info("Rejected session token: unexpected issuer")
            return None
        return self.session_from_claims(claims)


def create_session_dependencies(
    resolver: SessionResolver,
) -> tuple[
    Callable[..., Awaitable[Session | None]], Callable[..., Awaitable[Session]]
]:
    """Build FastAPI dependencies for optional and required sessions."""

    async def optional_session(
        authorization: str | None = Header(default=None),
    ) -> Session | None:
        session = resolver.resolve(extract_bearer_token(authorization))
        if session is not None:
            set_session_email(session.email)
        return session

    async def require_session(
        authorization: str | None = Header(default=None),
    ) -> Session:
        session = resolver.resolve(extract_bearer_token(authorization))
        if session is None:
            raise ApiError(
                status_code=401,
                error_code=ApiErrorCode.UNAUTHORIZED,
                message="Unauthorized",
            )
        set_session_email(session.email)
        return session

    return optional_session, require_session
