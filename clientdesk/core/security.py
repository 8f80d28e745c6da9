"""Signing and verification of session tokens shared with the auth provider.

Tokens use the compact three-part JWT layout with an HS256 signature. The
dashboard never issues tokens for end users; ``sign_token`` exists for service
accounts, scripts and tests.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
import time
from typing import Any

_HEADER = {"alg": "HS256", "typ": "JWT"}


class TokenError(ValueError):
    """Raised when a token is malformed, forged or expired."""


def _b64url_encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode("utf-8").rstrip("=")


def _b64url_decode(value: str) -> bytes:
    padding = "=" * (-len(value) % 4)
    try:
        return base64.urlsafe_b64decode((value + padding).encode("utf-8"))
    except (ValueError, TypeError) as exc:
        raise TokenError("Malformed token segment") from exc


def _json_segment(value: dict[str, Any]) -> str:
    return _b64url_encode(json.dumps(value, separators=(",", ":")).encode("utf-8"))


def _signature(signing_input: bytes, secret_key: str) -> bytes:
    return hmac.new(secret_key.encode("utf-8"), signing_input, hashlib.sha256).digest()


def sign_token(claims: dict[str, Any], secret_key: str) -> str:
    """Return a signed token carrying ``claims``."""
    head = f"{_json_segment(_HEADER)}.{_json_segment(claims)}"
    return f"{head}.{_b64url_encode(_signature(head.encode('utf-8'), secret_key))}"


def verify_token(token: str, secret_key: str, *, now: int | None = None) -> dict[str, Any]:
    """Verify signature and expiry, returning the decoded claims."""
    parts = (token or "").split(".")
    if len(parts) != 3:
        raise TokenError("Malformed token")
    header_part, claims_part, signature_part = parts

    expected = _signature(f"{header_part}.{claims_part}".encode("utf-8"), secret_key)
    if not hmac.compare_digest(expected, _b64url_decode(signature_part)):
        raise TokenError("Invalid token signature")

    try:
        claims = json.loads(_b64url_decode(claims_part).decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise TokenError("Invalid token payload") from exc
    if not isinstance(claims, dict):
        raise TokenError("Invalid token payload")

    expires_at = int(claims.get("exp") or 0)
    current = int(time.time()) if now is None else now
    if expires_at and expires_at < current:
        raise TokenError("Token expired")
    return claims
