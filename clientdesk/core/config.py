"""Application configuration loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass


def _csv_env(name: str, default: str) -> list[str]:
    return [item.strip() for item in os.getenv(name, default).split(",") if item.strip()]


@dataclass(frozen=True)
class AuthConfig:
    """Verification settings for tokens issued by the external auth provider."""

    secret_key: str
    issuer: str
    admin_emails: list[str]


@dataclass(frozen=True)
class StoreConfig:
    """Remote document store and local fallback store settings."""

    mongo_uri: str
    mongo_db: str
    local_store_dir: str
    server_selection_timeout_ms: int


@dataclass(frozen=True)
class LoggingConfig:
    """Structured logging configuration."""

    level: str


@dataclass(frozen=True)
class SecurityConfig:
    """API perimeter security settings."""

    cors_allowed_origins: list[str]
    request_max_bytes: int


@dataclass(frozen=True)
class AppConfig:
    """Top-level application configuration."""

    auth: AuthConfig
    store: StoreConfig
    logging: LoggingConfig
    security: SecurityConfig

    @staticmethod
    def from_env() -> "AppConfig":
        """Build app config from process environment."""
        secret_key = (
            os.getenv("AUTH_SECRET_KEY", "").strip() or "dev-insecure-secret-change-me"
        )
        issuer = os.getenv("AUTH_ISSUER", "clientdesk").strip() or "clientdesk"
        admin_emails = [
            email.lower()
            for email in _csv_env(
                "AUTH_ADMIN_EMAILS", "admin@example.com,manager@example.com"
            )
        ]
        mongo_uri = os.getenv("MONGODB_URI", "").strip()
        mongo_db = os.getenv("MONGODB_DB", "clientdesk").strip() or "clientdesk"
        local_store_dir = (
            os.getenv("LOCAL_STORE_DIR", "runtime/local_store").strip()
            or "runtime/local_store"
        )
        selection_timeout = int(os.getenv("MONGODB_SERVER_SELECTION_TIMEOUT_MS", "3000"))
        log_level = os.getenv("LOG_LEVEL", "INFO").strip() or "INFO"
        cors_allowed_origins = _csv_env(
            "CORS_ALLOWED_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000"
        )
        request_max_bytes = int(os.getenv("REQUEST_MAX_BYTES", str(1024 * 1024)))

        return AppConfig(
            auth=AuthConfig(
                secret_key=secret_key,
                issuer=issuer,
                admin_emails=admin_emails,
            ),
            store=StoreConfig(
                mongo_uri=mongo_uri,
                mongo_db=mongo_db,
                local_store_dir=local_store_dir,
                server_selection_timeout_ms=selection_timeout,
            ),
            logging=LoggingConfig(level=log_level),
            security=SecurityConfig(
                cors_allowed_origins=cors_allowed_origins,
                request_max_bytes=request_max_bytes,
            ),
        )
