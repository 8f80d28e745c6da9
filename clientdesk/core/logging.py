"""Structured JSON logging for the dashboard backend.

Every line carries the request correlation id and, once a session has been
resolved, the signed-in user's email. Store modules attach ``client_id``,
``collection`` and ``field`` through ``extra=``.
"""

from __future__ import annotations

import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any

CORRELATION_ID_CTX: ContextVar[str] = ContextVar("correlation_id", default="")
SESSION_EMAIL_CTX: ContextVar[str] = ContextVar("session_email", default="")

SERVICE_NAME = "clientdesk"

_EXTRA_FIELDS = ("client_id", "collection", "field", "path", "method", "status_code")

# Driver chatter (heartbeats, topology events) stays out of INFO output.
_NOISY_LOGGERS = ("pymongo", "uvicorn.access")


class JsonLogFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "service": SERVICE_NAME,
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "correlation_id": CORRELATION_ID_CTX.get(),
        }
        user = SESSION_EMAIL_CTX.get()
        if user:
            payload["user"] = user

        for key in _EXTRA_FIELDS:
            value = getattr(record, key, None)
            if value not in (None, ""):
                payload[key] = value

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO") -> None:
    """Send every logger through one JSON stdout handler."""
    normalized_level = getattr(logging, level.upper(), logging.INFO)
    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setFormatter(JsonLogFormatter())

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(normalized_level)
    root_logger.addHandler(handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(normalized_level, logging.WARNING))


def set_correlation_id(correlation_id: str) -> None:
    """Store correlation id in request-local context."""
    CORRELATION_ID_CTX.set(correlation_id)


def set_session_email(email: str) -> None:
    """Tag the rest of the request's log lines with the signed-in user."""
    SESSION_EMAIL_CTX.set(email)
