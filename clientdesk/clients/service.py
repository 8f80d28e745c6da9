"""Business logic for the client REST endpoints."""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timezone
from typing import Any, Protocol

DEFAULT_CLIENT_STATUS = "In Process"


class ClientsRepositoryProtocol(Protocol):
    def list_clients(self) -> list[dict[str, Any]]:
        """Return every client document as ``{id, ...fields}``."""

    def insert_client(self, document: dict[str, Any]) -> str:
        """Insert a client document and return its id."""


def parse_kyc_date(value: Any) -> datetime | None:
    """Accept ISO dates or datetimes; anything empty becomes ``None``."""
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        return value
    raw = str(value).strip()
    try:
        parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        parsed = datetime.combine(date.fromisoformat(raw), time.min)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class ClientsService:
    def __init__(self, *, repo: ClientsRepositoryProtocol, logger: logging.Logger) -> None:
        self._repo = repo
        self._logger = logger

    def list_clients(self) -> list[dict[str, Any]]:
        return self._repo.list_clients()

    def create_client(self, submitted: dict[str, Any]) -> dict[str, Any]:
        """Store a client and echo the submitted fields with the new id."""
        document = {
            "shopId": submitted.get("shopId"),
            "clientName": submitted.get("clientName"),
            "agent": submitted.get("agent"),
            "kycDate": parse_kyc_date(submitted.get("kycDate")),
            "status": submitted.get("status") or DEFAULT_CLIENT_STATUS,
            "notes": submitted.get("notes") or "",
        }
        client_id = self._repo.insert_client(document)
        self._logger.info("client_created", extra={"client_id": client_id})
        return {"id": client_id, **submitted}
