from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Any

from pymongo.errors import PyMongoError

from clientdesk.assignments.errors import OperationFailedError
from clientdesk.core.local_store import LocalKeyValueStore
from clientdesk.core.mongo import CLIENTS_COLLECTION

LOGGER = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class ClientsRepository:
    """``clients`` collection with MongoDB primary and local-store fallback."""

    def __init__(self, collection: Any | None, fallback: LocalKeyValueStore) -> None:
        self._collection = collection
        self._fallback = fallback
        if collection is None:
            LOGGER.warning("Using local fallback store for clients.")

    def list_clients(self) -> list[dict[str, Any]]:
        if self._collection is None:
            return [
                {"id": str(row.get("id") or ""), **row}
                for row in self._fallback.get_list(CLIENTS_COLLECTION)
            ]
        try:
            docs = list(self._collection.find({}))
        except PyMongoError as exc:
            raise OperationFailedError("Failed to fetch clients") from exc
        result: list[dict[str, Any]] = []
        for doc in docs:
            row = dict(doc)
            object_id = row.pop("_id", None)
            row["id"] = str(row.get("id") or object_id or "")
            result.append(row)
        return result

    def insert_client(self, document: dict[str, Any]) -> str:
        """Insert with server timestamps and return the new id."""
        client_id = uuid.uuid4().hex
        if self._collection is None:
            now = _now().isoformat()
            items = self._fallback.get_list(CLIENTS_COLLECTION)
            items.append(
                {
                    **_json_safe(document),
                    "id": client_id,
                    "createdAt": now,
                    "updatedAt": now,
                }
            )
            self._fallback.set_list(CLIENTS_COLLECTION, items)
            return client_id
        try:
            self._collection.update_one(
                {"id": client_id},
                {
                    "$set": {**document, "id": client_id},
                    "$currentDate": {"createdAt": True, "updatedAt": True},
                },
                upsert=True,
            )
        except PyMongoError as exc:
            raise OperationFailedError("Failed to add client") from exc
        return client_id


def _json_safe(document: dict[str, Any]) -> dict[str, Any]:
    return {
        key: value.isoformat() if isinstance(value, datetime) else value
        for key, value in document.items()
    }
