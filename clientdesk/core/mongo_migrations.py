"""Versioned MongoDB index migrations for the dashboard collections."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable

from pymongo.errors import PyMongoError

from clientdesk.core.logging import CORRELATION_ID_CTX
from clientdesk.core.mongo import ASSIGNMENTS_COLLECTION, CLIENTS_COLLECTION

LOGGER = logging.getLogger(__name__)

MigrationFn = Callable[[Any], None]


def _migration_20261001_01_assignment_indexes(db: Any) -> None:
    db[ASSIGNMENTS_COLLECTION].create_index("id", unique=True)
    db[ASSIGNMENTS_COLLECTION].create_index("assignedAgent")
    db[ASSIGNMENTS_COLLECTION].create_index("updatedAt")


def _migration_20261001_02_client_indexes(db: Any) -> None:
    db[CLIENTS_COLLECTION].create_index("shopId")
    db[CLIENTS_COLLECTION].create_index("agent")


MIGRATIONS: list[tuple[str, MigrationFn]] = [
    ("20261001_01_assignment_indexes", _migration_20261001_01_assignment_indexes),
    ("20261001_02_client_indexes", _migration_20261001_02_client_indexes),
]


def apply_mongo_migrations(db: Any | None) -> list[str]:
    """Apply pending migrations to ``db`` and return the ids that ran."""
    if db is None:
        return []
    applied: list[str] = []
    try:
        migration_collection = db["schema_migrations"]
        migration_collection.create_index("migration_id", unique=True)
        for migration_id, migration_fn in MIGRATIONS:
            if migration_collection.find_one({"migration_id": migration_id}):
                continue
            migration_fn(db)
            migration_collection.insert_one(
                {
                    "migration_id": migration_id,
                    "applied_at": datetime.now(timezone.utc),
                    "correlation_id": CORRELATION_ID_CTX.get(),
                }
            )
            applied.append(migration_id)
    except PyMongoError:
        LOGGER.exception("MongoDB migrations failed")
    return applied
