"""MongoDB connection helper shared by the remote stores and scripts."""

from __future__ import annotations

import logging
from typing import Any

import pymongo
from pymongo.errors import PyMongoError

from clientdesk.core.config import StoreConfig

LOGGER = logging.getLogger(__name__)

ASSIGNMENTS_COLLECTION = "clientAssignments"
CLIENTS_COLLECTION = "clients"
ORDERS_COLLECTION = "orders"
DEPOSITS_COLLECTION = "deposits"
WITHDRAWALS_COLLECTION = "withdrawals"
ORDER_REQUESTS_COLLECTION = "orderRequests"


def connect_database(config: StoreConfig) -> Any | None:
    """Return the configured database, or ``None`` when MongoDB is unavailable."""
    if not config.mongo_uri:
        LOGGER.warning("MONGODB_URI is not set. Remote document store is disabled.")
        return None
    try:
        client: Any = pymongo.MongoClient(
            config.mongo_uri,
            serverSelectionTimeoutMS=config.server_selection_timeout_ms,
        )
        client.admin.command("ping")
    except PyMongoError:
        LOGGER.exception("MongoDB connection failed. Remote document store is disabled.")
        return None
    LOGGER.info("Connected to MongoDB: db=%s", config.mongo_db)
    return client[config.mongo_db]
