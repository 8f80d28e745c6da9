"""Copy the local fallback arrays into their remote collections."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Mapping

from clientdesk.core.local_store import LocalKeyValueStore
from clientdesk.core.mongo import (
    CLIENTS_COLLECTION,
    DEPOSITS_COLLECTION,
    ORDER_REQUESTS_COLLECTION,
    ORDERS_COLLECTION,
    WITHDRAWALS_COLLECTION,
)

LOGGER = logging.getLogger(__name__)

RowMapper = Callable[[dict[str, Any], datetime], dict[str, Any]]


def _parse_datetime(value: Any, default: datetime | None) -> datetime | None:
    if value in (None, ""):
        return default
    if isinstance(value, datetime):
        return value
    raw = str(value).strip()
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError:
        LOGGER.warning("Unparseable date %r, using default", value)
        return default
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _stamped(row: dict[str, Any], now: datetime) -> dict[str, Any]:
    row.setdefault("createdAt", now)
    row["updatedAt"] = now
    return row


def _map_client(item: dict[str, Any], now: datetime) -> dict[str, Any]:
    return _stamped(
        {
            "shopId": item.get("shopId"),
            "clientName": item.get("clientName"),
            "agent": item.get("agent"),
            "kycDate": _parse_datetime(item.get("kycDate"), None),
            "status": item.get("status"),
            "notes": item.get("notes") or "",
        },
        now,
    )


def _map_order(item: dict[str, Any], now: datetime) -> dict[str, Any]:
    return _stamped(
        {
            "orderId": item.get("orderId"),
            "shopId": item.get("shopId"),
            "clientName": item.get("clientName"),
            "agent": item.get("agent"),
            "date": _parse_datetime(item.get("date"), now),
            "location": item.get("location"),
            "price": item.get("price"),
            "status": item.get("status"),
        },
        now,
    )


def _payment_mapper(id_field: str) -> RowMapper:
    def _map(item: dict[str, Any], now: datetime) -> dict[str, Any]:
        return _stamped(
            {
                id_field: item.get(id_field),
                "shopId": item.get("shopId"),
                "clientName": item.get("clientName"),
                "agent": item.get("agent"),
                "date": _parse_datetime(item.get("date"), now),
                "amount": item.get("amount"),
                "paymentMode": item.get("paymentMode"),
            },
            now,
        )

    return _map


def _map_order_request(item: dict[str, Any], now: datetime) -> dict[str, Any]:
    return _stamped(
        {
            "shopId": item.get("shopId"),
            "clientName": item.get("clientName"),
            "agent": item.get("agent"),
            "date": _parse_datetime(item.get("date"), now),
            "location": item.get("location"),
            "price": item.get("price"),
            "status": item.get("status"),
            "remarks": item.get("remarks") or "",
            # Requests keep the time they were originally raised.
            "createdAt": _parse_datetime(item.get("createdAt"), now),
        },
        now,
    )


# Local key -> (target collection, row mapper), in migration order.
MIGRATION_PLAN: tuple[tuple[str, str, RowMapper], ...] = (
    ("clients", CLIENTS_COLLECTION, _map_client),
    ("orders", ORDERS_COLLECTION, _map_order),
    ("deposits", DEPOSITS_COLLECTION, _payment_mapper("depositId")),
    ("withdrawals", WITHDRAWALS_COLLECTION, _payment_mapper("withdrawalId")),
    ("orderRequests", ORDER_REQUESTS_COLLECTION, _map_order_request),
)


def migrate_local_store(
    kv: LocalKeyValueStore,
    collections: Mapping[str, Any],
    *,
    now: datetime | None = None,
    dry_run: bool = False,
) -> dict[str, int]:
    """Insert every local record into its collection and return per-collection counts.

    Runs once; there is no batching, rollback or duplicate guard. A failed insert
    propagates and leaves earlier inserts in place.
    """
    stamp = now or datetime.now(timezone.utc)
    counts: dict[str, int] = {}
    for key, collection_name, mapper in MIGRATION_PLAN:
        rows = [
            mapper(item, stamp) for item in kv.get_list(key) if isinstance(item, dict)
        ]
        counts[collection_name] = len(rows)
        if dry_run:
            continue
        collection = collections[collection_name]
        for row in rows:
            collection.insert_one(row)
        LOGGER.info(
            "Migrated %d local records",
            len(rows),
            extra={"collection": collection_name},
        )
    return counts
