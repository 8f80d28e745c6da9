from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import pytest
from pymongo.errors import PyMongoError

from clientdesk.core.local_migration import migrate_local_store
from clientdesk.core.local_store import LocalKeyValueStore
from clientdesk.core.mongo_migrations import MIGRATIONS, apply_mongo_migrations
from tests.fakes import FakeCollection, FakeDatabase

NOW = datetime(2026, 10, 19, 9, 0, tzinfo=timezone.utc)


def _seed(kv: LocalKeyValueStore) -> None:
    kv.set_list(
        "clients",
        [
            {"shopId": "S-1", "clientName": "Ana", "agent": "Ken", "kycDate": "2026-05-01"},
            {"shopId": "S-2", "clientName": "Ben", "agent": "Mar", "status": "Done"},
        ],
    )
    kv.set_list(
        "orders",
        [{"orderId": "O-1", "shopId": "S-1", "price": 120, "location": "Cebu"}],
    )
    kv.set_list(
        "deposits",
        [{"depositId": "D-1", "amount": 50, "paymentMode": "GCash", "date": "2026-09-01"}],
    )
    kv.set_list("withdrawals", [{"withdrawalId": "W-1", "amount": 20}])
    kv.set_list(
        "orderRequests",
        [{"shopId": "S-1", "status": "Pending", "createdAt": "2026-08-01T10:00:00Z"}],
    )


def test_apply_mongo_migrations_creates_indexes_once() -> None:
    db = FakeDatabase()

    first = apply_mongo_migrations(db)
    second = apply_mongo_migrations(db)

    assert first == [migration_id for migration_id, _ in MIGRATIONS]
    assert second == []
    assert ("id", {"unique": True}) in db["clientAssignments"].indexes
    assert len(db["schema_migrations"].docs) == len(MIGRATIONS)


def test_apply_mongo_migrations_without_database_is_noop() -> None:
    assert apply_mongo_migrations(None) == []


def test_migrate_local_store_maps_every_kind(tmp_path: Path) -> None:
    kv = LocalKeyValueStore(tmp_path)
    _seed(kv)
    db = FakeDatabase()

    counts = migrate_local_store(kv, db, now=NOW)

    assert counts == {
        "clients": 2,
        "orders": 1,
        "deposits": 1,
        "withdrawals": 1,
        "orderRequests": 1,
    }
    ana, ben = db["clients"].docs
    assert ana["kycDate"] == datetime(2026, 5, 1, tzinfo=timezone.utc)
    assert ana["notes"] == ""
    assert ana["createdAt"] == NOW and ana["updatedAt"] == NOW
    assert ben["kycDate"] is None
    assert ben["status"] == "Done"

    [order] = db["orders"].docs
    assert order["date"] == NOW
    assert order["price"] == 120

    [deposit] = db["deposits"].docs
    assert deposit["depositId"] == "D-1"
    assert deposit["date"] == datetime(2026, 9, 1, tzinfo=timezone.utc)

    [withdrawal] = db["withdrawals"].docs
    assert withdrawal["withdrawalId"] == "W-1"
    assert "depositId" not in withdrawal

    [request] = db["orderRequests"].docs
    assert request["createdAt"] == datetime(2026, 8, 1, 10, 0, tzinfo=timezone.utc)
    assert request["updatedAt"] == NOW
    assert request["remarks"] == ""


def test_migrate_local_store_dry_run_writes_nothing(tmp_path: Path) -> None:
    kv = LocalKeyValueStore(tmp_path)
    _seed(kv)

    counts = migrate_local_store(kv, {}, now=NOW, dry_run=True)

    assert counts["clients"] == 2
    assert sum(counts.values()) == 6


def test_migrate_local_store_stops_on_failed_insert(tmp_path: Path) -> None:
    kv = LocalKeyValueStore(tmp_path)
    _seed(kv)
    db = FakeDatabase()
    db.collections["orders"] = FakeCollection(fail=True)

    with pytest.raises(PyMongoError):
        migrate_local_store(kv, db, now=NOW)

    assert len(db["clients"].docs) == 2
    assert db["deposits"].docs == []
