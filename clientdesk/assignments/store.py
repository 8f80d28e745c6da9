"""Assignment storage: a remote MongoDB collection or a local JSON fallback.

Both implementations satisfy ``AssignmentStore``. Which one a caller gets is
decided once, by session presence, in ``select_assignment_store``.
"""

from __future__ import annotations

import logging
import threading
import time
import uuid
from datetime import date, datetime, timezone
from typing import Any, Callable, Protocol

from pymongo.errors import PyMongoError

from clientdesk.assignments.errors import (
    AssignmentError,
    AssignmentNotFoundError,
    AssignmentValidationError,
    OperationFailedError,
    PermissionDeniedError,
)
from clientdesk.assignments.models import (
    EDITABLE_FIELDS,
    REQUIRED_FIELDS,
    ClientAssignment,
    normalize_document,
)
from clientdesk.auth.models import Session
from clientdesk.core.local_store import LocalKeyValueStore

LOGGER = logging.getLogger(__name__)

OnChange = Callable[[list[ClientAssignment]], None]
OnError = Callable[[AssignmentError], None]

LOCAL_STORAGE_KEY = "assignedClients"


class Subscription(Protocol):
    def close(self) -> None:
        """Stop delivering changes."""


class AssignmentStore(Protocol):
    """Operations the dashboard needs from an assignment store."""

    def list_all(self) -> list[ClientAssignment]:
        """Return a snapshot of every record."""

    def subscribe(
        self, on_change: OnChange, on_error: OnError | None = None
    ) -> Subscription:
        """Deliver the full list now and again after every change."""

    def create(self, session: Session | None, record: dict[str, Any]) -> ClientAssignment:
        """Persist a new record and return it with its assigned id."""

    def update(
        self, session: Session | None, client_id: str, field: str, value: str
    ) -> None:
        """Change a single field of one record."""

    def delete(self, session: Session | None, client_id: str) -> None:
        """Remove one record; administrators only."""


def validate_field_update(field: str, value: str) -> str:
    """Check a single-field edit and return the value to store."""
    if field not in EDITABLE_FIELDS:
        raise AssignmentValidationError(f"Field is not editable: {field}")
    cleaned = (value or "").strip()
    if field in REQUIRED_FIELDS and not cleaned:
        raise AssignmentValidationError(f"{field} must not be empty")
    if field == "date":
        try:
            date.fromisoformat(cleaned)
        except ValueError as exc:
            raise AssignmentValidationError(
                f"date must be yyyy-mm-dd, got {value!r}"
            ) from exc
    return cleaned


def require_admin(session: Session | None) -> None:
    if session is None or not session.is_admin:
        raise PermissionDeniedError("Only administrators can delete client records")


def _validate_new_record(record: dict[str, Any]) -> None:
    missing = [key for key in REQUIRED_FIELDS if not str(record.get(key) or "").strip()]
    if missing:
        raise AssignmentValidationError("Name and age are required")


class _LocalSubscription:
    def __init__(self, store: "LocalAssignmentStore", token: int) -> None:
        self._store = store
        self._token = token

    def close(self) -> None:
        self._store._remove_listener(self._token)


class LocalAssignmentStore:
    """Unauthenticated fallback: the whole list lives under one local key."""

    def __init__(
        self,
        kv: LocalKeyValueStore,
        *,
        clock: Callable[[], date] = date.today,
    ) -> None:
        self._kv = kv
        self._clock = clock
        self._lock = threading.RLock()
        self._listeners: dict[int, OnChange] = {}
        self._next_token = 0
        self._records = [
            normalize_document(doc, today=clock())
            for doc in kv.get_list(LOCAL_STORAGE_KEY)
        ]

    def list_all(self) -> list[ClientAssignment]:
        with self._lock:
            return list(self._records)

    def subscribe(
        self, on_change: OnChange, on_error: OnError | None = None
    ) -> Subscription:
        with self._lock:
            token = self._next_token
            self._next_token += 1
            self._listeners[token] = on_change
            snapshot = list(self._records)
        on_change(snapshot)
        return _LocalSubscription(self, token)

    def _remove_listener(self, token: int) -> None:
        with self._lock:
            self._listeners.pop(token, None)

    def _new_id(self) -> str:
        candidate = int(time.time() * 1000)
        taken = {record.id for record in self._records}
        while str(candidate) in taken:
            candidate += 1
        return str(candidate)

    def _commit(self, records: list[ClientAssignment]) -> None:
        # The in-memory list only moves once the file write has succeeded.
        try:
            self._kv.set_list(
                LOCAL_STORAGE_KEY, [record.to_storage() for record in records]
            )
        except OSError as exc:
            LOGGER.exception(
                "Failed to save local assignments", extra={"collection": LOCAL_STORAGE_KEY}
            )
            raise OperationFailedError("Failed to save client assignments locally") from exc
        self._records = records
        listeners = list(self._listeners.values())
        snapshot = list(records)
        for listener in listeners:
            listener(snapshot)

    def create(self, session: Session | None, record: dict[str, Any]) -> ClientAssignment:
        _validate_new_record(record)
        now = datetime.now(timezone.utc)
        with self._lock:
            created = normalize_document(
                {**record, "id": self._new_id(), "createdAt": now, "updatedAt": now},
                today=self._clock(),
            )
            self._commit([*self._records, created])
        LOGGER.info("Created local assignment", extra={"client_id": created.id})
        return created

    def update(
        self, session: Session | None, client_id: str, field: str, value: str
    ) -> None:
        cleaned = validate_field_update(field, value)
        with self._lock:
            if not any(record.id == client_id for record in self._records):
                raise AssignmentNotFoundError(f"Client assignment not found: {client_id}")
            now = datetime.now(timezone.utc)
            updated = [
                normalize_document(
                    {**record.to_document(), field: cleaned, "updatedAt": now},
                    today=self._clock(),
                )
                if record.id == client_id
                else record
                for record in self._records
            ]
            self._commit(updated)

    def delete(self, session: Session | None, client_id: str) -> None:
        require_admin(session)
        with self._lock:
            remaining = [record for record in self._records if record.id != client_id]
            if len(remaining) == len(self._records):
                raise AssignmentNotFoundError(f"Client assignment not found: {client_id}")
            self._commit(remaining)
        LOGGER.info("Deleted local assignment", extra={"client_id": client_id})


class _ChangeStreamSubscription:
    """Background watcher that re-reads the collection after every change."""

    def __init__(
        self,
        store: "RemoteAssignmentStore",
        on_change: OnChange,
        on_error: OnError | None,
    ) -> None:
        self._store = store
        self._on_change = on_change
        self._on_error = on_error
        self._stop = threading.Event()
        self._thread = threading.Thread(
            target=self._run, name="client-assignments-watch", daemon=True
        )

    def start(self) -> None:
        self._thread.start()

    def close(self) -> None:
        self._stop.set()
        if self._thread.is_alive() and self._thread is not threading.current_thread():
            self._thread.join(timeout=5)

    def _run(self) -> None:
        try:
            with self._store.collection.watch(
                max_await_time_ms=self._store.poll_interval_ms
            ) as stream:
                self._on_change(self._store.list_all())
                while not self._stop.is_set() and stream.alive:
                    if stream.try_next() is None:
                        continue
                    if self._stop.is_set():
                        break
                    self._on_change(self._store.list_all())
        except (PyMongoError, OperationFailedError) as exc:
            if self._stop.is_set():
                return
            LOGGER.exception("Error watching client assignments")
            if self._on_error is not None:
                self._on_error(
                    exc
                    if isinstance(exc, OperationFailedError)
                    else OperationFailedError("Live client assignment updates stopped")
                )


class RemoteAssignmentStore:
    """Authenticated path backed by the ``clientAssignments`` collection."""

    def __init__(
        self,
        collection: Any,
        *,
        clock: Callable[[], date] = date.today,
        poll_interval_ms: int = 1000,
    ) -> None:
        self.collection = collection
        self.poll_interval_ms = poll_interval_ms
        self._clock = clock

    def list_all(self) -> list[ClientAssignment]:
        try:
            docs = list(self.collection.find({}, {"_id": 0}))
        except PyMongoError as exc:
            LOGGER.exception("Error fetching client assignments")
            raise OperationFailedError("Failed to load client assignments") from exc
        today = self._clock()
        return [normalize_document(doc, today=today) for doc in docs]

    def subscribe(
        self, on_change: OnChange, on_error: OnError | None = None
    ) -> Subscription:
        subscription = _ChangeStreamSubscription(self, on_change, on_error)
        subscription.start()
        return subscription

    def create(self, session: Session | None, record: dict[str, Any]) -> ClientAssignment:
        _validate_new_record(record)
        client_id = uuid.uuid4().hex
        document = {
            key: value
            for key, value in record.items()
            if key not in {"id", "createdAt", "updatedAt"}
        }
        document["id"] = client_id
        try:
            self.collection.update_one(
                {"id": client_id},
                {
                    "$set": document,
                    "$currentDate": {"createdAt": True, "updatedAt": True},
                },
                upsert=True,
            )
            stored = self.collection.find_one({"id": client_id}, {"_id": 0})
        except PyMongoError as exc:
            LOGGER.exception("Error adding client assignment")
            raise OperationFailedError("Failed to add client assignment") from exc
        LOGGER.info("Created client assignment", extra={"client_id": client_id})
        return normalize_document(stored or document, today=self._clock())

    def update(
        self, session: Session | None, client_id: str, field: str, value: str
    ) -> None:
        cleaned = validate_field_update(field, value)
        try:
            result = self.collection.update_one(
                {"id": client_id},
                {"$set": {field: cleaned}, "$currentDate": {"updatedAt": True}},
            )
        except PyMongoError as exc:
            LOGGER.exception("Error updating client", extra={"client_id": client_id})
            raise OperationFailedError("Failed to update client information") from exc
        if not result.matched_count:
            raise AssignmentNotFoundError(f"Client assignment not found: {client_id}")

    def delete(self, session: Session | None, client_id: str) -> None:
        require_admin(session)
        try:
            result = self.collection.delete_one({"id": client_id})
        except PyMongoError as exc:
            LOGGER.exception("Error deleting client", extra={"client_id": client_id})
            raise OperationFailedError("Failed to delete client") from exc
        if not result.deleted_count:
            raise AssignmentNotFoundError(f"Client assignment not found: {client_id}")
        LOGGER.info("Deleted client assignment", extra={"client_id": client_id})


def select_assignment_store(
    session: Session | None,
    *,
    local: LocalAssignmentStore,
    remote: RemoteAssignmentStore | None,
) -> AssignmentStore:
    """Remote store for authenticated callers, local fallback otherwise."""
    if session is None:
        return local
    if remote is None:
        LOGGER.warning("Remote store unavailable. Using local assignment store.")
        return local
    return remote
