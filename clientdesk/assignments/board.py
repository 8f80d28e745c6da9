"""Dashboard view model for the agent-assignment table."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Literal

from clientdesk.assignments.editing import EditOutcome, EditResult, InlineEditController
from clientdesk.assignments.errors import (
    AssignmentError,
    MissingRequiredFieldError,
    PermissionDeniedError,
)
from clientdesk.assignments.filters import (
    FilterCriteria,
    agent_workloads,
    apply_filters,
    paginate,
    top_agent,
    unique_applications,
    unique_locations,
)
from clientdesk.assignments.models import ClientAssignment
from clientdesk.assignments.parser import build_new_assignment, parse_client_text
from clientdesk.assignments.store import AssignmentStore, LocalAssignmentStore, Subscription
from clientdesk.auth.models import Session

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notice:
    """Toast-style message shown to the operator."""

    title: str
    description: str
    variant: Literal["default", "destructive"] = "default"


@dataclass(frozen=True)
class BoardStats:
    total_clients: int
    agent_workloads: dict[str, int]
    top_agent: str
    locations: list[str]
    applications: list[str]


class AssignmentBoard:
    """Holds the live in-memory list and routes user actions to the store."""

    def __init__(
        self,
        store: AssignmentStore,
        session: Session | None,
        *,
        fallback: LocalAssignmentStore | None = None,
        clock: Callable[[], date] = date.today,
    ) -> None:
        self._store = store
        self._session = session
        self._fallback = fallback
        self._clock = clock
        self._lock = threading.RLock()
        self._records: list[ClientAssignment] = []
        self._subscription: Subscription | None = None
        self.loading = True
        self.criteria = FilterCriteria()
        self.rows_per_page = 10
        self.client_text = ""
        self.notices: list[Notice] = []
        self.editor = InlineEditController(store, session, self.records)

    def __enter__(self) -> "AssignmentBoard":
        self.open()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    @property
    def is_admin(self) -> bool:
        return bool(self._session and self._session.is_admin)

    def open(self) -> None:
        """Start receiving the store's live list."""
        if self._subscription is None:
            self._subscription = self._store.subscribe(self._replace, self._on_error)

    def close(self) -> None:
        if self._subscription is not None:
            self._subscription.close()
            self._subscription = None

    def records(self) -> list[ClientAssignment]:
        with self._lock:
            return list(self._records)

    def _replace(self, records: list[ClientAssignment]) -> None:
        with self._lock:
            self._records = list(records)
            self.loading = False

    def _on_error(self, error: AssignmentError) -> None:
        LOGGER.error("Live assignment updates failed: %s", error)
        if self._fallback is not None:
            self._replace(self._fallback.list_all())
        else:
            with self._lock:
                self.loading = False
        self._notify("Error", str(error), "destructive")

    def _notify(
        self,
        title: str,
        description: str,
        variant: Literal["default", "destructive"] = "default",
    ) -> Notice:
        notice = Notice(title=title, description=description, variant=variant)
        self.notices.append(notice)
        return notice

    def set_filters(self, criteria: FilterCriteria) -> None:
        self.criteria = criteria

    def reset_filters(self) -> None:
        self.criteria = FilterCriteria()

    def filtered_records(self) -> list[ClientAssignment]:
        return apply_filters(self.records(), self.criteria, today=self._clock())

    def visible_records(self) -> list[ClientAssignment]:
        return paginate(self.filtered_records(), self.rows_per_page)

    def stats(self) -> BoardStats:
        records = self.records()
        return BoardStats(
            total_clients=len(records),
            agent_workloads=agent_workloads(records),
            top_agent=top_agent(records),
            locations=unique_locations(records),
            applications=unique_applications(records),
        )

    def add_from_text(self, text: str | None = None) -> ClientAssignment | None:
        """Parse pasted text and create the client; the text is kept on failure."""
        if text is not None:
            self.client_text = text
        try:
            parsed = parse_client_text(self.client_text)
        except MissingRequiredFieldError as exc:
            self._notify("Error", str(exc), "destructive")
            return None

        payload = build_new_assignment(
            parsed,
            agent_identifier=self._session.email if self._session else None,
            today=self._clock(),
        )
        try:
            created = self._store.create(self._session, payload)
        except AssignmentError:
            LOGGER.exception("Error processing client info")
            self._notify("Error", "Failed to process client information", "destructive")
            return None

        self.client_text = ""
        self._notify(
            "Success",
            f"Client {created.name} has been added and assigned to {created.assigned_agent}",
        )
        return created

    def delete(self, client_id: str) -> bool:
        try:
            self._store.delete(self._session, client_id)
        except PermissionDeniedError as exc:
            self._notify("Permission Denied", str(exc), "destructive")
            return False
        except AssignmentError:
            LOGGER.exception("Error deleting client", extra={"client_id": client_id})
            self._notify("Error", "Failed to delete client", "destructive")
            return False
        self._notify("Client Deleted", "Client has been deleted successfully")
        return True

    def report_edit(self, result: EditResult | None) -> EditResult | None:
        """Turn an editor result into the matching notice."""
        if result is None or result.outcome == EditOutcome.CANCELLED:
            return result
        if result.outcome == EditOutcome.COMMITTED:
            self._notify("Updated", result.message)
        else:
            self._notify("Error", result.message, "destructive")
        return result
