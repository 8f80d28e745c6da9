"""Application service behind the assignment HTTP endpoints."""

from __future__ import annotations

from datetime import date
from typing import Any, Callable

from clientdesk.assignments.editing import InlineEditController
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
from clientdesk.assignments.store import (
    AssignmentStore,
    LocalAssignmentStore,
    RemoteAssignmentStore,
    select_assignment_store,
)
from clientdesk.auth.models import Session


class AssignmentsService:
    """Stateless per-request counterpart of ``AssignmentBoard``."""

    def __init__(
        self,
        *,
        local: LocalAssignmentStore,
        remote: RemoteAssignmentStore | None,
        clock: Callable[[], date] = date.today,
    ) -> None:
        self._local = local
        self._remote = remote
        self._clock = clock

    def store_for(self, session: Session | None) -> AssignmentStore:
        return select_assignment_store(session, local=self._local, remote=self._remote)

    def list_assignments(
        self,
        session: Session | None,
        criteria: FilterCriteria,
        rows_per_page: int,
    ) -> dict[str, Any]:
        records = self.store_for(session).list_all()
        matched = apply_filters(records, criteria, today=self._clock())
        return {
            "items": paginate(matched, rows_per_page),
            "total": len(records),
            "matched": len(matched),
        }

    def stats(self, session: Session | None) -> dict[str, Any]:
        records = self.store_for(session).list_all()
        return {
            "total_clients": len(records),
            "top_agent": top_agent(records),
            "agent_workloads": agent_workloads(records),
            "locations": unique_locations(records),
            "applications": unique_applications(records),
        }

    def create_from_text(self, session: Session | None, text: str) -> ClientAssignment:
        parsed = parse_client_text(text)
        payload = build_new_assignment(
            parsed,
            agent_identifier=session.email if session else None,
            today=self._clock(),
        )
        return self.store_for(session).create(session, payload)

    def update_field(
        self,
        session: Session | None,
        client_id: str,
        field: str,
        value: str,
        *,
        expected: str | None = None,
    ) -> None:
        """Commit one cell; with ``expected``, refuse edits made on stale data."""
        store = self.store_for(session)
        if expected is None:
            store.update(session, client_id, field, value)
            return
        editor = InlineEditController(store, session, store.list_all)
        result = editor.apply_edit(client_id, field, value, base_value=expected)
        if result.error is not None:
            raise result.error

    def delete(self, session: Session | None, client_id: str) -> None:
        self.store_for(session).delete(session, client_id)
