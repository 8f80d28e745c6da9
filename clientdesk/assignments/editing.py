"""Single-cell inline editing for the assignment table.

State is either idle or one ``EditingCell``. Policies:

* Starting an edit on another cell while one is open commits the open one
  first, exactly as a blur would.
* Before committing, the record is looked up in the current list. If it is
  gone, or the field no longer holds the value seen when the edit started, the
  edit is discarded with a ``StaleEditError``.
* Commit and cancel always return the controller to idle.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date
from enum import StrEnum
from typing import Callable

from clientdesk.assignments.errors import (
    AssignmentError,
    AssignmentValidationError,
    StaleEditError,
)
from clientdesk.assignments.models import (
    AGENTS,
    EDITABLE_FIELDS,
    ENUMERATED_FIELDS,
    IDLE_CELL,
    ClientAssignment,
    EditingCell,
)
from clientdesk.assignments.store import AssignmentStore
from clientdesk.auth.models import Session

LOGGER = logging.getLogger(__name__)


class EditOutcome(StrEnum):
    COMMITTED = "committed"
    CANCELLED = "cancelled"
    DISCARDED = "discarded"
    FAILED = "failed"


@dataclass(frozen=True)
class EditResult:
    outcome: EditOutcome
    cell: EditingCell
    message: str = ""
    error: AssignmentError | None = None


class InlineEditController:
    def __init__(
        self,
        store: AssignmentStore,
        session: Session | None,
        records: Callable[[], list[ClientAssignment]],
    ) -> None:
        self._store = store
        self._session = session
        self._records = records
        self._cell = IDLE_CELL
        self._base_value = ""

    @property
    def cell(self) -> EditingCell:
        return self._cell

    def is_editing(self, client_id: str, field: str) -> bool:
        return self._cell.client_id == client_id and self._cell.field == field

    def start_edit(self, record: ClientAssignment, field: str) -> EditResult | None:
        """Open ``field`` of ``record`` for editing.

        Returns the result of auto-committing a previously open cell, if any.
        """
        if field == "id":
            return None
        if field not in EDITABLE_FIELDS:
            raise AssignmentValidationError(f"Field is not editable: {field}")
        if self.is_editing(record.id, field):
            return None

        previous = self.commit() if self._cell.active else None
        value = record.value_of(field)
        self._cell = EditingCell(client_id=record.id, field=field, value=value)
        self._base_value = value
        return previous

    def apply_edit(
        self, client_id: str, field: str, value: str, *, base_value: str
    ) -> EditResult:
        """Open, fill and commit one cell in a single step.

        ``base_value`` is what the caller saw in the cell before editing; the
        usual stale check runs against it.
        """
        if field not in EDITABLE_FIELDS:
            raise AssignmentValidationError(f"Field is not editable: {field}")
        if self._cell.active:
            self.commit()
        return self._commit_cell(
            EditingCell(client_id=client_id, field=field, value=value), base_value
        )

    def set_value(self, value: str) -> None:
        if self._cell.active:
            self._cell = replace(self._cell, value=value)

    def handle_key(self, key: str) -> EditResult | None:
        if key == "Enter":
            return self.commit()
        if key == "Escape":
            return self.cancel()
        return None

    def blur(self) -> EditResult | None:
        return self.commit()

    def select_value(self, value: str) -> EditResult | None:
        """Pick a value for an enumerated field and commit it immediately."""
        if not self._cell.active:
            return None
        field = self._cell.field
        if field not in ENUMERATED_FIELDS:
            raise AssignmentValidationError(f"{field} is edited as free text")
        if field == "assignedAgent" and value not in AGENTS:
            raise AssignmentValidationError(f"Unknown agent: {value}")
        if field == "date":
            try:
                value = date.fromisoformat(value).isoformat()
            except ValueError as exc:
                raise AssignmentValidationError(f"Invalid date: {value}") from exc
        self.set_value(value)
        return self.commit()

    def cancel(self) -> EditResult | None:
        if not self._cell.active:
            return None
        cell = self._cell
        self._reset()
        return EditResult(EditOutcome.CANCELLED, cell)

    def commit(self) -> EditResult | None:
        if not self._cell.active:
            return None
        cell = self._cell
        base_value = self._base_value
        self._reset()
        return self._commit_cell(cell, base_value)

    def _commit_cell(self, cell: EditingCell, base_value: str) -> EditResult:
        field = str(cell.field)

        current = next(
            (record for record in self._records() if record.id == cell.client_id), None
        )
        if current is None:
            error = StaleEditError("Client no longer exists; the edit was discarded")
            return EditResult(EditOutcome.DISCARDED, cell, str(error), error)
        if current.value_of(field) != base_value:
            error = StaleEditError(
                f"Client {field} changed while you were editing; the edit was discarded"
            )
            return EditResult(EditOutcome.DISCARDED, cell, str(error), error)

        try:
            self._store.update(self._session, str(cell.client_id), field, cell.value)
        except AssignmentError as exc:
            LOGGER.warning(
                "Inline edit failed: %s",
                exc,
                extra={"client_id": cell.client_id, "field": field},
            )
            return EditResult(EditOutcome.FAILED, cell, str(exc), exc)
        return EditResult(
            EditOutcome.COMMITTED, cell, f"Client {field} updated successfully"
        )

    def _reset(self) -> None:
        self._cell = IDLE_CELL
        self._base_value = ""
