"""Assignment record types shared by the parser, stores and editor."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

AGENTS: tuple[str, ...] = (
    "Annie",
    "Cuu",
    "Jhe",
    "Kel",
    "Ken",
    "Kyrie",
    "Lovely",
    "Mar",
    "Primo",
    "Thac",
    "Vivian",
)

UNKNOWN = "Unknown"

EDITABLE_FIELDS: tuple[str, ...] = (
    "name",
    "age",
    "location",
    "work",
    "application",
    "assignedAgent",
    "date",
)
REQUIRED_FIELDS: tuple[str, ...] = ("name", "age")
ENUMERATED_FIELDS: tuple[str, ...] = ("assignedAgent", "date")


class ClientAssignment(BaseModel):
    """A client profile plus the agent currently responsible for it."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str = ""
    age: str = ""
    location: str = UNKNOWN
    work: str = UNKNOWN
    application: str = UNKNOWN
    assigned_agent: str = Field(default="", alias="assignedAgent")
    date: str = ""
    created_at: datetime | None = Field(default=None, alias="createdAt")
    updated_at: datetime | None = Field(default=None, alias="updatedAt")

    def value_of(self, field: str) -> str:
        """Return the string value of a stored field key (``assignedAgent`` etc.)."""
        return str(self.to_document().get(field) or "")

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)

    def to_storage(self) -> dict[str, Any]:
        """JSON-safe document for the local fallback store."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


def normalize_document(doc: dict[str, Any], *, today: date) -> ClientAssignment:
    """Build a record from a stored document, defaulting absent fields."""
    return ClientAssignment(
        id=str(doc.get("id") or ""),
        name=str(doc.get("name") or ""),
        age=str(doc.get("age") or ""),
        location=str(doc.get("location") or UNKNOWN),
        work=str(doc.get("work") or UNKNOWN),
        application=str(doc.get("application") or UNKNOWN),
        assignedAgent=str(doc.get("assignedAgent") or ""),
        date=str(doc.get("date") or today.isoformat()),
        createdAt=_as_datetime(doc.get("createdAt")),
        updatedAt=_as_datetime(doc.get("updatedAt")),
    )


def _as_datetime(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str) and value:
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            return None
    return None


@dataclass(frozen=True)
class EditingCell:
    """The one table cell currently being edited, if any."""

    client_id: str | None = None
    field: str | None = None
    value: str = ""

    @property
    def active(self) -> bool:
        return self.client_id is not None and self.field is not None


IDLE_CELL = EditingCell()
