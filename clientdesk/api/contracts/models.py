"""Pydantic API request/response models used in OpenAPI contracts."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from clientdesk.assignments.models import ClientAssignment


class ApiErrorResponse(BaseModel):
    """Stable error envelope for API responses."""

    error_code: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error message")


class ClientsErrorResponse(BaseModel):
    """Error body of the client collection endpoints."""

    error: str


class HealthResponse(BaseModel):
    """Health check response payload."""

    status: Literal["ok"]


class ClientCreateRequest(BaseModel):
    """Client submitted to ``POST /api/clients``; unknown keys are echoed back."""

    model_config = ConfigDict(extra="allow")

    shopId: str | None = None
    clientName: str | None = None
    agent: str | None = None
    kycDate: str | None = None
    status: str | None = None
    notes: str | None = None


class AssignmentListResponse(BaseModel):
    """Filtered assignment rows plus counts for the table footer."""

    items: list[ClientAssignment]
    total: int
    matched: int


class AssignmentStatsResponse(BaseModel):
    """Dashboard header statistics."""

    total_clients: int
    top_agent: str
    agent_workloads: dict[str, int]
    locations: list[str]
    applications: list[str]


class ParseClientTextRequest(BaseModel):
    """Pasted free text describing one client."""

    text: str = ""


class AssignmentFieldUpdateRequest(BaseModel):
    """Single-field edit of an assignment."""

    field: str = Field(min_length=1)
    value: str
    expected: str | None = Field(
        default=None,
        description="Cell value the client saw before editing; a mismatch rejects the edit",
    )


class DeleteAssignmentResponse(BaseModel):
    """Delete assignment response payload."""

    client_id: str
    deleted: bool


class QuickActionResponse(BaseModel):
    id: str
    label: str
    description: str
    path: str


class QuickActionsResponse(BaseModel):
    items: list[QuickActionResponse]


def assignment_payload(record: ClientAssignment) -> dict[str, Any]:
    """Wire representation of a record (camelCase keys)."""
    return record.model_dump(by_alias=True, mode="json")
