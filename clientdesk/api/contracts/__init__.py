"""Public API contracts."""

from clientdesk.api.contracts.models import (
    ApiErrorResponse,
    AssignmentFieldUpdateRequest,
    AssignmentListResponse,
    AssignmentStatsResponse,
    ClientCreateRequest,
    ClientsErrorResponse,
    DeleteAssignmentResponse,
    HealthResponse,
    ParseClientTextRequest,
    QuickActionsResponse,
    assignment_payload,
)

__all__ = [
    "ApiErrorResponse",
    "AssignmentFieldUpdateRequest",
    "AssignmentListResponse",
    "AssignmentStatsResponse",
    "ClientCreateRequest",
    "ClientsErrorResponse",
    "DeleteAssignmentResponse",
    "HealthResponse",
    "ParseClientTextRequest",
    "QuickActionsResponse",
    "assignment_payload",
]
