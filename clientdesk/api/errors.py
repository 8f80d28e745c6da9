"""Shared API error types and helpers."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from fastapi import HTTPException

from clientdesk.assignments.errors import (
    AssignmentError,
    AssignmentNotFoundError,
    AssignmentValidationError,
    MissingRequiredFieldError,
    OperationFailedError,
    PermissionDeniedError,
    StaleEditError,
)


class ApiErrorCode(StrEnum):
    """Machine-readable API error codes."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    MISSING_REQUIRED_FIELD = "MISSING_REQUIRED_FIELD"
    UNAUTHORIZED = "UNAUTHORIZED"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    ASSIGNMENT_NOT_FOUND = "ASSIGNMENT_NOT_FOUND"
    STALE_EDIT = "STALE_EDIT"
    OPERATION_FAILED = "OPERATION_FAILED"
    REQUEST_TOO_LARGE = "REQUEST_TOO_LARGE"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"


class ApiError(HTTPException):
    """HTTP exception carrying stable API error envelope."""

    def __init__(
        self, *, status_code: int, error_code: ApiErrorCode, message: str
    ) -> None:
        super().__init__(
            status_code=status_code,
            detail={"error_code": str(error_code), "message": message},
        )


def to_error_payload(detail: Any, status_code: int) -> dict[str, str]:
    """Normalize HTTP exception detail into stable error payload."""
    if isinstance(detail, dict):
        error_code = str(detail.get("error_code") or f"HTTP_{status_code}")
        message = str(detail.get("message") or detail.get("detail") or "HTTP error")
        return {"error_code": error_code, "message": message}
    return {
        "error_code": f"HTTP_{status_code}",
        "message": str(detail or "HTTP error"),
    }


_DOMAIN_ERROR_STATUS: list[tuple[type[AssignmentError], int, ApiErrorCode]] = [
    (MissingRequiredFieldError, 422, ApiErrorCode.MISSING_REQUIRED_FIELD),
    (AssignmentValidationError, 422, ApiErrorCode.VALIDATION_ERROR),
    (PermissionDeniedError, 403, ApiErrorCode.PERMISSION_DENIED),
    (AssignmentNotFoundError, 404, ApiErrorCode.ASSIGNMENT_NOT_FOUND),
    (StaleEditError, 409, ApiErrorCode.STALE_EDIT),
    # Retryable by the caller; nothing is retried server-side.
    (OperationFailedError, 503, ApiErrorCode.OPERATION_FAILED),
]


def api_error_from_domain(exc: AssignmentError) -> ApiError:
    """Map a domain error onto its HTTP status and error code."""
    for error_type, status_code, error_code in _DOMAIN_ERROR_STATUS:
        if isinstance(exc, error_type):
            return ApiError(
                status_code=status_code, error_code=error_code, message=str(exc)
            )
    return ApiError(
        status_code=500,
        error_code=ApiErrorCode.INTERNAL_SERVER_ERROR,
        message=str(exc) or "Internal server error",
    )
