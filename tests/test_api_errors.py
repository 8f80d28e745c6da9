from __future__ import annotations

import pytest

from clientdesk.api.errors import api_error_from_domain, to_error_payload
from clientdesk.assignments.errors import (
    AssignmentError,
    AssignmentNotFoundError,
    AssignmentValidationError,
    MissingRequiredFieldError,
    OperationFailedError,
    PermissionDeniedError,
    StaleEditError,
)


def test_to_error_payload_preserves_structured_detail() -> None:
    payload = to_error_payload(
        {"error_code": "UNAUTHORIZED", "message": "Unauthorized"},
        401,
    )

    assert payload == {"error_code": "UNAUTHORIZED", "message": "Unauthorized"}


def test_to_error_payload_normalizes_plain_string() -> None:
    payload = to_error_payload("boom", 500)

    assert payload == {"error_code": "HTTP_500", "message": "boom"}


@pytest.mark.parametrize(
    ("error", "status_code", "error_code"),
    [
        (MissingRequiredFieldError("Name and age are required"), 422, "MISSING_REQUIRED_FIELD"),
        (AssignmentValidationError("bad date"), 422, "VALIDATION_ERROR"),
        (PermissionDeniedError("admins only"), 403, "PERMISSION_DENIED"),
        (AssignmentNotFoundError("gone"), 404, "ASSIGNMENT_NOT_FOUND"),
        (OperationFailedError("store down"), 503, "OPERATION_FAILED"),
        (StaleEditError("changed"), 500, "INTERNAL_SERVER_ERROR"),
    ],
)
def test_api_error_from_domain(
    error: AssignmentError, status_code: int, error_code: str
) -> None:
    api_error = api_error_from_domain(error)

    assert api_error.status_code == status_code
    assert api_error.detail == {"error_code": error_code, "message": str(error)}
