"""FastAPI router for the agent-assignment dashboard."""

from __future__ import annotations

from typing import Awaitable, Callable

from fastapi import APIRouter, Depends, Query

from clientdesk.api.contracts import (
    ApiErrorResponse,
    AssignmentFieldUpdateRequest,
    AssignmentListResponse,
    AssignmentStatsResponse,
    DeleteAssignmentResponse,
    ParseClientTextRequest,
    assignment_payload,
)
from clientdesk.api.errors import ApiError, ApiErrorCode, api_error_from_domain
from clientdesk.assignments.errors import AssignmentError
from clientdesk.assignments.filters import (
    ALL_AGENTS,
    ALL_APPLICATIONS,
    ALL_LOCATIONS,
    ALL_MONTHS,
    FilterCriteria,
)
from clientdesk.assignments.service import AssignmentsService
from clientdesk.auth.models import Session

_DOMAIN_ERRORS = {
    401: {"model": ApiErrorResponse},
    403: {"model": ApiErrorResponse},
    404: {"model": ApiErrorResponse},
    409: {"model": ApiErrorResponse},
    422: {"model": ApiErrorResponse},
    503: {"model": ApiErrorResponse},
}


class AssignmentsRouter:
    """Factory wrapper that builds the assignments router from a service.

    Every endpoint requires a session; the store is picked per request.
    """

    def __init__(
        self,
        service: AssignmentsService,
        require_session: Callable[..., Session | Awaitable[Session]],
    ) -> None:
        self._service = service
        self._require_session = require_session

    def build(self) -> APIRouter:
        router = APIRouter(tags=["assignments"])
        require_session = self._require_session

        @router.get(
            "/api/assignments",
            response_model=AssignmentListResponse,
            responses={
                401: {"model": ApiErrorResponse},
                422: {"model": ApiErrorResponse},
            },
        )
        def list_assignments(
            search: str = Query(default=""),
            location: str = Query(default=ALL_LOCATIONS),
            application: str = Query(default=ALL_APPLICATIONS),
            agent: str = Query(default=ALL_AGENTS),
            month: str = Query(default=ALL_MONTHS),
            rows_per_page: int = Query(default=10),
            session: Session = Depends(require_session),
        ) -> AssignmentListResponse:
            """Filtered, first-page view of the assignment table."""
            try:
                criteria = FilterCriteria.from_query(
                    search=search,
                    location=location,
                    application=application,
                    agent=agent,
                    month=month,
                )
                payload = self._service.list_assignments(
                    session, criteria, rows_per_page
                )
            except ValueError as exc:
                raise ApiError(
                    status_code=422,
                    error_code=ApiErrorCode.VALIDATION_ERROR,
                    message=str(exc),
                ) from exc
            except AssignmentError as exc:
                raise api_error_from_domain(exc) from exc
            return AssignmentListResponse(**payload)

        @router.get(
            "/api/assignments/stats",
            response_model=AssignmentStatsResponse,
            responses={
                401: {"model": ApiErrorResponse},
                503: {"model": ApiErrorResponse},
            },
        )
        def assignment_stats(
            session: Session = Depends(require_session),
        ) -> AssignmentStatsResponse:
            """Totals, agent workload and filter options."""
            try:
                return AssignmentStatsResponse(**self._service.stats(session))
            except AssignmentError as exc:
                raise api_error_from_domain(exc) from exc

        @router.post("/api/assignments/parse", status_code=201, responses=_DOMAIN_ERRORS)
        def create_from_text(
            req: ParseClientTextRequest,
            session: Session = Depends(require_session),
        ) -> dict:
            """Parse pasted client text and create the assignment."""
            try:
                created = self._service.create_from_text(session, req.text)
            except AssignmentError as exc:
                raise api_error_from_domain(exc) from exc
            return assignment_payload(created)

        @router.patch("/api/assignments/{client_id}", responses=_DOMAIN_ERRORS)
        def update_assignment_field(
            client_id: str,
            req: AssignmentFieldUpdateRequest,
            session: Session = Depends(require_session),
        ) -> dict:
            """Commit a single-cell edit."""
            try:
                self._service.update_field(
                    session, client_id, req.field, req.value, expected=req.expected
                )
            except AssignmentError as exc:
                raise api_error_from_domain(exc) from exc
            return {"client_id": client_id, "field": req.field, "updated": True}

        @router.delete(
            "/api/assignments/{client_id}",
            response_model=DeleteAssignmentResponse,
            responses=_DOMAIN_ERRORS,
        )
        def delete_assignment(
            client_id: str,
            session: Session = Depends(require_session),
        ) -> DeleteAssignmentResponse:
            """Delete an assignment; administrators only."""
            try:
                self._service.delete(session, client_id)
            except AssignmentError as exc:
                raise api_error_from_domain(exc) from exc
            return DeleteAssignmentResponse(client_id=client_id, deleted=True)

        return router


def create_assignments_router(
    service: AssignmentsService,
    require_session: Callable[..., Session | Awaitable[Session]],
) -> APIRouter:
    """Create assignments router using provided application service."""
    return AssignmentsRouter(service=service, require_session=require_session).build()
