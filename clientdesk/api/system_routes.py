"""Health check and quick-action menu routes."""

from __future__ import annotations

from typing import Awaitable, Callable

from fastapi import APIRouter, Depends

from clientdesk.api.contracts import (
    ApiErrorResponse,
    HealthResponse,
    QuickActionsResponse,
)
from clientdesk.auth.models import Session
from clientdesk.menu import quick_actions_for


def create_system_router(
    require_session: Callable[..., Session | Awaitable[Session]],
) -> APIRouter:
    router = APIRouter(tags=["system"])

    @router.get("/api/health", response_model=HealthResponse)
    def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @router.get(
        "/api/quick-actions",
        response_model=QuickActionsResponse,
        responses={401: {"model": ApiErrorResponse}},
    )
    def quick_actions(
        session: Session = Depends(require_session),
    ) -> QuickActionsResponse:
        """Menu entries for the signed-in user."""
        return QuickActionsResponse(items=quick_actions_for(session))

    return router
