"""FastAPI router for the client collection endpoints."""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from clientdesk.api.contracts import (
    ApiErrorResponse,
    ClientCreateRequest,
    ClientsErrorResponse,
)
from clientdesk.api.errors import ApiError, ApiErrorCode
from clientdesk.assignments.errors import OperationFailedError
from clientdesk.auth.models import Session
from clientdesk.clients.service import ClientsService

LOGGER = logging.getLogger(__name__)


class ClientsRouter:
    """Factory wrapper that builds the clients router from a service."""

    def __init__(
        self,
        service: ClientsService,
        require_session: Callable[..., Session | Awaitable[Session]],
    ) -> None:
        self._service = service
        self._require_session = require_session

    def build(self) -> APIRouter:
        router = APIRouter(tags=["clients"])
        require_session = self._require_session

        @router.get(
            "/api/clients",
            dependencies=[Depends(require_session)],
            responses={
                401: {"model": ApiErrorResponse},
                500: {"model": ClientsErrorResponse},
            },
        )
        def list_clients() -> Any:
            """Return the whole client collection."""
            try:
                return self._service.list_clients()
            except (OperationFailedError, OSError):
                LOGGER.exception("Error fetching clients")
                return JSONResponse(
                    status_code=500, content={"error": "Failed to fetch clients"}
                )

        @router.post(
            "/api/clients",
            dependencies=[Depends(require_session)],
            responses={
                401: {"model": ApiErrorResponse},
                422: {"model": ApiErrorResponse},
                500: {"model": ClientsErrorResponse},
            },
        )
        def create_client(req: ClientCreateRequest) -> Any:
            """Add a client and echo it back with its id."""
            submitted = req.model_dump(exclude_unset=True)
            try:
                return self._service.create_client(submitted)
            except ValueError as exc:
                raise ApiError(
                    status_code=422,
                    error_code=ApiErrorCode.VALIDATION_ERROR,
                    message=f"Invalid kycDate: {exc}",
                ) from exc
            except (OperationFailedError, OSError):
                LOGGER.exception("Error adding client")
                return JSONResponse(
                    status_code=500, content={"error": "Failed to add client"}
                )

        return router


def create_clients_router(
    service: ClientsService,
    require_session: Callable[..., Session | Awaitable[Session]],
) -> APIRouter:
    """Create clients router using provided application service."""
    return ClientsRouter(service=service, require_session=require_session).build()
