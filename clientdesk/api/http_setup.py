"""HTTP middleware and exception handler wiring for FastAPI apps."""

from __future__ import annotations

import uuid
from typing import Any

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from clientdesk.api.contracts import ApiErrorResponse
from clientdesk.api.errors import ApiErrorCode, api_error_from_domain, to_error_payload
from clientdesk.assignments.errors import AssignmentError
from clientdesk.core.config import AppConfig
from clientdesk.core.logging import set_correlation_id

_SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
    "Content-Security-Policy": (
        "default-src 'none'; frame-ancestors 'none'; base-uri 'none'"
    ),
}


def _request_extra(request: Request, status_code: int) -> dict[str, Any]:
    return {
        "path": request.url.path,
        "method": request.method,
        "status_code": status_code,
    }


def register_http_middleware(app: FastAPI, *, config: AppConfig, logger: Any) -> None:
    """Attach the body-size guard and the request logging middleware."""
    max_bytes = config.security.request_max_bytes

    @app.middleware("http")
    async def request_size_limit_middleware(request: Request, call_next):
        try:
            declared_length = int(request.headers.get("content-length") or 0)
        except ValueError:
            declared_length = 0
        if declared_length > max_bytes:
            return JSONResponse(
                status_code=413,
                content=ApiErrorResponse(
                    error_code=ApiErrorCode.REQUEST_TOO_LARGE,
                    message=f"Request size exceeds configured limit ({max_bytes} bytes).",
                ).model_dump(),
            )
        return await call_next(request)

    @app.middleware("http")
    async def request_logging_middleware(request: Request, call_next):
        correlation_id = (
            request.headers.get("x-request-id")
            or request.headers.get("x-correlation-id")
            or uuid.uuid4().hex
        )
        set_correlation_id(correlation_id)
        response = await call_next(request)
        response.headers["X-Request-ID"] = correlation_id
        response.headers.update(_SECURITY_HEADERS)
        logger.info(
            "request_completed",
            extra=_request_extra(request, response.status_code),
        )
        return response


def register_exception_handlers(app: FastAPI, *, logger: Any) -> None:
    """Attach handlers that render every failure as ``{error_code, message}``."""

    @app.exception_handler(HTTPException)
    async def handle_http_exception(
        request: Request, exc: HTTPException
    ) -> JSONResponse:
        logger.warning("http_exception", extra=_request_extra(request, exc.status_code))
        return JSONResponse(
            status_code=exc.status_code,
            content=ApiErrorResponse(
                **to_error_payload(exc.detail, exc.status_code)
            ).model_dump(),
        )

    @app.exception_handler(AssignmentError)
    async def handle_assignment_error(
        request: Request, exc: AssignmentError
    ) -> JSONResponse:
        api_error = api_error_from_domain(exc)
        logger.warning(
            "assignment_error", extra=_request_extra(request, api_error.status_code)
        )
        return JSONResponse(
            status_code=api_error.status_code,
            content=ApiErrorResponse(
                **to_error_payload(api_error.detail, api_error.status_code)
            ).model_dump(),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_exception(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        logger.warning("validation_exception", extra=_request_extra(request, 422))
        return JSONResponse(
            status_code=422,
            content=ApiErrorResponse(
                error_code=ApiErrorCode.VALIDATION_ERROR,
                message=str(exc),
            ).model_dump(),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_exception(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        logger.exception("unexpected_exception", extra=_request_extra(request, 500))
        return JSONResponse(
            status_code=500,
            content=ApiErrorResponse(
                error_code=ApiErrorCode.INTERNAL_SERVER_ERROR,
                message="Internal server error",
            ).model_dump(),
        )
