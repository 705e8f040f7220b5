"""
Exception handlers mapping domain errors to HTTP responses.

Every error body is the exception's to_dict() plus the request's trace id,
so a client report can be matched to audit entries and logs.
"""

from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from backoffice.domain.exceptions import (
    AuthenticationException,
    BackofficeException,
    ConflictError,
    DuplicateError,
    InUseError,
    NotFoundError,
    PermissionDeniedError,
    PolicyViolationError,
    RetrievalError,
    ValidationException,
)
from backoffice.shared.context import get_current_trace_id
from backoffice.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

STATUS_BY_EXCEPTION: dict[type[BackofficeException], int] = {
    NotFoundError: 404,
    ConflictError: 409,
    DuplicateError: 409,
    InUseError: 422,
    PolicyViolationError: 422,
    PermissionDeniedError: 403,
    AuthenticationException: 401,
    ValidationException: 400,
    RetrievalError: 503,
}


def _trace_id(request: Request) -> str | None:
    return getattr(request.state, "trace_id", None) or get_current_trace_id()


def status_for(exc: BackofficeException) -> int:
    for exc_type in type(exc).__mro__:
        if exc_type in STATUS_BY_EXCEPTION:
            return STATUS_BY_EXCEPTION[exc_type]
    return status.HTTP_400_BAD_REQUEST


async def backoffice_exception_handler(request: Request, exc: BackofficeException) -> JSONResponse:
    status_code = status_for(exc)
    if status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)

    body: dict[str, Any] = {**exc.to_dict(), "trace_id": _trace_id(request)}
    headers = {"WWW-Authenticate": "Bearer"} if status_code == 401 else None
    return JSONResponse(status_code=status_code, content=body, headers=headers)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": "VALIDATION_ERROR",
            "message": "Request validation failed",
            "details": {"errors": jsonable_errors(exc)},
            "trace_id": _trace_id(request),
        },
    )


def jsonable_errors(exc: RequestValidationError) -> list[dict[str, Any]]:
    return [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg"), "type": error.get("type")}
        for error in exc.errors()
    ]


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "INTERNAL_ERROR",
            "message": "An unexpected error occurred",
            "details": {},
            "trace_id": _trace_id(request),
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(BackofficeException, backoffice_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, request_validation_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, unhandled_exception_handler)
