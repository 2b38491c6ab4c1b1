"""Exception handlers rendering every HTTP error as RFC 7807 Problem Details.

Handled:
- AppException (and subclasses such as AuthError, SubscriptionLimitError)
- Starlette HTTPException (e.g. 503 while the fan-out core is not started)
- RequestValidationError (invalid publish requests)
- Any other exception (500, traceback logged)

WebSocket and GraphQL errors never reach these handlers: the WebSocket
endpoint reports failures with close codes and Strawberry returns GraphQL
errors in the response body.
"""

from __future__ import annotations

from collections.abc import Mapping
import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from hrchat_service.core.exceptions import AppException, RateLimitException
from hrchat_service.core.schemas.problem_details import (
    FieldError,
    ProblemDetails,
    ValidationProblemDetails,
)

logger = logging.getLogger(__name__)

PROBLEM_JSON = "application/problem+json"


def problem_response(
    status_code: int,
    detail: str | None,
    *,
    type_: str = "about:blank",
    title: str | None = None,
    instance: str | None = None,
    extra: Mapping[str, Any] | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Build an ``application/problem+json`` response.

    ``extra`` members are merged into the top level of the body, as RFC 7807
    allows for problem-type specific members.
    """
    problem = ProblemDetails(
        type=type_,
        title=title or AppException._default_title(status_code),
        status=status_code,
        detail=detail,
        instance=instance,
    )
    body = problem.model_dump(exclude_none=True)
    if extra:
        body.update(extra)
    return JSONResponse(
        status_code=status_code,
        content=body,
        headers=headers,
        media_type=PROBLEM_JSON,
    )


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Render an AppException with its own status, type and extra members."""
    # Rejected credentials are routine; everything else deserves a warning
    level = logging.INFO if exc.status_code == status.HTTP_401_UNAUTHORIZED else logging.WARNING
    logger.log(
        level,
        "Request failed: %s",
        exc.type,
        extra={
            "path": request.url.path,
            "method": request.method,
            "status_code": exc.status_code,
            "detail": exc.detail,
        },
    )

    headers = None
    if isinstance(exc, RateLimitException) and exc.retry_after is not None:
        headers = {"Retry-After": str(exc.retry_after)}

    return problem_response(
        exc.status_code,
        exc.detail,
        type_=exc.type,
        title=exc.title,
        instance=exc.instance or request.url.path,
        extra=exc.extra,
        headers=headers,
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render HTTPException raised by dependencies and the router.

    A dict ``detail`` of the form ``{"error": ..., "message": ...}`` maps to
    the problem ``type`` and ``detail``.
    """
    type_ = "about:blank"
    detail: Any = exc.detail
    if isinstance(detail, Mapping):
        type_ = str(detail.get("error") or type_)
        detail = detail.get("message")

    return problem_response(
        exc.status_code,
        None if detail is None else str(detail),
        type_=type_,
        instance=request.url.path,
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError,
) -> JSONResponse:
    """Render request validation errors with one entry per invalid field."""
    errors = [
        FieldError(
            field=".".join(str(loc) for loc in error["loc"]),
            message=error["msg"],
            type=error["type"],
            value=error.get("input"),
        )
        for error in exc.errors()
    ]
    logger.info(
        "Request validation failed",
        extra={"path": request.url.path, "error_count": len(errors)},
    )

    problem = ValidationProblemDetails(
        type="validation-error",
        title="Validation Error",
        status=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail=f"Request validation failed for {len(errors)} field(s)",
        instance=request.url.path,
        errors=errors,
    )
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=problem.model_dump(mode="json", exclude_none=True),
        media_type=PROBLEM_JSON,
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log the traceback of an unexpected error and hide it from the client."""
    logger.exception(
        "Unhandled error",
        extra={
            "path": request.url.path,
            "method": request.method,
            "exception_type": type(exc).__name__,
        },
    )
    return problem_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "An unexpected error occurred while processing your request",
        type_="internal-error",
        instance=request.url.path,
    )


def configure_exception_handlers(app: FastAPI) -> None:
    """Register the Problem Details handlers on ``app``."""
    app.add_exception_handler(AppException, app_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, generic_exception_handler)


__all__ = ["PROBLEM_JSON", "configure_exception_handlers", "problem_response"]
