"""Exception handlers for the Movie Catalog API."""

import logging
from typing import Union
from fastapi import Request, HTTPException
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from pydantic import ValidationError
import asyncpg

from .problem_details import (
    ProblemDetailException,
    create_problem_response
)

logger = logging.getLogger(__name__)


# Map common HTTP status codes to appropriate titles
STATUS_TITLES = {
    400: "Bad Request",
    401: "Unauthorized",
    403: "Forbidden",
    404: "Not Found",
    405: "Method Not Allowed",
    409: "Conflict",
    413: "Content Too Large",
    415: "Unsupported Media Type",
    422: "Unprocessable Entity",
    500: "Internal Server Error",
    502: "Bad Gateway",
    503: "Service Unavailable",
    504: "Gateway Timeout"
}


def _summarize_errors(errors: list) -> list[dict]:
    """Reduce pydantic error dicts to their JSON-safe parts."""
    return [
        {
            "loc": [str(part) for part in error.get("loc", ())],
            "msg": error.get("msg"),
            "type": error.get("type"),
        }
        for error in errors
    ]


def _format_errors(errors: list) -> str:
    messages = []
    for error in errors:
        loc = " -> ".join(str(x) for x in error["loc"])
        messages.append(f"{loc}: {error['msg']}")
    return "; ".join(messages)


async def problem_detail_exception_handler(
    request: Request,
    exc: ProblemDetailException
) -> JSONResponse:
    """Handle ProblemDetailException instances."""
    logger.info(
        f"Problem detail exception: {exc.status} - {exc.title}",
        extra={
            "status_code": exc.status,
            "path": str(request.url.path),
            "method": request.method,
            "detail": exc.detail
        }
    )
    return exc.to_response(request)


async def http_exception_handler(
    request: Request,
    exc: Union[HTTPException, StarletteHTTPException]
) -> JSONResponse:
    """Handle FastAPI HTTPException and Starlette HTTPException."""
    logger.info(
        f"HTTP exception: {exc.status_code} - {exc.detail}",
        extra={
            "status_code": exc.status_code,
            "path": str(request.url.path),
            "method": request.method,
        }
    )

    title = STATUS_TITLES.get(exc.status_code, "HTTP Error")
    detail = str(exc.detail) if exc.detail else None

    response = create_problem_response(
        status=exc.status_code,
        title=title,
        detail=detail,
        request=request
    )

    if getattr(exc, "headers", None):
        for key, value in exc.headers.items():
            response.headers[key] = value

    return response


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError
) -> JSONResponse:
    """Handle request validation errors raised by FastAPI."""
    errors = _summarize_errors(exc.errors())
    logger.info(
        f"Validation error: {len(errors)} errors",
        extra={
            "path": str(request.url.path),
            "method": request.method,
            "errors": errors
        }
    )

    return create_problem_response(
        status=422,
        title="Validation Error",
        detail="Validation failed: " + _format_errors(errors),
        request=request,
        validation_errors=errors
    )


async def pydantic_validation_exception_handler(
    request: Request,
    exc: ValidationError
) -> JSONResponse:
    """Handle direct Pydantic validation errors."""
    errors = _summarize_errors(exc.errors())
    logger.info(
        f"Pydantic validation error: {len(errors)} errors",
        extra={
            "path": str(request.url.path),
            "method": request.method,
            "errors": errors
        }
    )

    return create_problem_response(
        status=400,
        title="Validation Error",
        detail="Data validation failed: " + _format_errors(errors),
        request=request,
        validation_errors=errors
    )


async def query_failed_exception_handler(
    request: Request,
    exc: asyncpg.PostgresError
) -> JSONResponse:
    """Turn query failures caused by caller input into client errors.

    Unknown sort columns and unparseable cursor values surface here from the
    pagination layer; unique violations become conflicts. Everything else is
    a genuine server fault.
    """
    logger.warning(
        f"Query failed: {type(exc).__name__} - {exc}",
        extra={
            "path": str(request.url.path),
            "method": request.method,
            "sqlstate": getattr(exc, "sqlstate", None)
        }
    )

    if isinstance(exc, asyncpg.UniqueViolationError):
        return create_problem_response(
            status=409,
            title="Conflict",
            detail="A record with the same unique value already exists",
            request=request
        )

    if isinstance(exc, (asyncpg.UndefinedColumnError, asyncpg.DataError)):
        return create_problem_response(
            status=400,
            title="Bad Request",
            detail=f"Query failed: {exc}",
            request=request
        )

    return await general_exception_handler(request, exc)


async def general_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.error(
        f"Unhandled exception: {type(exc).__name__} - {str(exc)}",
        extra={
            "path": str(request.url.path),
            "method": request.method,
            "exception_type": type(exc).__name__
        },
        exc_info=True
    )

    # Don't expose internal error details
    return create_problem_response(
        status=500,
        title="Internal Server Error",
        detail="An unexpected error occurred",
        request=request
    )


def register_exception_handlers(app):
    """Register all exception handlers with the FastAPI app."""

    # Custom Problem Detail exceptions
    app.add_exception_handler(ProblemDetailException, problem_detail_exception_handler)

    # FastAPI and Starlette HTTP exceptions
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)

    # Validation exceptions
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(ValidationError, pydantic_validation_exception_handler)

    # Database query failures
    app.add_exception_handler(asyncpg.PostgresError, query_failed_exception_handler)

    # Catch-all for unexpected exceptions
    app.add_exception_handler(Exception, general_exception_handler)
