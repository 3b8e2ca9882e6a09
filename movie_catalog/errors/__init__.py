"""Error handling module for the Movie Catalog API."""

from .problem_details import (
    ProblemDetail,
    ProblemDetailException,
    BadRequestError,
    MalformedCursor,
    InvalidOrderDirection,
    UnauthorizedError,
    ForbiddenError,
    NotFoundError,
    ConflictError,
    PayloadTooLargeError,
    UnsupportedMediaTypeError,
    InternalServerError,
    ServiceUnavailableError,
    create_problem_response
)
from .handlers import register_exception_handlers

__all__ = [
    "ProblemDetail",
    "ProblemDetailException",
    "BadRequestError",
    "MalformedCursor",
    "InvalidOrderDirection",
    "UnauthorizedError",
    "ForbiddenError",
    "NotFoundError",
    "ConflictError",
    "PayloadTooLargeError",
    "UnsupportedMediaTypeError",
    "InternalServerError",
    "ServiceUnavailableError",
    "create_problem_response",
    "register_exception_handlers"
]
