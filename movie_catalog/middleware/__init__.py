"""HTTP middleware for the Movie Catalog API."""

from .request_logging import RequestLoggingMiddleware

__all__ = ["RequestLoggingMiddleware"]
