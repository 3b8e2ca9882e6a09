"""Authentication middleware for Bearer token processing."""

import logging
from typing import Optional

from fastapi import Request
from fastapi.security import HTTPBearer
from starlette.middleware.base import BaseHTTPMiddleware

from .tokens import validate_token
from ..errors.problem_details import ProblemDetailException, BadRequestError, UnauthorizedError


logger = logging.getLogger(__name__)


class AuthenticationMiddleware(BaseHTTPMiddleware):
    """Middleware to resolve the caller from a Bearer token.

    Requests without an Authorization header pass through anonymously; the
    route dependencies decide whether a user is required. A Bearer token
    that is unknown or expired is rejected with 401, and any other scheme
    with 400, except on the paths that take Basic credentials.
    """

    def __init__(self, app, skip_paths: Optional[list[str]] = None):
        """Initialize authentication middleware.

        Args:
            app: The FastAPI application
            skip_paths: Paths whose Authorization header is not a Bearer token
        """
        super().__init__(app)
        self.skip_paths = skip_paths or ["/auth/register", "/auth/login"]

    async def dispatch(self, request: Request, call_next):
        """Process the request through authentication middleware."""
        request.state.user = None
        request.state.token_type = None

        auth_header = request.headers.get("Authorization")
        if not auth_header or request.url.path in self.skip_paths:
            return await call_next(request)

        try:
            token = extract_bearer_token(auth_header)
            record = await validate_token(token)

            if record is None:
                raise UnauthorizedError("Invalid or expired bearer token")

            request.state.user = record.user
            request.state.token_type = record.token_type
            logger.debug(f"Authenticated user {record.user.id} with {record.token_type} token")

        except ProblemDetailException as e:
            logger.warning(f"Authentication failed for {request.url.path}: {e.detail}")
            return e.to_response(request)

        return await call_next(request)


def extract_bearer_token(authorization: str) -> str:
    """Extract bearer token from Authorization header.

    Args:
        authorization: The Authorization header value

    Returns:
        The extracted token

    Raises:
        BadRequestError: If the header is not a Bearer credential
    """
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise BadRequestError("Invalid token format. Expected 'Bearer <token>'")

    return token.strip()


# HTTP Bearer security scheme for OpenAPI documentation
bearer_scheme = HTTPBearer(
    scheme_name="bearerToken",
    description="Access or refresh token issued by /auth/login",
    auto_error=False
)
