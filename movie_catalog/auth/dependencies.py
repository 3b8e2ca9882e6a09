"""FastAPI dependencies for authentication and authorization.

Role requirements are declared per route by depending on ``CurrentUser``,
``AdminUser`` or a ``require_role(...)`` dependency.
"""

import logging
from typing import Annotated, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials

from .middleware import bearer_scheme
from .tokens import ACCESS, REFRESH
from ..errors.problem_details import UnauthorizedError, ForbiddenError
from ..models.users import Role, User


logger = logging.getLogger(__name__)

BearerCredentials = Annotated[Optional[HTTPAuthorizationCredentials], Depends(bearer_scheme)]


async def get_optional_user(request: Request, _credentials: BearerCredentials) -> Optional[User]:
    """The user the middleware resolved, or None for anonymous requests."""
    if getattr(request.state, "token_type", None) != ACCESS:
        return None
    return getattr(request.state, "user", None)


async def get_current_user(request: Request, _credentials: BearerCredentials) -> User:
    """Get the authenticated user from request state.

    Raises:
        UnauthorizedError: If the request carries no valid access token
    """
    user = getattr(request.state, "user", None)
    if user is None:
        raise UnauthorizedError("Authentication required")

    if request.state.token_type != ACCESS:
        raise UnauthorizedError("An access token is required")

    return user


async def get_refresh_user(request: Request, _credentials: BearerCredentials) -> User:
    """Get the user behind a refresh token.

    Raises:
        UnauthorizedError: If the request carries no valid refresh token
    """
    user = getattr(request.state, "user", None)
    if user is None:
        raise UnauthorizedError("Authentication required")

    if request.state.token_type != REFRESH:
        raise UnauthorizedError("A refresh token is required")

    return user


def require_role(role: Role):
    """Create a dependency that requires at least ``role``.

    Lower role values are more privileged, so an admin satisfies every
    requirement.

    Args:
        role: The least privileged role allowed

    Returns:
        A dependency function that returns the current user
    """
    async def _check_role(user: Annotated[User, Depends(get_current_user)]) -> User:
        if user.role > role:
            logger.info(f"User {user.id} with role {user.role.name} denied; requires {role.name}")
            raise ForbiddenError(f"This action requires the {role.name.lower()} role")
        return user

    return _check_role


# Type aliases for commonly used dependencies
OptionalUser = Annotated[Optional[User], Depends(get_optional_user)]
CurrentUser = Annotated[User, Depends(get_current_user)]
RefreshUser = Annotated[User, Depends(get_refresh_user)]
AdminUser = Annotated[User, Depends(require_role(Role.ADMIN))]
