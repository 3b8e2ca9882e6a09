"""Authentication module for the Movie Catalog API.

This module provides authentication and authorization functionality including:
- Password hashing and Basic credential parsing
- Opaque access/refresh tokens stored as digests
- Bearer token authentication middleware
- FastAPI dependencies for role checks
"""

from .passwords import (
    pwd_context,
    hash_password,
    verify_password,
    parse_basic_token
)

from .tokens import (
    ACCESS,
    REFRESH,
    TokenRecord,
    generate_token,
    hash_token,
    issue_token,
    issue_token_pair,
    validate_token,
    block_token,
    register,
    login
)

from .middleware import (
    AuthenticationMiddleware,
    extract_bearer_token,
    bearer_scheme
)

from .dependencies import (
    get_optional_user,
    get_current_user,
    get_refresh_user,
    require_role,
    OptionalUser,
    CurrentUser,
    RefreshUser,
    AdminUser
)

__all__ = [
    # Passwords
    "pwd_context",
    "hash_password",
    "verify_password",
    "parse_basic_token",

    # Tokens
    "ACCESS",
    "REFRESH",
    "TokenRecord",
    "generate_token",
    "hash_token",
    "issue_token",
    "issue_token_pair",
    "validate_token",
    "block_token",
    "register",
    "login",

    # Middleware
    "AuthenticationMiddleware",
    "extract_bearer_token",
    "bearer_scheme",

    # Dependencies
    "get_optional_user",
    "get_current_user",
    "get_refresh_user",
    "require_role",
    "OptionalUser",
    "CurrentUser",
    "RefreshUser",
    "AdminUser"
]
