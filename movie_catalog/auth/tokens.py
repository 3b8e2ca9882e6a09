"""Opaque bearer tokens with secure hashing and validation.

Tokens are random strings handed to the client once; only their SHA-256
digest is stored, so a token can be looked up by primary key but never
recovered from the database.
"""

import hashlib
import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

import asyncpg
from pydantic import BaseModel

from ..config import get_settings
from ..db import users as users_db
from ..db.connection import get_db_pool
from ..errors.problem_details import UnauthorizedError, InternalServerError
from ..models.users import Role, User, UserCreate, TokenPair
from .passwords import hash_password, verify_password, parse_basic_token


logger = logging.getLogger(__name__)

ACCESS = "access"
REFRESH = "refresh"
TOKEN_TYPES = (ACCESS, REFRESH)


class TokenRecord(BaseModel):
    """A validated token and the user it belongs to."""

    user: User
    token_type: str
    expires_at: datetime


def generate_token() -> str:
    """Generate a new bearer token.

    Returns:
        A cryptographically secure random token string.
    """
    return secrets.token_urlsafe(32)


def hash_token(token: str) -> bytes:
    """Digest a token for storage and lookup."""
    return hashlib.sha256(token.encode("utf-8")).digest()


def _ttl(token_type: str) -> timedelta:
    settings = get_settings()
    if token_type == REFRESH:
        return timedelta(seconds=settings.refresh_token_ttl_seconds)
    return timedelta(seconds=settings.access_token_ttl_seconds)


async def issue_token(user_id: int, token_type: str) -> str:
    """Create and store a new token for a user.

    Args:
        user_id: Owner of the token
        token_type: ``access`` or ``refresh``

    Returns:
        The plain text token (only returned here, not stored)
    """
    if token_type not in TOKEN_TYPES:
        raise ValueError(f"Unknown token type '{token_type}'")

    token = generate_token()
    expires_at = datetime.now(timezone.utc) + _ttl(token_type)

    pool = await get_db_pool()
    try:
        async with pool.acquire() as conn:
            await conn.execute(
                """
                INSERT INTO auth_tokens (token_hash, user_id, token_type, expires_at)
                VALUES ($1, $2, $3, $4)
                """,
                hash_token(token),
                user_id,
                token_type,
                expires_at
            )
    except asyncpg.PostgresError as e:
        logger.error(f"Database error issuing {token_type} token for user {user_id}: {e}")
        raise InternalServerError(f"Database error: {e}")

    logger.debug(f"Issued {token_type} token for user {user_id}")
    return token


async def issue_token_pair(user_id: int) -> TokenPair:
    return TokenPair(
        access_token=await issue_token(user_id, ACCESS),
        refresh_token=await issue_token(user_id, REFRESH)
    )


async def validate_token(token: str) -> Optional[TokenRecord]:
    """Validate a token and return its record.

    Args:
        token: The plain text token to validate

    Returns:
        The token record if the token is known and unexpired, None otherwise
    """
    token_hash = hash_token(token)

    pool = await get_db_pool()
    try:
        async with pool.acquire() as conn:
            row = await conn.fetchrow(
                """
                SELECT t.token_type, t.expires_at,
                       u.id, u.email, u.role, u.created_at, u.updated_at
                FROM auth_tokens t
                JOIN users u ON u.id = t.user_id
                WHERE t.token_hash = $1
                """,
                token_hash
            )

            if not row:
                return None

            if row["expires_at"] <= datetime.now(timezone.utc):
                logger.debug(f"Rejected expired {row['token_type']} token for user {row['id']}")
                return None

            await conn.execute(
                "UPDATE auth_tokens SET last_used = now() WHERE token_hash = $1",
                token_hash
            )

    except asyncpg.PostgresError as e:
        logger.error(f"Database error validating token: {e}")
        raise InternalServerError(f"Database error: {e}")

    record = dict(row)
    return TokenRecord(
        user=User.model_validate({k: record[k] for k in ("id", "email", "role", "created_at", "updated_at")}),
        token_type=record["token_type"],
        expires_at=record["expires_at"]
    )


async def block_token(token: str) -> bool:
    """Revoke a token by deleting it from the database.

    Returns:
        True if the token was found and revoked, False otherwise
    """
    pool = await get_db_pool()
    try:
        async with pool.acquire() as conn:
            deleted = await conn.fetchval(
                "DELETE FROM auth_tokens WHERE token_hash = $1 RETURNING user_id",
                hash_token(token)
            )
    except asyncpg.PostgresError as e:
        logger.error(f"Database error revoking token: {e}")
        raise InternalServerError(f"Database error: {e}")

    if deleted is not None:
        logger.info(f"Revoked a token of user {deleted}")
    return deleted is not None


async def register(authorization: str) -> User:
    """Create a user from a Basic credential header.

    Self-registered users always get the ``USER`` role; admins grant others.

    Raises:
        BadRequestError: If the header is malformed
        ConflictError: If the email is already registered
    """
    email, password = parse_basic_token(authorization)
    data = UserCreate(email=email, password=password, role=Role.USER)

    return await users_db.create_user(data.email, hash_password(data.password), data.role)


async def login(authorization: str) -> TokenPair:
    """Exchange Basic credentials for an access/refresh token pair.

    Raises:
        BadRequestError: If the header is malformed
        UnauthorizedError: If the email is unknown or the password is wrong
    """
    email, password = parse_basic_token(authorization)

    user = await users_db.get_user_row_by_email(email)
    if user is None or not verify_password(password, user.password):
        logger.info("Rejected login with invalid credentials")
        raise UnauthorizedError("Invalid email or password")

    logger.info(f"User {user.id} logged in")
    return await issue_token_pair(user.id)
