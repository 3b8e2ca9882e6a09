"""Database operations for users."""

import logging
from typing import List, Optional

import asyncpg

from ..models.users import Role, User, UserRow
from ..errors.problem_details import (
    ProblemDetailException, NotFoundError, ConflictError, InternalServerError
)
from .connection import get_db_pool


logger = logging.getLogger(__name__)

USER_COLUMNS = "id, email, role, created_at, updated_at"


async def create_user(email: str, password_hash: str, role: Role = Role.USER) -> User:
    """Create a new user.

    Args:
        email: Unique email address
        password_hash: Already hashed password
        role: Role granted to the user

    Returns:
        Created user

    Raises:
        ConflictError: If the email is already registered
        InternalServerError: If database operation fails
    """
    pool = await get_db_pool()

    try:
        async with pool.acquire() as conn:
            row = await conn.fetchrow(
                f"""
                INSERT INTO users (email, password, role)
                VALUES ($1, $2, $3)
                RETURNING {USER_COLUMNS}
                """,
                email,
                password_hash,
                int(role)
            )

            if not row:
                raise InternalServerError("Failed to create user")

            user = User.model_validate(dict(row))
            logger.info(f"Created user {user.id} with role {user.role.name}")
            return user

    except ProblemDetailException:
        raise
    except asyncpg.UniqueViolationError as e:
        logger.warning(f"Duplicate email on user creation: {e}")
        raise ConflictError("A user with this email already exists")
    except asyncpg.PostgresError as e:
        logger.error(f"Database error creating user: {e}")
        raise InternalServerError(f"Database error: {e}")


async def get_user(user_id: int) -> User:
    """Get a user by id.

    Raises:
        NotFoundError: If the user doesn't exist
        InternalServerError: If database operation fails
    """
    pool = await get_db_pool()

    try:
        async with pool.acquire() as conn:
            row = await conn.fetchrow(
                f"SELECT {USER_COLUMNS} FROM users WHERE id = $1",
                user_id
            )

            if not row:
                raise NotFoundError(f"User {user_id} not found")

            return User.model_validate(dict(row))

    except NotFoundError:
        raise
    except asyncpg.PostgresError as e:
        logger.error(f"Database error retrieving user {user_id}: {e}")
        raise InternalServerError(f"Database error: {e}")


async def get_user_row_by_email(email: str) -> Optional[UserRow]:
    """Get a user together with its password hash, or None if unknown."""
    pool = await get_db_pool()

    try:
        async with pool.acquire() as conn:
            row = await conn.fetchrow(
                f"SELECT {USER_COLUMNS}, password FROM users WHERE email = $1",
                email
            )
            return UserRow.model_validate(dict(row)) if row else None

    except asyncpg.PostgresError as e:
        logger.error(f"Database error looking up user by email: {e}")
        raise InternalServerError(f"Database error: {e}")


async def list_users() -> List[User]:
    """List all users, oldest first."""
    pool = await get_db_pool()

    try:
        async with pool.acquire() as conn:
            rows = await conn.fetch(f"SELECT {USER_COLUMNS} FROM users ORDER BY id")
            return [User.model_validate(dict(row)) for row in rows]

    except asyncpg.PostgresError as e:
        logger.error(f"Database error listing users: {e}")
        raise InternalServerError(f"Database error: {e}")


async def update_user(
    user_id: int,
    email: Optional[str] = None,
    password_hash: Optional[str] = None,
    role: Optional[Role] = None
) -> User:
    """Update a user; None arguments leave the column unchanged.

    Raises:
        NotFoundError: If the user doesn't exist
        ConflictError: If the new email is already taken
        InternalServerError: If database operation fails
    """
    pool = await get_db_pool()

    try:
        async with pool.acquire() as conn:
            row = await conn.fetchrow(
                f"""
                UPDATE users
                SET email = COALESCE($2, email),
                    password = COALESCE($3, password),
                    role = COALESCE($4, role),
                    updated_at = now()
                WHERE id = $1
                RETURNING {USER_COLUMNS}
                """,
                user_id,
                email,
                password_hash,
                int(role) if role is not None else None
            )

            if not row:
                raise NotFoundError(f"User {user_id} not found")

            logger.info(f"Updated user {user_id}")
            return User.model_validate(dict(row))

    except NotFoundError:
        raise
    except asyncpg.UniqueViolationError:
        raise ConflictError("A user with this email already exists")
    except asyncpg.PostgresError as e:
        logger.error(f"Database error updating user {user_id}: {e}")
        raise InternalServerError(f"Database error: {e}")


async def delete_user(user_id: int) -> int:
    """Delete a user and return its id.

    Raises:
        NotFoundError: If the user doesn't exist
        InternalServerError: If database operation fails
    """
    pool = await get_db_pool()

    try:
        async with pool.acquire() as conn:
            deleted = await conn.fetchval(
                "DELETE FROM users WHERE id = $1 RETURNING id",
                user_id
            )

            if deleted is None:
                raise NotFoundError(f"User {user_id} not found")

            logger.info(f"Deleted user {user_id}")
            return deleted

    except NotFoundError:
        raise
    except asyncpg.PostgresError as e:
        logger.error(f"Database error deleting user {user_id}: {e}")
        raise InternalServerError(f"Database error: {e}")
