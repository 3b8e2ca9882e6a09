"""Database operations for directors."""

import logging
from typing import List

import asyncpg

from ..models.directors import Director, DirectorCreate, DirectorUpdate
from ..errors.problem_details import NotFoundError, ConflictError, InternalServerError
from .connection import get_db_pool


logger = logging.getLogger(__name__)

DIRECTOR_COLUMNS = "id, name, dob, nationality, created_at, updated_at"


async def create_director(data: DirectorCreate) -> Director:
    pool = await get_db_pool()

    try:
        async with pool.acquire() as conn:
            row = await conn.fetchrow(
                f"""
                INSERT INTO directors (name, dob, nationality)
                VALUES ($1, $2, $3)
                RETURNING {DIRECTOR_COLUMNS}
                """,
                data.name,
                data.dob,
                data.nationality
            )
            director = Director.model_validate(dict(row))
            logger.info(f"Created director {director.id}")
            return director

    except asyncpg.PostgresError as e:
        logger.error(f"Database error creating director: {e}")
        raise InternalServerError(f"Database error: {e}")


async def list_directors() -> List[Director]:
    pool = await get_db_pool()

    try:
        async with pool.acquire() as conn:
            rows = await conn.fetch(f"SELECT {DIRECTOR_COLUMNS} FROM directors ORDER BY id")
            return [Director.model_validate(dict(row)) for row in rows]

    except asyncpg.PostgresError as e:
        logger.error(f"Database error listing directors: {e}")
        raise InternalServerError(f"Database error: {e}")


async def get_director(director_id: int) -> Director:
    """Get a director by id.

    Raises:
        NotFoundError: If the director doesn't exist
    """
    pool = await get_db_pool()

    try:
        async with pool.acquire() as conn:
            row = await conn.fetchrow(
                f"SELECT {DIRECTOR_COLUMNS} FROM directors WHERE id = $1",
                director_id
            )
            if not row:
                raise NotFoundError(f"Director {director_id} not found")
            return Director.model_validate(dict(row))

    except NotFoundError:
        raise
    except asyncpg.PostgresError as e:
        logger.error(f"Database error retrieving director {director_id}: {e}")
        raise InternalServerError(f"Database error: {e}")


async def update_director(director_id: int, data: DirectorUpdate) -> Director:
    """Update the given fields of a director.

    Raises:
        NotFoundError: If the director doesn't exist
    """
    pool = await get_db_pool()

    try:
        async with pool.acquire() as conn:
            row = await conn.fetchrow(
                f"""
                UPDATE directors
                SET name = COALESCE($2, name),
                    dob = COALESCE($3, dob),
                    nationality = COALESCE($4, nationality),
                    updated_at = now()
                WHERE id = $1
                RETURNING {DIRECTOR_COLUMNS}
                """,
                director_id,
                data.name,
                data.dob,
                data.nationality
            )
            if not row:
                raise NotFoundError(f"Director {director_id} not found")

            logger.info(f"Updated director {director_id}")
            return Director.model_validate(dict(row))

    except NotFoundError:
        raise
    except asyncpg.PostgresError as e:
        logger.error(f"Database error updating director {director_id}: {e}")
        raise InternalServerError(f"Database error: {e}")


async def delete_director(director_id: int) -> int:
    """Delete a director and return its id.

    Raises:
        NotFoundError: If the director doesn't exist
        ConflictError: If movies still reference the director
    """
    pool = await get_db_pool()

    try:
        async with pool.acquire() as conn:
            deleted = await conn.fetchval(
                "DELETE FROM directors WHERE id = $1 RETURNING id",
                director_id
            )
            if deleted is None:
                raise NotFoundError(f"Director {director_id} not found")

            logger.info(f"Deleted director {director_id}")
            return deleted

    except NotFoundError:
        raise
    except asyncpg.ForeignKeyViolationError:
        raise ConflictError(f"Director {director_id} still has movies")
    except asyncpg.PostgresError as e:
        logger.error(f"Database error deleting director {director_id}: {e}")
        raise InternalServerError(f"Database error: {e}")
