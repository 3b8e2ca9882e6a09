"""Database operations for genres."""

import logging
from typing import List

import asyncpg

from ..models.genres import Genre, GenreCreate, GenreUpdate
from ..errors.problem_details import NotFoundError, ConflictError, InternalServerError
from .connection import get_db_pool


logger = logging.getLogger(__name__)

GENRE_COLUMNS = "id, name, created_at, updated_at"


async def create_genre(data: GenreCreate) -> Genre:
    """Create a genre.

    Raises:
        ConflictError: If a genre with the same name exists
    """
    pool = await get_db_pool()

    try:
        async with pool.acquire() as conn:
            row = await conn.fetchrow(
                f"INSERT INTO genres (name) VALUES ($1) RETURNING {GENRE_COLUMNS}",
                data.name
            )
            genre = Genre.model_validate(dict(row))
            logger.info(f"Created genre {genre.id} '{genre.name}'")
            return genre

    except asyncpg.UniqueViolationError:
        raise ConflictError(f"Genre '{data.name}' already exists")
    except asyncpg.PostgresError as e:
        logger.error(f"Database error creating genre: {e}")
        raise InternalServerError(f"Database error: {e}")


async def list_genres() -> List[Genre]:
    pool = await get_db_pool()

    try:
        async with pool.acquire() as conn:
            rows = await conn.fetch(f"SELECT {GENRE_COLUMNS} FROM genres ORDER BY id")
            return [Genre.model_validate(dict(row)) for row in rows]

    except asyncpg.PostgresError as e:
        logger.error(f"Database error listing genres: {e}")
        raise InternalServerError(f"Database error: {e}")


async def get_genre(genre_id: int) -> Genre:
    pool = await get_db_pool()

    try:
        async with pool.acquire() as conn:
            row = await conn.fetchrow(
                f"SELECT {GENRE_COLUMNS} FROM genres WHERE id = $1",
                genre_id
            )
            if not row:
                raise NotFoundError(f"Genre {genre_id} not found")
            return Genre.model_validate(dict(row))

    except NotFoundError:
        raise
    except asyncpg.PostgresError as e:
        logger.error(f"Database error retrieving genre {genre_id}: {e}")
        raise InternalServerError(f"Database error: {e}")


async def update_genre(genre_id: int, data: GenreUpdate) -> Genre:
    """Rename a genre.

    Raises:
        NotFoundError: If the genre doesn't exist
        ConflictError: If the new name is taken
    """
    pool = await get_db_pool()

    try:
        async with pool.acquire() as conn:
            row = await conn.fetchrow(
                f"""
                UPDATE genres
                SET name = COALESCE($2, name), updated_at = now()
                WHERE id = $1
                RETURNING {GENRE_COLUMNS}
                """,
                genre_id,
                data.name
            )
            if not row:
                raise NotFoundError(f"Genre {genre_id} not found")

            logger.info(f"Updated genre {genre_id}")
            return Genre.model_validate(dict(row))

    except NotFoundError:
        raise
    except asyncpg.UniqueViolationError:
        raise ConflictError(f"Genre '{data.name}' already exists")
    except asyncpg.PostgresError as e:
        logger.error(f"Database error updating genre {genre_id}: {e}")
        raise InternalServerError(f"Database error: {e}")


async def delete_genre(genre_id: int) -> int:
    pool = await get_db_pool()

    try:
        async with pool.acquire() as conn:
            deleted = await conn.fetchval(
                "DELETE FROM genres WHERE id = $1 RETURNING id",
                genre_id
            )
            if deleted is None:
                raise NotFoundError(f"Genre {genre_id} not found")

            logger.info(f"Deleted genre {genre_id}")
            return deleted

    except NotFoundError:
        raise
    except asyncpg.PostgresError as e:
        logger.error(f"Database error deleting genre {genre_id}: {e}")
        raise InternalServerError(f"Database error: {e}")
