"""Database operations for movies, their genres and user votes."""

import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

import asyncpg

from ..config import get_settings
from ..models.directors import Director
from ..models.genres import Genre
from ..models.movies import Movie, MovieCreate, MovieDetail, MovieUpdate, MovieListResponse, MovieLikeResult
from ..pagination import CursorPaginationParams, apply_cursor_pagination
from ..errors.problem_details import (
    ProblemDetailException, BadRequestError, NotFoundError, ConflictError, InternalServerError
)
from .connection import get_db_pool
from .query import SelectQuery


logger = logging.getLogger(__name__)

RECENT_MOVIES_LIMIT = 10

# Every movies column is selected so any of them can be a cursor sort key
MOVIE_COLUMNS = [
    "m.id",
    "m.title",
    "m.detail_id",
    "m.director_id",
    "m.creator_id",
    "m.movie_file_path",
    "m.like_count",
    "m.dislike_count",
    "m.created_at",
    "m.updated_at",
    "d.name AS director_name",
    "d.dob AS director_dob",
    "d.nationality AS director_nationality",
    "d.created_at AS director_created_at",
    "d.updated_at AS director_updated_at",
]

MOVIE_COLUMN_TYPES = {
    "created_at": "timestamptz",
    "updated_at": "timestamptz",
}

DIRECTOR_JOIN = "JOIN directors d ON d.id = m.director_id"

_MOVIE_SELECT = f"""
    SELECT {', '.join(MOVIE_COLUMNS)}, md.detail AS detail_text
    FROM movies m
    {DIRECTOR_JOIN}
    JOIN movie_details md ON md.id = m.detail_id
"""


def _row_to_movie(
    row: Mapping[str, Any],
    genres: Sequence[Genre],
    like_status: Optional[bool] = None,
    with_detail: bool = False
) -> Movie:
    director = Director(
        id=row["director_id"],
        name=row["director_name"],
        dob=row["director_dob"],
        nationality=row["director_nationality"],
        created_at=row["director_created_at"],
        updated_at=row["director_updated_at"]
    )
    detail = MovieDetail(id=row["detail_id"], detail=row["detail_text"]) if with_detail else None

    return Movie(
        id=row["id"],
        title=row["title"],
        movie_file_path=row["movie_file_path"],
        like_count=row["like_count"],
        dislike_count=row["dislike_count"],
        creator_id=row["creator_id"],
        director=director,
        genres=list(genres),
        detail=detail,
        like_status=like_status,
        created_at=row["created_at"],
        updated_at=row["updated_at"]
    )


async def _fetch_genres(conn: asyncpg.Connection, movie_ids: Sequence[int]) -> Dict[int, List[Genre]]:
    if not movie_ids:
        return {}

    rows = await conn.fetch(
        """
        SELECT mg.movie_id, g.id, g.name, g.created_at, g.updated_at
        FROM movie_genres mg
        JOIN genres g ON g.id = mg.genre_id
        WHERE mg.movie_id = ANY($1::int[])
        ORDER BY g.id
        """,
        list(movie_ids)
    )

    genres: Dict[int, List[Genre]] = {}
    for row in rows:
        record = dict(row)
        movie_id = record.pop("movie_id")
        genres.setdefault(movie_id, []).append(Genre.model_validate(record))
    return genres


async def _fetch_like_status(
    conn: asyncpg.Connection,
    movie_ids: Sequence[int],
    user_id: Optional[int]
) -> Dict[int, bool]:
    """Map movie id to the user's vote; movies without a vote are absent."""
    if user_id is None or not movie_ids:
        return {}

    rows = await conn.fetch(
        """
        SELECT movie_id, is_like
        FROM movie_user_likes
        WHERE user_id = $1 AND movie_id = ANY($2::int[])
        """,
        user_id,
        list(movie_ids)
    )
    return {row["movie_id"]: row["is_like"] for row in rows}


async def _hydrate(
    conn: asyncpg.Connection,
    rows: Sequence[Mapping[str, Any]],
    user_id: Optional[int] = None,
    with_detail: bool = False
) -> List[Movie]:
    movie_ids = [row["id"] for row in rows]
    genres = await _fetch_genres(conn, movie_ids)
    likes = await _fetch_like_status(conn, movie_ids, user_id)

    return [
        _row_to_movie(row, genres.get(row["id"], []), likes.get(row["id"]), with_detail)
        for row in rows
    ]


async def _load_movie(conn: asyncpg.Connection, movie_id: int, user_id: Optional[int] = None) -> Movie:
    row = await conn.fetchrow(f"{_MOVIE_SELECT} WHERE m.id = $1", movie_id)
    if not row:
        raise NotFoundError(f"Movie {movie_id} not found")

    movies = await _hydrate(conn, [row], user_id, with_detail=True)
    return movies[0]


async def list_movies(
    params: CursorPaginationParams,
    title: Optional[str] = None,
    user_id: Optional[int] = None
) -> MovieListResponse:
    """List movies one cursor page at a time.

    Args:
        params: Cursor, order and page size
        title: Optional case-insensitive substring filter on the title
        user_id: When given, each movie carries that user's like status

    Returns:
        The page of movies with its continuation cursor

    Raises:
        MalformedCursor: If the cursor cannot be decoded
        InvalidOrderDirection: If an order entry is malformed
        asyncpg.UndefinedColumnError: If an order column doesn't exist
        asyncpg.DataError: If a cursor value doesn't fit its column
        InternalServerError: If database operation fails otherwise
    """
    pool = await get_db_pool()

    qb = SelectQuery(
        "movies",
        "m",
        MOVIE_COLUMNS,
        joins=[DIRECTOR_JOIN],
        column_types=MOVIE_COLUMN_TYPES,
        pool=pool
    )
    if title:
        qb.add_condition("m.title ILIKE :title_filter", {"title_filter": f"%{title}%"})

    try:
        page = await apply_cursor_pagination(qb, params)

        async with pool.acquire() as conn:
            movies = await _hydrate(conn, page.data, user_id)

        logger.debug(f"Listed {len(movies)} movies (has_next_page={page.has_next_page})")
        return MovieListResponse(
            data=movies,
            next_cursor=page.next_cursor,
            has_next_page=page.has_next_page
        )

    except ProblemDetailException:
        raise
    except ValueError as e:
        # A crafted cursor column collided with the title filter binding
        raise BadRequestError(str(e))
    except (asyncpg.UndefinedColumnError, asyncpg.DataError):
        raise
    except asyncpg.PostgresError as e:
        logger.error(f"Database error listing movies: {e}")
        raise InternalServerError(f"Database error: {e}")


async def get_recent_movies() -> List[Movie]:
    """Return the newest movies, most recent first."""
    pool = await get_db_pool()

    try:
        async with pool.acquire() as conn:
            rows = await conn.fetch(
                f"""
                SELECT {', '.join(MOVIE_COLUMNS)}
                FROM movies m
                {DIRECTOR_JOIN}
                ORDER BY m.created_at DESC, m.id DESC
                LIMIT $1
                """,
                RECENT_MOVIES_LIMIT
            )
            return await _hydrate(conn, rows)

    except asyncpg.PostgresError as e:
        logger.error(f"Database error listing recent movies: {e}")
        raise InternalServerError(f"Database error: {e}")


async def get_movie(movie_id: int, user_id: Optional[int] = None) -> Movie:
    """Get one movie with its detail, director and genres.

    Raises:
        NotFoundError: If the movie doesn't exist
        InternalServerError: If database operation fails
    """
    pool = await get_db_pool()

    try:
        async with pool.acquire() as conn:
            return await _load_movie(conn, movie_id, user_id)

    except NotFoundError:
        raise
    except asyncpg.PostgresError as e:
        logger.error(f"Database error retrieving movie {movie_id}: {e}")
        raise InternalServerError(f"Database error: {e}")


async def _check_director(conn: asyncpg.Connection, director_id: int) -> None:
    exists = await conn.fetchval("SELECT id FROM directors WHERE id = $1", director_id)
    if exists is None:
        raise NotFoundError(f"Director {director_id} does not exist")


async def _check_genres(conn: asyncpg.Connection, genre_ids: Sequence[int]) -> List[int]:
    wanted = sorted(set(genre_ids))
    rows = await conn.fetch("SELECT id FROM genres WHERE id = ANY($1::int[]) ORDER BY id", wanted)
    found = [row["id"] for row in rows]
    if found != wanted:
        raise NotFoundError(f"Some genres do not exist; existing ids: {found}")
    return found


async def _set_genres(conn: asyncpg.Connection, movie_id: int, genre_ids: Sequence[int]) -> None:
    await conn.execute("DELETE FROM movie_genres WHERE movie_id = $1", movie_id)
    await conn.executemany(
        "INSERT INTO movie_genres (movie_id, genre_id) VALUES ($1, $2)",
        [(movie_id, genre_id) for genre_id in genre_ids]
    )


async def create_movie(data: MovieCreate, creator_id: Optional[int]) -> Movie:
    """Create a movie and move its uploaded file into the movie folder.

    The row inserts and the file move happen in one transaction; if the
    move fails nothing is committed.

    Args:
        data: Movie creation data; ``movie_file_name`` names a file in the upload folder
        creator_id: Id of the user creating the movie

    Returns:
        Created movie

    Raises:
        BadRequestError: If the uploaded file doesn't exist
        NotFoundError: If the director or any genre doesn't exist
        ConflictError: If a movie with the same title exists
        InternalServerError: If database operation fails
    """
    settings = get_settings()
    temp_path = Path(settings.upload_temp_folder) / data.movie_file_name
    movie_path = Path(settings.movie_folder) / data.movie_file_name

    if not temp_path.is_file():
        raise BadRequestError(f"Uploaded file '{data.movie_file_name}' not found")

    pool = await get_db_pool()

    try:
        async with pool.acquire() as conn:
            async with conn.transaction():
                await _check_director(conn, data.director_id)
                genre_ids = await _check_genres(conn, data.genre_ids)

                detail_id = await conn.fetchval(
                    "INSERT INTO movie_details (detail) VALUES ($1) RETURNING id",
                    data.detail
                )
                movie_id = await conn.fetchval(
                    """
                    INSERT INTO movies (title, detail_id, director_id, creator_id, movie_file_path)
                    VALUES ($1, $2, $3, $4, $5)
                    RETURNING id
                    """,
                    data.title,
                    detail_id,
                    data.director_id,
                    creator_id,
                    movie_path.as_posix()
                )
                await _set_genres(conn, movie_id, genre_ids)

                movie_path.parent.mkdir(parents=True, exist_ok=True)
                temp_path.replace(movie_path)

            logger.info(f"Created movie {movie_id} '{data.title}'")
            return await _load_movie(conn, movie_id, creator_id)

    except ProblemDetailException:
        raise
    except asyncpg.UniqueViolationError:
        raise ConflictError(f"A movie titled '{data.title}' already exists")
    except asyncpg.PostgresError as e:
        logger.error(f"Database error creating movie: {e}")
        raise InternalServerError(f"Database error: {e}")
    except OSError as e:
        logger.error(f"Failed to move uploaded file {temp_path}: {e}")
        raise InternalServerError("Failed to store movie file")


async def update_movie(movie_id: int, data: MovieUpdate) -> Movie:
    """Update a movie; genres are replaced when ``genre_ids`` is given.

    Raises:
        NotFoundError: If the movie, the director or any genre doesn't exist
        ConflictError: If the new title is taken
        InternalServerError: If database operation fails
    """
    pool = await get_db_pool()

    try:
        async with pool.acquire() as conn:
            async with conn.transaction():
                detail_id = await conn.fetchval(
                    "SELECT detail_id FROM movies WHERE id = $1 FOR UPDATE",
                    movie_id
                )
                if detail_id is None:
                    raise NotFoundError(f"Movie {movie_id} not found")

                if data.director_id is not None:
                    await _check_director(conn, data.director_id)

                await conn.execute(
                    """
                    UPDATE movies
                    SET title = COALESCE($2, title),
                        director_id = COALESCE($3, director_id),
                        updated_at = now()
                    WHERE id = $1
                    """,
                    movie_id,
                    data.title,
                    data.director_id
                )

                if data.detail is not None:
                    await conn.execute(
                        "UPDATE movie_details SET detail = $2 WHERE id = $1",
                        detail_id,
                        data.detail
                    )

                if data.genre_ids is not None:
                    genre_ids = await _check_genres(conn, data.genre_ids)
                    await _set_genres(conn, movie_id, genre_ids)

            logger.info(f"Updated movie {movie_id}")
            return await _load_movie(conn, movie_id)

    except ProblemDetailException:
        raise
    except asyncpg.UniqueViolationError:
        raise ConflictError(f"A movie titled '{data.title}' already exists")
    except asyncpg.PostgresError as e:
        logger.error(f"Database error updating movie {movie_id}: {e}")
        raise InternalServerError(f"Database error: {e}")


async def delete_movie(movie_id: int) -> int:
    """Delete a movie together with its detail and return its id.

    Raises:
        NotFoundError: If the movie doesn't exist
    """
    pool = await get_db_pool()

    try:
        async with pool.acquire() as conn:
            async with conn.transaction():
                detail_id = await conn.fetchval(
                    "DELETE FROM movies WHERE id = $1 RETURNING detail_id",
                    movie_id
                )
                if detail_id is None:
                    raise NotFoundError(f"Movie {movie_id} not found")

                await conn.execute("DELETE FROM movie_details WHERE id = $1", detail_id)

        logger.info(f"Deleted movie {movie_id}")
        return movie_id

    except NotFoundError:
        raise
    except asyncpg.PostgresError as e:
        logger.error(f"Database error deleting movie {movie_id}: {e}")
        raise InternalServerError(f"Database error: {e}")


async def toggle_movie_like(movie_id: int, user_id: int, is_like: bool) -> MovieLikeResult:
    """Record, flip or withdraw a user's vote on a movie.

    Voting the same way twice withdraws the vote; voting the other way flips
    it. The movie's like and dislike counters are recomputed in the same
    transaction.

    Returns:
        The user's vote afterwards, None when withdrawn

    Raises:
        BadRequestError: If the movie doesn't exist
        InternalServerError: If database operation fails
    """
    pool = await get_db_pool()

    try:
        async with pool.acquire() as conn:
            async with conn.transaction():
                exists = await conn.fetchval(
                    "SELECT id FROM movies WHERE id = $1 FOR UPDATE",
                    movie_id
                )
                if exists is None:
                    raise BadRequestError(f"Movie {movie_id} does not exist")

                current = await conn.fetchval(
                    "SELECT is_like FROM movie_user_likes WHERE movie_id = $1 AND user_id = $2",
                    movie_id,
                    user_id
                )

                if current is None:
                    await conn.execute(
                        "INSERT INTO movie_user_likes (movie_id, user_id, is_like) VALUES ($1, $2, $3)",
                        movie_id,
                        user_id,
                        is_like
                    )
                    result = is_like
                elif current == is_like:
                    await conn.execute(
                        "DELETE FROM movie_user_likes WHERE movie_id = $1 AND user_id = $2",
                        movie_id,
                        user_id
                    )
                    result = None
                else:
                    await conn.execute(
                        "UPDATE movie_user_likes SET is_like = $3 WHERE movie_id = $1 AND user_id = $2",
                        movie_id,
                        user_id,
                        is_like
                    )
                    result = is_like

                await conn.execute(
                    """
                    UPDATE movies
                    SET like_count = (
                            SELECT count(*) FROM movie_user_likes WHERE movie_id = $1 AND is_like
                        ),
                        dislike_count = (
                            SELECT count(*) FROM movie_user_likes WHERE movie_id = $1 AND NOT is_like
                        )
                    WHERE id = $1
                    """,
                    movie_id
                )

        logger.info(f"User {user_id} vote on movie {movie_id} is now {result}")
        return MovieLikeResult(is_like=result)

    except BadRequestError:
        raise
    except asyncpg.PostgresError as e:
        logger.error(f"Database error toggling vote on movie {movie_id}: {e}")
        raise InternalServerError(f"Database error: {e}")
