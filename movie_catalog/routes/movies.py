"""Movies API endpoints."""

import logging
from typing import Annotated, List

from fastapi import APIRouter, Query, Request, Response

from ..auth.dependencies import AdminUser, CurrentUser, OptionalUser
from ..cache import get_cache
from ..config import get_settings
from ..db import movies as movies_db
from ..errors.problem_details import BadRequestError
from ..models.movies import Movie, MovieCreate, MovieUpdate, MovieListResponse, MovieLikeResult
from ..pagination import CursorPaginationParams, create_link_header
from ..pagination.cursor import DEFAULT_ORDER, DEFAULT_TAKE


logger = logging.getLogger(__name__)

MIN_TITLE_FILTER_LENGTH = 3
RECENT_MOVIES_CACHE_KEY = "movies:recent"

router = APIRouter(
    prefix="/movie",
    tags=["Movies"],
    responses={
        400: {"description": "Bad Request"},
        404: {"description": "Movie not found"}
    }
)


def _invalidate_recent() -> None:
    get_cache().delete(RECENT_MOVIES_CACHE_KEY)


@router.get(
    "",
    response_model=MovieListResponse,
    summary="List movies",
    description="List movies with cursor-based pagination and an optional title filter.",
    responses={
        200: {"description": "Movies retrieved successfully"},
        400: {"description": "Bad Request - Malformed cursor, order or title filter"}
    }
)
async def list_movies(
    request: Request,
    response: Response,
    user: OptionalUser,
    title: Annotated[str | None, Query(description="Case-insensitive title substring")] = None,
    cursor: Annotated[str | None, Query(description="Cursor returned with the previous page")] = None,
    order: Annotated[
        List[str] | None,
        Query(description="Sort instructions, each <column>_ASC or <column>_DESC; repeatable")
    ] = None,
    take: Annotated[
        int,
        Query(ge=1, le=get_settings().max_take, description="Number of movies per page")
    ] = DEFAULT_TAKE
) -> MovieListResponse:
    """List movies one page at a time.

    The first page is sorted by ``order``. Every later page follows the
    sort embedded in its cursor, so changing ``order`` mid-traversal has no
    effect until the client starts over without a cursor. When another page
    exists the response carries a ``Link: <...>; rel="next"`` header.

    Args:
        request: FastAPI request object
        response: FastAPI response object for adding headers
        user: Authenticated caller, if any; adds ``likeStatus`` to each movie
        title: Optional title filter, at least 3 characters
        cursor: Pagination cursor for continuing from previous page
        order: Sort instructions
        take: Page size

    Returns:
        The page of movies with its continuation cursor
    """
    if title and len(title) < MIN_TITLE_FILTER_LENGTH:
        raise BadRequestError(f"title must be at least {MIN_TITLE_FILTER_LENGTH} characters")

    order = order or list(DEFAULT_ORDER)
    params = CursorPaginationParams(cursor=cursor, order=order, take=take)

    result = await movies_db.list_movies(params, title=title, user_id=user.id if user else None)

    # Add Link header for pagination (RFC 8288)
    if result.next_cursor:
        # The next cursor carries its own order, which overrides any order param
        current_params = {"take": str(take)} if cursor else {"order": order, "take": str(take)}
        if title:
            current_params["title"] = title

        link_header = create_link_header(
            base_url=str(request.url).split("?")[0],
            params=current_params,
            next_cursor=result.next_cursor
        )
        if link_header:
            response.headers["Link"] = link_header

    logger.info(f"Retrieved {len(result.data)} movies")
    return result


@router.get(
    "/recent",
    response_model=List[Movie],
    summary="Recent movies",
    description="The 10 most recently created movies. Cached briefly in process."
)
async def recent_movies() -> List[Movie]:
    cache = get_cache()

    movies = cache.get(RECENT_MOVIES_CACHE_KEY)
    if movies is None:
        movies = await movies_db.get_recent_movies()
        cache.set(RECENT_MOVIES_CACHE_KEY, movies, get_settings().recent_movies_cache_ttl)
    else:
        logger.debug("Serving recent movies from cache")

    return movies


@router.get("/{movie_id}", response_model=Movie, summary="Get a movie")
async def get_movie(movie_id: int, user: OptionalUser) -> Movie:
    return await movies_db.get_movie(movie_id, user.id if user else None)


@router.post(
    "",
    response_model=Movie,
    status_code=201,
    summary="Create a movie",
    description="Create a movie from a video previously uploaded through /common/video.",
    responses={
        403: {"description": "Forbidden - Admin role required"},
        409: {"description": "Conflict - Title already exists"}
    }
)
async def create_movie(data: MovieCreate, admin: AdminUser) -> Movie:
    logger.info(f"Admin {admin.id} creating movie '{data.title}'")

    movie = await movies_db.create_movie(data, admin.id)
    _invalidate_recent()
    return movie


@router.patch(
    "/{movie_id}",
    response_model=Movie,
    summary="Update a movie",
    description="Partially update a movie; genreIds, when given, replace the current genres.",
    responses={409: {"description": "Conflict - Title already exists"}}
)
async def update_movie(movie_id: int, data: MovieUpdate, admin: AdminUser) -> Movie:
    movie = await movies_db.update_movie(movie_id, data)
    _invalidate_recent()
    return movie


@router.delete("/{movie_id}", response_model=int, summary="Delete a movie")
async def delete_movie(movie_id: int, admin: AdminUser) -> int:
    deleted = await movies_db.delete_movie(movie_id)
    _invalidate_recent()
    return deleted


@router.post(
    "/{movie_id}/like",
    response_model=MovieLikeResult,
    summary="Like a movie",
    description="Like a movie; liking it again withdraws the like."
)
async def like_movie(movie_id: int, user: CurrentUser) -> MovieLikeResult:
    return await movies_db.toggle_movie_like(movie_id, user.id, True)


@router.post(
    "/{movie_id}/dislike",
    response_model=MovieLikeResult,
    summary="Dislike a movie",
    description="Dislike a movie; disliking it again withdraws the dislike."
)
async def dislike_movie(movie_id: int, user: CurrentUser) -> MovieLikeResult:
    return await movies_db.toggle_movie_like(movie_id, user.id, False)
