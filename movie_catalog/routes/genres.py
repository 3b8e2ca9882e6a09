"""Genre API endpoints."""

from typing import List

from fastapi import APIRouter

from ..auth.dependencies import AdminUser
from ..db import genres as genres_db
from ..models.genres import Genre, GenreCreate, GenreUpdate


router = APIRouter(
    prefix="/genre",
    tags=["Genres"],
    responses={404: {"description": "Genre not found"}}
)


@router.get("", response_model=List[Genre], summary="List genres")
async def list_genres() -> List[Genre]:
    return await genres_db.list_genres()


@router.get("/{genre_id}", response_model=Genre, summary="Get a genre")
async def get_genre(genre_id: int) -> Genre:
    return await genres_db.get_genre(genre_id)


@router.post(
    "",
    response_model=Genre,
    status_code=201,
    summary="Create a genre",
    responses={409: {"description": "Conflict - Genre name already exists"}}
)
async def create_genre(data: GenreCreate, admin: AdminUser) -> Genre:
    return await genres_db.create_genre(data)


@router.patch(
    "/{genre_id}",
    response_model=Genre,
    summary="Rename a genre",
    responses={409: {"description": "Conflict - Genre name already exists"}}
)
async def update_genre(genre_id: int, data: GenreUpdate, admin: AdminUser) -> Genre:
    return await genres_db.update_genre(genre_id, data)


@router.delete("/{genre_id}", response_model=int, summary="Delete a genre")
async def delete_genre(genre_id: int, admin: AdminUser) -> int:
    return await genres_db.delete_genre(genre_id)
