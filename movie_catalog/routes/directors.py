"""Director API endpoints."""

import logging
from typing import List

from fastapi import APIRouter

from ..auth.dependencies import AdminUser
from ..db import directors as directors_db
from ..models.directors import Director, DirectorCreate, DirectorUpdate


logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/director",
    tags=["Directors"],
    responses={404: {"description": "Director not found"}}
)


@router.get("", response_model=List[Director], summary="List directors")
async def list_directors() -> List[Director]:
    return await directors_db.list_directors()


@router.get("/{director_id}", response_model=Director, summary="Get a director")
async def get_director(director_id: int) -> Director:
    return await directors_db.get_director(director_id)


@router.post(
    "",
    response_model=Director,
    status_code=201,
    summary="Create a director",
    responses={403: {"description": "Forbidden - Admin role required"}}
)
async def create_director(data: DirectorCreate, admin: AdminUser) -> Director:
    return await directors_db.create_director(data)


@router.patch("/{director_id}", response_model=Director, summary="Update a director")
async def update_director(director_id: int, data: DirectorUpdate, admin: AdminUser) -> Director:
    return await directors_db.update_director(director_id, data)


@router.delete(
    "/{director_id}",
    response_model=int,
    summary="Delete a director",
    responses={409: {"description": "Conflict - Director still has movies"}}
)
async def delete_director(director_id: int, admin: AdminUser) -> int:
    logger.info(f"Admin {admin.id} deleting director {director_id}")
    return await directors_db.delete_director(director_id)
