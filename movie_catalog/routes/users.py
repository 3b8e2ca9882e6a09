"""User administration API endpoints."""

import logging
from typing import List

from fastapi import APIRouter

from ..auth.dependencies import AdminUser
from ..auth.passwords import hash_password
from ..db import users as users_db
from ..models.users import User, UserCreate, UserUpdate


logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/user",
    tags=["Users"],
    responses={
        401: {"description": "Unauthorized"},
        403: {"description": "Forbidden - Admin role required"},
        404: {"description": "Not Found"}
    }
)


@router.post(
    "",
    response_model=User,
    status_code=201,
    summary="Create a user",
    responses={409: {"description": "Conflict - Email already registered"}}
)
async def create_user(data: UserCreate, admin: AdminUser) -> User:
    logger.info(f"Admin {admin.id} creating user with role {data.role.name}")
    return await users_db.create_user(data.email, hash_password(data.password), data.role)


@router.get("", response_model=List[User], summary="List users")
async def list_users(admin: AdminUser) -> List[User]:
    return await users_db.list_users()


@router.get("/{user_id}", response_model=User, summary="Get a user")
async def get_user(user_id: int, admin: AdminUser) -> User:
    return await users_db.get_user(user_id)


@router.patch(
    "/{user_id}",
    response_model=User,
    summary="Update a user",
    description="Update email, password or role. A new password is hashed before storage."
)
async def update_user(user_id: int, data: UserUpdate, admin: AdminUser) -> User:
    password_hash = hash_password(data.password) if data.password is not None else None
    return await users_db.update_user(user_id, data.email, password_hash, data.role)


@router.delete("/{user_id}", response_model=int, summary="Delete a user")
async def delete_user(user_id: int, admin: AdminUser) -> int:
    return await users_db.delete_user(user_id)
