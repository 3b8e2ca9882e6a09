"""Authentication API endpoints."""

import logging
from typing import Annotated, Dict

from fastapi import APIRouter, Header

from ..auth import tokens
from ..auth.dependencies import CurrentUser, RefreshUser
from ..errors.problem_details import NotFoundError
from ..models.users import User, TokenPair, AccessToken, BlockTokenRequest


logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/auth",
    tags=["Auth"],
    responses={
        400: {"description": "Bad Request - Malformed credentials"},
        401: {"description": "Unauthorized"}
    }
)

BasicAuthorization = Annotated[
    str,
    Header(description="Basic base64(email:password)")
]


@router.post(
    "/register",
    response_model=User,
    status_code=201,
    summary="Register a user",
    description="Create a user from Basic credentials in the Authorization header.",
    responses={409: {"description": "Conflict - Email already registered"}}
)
async def register_user(authorization: BasicAuthorization = "") -> User:
    return await tokens.register(authorization)


@router.post(
    "/login",
    response_model=TokenPair,
    summary="Log in",
    description="Exchange Basic credentials for an access token and a refresh token."
)
async def login_user(authorization: BasicAuthorization = "") -> TokenPair:
    return await tokens.login(authorization)


@router.post(
    "/token/block",
    summary="Revoke a token",
    description="Revoke an access or refresh token so it can no longer be used."
)
async def block_token(body: BlockTokenRequest, user: CurrentUser) -> Dict[str, bool]:
    """Revoke a token.

    Raises:
        NotFoundError: If the token is unknown or already revoked
    """
    if not await tokens.block_token(body.token):
        raise NotFoundError("Token not found")

    logger.info(f"User {user.id} revoked a token")
    return {"blocked": True}


@router.post(
    "/token/access",
    response_model=AccessToken,
    summary="Rotate access token",
    description="Issue a new access token. Requires a refresh token as the Bearer credential."
)
async def rotate_access_token(user: RefreshUser) -> AccessToken:
    return AccessToken(access_token=await tokens.issue_token(user.id, tokens.ACCESS))


@router.get(
    "/private",
    response_model=User,
    summary="Current user",
    description="Return the user the access token belongs to."
)
async def private(user: CurrentUser) -> User:
    return user
