"""Data models for the Movie Catalog API."""

from .base import CamelModel
from .users import (
    Role,
    User,
    UserCreate,
    UserUpdate,
    UserRow,
    TokenPair,
    AccessToken,
    BlockTokenRequest
)
from .directors import Director, DirectorCreate, DirectorUpdate
from .genres import Genre, GenreCreate, GenreUpdate
from .movies import (
    Movie,
    MovieCreate,
    MovieUpdate,
    MovieDetail,
    MovieListResponse,
    MovieLikeResult,
    UploadedVideo
)

__all__ = [
    "CamelModel",
    "Role",
    "User",
    "UserCreate",
    "UserUpdate",
    "UserRow",
    "TokenPair",
    "AccessToken",
    "BlockTokenRequest",
    "Director",
    "DirectorCreate",
    "DirectorUpdate",
    "Genre",
    "GenreCreate",
    "GenreUpdate",
    "Movie",
    "MovieCreate",
    "MovieUpdate",
    "MovieDetail",
    "MovieListResponse",
    "MovieLikeResult",
    "UploadedVideo"
]
