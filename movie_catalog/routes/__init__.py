"""API routes for the Movie Catalog API."""

from .auth import router as auth_router
from .users import router as users_router
from .directors import router as directors_router
from .genres import router as genres_router
from .movies import router as movies_router
from .common import router as common_router

__all__ = [
    "auth_router",
    "users_router",
    "directors_router",
    "genres_router",
    "movies_router",
    "common_router"
]
