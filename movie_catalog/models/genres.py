"""Pydantic models for genres."""

from datetime import datetime
from typing import Optional

from pydantic import Field

from .base import CamelModel


class GenreCreate(CamelModel):
    """Model for creating a genre."""

    name: str = Field(..., min_length=1, max_length=100, examples=["Action"])


class GenreUpdate(CamelModel):
    """Model for updating a genre."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=100)


class Genre(GenreCreate):
    """Complete genre model."""

    id: int
    created_at: datetime
    updated_at: datetime
