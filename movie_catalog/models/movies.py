"""Pydantic models for movies."""

from datetime import datetime
from typing import List, Optional

from pydantic import ConfigDict, Field, field_validator

from .base import CamelModel
from .directors import Director
from .genres import Genre


class MovieCreate(CamelModel):
    """Model for creating a movie."""

    title: str = Field(..., min_length=1, max_length=200, examples=["The Dark Knight"])
    detail: str = Field(..., min_length=1, examples=["The Dark Knight is a superhero movie"])
    director_id: int = Field(..., ge=1, examples=[1])
    genre_ids: List[int] = Field(..., min_length=1, examples=[[1, 2, 3]])
    movie_file_name: str = Field(..., min_length=1, examples=["aaa-bbb-ccc-ddd.mp4"])

    @field_validator("title", "detail")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v

    @field_validator("movie_file_name")
    @classmethod
    def plain_file_name(cls, v: str) -> str:
        """Only bare file names from the upload folder are accepted."""
        if "/" in v or "\\" in v or v in (".", ".."):
            raise ValueError("must be a file name, not a path")
        return v


class MovieUpdate(CamelModel):
    """Model for updating a movie; genres are replaced when given."""

    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    detail: Optional[str] = Field(default=None, min_length=1)
    director_id: Optional[int] = Field(default=None, ge=1)
    genre_ids: Optional[List[int]] = Field(default=None, min_length=1)


class MovieDetail(CamelModel):
    """Long-form description of a movie."""

    id: int
    detail: str


class Movie(CamelModel):
    """Complete movie model."""

    id: int
    title: str
    movie_file_path: str
    like_count: int = 0
    dislike_count: int = 0
    creator_id: Optional[int] = None
    director: Director
    genres: List[Genre] = Field(default_factory=list)
    detail: Optional[MovieDetail] = None
    like_status: Optional[bool] = Field(
        default=None,
        description="The caller's vote: true liked, false disliked, null none"
    )
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": 1,
                "title": "The Dark Knight",
                "movieFilePath": "public/movie/aaa-bbb-ccc-ddd.mp4",
                "likeCount": 3,
                "dislikeCount": 0,
                "creatorId": 1,
                "director": {
                    "id": 1,
                    "name": "Christopher Nolan",
                    "dob": "1970-07-30",
                    "nationality": "British-American",
                    "createdAt": "2024-01-01T12:00:00Z",
                    "updatedAt": "2024-01-01T12:00:00Z"
                },
                "genres": [],
                "likeStatus": None,
                "createdAt": "2024-01-01T12:00:00Z",
                "updatedAt": "2024-01-01T12:00:00Z"
            }
        }
    )


class MovieListResponse(CamelModel):
    """Response model for listing movies."""

    data: List[Movie] = Field(description="Movies on this page")
    next_cursor: Optional[str] = Field(default=None, description="Cursor for next page")
    has_next_page: bool = Field(description="Whether more movies are available")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "data": [],
                "nextCursor": "eyJ2YWx1ZXMiOnsiaWQiOjI3fSwib3JkZXIiOlsiaWRfREVTQyJdfQ==",
                "hasNextPage": True
            }
        }
    )


class MovieLikeResult(CamelModel):
    """Caller's vote after toggling a like or dislike."""

    is_like: Optional[bool] = None


class UploadedVideo(CamelModel):
    """Name of a video stored in the upload folder, to be passed as movieFileName."""

    filename: str = Field(examples=["0b5bb4c7-4d5e-4a8a-9f1e-6a6f0b3f6a55.mp4"])
