"""Pydantic models for directors."""

from datetime import date, datetime
from typing import Optional

from pydantic import ConfigDict, Field

from .base import CamelModel


class DirectorCreate(CamelModel):
    """Model for creating a director."""

    name: str = Field(..., min_length=1, max_length=200, examples=["Christopher Nolan"])
    dob: date = Field(description="Date of birth", examples=["1970-07-30"])
    nationality: str = Field(..., min_length=1, max_length=100, examples=["British-American"])


class DirectorUpdate(CamelModel):
    """Model for updating a director."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    dob: Optional[date] = None
    nationality: Optional[str] = Field(default=None, min_length=1, max_length=100)


class Director(DirectorCreate):
    """Complete director model."""

    id: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": 1,
                "name": "Christopher Nolan",
                "dob": "1970-07-30",
                "nationality": "British-American",
                "createdAt": "2024-01-01T12:00:00Z",
                "updatedAt": "2024-01-01T12:00:00Z"
            }
        }
    )
