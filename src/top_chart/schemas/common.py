"""Shared Pydantic schemas for common API elements."""
from __future__ import annotations

from pydantic import BaseModel, Field


class ListFilters(BaseModel):
    """Optional filters applied to the public ranked list."""

    search: str | None = Field(None, description="Matches title, artist or genre.")
    genre: str | None = None
    artist: str | None = Field(None, description="Case-insensitive substring match.")
    year: int | None = None
    decade: str | None = Field(None, description='Decade label such as "70s".')
