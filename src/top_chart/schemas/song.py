# src/top_chart/schemas/song.py
"""Song-related Pydantic schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field, HttpUrl, field_validator

from top_chart.db.time import as_utc

SongStatusLiteral = Literal["PENDING", "APPROVED", "REJECTED"]


class SongResponse(BaseModel):
    """Public view of a ranked song."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    rank: int | None = Field(None, validation_alias="current_rank")
    previous_rank: int | None = None
    votes: int
    artist: str
    title: str
    year: int | None = None
    genre: str | None = None
    youtube_url: str | None = None
    spotify_url: str | None = None
    album_art_url: str | None = None


class AdminSongResponse(SongResponse):
    """Moderator view including workflow state and submitter details."""

    status: SongStatusLiteral
    submitter_email: str | None = None
    submitter_first_name: str | None = None
    submitter_last_name: str | None = None
    created_at: datetime
    updated_at: datetime

    @field_validator("created_at", "updated_at", mode="after")
    @classmethod
    def _utc(cls, value: datetime) -> datetime:
        return as_utc(value)


class SongSubmission(BaseModel):
    """Schema for suggesting a new song for the chart."""

    artist: str = Field(..., min_length=1, max_length=255)
    title: str = Field(..., min_length=1, max_length=255)
    year: int | None = Field(None, ge=1900, le=2100)
    genre: str = Field(..., min_length=1, max_length=100)
    youtube_url: HttpUrl | None = None
    spotify_url: HttpUrl | None = None
    album_art_url: HttpUrl | None = None
    email: EmailStr
    first_name: str | None = Field(None, max_length=100)
    last_name: str | None = Field(None, max_length=100)
    captcha_token: str | None = None

    @field_validator(
        "youtube_url",
        "spotify_url",
        "album_art_url",
        "first_name",
        "last_name",
        mode="before",
    )
    @classmethod
    def _blank_to_none(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value


class SubmissionResponse(BaseModel):
    """Acknowledgement returned after a submission is stored."""

    ok: bool = True
    song_id: int


class GenreListResponse(BaseModel):
    """Distinct genres of approved songs, for filter menus."""

    genres: list[str]
