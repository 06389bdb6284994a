# src/top_chart/schemas/__init__.py
"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .common import ListFilters
from .ranking import RankingSnapshot
from .song import (
    AdminSongResponse,
    GenreListResponse,
    SongResponse,
    SongSubmission,
    SubmissionResponse,
)
from .vote import VoteCreate, VoteResponse

__all__ = [
    "ListFilters",
    "RankingSnapshot",
    "AdminSongResponse", "GenreListResponse", "SongResponse",
    "SongSubmission", "SubmissionResponse",
    "VoteCreate", "VoteResponse"
]
