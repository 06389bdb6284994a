# src/top_chart/schemas/vote.py
"""Vote-related Pydantic schemas."""

from pydantic import BaseModel, Field


class VoteCreate(BaseModel):
    """Schema for casting a vote."""

    song_id: int = Field(..., gt=0)


class VoteResponse(BaseModel):
    """Result of an accepted vote."""

    ok: bool = True
    song_id: int
    votes: int
