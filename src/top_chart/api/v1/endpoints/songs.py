# src/top_chart/api/v1/endpoints/songs.py
"""Public chart listing endpoints."""

from typing import Annotated

from fastapi import APIRouter, Query

from top_chart.api.v1.dependencies import SessionDep, VotingServiceDep
from top_chart.models import Song
from top_chart.schemas import GenreListResponse, ListFilters, SongResponse

router = APIRouter(prefix="/songs", tags=["songs"])


@router.get("", response_model=list[SongResponse])
async def list_songs(
    db: SessionDep,
    voting: VotingServiceDep,
    filters: Annotated[ListFilters, Query()],
) -> list[Song]:
    """List approved songs in rank order."""
    return voting.list_ranked(db, filters)


@router.get("/filters", response_model=GenreListResponse)
async def list_filters(db: SessionDep, voting: VotingServiceDep) -> GenreListResponse:
    """Return the genres available for filtering."""
    return GenreListResponse(genres=voting.list_genres(db))
