# src/top_chart/api/v1/endpoints/admin.py
"""Moderator endpoints: review queue, approval and exports."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, HTTPException, Path, Query, status
from fastapi.responses import StreamingResponse

from top_chart.api.v1.dependencies import (
    AdminDep,
    ModerationServiceDep,
    SessionDep,
    VotingServiceDep,
)
from top_chart.models import Song
from top_chart.models.song import SONG_STATUS_PENDING, SONG_STATUSES
from top_chart.schemas import AdminSongResponse
from top_chart.services.errors import RecomputeFailedError
from top_chart.services.export import iter_rankings_csv
from top_chart.services.moderation import ModerationService, SongNotFoundError

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[AdminDep])

SongIdPath = Annotated[int, Path(gt=0)]


@router.get("/songs", response_model=list[AdminSongResponse])
async def list_songs_for_review(
    db: SessionDep,
    status_filter: Annotated[str, Query(alias="status")] = SONG_STATUS_PENDING,
) -> list[Song]:
    """List songs in a moderation state (pending by default)."""
    wanted = status_filter.upper()
    if wanted not in SONG_STATUSES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="invalid_status",
        )
    return ModerationService.list_by_status(db, wanted)


def _moderate(action, db, song_id: int) -> Song:
    try:
        return action(db, song_id)
    except SongNotFoundError as err:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="song_not_found",
        ) from err
    except RecomputeFailedError as err:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="ranking_unavailable",
        ) from err


@router.post("/songs/{song_id}/approve", response_model=AdminSongResponse)
def approve_song(
    song_id: SongIdPath,
    db: SessionDep,
    moderation: ModerationServiceDep,
) -> Song:
    """Approve a song, re-rank the chart and broadcast the new ranking."""
    return _moderate(moderation.approve, db, song_id)


@router.post("/songs/{song_id}/reject", response_model=AdminSongResponse)
def reject_song(
    song_id: SongIdPath,
    db: SessionDep,
    moderation: ModerationServiceDep,
) -> Song:
    """Reject a pending song or withdraw an approved one."""
    return _moderate(moderation.reject, db, song_id)


@router.get("/export.csv")
def export_rankings_csv(db: SessionDep, voting: VotingServiceDep) -> StreamingResponse:
    """Download the current chart as CSV."""
    songs = voting.list_ranked(db)
    return StreamingResponse(
        iter_rankings_csv(songs),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": 'attachment; filename="top100-rankings.csv"'},
    )
