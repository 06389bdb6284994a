# src/top_chart/services/moderation.py
"""Moderation services for Top Chart submissions."""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from top_chart.models import Song
from top_chart.models.song import (
    SONG_STATUS_APPROVED,
    SONG_STATUS_PENDING,
    SONG_STATUS_REJECTED,
)
from top_chart.schemas import SongSubmission

from .voting import RankingCoordinator

logger = logging.getLogger(__name__)


class SongNotFoundError(LookupError):
    """Raised when a moderation action targets an unknown song."""

    def __init__(self, song_id: int) -> None:
        super().__init__(f"Song {song_id} not found")
        self.song_id = song_id


class ModerationService:
    """Service handling song submissions and moderation state transitions.

    Approving or withdrawing a song changes the eligible set, so those
    transitions run inside a ranking cycle: the status change and the new
    ranks commit together and the resulting snapshot is broadcast once.
    """

    def __init__(self, coordinator: RankingCoordinator) -> None:
        self._coordinator = coordinator

    @staticmethod
    def submit(db: Session, submission: SongSubmission) -> Song:
        """Store a new submission as a pending song.

        Args:
            submission: Validated submission payload
            db: Database session
        """
        song = Song(
            artist=submission.artist.strip(),
            title=submission.title.strip(),
            year=submission.year,
            genre=submission.genre.strip(),
            youtube_url=_url_or_none(submission.youtube_url),
            spotify_url=_url_or_none(submission.spotify_url),
            album_art_url=_url_or_none(submission.album_art_url),
            status=SONG_STATUS_PENDING,
            submitter_email=str(submission.email),
            submitter_first_name=submission.first_name,
            submitter_last_name=submission.last_name,
        )
        db.add(song)
        db.commit()
        db.refresh(song)
        logger.info("Stored submission %d (%s - %s)", song.id, song.artist, song.title)
        return song

    @staticmethod
    def list_by_status(db: Session, status: str = SONG_STATUS_PENDING) -> list[Song]:
        """Return songs in a moderation state, newest first."""
        return (
            db.query(Song)
            .filter(Song.status == status)
            .order_by(Song.created_at.desc(), Song.id.desc())
            .all()
        )

    def approve(self, db: Session, song_id: int) -> Song:
        """Make a song eligible and re-rank the chart.

        Raises:
            SongNotFoundError: No song has this id.
            RecomputeFailedError: The re-rank failed; the approval was rolled back.
        """
        with self._coordinator.cycle() as cycle_db:
            song = _get_song(cycle_db, song_id)
            song.status = SONG_STATUS_APPROVED
            cycle_db.flush()
        logger.info("Approved song %d", song_id)
        return _get_song(db, song_id, refresh=True)

    def reject(self, db: Session, song_id: int) -> Song:
        """Reject a pending song or withdraw an approved one.

        Withdrawing removes the song from the next ranking; its last ranks are
        kept as history.
        """
        with self._coordinator.cycle() as cycle_db:
            song = _get_song(cycle_db, song_id)
            was_eligible = song.eligible
            song.status = SONG_STATUS_REJECTED
            cycle_db.flush()
        logger.info("Rejected song %d (was approved: %s)", song_id, was_eligible)
        return _get_song(db, song_id, refresh=True)


def _get_song(db: Session, song_id: int, *, refresh: bool = False) -> Song:
    song = db.get(Song, song_id, populate_existing=refresh)
    if song is None:
        raise SongNotFoundError(song_id)
    return song


def _url_or_none(value: object | None) -> str | None:
    return str(value) if value else None
