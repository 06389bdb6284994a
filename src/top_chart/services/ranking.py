"""Ranking engine: dense re-ranking of approved songs."""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass

from sqlalchemy import or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from top_chart.db.time import utcnow
from top_chart.models import Song
from top_chart.models.song import SONG_STATUS_APPROVED
from top_chart.schemas import ListFilters, RankingSnapshot, SongResponse

from .errors import RecomputeFailedError

logger = logging.getLogger(__name__)

_DECADE_PATTERN = re.compile(r"^(\d{2})s$")


@dataclass(frozen=True)
class RankChange:
    """A single rank assignment produced by a recompute."""

    song_id: int
    current_rank: int
    previous_rank: int | None


def ranking_order() -> tuple:
    """Return the total order used to assign ranks."""
    return (
        Song.votes.desc(),
        Song.last_vote_at.asc().nulls_last(),
        Song.id.asc(),
    )


def display_order() -> tuple:
    """Return the order in which ranked songs are listed."""
    return (
        Song.current_rank.asc().nulls_last(),
        Song.votes.desc(),
        Song.id.asc(),
    )


def decade_bounds(label: str) -> tuple[int, int] | None:
    """Convert a decade label such as ``"70s"`` into an inclusive year range.

    Two-digit labels below ``"30s"`` refer to the 2000s, so ``"00s"`` is
    2000-2009 and ``"70s"`` is 1970-1979.
    """
    match = _DECADE_PATTERN.match(label.strip())
    if match is None:
        return None
    digits = int(match.group(1))
    if digits % 10:
        return None
    start = (2000 if digits < 30 else 1900) + digits
    return start, start + 9


def rank_movement(previous_rank: int | None, current_rank: int | None) -> str:
    """Describe how far a song moved since its previous rank."""
    if not previous_rank or not current_rank:
        return ""
    diff = previous_rank - current_rank
    if diff == 0:
        return "—"
    if diff > 0:
        return f"↑{diff}"
    return f"↓{abs(diff)}"


class RankingEngine:
    """Recomputes the total order over approved songs."""

    def plan(self, db: Session) -> list[RankChange]:
        """Return the rank assignments that differ from what is stored.

        Songs whose rank is unchanged are omitted, which keeps ``previous_rank``
        stable when nothing moved.
        """
        rows = db.execute(
            select(Song.id, Song.current_rank)
            .where(Song.status == SONG_STATUS_APPROVED)
            .order_by(*ranking_order())
        ).all()

        changes: list[RankChange] = []
        for position, (song_id, current_rank) in enumerate(rows, start=1):
            if current_rank == position:
                continue
            changes.append(
                RankChange(
                    song_id=song_id,
                    current_rank=position,
                    previous_rank=current_rank,
                )
            )
        return changes

    def apply_ranks(self, db: Session) -> int:
        """Write the new ranks into the session's open transaction without committing.

        Returns:
            Number of songs whose rank changed.
        """
        changes = self.plan(db)
        if not changes:
            return 0

        now = utcnow()
        db.execute(
            update(Song),
            [
                {
                    "id": change.song_id,
                    "current_rank": change.current_rank,
                    "previous_rank": change.previous_rank,
                    "updated_at": now,
                }
                for change in changes
            ],
        )
        return len(changes)

    def recompute_ranks(self, db: Session) -> int:
        """Recompute and commit dense ranks for all approved songs as one batch.

        Raises:
            RecomputeFailedError: The batch could not be applied; nothing was written.
        """
        try:
            changed = self.apply_ranks(db)
            db.commit()
        except SQLAlchemyError as err:
            db.rollback()
            raise RecomputeFailedError(f"ranking batch failed: {err}") from err
        if changed:
            logger.debug("Recomputed ranks; %d songs moved", changed)
        return changed

    def list_ranked(self, db: Session, filters: ListFilters | None = None) -> list[Song]:
        """Return approved songs in rank order, optionally filtered."""
        query = db.query(Song).filter(Song.status == SONG_STATUS_APPROVED)

        if filters is not None:
            if filters.genre:
                query = query.filter(Song.genre == filters.genre)
            if filters.year is not None:
                query = query.filter(Song.year == filters.year)
            if filters.artist:
                query = query.filter(Song.artist.ilike(f"%{filters.artist}%"))
            if filters.decade:
                bounds = decade_bounds(filters.decade)
                if bounds is not None:
                    query = query.filter(Song.year.between(*bounds))
            if filters.search:
                pattern = f"%{filters.search}%"
                query = query.filter(
                    or_(
                        Song.title.ilike(pattern),
                        Song.artist.ilike(pattern),
                        Song.genre.ilike(pattern),
                    )
                )

        return query.order_by(*display_order()).all()

    def list_genres(self, db: Session) -> list[str]:
        """Return the distinct genres of approved songs, alphabetically."""
        rows = db.execute(
            select(Song.genre)
            .where(Song.status == SONG_STATUS_APPROVED, Song.genre.is_not(None))
            .distinct()
            .order_by(Song.genre.asc())
        ).scalars()
        return [genre for genre in rows if genre]

    def snapshot(self, db: Session, version: int) -> RankingSnapshot:
        """Build the observer snapshot of the stored ranking."""
        songs: Sequence[Song] = self.list_ranked(db)
        return RankingSnapshot(
            version=version,
            generated_at=utcnow(),
            songs=[SongResponse.model_validate(song) for song in songs],
        )
