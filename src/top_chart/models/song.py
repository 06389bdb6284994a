# src/top_chart/models/song.py
"""SQLAlchemy model for votable songs and their ranking state."""

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from top_chart.db.session import Base
from top_chart.db.time import utcnow

# Moderation states. Only approved songs are eligible for voting and ranking.
SONG_STATUS_PENDING = "PENDING"
SONG_STATUS_APPROVED = "APPROVED"
SONG_STATUS_REJECTED = "REJECTED"
SONG_STATUSES = (SONG_STATUS_PENDING, SONG_STATUS_APPROVED, SONG_STATUS_REJECTED)


class Song(Base):
    """A chart entry that visitors can vote for.

    ``votes`` and ``last_vote_at`` are written only by the vote ledger;
    ``current_rank`` and ``previous_rank`` only by the ranking engine.
    """

    __tablename__ = "song"
    __table_args__ = (
        CheckConstraint("votes >= 0", name="ck_song_votes_non_negative"),
        CheckConstraint(
            "status IN ('PENDING', 'APPROVED', 'REJECTED')",
            name="ck_song_status",
        ),
        Index("ix_song_status_rank", "status", "current_rank"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    artist: Mapped[str] = mapped_column(String(255), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    year: Mapped[int | None] = mapped_column(Integer, nullable=True)
    genre: Mapped[str | None] = mapped_column(String(100), nullable=True)
    youtube_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    spotify_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    album_art_url: Mapped[str | None] = mapped_column(Text, nullable=True)

    status: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default=SONG_STATUS_PENDING,
    )

    votes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    # Tie-break for equal vote counts: whoever reached the count first ranks higher.
    last_vote_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    current_rank: Mapped[int | None] = mapped_column(Integer, nullable=True)
    previous_rank: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Submitter contact details; never included in public snapshots.
    submitter_email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    submitter_first_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    submitter_last_name: Mapped[str | None] = mapped_column(String(100), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )

    @property
    def eligible(self) -> bool:
        """Return True when the song participates in voting and ranking."""
        return self.status == SONG_STATUS_APPROVED
