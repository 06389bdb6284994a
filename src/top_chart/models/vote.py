# src/top_chart/models/vote.py
"""Append-only ledger of accepted votes."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from top_chart.db.session import Base
from top_chart.db.time import utcnow


class Vote(Base):
    """One accepted vote for a song by a voter fingerprint.

    Rows are never updated or deleted by normal operation.
    """

    __tablename__ = "vote"
    __table_args__ = (
        # Storage-level guarantee of one vote per voter per song.
        UniqueConstraint("song_id", "voter_hash", name="uq_vote_song_voter"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # No cascade: songs are never hard-deleted while votes reference them.
    song_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("song.id"),
        nullable=False,
        index=True,
    )
    voter_hash: Mapped[str] = mapped_column(String(64), nullable=False)

    # Request attributes kept for abuse review.
    ip: Mapped[str | None] = mapped_column(String(64), nullable=True)
    user_agent: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
