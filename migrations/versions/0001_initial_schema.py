"""initial chart schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the song and vote tables."""
    op.create_table(
        "song",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("artist", sa.String(length=255), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("year", sa.Integer(), nullable=True),
        sa.Column("genre", sa.String(length=100), nullable=True),
        sa.Column("youtube_url", sa.Text(), nullable=True),
        sa.Column("spotify_url", sa.Text(), nullable=True),
        sa.Column("album_art_url", sa.Text(), nullable=True),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="PENDING"),
        sa.Column("votes", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_vote_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("current_rank", sa.Integer(), nullable=True),
        sa.Column("previous_rank", sa.Integer(), nullable=True),
        sa.Column("submitter_email", sa.String(length=320), nullable=True),
        sa.Column("submitter_first_name", sa.String(length=100), nullable=True),
        sa.Column("submitter_last_name", sa.String(length=100), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("votes >= 0", name="ck_song_votes_non_negative"),
        sa.CheckConstraint(
            "status IN ('PENDING', 'APPROVED', 'REJECTED')",
            name="ck_song_status",
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_song_status_rank", "song", ["status", "current_rank"])

    op.create_table(
        "vote",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("song_id", sa.Integer(), nullable=False),
        sa.Column("voter_hash", sa.String(length=64), nullable=False),
        sa.Column("ip", sa.String(length=64), nullable=True),
        sa.Column("user_agent", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(["song_id"], ["song.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("song_id", "voter_hash", name="uq_vote_song_voter"),
    )
    op.create_index("ix_vote_song_id", "vote", ["song_id"])


def downgrade() -> None:
    """Drop the chart tables."""
    op.drop_index("ix_vote_song_id", table_name="vote")
    op.drop_table("vote")
    op.drop_index("ix_song_status_rank", table_name="song")
    op.drop_table("song")
