# src/top_chart/schemas/ranking.py
"""Ranking snapshot schema pushed to live observers."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, model_validator

from .song import SongResponse


class RankingSnapshot(BaseModel):
    """Full ordered set of eligible songs at one point in time.

    ``version`` increases with every completed ranking cycle so observers
    and the broadcaster can discard older snapshots.
    """

    version: int = Field(..., ge=0)
    generated_at: datetime
    songs: list[SongResponse]

    @model_validator(mode="after")
    def _ranks_are_dense(self) -> RankingSnapshot:
        ranks = [song.rank for song in self.songs]
        if ranks != list(range(1, len(ranks) + 1)):
            raise ValueError("snapshot ranks must be a dense 1..N sequence")
        return self
