"""Exception hierarchy shared by the vote ledger and ranking services."""

from __future__ import annotations


class ChartError(Exception):
    """Base error for chart vote and ranking failures."""


class VoteError(ChartError):
    """A vote attempt was not recorded."""

    def __init__(self, song_id: int, message: str) -> None:
        super().__init__(message)
        self.song_id = song_id


class AlreadyVotedError(VoteError):
    """The voter already has a vote recorded for this song."""

    def __init__(self, song_id: int) -> None:
        super().__init__(song_id, f"Voter already voted for song {song_id}")


class NotEligibleError(VoteError):
    """The song does not exist or is not approved for voting."""

    def __init__(self, song_id: int) -> None:
        super().__init__(song_id, f"Song {song_id} is not eligible for voting")


class StorageUnavailableError(VoteError):
    """The vote transaction could not be executed; retrying is safe."""

    def __init__(self, song_id: int, reason: str = "storage unavailable") -> None:
        super().__init__(song_id, f"Vote for song {song_id} failed: {reason}")
        self.reason = reason


class RecomputeFailedError(ChartError):
    """The ranking batch could not be applied; ranks are stale until the next cycle."""
