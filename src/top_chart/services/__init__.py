# src/top_chart/services/__init__.py
"""Business logic services for the Top Chart application."""

from .broadcast import BroadcastCoordinator, Subscription
from .captcha import CaptchaVerifier
from .errors import (
    AlreadyVotedError,
    ChartError,
    NotEligibleError,
    RecomputeFailedError,
    StorageUnavailableError,
    VoteError,
)
from .ledger import VoteLedger
from .moderation import ModerationService, SongNotFoundError
from .ranking import RankingEngine
from .reconcile import RankingReconciler
from .voting import RankingCoordinator, VoteOutcome, VoteResult, VotingService

__all__ = [
    "BroadcastCoordinator", "Subscription",
    "CaptchaVerifier",
    "ChartError", "VoteError", "AlreadyVotedError", "NotEligibleError",
    "StorageUnavailableError", "RecomputeFailedError",
    "VoteLedger",
    "ModerationService", "SongNotFoundError",
    "RankingEngine",
    "RankingReconciler",
    "RankingCoordinator", "VoteOutcome", "VoteResult", "VotingService",
]
