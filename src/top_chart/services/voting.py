"""Vote casting and serialized ranking cycles.

``VotingService.cast_vote`` is the entry point for every vote: it derives the
voter fingerprint, records the vote through the ledger, then runs one ranking
cycle through ``RankingCoordinator``. Ranking cycles are serialized per
process and each completed cycle publishes exactly one snapshot.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from top_chart.core.security import compute_voter_hash
from top_chart.core.settings import Settings, settings
from top_chart.db.session import SessionLocal
from top_chart.models import Song
from top_chart.schemas import ListFilters, RankingSnapshot

from .broadcast import BroadcastCoordinator, Subscription
from .errors import (
    AlreadyVotedError,
    NotEligibleError,
    RecomputeFailedError,
    StorageUnavailableError,
)
from .ledger import VoteLedger
from .ranking import RankingEngine

logger = logging.getLogger(__name__)


class VoteResult(str, Enum):
    """Outcome of a vote attempt as seen by callers."""

    ACCEPTED = "accepted"
    ALREADY_VOTED = "already_voted"
    NOT_ELIGIBLE = "not_eligible"
    FAILED = "failed"


@dataclass(frozen=True)
class VoteOutcome:
    """Result of ``VotingService.cast_vote``."""

    result: VoteResult
    song_id: int
    votes: int | None = None
    # True when the vote was accepted but the following ranking cycle failed.
    ranking_stale: bool = False

    @property
    def accepted(self) -> bool:
        return self.result is VoteResult.ACCEPTED


class RankingCoordinator:
    """Runs ranking cycles one at a time and publishes each result once.

    A cycle applies the ranking batch, commits it, reads the snapshot, stamps
    it with the next version and publishes it, all while holding the cycle
    lock. Published versions are therefore strictly increasing and never
    interleave.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        *,
        engine: RankingEngine | None = None,
        broadcaster: BroadcastCoordinator | None = None,
    ) -> None:
        self._session_factory = session_factory
        self.engine = engine or RankingEngine()
        self.broadcaster = broadcaster or BroadcastCoordinator()
        self._lock = threading.Lock()
        self._version = 0
        self._stale = False
        self._last_snapshot: RankingSnapshot | None = None

    @property
    def version(self) -> int:
        return self._version

    @property
    def stale(self) -> bool:
        """True when the most recent cycle failed and ranks may lag the ledger."""
        return self._stale

    @property
    def last_snapshot(self) -> RankingSnapshot | None:
        return self._last_snapshot

    @contextmanager
    def cycle(self) -> Iterator[Session]:
        """Serialize a ranking-affecting change with its re-rank and broadcast.

        The caller's changes, if any, are made on the yielded session and commit
        together with the new ranks. An exception from the caller rolls back the
        whole cycle and publishes nothing.

        Raises:
            RecomputeFailedError: The ranking batch could not be applied.
        """
        with self._lock:
            db = self._session_factory()
            try:
                try:
                    yield db
                except BaseException:
                    db.rollback()
                    raise
                snapshot = self._rank_and_snapshot(db)
            finally:
                db.close()
            self._publish(snapshot)

    def refresh(self) -> RankingSnapshot:
        """Run one ranking cycle with no other changes and return its snapshot.

        Raises:
            RecomputeFailedError: The ranking batch could not be applied.
        """
        with self._lock:
            db = self._session_factory()
            try:
                snapshot = self._rank_and_snapshot(db)
            finally:
                db.close()
            self._publish(snapshot)
        return snapshot

    def current_snapshot(self) -> RankingSnapshot:
        """Return the latest completed snapshot, running a cycle if there is none."""
        if self._last_snapshot is None:
            return self.refresh()
        return self._last_snapshot

    def needs_recompute(self) -> bool:
        """Return True when stored ranks differ from the ledger's vote counts."""
        if self._stale:
            return True
        db = self._session_factory()
        try:
            return bool(self.engine.plan(db))
        finally:
            db.close()

    def _rank_and_snapshot(self, db: Session) -> RankingSnapshot:
        try:
            changed = self.engine.apply_ranks(db)
            db.commit()
        except SQLAlchemyError as err:
            db.rollback()
            self._stale = True
            logger.error("Ranking batch failed; ranks are stale: %s", err)
            raise RecomputeFailedError(f"ranking batch failed: {err}") from err

        try:
            snapshot = self.engine.snapshot(db, self._version + 1)
        except (SQLAlchemyError, ValidationError) as err:
            self._stale = True
            logger.error("Ranking snapshot could not be built: %s", err)
            raise RecomputeFailedError(f"ranking snapshot failed: {err}") from err

        self._version = snapshot.version
        self._stale = False
        self._last_snapshot = snapshot
        logger.debug("Ranking cycle v%d complete; %d songs moved", snapshot.version, changed)
        return snapshot

    def _publish(self, snapshot: RankingSnapshot) -> None:
        try:
            observers = self.broadcaster.publish(snapshot)
        except Exception:  # pragma: no cover - fan-out must never fail a vote
            logger.exception("Broadcast of ranking v%d failed", snapshot.version)
            return
        logger.debug("Published ranking v%d to %d observers", snapshot.version, observers)


class VotingService:
    """Entry point for casting votes and reading the ranked chart."""

    def __init__(
        self,
        *,
        salt: str,
        coordinator: RankingCoordinator,
        ledger: VoteLedger | None = None,
    ) -> None:
        self._salt = salt
        self.coordinator = coordinator
        self.ledger = ledger or VoteLedger()

    @property
    def engine(self) -> RankingEngine:
        return self.coordinator.engine

    @property
    def broadcaster(self) -> BroadcastCoordinator:
        return self.coordinator.broadcaster

    def fingerprint(self, address: str | None, user_agent: str | None) -> str:
        """Return the voter fingerprint for a client address and agent."""
        return compute_voter_hash(self._salt, address, user_agent)

    def cast_vote(
        self,
        db: Session,
        song_id: int,
        *,
        address: str | None,
        user_agent: str | None,
    ) -> VoteOutcome:
        """Record one vote and, when it is accepted, re-rank and broadcast.

        Ledger failures never reach the ranking engine. A failed ranking cycle
        does not undo an accepted vote; the outcome is flagged ``ranking_stale``
        and the next cycle (or the reconciler) catches the ranking up.
        """
        voter_hash = self.fingerprint(address, user_agent)
        try:
            song = self.ledger.record_vote(
                db,
                song_id,
                voter_hash,
                ip=address,
                user_agent=user_agent,
            )
        except AlreadyVotedError:
            logger.info("Duplicate vote rejected for song %s", song_id)
            return VoteOutcome(VoteResult.ALREADY_VOTED, song_id)
        except NotEligibleError:
            logger.info("Vote rejected for ineligible song %s", song_id)
            return VoteOutcome(VoteResult.NOT_ELIGIBLE, song_id)
        except StorageUnavailableError as err:
            logger.warning("Vote for song %s failed: %s", song_id, err)
            return VoteOutcome(VoteResult.FAILED, song_id)

        stale = False
        try:
            self.coordinator.refresh()
        except RecomputeFailedError as err:
            logger.error("Vote for song %s accepted but ranking is stale: %s", song_id, err)
            stale = True
        return VoteOutcome(VoteResult.ACCEPTED, song_id, votes=song.votes, ranking_stale=stale)

    def list_ranked(self, db: Session, filters: ListFilters | None = None) -> list[Song]:
        """Return approved songs in ascending rank order."""
        return self.engine.list_ranked(db, filters)

    def list_genres(self, db: Session) -> list[str]:
        return self.engine.list_genres(db)

    def subscribe(self) -> Subscription:
        """Register a live observer for ranking snapshots."""
        return self.broadcaster.subscribe()

    def unsubscribe(self, subscription: Subscription) -> None:
        self.broadcaster.unsubscribe(subscription)

    def current_snapshot(self) -> RankingSnapshot:
        return self.coordinator.current_snapshot()


def build_voting_service(
    session_factory: Callable[[], Session],
    config: Settings,
) -> VotingService:
    """Wire a voting service from configuration and a session factory."""
    coordinator = RankingCoordinator(
        session_factory,
        broadcaster=BroadcastCoordinator(queue_size=config.broadcast_queue_size),
    )
    return VotingService(salt=config.voter_hash_salt, coordinator=coordinator)


@lru_cache(maxsize=1)
def get_voting_service() -> VotingService:
    """Return the process-wide voting service."""
    return build_voting_service(SessionLocal, settings)
