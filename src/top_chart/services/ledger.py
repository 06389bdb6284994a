"""Vote ledger: atomic insert-and-increment of accepted votes."""

from __future__ import annotations

import logging

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from top_chart.db.time import utcnow
from top_chart.models import Song, Vote
from top_chart.models.song import SONG_STATUS_APPROVED

from .errors import AlreadyVotedError, NotEligibleError, StorageUnavailableError

logger = logging.getLogger(__name__)


class VoteLedger:
    """Records votes so that each voter counts at most once per song.

    Duplicate detection relies on the ``uq_vote_song_voter`` unique constraint;
    there is no read-then-insert check in application code. The eligibility
    check, the counter increment and the vote insert share one transaction.
    """

    def record_vote(
        self,
        db: Session,
        song_id: int,
        voter_hash: str,
        *,
        ip: str | None = None,
        user_agent: str | None = None,
    ) -> Song:
        """Record a vote and increment the song's counter as one unit.

        Args:
            db: Session with no pending work; it is committed or rolled back here.
            song_id: Song being voted for.
            voter_hash: Fingerprint from ``compute_voter_hash``.
            ip: Client address kept on the vote row.
            user_agent: Client agent kept on the vote row.

        Returns:
            The updated song.

        Raises:
            NotEligibleError: The song does not exist or is not approved.
            AlreadyVotedError: The voter already voted for this song.
            StorageUnavailableError: The transaction could not be executed.
        """
        try:
            # Conditional column-expression update: the eligibility check and the
            # increment are a single statement, so a concurrent withdrawal either
            # happens before (zero rows) or after (vote counts) this transaction.
            result = db.execute(
                update(Song)
                .where(Song.id == song_id, Song.status == SONG_STATUS_APPROVED)
                .values(votes=Song.votes + 1)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                db.rollback()
                raise NotEligibleError(song_id)

            # Stamped only once the write lock is held, so tie-break times
            # follow commit order.
            now = utcnow()
            db.execute(
                update(Song)
                .where(Song.id == song_id)
                .values(last_vote_at=now, updated_at=now)
                .execution_options(synchronize_session=False)
            )

            db.add(
                Vote(
                    song_id=song_id,
                    voter_hash=voter_hash,
                    ip=ip or None,
                    user_agent=user_agent or None,
                    created_at=now,
                )
            )
            db.commit()
        except IntegrityError as err:
            db.rollback()
            if _is_duplicate_vote(err):
                raise AlreadyVotedError(song_id) from err
            logger.error("Vote for song %s violated an unexpected constraint: %s", song_id, err)
            raise StorageUnavailableError(song_id, "integrity error") from err
        except SQLAlchemyError as err:
            db.rollback()
            logger.warning("Vote for song %s could not be stored: %s", song_id, err)
            raise StorageUnavailableError(song_id, type(err).__name__) from err

        song = db.get(Song, song_id, populate_existing=True)
        if song is None:  # pragma: no cover - songs are never hard-deleted
            raise NotEligibleError(song_id)
        logger.debug("Recorded vote for song %s (votes=%d)", song_id, song.votes)
        return song


def _is_duplicate_vote(err: IntegrityError) -> bool:
    """Return True when the integrity error comes from the one-vote constraint."""
    message = str(err.orig).lower()
    if "uq_vote_song_voter" in message:
        return True
    # SQLite reports the columns instead of the constraint name.
    return "unique" in message and "vote.song_id" in message and "vote.voter_hash" in message
