# mypy: ignore-errors
import asyncio
from datetime import UTC, datetime

import pytest
from sqlalchemy.exc import OperationalError

from top_chart.services.errors import RecomputeFailedError
from top_chart.services.reconcile import RankingReconciler

T0 = datetime(2024, 5, 1, tzinfo=UTC)


@pytest.mark.asyncio
async def test_reconcile_once_skips_when_ranks_are_current(voting_service, make_song):
    make_song(votes=1, last_vote_at=T0)
    coordinator = voting_service.coordinator
    coordinator.refresh()
    version = coordinator.version

    reconciler = RankingReconciler(coordinator, interval_seconds=60)

    assert await reconciler.reconcile_once() is False
    assert coordinator.version == version


@pytest.mark.asyncio
async def test_reconcile_once_catches_up_after_direct_ledger_change(
    voting_service, db_session, make_song, load_song
):
    first = make_song(votes=5, last_vote_at=T0)
    second = make_song(votes=1, last_vote_at=T0)
    coordinator = voting_service.coordinator
    coordinator.refresh()

    # Simulates a process that committed a vote and stopped before re-ranking.
    db_session.get(type(first), second.id).votes = 9
    db_session.commit()

    reconciler = RankingReconciler(coordinator, interval_seconds=60)
    assert await reconciler.reconcile_once() is True

    assert load_song(second.id).current_rank == 1
    assert load_song(first.id).current_rank == 2
    assert voting_service.broadcaster.latest.version == coordinator.version


@pytest.mark.asyncio
async def test_background_loop_retries_failed_cycle(voting_service, make_song, mocker):
    make_song(votes=2, last_vote_at=T0)
    coordinator = voting_service.coordinator
    refresh = coordinator.refresh
    attempts = []

    def flaky_refresh():
        attempts.append(1)
        if len(attempts) == 1:
            raise RecomputeFailedError("ranking batch failed: database is locked")
        return refresh()

    mocker.patch.object(coordinator, "refresh", side_effect=flaky_refresh)
    mocker.patch.object(coordinator, "needs_recompute", side_effect=lambda: coordinator.version == 0)

    reconciler = RankingReconciler(coordinator, interval_seconds=0.1)
    await reconciler.start()
    try:
        for _ in range(50):
            if coordinator.version:
                break
            await asyncio.sleep(0.05)
    finally:
        await reconciler.stop()

    assert len(attempts) >= 2
    assert coordinator.version == 1


@pytest.mark.asyncio
async def test_background_loop_survives_storage_errors(voting_service, mocker):
    coordinator = voting_service.coordinator
    probe = mocker.patch.object(
        coordinator,
        "needs_recompute",
        side_effect=OperationalError("SELECT", {}, Exception("unable to open database file")),
    )

    reconciler = RankingReconciler(coordinator, interval_seconds=0.1)
    await reconciler.start()
    await asyncio.sleep(0.35)
    await reconciler.stop()

    assert probe.call_count >= 2


@pytest.mark.asyncio
async def test_stop_without_start_is_noop(voting_service):
    reconciler = RankingReconciler(voting_service.coordinator, interval_seconds=1)
    await reconciler.stop()
