"""Background reconciliation between the vote ledger and stored ranks."""

from __future__ import annotations

import asyncio
import logging

from sqlalchemy.exc import SQLAlchemyError

from .errors import RecomputeFailedError
from .voting import RankingCoordinator

logger = logging.getLogger(__name__)


class RankingReconciler:
    """Periodically re-runs a ranking cycle when ranks lag behind the ledger.

    Vote acceptance never waits for ranking, so a failed cycle leaves the
    chart stale. This worker retries until a cycle succeeds, and also catches
    divergence left by a process that stopped between a vote commit and its
    re-rank.
    """

    def __init__(self, coordinator: RankingCoordinator, interval_seconds: float) -> None:
        self.coordinator = coordinator
        self.interval = max(0.1, float(interval_seconds))
        self._task: asyncio.Task[None] | None = None
        self._stopping = asyncio.Event()

    async def start(self) -> None:
        """Start the background reconciliation loop."""
        if self._task is None or self._task.done():
            self._stopping.clear()
            self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        """Stop the background reconciliation loop."""
        if self._task is None:
            return

        self._stopping.set()
        await self._task
        self._task = None

    async def reconcile_once(self) -> bool:
        """Run a ranking cycle if one is needed.

        Returns:
            True if a cycle ran and completed.
        """
        needed = await asyncio.to_thread(self.coordinator.needs_recompute)
        if not needed:
            return False
        snapshot = await asyncio.to_thread(self.coordinator.refresh)
        logger.info("Reconciled ranking at v%d", snapshot.version)
        return True

    async def _run(self) -> None:
        while not self._stopping.is_set():
            try:
                await asyncio.wait_for(self._stopping.wait(), timeout=self.interval)
            except TimeoutError:
                pass
            if self._stopping.is_set():
                return

            try:
                await self.reconcile_once()
            except RecomputeFailedError as e:
                logger.warning("Ranking reconciliation failed: %s", e)
            except SQLAlchemyError as e:
                logger.warning("Ranking reconciliation could not reach storage: %s", e)
