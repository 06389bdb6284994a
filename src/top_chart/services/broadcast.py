"""Fan-out of ranking snapshots to live observers.

Each observer owns a small mailbox bound to its own event loop. Publishing
hands the snapshot to every mailbox with ``loop.call_soon_threadsafe`` and
returns immediately, so a slow or vanished observer never blocks the vote
path that triggered the publish.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
import threading

from top_chart.schemas import RankingSnapshot

logger = logging.getLogger(__name__)

_SUBSCRIPTION_IDS = itertools.count(start=1)


class Subscription:
    """Per-observer mailbox; keeps only the most recent pending snapshots."""

    def __init__(self, loop: asyncio.AbstractEventLoop, maxsize: int) -> None:
        self.id = next(_SUBSCRIPTION_IDS)
        self._loop = loop
        self._queue: asyncio.Queue[RankingSnapshot] = asyncio.Queue(maxsize=max(1, maxsize))
        self.closed = False
        self.dropped = 0

    def offer(self, snapshot: RankingSnapshot) -> None:
        """Schedule delivery on the observer's loop. Safe from any thread.

        Raises:
            RuntimeError: The observer's event loop is closed.
        """
        self._loop.call_soon_threadsafe(self._deliver, snapshot)

    def _deliver(self, snapshot: RankingSnapshot) -> None:
        if self.closed:
            return
        while self._queue.full():
            self._queue.get_nowait()
            self.dropped += 1
        self._queue.put_nowait(snapshot)

    async def get(self) -> RankingSnapshot:
        """Wait for the next snapshot."""
        return await self._queue.get()

    def pending(self) -> int:
        """Return the number of undelivered snapshots."""
        return self._queue.qsize()


class BroadcastCoordinator:
    """Publishes ranking snapshots to every subscribed observer."""

    def __init__(self, queue_size: int = 4) -> None:
        self._queue_size = queue_size
        self._subscribers: dict[int, Subscription] = {}
        self._lock = threading.Lock()
        self._latest: RankingSnapshot | None = None

    @property
    def latest(self) -> RankingSnapshot | None:
        """Return the most recently published snapshot, if any."""
        return self._latest

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def subscribe(self) -> Subscription:
        """Register an observer on the running event loop."""
        subscription = Subscription(asyncio.get_running_loop(), self._queue_size)
        with self._lock:
            self._subscribers[subscription.id] = subscription
        logger.debug("Observer %d subscribed", subscription.id)
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        """Remove an observer; unknown or already removed observers are ignored."""
        subscription.closed = True
        with self._lock:
            removed = self._subscribers.pop(subscription.id, None)
        if removed is not None:
            logger.debug("Observer %d unsubscribed", subscription.id)

    def publish(self, snapshot: RankingSnapshot) -> int:
        """Offer a snapshot to every observer without waiting for delivery.

        Snapshots older than (or equal to) the last published version are
        discarded so observers never move backwards.

        Returns:
            Number of observers the snapshot was handed to.
        """
        with self._lock:
            if self._latest is not None and snapshot.version <= self._latest.version:
                logger.debug(
                    "Discarding stale snapshot v%d (latest v%d)",
                    snapshot.version,
                    self._latest.version,
                )
                return 0
            self._latest = snapshot

            # Mailboxes must see versions in publish order.
            delivered = 0
            dead: list[Subscription] = []
            for subscription in self._subscribers.values():
                try:
                    subscription.offer(snapshot)
                except RuntimeError:
                    dead.append(subscription)
                    continue
                delivered += 1

        for subscription in dead:
            # The observer's loop has shut down; it can never receive again.
            logger.info("Dropping observer %d with a closed event loop", subscription.id)
            self.unsubscribe(subscription)
        return delivered
