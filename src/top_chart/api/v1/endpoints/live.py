# src/top_chart/api/v1/endpoints/live.py
"""Live ranking updates over WebSocket."""

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from top_chart.api.v1.dependencies import VotingServiceDep
from top_chart.schemas import RankingSnapshot
from top_chart.services.errors import RecomputeFailedError

router = APIRouter(prefix="/live", tags=["live"])
logger = logging.getLogger(__name__)

EVENT_INIT = "songs:init"
EVENT_UPDATE = "songs:update"


def snapshot_message(event: str, snapshot: RankingSnapshot) -> dict[str, object]:
    """Wrap a snapshot in the envelope sent to observers."""
    return {"event": event, **snapshot.model_dump(mode="json")}


async def _wait_for_disconnect(websocket: WebSocket) -> None:
    # Observers only listen; any inbound frame is ignored until they leave.
    while True:
        message = await websocket.receive()
        if message["type"] == "websocket.disconnect":
            return


@router.websocket("/rankings")
async def ranking_updates(websocket: WebSocket, voting: VotingServiceDep) -> None:
    """Send the current ranking on connect, then every newer ranking."""
    await websocket.accept()
    # Subscribe before reading the initial snapshot so no cycle is missed.
    subscription = voting.subscribe()
    disconnect = asyncio.create_task(_wait_for_disconnect(websocket))
    try:
        try:
            initial = await asyncio.to_thread(voting.current_snapshot)
        except RecomputeFailedError as e:
            logger.warning("No ranking available for new observer: %s", e)
            await websocket.close(code=1011)
            return

        last_version = initial.version
        await websocket.send_json(snapshot_message(EVENT_INIT, initial))

        while True:
            update = asyncio.create_task(subscription.get())
            done, _ = await asyncio.wait(
                {update, disconnect},
                return_when=asyncio.FIRST_COMPLETED,
            )
            if disconnect in done:
                update.cancel()
                return
            snapshot = update.result()
            if snapshot.version <= last_version:
                continue
            last_version = snapshot.version
            await websocket.send_json(snapshot_message(EVENT_UPDATE, snapshot))
    except WebSocketDisconnect:
        return
    finally:
        disconnect.cancel()
        voting.unsubscribe(subscription)
