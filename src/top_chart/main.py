# src/top_chart/main.py
"""Main entry point for the Top Chart application."""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from sqlalchemy.exc import SQLAlchemyError

from top_chart.api.v1 import (
    admin_router,
    live_router,
    songs_router,
    submissions_router,
    votes_router,
)
from top_chart.core.logging import configure_logging
from top_chart.core.settings import settings
from top_chart.services.errors import RecomputeFailedError
from top_chart.services.reconcile import RankingReconciler
from top_chart.services.voting import VotingService, get_voting_service

configure_logging(settings.log_level)
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="Top Chart API",
    description="Public song chart with one vote per visitor and live rank movement",
    version=settings.app_version,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Add GZip middleware for compression
app.add_middleware(GZipMiddleware)

# Include API routers
app.include_router(songs_router, prefix="/api/v1")
app.include_router(votes_router, prefix="/api/v1")
app.include_router(submissions_router, prefix="/api/v1")
app.include_router(admin_router, prefix="/api/v1")
app.include_router(live_router, prefix="/api/v1")


@app.on_event("startup")
async def on_startup() -> None:
    service: VotingService | None = getattr(app.state, "voting_service", None)
    if service is None:
        service = get_voting_service()
        app.state.voting_service = service

    # Ensure ranks are populated on boot.
    try:
        snapshot = service.coordinator.refresh()
        logger.info("Initial ranking computed (%d songs)", len(snapshot.songs))
    except (RecomputeFailedError, SQLAlchemyError) as e:
        logger.error("Initial ranking failed; reconciler will retry: %s", e)

    reconciler = RankingReconciler(
        service.coordinator,
        settings.rank_reconcile_interval_seconds,
    )
    await reconciler.start()
    app.state.reconciler = reconciler


@app.on_event("shutdown")
async def on_shutdown() -> None:
    reconciler: RankingReconciler | None = getattr(app.state, "reconciler", None)
    if reconciler:
        await reconciler.stop()
        app.state.reconciler = None


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs",
        "redoc": "/redoc"
    }

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("top_chart.main:app", host="0.0.0.0", port=8080, reload=settings.debug)
