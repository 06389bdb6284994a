# src/top_chart/api/v1/__init__.py
"""Version 1 API endpoints."""

from .endpoints import (
    admin_router,
    live_router,
    songs_router,
    submissions_router,
    votes_router,
)

__all__ = [
    "admin_router",
    "live_router",
    "songs_router",
    "submissions_router",
    "votes_router",
]
