# src/top_chart/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .admin import router as admin_router
from .live import router as live_router
from .songs import router as songs_router
from .submissions import router as submissions_router
from .votes import router as votes_router

__all__ = [
    "admin_router",
    "live_router",
    "songs_router",
    "submissions_router",
    "votes_router",
]
