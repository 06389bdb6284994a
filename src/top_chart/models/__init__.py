# src/top_chart/models/__init__.py
"""SQLAlchemy models for the Top Chart application."""

from .song import Song
from .vote import Vote

__all__ = [
    "Song",
    "Vote",
]
