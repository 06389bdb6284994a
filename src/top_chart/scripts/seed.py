"""Seed a fresh database with a handful of approved demo songs."""
from __future__ import annotations

import argparse
import sys
from datetime import timedelta

from sqlalchemy import func
from sqlalchemy.orm import Session

from top_chart.db.session import SessionLocal, create_tables
from top_chart.db.time import utcnow
from top_chart.models import Song
from top_chart.models.song import SONG_STATUS_APPROVED
from top_chart.services.ranking import RankingEngine

DEMO_SONGS: list[dict[str, object]] = [
    {
        "artist": "Bee Gees",
        "title": "Night Fever",
        "year": 1977,
        "genre": "Disco",
        "youtube_url": "https://www.youtube.com/watch?v=SkypZuY6ZvA",
        "spotify_url": "https://open.spotify.com/track/1xznGGDReH1oQq0xzbwXa3",
        "votes": 12,
    },
    {
        "artist": "Kool & The Gang",
        "title": "Celebration",
        "year": 1980,
        "genre": "Disco",
        "youtube_url": "https://www.youtube.com/watch?v=3GwjfUFyY6M",
        "votes": 9,
    },
    {
        "artist": "New Order",
        "title": "Blue Monday",
        "year": 1983,
        "genre": "New wave",
        "youtube_url": "https://www.youtube.com/watch?v=c1GxjzHm5us",
        "votes": 7,
    },
    {
        "artist": "Faithless",
        "title": "God Is a DJ",
        "year": 1998,
        "genre": "Dance",
        "youtube_url": "https://www.youtube.com/watch?v=bhSB8EEnCAM",
        "spotify_url": "https://open.spotify.com/track/1pUFYb9peWkK8m1WCKNRjp",
        "votes": 5,
    },
    {
        "artist": "Michael Jackson",
        "title": "Billie Jean",
        "year": 1983,
        "genre": "Pop",
        "youtube_url": "https://youtu.be/Zi_XLOBDo_Y",
        "votes": 11,
    },
]


def seed(db: Session) -> int:
    """Insert the demo songs when the chart is empty, then rank them.

    Returns:
        Number of songs inserted (0 when songs already exist).
    """
    existing = db.query(func.count(Song.id)).scalar() or 0
    if existing:
        return 0

    # Stagger the tie-break timestamps so the initial order is deterministic.
    base = utcnow() - timedelta(days=1)
    for offset, data in enumerate(DEMO_SONGS):
        db.add(
            Song(
                status=SONG_STATUS_APPROVED,
                last_vote_at=base + timedelta(minutes=offset),
                **data,
            )
        )
    db.flush()
    RankingEngine().recompute_ranks(db)
    return len(DEMO_SONGS)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="Create tables from the ORM metadata before seeding.",
    )
    args = parser.parse_args(argv)

    if args.create_tables:
        create_tables()

    with SessionLocal() as db:
        inserted = seed(db)

    if inserted:
        print(f"seeded {inserted} songs")
    else:
        print("seed skipped: songs already exist")
    return 0


if __name__ == "__main__":
    sys.exit(main())
