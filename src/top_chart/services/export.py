"""CSV rendering of the ranked chart."""

from __future__ import annotations

import csv
import io
from collections.abc import Iterable, Iterator

from top_chart.models import Song

from .ranking import rank_movement

CSV_COLUMNS = (
    "rank",
    "previous_rank",
    "movement",
    "artist",
    "title",
    "year",
    "genre",
    "votes",
    "youtube_url",
    "spotify_url",
    "album_art_url",
)


def _row(song: Song) -> list[object]:
    return [
        song.current_rank if song.current_rank is not None else "",
        song.previous_rank if song.previous_rank is not None else "",
        rank_movement(song.previous_rank, song.current_rank),
        song.artist,
        song.title,
        song.year if song.year is not None else "",
        song.genre or "",
        song.votes,
        song.youtube_url or "",
        song.spotify_url or "",
        song.album_art_url or "",
    ]


def iter_rankings_csv(songs: Iterable[Song]) -> Iterator[str]:
    """Yield the CSV export line by line, header first.

    Text fields are always quoted; numbers are written bare.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_NONNUMERIC, lineterminator="\n")

    def flush() -> str:
        value = buffer.getvalue()
        buffer.seek(0)
        buffer.truncate(0)
        return value

    buffer.write(",".join(CSV_COLUMNS) + "\n")
    yield flush()
    for song in songs:
        writer.writerow(_row(song))
        yield flush()


def render_rankings_csv(songs: Iterable[Song]) -> str:
    """Return the complete CSV export as a string."""
    return "".join(iter_rankings_csv(songs))
