# tests/conftest.py
from __future__ import annotations

from collections.abc import Callable, Generator, Iterator
from datetime import datetime
from itertools import count
from pathlib import Path
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from top_chart.core.settings import Settings, settings
from top_chart.db.session import Base, build_engine
from top_chart.db.session import get_db as app_get_session
from top_chart.main import app as fastapi_app
from top_chart.models import Song
from top_chart.models.song import SONG_STATUS_APPROVED
from top_chart.services.voting import VotingService, build_voting_service

TEST_SALT = "test-salt"

_SONG_COUNTER = count(1)


@pytest.fixture()
def engine(tmp_path: Path) -> Generator[Engine, None, None]:
    # A file database (not :memory:) so separate sessions use separate
    # connections, as they do in production.
    engine = build_engine(f"sqlite:///{tmp_path / 'chart.db'}")
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture()
def db_session(session_factory: sessionmaker[Session]) -> Iterator[Session]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """Provide settings with a fixed voter hash salt."""
    return Settings(VOTER_HASH_SALT=TEST_SALT, BROADCAST_QUEUE_SIZE=4)


@pytest.fixture()
def voting_service(
    session_factory: sessionmaker[Session],
    test_settings: Settings,
) -> VotingService:
    return build_voting_service(session_factory, test_settings)


@pytest.fixture()
def app(
    session_factory: sessionmaker[Session],
    voting_service: VotingService,
) -> Iterator[FastAPI]:
    def _get_session_override() -> Generator[Session, None, None]:
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    fastapi_app.dependency_overrides[app_get_session] = _get_session_override
    fastapi_app.state.voting_service = voting_service
    try:
        yield fastapi_app
    finally:
        fastapi_app.dependency_overrides.pop(app_get_session, None)
        fastapi_app.state.voting_service = None


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def admin_headers() -> dict[str, str]:
    """Return headers carrying the configured admin key."""
    return {"X-Admin-Key": settings.admin_api_key}


@pytest.fixture()
def make_song(session_factory: sessionmaker[Session]) -> Callable[..., Song]:
    """Return a factory that persists a song and returns it detached."""

    def _make_song(
        *,
        status: str = SONG_STATUS_APPROVED,
        votes: int = 0,
        last_vote_at: datetime | None = None,
        **fields: Any,
    ) -> Song:
        number = next(_SONG_COUNTER)
        fields.setdefault("artist", f"Artist {number}")
        fields.setdefault("title", f"Title {number}")
        fields.setdefault("genre", "Pop")
        song = Song(status=status, votes=votes, last_vote_at=last_vote_at, **fields)
        with session_factory() as session:
            session.add(song)
            session.commit()
            session.refresh(song)
            session.expunge(song)
        return song

    return _make_song


@pytest.fixture()
def load_song(session_factory: sessionmaker[Session]) -> Callable[[int], Song]:
    """Return a loader that reads the committed state of a song."""

    def _load(song_id: int) -> Song:
        with session_factory() as session:
            song = session.get(Song, song_id)
            assert song is not None
            session.expunge(song)
            return song

    return _load
