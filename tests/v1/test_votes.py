# mypy: ignore-errors
"""Tests for the vote endpoint."""

from top_chart.models.song import SONG_STATUS_PENDING
from top_chart.services.errors import StorageUnavailableError


def _vote(client, song_id, address="203.0.113.7", agent="Mozilla/5.0"):
    return client.post(
        "/api/v1/votes",
        json={"song_id": song_id},
        headers={"X-Forwarded-For": address, "User-Agent": agent},
    )


def test_vote_is_accepted(client, make_song, load_song):
    song = make_song(votes=4)

    response = _vote(client, song.id)

    assert response.status_code == 200
    assert response.json() == {"ok": True, "song_id": song.id, "votes": 5}
    assert load_song(song.id).votes == 5


def test_second_vote_from_same_client_conflicts(client, make_song, load_song):
    song = make_song()
    assert _vote(client, song.id).status_code == 200

    response = _vote(client, song.id)

    assert response.status_code == 409
    assert response.json()["detail"] == "already_voted"
    assert load_song(song.id).votes == 1


def test_other_client_may_vote_for_same_song(client, make_song, load_song):
    song = make_song()

    assert _vote(client, song.id, address="203.0.113.7").status_code == 200
    assert _vote(client, song.id, address="203.0.113.8").status_code == 200
    assert load_song(song.id).votes == 2


def test_vote_for_pending_or_missing_song_is_not_found(client, make_song):
    pending = make_song(status=SONG_STATUS_PENDING)

    assert _vote(client, pending.id).status_code == 404
    response = _vote(client, 424242)
    assert response.status_code == 404
    assert response.json()["detail"] == "song_not_found"


def test_storage_failure_is_service_unavailable(client, voting_service, make_song, mocker):
    song = make_song()
    mocker.patch.object(
        voting_service.ledger,
        "record_vote",
        side_effect=StorageUnavailableError(song.id, "OperationalError"),
    )

    response = _vote(client, song.id)

    assert response.status_code == 503
    assert response.json()["detail"] == "vote_failed"


def test_invalid_payload_is_rejected(client):
    assert client.post("/api/v1/votes", json={"song_id": 0}).status_code == 422
    assert client.post("/api/v1/votes", json={}).status_code == 422
