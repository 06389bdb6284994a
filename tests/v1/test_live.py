# mypy: ignore-errors
"""Tests for the live ranking WebSocket."""

from datetime import UTC, datetime

from top_chart.api.v1.endpoints.live import EVENT_INIT, EVENT_UPDATE

T0 = datetime(2024, 6, 1, tzinfo=UTC)


def test_observer_gets_initial_ranking_then_updates(client, voting_service, make_song):
    leader = make_song(votes=10, last_vote_at=T0)
    chaser = make_song(votes=10, last_vote_at=T0.replace(minute=5))
    voting_service.coordinator.refresh()

    with client.websocket_connect("/api/v1/live/rankings") as ws:
        init = ws.receive_json()
        assert init["event"] == EVENT_INIT
        assert [song["id"] for song in init["songs"]] == [leader.id, chaser.id]
        assert [song["rank"] for song in init["songs"]] == [1, 2]

        vote = client.post("/api/v1/votes", json={"song_id": chaser.id})
        assert vote.status_code == 200

        update = ws.receive_json()
        assert update["event"] == EVENT_UPDATE
        assert update["version"] > init["version"]
        ranked = {song["id"]: song for song in update["songs"]}
        assert ranked[chaser.id]["rank"] == 1
        assert ranked[chaser.id]["previous_rank"] == 2
        assert ranked[chaser.id]["votes"] == 11
        assert ranked[leader.id]["rank"] == 2


def test_observer_is_unsubscribed_on_disconnect(client, voting_service, make_song):
    make_song(votes=1, last_vote_at=T0)

    with client.websocket_connect("/api/v1/live/rankings") as ws:
        ws.receive_json()
        assert voting_service.broadcaster.subscriber_count == 1

    # The handler finishes asynchronously after the close frame.
    for _ in range(100):
        if voting_service.broadcaster.subscriber_count == 0:
            break
        client.get("/health")
    assert voting_service.broadcaster.subscriber_count == 0
