"""HTTP surface (FastAPI TestClient, no network)"""

import pytest
from fastapi.testclient import TestClient

from moodtunes.server import create_app

from conftest import FakeProvider, raw_track


@pytest.fixture
def offline_http(make_client, make_manager):
    client, _ = make_client(manager=make_manager(configured=False), initialize=False)
    with TestClient(create_app(client)) as http:
        yield http


@pytest.fixture
def live_http(make_client):
    provider = FakeProvider(
        recommendations=[raw_track("r1"), raw_track("r2")],
        search_payload={"tracks": {"items": []}},
    )
    client, _ = make_client(provider=provider, initialize=False)
    with TestClient(create_app(client)) as http:
        yield http


def test_health_offline(offline_http):
    body = offline_http.get("/").json()
    assert body["status"] == "healthy"
    assert body["spotify"] == "unconfigured"
    assert body["live"] is False


def test_health_live(live_http):
    body = live_http.get("/").json()
    assert body["spotify"] == "valid"
    assert body["live"] is True


def test_moods(offline_http):
    body = offline_http.get("/moods").json()
    assert [m["id"] for m in body["moods"]] == [
        "happy", "sad", "chill", "energetic", "focus", "party", "sleep",
    ]
    assert body["moods"][3]["parameters"]["target_energy"] == 0.9
    assert body["default"] == "chill"


def test_recommendations_offline(offline_http):
    response = offline_http.get("/recommendations", params={"mood": "happy", "limit": 3})

    assert response.status_code == 200
    body = response.json()
    assert body["mood"]["emoji"] == "😊"
    assert body["total"] == 3
    assert body["recommendations"][0]["id"] == "fallback-happy-1"


def test_recommendations_live(live_http):
    body = live_http.get("/recommendations", params={"mood": "party", "limit": 5}).json()
    assert [t["id"] for t in body["recommendations"]] == ["r1", "r2"]


def test_playlist_recommendations(offline_http):
    body = offline_http.get("/recommendations", params={"mood": "sad", "type": "playlists", "limit": 2}).json()
    assert body["type"] == "playlists"
    assert body["total"] == 2


def test_recommendations_validation(offline_http):
    assert offline_http.get("/recommendations", params={"mood": "happy", "type": "albums"}).status_code == 400
    assert offline_http.get("/recommendations").status_code == 422


def test_post_recommendations(offline_http):
    body = offline_http.post("/recommendations", json={"mood": "focus", "limit": 2}).json()
    assert body["count"] == 2
    assert body["mood"] == "focus"


def test_playlist_and_popular_tracks(offline_http):
    featured = offline_http.get("/playlists/featured", params={"limit": 1}).json()
    playlist_id = featured["playlists"][0]["id"]

    tracks = offline_http.get(f"/playlists/{playlist_id}/tracks", params={"limit": 2}).json()
    popular = offline_http.get("/tracks/popular", params={"limit": 2}).json()

    assert tracks["total"] == 2
    assert popular["tracks"] == tracks["tracks"]


def test_genres(offline_http):
    body = offline_http.get("/genres").json()
    assert "pop" in body["genres"]
    assert body["count"] == len(body["genres"])


def test_search_errors_are_distinguishable(offline_http):
    assert offline_http.get("/search", params={"q": "  "}).status_code == 400
    assert offline_http.get("/search", params={"q": "queen", "type": "podcast"}).status_code == 400
    assert offline_http.get("/search", params={"q": "queen"}).status_code == 503


def test_search_empty_result(live_http):
    response = live_http.get("/search", params={"q": "xyz-no-match"})
    assert response.status_code == 200
    assert response.json() == {"query": "xyz-no-match", "tracks": []}
