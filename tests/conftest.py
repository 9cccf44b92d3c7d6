"""Shared fakes: clock, renewal timers, token exchanger and Spotify provider"""

from typing import Any, Dict, List, Optional

import pytest

from moodtunes.credentials import CredentialManager
from moodtunes.recommendation_client import RecommendationClient

NOW = 1_700_000_000.0


# ==================== Fakes ====================

class FakeClock:
    def __init__(self, now: float = NOW):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class FakeTimer:
    def __init__(self, delay, function, args):
        self.delay = delay
        self.function = function
        self.args = args
        self.started = False
        self.cancelled = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        self.function(*self.args)


class TimerRecorder:
    """timer_factory that records every scheduled renewal instead of sleeping"""

    def __init__(self):
        self.timers: List[FakeTimer] = []

    def __call__(self, delay, function, args) -> FakeTimer:
        timer = FakeTimer(delay, function, args)
        self.timers.append(timer)
        return timer

    @property
    def live(self) -> List[FakeTimer]:
        return [t for t in self.timers if t.started and not t.cancelled]


class FakeTokenExchanger:
    """Returns (or raises) the queued responses in order; the last one repeats"""

    def __init__(self, *responses):
        self.responses = list(responses) or [token_response()]
        self.calls = 0

    def __call__(self) -> Dict[str, Any]:
        self.calls += 1
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(response, Exception):
            raise response
        return response


class FakeProvider:
    """Stands in for SpotifyAPI; `error` is raised from every call when set"""

    def __init__(
        self,
        recommendations: Optional[list] = None,
        search_payload: Optional[dict] = None,
        featured: Optional[list] = None,
        playlist_items: Optional[list] = None,
        genres: Optional[list] = None,
        error: Optional[Exception] = None,
    ):
        self.recommendations = recommendations if recommendations is not None else []
        self.search_payload = search_payload if search_payload is not None else {}
        self.featured = featured if featured is not None else []
        self.playlist_items = playlist_items if playlist_items is not None else []
        self.genres = genres if genres is not None else []
        self.error = error
        self.calls: List[tuple] = []

    def _answer(self, name, value, *args, **kwargs):
        self.calls.append((name, args, kwargs))
        if self.error is not None:
            raise self.error
        return value

    def get_recommendations(self, limit, **params):
        return self._answer("recommendations", self.recommendations, limit=limit, **params)

    def search(self, query, types, limit=20):
        return self._answer("search", self.search_payload, query, list(types), limit)

    def get_featured_playlists(self, limit=20):
        return self._answer("featured", self.featured, limit)

    def get_playlist_tracks(self, playlist_id, limit=50):
        return self._answer("playlist_tracks", self.playlist_items, playlist_id, limit)

    def get_genre_seeds(self):
        return self._answer("genres", self.genres)


class ProviderFactory:
    def __init__(self, provider: FakeProvider):
        self.provider = provider
        self.tokens: List[str] = []

    def __call__(self, access_token: str) -> FakeProvider:
        self.tokens.append(access_token)
        return self.provider


# ==================== Raw Spotify payloads ====================

def token_response(token: str = "token-1", expires_in: int = 3600) -> Dict[str, Any]:
    return {"access_token": token, "token_type": "Bearer", "expires_in": expires_in}


def raw_track(
    track_id: str = "t1",
    name: str = "Song",
    artists=("Artist",),
    duration_ms: int = 125000,
    images=({"url": "https://i.scdn.co/image/cover", "height": 640, "width": 640},),
    preview_url: Optional[str] = "https://p.scdn.co/mp3-preview/abc",
) -> Dict[str, Any]:
    return {
        "id": track_id,
        "name": name,
        "artists": [{"id": f"a-{n}", "name": n} for n in artists],
        "album": {"id": "al1", "name": "Album", "images": list(images)},
        "duration_ms": duration_ms,
        "preview_url": preview_url,
        "external_urls": {"spotify": f"https://open.spotify.com/track/{track_id}"},
        "uri": f"spotify:track:{track_id}",
    }


def raw_playlist(playlist_id: str = "p1", name: str = "Playlist", total: int = 25) -> Dict[str, Any]:
    return {
        "id": playlist_id,
        "name": name,
        "description": "Curated",
        "images": [{"url": f"https://i.scdn.co/image/{playlist_id}"}],
        "tracks": {"total": total},
        "owner": {"display_name": "Spotify"},
        "external_urls": {"spotify": f"https://open.spotify.com/playlist/{playlist_id}"},
    }


# ==================== Fixtures ====================

@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def timers():
    return TimerRecorder()


@pytest.fixture
def make_manager(clock, timers):
    def _make(exchanger=None, configured=True, margin=60):
        return CredentialManager(
            client_id="client-id" if configured else None,
            client_secret="client-secret" if configured else None,
            token_exchanger=exchanger if exchanger is not None else FakeTokenExchanger(),
            renewal_margin=margin,
            clock=clock,
            timer_factory=timers,
        )
    return _make


@pytest.fixture
def make_client(make_manager):
    """RecommendationClient wired to fakes; returns (client, provider_factory)"""
    def _make(provider=None, manager=None, initialize=True):
        manager = manager or make_manager()
        if initialize:
            manager.initialize()
        factory = ProviderFactory(provider or FakeProvider())
        return RecommendationClient(credentials=manager, provider_factory=factory), factory
    return _make
