"""
Spotify Web API wrapper - app (client credentials) endpoints only.

Narrow capability surface used by RecommendationClient:
recommendations, search, featured playlists, playlist tracks and genre seeds.
Returns raw Spotify JSON; normalization is the caller's job. Every spotipy /
requests failure is translated into the ProviderError family.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Sequence

import requests
import spotipy
from spotipy.exceptions import SpotifyException

from .errors import ProviderError, ProviderHTTPError, ProviderMalformedResponse, ProviderTimeout

logger = logging.getLogger(__name__)

# Spotify API limits
MAX_RECOMMENDATIONS = 100
MAX_PAGE_SIZE = 50
MAX_PLAYLIST_PAGE_SIZE = 100


@contextmanager
def provider_call(operation: str) -> Iterator[None]:
    """Translate spotipy/requests failures into ProviderError subclasses"""
    try:
        yield
    except SpotifyException as e:
        raise ProviderHTTPError(e.http_status, f"{operation}: {e.msg}") from e
    except requests.exceptions.Timeout as e:
        raise ProviderTimeout(f"{operation} timed out") from e
    except requests.exceptions.RequestException as e:
        raise ProviderError(f"{operation} failed: {e}") from e


def _section(payload: Any, key: str) -> Any:
    if not isinstance(payload, dict) or key not in payload:
        raise ProviderMalformedResponse(f"Response has no '{key}' section")
    return payload[key]


class SpotifyAPI:
    """Spotify REST API wrapper using Spotipy, bound to one access token"""

    def __init__(
        self,
        access_token: str,
        timeout: float = 5.0,
        market: Optional[str] = None,
    ):
        self.market = market
        # no spotipy-level retries: one bounded attempt per call
        self.sp = spotipy.Spotify(
            auth=access_token,
            requests_session=True,
            requests_timeout=timeout,
            retries=0,
            status_retries=0,
        )

    # ==================== Recommendations ====================

    def get_recommendations(self, limit: int, **params) -> List[Dict[str, Any]]:
        """Raw recommended tracks for seed genres + audio-feature targets"""
        if params.get("seed_genres"):
            params["seed_genres"] = list(params["seed_genres"])[:5]
        with provider_call("recommendations"):
            payload = self.sp.recommendations(
                limit=min(limit, MAX_RECOMMENDATIONS),
                country=self.market,
                **params
            )
        return _section(payload, "tracks")

    def get_genre_seeds(self) -> List[str]:
        with provider_call("genre seeds"):
            payload = self.sp.recommendation_genre_seeds()
        return _section(payload, "genres")

    # ==================== Search ====================

    def search(self, query: str, types: Sequence[str], limit: int = 20) -> Dict[str, Any]:
        """Raw search payload with one paging section per requested type"""
        with provider_call("search"):
            payload = self.sp.search(
                q=query,
                type=",".join(types),
                limit=min(limit, MAX_PAGE_SIZE),
                market=self.market,
            )
        if not isinstance(payload, dict):
            raise ProviderMalformedResponse("Search response is not a JSON object")
        return payload

    # ==================== Playlists ====================

    def get_featured_playlists(self, limit: int = 20) -> List[Dict[str, Any]]:
        with provider_call("featured playlists"):
            payload = self.sp.featured_playlists(
                country=self.market,
                limit=min(limit, MAX_PAGE_SIZE),
            )
        playlists = _section(payload, "playlists")
        return _section(playlists, "items")

    def get_playlist_tracks(self, playlist_id: str, limit: int = 50) -> List[Dict[str, Any]]:
        """Raw playlist items (each wraps a 'track', which may be null)"""
        with provider_call("playlist tracks"):
            payload = self.sp.playlist_items(
                playlist_id,
                limit=min(limit, MAX_PLAYLIST_PAGE_SIZE),
                market=self.market,
                additional_types=("track",),
            )
        return _section(payload, "items")


class SpotifyAPIPool:
    """
    Hands out one SpotifyAPI per access token.

    Each wrapper owns its spotipy session, which spotipy closes when the
    wrapper is collected. Callers still holding a previous token's wrapper
    keep it (and its connection pool) alive until they finish.
    """

    def __init__(self, timeout: float = 5.0, market: Optional[str] = None):
        self.timeout = timeout
        self.market = market
        self._lock = threading.Lock()
        self._token: Optional[str] = None
        self._api: Optional[SpotifyAPI] = None

    def __call__(self, access_token: str) -> SpotifyAPI:
        with self._lock:
            if self._api is None or self._token != access_token:
                if self._api is not None:
                    logger.debug("Access token changed, building a new Spotify client")
                self._api = SpotifyAPI(access_token, timeout=self.timeout, market=self.market)
                self._token = access_token
            return self._api
