"""
Recommendation Client - live Spotify first, local catalog second

Read-only browse operations (mood recommendations, featured playlists,
playlist tracks, popular tracks, genres) never raise: when the credential is
unusable or Spotify fails they answer from the FallbackCatalog. Search has no
safe substitute, so its failures surface as SearchUnavailable.
"""

import logging
from typing import Any, Callable, Iterable, List, Optional, Union

from .credentials import CredentialManager
from .errors import (
    CredentialUnavailable,
    InvalidQuery,
    ProviderError,
    ProviderMalformedResponse,
    SearchUnavailable,
    status_of,
)
from .fallback_catalog import FallbackCatalog
from .mood_mappings import MoodParameterMap
from .normalizer import FORMATTERS, format_items, format_playlist, format_track, paged_items
from .schemas import Playlist, SearchResults, Track
from .spotify_api import MAX_PAGE_SIZE, MAX_RECOMMENDATIONS, SpotifyAPI, SpotifyAPIPool

logger = logging.getLogger(__name__)

ProviderFactory = Callable[[str], SpotifyAPI]

SEARCH_TYPES = ("track", "artist", "album")
POPULAR_MOOD = "happy"


def parse_search_types(types: Union[str, Iterable[str], None]) -> List[str]:
    """
    Normalize requested search types ('track,artist' or a list).

    Raises:
        InvalidQuery: a type other than track/artist/album was requested
    """
    if types is None:
        return ["track"]
    if isinstance(types, str):
        types = types.split(",")

    parsed: List[str] = []
    for search_type in types:
        search_type = search_type.strip().lower()
        if search_type and search_type not in parsed:
            parsed.append(search_type)

    unknown = [t for t in parsed if t not in SEARCH_TYPES]
    if unknown:
        raise InvalidQuery(
            f"Unsupported search type(s): {', '.join(unknown)}. "
            f"Allowed: {', '.join(SEARCH_TYPES)}"
        )
    return parsed or ["track"]


class RecommendationClient:
    """Bounded-latency, always-answering music lookups for a mood"""

    def __init__(
        self,
        credentials: CredentialManager,
        provider_factory: ProviderFactory,
        mood_map: Optional[MoodParameterMap] = None,
        catalog: Optional[FallbackCatalog] = None,
    ):
        self.credentials = credentials
        self.mood_map = mood_map or MoodParameterMap()
        self.catalog = catalog or FallbackCatalog(default_mood=self.mood_map.default_mood)
        self._provider_factory = provider_factory

    @classmethod
    def from_settings(
        cls,
        settings,
        credentials: Optional[CredentialManager] = None,
    ) -> "RecommendationClient":
        mood_map = MoodParameterMap.from_settings(settings)
        return cls(
            credentials=credentials or CredentialManager.from_settings(settings),
            provider_factory=SpotifyAPIPool(
                timeout=settings.provider_timeout_seconds,
                market=settings.market,
            ),
            mood_map=mood_map,
            catalog=FallbackCatalog(default_mood=mood_map.default_mood),
        )

    @property
    def live(self) -> bool:
        """Whether requests currently go to Spotify"""
        return self.credentials.is_usable()

    def _provider(self) -> SpotifyAPI:
        # raises CredentialUnavailable if the token lapsed since is_usable()
        return self._provider_factory(self.credentials.current_token())

    def _log_fallback(self, operation: str, error: Exception, **context: Any):
        details = ", ".join(f"{key}={value!r}" for key, value in context.items())
        status = status_of(error)
        if isinstance(error, (ProviderError, CredentialUnavailable)):
            logger.warning(
                f"⚠️ {operation} failed ({details}, status={status}) - "
                f"serving fallback: {type(error).__name__}: {error}"
            )
        else:
            logger.exception(f"❌ {operation} raised unexpectedly ({details}) - serving fallback")

    # ==================== Mood Recommendations ====================

    def recommend_by_mood(self, mood: Optional[str], limit: int = 20) -> List[Track]:
        """
        Tracks for a mood, live from Spotify when possible.

        Never raises. Provider order is preserved and the result holds at most
        `limit` tracks; Spotify may return fewer.
        """
        if limit <= 0:
            return []

        mood_key = self.mood_map.resolve(mood)
        if not self.credentials.is_usable():
            logger.info(
                f"🎧 Fallback tracks for mood '{mood_key}' "
                f"(Spotify {self.credentials.state.value})"
            )
            return self.catalog.tracks_for(mood_key, limit)

        params = self.mood_map.parameters_for(mood_key)
        try:
            raw_tracks = self._provider().get_recommendations(
                limit=min(limit, MAX_RECOMMENDATIONS),
                **params.to_query()
            )
            tracks = format_items(raw_tracks, format_track)
        except Exception as e:
            self._log_fallback("recommend_by_mood", e, mood=mood_key, limit=limit)
            return self.catalog.tracks_for(mood_key, limit)

        logger.info(f"🎯 {len(tracks)} Spotify tracks for mood '{mood_key}'")
        return tracks[:limit]

    # ==================== Playlists ====================

    def featured_playlists(self, limit: int = 20) -> List[Playlist]:
        """Featured playlists; fallback playlists when Spotify is unavailable. Never raises."""
        if limit <= 0:
            return []

        if not self.credentials.is_usable():
            logger.info(f"🎧 Fallback playlists (Spotify {self.credentials.state.value})")
            return self.catalog.playlists(limit)

        try:
            raw_playlists = self._provider().get_featured_playlists(min(limit, MAX_PAGE_SIZE))
            playlists = format_items(raw_playlists, format_playlist)
        except Exception as e:
            self._log_fallback("featured_playlists", e, limit=limit)
            return self.catalog.playlists(limit)

        return playlists[:limit]

    def playlist_tracks(self, playlist_id: str, limit: int = 50) -> List[Track]:
        """
        Tracks of a playlist. Never raises.

        Fallback playlist ids are answered from the catalog. For Spotify
        playlists only tracks with a preview clip are kept; on failure the
        default mood's fallback tracks are returned.
        """
        if limit <= 0:
            return []

        fallback_mood = self.catalog.mood_for_playlist(playlist_id)
        if fallback_mood is not None:
            return self.catalog.tracks_for(fallback_mood, limit)

        default_mood = self.mood_map.default_mood
        if not self.credentials.is_usable():
            logger.info(
                f"🎧 Fallback tracks for playlist {playlist_id} "
                f"(Spotify {self.credentials.state.value})"
            )
            return self.catalog.tracks_for(default_mood, limit)

        try:
            items = self._provider().get_playlist_tracks(playlist_id, limit)
            if not isinstance(items, list):
                raise ProviderMalformedResponse("Playlist items is not a list")
            raw_tracks = [item.get("track") for item in items if item]
            playable = [track for track in raw_tracks if track and track.get("preview_url")]
            tracks = format_items(playable, format_track)
        except Exception as e:
            self._log_fallback("playlist_tracks", e, playlist_id=playlist_id, limit=limit)
            return self.catalog.tracks_for(default_mood, limit)

        return tracks[:limit]

    def popular_tracks(self, limit: int = 20) -> List[Track]:
        """Tracks of the first featured playlist, or happy-mood tracks. Never raises."""
        playlists = self.featured_playlists(5)
        if playlists:
            return self.playlist_tracks(playlists[0].id, limit)
        return self.recommend_by_mood(POPULAR_MOOD, limit)

    def available_genres(self) -> List[str]:
        """Spotify's genre seeds, or the seed genres of the mood table. Never raises."""
        if self.credentials.is_usable():
            try:
                genres = self._provider().get_genre_seeds()
                if isinstance(genres, list):
                    return [genre for genre in genres if isinstance(genre, str)]
                raise ProviderMalformedResponse("Genre seeds is not a list")
            except Exception as e:
                self._log_fallback("available_genres", e)
        return self.catalog.genres()

    # ==================== Search ====================

    def search(
        self,
        query: Optional[str],
        types: Union[str, Iterable[str], None] = ("track",),
        limit: int = 20,
    ) -> SearchResults:
        """
        Search Spotify for tracks, artists and/or albums.

        No fallback data exists for an open-ended query, so failures surface.
        An empty result for a non-empty query is a normal answer.

        Raises:
            InvalidQuery: empty query or unsupported type
            SearchUnavailable: no usable credential or Spotify failed
        """
        query = (query or "").strip()
        if not query:
            raise InvalidQuery("Search query is required")
        search_types = parse_search_types(types)
        limit = max(1, min(limit, MAX_PAGE_SIZE))

        try:
            payload = self._provider().search(query, search_types, limit)
            sections = {
                f"{search_type}s": format_items(
                    paged_items(payload, f"{search_type}s"),
                    FORMATTERS[search_type],
                )
                for search_type in search_types
            }
        except (CredentialUnavailable, ProviderError) as e:
            logger.warning(
                f"⚠️ search failed (query={query!r}, types={search_types}, "
                f"status={status_of(e)}): {type(e).__name__}: {e}"
            )
            raise SearchUnavailable("Music search is temporarily unavailable") from e

        return SearchResults(**sections)
