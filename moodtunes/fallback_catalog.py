"""Static fallback catalog - served whenever live Spotify data cannot be obtained"""

import logging
from typing import Dict, List, Optional
from urllib.parse import quote

from .mood_mappings import DEFAULT_MOOD, DEFAULT_MOOD_PARAMETERS, normalize_mood_key
from .normalizer import format_duration
from .schemas import Playlist, Track

logger = logging.getLogger(__name__)

PLACEHOLDER_IMAGE = "https://placehold.co/300x300/png?text=Moodtunes"
PLAYLIST_ID_PREFIX = "fallback-playlist-"


# ==================== FALLBACK SONG LIBRARY ====================

FALLBACK_SONGS: Dict[str, List[dict]] = {
    "happy": [
        {"name": "Happy", "artist": "Pharrell Williams", "album": "G I R L", "duration_ms": 233000},
        {"name": "Can't Stop the Feeling!", "artist": "Justin Timberlake", "album": "Trolls (Original Motion Picture Soundtrack)", "duration_ms": 236000},
        {"name": "Walking on Sunshine", "artist": "Katrina and the Waves", "album": "Walking on Sunshine", "duration_ms": 239000},
        {"name": "Good as Hell", "artist": "Lizzo", "album": "Cuz I Love You", "duration_ms": 159000},
        {"name": "Don't Worry Be Happy", "artist": "Bobby McFerrin", "album": "Simple Pleasures", "duration_ms": 294000},
        {"name": "Best Day of My Life", "artist": "American Authors", "album": "Oh, What a Life", "duration_ms": 194000},
        {"name": "Here Comes the Sun", "artist": "The Beatles", "album": "Abbey Road", "duration_ms": 185000},
    ],
    "sad": [
        {"name": "Someone Like You", "artist": "Adele", "album": "21", "duration_ms": 285000},
        {"name": "Fix You", "artist": "Coldplay", "album": "X&Y", "duration_ms": 295000},
        {"name": "Everybody Hurts", "artist": "R.E.M.", "album": "Automatic for the People", "duration_ms": 320000},
        {"name": "Mad World", "artist": "Gary Jules", "album": "Trading Snakeoil for Wolftickets", "duration_ms": 189000},
        {"name": "Skinny Love", "artist": "Bon Iver", "album": "For Emma, Forever Ago", "duration_ms": 238000},
        {"name": "When I Was Your Man", "artist": "Bruno Mars", "album": "Unorthodox Jukebox", "duration_ms": 213000},
    ],
    "chill": [
        {"name": "Sunset Lover", "artist": "Petit Biscuit", "album": "Presence", "duration_ms": 237000},
        {"name": "Holocene", "artist": "Bon Iver", "album": "Bon Iver, Bon Iver", "duration_ms": 336000},
        {"name": "Better Together", "artist": "Jack Johnson", "album": "In Between Dreams", "duration_ms": 207000},
        {"name": "Riptide", "artist": "Vance Joy", "album": "Dream Your Life Away", "duration_ms": 204000},
        {"name": "Strawberry Swing", "artist": "Coldplay", "album": "Viva la Vida or Death and All His Friends", "duration_ms": 249000},
        {"name": "Banana Pancakes", "artist": "Jack Johnson", "album": "In Between Dreams", "duration_ms": 191000},
    ],
    "energetic": [
        {"name": "Blinding Lights", "artist": "The Weeknd", "album": "After Hours", "duration_ms": 200000},
        {"name": "Don't Stop Me Now", "artist": "Queen", "album": "Jazz", "duration_ms": 209000},
        {"name": "Eye of the Tiger", "artist": "Survivor", "album": "Eye of the Tiger", "duration_ms": 245000},
        {"name": "Thunderstruck", "artist": "AC/DC", "album": "The Razors Edge", "duration_ms": 292000},
        {"name": "Can't Hold Us", "artist": "Macklemore, Ryan Lewis, Ray Dalton", "album": "The Heist", "duration_ms": 258000},
        {"name": "Titanium", "artist": "David Guetta, Sia", "album": "Nothing but the Beat", "duration_ms": 245000},
    ],
    "focus": [
        {"name": "Weightless", "artist": "Marconi Union", "album": "Weightless", "duration_ms": 480000},
        {"name": "Clair de Lune", "artist": "Claude Debussy", "album": "Suite bergamasque", "duration_ms": 300000},
        {"name": "River Flows in You", "artist": "Yiruma", "album": "First Love", "duration_ms": 190000},
        {"name": "Experience", "artist": "Ludovico Einaudi", "album": "In a Time Lapse", "duration_ms": 315000},
        {"name": "Gymnopédie No. 1", "artist": "Erik Satie", "album": "Gymnopédies", "duration_ms": 185000},
        {"name": "An Ending (Ascent)", "artist": "Brian Eno", "album": "Apollo: Atmospheres and Soundtracks", "duration_ms": 266000},
    ],
    "party": [
        {"name": "Uptown Funk", "artist": "Mark Ronson, Bruno Mars", "album": "Uptown Special", "duration_ms": 270000},
        {"name": "I Gotta Feeling", "artist": "The Black Eyed Peas", "album": "The E.N.D.", "duration_ms": 289000},
        {"name": "Levitating", "artist": "Dua Lipa", "album": "Future Nostalgia", "duration_ms": 203000},
        {"name": "Don't Start Now", "artist": "Dua Lipa", "album": "Future Nostalgia", "duration_ms": 183000},
        {"name": "Dancing Queen", "artist": "ABBA", "album": "Arrival", "duration_ms": 231000},
        {"name": "Party Rock Anthem", "artist": "LMFAO, Lauren Bennett, GoonRock", "album": "Sorry for Party Rocking", "duration_ms": 262000},
    ],
    "sleep": [
        {"name": "Nuvole Bianche", "artist": "Ludovico Einaudi", "album": "Una Mattina", "duration_ms": 357000},
        {"name": "To Build a Home", "artist": "The Cinematic Orchestra", "album": "Ma Fleur", "duration_ms": 371000},
        {"name": "Spiegel im Spiegel", "artist": "Arvo Pärt", "album": "Alina", "duration_ms": 600000},
        {"name": "Re: Stacks", "artist": "Bon Iver", "album": "For Emma, Forever Ago", "duration_ms": 401000},
        {"name": "Opus 23", "artist": "Dustin O'Halloran", "album": "Lumiere", "duration_ms": 166000},
    ],
}

FALLBACK_PLAYLISTS: Dict[str, dict] = {
    "happy": {"name": "Happy Hits", "description": "Feel-good music to boost your mood", "tracks": 50},
    "sad": {"name": "Sad Songs", "description": "Music for when you're in your feelings", "tracks": 42},
    "chill": {"name": "Chill Vibes", "description": "Relaxing tunes to unwind", "tracks": 35},
    "energetic": {"name": "Workout Motivation", "description": "High-energy music to power your workout", "tracks": 60},
    "focus": {"name": "Deep Focus", "description": "Music to help you concentrate", "tracks": 45},
    "party": {"name": "Party Starters", "description": "Dance and party hits to elevate any celebration", "tracks": 40},
    "sleep": {"name": "Sleep Sounds", "description": "Calm and soothing sounds for better sleep", "tracks": 30},
}


def _search_url(*terms: str) -> str:
    return "https://open.spotify.com/search/" + quote(" ".join(terms))


def _build_tracks(mood: str, songs: List[dict]) -> List[Track]:
    return [
        Track(
            id=f"fallback-{mood}-{index}",
            name=song["name"],
            artist=song["artist"],
            album=song["album"],
            duration=format_duration(song["duration_ms"]),
            image=PLACEHOLDER_IMAGE,
            preview_url=None,
            provider_url=_search_url(song["name"], song["artist"]),
            provider_id=None,
        )
        for index, song in enumerate(songs, start=1)
    ]


def _build_playlist(mood: str, entry: dict) -> Playlist:
    return Playlist(
        id=f"{PLAYLIST_ID_PREFIX}{mood}",
        name=entry["name"],
        description=entry["description"],
        image=PLACEHOLDER_IMAGE,
        tracks=entry["tracks"],
        owner="Moodtunes",
        provider_url=_search_url(entry["name"]),
        provider_id=None,
    )


class FallbackCatalog:
    """Fixed, in-memory tracks per mood plus one fallback playlist per mood"""

    def __init__(
        self,
        songs: Optional[Dict[str, List[dict]]] = None,
        playlists: Optional[Dict[str, dict]] = None,
        default_mood: str = DEFAULT_MOOD,
    ):
        songs = FALLBACK_SONGS if songs is None else songs
        playlists = FALLBACK_PLAYLISTS if playlists is None else playlists
        self.default_mood = normalize_mood_key(default_mood)
        self._tracks: Dict[str, List[Track]] = {
            mood: _build_tracks(mood, entries) for mood, entries in songs.items()
        }
        self._playlists: List[Playlist] = [
            _build_playlist(mood, entry) for mood, entry in playlists.items()
        ]
        if not self._tracks.get(self.default_mood):
            raise ValueError(f"Fallback catalog has no tracks for default mood '{default_mood}'")

    def tracks_for(self, mood: Optional[str], limit: int) -> List[Track]:
        """
        Fallback tracks for a mood.

        Returns min(limit, available) records; unknown moods get the default
        mood's records. Only a non-positive limit yields an empty list.
        """
        if limit <= 0:
            return []
        key = normalize_mood_key(mood)
        tracks = self._tracks.get(key) or self._tracks[self.default_mood]
        return list(tracks[:limit])

    def playlists(self, limit: int) -> List[Playlist]:
        if limit <= 0:
            return []
        return list(self._playlists[:limit])

    def playlist_for(self, playlist_id: str) -> Optional[Playlist]:
        for playlist in self._playlists:
            if playlist.id == playlist_id:
                return playlist
        return None

    def mood_for_playlist(self, playlist_id: str) -> Optional[str]:
        """Mood behind a fallback playlist id, None for any other id"""
        if self.playlist_for(playlist_id) is None:
            return None
        return playlist_id[len(PLAYLIST_ID_PREFIX):]

    def genres(self) -> List[str]:
        """Ordered union of the default seed genres"""
        seen: Dict[str, None] = {}
        for params in DEFAULT_MOOD_PARAMETERS.values():
            for genre in params.seed_genres:
                seen.setdefault(genre, None)
        return list(seen)


# Singleton instance
fallback_catalog = FallbackCatalog()
