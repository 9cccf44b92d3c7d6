"""
Spotify response normalization.

All knowledge of Spotify's JSON schema lives here. Every formatter is total on
well-formed payloads: a missing optional field becomes "" / [] / 0 / None.
Anything that is not a JSON object raises ProviderMalformedResponse so the
caller can fall back.
"""

from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, TypeVar

from .errors import ProviderMalformedResponse
from .schemas import Album, Artist, Playlist, Track

T = TypeVar("T")


def format_duration(duration_ms: Optional[int]) -> str:
    """Convert milliseconds to M:SS (125000 -> '2:05')"""
    if not duration_ms or duration_ms < 0:
        return "0:00"
    minutes = int(duration_ms) // 60000
    seconds = (int(duration_ms) % 60000) // 1000
    return f"{minutes}:{seconds:02d}"


def first_image(images: Optional[Iterable[Mapping[str, Any]]]) -> str:
    """URL of the first image entry, or '' when there is none"""
    images = list(images or [])
    if images and isinstance(images[0], Mapping):
        return images[0].get("url") or ""
    return ""


def join_artists(artists: Optional[Iterable[Mapping[str, Any]]]) -> str:
    return ", ".join(
        artist.get("name", "") for artist in artists or [] if isinstance(artist, Mapping)
    )


def _spotify_url(obj: Mapping[str, Any]) -> str:
    return (obj.get("external_urls") or {}).get("spotify") or ""


def _require_mapping(obj: Any, kind: str) -> Mapping[str, Any]:
    if not isinstance(obj, Mapping):
        raise ProviderMalformedResponse(f"Expected a {kind} object, got {type(obj).__name__}")
    return obj


# ==================== Entity Formatters ====================

def format_track(track: Any) -> Track:
    """Format Spotify track data into a canonical Track"""
    track = _require_mapping(track, "track")
    album = track.get("album") or {}
    track_id = track.get("id") or ""
    return Track(
        id=track_id,
        name=track.get("name") or "",
        artist=join_artists(track.get("artists")),
        album=album.get("name") or "",
        duration=format_duration(track.get("duration_ms")),
        image=first_image(album.get("images")),
        preview_url=track.get("preview_url"),
        provider_url=_spotify_url(track),
        provider_id=track_id or None,
    )


def format_artist(artist: Any) -> Artist:
    artist = _require_mapping(artist, "artist")
    artist_id = artist.get("id") or ""
    return Artist(
        id=artist_id,
        name=artist.get("name") or "",
        image=first_image(artist.get("images")),
        genres=list(artist.get("genres") or []),
        provider_url=_spotify_url(artist),
        provider_id=artist_id or None,
    )


def format_album(album: Any) -> Album:
    album = _require_mapping(album, "album")
    album_id = album.get("id") or ""
    return Album(
        id=album_id,
        name=album.get("name") or "",
        artist=join_artists(album.get("artists")),
        image=first_image(album.get("images")),
        release_date=album.get("release_date") or "",
        total_tracks=album.get("total_tracks") or 0,
        provider_url=_spotify_url(album),
        provider_id=album_id or None,
    )


def format_playlist(playlist: Any) -> Playlist:
    playlist = _require_mapping(playlist, "playlist")
    playlist_id = playlist.get("id") or ""
    return Playlist(
        id=playlist_id,
        name=playlist.get("name") or "",
        description=playlist.get("description") or "",
        image=first_image(playlist.get("images")),
        tracks=(playlist.get("tracks") or {}).get("total") or 0,
        owner=(playlist.get("owner") or {}).get("display_name") or "",
        provider_url=_spotify_url(playlist),
        provider_id=playlist_id or None,
    )


# ==================== Collections ====================

def format_items(items: Any, formatter: Callable[[Any], T]) -> List[T]:
    """
    Format a list of raw items, keeping provider order.

    Spotify occasionally returns null entries (removed tracks, unavailable
    playlists); those are skipped.
    """
    if not isinstance(items, list):
        raise ProviderMalformedResponse(f"Expected a list of items, got {type(items).__name__}")
    try:
        return [formatter(item) for item in items if item is not None]
    except (AttributeError, TypeError, ValueError) as e:
        # wrong nested types, e.g. "album": "x" or a non-numeric duration
        raise ProviderMalformedResponse(f"Unexpected item shape: {e}") from e


def paged_items(payload: Any, key: str) -> List[Any]:
    """Extract payload[key]['items'] from a Spotify paging response"""
    payload = _require_mapping(payload, "response")
    page = payload.get(key)
    if page is None:
        raise ProviderMalformedResponse(f"Response has no '{key}' section")
    items = _require_mapping(page, f"'{key}' page").get("items")
    if items is None:
        raise ProviderMalformedResponse(f"'{key}' page has no items")
    return items


FORMATTERS: Dict[str, Callable[[Any], Any]] = {
    "track": format_track,
    "artist": format_artist,
    "album": format_album,
    "playlist": format_playlist,
}
