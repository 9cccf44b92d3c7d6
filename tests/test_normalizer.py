"""Spotify payload -> canonical record mapping"""

import pytest

from moodtunes.errors import ProviderMalformedResponse
from moodtunes.normalizer import (
    first_image,
    format_album,
    format_artist,
    format_duration,
    format_items,
    format_playlist,
    format_track,
    paged_items,
)

from conftest import raw_playlist, raw_track


@pytest.mark.parametrize("duration_ms, expected", [
    (0, "0:00"),
    (65000, "1:05"),
    (600000, "10:00"),
    (125000, "2:05"),
    (59999, "0:59"),
    (None, "0:00"),
])
def test_format_duration(duration_ms, expected):
    assert format_duration(duration_ms) == expected


def test_format_track():
    track = format_track(raw_track(track_id="abc", name="Levitating", artists=("Dua Lipa", "DaBaby")))

    assert track.id == "abc"
    assert track.name == "Levitating"
    assert track.artist == "Dua Lipa, DaBaby"
    assert track.album == "Album"
    assert track.duration == "2:05"
    assert track.image == "https://i.scdn.co/image/cover"
    assert track.preview_url == "https://p.scdn.co/mp3-preview/abc"
    assert track.provider_url == "https://open.spotify.com/track/abc"
    assert track.provider_id == "abc"


def test_format_track_tolerates_missing_optional_fields():
    track = format_track({"id": "x", "name": "Bare", "artists": [], "album": {"name": "A", "images": []}})

    assert track.artist == ""
    assert track.image == ""
    assert track.preview_url is None
    assert track.duration == "0:00"
    assert track.provider_url == ""


def test_first_image_takes_first_entry():
    assert first_image([{"url": "big"}, {"url": "small"}]) == "big"
    assert first_image([]) == ""
    assert first_image(None) == ""


def test_format_artist():
    artist = format_artist({
        "id": "a1",
        "name": "Bon Iver",
        "images": [{"url": "https://i.scdn.co/image/boniver"}],
        "genres": ["indie folk", "chamber pop"],
        "external_urls": {"spotify": "https://open.spotify.com/artist/a1"},
    })

    assert artist.name == "Bon Iver"
    assert artist.genres == ["indie folk", "chamber pop"]
    assert artist.image == "https://i.scdn.co/image/boniver"
    assert artist.provider_id == "a1"


def test_format_artist_without_images_or_genres():
    artist = format_artist({"id": "a2", "name": "Unknown"})
    assert artist.image == ""
    assert artist.genres == []


def test_format_album():
    album = format_album({
        "id": "al1",
        "name": "Future Nostalgia",
        "artists": [{"name": "Dua Lipa"}],
        "images": [],
        "release_date": "2020-03-27",
        "total_tracks": 11,
        "external_urls": {"spotify": "https://open.spotify.com/album/al1"},
    })

    assert album.artist == "Dua Lipa"
    assert album.image == ""
    assert album.release_date == "2020-03-27"
    assert album.total_tracks == 11


def test_format_playlist():
    playlist = format_playlist(raw_playlist(playlist_id="p9", name="Deep Focus", total=45))

    assert playlist.name == "Deep Focus"
    assert playlist.tracks == 45
    assert playlist.owner == "Spotify"
    assert playlist.image == "https://i.scdn.co/image/p9"
    assert playlist.provider_url == "https://open.spotify.com/playlist/p9"


def test_format_playlist_with_null_description():
    payload = raw_playlist()
    payload["description"] = None
    assert format_playlist(payload).description == ""


@pytest.mark.parametrize("formatter", [format_track, format_artist, format_album, format_playlist])
def test_non_objects_are_malformed(formatter):
    with pytest.raises(ProviderMalformedResponse):
        formatter("not-an-object")


def test_format_items_skips_nulls_and_keeps_order():
    tracks = format_items([raw_track("1"), None, raw_track("2"), raw_track("3")], format_track)
    assert [t.id for t in tracks] == ["1", "2", "3"]


def test_format_items_rejects_bad_shapes():
    with pytest.raises(ProviderMalformedResponse):
        format_items({"items": []}, format_track)
    with pytest.raises(ProviderMalformedResponse):
        format_items([{"id": "x", "name": "y", "album": "not-an-object"}], format_track)


def test_paged_items():
    assert paged_items({"tracks": {"items": [1, 2]}}, "tracks") == [1, 2]
    with pytest.raises(ProviderMalformedResponse):
        paged_items({"artists": {"items": []}}, "tracks")
    with pytest.raises(ProviderMalformedResponse):
        paged_items({"tracks": {"total": 0}}, "tracks")
