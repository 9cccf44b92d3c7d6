"""
Pydantic models for canonical records and API request validation.

Canonical records are frozen: the fallback catalog hands out shared instances.
"""

from typing import List, Optional

from pydantic import BaseModel, Field


# ==================== Canonical Records ====================

class Track(BaseModel):
    """Provider-agnostic track information"""
    id: str
    name: str
    artist: str = Field("", description="Artist names joined with ', '")
    album: str = ""
    duration: str = Field("0:00", description="Track length as M:SS")
    image: str = ""
    preview_url: Optional[str] = None
    provider_url: str = ""
    provider_id: Optional[str] = None

    class Config:
        frozen = True


class Artist(BaseModel):
    """Provider-agnostic artist information"""
    id: str
    name: str
    image: str = ""
    genres: List[str] = []
    provider_url: str = ""
    provider_id: Optional[str] = None

    class Config:
        frozen = True


class Album(BaseModel):
    """Provider-agnostic album information"""
    id: str
    name: str
    artist: str = ""
    image: str = ""
    release_date: str = ""
    total_tracks: int = 0
    provider_url: str = ""
    provider_id: Optional[str] = None

    class Config:
        frozen = True


class Playlist(BaseModel):
    """Provider-agnostic playlist information"""
    id: str
    name: str
    description: str = ""
    image: str = ""
    tracks: int = Field(0, description="Number of tracks in the playlist")
    owner: str = ""
    provider_url: str = ""
    provider_id: Optional[str] = None

    class Config:
        frozen = True


class SearchResults(BaseModel):
    """Search response; only the requested types are populated"""
    tracks: Optional[List[Track]] = None
    artists: Optional[List[Artist]] = None
    albums: Optional[List[Album]] = None


class MoodInfo(BaseModel):
    """Display metadata for a mood"""
    id: str
    name: str
    emoji: str = "🎵"
    color: str = "#808080"
    description: str = ""


# ==================== Requests ====================

class RecommendationRequest(BaseModel):
    """Request for mood-based recommendations"""
    mood: str = Field(..., min_length=1, max_length=50)
    limit: int = Field(20, ge=0, le=100)

    class Config:
        json_schema_extra = {
            "example": {"mood": "happy", "limit": 10}
        }
