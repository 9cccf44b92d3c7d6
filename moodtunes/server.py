#!/usr/bin/env python3
"""
Moodtunes HTTP Server

Exposes the recommendation client over a FastAPI REST API. The credential
lifecycle is tied to the app lifespan: the token exchange runs at startup and
the renewal timer is cancelled at shutdown.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware

from .config.settings import settings
from .errors import InvalidQuery, SearchUnavailable
from .mood_mappings import mood_info
from .recommendation_client import RecommendationClient
from .schemas import RecommendationRequest

logger = logging.getLogger(__name__)

RECOMMENDATION_TYPES = ("tracks", "playlists")


def create_app(client: Optional[RecommendationClient] = None) -> FastAPI:
    """Build the HTTP app around a recommendation client"""
    client = client or RecommendationClient.from_settings(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        client.credentials.initialize()
        yield
        client.credentials.shutdown()

    app = FastAPI(
        title="Moodtunes",
        version=settings.server_version,
        description="Mood-based music recommendations backed by Spotify",
        lifespan=lifespan,
    )
    app.state.client = client

    # CORS - Allow frontend origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ---------- Health Check ----------

    @app.get("/")
    def health_check():
        """Health check endpoint"""
        return {
            "service": settings.server_name,
            "version": settings.server_version,
            "status": "healthy",
            "spotify": client.credentials.state.value,
            "live": client.live,
        }

    # ---------- Moods ----------

    @app.get("/moods")
    def list_moods():
        """List all supported moods with display info and recommendation parameters"""
        return {
            "moods": [
                {
                    **mood_info(mood).model_dump(),
                    "parameters": client.mood_map.parameters_for(mood).to_query(),
                }
                for mood in client.mood_map.moods()
            ],
            "default": client.mood_map.default_mood,
        }

    # ---------- Recommendations ----------

    @app.get("/recommendations")
    def get_recommendations(
        mood: str = Query(..., min_length=1),
        limit: int = Query(20, ge=0, le=100),
        type: str = "tracks",
    ):
        """Tracks or playlists for a mood; always answers, live or from the fallback catalog"""
        if type not in RECOMMENDATION_TYPES:
            raise HTTPException(status_code=400, detail='Type must be either "tracks" or "playlists"')

        if type == "tracks":
            recommendations = client.recommend_by_mood(mood, limit)
        else:
            recommendations = client.featured_playlists(limit)

        return {
            "mood": mood_info(mood),
            "type": type,
            "recommendations": recommendations,
            "total": len(recommendations),
        }

    @app.post("/recommendations")
    def post_recommendations(request: RecommendationRequest):
        tracks = client.recommend_by_mood(request.mood, request.limit)
        return {"tracks": tracks, "mood": request.mood, "count": len(tracks)}

    # ---------- Playlists & Tracks ----------

    @app.get("/playlists/featured")
    def featured_playlists(limit: int = Query(20, ge=0, le=50)):
        playlists = client.featured_playlists(limit)
        return {"playlists": playlists, "total": len(playlists)}

    @app.get("/playlists/{playlist_id}/tracks")
    def playlist_tracks(playlist_id: str, limit: int = Query(50, ge=0, le=100)):
        tracks = client.playlist_tracks(playlist_id, limit)
        return {"playlist_id": playlist_id, "tracks": tracks, "total": len(tracks)}

    @app.get("/tracks/popular")
    def popular_tracks(limit: int = Query(20, ge=0, le=100)):
        tracks = client.popular_tracks(limit)
        return {"tracks": tracks, "total": len(tracks)}

    @app.get("/genres")
    def get_genres():
        """Get available genre seeds"""
        genres = client.available_genres()
        return {"genres": genres, "count": len(genres)}

    # ---------- Search ----------

    @app.get("/search")
    def search(
        q: str = "",
        type: str = "track",
        limit: int = Query(20, ge=1, le=50),
    ):
        """Search tracks/artists/albums; 503 means 'try again', not 'no results'"""
        try:
            results = client.search(q, type, limit)
        except InvalidQuery as e:
            raise HTTPException(status_code=400, detail=str(e))
        except SearchUnavailable as e:
            raise HTTPException(status_code=503, detail=str(e))

        return {"query": q.strip(), **results.model_dump(exclude_none=True)}

    return app


# ==================== Server Startup ====================

def run_http_server():
    """Run the HTTP server with uvicorn"""
    logging.basicConfig(
        level=settings.log_level.upper(),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    logger.info(f"🎵 Starting {settings.server_name} v{settings.server_version}")
    logger.info(f"🌐 HTTP Server: http://{settings.http_host}:{settings.http_port}")

    uvicorn.run(
        create_app(),
        host=settings.http_host,
        port=settings.http_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run_http_server()
