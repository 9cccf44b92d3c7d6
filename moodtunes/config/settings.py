from pathlib import Path
from typing import List, Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Moodtunes Settings"""

    # Spotify API - Client Credentials (both absent -> offline fallback mode)
    spotipy_client_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("spotipy_client_id", "spotify_client_id"),
    )
    spotipy_client_secret: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("spotipy_client_secret", "spotify_client_secret"),
    )

    # Provider behaviour
    provider_timeout_seconds: float = Field(default=5.0, gt=0)
    token_renewal_margin_seconds: int = Field(default=60, ge=0)
    market: Optional[str] = None  # ISO country code, e.g. "US"

    # Mood table
    default_mood: str = "chill"
    mood_parameters_file: Optional[Path] = None  # JSON overrides for the mood table

    # Server settings
    server_name: str = "moodtunes"
    server_version: str = "1.0.0"
    http_host: str = "0.0.0.0"
    http_port: int = 5000
    allowed_origins: List[str] = [
        "http://localhost:3000",   # React dev server
        "http://localhost:5173",   # Vite dev server
        "http://127.0.0.1:5173",
        "http://127.0.0.1:3000",
    ]
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"


settings = Settings()
