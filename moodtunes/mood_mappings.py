"""
Mood to Spotify Recommendation Parameters Mapping

Maps mood keys to the query parameters passed to Spotify's /recommendations API.
The table is product-tunable data: operators can override or extend it with a
JSON file (see Settings.mood_parameters_file) without touching code.

Audio Features:
- valence: Musical positivity (0.0 = sad/angry, 1.0 = happy/cheerful)
- energy: Intensity and activity (0.0 = calm, 1.0 = energetic)
- acousticness / instrumentalness / danceability: optional extra targets
- min_* / max_*: hard bounds applied by Spotify on top of the targets
- seed_genres: Genre seeds to guide recommendations (Spotify accepts up to 5 seeds)
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, Field, ValidationError

from .errors import ConfigurationError
from .schemas import MoodInfo

logger = logging.getLogger(__name__)

DEFAULT_MOOD = "chill"

_unit = dict(ge=0.0, le=1.0)


class MoodParameters(BaseModel):
    """Immutable recommendation parameters for one mood"""
    target_valence: float = Field(..., **_unit)
    target_energy: float = Field(..., **_unit)
    min_valence: Optional[float] = Field(None, **_unit)
    max_valence: Optional[float] = Field(None, **_unit)
    min_energy: Optional[float] = Field(None, **_unit)
    max_energy: Optional[float] = Field(None, **_unit)
    target_acousticness: Optional[float] = Field(None, **_unit)
    target_instrumentalness: Optional[float] = Field(None, **_unit)
    target_danceability: Optional[float] = Field(None, **_unit)
    seed_genres: Tuple[str, ...] = Field(..., min_length=1, max_length=5)

    class Config:
        frozen = True
        extra = "forbid"

    def to_query(self) -> Dict[str, Any]:
        """Keyword arguments for spotipy's recommendations() call"""
        query = self.model_dump(exclude_none=True)
        query["seed_genres"] = list(self.seed_genres)
        return query


# Mood key -> Spotify recommendation parameters
DEFAULT_MOOD_PARAMETERS: Dict[str, MoodParameters] = {
    "happy": MoodParameters(
        target_valence=0.8,
        target_energy=0.7,
        min_valence=0.6,
        seed_genres=("pop", "funk", "soul"),
    ),
    "sad": MoodParameters(
        target_valence=0.2,
        target_energy=0.3,
        max_valence=0.4,
        seed_genres=("indie", "alternative", "blues"),
    ),
    "chill": MoodParameters(
        target_valence=0.5,
        target_energy=0.3,
        target_acousticness=0.7,
        seed_genres=("chill", "ambient", "lo-fi"),
    ),
    "energetic": MoodParameters(
        target_valence=0.7,
        target_energy=0.9,
        min_energy=0.7,
        seed_genres=("electronic", "rock", "pop"),
    ),
    "focus": MoodParameters(
        target_valence=0.4,
        target_energy=0.4,
        target_instrumentalness=0.8,
        seed_genres=("ambient", "classical", "instrumental"),
    ),
    "party": MoodParameters(
        target_valence=0.9,
        target_energy=0.9,
        target_danceability=0.8,
        seed_genres=("dance", "electronic", "pop"),
    ),
    "sleep": MoodParameters(
        target_valence=0.3,
        target_energy=0.1,
        target_acousticness=0.9,
        seed_genres=("ambient", "sleep", "nature"),
    ),
}

# Display metadata shown next to recommendations
MOOD_INFO: Dict[str, MoodInfo] = {
    "happy": MoodInfo(
        id="happy", name="Happy", emoji="😊", color="#FFD700",
        description="Upbeat and cheerful music to enhance your positive mood",
    ),
    "sad": MoodInfo(
        id="sad", name="Sad", emoji="😢", color="#4169E1",
        description="Emotional and reflective tunes for when you're feeling down",
    ),
    "chill": MoodInfo(
        id="chill", name="Chill", emoji="😌", color="#98FB98",
        description="Relaxing and laid-back music to help you unwind",
    ),
    "energetic": MoodInfo(
        id="energetic", name="Energetic", emoji="💪", color="#FF6347",
        description="High-energy tracks to keep you motivated and moving",
    ),
    "focus": MoodInfo(
        id="focus", name="Focus", emoji="🧘", color="#DDA0DD",
        description="Concentration-enhancing music for work or study",
    ),
    "party": MoodInfo(
        id="party", name="Party", emoji="🎉", color="#FF1493",
        description="Dance and party hits to elevate any celebration",
    ),
    "sleep": MoodInfo(
        id="sleep", name="Sleep", emoji="😴", color="#191970",
        description="Calm and soothing sounds for better sleep",
    ),
}


def normalize_mood_key(mood: Optional[str]) -> str:
    """Lower-case, trimmed mood key ('' for None)"""
    return (mood or "").strip().lower()


def mood_info(mood: Optional[str]) -> MoodInfo:
    """Display metadata for a mood; unknown moods get a generic entry"""
    key = normalize_mood_key(mood)
    if key in MOOD_INFO:
        return MOOD_INFO[key]
    return MoodInfo(id=key, name=key.capitalize())


class MoodParameterMap:
    """
    Deterministic mood -> parameter lookup.

    parameters_for() never fails: unknown, empty or missing keys resolve to
    the default mood's parameters.
    """

    def __init__(
        self,
        table: Optional[Mapping[str, MoodParameters]] = None,
        default_mood: str = DEFAULT_MOOD,
    ):
        source = DEFAULT_MOOD_PARAMETERS if table is None else table
        self._table: Dict[str, MoodParameters] = {
            normalize_mood_key(key): params for key, params in source.items()
        }
        self.default_mood = normalize_mood_key(default_mood)
        if self.default_mood not in self._table:
            raise ConfigurationError(
                f"Default mood '{default_mood}' is not in the mood table"
            )

    @classmethod
    def from_file(
        cls,
        path: Union[str, Path],
        default_mood: str = DEFAULT_MOOD,
    ) -> "MoodParameterMap":
        """
        Build a map from a JSON override file layered on top of the defaults.

        The file holds an object of {mood: {parameter: value}}; each entry
        replaces (or adds) the whole parameter set for that mood.

        Raises:
            ConfigurationError: file unreadable, not JSON, or invalid values
        """
        path = Path(path)
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Cannot read mood parameters from {path}: {e}") from e

        if not isinstance(raw, dict):
            raise ConfigurationError(f"{path} must contain a JSON object keyed by mood")

        table = dict(DEFAULT_MOOD_PARAMETERS)
        for mood, values in raw.items():
            try:
                table[normalize_mood_key(mood)] = MoodParameters.model_validate(values)
            except ValidationError as e:
                raise ConfigurationError(f"Invalid parameters for mood '{mood}' in {path}: {e}") from e

        logger.info(f"✅ Loaded {len(raw)} mood parameter override(s) from {path}")
        return cls(table, default_mood=default_mood)

    @classmethod
    def from_settings(cls, settings) -> "MoodParameterMap":
        if settings.mood_parameters_file:
            return cls.from_file(settings.mood_parameters_file, default_mood=settings.default_mood)
        return cls(default_mood=settings.default_mood)

    def resolve(self, mood: Optional[str]) -> str:
        """Mood key actually used for a lookup (the default for unknown keys)"""
        key = normalize_mood_key(mood)
        return key if key in self._table else self.default_mood

    def parameters_for(self, mood: Optional[str]) -> MoodParameters:
        return self._table[self.resolve(mood)]

    def is_supported(self, mood: Optional[str]) -> bool:
        return normalize_mood_key(mood) in self._table

    def moods(self) -> List[str]:
        """Supported mood keys in table order"""
        return list(self._table)


default_mood_map = MoodParameterMap()


def get_audio_features_for_mood(mood: str) -> Dict[str, Any]:
    """
    Get Spotify recommendation parameters for a given mood.

    Args:
        mood: Mood key (happy, sad, chill, energetic, focus, party, sleep)

    Returns:
        Dict with target_valence, target_energy, seed_genres and any optional bounds
    """
    return default_mood_map.parameters_for(mood).to_query()
