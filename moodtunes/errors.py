"""
Error taxonomy for the provider integration.

Only SearchUnavailable and InvalidQuery ever reach callers of
RecommendationClient; everything else is absorbed into fallback mode.
"""

from typing import Optional


class MoodtunesError(Exception):
    """Base class for all moodtunes errors"""


# ==================== Configuration ====================

class ConfigurationMissing(MoodtunesError):
    """No Spotify client id/secret supplied (expected in offline deployments)"""


class ConfigurationError(MoodtunesError):
    """Operator-supplied configuration is present but invalid"""


# ==================== Credentials ====================

class CredentialUnavailable(MoodtunesError):
    """No usable access token right now"""


# ==================== Provider ====================

class ProviderError(MoodtunesError):
    """Spotify call failed (network error or anything not covered below)"""


class ProviderTimeout(ProviderError):
    """Spotify did not answer within the configured timeout"""


class ProviderHTTPError(ProviderError):
    """Spotify answered with a non-2xx status"""

    def __init__(self, status: Optional[int], message: str = ""):
        self.status = status
        super().__init__(f"HTTP {status}: {message}" if message else f"HTTP {status}")


class ProviderMalformedResponse(ProviderError):
    """Spotify answered 2xx but the payload is not what we expect"""


# ==================== Surfaced to callers ====================

class SearchUnavailable(MoodtunesError):
    """Search could not be served; the caller should offer a retry"""


class InvalidQuery(MoodtunesError, ValueError):
    """Search request is unusable as given (empty query, unknown type)"""


def status_of(error: BaseException) -> Optional[int]:
    """HTTP status carried by an error, if any (for log context)"""
    return getattr(error, "status", None)
