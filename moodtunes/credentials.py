"""
Spotify App Credential Manager

Owns the client-credentials access token for the whole process:
1. One token exchange at startup (skipped entirely when unconfigured)
2. One renewal timer per token generation, firing `renewal_margin` seconds
   before expiry
3. Lock-free reads for the request path

The credential is an immutable snapshot replaced by a single assignment, so
readers always see a token and expiry from the same generation.
"""

import logging
import threading
import time
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple

from spotipy.cache_handler import MemoryCacheHandler
from spotipy.oauth2 import SpotifyClientCredentials

from .errors import ConfigurationMissing, CredentialUnavailable

logger = logging.getLogger(__name__)

TokenExchanger = Callable[[], Dict[str, Any]]
TimerFactory = Callable[[float, Callable[..., None], Tuple[Any, ...]], Any]


class CredentialState(str, Enum):
    PENDING = "pending"              # created, initialize() not called yet
    UNCONFIGURED = "unconfigured"    # no client id/secret, permanent fallback mode
    ACQUIRING = "acquiring"          # token exchange in flight
    VALID = "valid"
    EXPIRING = "expiring"            # inside the renewal window
    FAILED = "failed"                # exchange failed, permanent fallback mode


@dataclass(frozen=True)
class Credential:
    """One generation of the app credential"""
    configured: bool = False
    state: CredentialState = CredentialState.PENDING
    access_token: Optional[str] = None
    expires_at: Optional[float] = None
    generation: int = 0

    def is_usable(self, now: float) -> bool:
        return (
            self.configured
            and bool(self.access_token)
            and self.expires_at is not None
            and now < self.expires_at
        )


def spotify_token_exchanger(
    client_id: Optional[str],
    client_secret: Optional[str],
    timeout: Optional[float] = None,
) -> TokenExchanger:
    """
    Client-credentials grant via spotipy, always hitting the token endpoint.

    Raises:
        ConfigurationMissing: client id or secret is empty
    """
    if not (client_id and client_secret):
        raise ConfigurationMissing("Spotify client id and secret are not both set")

    auth_manager = SpotifyClientCredentials(
        client_id=client_id,
        client_secret=client_secret,
        requests_timeout=timeout,
        cache_handler=MemoryCacheHandler(),
    )

    def exchange() -> Dict[str, Any]:
        auth_manager.get_access_token(as_dict=False, check_cache=False)
        return auth_manager.cache_handler.get_cached_token()

    return exchange


def _daemon_timer(delay: float, function: Callable[..., None], args: Tuple[Any, ...]) -> threading.Timer:
    timer = threading.Timer(delay, function, args=args)
    timer.daemon = True
    return timer


class CredentialManager:
    """Keeps exactly one valid-or-absent Spotify app token fresh"""

    def __init__(
        self,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        token_exchanger: Optional[TokenExchanger] = None,
        renewal_margin: float = 60,
        timeout: Optional[float] = None,
        clock: Callable[[], float] = time.time,
        timer_factory: TimerFactory = _daemon_timer,
    ):
        configured = bool(client_id and client_secret)
        if token_exchanger is None:
            try:
                token_exchanger = spotify_token_exchanger(client_id, client_secret, timeout)
            except ConfigurationMissing as e:
                logger.debug(f"No token exchanger: {e}")

        self.renewal_margin = renewal_margin
        self._exchange = token_exchanger if configured else None
        self._clock = clock
        self._timer_factory = timer_factory

        self._snapshot = Credential(configured=configured)
        self._initialized = False
        self._shutdown = False
        self._timer = None

        self._init_lock = threading.Lock()
        self._exchange_lock = threading.Lock()
        self._timer_lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings, **kwargs) -> "CredentialManager":
        return cls(
            client_id=settings.spotipy_client_id,
            client_secret=settings.spotipy_client_secret,
            renewal_margin=settings.token_renewal_margin_seconds,
            timeout=settings.provider_timeout_seconds,
            **kwargs,
        )

    # ==================== Lifecycle ====================

    def initialize(self) -> bool:
        """
        Start the credential lifecycle. Safe to call more than once.

        Returns:
            True if a usable token is available afterwards
        """
        with self._init_lock:
            if self._initialized:
                logger.debug(f"Credential manager already initialized (state={self.state.value})")
                return self.is_usable()
            self._initialized = True

        if self._exchange is None:
            self._swap(Credential(configured=False, state=CredentialState.UNCONFIGURED))
            logger.info("ℹ️ Spotify credentials not configured - serving fallback catalog")
            return False

        return self.acquire()

    def acquire(self) -> bool:
        """
        Run one client-credentials exchange and schedule its renewal.

        Never raises: a failed exchange moves the manager to FAILED, which
        callers treat like UNCONFIGURED. There is no retry loop.

        Returns:
            True if a new token was stored
        """
        if self._exchange is None or self._shutdown or not self._snapshot.configured:
            return False

        if not self._exchange_lock.acquire(blocking=False):
            logger.debug("Token exchange already in flight")
            return False

        try:
            previous = self._snapshot
            # the previous token stays readable until it is replaced
            self._swap(replace(previous, state=CredentialState.ACQUIRING))

            issued_at = self._clock()
            try:
                token_info = self._exchange()
                access_token = token_info["access_token"]
                expires_in = float(token_info["expires_in"])
                if not access_token or expires_in <= 0:
                    raise ValueError(f"unusable token payload (expires_in={expires_in})")
            except Exception as e:
                self._fail(previous, e)
                return False

            snapshot = Credential(
                configured=True,
                state=CredentialState.VALID,
                access_token=access_token,
                expires_at=issued_at + expires_in,
                generation=previous.generation + 1,
            )
            self._swap(snapshot)
            self._schedule_renewal(snapshot.generation, expires_in)
            logger.info(
                f"✅ Spotify token acquired (generation {snapshot.generation}, "
                f"expires in {int(expires_in)}s)"
            )
            return True
        finally:
            self._exchange_lock.release()

    def shutdown(self):
        """Cancel the pending renewal; no renewal fires after this"""
        self._shutdown = True
        with self._timer_lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
        logger.info("🔌 Credential manager shut down")

    # ==================== Readers ====================

    def snapshot(self) -> Credential:
        return self._snapshot

    @property
    def state(self) -> CredentialState:
        snapshot = self._snapshot
        if (
            snapshot.state == CredentialState.VALID
            and snapshot.expires_at is not None
            and self._clock() >= snapshot.expires_at - self.renewal_margin
        ):
            return CredentialState.EXPIRING
        return snapshot.state

    def is_usable(self) -> bool:
        return self._snapshot.is_usable(self._clock())

    def current_token(self) -> str:
        """Usable access token, or CredentialUnavailable"""
        snapshot = self._snapshot
        if not snapshot.is_usable(self._clock()):
            raise CredentialUnavailable(f"No usable Spotify token (state={snapshot.state.value})")
        return snapshot.access_token

    # ==================== Internals ====================

    def _swap(self, snapshot: Credential):
        self._snapshot = snapshot

    def _fail(self, previous: Credential, error: Exception):
        with self._timer_lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
        self._swap(Credential(
            configured=False,
            state=CredentialState.FAILED,
            generation=previous.generation,
        ))
        logger.error(f"❌ Spotify token exchange failed, falling back to local catalog: {error}")

    def _schedule_renewal(self, generation: int, expires_in: float):
        delay = max(expires_in - self.renewal_margin, 0.0)
        with self._timer_lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            if self._shutdown:
                return
            self._timer = self._timer_factory(delay, self._renew, (generation,))
            self._timer.start()
        logger.debug(f"Renewal for generation {generation} scheduled in {delay:.0f}s")

    def _renew(self, generation: int):
        if self._shutdown or generation != self._snapshot.generation:
            logger.debug(f"Skipping stale renewal for generation {generation}")
            return
        logger.info(f"🔄 Renewing Spotify token (generation {generation})")
        self.acquire()
