"""Per-client authentication state and the token refresh policy."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Optional

from gcredmgr.errors import InvalidStateError, TokenRefreshError, UnauthenticatedError
from gcredmgr.models import CredentialBundle

from .token_sources import ApiKeyTokenSource, TokenSource

logger = logging.getLogger(__name__)

# Refresh once this fraction of the token lifetime has elapsed.
REFRESH_FRACTION = 0.8


class AuthMode(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    API_KEY = "api_key"
    TOKEN = "token"


@dataclass(slots=True)
class AuthState:
    """
    Mutable authentication state.

    Invariant: with mode != UNAUTHENTICATED exactly one of api_key and
    active_source is set; with UNAUTHENTICATED neither is.
    """

    mode: AuthMode = AuthMode.UNAUTHENTICATED
    api_key: Optional[str] = None
    active_source: Optional[TokenSource] = None
    last_refresh_unix_time: Optional[int] = None
    refresh_suspended: bool = False


class AuthStore:
    """
    Owns one AuthState and serializes every read and write of it.

    ensure_fresh() keeps the lock for the whole refresh so two callers can
    never race on the same token.
    """

    def __init__(self, *, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._lock = threading.RLock()
        self._state = AuthState()

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    def snapshot(self) -> AuthState:
        """Return a copy of the current state."""
        with self._lock:
            return replace(self._state)

    # ----------------------------
    # Mutation (resolver)
    # ----------------------------
    def clear(self) -> None:
        with self._lock:
            self._state = AuthState()

    def install(self, source: TokenSource) -> None:
        """Replace the state with a freshly configured source."""
        with self._lock:
            if isinstance(source, ApiKeyTokenSource):
                self._state = AuthState(mode=AuthMode.API_KEY, api_key=source.api_key)
            else:
                self._state = AuthState(mode=AuthMode.TOKEN, active_source=source)
        logger.debug("Installed %s credentials", source.kind)

    # ----------------------------
    # Queries
    # ----------------------------
    def is_authenticated(self) -> bool:
        with self._lock:
            return self._state.mode is not AuthMode.UNAUTHENTICATED

    @property
    def mode(self) -> AuthMode:
        with self._lock:
            return self._state.mode

    def ensure_fresh(self) -> None:
        """
        Refresh the active token if it is missing or near expiry.

        No-op for API keys, when unauthenticated, and after a failed refresh.
        A failure latches refresh_suspended and is re-raised; the stale token
        stays cached.

        Raises:
            TokenRefreshError / TransportError / AuthError: on refresh failure.
        """
        with self._lock:
            state = self._state
            source = state.active_source
            if state.mode is not AuthMode.TOKEN or source is None:
                return
            if state.refresh_suspended:
                return

            now = int(self._clock())
            if not self._needs_refresh(state, now):
                return

            logger.debug("Refreshing %s access token", source.kind)
            try:
                source.refresh()
            except Exception:
                state.refresh_suspended = True
                logger.warning("Token refresh failed; further refreshes are suspended")
                raise

            if source.access_token().is_empty:
                state.refresh_suspended = True
                logger.warning("Token refresh returned no access token; refreshes suspended")
                raise TokenRefreshError(
                    "Token refresh returned no access token",
                    details={"source": source.kind},
                )
            state.last_refresh_unix_time = now

    def get_bearer_token(self) -> Optional[str]:
        """
        Return a fresh bearer token.

        Returns None in API-key mode, which has no bearer token.

        Raises:
            UnauthenticatedError: if no credential is configured.
        """
        with self._lock:
            self._require_authenticated()
            self.ensure_fresh()
            if self._state.active_source is None:
                return None
            return self._state.active_source.access_token().token

    def get_credential_bundle(self) -> CredentialBundle:
        """
        Return structured credential material for RPC transports.

        Raises:
            UnauthenticatedError: if no credential is configured.
        """
        with self._lock:
            self._require_authenticated()
            self.ensure_fresh()
            state = self._state
            source = state.active_source
            if source is None:
                return CredentialBundle(api_key=state.api_key)
            return CredentialBundle(
                json_refresh_token=source.refresh_token_json(),
                access_token=source.access_token().token,
            )

    def _require_authenticated(self) -> None:
        if self._state.mode is AuthMode.UNAUTHENTICATED:
            raise UnauthenticatedError(
                "Not authenticated; call CredentialManager.authenticate() first"
            )
        if (self._state.api_key is None) == (self._state.active_source is None):
            raise InvalidStateError(
                "AuthState must hold exactly one of api_key and active_source",
                details={"mode": self._state.mode.value},
            )

    @staticmethod
    def _needs_refresh(state: AuthState, now: int) -> bool:
        token = state.active_source.access_token()
        if token.is_empty or state.last_refresh_unix_time is None:
            return True
        if token.ttl_seconds is None:
            return False
        return now >= state.last_refresh_unix_time + REFRESH_FRACTION * token.ttl_seconds
