"""Token sources: produce and refresh bearer access tokens."""

from __future__ import annotations

import json
import logging
import os
import webbrowser
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional, Sequence

import google.auth.exceptions
import google.auth.transport.requests
from google.oauth2 import credentials as user_credentials
from google.oauth2 import service_account

from gcredmgr.errors import (
    AuthError,
    AuthTimeoutError,
    InvalidArgumentError,
    InvalidCredentialFileError,
    TokenRefreshError,
    TransportError,
    UserCancelledError,
)
from gcredmgr.models import AccessToken
from gcredmgr.util.time import as_utc, expiry_from_ttl, ttl_from_expiry

from .descriptor import GOOGLE_TOKEN_URI, CredentialDescriptor, CredentialKind
from .metadata import MetadataTokenFetcher

logger = logging.getLogger(__name__)

GOOGLE_AUTH_URI = "https://accounts.google.com/o/oauth2/auth"

RequestFactory = Callable[[], Any]
FlowFactory = Callable[[dict[str, Any], list[str]], Any]


def default_request_factory() -> Any:
    """Return a google-auth HTTP transport backed by requests."""
    return google.auth.transport.requests.Request()


class TokenSource(ABC):
    """
    Produces a bearer access token and keeps it refreshable.

    access_token() never performs I/O; refresh() does the network exchange.
    """

    kind: str = "token"

    @abstractmethod
    def access_token(self) -> AccessToken:
        """Return the cached token (possibly empty)."""

    @abstractmethod
    def refresh(self) -> None:
        """Obtain a new access token and update the cache."""

    def refresh_token_json(self) -> Optional[str]:
        """Return the long-lived refresh credential as JSON, if the source has one."""
        return None


class _GoogleCredentialsSource(TokenSource):
    """Shared plumbing for sources backed by a google-auth Credentials object."""

    def __init__(self, request_factory: Optional[RequestFactory] = None) -> None:
        self._request_factory = request_factory or default_request_factory
        self._creds: Any = None
        self._ttl: Optional[float] = None

    @property
    def credentials(self) -> Any:
        """Underlying google-auth credentials (None before the first grant)."""
        return self._creds

    def access_token(self) -> AccessToken:
        if self._creds is None:
            return AccessToken()
        expiry = self._creds.expiry
        return AccessToken(
            token=self._creds.token,
            expiry=as_utc(expiry) if expiry is not None else None,
            ttl_seconds=self._ttl,
        )

    def refresh(self) -> None:
        _refresh_credentials(self._creds, self._request_factory(), source=self.kind)
        self._ttl = ttl_from_expiry(self._creds.expiry)


class ServiceAccountTokenSource(_GoogleCredentialsSource):
    """Signs a JWT with the service account private key and exchanges it."""

    kind = "service_account"

    def __init__(
        self,
        descriptor: CredentialDescriptor,
        scopes: Sequence[str],
        *,
        request_factory: Optional[RequestFactory] = None,
    ) -> None:
        if descriptor.kind is not CredentialKind.SERVICE_ACCOUNT:
            raise InvalidArgumentError(
                "ServiceAccountTokenSource requires a service account descriptor",
                details={"kind": descriptor.kind.value},
            )
        super().__init__(request_factory)
        try:
            self._creds = service_account.Credentials.from_service_account_info(
                descriptor.to_dict(),
                scopes=list(scopes),
            )
        except (ValueError, KeyError) as exc:
            raise InvalidCredentialFileError(
                "Invalid service account credentials",
                details={"path": descriptor.path},
                cause=exc,
            ) from exc


class AuthorizedUserTokenSource(_GoogleCredentialsSource):
    """
    Exchanges a stored refresh token for access tokens.

    Starts without an access token, so the first freshness check refreshes.
    """

    kind = "authorized_user"

    def __init__(
        self,
        descriptor: CredentialDescriptor,
        *,
        request_factory: Optional[RequestFactory] = None,
    ) -> None:
        if descriptor.kind is not CredentialKind.AUTHORIZED_USER:
            raise InvalidArgumentError(
                "AuthorizedUserTokenSource requires an authorized_user descriptor",
                details={"kind": descriptor.kind.value},
            )
        if not descriptor.refresh_token:
            raise InvalidCredentialFileError(
                "authorized_user credentials have no refresh_token",
                details={"path": descriptor.path},
            )
        super().__init__(request_factory)
        self._descriptor = descriptor
        self._creds = user_credentials.Credentials(
            token=None,
            refresh_token=descriptor.refresh_token,
            client_id=descriptor.client_id,
            client_secret=descriptor.client_secret,
            token_uri=descriptor.token_uri,
        )

    def refresh_token_json(self) -> Optional[str]:
        return json.dumps(self._descriptor.to_dict())


class NativeAppTokenSource(_GoogleCredentialsSource):
    """
    Installed-application OAuth client.

    The first refresh() needs a user grant: a cached token is reused when
    token_cache_path holds one for the same client, otherwise the
    authorization flow runs on a local redirect server. Later refreshes use
    the refresh token obtained by the grant.
    """

    kind = "native_app"

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        scopes: Sequence[str],
        *,
        invoke_browser: Optional[bool] = None,
        token_cache_path: Optional[str] = None,
        timeout_seconds: float = 300.0,
        flow_factory: Optional[FlowFactory] = None,
        request_factory: Optional[RequestFactory] = None,
    ) -> None:
        if not client_id or not client_secret:
            raise InvalidArgumentError("client_id and client_secret are required")
        if not scopes or not all(isinstance(s, str) and s.strip() for s in scopes):
            raise InvalidArgumentError("scopes must be a non-empty sequence of strings")
        super().__init__(request_factory)
        self._client_id = client_id
        self._client_secret = client_secret
        self._scopes = list(scopes)
        self._invoke_browser = invoke_browser
        self._token_cache_path = token_cache_path
        self._timeout_seconds = timeout_seconds
        self._flow_factory = flow_factory

    @property
    def client_id(self) -> str:
        return self._client_id

    def refresh(self) -> None:
        if self._creds is None:
            cached = self._load_cached_credentials()
            if cached is None:
                self._creds = self._run_authorization_flow()
                self._ttl = ttl_from_expiry(self._creds.expiry)
                self._save_credentials(self._creds)
                return
            self._creds = cached

        super().refresh()
        self._save_credentials(self._creds)

    def client_config(self) -> dict[str, Any]:
        return {
            "installed": {
                "client_id": self._client_id,
                "client_secret": self._client_secret,
                "auth_uri": GOOGLE_AUTH_URI,
                "token_uri": GOOGLE_TOKEN_URI,
                "redirect_uris": ["http://localhost"],
            }
        }

    def _run_authorization_flow(self) -> Any:
        flow_factory = self._flow_factory
        if flow_factory is None:
            try:
                from google_auth_oauthlib.flow import InstalledAppFlow
            except Exception as exc:  # pragma: no cover
                raise AuthError(
                    "Google OAuth flow library is not available",
                    details={"hint": "Install google-auth-oauthlib"},
                    cause=exc,
                ) from exc

            def flow_factory(config: dict[str, Any], scopes: list[str]) -> Any:
                return InstalledAppFlow.from_client_config(config, scopes=scopes)

        open_browser = self._invoke_browser
        if open_browser is None:
            open_browser = _browser_available()

        flow = flow_factory(self.client_config(), list(self._scopes))
        logger.info("Starting interactive authorization (browser=%s)", open_browser)
        try:
            creds = flow.run_local_server(
                port=0,
                open_browser=open_browser,
                timeout_seconds=int(self._timeout_seconds),
            )
        except KeyboardInterrupt as exc:
            raise UserCancelledError("Authorization was cancelled by the user", cause=exc) from exc
        except AttributeError as exc:
            # google-auth-oauthlib >= 1.0: on timeout the local server's
            # last_request_uri stays None and fetch_token fails on it.
            if not _is_missing_redirect(exc):
                raise AuthError("OAuth authorization flow failed", cause=exc) from exc
            raise AuthTimeoutError(
                "Authorization was not completed in time",
                details={"timeout_seconds": self._timeout_seconds},
                cause=exc,
            ) from exc
        except Exception as exc:
            if getattr(exc, "error", None) == "access_denied":
                raise UserCancelledError(
                    "Authorization was denied by the user", cause=exc
                ) from exc
            raise AuthError("OAuth authorization flow failed", cause=exc) from exc

        if creds is None or not creds.token:
            raise TokenRefreshError("Authorization flow returned no access token")
        return creds

    def _load_cached_credentials(self) -> Any:
        path = self._token_cache_path
        if not path or not os.path.exists(path):
            return None

        try:
            creds = user_credentials.Credentials.from_authorized_user_file(
                path,
                scopes=self._scopes,
            )
        except Exception as exc:
            raise AuthError(
                "Failed to load token cache",
                details={"token_cache_path": path},
                cause=exc,
            ) from exc

        if creds.client_id != self._client_id or not creds.refresh_token:
            logger.debug("Ignoring token cache for a different client: %s", path)
            return None
        return creds

    def _save_credentials(self, creds: Any) -> None:
        path = self._token_cache_path
        if not path:
            return
        # Cache write failures never fail a grant that already succeeded.
        try:
            cache_dir = os.path.dirname(path)
            if cache_dir:
                os.makedirs(cache_dir, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                f.write(creds.to_json())
        except OSError as exc:
            logger.warning("Failed to save token cache %s: %s", path, exc)


class MetadataTokenSource(TokenSource):
    """Re-queries the instance metadata server on every refresh."""

    kind = "metadata"

    def __init__(
        self,
        fetcher: MetadataTokenFetcher,
        scope: str,
        *,
        initial: Optional[dict[str, Any]] = None,
    ) -> None:
        self._fetcher = fetcher
        self._scope = scope
        self._token: AccessToken = AccessToken()
        if initial is not None:
            self._apply(initial)

    def access_token(self) -> AccessToken:
        return self._token

    def refresh(self) -> None:
        payload = self._fetcher.fetch(self._scope)
        if payload is None:
            raise TransportError(
                "Metadata server no longer provides a service account token",
                details={"scope": self._scope},
            )
        self._apply(payload)

    def _apply(self, payload: dict[str, Any]) -> None:
        ttl: Optional[float] = None
        if payload.get("expires_in") is not None:
            ttl = float(payload["expires_in"])
        self._token = AccessToken(
            token=payload.get("access_token"),
            expiry=expiry_from_ttl(ttl) if ttl is not None else None,
            ttl_seconds=ttl,
        )


class ApiKeyTokenSource(TokenSource):
    """Static public API key; there is nothing to refresh."""

    kind = "api_key"

    def __init__(self, api_key: str) -> None:
        if not isinstance(api_key, str) or not api_key.strip():
            raise InvalidArgumentError("api_key must be a non-empty string")
        self._api_key = api_key

    @property
    def api_key(self) -> str:
        return self._api_key

    def access_token(self) -> AccessToken:
        return AccessToken()

    def refresh(self) -> None:
        return None


def _refresh_credentials(creds: Any, request: Any, *, source: str) -> None:
    try:
        creds.refresh(request)
    except google.auth.exceptions.TransportError as exc:
        raise TransportError(
            "Token endpoint unreachable",
            details={"source": source},
            cause=exc,
        ) from exc
    except google.auth.exceptions.RefreshError as exc:
        raise TokenRefreshError(
            "Token endpoint rejected the refresh",
            details={"source": source},
            cause=exc,
        ) from exc


def _browser_available() -> bool:
    try:
        webbrowser.get()
    except webbrowser.Error:
        return False
    return True


def _is_missing_redirect(exc: AttributeError) -> bool:
    message = str(exc)
    return "last_request_uri" in message or "'NoneType'" in message
