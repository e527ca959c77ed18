"""CredentialManager: owns the auth state of one API client."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from gcredmgr.auth import AuthMode, AuthOptions, AuthStore, CredentialResolver
from gcredmgr.config import ClientConfig
from gcredmgr.errors import AuthError, TokenRefreshError
from gcredmgr.models import CredentialBundle

logger = logging.getLogger(__name__)


class CredentialManager:
    """
    High-level entry point for API callers.

    Each manager owns its own AuthStore; nothing is shared between managers.
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        *,
        store: Optional[AuthStore] = None,
        resolver: Optional[CredentialResolver] = None,
    ) -> None:
        self._config = config or ClientConfig()
        self._store = store or AuthStore()
        self._owns_resolver = resolver is None
        self._resolver = resolver or CredentialResolver(self._store, self._config)

    @classmethod
    def from_environment(
        cls,
        config: Optional[ClientConfig] = None,
        *,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "CredentialManager":
        """Create a manager and authenticate it with environment defaults."""
        obj = cls(config)
        obj.authenticate(environ=environ)
        return obj

    def close(self) -> None:
        """Release HTTP resources held by a resolver this manager created."""
        if self._owns_resolver:
            self._resolver.close()

    def __enter__(self) -> "CredentialManager":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def store(self) -> AuthStore:
        return self._store

    def authenticate(
        self,
        *,
        environ: Optional[Mapping[str, str]] = None,
        **overrides: Any,
    ) -> bool:
        """
        Resolve credentials, replacing whatever was configured before.

        Keyword overrides are AuthOptions fields (file, client_id,
        client_secret, api_key, gcloud_creds_path, try_platform_metadata,
        invoke_browser); the rest comes from the environment.

        Returns:
            True if a credential was configured, False otherwise.
        """
        options = AuthOptions.from_env(environ, **overrides)
        return self._resolver.resolve(options)

    def is_authenticated(self) -> bool:
        return self._store.is_authenticated()

    def get_bearer_token(self) -> Optional[str]:
        return self._store.get_bearer_token()

    def get_credential_bundle(self) -> CredentialBundle:
        return self._store.get_credential_bundle()

    def authorized_headers(self) -> dict[str, str]:
        """
        Return request headers carrying the bearer token (empty for API keys).

        Raises:
            TokenRefreshError: if token mode has no access token, e.g. after a
                suspended refresh.
        """
        if self._store.mode is AuthMode.API_KEY:
            return {}
        token = self._store.get_bearer_token()
        if not token:
            raise TokenRefreshError("No access token available; refresh is suspended")
        return {"Authorization": f"Bearer {token}"}

    def request_params(self) -> dict[str, str]:
        """Return query parameters carrying the API key (empty for tokens)."""
        bundle = self._store.get_credential_bundle()
        if bundle.api_key is None:
            return {}
        return {"key": bundle.api_key}

    def build_service(self, api_name: str, version: str, **kwargs: Any):
        """
        Build a discovery-based API service resource with the active credential.

        The token is captured at build time; rebuild after a refresh for
        long-lived services.

        Returns:
            googleapiclient.discovery.Resource
        """
        try:
            from google.oauth2.credentials import Credentials
            from googleapiclient.discovery import build
        except Exception as exc:  # pragma: no cover
            raise AuthError(
                "google-api-python-client is not available",
                details={"hint": "Install google-api-python-client"},
                cause=exc,
            ) from exc

        if self._store.mode is AuthMode.API_KEY:
            bundle = self._store.get_credential_bundle()
            auth_kwargs: dict[str, Any] = {"developerKey": bundle.api_key}
        else:
            token = self._store.get_bearer_token()
            auth_kwargs = {"credentials": Credentials(token=token)}

        try:
            return build(api_name, version, cache_discovery=False, **auth_kwargs, **kwargs)
        except Exception as exc:
            raise AuthError(
                "Failed to build API service",
                details={"api_name": api_name, "version": version},
                cause=exc,
            ) from exc
