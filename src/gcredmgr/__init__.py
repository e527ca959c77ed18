"""gcredmgr public API."""

from __future__ import annotations

from gcredmgr.auth import (
    ApiKeyTokenSource,
    AuthMode,
    AuthOptions,
    AuthorizedUserTokenSource,
    AuthState,
    AuthStore,
    CredentialDescriptor,
    CredentialKind,
    CredentialResolver,
    MetadataTokenFetcher,
    MetadataTokenSource,
    NativeAppTokenSource,
    ServiceAccountTokenSource,
    TokenSource,
    read_credential_file,
)
from gcredmgr.config import ClientConfig
from gcredmgr.errors import (
    ApiError,
    AuthError,
    AuthTimeoutError,
    GCredMgrError,
    HttpErrorInfo,
    InvalidArgumentError,
    InvalidCredentialFileError,
    InvalidStateError,
    TokenRefreshError,
    TransportError,
    UnauthenticatedError,
    UserCancelledError,
    map_http_error,
)
from gcredmgr.manager import CredentialManager
from gcredmgr.models import AccessToken, CredentialBundle

__all__ = [
    # High-level
    "CredentialManager",
    "ClientConfig",
    # Auth
    "AuthOptions",
    "AuthMode",
    "AuthState",
    "AuthStore",
    "CredentialResolver",
    "CredentialDescriptor",
    "CredentialKind",
    "read_credential_file",
    "MetadataTokenFetcher",
    "TokenSource",
    "ServiceAccountTokenSource",
    "AuthorizedUserTokenSource",
    "NativeAppTokenSource",
    "MetadataTokenSource",
    "ApiKeyTokenSource",
    # Models
    "AccessToken",
    "CredentialBundle",
    # Errors
    "GCredMgrError",
    "InvalidArgumentError",
    "InvalidStateError",
    "InvalidCredentialFileError",
    "AuthError",
    "TokenRefreshError",
    "UnauthenticatedError",
    "UserCancelledError",
    "AuthTimeoutError",
    "TransportError",
    "ApiError",
    "HttpErrorInfo",
    "map_http_error",
]
