"""Public auth exports for gcredmgr."""

from __future__ import annotations

from .descriptor import CredentialDescriptor, CredentialKind
from .file_reader import classify_credential_fields, read_credential_file
from .metadata import METADATA_URL_ROOT, MetadataTokenFetcher
from .options import AuthOptions
from .resolver import CredentialResolver, TierOutcome, TierResult
from .store import AuthMode, AuthState, AuthStore
from .token_sources import (
    ApiKeyTokenSource,
    AuthorizedUserTokenSource,
    MetadataTokenSource,
    NativeAppTokenSource,
    ServiceAccountTokenSource,
    TokenSource,
)

__all__ = [
    "CredentialDescriptor",
    "CredentialKind",
    "read_credential_file",
    "classify_credential_fields",
    "METADATA_URL_ROOT",
    "MetadataTokenFetcher",
    "AuthOptions",
    "CredentialResolver",
    "TierOutcome",
    "TierResult",
    "AuthMode",
    "AuthState",
    "AuthStore",
    "TokenSource",
    "ServiceAccountTokenSource",
    "AuthorizedUserTokenSource",
    "NativeAppTokenSource",
    "MetadataTokenSource",
    "ApiKeyTokenSource",
]
