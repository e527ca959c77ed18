"""Typed view of a parsed credential file."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional

from gcredmgr.errors import InvalidStateError

GOOGLE_TOKEN_URI = "https://oauth2.googleapis.com/token"


class CredentialKind(str, Enum):
    """Kinds of credential file understood by the resolver."""

    AUTHORIZED_USER = "authorized_user"
    SERVICE_ACCOUNT = "service_account"
    NATIVE_APP = "native_app"


@dataclass(slots=True, frozen=True)
class CredentialDescriptor:
    """
    Classified credential file contents.

    raw_fields is stored as a read-only mapping; the descriptor never changes
    after classification.
    """

    kind: CredentialKind
    raw_fields: Mapping[str, Any]
    path: Optional[str] = None

    def __post_init__(self) -> None:
        if not isinstance(self.kind, CredentialKind):
            raise TypeError("CredentialDescriptor.kind must be a CredentialKind")
        object.__setattr__(self, "raw_fields", MappingProxyType(dict(self.raw_fields)))

    @property
    def client_id(self) -> Optional[str]:
        return self._client_field("client_id")

    @property
    def client_secret(self) -> Optional[str]:
        return self._client_field("client_secret")

    @property
    def refresh_token(self) -> Optional[str]:
        if self.kind is not CredentialKind.AUTHORIZED_USER:
            return None
        return self.raw_fields.get("refresh_token")

    @property
    def private_key(self) -> Optional[str]:
        if self.kind is not CredentialKind.SERVICE_ACCOUNT:
            return None
        return self.raw_fields.get("private_key")

    @property
    def client_email(self) -> Optional[str]:
        if self.kind is not CredentialKind.SERVICE_ACCOUNT:
            return None
        return self.raw_fields.get("client_email")

    @property
    def token_uri(self) -> str:
        if self.kind is CredentialKind.NATIVE_APP:
            installed = self.raw_fields.get("installed") or {}
            return installed.get("token_uri") or GOOGLE_TOKEN_URI
        return self.raw_fields.get("token_uri") or GOOGLE_TOKEN_URI

    def to_dict(self) -> dict[str, Any]:
        """Return a plain (mutable) copy of the original fields."""
        return dict(self.raw_fields)

    def _client_field(self, key: str) -> Optional[str]:
        if self.kind is CredentialKind.SERVICE_ACCOUNT:
            raise InvalidStateError(
                f"Service account credentials have no OAuth {key}",
                details={"path": self.path, "field": key},
            )
        if self.kind is CredentialKind.NATIVE_APP:
            installed = self.raw_fields.get("installed") or {}
            return installed.get(key)
        return self.raw_fields.get(key)
