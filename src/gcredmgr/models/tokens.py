"""Token and credential material models."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional


@dataclass(slots=True, frozen=True)
class AccessToken:
    """
    Cached access token as reported by a TokenSource.

    Notes:
        - token is None until the first successful refresh.
        - ttl_seconds is the lifetime granted at the last refresh, not the
          remaining lifetime.
    """

    token: Optional[str] = None
    expiry: Optional[datetime] = None
    ttl_seconds: Optional[float] = None

    @property
    def is_empty(self) -> bool:
        return not self.token


@dataclass(slots=True, frozen=True)
class CredentialBundle:
    """Structured credential material for transports that cannot use a header."""

    api_key: Optional[str] = None
    json_refresh_token: Optional[str] = None
    access_token: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        # Keys are looked up by name on the RPC side; order does not matter.
        return {
            "api_key": self.api_key,
            "json_refresh_token": self.json_refresh_token,
            "access_token": self.access_token,
        }
