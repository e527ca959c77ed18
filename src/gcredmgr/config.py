"""Client-wide configuration for gcredmgr."""

from __future__ import annotations

import importlib.util
import os
from dataclasses import dataclass, field
from typing import Optional

DEFAULT_ENDPOINT = "https://genomics.googleapis.com/v1"
API_SCOPE = "https://www.googleapis.com/auth/genomics"
CLOUD_PLATFORM_SCOPE = "https://www.googleapis.com/auth/cloud-platform"
API_KEY_ENV_VAR = "GOOGLE_API_KEY"
DEFAULT_AUTH_CACHE_PATH = os.path.join("~", ".gcredmgr", "token.json")


def is_grpc_available() -> bool:
    """Return True if the grpc runtime can be imported."""
    return importlib.util.find_spec("grpc") is not None


@dataclass(slots=True)
class ClientConfig:
    """
    Mutable client configuration.

    The resolver may rewrite use_grpc: API keys never work over gRPC, so
    selecting API-key authentication switches the client back to REST.

    Attributes:
        endpoint: Base URL of the REST API.
        scope: OAuth scope requested for every token.
        use_grpc: Whether transports should prefer gRPC over REST.
        auth_cache_path: Token cache for the interactive grant, or None to
            disable caching.
        metadata_timeout: Seconds to wait on each metadata server request.
        interactive_timeout: Seconds to wait for the user to finish the
            interactive grant.
    """

    endpoint: str = DEFAULT_ENDPOINT
    scope: str = API_SCOPE
    use_grpc: bool = field(default_factory=is_grpc_available)
    auth_cache_path: Optional[str] = DEFAULT_AUTH_CACHE_PATH
    metadata_timeout: float = 3.0
    interactive_timeout: float = 300.0

    def __post_init__(self) -> None:
        if not isinstance(self.scope, str) or not self.scope.strip():
            raise ValueError("ClientConfig.scope must be a non-empty string")
        if self.metadata_timeout <= 0 or self.interactive_timeout <= 0:
            raise ValueError("ClientConfig timeouts must be positive")

    @property
    def resolved_auth_cache_path(self) -> Optional[str]:
        if not self.auth_cache_path:
            return None
        return os.path.expanduser(self.auth_cache_path)
