"""Inputs for credential resolution."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Any, Mapping, Optional

from gcredmgr.config import API_KEY_ENV_VAR
from gcredmgr.util.paths import default_gcloud_creds_path


@dataclass(slots=True, frozen=True)
class AuthOptions:
    """
    Explicit inputs to CredentialResolver.resolve.

    Fields:
        file: Client secrets file (native application or service account).
        client_id / client_secret: Native application client pair. Values
            found in `file` take precedence.
        api_key: Public API key for unauthenticated access to public data.
        gcloud_creds_path: Application default credentials file.
        try_platform_metadata: Query the instance metadata server first.
        invoke_browser: Open a browser for the interactive grant. None means
            "open one if a browser is available".
    """

    file: Optional[str] = None
    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    api_key: Optional[str] = None
    gcloud_creds_path: Optional[str] = None
    try_platform_metadata: bool = True
    invoke_browser: Optional[bool] = None

    def __post_init__(self) -> None:
        for key in ("file", "client_id", "client_secret", "api_key", "gcloud_creds_path"):
            value = getattr(self, key)
            if value is not None and not isinstance(value, str):
                raise TypeError(f"AuthOptions.{key} must be a string or None")

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        **overrides: Any,
    ) -> "AuthOptions":
        """
        Build options with environment defaults.

        api_key defaults to GOOGLE_API_KEY and gcloud_creds_path to
        default_gcloud_creds_path(); explicit overrides win.
        """
        env = os.environ if environ is None else environ
        base = cls(
            api_key=env.get(API_KEY_ENV_VAR) or None,
            gcloud_creds_path=(
                overrides["gcloud_creds_path"]
                if "gcloud_creds_path" in overrides
                else default_gcloud_creds_path(env)
            ),
        )
        return replace(base, **overrides)

    @property
    def has_client_pair(self) -> bool:
        return bool(self.client_id) and bool(self.client_secret)
