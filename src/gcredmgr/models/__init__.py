"""Public model exports for gcredmgr."""

from __future__ import annotations

from .tokens import AccessToken, CredentialBundle

__all__ = [
    "AccessToken",
    "CredentialBundle",
]
