"""Public error exports for gcredmgr."""

from __future__ import annotations

from .exceptions import (
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

__all__ = [
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
