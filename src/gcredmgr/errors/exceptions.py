"""Exception hierarchy and HTTP error mapping for gcredmgr."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


class GCredMgrError(Exception):
    """
    Base exception for gcredmgr.

    Attributes:
        details: Optional structured information (e.g., file path, HTTP status).
        cause: Optional original exception that triggered this error.
    """

    def __init__(
        self,
        message: str,
        *,
        details: Optional[dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.details = details or {}
        self.cause = cause


class InvalidArgumentError(GCredMgrError):
    """Raised when arguments are invalid."""


class InvalidStateError(GCredMgrError):
    """Raised when an object is used in a state that does not allow the call."""


class InvalidCredentialFileError(GCredMgrError):
    """Raised when a credential file is unreadable, malformed or unrecognized."""


class AuthError(GCredMgrError):
    """Raised when authentication or token refresh fails."""


class TokenRefreshError(AuthError):
    """Raised when a token source could not produce a new access token."""


class UnauthenticatedError(AuthError):
    """Raised when an authenticated operation is called with no credential."""


class UserCancelledError(AuthError):
    """Raised when the user abandons the interactive authorization grant."""


class AuthTimeoutError(AuthError):
    """Raised when the interactive authorization grant does not finish in time."""


class TransportError(GCredMgrError):
    """Raised when the metadata server or token endpoint cannot be reached."""


class ApiError(GCredMgrError):
    """Raised for unclassified HTTP errors."""


@dataclass(frozen=True)
class HttpErrorInfo:
    """Lightweight HTTP error information for mapping to gcredmgr exceptions."""

    status_code: int
    reason: str | None = None
    message: str | None = None
    details: dict[str, Any] | None = None


def map_http_error(
    info: HttpErrorInfo,
    *,
    cause: Optional[BaseException] = None,
) -> GCredMgrError:
    """
    Map an HTTP error from a metadata or token endpoint to a gcredmgr exception.

    Policy:
        - 400 -> InvalidArgumentError
        - 401/403 -> AuthError
        - 404 -> ApiError
        - 429 / 5xx -> TransportError
        - otherwise -> ApiError
    """
    details: dict[str, Any] = {
        "status_code": info.status_code,
        "reason": info.reason,
    }
    if info.details:
        details.update(info.details)

    message = info.message or f"HTTP error {info.status_code}"

    if info.status_code == 400:
        return InvalidArgumentError(message, details=details, cause=cause)
    if info.status_code in (401, 403):
        return AuthError(message, details=details, cause=cause)
    if info.status_code == 429 or 500 <= info.status_code <= 599:
        return TransportError(message, details=details, cause=cause)

    return ApiError(message, details=details, cause=cause)
