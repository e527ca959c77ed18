"""Service account tokens from the compute instance metadata server."""

from __future__ import annotations

import logging
from typing import Any, Optional

import requests

from gcredmgr.config import CLOUD_PLATFORM_SCOPE
from gcredmgr.errors import HttpErrorInfo, TransportError, map_http_error

logger = logging.getLogger(__name__)

METADATA_URL_ROOT = "http://metadata/computeMetadata/v1/instance/service-accounts/"
METADATA_HEADERS = {"Metadata-Flavor": "Google"}


class MetadataTokenFetcher:
    """
    Query the metadata server for a suitably scoped service account token.

    Off-platform the server is simply absent; fetch() then returns None so the
    resolver can move on to the next tier.
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        *,
        timeout: float = 3.0,
        root: str = METADATA_URL_ROOT,
    ) -> None:
        self._owns_session = session is None
        self._session = session if session is not None else requests.Session()
        self._timeout = timeout
        self._root = root if root.endswith("/") else root + "/"

    def fetch(self, required_scope: str) -> Optional[dict[str, Any]]:
        """
        Return the token JSON of the first account holding required_scope
        or the cloud-platform scope.

        Returns:
            dict with at least access_token and expires_in, or None when the
            server is unreachable, answers non-200, or no account qualifies.

        Raises:
            TransportError / AuthError: if a qualifying account was found but
                its token could not be retrieved.
        """
        try:
            resp = self._get(self._root)
        except requests.RequestException as exc:
            logger.debug("Metadata server unreachable: %s", exc)
            return None
        if resp.status_code != 200:
            logger.debug("Metadata server answered HTTP %s", resp.status_code)
            return None

        wanted = {required_scope, CLOUD_PLATFORM_SCOPE}
        for account in _split_lines(resp.text):
            account_path = account if account.endswith("/") else account + "/"
            scopes = self._account_scopes(account_path)
            if scopes is None or wanted.isdisjoint(scopes):
                continue
            logger.debug("Metadata service account %s has a usable scope", account)
            return self._account_token(account_path)

        logger.info(
            "Metadata server reachable but no service account has scope %s", required_scope
        )
        return None

    def _account_scopes(self, account_path: str) -> Optional[set[str]]:
        try:
            resp = self._get(self._root + account_path + "scopes")
        except requests.RequestException as exc:
            logger.warning("Failed to query scopes of %s: %s", account_path, exc)
            return None
        if resp.status_code != 200:
            logger.warning(
                "Failed to query scopes of %s: HTTP %s", account_path, resp.status_code
            )
            return None
        return set(_split_lines(resp.text))

    def _account_token(self, account_path: str) -> dict[str, Any]:
        url = self._root + account_path + "token"
        try:
            resp = self._get(url)
        except requests.RequestException as exc:
            raise TransportError(
                "Failed to fetch metadata service account token",
                details={"url": url},
                cause=exc,
            ) from exc

        if resp.status_code != 200:
            raise map_http_error(
                HttpErrorInfo(
                    status_code=resp.status_code,
                    reason=resp.reason,
                    message="Metadata server refused the service account token",
                    details={"url": url},
                )
            )

        try:
            payload = resp.json()
        except ValueError as exc:
            raise TransportError(
                "Metadata server returned a malformed token",
                details={"url": url},
                cause=exc,
            ) from exc
        if not isinstance(payload, dict) or not payload.get("access_token"):
            raise TransportError(
                "Metadata server returned no access_token",
                details={"url": url},
            )
        return payload

    def close(self) -> None:
        """Close the HTTP session if this fetcher created it."""
        if self._owns_session:
            self._session.close()

    def __enter__(self) -> MetadataTokenFetcher:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _get(self, url: str) -> requests.Response:
        return self._session.get(url, headers=METADATA_HEADERS, timeout=self._timeout)


def _split_lines(text: str) -> list[str]:
    return [line.strip() for line in text.splitlines() if line.strip()]
