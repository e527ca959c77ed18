"""Credential resolution: pick exactly one authentication method."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from gcredmgr.config import ClientConfig
from gcredmgr.errors import GCredMgrError, InvalidCredentialFileError

from .descriptor import CredentialDescriptor, CredentialKind
from .file_reader import read_credential_file
from .metadata import MetadataTokenFetcher
from .options import AuthOptions
from .store import AuthStore
from .token_sources import (
    ApiKeyTokenSource,
    AuthorizedUserTokenSource,
    FlowFactory,
    MetadataTokenSource,
    NativeAppTokenSource,
    RequestFactory,
    ServiceAccountTokenSource,
    TokenSource,
)

logger = logging.getLogger(__name__)


class TierOutcome(str, Enum):
    MATCHED = "matched"
    NOT_APPLICABLE = "not_applicable"
    ERROR = "error"


@dataclass(slots=True, frozen=True)
class TierResult:
    """Outcome of evaluating one precedence tier."""

    outcome: TierOutcome
    source: Optional[TokenSource] = None
    error: Optional[GCredMgrError] = None

    @classmethod
    def matched(cls, source: TokenSource) -> "TierResult":
        return cls(TierOutcome.MATCHED, source=source)

    @classmethod
    def not_applicable(cls) -> "TierResult":
        return cls(TierOutcome.NOT_APPLICABLE)

    @classmethod
    def failed(cls, error: GCredMgrError) -> "TierResult":
        return cls(TierOutcome.ERROR, error=error)


TierEvaluator = Callable[[AuthOptions], TierResult]


class CredentialResolver:
    """
    Applies the fixed precedence order:

        1. instance metadata service account
        2. application default credentials file
        3. public API key
        4. explicit client secrets / service account file
        5. native application client id and secret

    The first tier that matches wins. A tier that errors aborts resolution;
    later tiers are never tried.
    """

    def __init__(
        self,
        store: AuthStore,
        config: ClientConfig,
        *,
        fetcher: Optional[MetadataTokenFetcher] = None,
        request_factory: Optional[RequestFactory] = None,
        flow_factory: Optional[FlowFactory] = None,
    ) -> None:
        self._store = store
        self._config = config
        self._owns_fetcher = fetcher is None
        self._fetcher = fetcher or MetadataTokenFetcher(timeout=config.metadata_timeout)
        self._request_factory = request_factory
        self._flow_factory = flow_factory

    def close(self) -> None:
        """Release the metadata HTTP session if this resolver created it."""
        if self._owns_fetcher:
            self._fetcher.close()

    @property
    def tiers(self) -> tuple[tuple[str, TierEvaluator], ...]:
        return (
            ("metadata", self.evaluate_metadata),
            ("application_default", self.evaluate_application_default),
            ("api_key", self.evaluate_api_key),
            ("explicit_file", self.evaluate_explicit_file),
            ("client_secret", self.evaluate_client_pair),
        )

    def resolve(self, options: AuthOptions) -> bool:
        """
        Configure the store from options.

        Returns:
            True if a credential was installed, False if no tier applied.

        Raises:
            GCredMgrError: the error of the first tier that failed. The store
                is left empty.
        """
        self._store.clear()

        for name, evaluate in self.tiers:
            result = evaluate(options)
            if result.outcome is TierOutcome.NOT_APPLICABLE:
                logger.debug("Tier %s not applicable", name)
                continue
            if result.outcome is TierOutcome.ERROR:
                logger.debug("Tier %s failed: %s", name, result.error)
                raise result.error

            self._store.install(result.source)
            logger.info("Configured %s credentials", result.source.kind)
            return True

        logger.info("No credentials configured")
        return False

    # ----------------------------
    # Tiers
    # ----------------------------
    def evaluate_metadata(self, options: AuthOptions) -> TierResult:
        if not options.try_platform_metadata:
            return TierResult.not_applicable()
        try:
            payload = self._fetcher.fetch(self._config.scope)
        except GCredMgrError as exc:
            return TierResult.failed(exc)
        if payload is None:
            return TierResult.not_applicable()
        return TierResult.matched(
            MetadataTokenSource(self._fetcher, self._config.scope, initial=payload)
        )

    def evaluate_application_default(self, options: AuthOptions) -> TierResult:
        path = options.gcloud_creds_path
        if not path or not os.path.isfile(path):
            return TierResult.not_applicable()
        try:
            descriptor = read_credential_file(path)
            if descriptor.kind is CredentialKind.AUTHORIZED_USER:
                return TierResult.matched(
                    AuthorizedUserTokenSource(
                        descriptor,
                        request_factory=self._request_factory,
                    )
                )
            if descriptor.kind is CredentialKind.SERVICE_ACCOUNT:
                return TierResult.matched(self._service_account_source(descriptor))
            raise InvalidCredentialFileError(
                "Invalid application default credentials file",
                details={"path": path, "kind": descriptor.kind.value},
            )
        except GCredMgrError as exc:
            return TierResult.failed(exc)

    def evaluate_api_key(self, options: AuthOptions) -> TierResult:
        if not options.api_key:
            return TierResult.not_applicable()
        if self._config.use_grpc:
            logger.warning("Removing gRPC as default because gRPC does not work with API keys.")
        self._config.use_grpc = False
        return TierResult.matched(ApiKeyTokenSource(options.api_key))

    def evaluate_explicit_file(self, options: AuthOptions) -> TierResult:
        if not options.file:
            return TierResult.not_applicable()
        try:
            descriptor = read_credential_file(options.file)
            if descriptor.kind is CredentialKind.SERVICE_ACCOUNT:
                return TierResult.matched(self._service_account_source(descriptor))

            client_id = descriptor.client_id or options.client_id
            client_secret = descriptor.client_secret or options.client_secret
            if not client_id or not client_secret:
                raise InvalidCredentialFileError(
                    "Client secrets file has no client_id/client_secret",
                    details={"path": options.file},
                )
            return TierResult.matched(
                self._native_app_source(client_id, client_secret, options)
            )
        except GCredMgrError as exc:
            return TierResult.failed(exc)

    def evaluate_client_pair(self, options: AuthOptions) -> TierResult:
        if not options.has_client_pair:
            return TierResult.not_applicable()
        try:
            return TierResult.matched(
                self._native_app_source(options.client_id, options.client_secret, options)
            )
        except GCredMgrError as exc:
            return TierResult.failed(exc)

    # ----------------------------
    # Helpers
    # ----------------------------
    def _service_account_source(
        self, descriptor: CredentialDescriptor
    ) -> ServiceAccountTokenSource:
        return ServiceAccountTokenSource(
            descriptor,
            [self._config.scope],
            request_factory=self._request_factory,
        )

    def _native_app_source(
        self,
        client_id: str,
        client_secret: str,
        options: AuthOptions,
    ) -> NativeAppTokenSource:
        return NativeAppTokenSource(
            client_id,
            client_secret,
            [self._config.scope],
            invoke_browser=options.invoke_browser,
            token_cache_path=self._config.resolved_auth_cache_path,
            timeout_seconds=self._config.interactive_timeout,
            flow_factory=self._flow_factory,
            request_factory=self._request_factory,
        )
