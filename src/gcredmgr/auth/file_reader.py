"""Read and classify JSON credential files."""

from __future__ import annotations

import json
from typing import Any, Mapping, Optional

from gcredmgr.errors import InvalidCredentialFileError

from .descriptor import CredentialDescriptor, CredentialKind

_TYPE_TO_KIND: dict[str, CredentialKind] = {
    "authorized_user": CredentialKind.AUTHORIZED_USER,
    "service_account": CredentialKind.SERVICE_ACCOUNT,
}


def read_credential_file(path: str) -> CredentialDescriptor:
    """
    Load path as JSON and classify it.

    Raises:
        InvalidCredentialFileError: if the file cannot be read, is not a JSON
            object, or is not a recognized credential format.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            fields = json.load(f)
    except (OSError, ValueError) as exc:
        raise InvalidCredentialFileError(
            "Failed to read credential file",
            details={"path": path},
            cause=exc,
        ) from exc

    return classify_credential_fields(fields, path=path)


def classify_credential_fields(
    fields: Any,
    *,
    path: Optional[str] = None,
) -> CredentialDescriptor:
    """
    Classify already-parsed credential JSON.

    A `type` field decides the kind; without one, an `installed` object marks
    a native application secrets file.
    """
    if not isinstance(fields, Mapping):
        raise InvalidCredentialFileError(
            "Credential file must contain a JSON object",
            details={"path": path},
        )

    cred_type = fields.get("type")
    if cred_type is not None:
        kind = _TYPE_TO_KIND.get(cred_type) if isinstance(cred_type, str) else None
        if kind is None:
            raise InvalidCredentialFileError(
                "Unrecognized credential type",
                details={"path": path, "type": cred_type},
            )
        return CredentialDescriptor(kind=kind, raw_fields=fields, path=path)

    if isinstance(fields.get("installed"), Mapping):
        return CredentialDescriptor(
            kind=CredentialKind.NATIVE_APP,
            raw_fields=fields,
            path=path,
        )

    raise InvalidCredentialFileError(
        "Credential file has neither a 'type' field nor an 'installed' section",
        details={"path": path},
    )
