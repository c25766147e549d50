from __future__ import annotations

import json
import logging
from pathlib import Path

from gtm_setup.errors import (
    MalformedConfigError,
    MalformedCredentialError,
    MissingFileError,
)
from gtm_setup.models import (
    GOOGLE_AUTH_URI,
    GOOGLE_TOKEN_URI,
    ClientDescriptor,
    TargetResourceConfig,
)

logger = logging.getLogger(__name__)

CLIENT_TYPES = ("installed", "web")
CONFIG_FIELDS = {
    "accountId": "account_id",
    "containerId": "container_id",
    "containerPublicId": "container_public_id",
}


def _read_json_object(path: Path, error_cls: type[Exception]) -> dict:
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except ValueError as exc:
        raise error_cls(f"{path.name} is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise error_cls(f"{path.name} must contain a JSON object")
    return data


def load_client_descriptor(path) -> ClientDescriptor:
    """Load the OAuth client descriptor from a client-secrets file.

    Both the ``installed`` (desktop) and ``web`` layouts are accepted; when a
    file somehow carries both, ``installed`` wins.  Only ``redirect_uris[0]``
    is used.
    """
    path = Path(path)
    if not path.exists():
        raise MissingFileError(
            path, "Download OAuth credentials from the Google Cloud Console first."
        )

    data = _read_json_object(path, MalformedCredentialError)
    client_type = next((t for t in CLIENT_TYPES if isinstance(data.get(t), dict)), None)
    if client_type is None:
        raise MalformedCredentialError(
            f"{path.name} has neither an 'installed' nor a 'web' section"
        )
    section = data[client_type]

    for field in ("client_id", "client_secret"):
        if not section.get(field):
            raise MalformedCredentialError(
                f"{path.name} is missing '{client_type}.{field}'"
            )

    redirect_uris = section.get("redirect_uris")
    if not isinstance(redirect_uris, list) or not redirect_uris or not redirect_uris[0]:
        raise MalformedCredentialError(
            f"{path.name} is missing '{client_type}.redirect_uris'"
        )

    logger.debug("Loaded %s OAuth client from %s", client_type, path)
    return ClientDescriptor(
        client_id=section["client_id"],
        client_secret=section["client_secret"],
        redirect_uri=redirect_uris[0],
        client_type=client_type,
        auth_uri=section.get("auth_uri") or GOOGLE_AUTH_URI,
        token_uri=section.get("token_uri") or GOOGLE_TOKEN_URI,
    )


def load_target_config(path) -> TargetResourceConfig:
    """Load the account/container identifiers from ``gtm-config.json``."""
    path = Path(path)
    if not path.exists():
        raise MissingFileError(path)

    data = _read_json_object(path, MalformedConfigError)
    values = {}
    for key, attr in CONFIG_FIELDS.items():
        value = data.get(key)
        if value is None or value == "":
            raise MalformedConfigError(f"{path.name} is missing '{key}'")
        # The GTM UI shows numeric ids, people paste them unquoted.
        values[attr] = str(value)

    return TargetResourceConfig(**values)
