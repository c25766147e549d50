from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from gtm_setup.credentials import load_client_descriptor, load_target_config
from gtm_setup.errors import RemoteApiError
from gtm_setup.google_api import GoogleTagManagerApi
from gtm_setup.models import ContainerInfo, TargetResourceConfig
from gtm_setup.settings import Settings
from gtm_setup.token_store import TokenStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Diagnosis:
    title: str
    guidance: Optional[str] = None


def classify_remote_error(error: RemoteApiError, config_name: str = "gtm-config.json") -> Diagnosis:
    """Turn an API failure into operator guidance.  Never changes control flow."""
    if error.status == 401:
        return Diagnosis(
            "Unauthorized (401)",
            "Token may be expired. Run gtm-authorize again.",
        )
    if error.status == 403:
        return Diagnosis(
            "Forbidden (403)",
            "Check that the Tag Manager API is enabled in the Google Cloud Console.",
        )
    if error.status == 404:
        return Diagnosis(
            "Not Found (404)",
            f"Check the account ID and container ID in {config_name}.",
        )
    return Diagnosis(error.message)


class ConnectionVerifier:
    """Performs the single authenticated container read that proves setup works."""

    def __init__(self, settings: Settings, api: Optional[GoogleTagManagerApi] = None):
        self.settings = settings
        self.api = api or GoogleTagManagerApi()
        self.config: Optional[TargetResourceConfig] = None

    def verify(
        self, show_target: Optional[Callable[[TargetResourceConfig], None]] = None
    ) -> ContainerInfo:
        """Load the setup files and read the configured container once.

        *show_target* is called with the loaded config right before the
        request, so the caller can display what is being checked.
        """
        # Everything is loaded before the first network call.
        descriptor = load_client_descriptor(self.settings.credentials_path)
        token = TokenStore(self.settings.token_path).load()
        self.config = load_target_config(self.settings.config_path)

        if show_target is not None:
            show_target(self.config)
        logger.info("Verifying access to %s", self.config.container_path)
        return self.api.get_container(descriptor, token, self.config.container_path)
