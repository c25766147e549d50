from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

GOOGLE_AUTH_URI = "https://accounts.google.com/o/oauth2/auth"
GOOGLE_TOKEN_URI = "https://oauth2.googleapis.com/token"


@dataclass(frozen=True)
class ClientDescriptor:
    """OAuth client identity as downloaded from the Google Cloud Console."""

    client_id: str
    client_secret: str
    redirect_uri: str
    client_type: str = "installed"
    auth_uri: str = GOOGLE_AUTH_URI
    token_uri: str = GOOGLE_TOKEN_URI

    def to_client_config(self) -> dict:
        """Rebuild the client-secrets mapping expected by google-auth-oauthlib."""
        return {
            self.client_type: {
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "redirect_uris": [self.redirect_uri],
                "auth_uri": self.auth_uri,
                "token_uri": self.token_uri,
            }
        }


@dataclass(frozen=True)
class Token:
    access_token: str
    scope: str = ""
    token_type: str = "Bearer"
    refresh_token: Optional[str] = None
    expiry: Optional[datetime] = None

    def __post_init__(self):
        # Naive expiries are UTC, matching what google-auth produces.
        if self.expiry is not None and self.expiry.tzinfo is None:
            object.__setattr__(self, "expiry", self.expiry.replace(tzinfo=timezone.utc))


@dataclass(frozen=True)
class TargetResourceConfig:
    account_id: str
    container_id: str
    container_public_id: str

    @property
    def container_path(self) -> str:
        return f"accounts/{self.account_id}/containers/{self.container_id}"


@dataclass(frozen=True)
class ContainerInfo:
    name: str
    public_id: str
    usage_context: list[str] = field(default_factory=list)
