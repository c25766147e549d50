from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

import httplib2
from google.auth.exceptions import RefreshError, TransportError
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import Flow
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from oauthlib.oauth2.rfc6749.errors import OAuth2Error
from requests.exceptions import RequestException

from gtm_setup.errors import FlowStateError, RemoteApiError, TokenExchangeError
from gtm_setup.models import ClientDescriptor, ContainerInfo, Token

logger = logging.getLogger(__name__)

# Container editing only: no publish, no user management.
SCOPES = ["https://www.googleapis.com/auth/tagmanager.edit.containers"]


class GoogleTagManagerApi:
    """Thin wrapper around google-auth-oauthlib and the Tag Manager v2 client.

    The OAuth ``Flow`` created by ``generate_auth_url()`` is kept so that
    ``exchange_code()`` reuses its redirect URI and PKCE verifier.
    """

    def __init__(self, scopes: Optional[list[str]] = None):
        self.scopes = list(scopes or SCOPES)
        self._flow: Optional[Flow] = None

    def generate_auth_url(self, descriptor: ClientDescriptor) -> str:
        self._flow = Flow.from_client_config(
            descriptor.to_client_config(),
            scopes=self.scopes,
            redirect_uri=descriptor.redirect_uri,
        )
        # offline access is what makes Google issue a refresh token
        auth_url, _state = self._flow.authorization_url(access_type="offline")
        logger.info("Generated authorization URL for client %s", descriptor.client_id)
        return auth_url

    def exchange_code(self, code: str) -> Token:
        if self._flow is None:
            raise FlowStateError("generate_auth_url() must be called before exchange_code()")

        try:
            response = self._flow.fetch_token(code=code)
        except OAuth2Error as exc:
            raise TokenExchangeError(exc.error, exc.description) from exc
        except RequestException as exc:
            raise TokenExchangeError("request_failed", str(exc)) from exc

        return token_from_response(response)

    def get_container(
        self, descriptor: ClientDescriptor, token: Token, path: str
    ) -> ContainerInfo:
        """Fetch ``accounts/{accountId}/containers/{containerId}``.

        The credentials carry the access token only, so an expired token
        surfaces as a 401 instead of being refreshed behind our back.
        """
        creds = Credentials(
            token=token.access_token,
            client_id=descriptor.client_id,
            client_secret=descriptor.client_secret,
            scopes=self.scopes,
        )
        service = build("tagmanager", "v2", credentials=creds, cache_discovery=False)

        try:
            container = service.accounts().containers().get(path=path).execute()
        except HttpError as exc:
            raise RemoteApiError(exc.resp.status, exc.reason) from exc
        except RefreshError as exc:
            # The transport retries a 401 by refreshing, which cannot succeed here.
            raise RemoteApiError(401, str(exc)) from exc
        except (httplib2.HttpLib2Error, TransportError, OSError) as exc:
            raise RemoteApiError(None, str(exc) or type(exc).__name__) from exc

        logger.info("Fetched container %s", path)
        return ContainerInfo(
            name=container.get("name", ""),
            public_id=container.get("publicId", ""),
            usage_context=list(container.get("usageContext", [])),
        )


def token_from_response(response: dict) -> Token:
    """Convert a token-endpoint response (as parsed by oauthlib) into a Token."""
    scope = response.get("scope") or ""
    if isinstance(scope, (list, tuple)):
        scope = " ".join(scope)

    expiry = None
    if response.get("expires_at"):
        expiry = datetime.fromtimestamp(float(response["expires_at"]), tz=timezone.utc)

    return Token(
        access_token=response["access_token"],
        refresh_token=response.get("refresh_token"),
        scope=scope,
        token_type=response.get("token_type") or "Bearer",
        expiry=expiry,
    )
