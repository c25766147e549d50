from __future__ import annotations

import enum
import logging
from typing import Callable, Optional
from urllib.parse import parse_qs, urlsplit

from gtm_setup.errors import FlowStateError, InvalidUrlError, MissingAuthCodeError
from gtm_setup.google_api import GoogleTagManagerApi
from gtm_setup.models import ClientDescriptor, Token
from gtm_setup.token_store import TokenStore

logger = logging.getLogger(__name__)

REDIRECT_PROMPT = "Paste the redirect URL here: "


class FlowState(enum.Enum):
    START = "start"
    URL_GENERATED = "url_generated"
    CODE_RECEIVED = "code_received"
    TOKEN_OBTAINED = "token_obtained"


def extract_auth_code(redirect_url: str) -> str:
    """Pull the ``code`` query parameter out of a pasted redirect URL."""
    redirect_url = (redirect_url or "").strip()
    try:
        parts = urlsplit(redirect_url)
    except ValueError as exc:
        raise InvalidUrlError(f"Invalid URL format: {exc}") from exc
    if not parts.scheme or not parts.netloc:
        raise InvalidUrlError(f"Invalid URL format: {redirect_url!r}")

    params = parse_qs(parts.query)
    codes = params.get("code")
    if not codes:
        message = "No authorization code found in URL"
        if params.get("error"):
            message = f"{message} (provider returned error: {params['error'][0]})"
        raise MissingAuthCodeError(message)
    return codes[0]


class AuthorizationFlow:
    """One run of the authorization-code flow.

    ``START -> URL_GENERATED -> CODE_RECEIVED -> TOKEN_OBTAINED``.  Any
    failure leaves the flow where it stopped; a new run has to start over.
    """

    def __init__(
        self,
        descriptor: ClientDescriptor,
        token_store: TokenStore,
        api: Optional[GoogleTagManagerApi] = None,
        input_provider: Callable[[str], str] = input,
    ):
        self.descriptor = descriptor
        self.token_store = token_store
        self.api = api or GoogleTagManagerApi()
        self.input_provider = input_provider
        self.state = FlowState.START
        self.auth_url: Optional[str] = None
        self.code: Optional[str] = None
        self.token: Optional[Token] = None

    def _require(self, expected: FlowState):
        if self.state is not expected:
            raise FlowStateError(
                f"Authorization flow is in state {self.state.value}, "
                f"expected {expected.value}"
            )

    def generate_url(self) -> str:
        self._require(FlowState.START)
        self.auth_url = self.api.generate_auth_url(self.descriptor)
        self.state = FlowState.URL_GENERATED
        return self.auth_url

    def receive_redirect(self) -> str:
        self._require(FlowState.URL_GENERATED)
        redirect_url = self.input_provider(REDIRECT_PROMPT)
        self.code = extract_auth_code(redirect_url)
        self.state = FlowState.CODE_RECEIVED
        logger.debug("Authorization code received")
        return self.code

    def obtain_token(self) -> Token:
        self._require(FlowState.CODE_RECEIVED)
        self.token = self.api.exchange_code(self.code)
        self.state = FlowState.TOKEN_OBTAINED
        return self.token

    def run(self, show_url: Optional[Callable[[str], None]] = None) -> Token:
        """Drive the whole flow and persist the token.

        *show_url* is called with the authorization URL before the prompt so
        the caller can display it however it likes.
        """
        auth_url = self.generate_url()
        if show_url is not None:
            show_url(auth_url)
        self.receive_redirect()
        token = self.obtain_token()
        self.token_store.save(token)
        return token
