from __future__ import annotations

from pathlib import Path
from typing import Optional


class GtmSetupError(Exception):
    """Base class for every failure that ends a gtm-setup invocation."""


class MissingFileError(GtmSetupError):
    def __init__(self, path, hint: str = ""):
        self.path = Path(path)
        self.hint = hint
        message = f"{self.path.name} not found at {self.path}"
        if hint:
            message = f"{message}. {hint}"
        super().__init__(message)


class MalformedCredentialError(GtmSetupError):
    pass


class MalformedConfigError(GtmSetupError):
    pass


class SettingsError(GtmSetupError):
    pass


class MissingAuthCodeError(GtmSetupError):
    pass


class InvalidUrlError(GtmSetupError):
    pass


class FlowStateError(GtmSetupError):
    pass


class TokenExchangeError(GtmSetupError):
    """The identity provider refused to exchange the authorization code.

    ``error`` and ``description`` carry the provider's payload, e.g.
    ``invalid_grant`` / ``Bad Request`` for an expired or reused code.
    """

    def __init__(self, error: str, description: Optional[str] = None):
        self.error = error
        self.description = description
        message = f"Token exchange failed: {error}"
        if description:
            message = f"{message} ({description})"
        super().__init__(message)


class MissingTokenError(MissingFileError):
    pass


class MalformedTokenError(GtmSetupError):
    pass


class RemoteApiError(GtmSetupError):
    def __init__(self, status: Optional[int], message: str):
        self.status = status
        self.message = message
        super().__init__(f"{status}: {message}" if status else message)
