from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from gtm_setup.errors import MalformedTokenError, MissingTokenError
from gtm_setup.models import Token

logger = logging.getLogger(__name__)


class TokenStore:
    """Reads and writes the OAuth token file.

    ``save()`` always overwrites; there is no merge with an earlier token.
    ``load()`` also understands the layout written by the Node googleapis
    client (``expiry_date`` in epoch milliseconds).
    """

    def __init__(self, token_path):
        self.token_path = Path(token_path)

    def exists(self) -> bool:
        return self.token_path.exists()

    def save(self, token: Token) -> Path:
        payload = {
            "access_token": token.access_token,
            "refresh_token": token.refresh_token,
            "scope": token.scope,
            "token_type": token.token_type,
            "expiry": token.expiry.isoformat() if token.expiry else None,
        }
        self.token_path.parent.mkdir(parents=True, exist_ok=True)
        self.token_path.write_text(json.dumps(payload, indent=2) + "\n")
        logger.info("Token saved to %s", self.token_path)
        return self.token_path

    def load(self) -> Token:
        if not self.token_path.exists():
            raise MissingTokenError(self.token_path, "Run gtm-authorize first.")

        try:
            data = json.loads(self.token_path.read_text())
        except ValueError as exc:
            raise MalformedTokenError(
                f"{self.token_path.name} is not valid JSON: {exc}"
            ) from exc
        if not isinstance(data, dict):
            raise MalformedTokenError(f"{self.token_path.name} must contain a JSON object")

        access_token = data.get("access_token")
        if not access_token or not isinstance(access_token, str):
            raise MalformedTokenError(f"{self.token_path.name} has no access_token")

        scope = data.get("scope") or ""
        if isinstance(scope, list):
            scope = " ".join(scope)

        return Token(
            access_token=access_token,
            refresh_token=data.get("refresh_token"),
            scope=scope,
            token_type=data.get("token_type") or "Bearer",
            expiry=self._parse_expiry(data),
        )

    def _parse_expiry(self, data: dict) -> Optional[datetime]:
        try:
            if data.get("expiry"):
                value = data["expiry"]
                # google-auth writes a trailing Z, which fromisoformat only accepts from 3.11
                if isinstance(value, str) and value.endswith("Z"):
                    value = value[:-1] + "+00:00"
                return datetime.fromisoformat(value)
            if data.get("expiry_date"):
                return datetime.fromtimestamp(
                    float(data["expiry_date"]) / 1000, tz=timezone.utc
                )
        except (TypeError, ValueError) as exc:
            raise MalformedTokenError(
                f"{self.token_path.name} has an unreadable expiry: {exc}"
            ) from exc
        return None
