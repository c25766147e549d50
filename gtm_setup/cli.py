from __future__ import annotations

import logging
import logging.handlers
import sys
from typing import Callable, Optional

from gtm_setup.authorize import AuthorizationFlow
from gtm_setup.credentials import load_client_descriptor
from gtm_setup.errors import GtmSetupError, RemoteApiError
from gtm_setup.google_api import GoogleTagManagerApi
from gtm_setup.settings import Settings, load_settings
from gtm_setup.token_store import TokenStore
from gtm_setup.verify import ConnectionVerifier, classify_remote_error

logger = logging.getLogger(__name__)


def setup_logging(settings: Settings):
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if settings.log_file:
        settings.log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            logging.handlers.RotatingFileHandler(
                settings.log_file,
                maxBytes=5_000_000,
                backupCount=3,
            )
        )
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=handlers,
    )


def _fail(message: str, hint: Optional[str] = None) -> int:
    print(f"✗ {message}", file=sys.stderr)
    if hint:
        print(f"→ {hint}", file=sys.stderr)
    return 1


def _show_auth_url(auth_url: str):
    print("\n=== GTM API Authorization ===\n")
    print("Open this URL in your browser to authorize:\n")
    print(auth_url)
    print("\nAfter authorization, copy the full redirect URL from your browser.\n")


def authorize_main(
    base_dir=None,
    input_provider: Callable[[str], str] = input,
    api: Optional[GoogleTagManagerApi] = None,
) -> int:
    """Run the interactive OAuth flow and save the token: ``gtm-authorize``."""
    try:
        settings = load_settings(base_dir)
        setup_logging(settings)
        descriptor = load_client_descriptor(settings.credentials_path)
        token_store = TokenStore(settings.token_path)
        flow = AuthorizationFlow(
            descriptor, token_store, api=api, input_provider=input_provider
        )
        flow.run(show_url=_show_auth_url)
    except (EOFError, KeyboardInterrupt):
        return _fail("Authorization cancelled")
    except GtmSetupError as exc:
        logger.debug("Authorization failed", exc_info=True)
        return _fail(str(exc))

    print(f"\n✓ Token saved to {token_store.token_path}")
    print("\n=== Authorization Complete ===\n")
    print("You can now use the GTM API.")
    print(f"\nIMPORTANT: Add {token_store.token_path.name} to .gitignore\n")
    return 0


def _show_target(config):
    print(f"Account ID: {config.account_id}")
    print(f"Container ID: {config.container_public_id}\n")


def verify_main(base_dir=None, api: Optional[GoogleTagManagerApi] = None) -> int:
    """Read the configured container once: ``gtm-test-connection``."""
    try:
        settings = load_settings(base_dir)
        setup_logging(settings)
    except GtmSetupError as exc:
        return _fail(str(exc))

    verifier = ConnectionVerifier(settings, api=api)
    print("\n=== Testing GTM API Connection ===\n")
    try:
        container = verifier.verify(show_target=_show_target)
    except RemoteApiError as exc:
        logger.debug("Container read failed", exc_info=True)
        diagnosis = classify_remote_error(exc, settings.config_path.name)
        print("✗ Connection failed\n", file=sys.stderr)
        return _fail(f"Error: {diagnosis.title}", diagnosis.guidance)
    except GtmSetupError as exc:
        return _fail(str(exc))

    print("✓ Connection successful!\n")
    print("Container details:")
    print(f"  Name: {container.name}")
    print(f"  Public ID: {container.public_id}")
    print(f"  Usage Context: {', '.join(container.usage_context)}\n")
    print("=== Setup Verified ===\n")
    print("Ready to use GTM API!\n")
    return 0
