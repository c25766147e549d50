from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml

from gtm_setup.errors import SettingsError

logger = logging.getLogger(__name__)

SETTINGS_FILENAME = "gtm-setup.yaml"
DEFAULT_CREDENTIALS_FILE = "gtm-credentials.json"
DEFAULT_TOKEN_FILE = "gtm-token.json"
DEFAULT_CONFIG_FILE = "gtm-config.json"

KNOWN_KEYS = {"credentials_file", "token_file", "config_file", "log_level", "log_file"}
PATH_KEYS = {
    "credentials_file": "credentials_path",
    "token_file": "token_path",
    "config_file": "config_path",
    "log_file": "log_file",
}


@dataclass
class Settings:
    credentials_path: Path
    token_path: Path
    config_path: Path
    log_level: str = "WARNING"
    log_file: Optional[Path] = None

    @classmethod
    def for_directory(cls, base_dir) -> "Settings":
        base = Path(base_dir)
        return cls(
            credentials_path=base / DEFAULT_CREDENTIALS_FILE,
            token_path=base / DEFAULT_TOKEN_FILE,
            config_path=base / DEFAULT_CONFIG_FILE,
        )


def load_settings(base_dir=None) -> Settings:
    """Build settings for *base_dir* (default: the working directory).

    An optional ``gtm-setup.yaml`` in that directory may override file
    locations and logging.  Relative paths resolve against *base_dir*.
    """
    base = Path(base_dir) if base_dir else Path.cwd()
    settings = Settings.for_directory(base)

    settings_path = base / SETTINGS_FILENAME
    if not settings_path.exists():
        return settings

    try:
        with open(settings_path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise SettingsError(f"{SETTINGS_FILENAME} is not valid YAML: {exc}") from exc

    if data is None:
        return settings
    if not isinstance(data, dict):
        raise SettingsError(f"{SETTINGS_FILENAME} must contain a mapping")

    unknown = set(data) - KNOWN_KEYS
    if unknown:
        raise SettingsError(
            f"{SETTINGS_FILENAME} has unknown keys: {', '.join(sorted(unknown))}"
        )

    for key, attr in PATH_KEYS.items():
        if data.get(key) is not None:
            setattr(settings, attr, _resolve_path(base, key, data[key]))
    if data.get("log_level"):
        level = str(data["log_level"]).upper()
        if not isinstance(logging.getLevelName(level), int):
            raise SettingsError(f"{SETTINGS_FILENAME} has an unknown log_level: {level}")
        settings.log_level = level

    logger.debug("Loaded settings from %s", settings_path)
    return settings


def _resolve_path(base: Path, key: str, value) -> Path:
    if not isinstance(value, str) or not value:
        raise SettingsError(f"{SETTINGS_FILENAME}: '{key}' must be a file path")
    return base / Path(value).expanduser()
