from __future__ import annotations

import json
import pytest

from gtm_setup.credentials import load_client_descriptor, load_target_config
from gtm_setup.errors import (
    MalformedConfigError,
    MalformedCredentialError,
    MissingFileError,
)
from gtm_setup.models import GOOGLE_TOKEN_URI


def _write(path, data):
    path.write_text(json.dumps(data) if not isinstance(data, str) else data)
    return path


@pytest.fixture
def creds_path(tmp_path):
    return tmp_path / "gtm-credentials.json"


class TestLoadClientDescriptor:
    def test_installed_shape(self, creds_path):
        _write(creds_path, {
            "installed": {
                "client_id": "abc",
                "client_secret": "xyz",
                "redirect_uris": ["http://localhost", "urn:ietf:wg:oauth:2.0:oob"],
            }
        })
        descriptor = load_client_descriptor(creds_path)
        assert descriptor.client_id == "abc"
        assert descriptor.client_secret == "xyz"
        assert descriptor.redirect_uri == "http://localhost"
        assert descriptor.client_type == "installed"
        assert descriptor.token_uri == GOOGLE_TOKEN_URI

    def test_web_shape(self, creds_path):
        _write(creds_path, {
            "web": {
                "client_id": "web-id",
                "client_secret": "web-secret",
                "redirect_uris": ["https://example.com/callback"],
                "token_uri": "https://example.com/token",
            }
        })
        descriptor = load_client_descriptor(creds_path)
        assert descriptor.client_type == "web"
        assert descriptor.redirect_uri == "https://example.com/callback"
        assert descriptor.token_uri == "https://example.com/token"

    def test_installed_wins_over_web(self, creds_path):
        section = {"client_id": "x", "client_secret": "y", "redirect_uris": ["http://localhost"]}
        _write(creds_path, {"installed": section, "web": dict(section, client_id="w")})
        assert load_client_descriptor(creds_path).client_id == "x"

    def test_missing_file(self, creds_path):
        with pytest.raises(MissingFileError, match="gtm-credentials.json"):
            load_client_descriptor(creds_path)

    @pytest.mark.parametrize("content", [
        "not json",
        "[]",
        {"other": {}},
        {"installed": {"client_secret": "y", "redirect_uris": ["http://localhost"]}},
        {"installed": {"client_id": "x", "redirect_uris": ["http://localhost"]}},
        {"installed": {"client_id": "x", "client_secret": "y"}},
        {"installed": {"client_id": "x", "client_secret": "y", "redirect_uris": []}},
        {"web": {"client_id": "", "client_secret": "y", "redirect_uris": ["http://localhost"]}},
    ])
    def test_malformed(self, creds_path, content):
        _write(creds_path, content)
        with pytest.raises(MalformedCredentialError):
            load_client_descriptor(creds_path)

    def test_round_trips_to_client_config(self, creds_path):
        _write(creds_path, {
            "installed": {"client_id": "abc", "client_secret": "xyz", "redirect_uris": ["http://localhost"]}
        })
        config = load_client_descriptor(creds_path).to_client_config()
        assert config["installed"]["client_id"] == "abc"
        assert config["installed"]["redirect_uris"] == ["http://localhost"]
        assert "auth_uri" in config["installed"]


class TestLoadTargetConfig:
    def test_load(self, tmp_path):
        path = _write(tmp_path / "gtm-config.json", {
            "accountId": "6000000001",
            "containerId": "12345678",
            "containerPublicId": "GTM-ABC123",
        })
        config = load_target_config(path)
        assert config.account_id == "6000000001"
        assert config.container_public_id == "GTM-ABC123"
        assert config.container_path == "accounts/6000000001/containers/12345678"

    def test_numeric_ids_become_strings(self, tmp_path):
        path = _write(tmp_path / "gtm-config.json", {
            "accountId": 42, "containerId": 7, "containerPublicId": "GTM-X",
        })
        assert load_target_config(path).container_path == "accounts/42/containers/7"

    def test_missing_file(self, tmp_path):
        with pytest.raises(MissingFileError):
            load_target_config(tmp_path / "gtm-config.json")

    def test_missing_field(self, tmp_path):
        path = _write(tmp_path / "gtm-config.json", {"accountId": "1", "containerId": "2"})
        with pytest.raises(MalformedConfigError, match="containerPublicId"):
            load_target_config(path)

    def test_invalid_json(self, tmp_path):
        path = _write(tmp_path / "gtm-config.json", "{nope")
        with pytest.raises(MalformedConfigError):
            load_target_config(path)
