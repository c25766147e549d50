from __future__ import annotations

import json
import pytest
from datetime import datetime, timezone

from gtm_setup.errors import MalformedTokenError, MissingFileError, MissingTokenError
from gtm_setup.models import Token
from gtm_setup.token_store import TokenStore


@pytest.fixture
def store(tmp_path):
    return TokenStore(tmp_path / "gtm-token.json")


class TestTokenStore:
    def test_save_then_load_returns_equal_token(self, store):
        token = Token(
            access_token="ya29.access",
            refresh_token="1//refresh",
            scope="https://www.googleapis.com/auth/tagmanager.edit.containers",
            token_type="Bearer",
            expiry=datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc),
        )
        store.save(token)
        assert store.load() == token

    def test_naive_expiry_round_trips(self, store):
        token = Token(access_token="a", expiry=datetime(2026, 1, 1, 12))
        assert token.expiry.tzinfo is timezone.utc
        store.save(token)
        assert store.load() == token

    def test_load_google_auth_zulu_expiry(self, store):
        store.token_path.write_text(json.dumps({"access_token": "x", "expiry": "2026-01-01T12:00:00.250000Z"}))
        assert store.load().expiry == datetime(2026, 1, 1, 12, 0, 0, 250000, tzinfo=timezone.utc)

    def test_save_without_optional_fields(self, store):
        token = Token(access_token="ya29.only", scope="s")
        store.save(token)
        assert store.load() == token

    def test_save_overwrites(self, store):
        store.save(Token(access_token="first", refresh_token="r1"))
        store.save(Token(access_token="second"))
        loaded = store.load()
        assert loaded.access_token == "second"
        assert loaded.refresh_token is None

    def test_save_creates_parent_dirs(self, tmp_path):
        store = TokenStore(tmp_path / "nested" / "deep" / "gtm-token.json")
        store.save(Token(access_token="x"))
        assert store.exists()

    def test_saved_file_is_pretty_json(self, store):
        store.save(Token(access_token="x"))
        text = store.token_path.read_text()
        assert '\n  "access_token": "x"' in text

    def test_load_missing(self, store):
        assert not store.exists()
        with pytest.raises(MissingTokenError) as exc_info:
            store.load()
        assert isinstance(exc_info.value, MissingFileError)

    @pytest.mark.parametrize("content", [
        "not json",
        "[1, 2]",
        '{"refresh_token": "r"}',
        '{"access_token": ""}',
        '{"access_token": "x", "expiry": "yesterday"}',
    ])
    def test_load_malformed(self, store, content):
        store.token_path.write_text(content)
        with pytest.raises(MalformedTokenError):
            store.load()

    def test_load_node_googleapis_layout(self, store):
        store.token_path.write_text(json.dumps({
            "access_token": "ya29.node",
            "refresh_token": "1//node",
            "scope": "https://www.googleapis.com/auth/tagmanager.edit.containers",
            "token_type": "Bearer",
            "expiry_date": 1767225600000,
        }))
        token = store.load()
        assert token.access_token == "ya29.node"
        assert token.expiry == datetime(2026, 1, 1, tzinfo=timezone.utc)

    def test_load_scope_list_is_joined(self, store):
        store.token_path.write_text(json.dumps({"access_token": "x", "scope": ["a", "b"]}))
        assert store.load().scope == "a b"

    def test_naive_expiry_is_treated_as_utc(self, store):
        store.token_path.write_text(json.dumps({"access_token": "x", "expiry": "2026-05-01T10:00:00"}))
        assert store.load().expiry == datetime(2026, 5, 1, 10, tzinfo=timezone.utc)
