"""Tests for the key-value stores and stored-token login."""

import json
import stat

import pytest

from fedi_client.auth import StoredTokenLogin
from fedi_client.store import (
    JsonFileStore,
    MemoryStore,
    known_servers,
    load_token,
    save_token,
    store_key,
)


@pytest.fixture
def store_path(tmp_path):
    return tmp_path / "state" / "store.json"


class FakeLogin:
    def __init__(self, token="fresh"):
        self.token = token
        self.calls = []

    def login(self, server):
        self.calls.append(server)
        return self.token


class TestStoreKey:
    def test_format(self):
        assert store_key("token", "mastodon.social") == "token.mastodon.social"


class TestMemoryStore:
    def test_starts_empty(self):
        assert MemoryStore().get("token.x") is None

    def test_put_and_get(self):
        store = MemoryStore()
        store.put("token.x", "abc")
        assert store.get("token.x") == "abc"

    def test_prefix_listing(self):
        store = MemoryStore({"token.b": 1, "token.a": 2, "other.a": 3})
        assert store.list_keys_with_prefix("token.") == ["token.a", "token.b"]

    def test_known_servers(self):
        store = MemoryStore()
        save_token(store, "b.example", "1")
        save_token(store, "a.example", "2")
        store.put("draft.a.example", "x")
        assert known_servers(store) == ["a.example", "b.example"]


class TestJsonFileStore:
    def test_save_and_reload(self, store_path):
        store = JsonFileStore(store_path)
        save_token(store, "example.social", "abc")

        reloaded = JsonFileStore(store_path)
        assert load_token(reloaded, "example.social") == "abc"

    def test_file_format(self, store_path):
        save_token(JsonFileStore(store_path), "example.social", "abc")

        data = json.loads(store_path.read_text())
        assert data == {"token.example.social": "abc"}

    def test_file_is_private(self, store_path):
        save_token(JsonFileStore(store_path), "example.social", "abc")
        assert stat.S_IMODE(store_path.stat().st_mode) == 0o600

    def test_missing_file_starts_empty(self, store_path):
        store = JsonFileStore(store_path)
        assert known_servers(store) == []
        assert not store_path.exists()


class TestStoredTokenLogin:
    def test_uses_stored_token(self):
        store = MemoryStore()
        save_token(store, "example.social", "stored")
        fallback = FakeLogin()

        assert StoredTokenLogin(store, fallback).login("example.social") == "stored"
        assert fallback.calls == []

    def test_logs_in_and_remembers(self):
        store = MemoryStore()
        fallback = FakeLogin("fresh")
        login = StoredTokenLogin(store, fallback)

        assert login.login("example.social") == "fresh"
        assert login.login("example.social") == "fresh"
        assert fallback.calls == ["example.social"]
        assert load_token(store, "example.social") == "fresh"

    def test_server_info(self):
        store = MemoryStore({"token.example.social": "T"})
        info = StoredTokenLogin(store, FakeLogin()).server_info("example.social")
        assert info.server == "example.social"
        assert info.token == "T"
