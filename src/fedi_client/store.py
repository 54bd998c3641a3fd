"""Key-value persistence for caller-side state (tokens, saved servers).

Keys are namespaced strings, ``"<namespace>.<server>"``. ``JsonFileStore``
keeps everything in one JSON object on disk:
    {
        "token.mastodon.social": "abc...",
        "token.example.social": "def..."
    }
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Protocol

logger = logging.getLogger(__name__)

TOKEN_NAMESPACE = "token"


class KeyValueStore(Protocol):
    def get(self, key: str) -> Any | None: ...

    def put(self, key: str, value: Any) -> None: ...

    def list_keys_with_prefix(self, prefix: str) -> list[str]: ...


def store_key(namespace: str, server: str) -> str:
    return f"{namespace}.{server}"


class MemoryStore:
    def __init__(self, data: dict[str, Any] | None = None):
        self._data: dict[str, Any] = dict(data or {})

    def get(self, key: str) -> Any | None:
        return self._data.get(key)

    def put(self, key: str, value: Any) -> None:
        self._data[key] = value

    def list_keys_with_prefix(self, prefix: str) -> list[str]:
        return sorted(k for k in self._data if k.startswith(prefix))


class JsonFileStore(MemoryStore):
    """MemoryStore persisted to a JSON file after every ``put``."""

    def __init__(self, path: Path):
        self.path = path
        super().__init__()
        self._load()

    def _load(self) -> None:
        if self.path.exists():
            self._data = json.loads(self.path.read_text())
            logger.info("Loaded %d stored keys from %s", len(self._data), self.path)
        else:
            logger.info("No store at %s. Starting fresh.", self.path)

    def put(self, key: str, value: Any) -> None:
        super().put(key, value)
        self.save()

    def save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(self._data, indent=2, sort_keys=True))
        # Holds access tokens
        os.chmod(self.path, 0o600)


def save_token(store: KeyValueStore, server: str, token: str) -> None:
    store.put(store_key(TOKEN_NAMESPACE, server), token)


def load_token(store: KeyValueStore, server: str) -> str | None:
    return store.get(store_key(TOKEN_NAMESPACE, server))


def known_servers(store: KeyValueStore) -> list[str]:
    """Servers that have a stored token."""
    prefix = store_key(TOKEN_NAMESPACE, "")
    return [key[len(prefix):] for key in store.list_keys_with_prefix(prefix)]
