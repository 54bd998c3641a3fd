"""Authentication boundary.

Obtaining a token (the OAuth redirect dance) happens outside this package.
Anything with ``login(server) -> token`` can be plugged in; the CLI prompts for
a token the user created in their server's development settings.
"""

import logging
from typing import Protocol

from .builder import ServerInfo
from .store import KeyValueStore, load_token, save_token

logger = logging.getLogger(__name__)


class Login(Protocol):
    def login(self, server: str) -> str: ...


class StoredTokenLogin:
    """Reuse a stored token, falling back to ``login`` and remembering its result."""

    def __init__(self, store: KeyValueStore, login: Login):
        self._store = store
        self._login = login

    def login(self, server: str) -> str:
        token = load_token(self._store, server)
        if token:
            logger.debug("Using stored token for %s", server)
            return token

        logger.info("No stored token for %s, logging in", server)
        token = self._login.login(server)
        save_token(self._store, server, token)
        return token

    def server_info(self, server: str) -> ServerInfo:
        return ServerInfo(server=server, token=self.login(server))
