"""Errors reported by the client.

The client returns these inside a ``Failure`` together with the request that
caused them; nothing here is raised across the client boundary unless the
caller asks for it with ``Failure.raise_for_error()``.
"""

from typing import Any


class FediClientError(Exception):
    """Base class for every client-side error."""

    def __init__(self, message: str, server: str = ""):
        super().__init__(message)
        self.message = message
        self.server = server


class TransportError(FediClientError):
    """The HTTP exchange itself failed (DNS, connect, timeout, protocol)."""

    def __init__(self, message: str, server: str = "", cause: Exception | None = None):
        super().__init__(message, server)
        self.cause = cause


class HttpStatusError(FediClientError):
    """The server answered with a non-2xx status."""

    def __init__(
        self,
        status_code: int,
        body: str = "",
        server: str = "",
        error: Any = None,
    ):
        detail = getattr(error, "error", "") or body[:200]
        super().__init__(f"HTTP {status_code}: {detail}".rstrip(": "), server)
        self.status_code = status_code
        self.body = body
        # Decoded Error entity, when the body was one
        self.error = error


class DecodeError(FediClientError):
    """JSON could not be mapped onto the expected entity.

    ``path`` locates the failing value (``$.account.id``); ``value`` is the
    complete JSON the decode started from, so callers can still show it.
    """

    def __init__(self, path: str, message: str, value: Any = None, server: str = ""):
        super().__init__(f"{path}: {message}", server)
        self.path = path
        self.value = value


class AuthRequiredError(FediClientError):
    """The endpoint needs an access token and none was supplied."""
