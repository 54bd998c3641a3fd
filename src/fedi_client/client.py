"""HTTP clients that send requests and decode responses into entities.

``send`` never raises for API-level problems. It returns either a ``Response``
or a ``Failure``, and both carry the Request that produced them so callers can
tell which of their calls an outcome belongs to. Retrying is left to callers.

Two flavours share the same preparation and decoding logic:
    MastodonClient       httpx.Client, blocks until the exchange completes
    AsyncMastodonClient  httpx.AsyncClient, ``await client.send(...)``
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

from . import codec
from .builder import JsonBody, MultipartBody, RawRequest, ServerInfo, build, route_for
from .errors import (
    AuthRequiredError,
    DecodeError,
    FediClientError,
    HttpStatusError,
    TransportError,
)
from .models import Entity, Error
from .request import Request

logger = logging.getLogger(__name__)

USER_AGENT = "fedi-client/0.1"
DEFAULT_TIMEOUT = 30.0


@dataclass(frozen=True)
class Metadata:
    status_code: int
    headers: dict[str, str] = field(default_factory=dict)
    # rel -> URL from the Link header ("next", "prev")
    links: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class Response:
    request: Request
    raw_request: RawRequest
    metadata: Metadata
    entity: Entity

    ok = True


@dataclass(frozen=True)
class Failure:
    request: Request
    raw_request: RawRequest | None
    error: FediClientError
    metadata: Metadata | None = None

    ok = False

    def raise_for_error(self) -> None:
        raise self.error


Result = Response | Failure


def _httpx_kwargs(raw: RawRequest) -> dict[str, Any]:
    kwargs: dict[str, Any] = {"headers": raw.headers}
    if isinstance(raw.body, JsonBody):
        kwargs["content"] = raw.body.encode()
    elif isinstance(raw.body, MultipartBody):
        kwargs["data"] = raw.body.fields
        kwargs["files"] = {
            name: (upload.filename, upload.content, upload.content_type)
            for name, upload in raw.body.files.items()
        }
    return kwargs


def _metadata(response: httpx.Response) -> Metadata:
    links = {}
    for rel, link in response.links.items():
        url = link.get("url")
        if rel and url:
            links[rel] = url
    return Metadata(
        status_code=response.status_code,
        headers=dict(response.headers),
        links=links,
    )


def decode_body(request: Request, body: str) -> Entity:
    """Decode a response body as the entity ``request`` expects.

    Polymorphic endpoints list several candidate types; the first that decodes
    wins, and if none does the first candidate's error is raised.
    """
    try:
        value = json.loads(body) if body.strip() else {}
    except ValueError as e:
        raise DecodeError("$", f"invalid JSON: {e}", body) from e

    route = route_for(request)
    if not route.expects:
        raise TypeError(f"Route for {type(request).__name__} expects no entity")

    first_error: DecodeError | None = None
    for cls in route.expects:
        try:
            if route.many:
                return codec.decode_list(cls, value)
            return codec.decode(cls, value)
        except DecodeError as e:
            first_error = first_error or e
    raise first_error


def _http_error(response: httpx.Response, server: str) -> HttpStatusError:
    error = None
    try:
        error = codec.decode(Error, response.json())
    except (ValueError, DecodeError) as e:
        logger.debug("Error body is not an API error entity: %s", e)
    return HttpStatusError(response.status_code, response.text, server, error)


class _Correlator:
    """Request preparation and response decoding shared by both clients."""

    def _prepare(self, server_info: ServerInfo, request: Request) -> Result | RawRequest:
        raw = build(server_info, request)
        if route_for(request).auth and not server_info.token:
            logger.warning(
                "%s needs an access token for %s",
                type(request).__name__,
                server_info.server,
            )
            return Failure(
                request,
                raw,
                AuthRequiredError(
                    f"{type(request).__name__} requires an access token",
                    server_info.server,
                ),
            )
        logger.debug("%s %s", raw.method, raw.url)
        return raw

    def _transport_failure(
        self,
        server_info: ServerInfo,
        request: Request,
        raw: RawRequest,
        exc: httpx.HTTPError | httpx.InvalidURL,
    ) -> Failure:
        logger.warning("%s %s failed: %s", raw.method, raw.url, exc)
        return Failure(
            request,
            raw,
            TransportError(str(exc) or type(exc).__name__, server_info.server, exc),
        )

    def _correlate(
        self,
        server_info: ServerInfo,
        request: Request,
        raw: RawRequest,
        response: httpx.Response,
    ) -> Result:
        metadata = _metadata(response)

        if not response.is_success:
            error = _http_error(response, server_info.server)
            logger.warning("%s %s -> %s", raw.method, raw.url, error.message)
            return Failure(request, raw, error, metadata)

        try:
            entity = decode_body(request, response.text)
        except DecodeError as e:
            e.server = server_info.server
            logger.warning(
                "Could not decode %s response: %s", type(request).__name__, e.message
            )
            return Failure(request, raw, e, metadata)

        logger.debug("%s -> %s", type(request).__name__, type(entity).__name__)
        return Response(request, raw, metadata, entity)


class MastodonClient(_Correlator):
    """Blocking client, usable against any number of servers."""

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ):
        self._client = httpx.Client(
            headers={"User-Agent": USER_AGENT},
            timeout=timeout,
            follow_redirects=True,
            transport=transport,
        )

    def send(self, server_info: ServerInfo, request: Request) -> Result:
        prepared = self._prepare(server_info, request)
        if not isinstance(prepared, RawRequest):
            return prepared
        raw = prepared

        try:
            response = self._client.request(raw.method, raw.url, **_httpx_kwargs(raw))
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            return self._transport_failure(server_info, request, raw, e)

        return self._correlate(server_info, request, raw, response)

    def close(self) -> None:
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()


class AsyncMastodonClient(_Correlator):
    """asyncio client; the caller suspends at ``await send(...)``."""

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._client = httpx.AsyncClient(
            headers={"User-Agent": USER_AGENT},
            timeout=timeout,
            follow_redirects=True,
            transport=transport,
        )

    async def send(self, server_info: ServerInfo, request: Request) -> Result:
        prepared = self._prepare(server_info, request)
        if not isinstance(prepared, RawRequest):
            return prepared
        raw = prepared

        try:
            response = await self._client.request(
                raw.method, raw.url, **_httpx_kwargs(raw)
            )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            return self._transport_failure(server_info, request, raw, e)

        return self._correlate(server_info, request, raw, response)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        await self.aclose()
