"""Resolve a Request into a transport-ready RawRequest.

``ROUTES`` maps every request class to its HTTP method, path template, the
attributes sent as query or body parameters, whether a token is required, and
the entity type the response decodes to. ``build`` is a pure function of its
inputs: no clock, no randomness, no IO.
"""

import json
import re
from dataclasses import asdict, dataclass, field, is_dataclass
from enum import Enum
from typing import Any
from urllib.parse import quote

import httpx

from .models import (
    Account,
    Card,
    Context,
    Conversation,
    Emoji,
    Empty,
    Entity,
    Filter,
    Group,
    Instance,
    ListEntity,
    Notification,
    Poll,
    Relationship,
    Results,
    ScheduledStatus,
    Status,
    Tag,
)
from .request import (
    DeleteGroupJoin,
    DeleteStatus,
    GetAccount,
    GetConversations,
    GetCustomEmojis,
    GetFavouritedBy,
    GetFilter,
    GetFilters,
    GetFollowers,
    GetFollowing,
    GetGroup,
    GetGroupAccounts,
    GetGroups,
    GetGroupTimeline,
    GetHomeTimeline,
    GetInstance,
    GetList,
    GetListAccounts,
    GetLists,
    GetListTimeline,
    GetNotification,
    GetNotifications,
    GetPoll,
    GetPublicTimeline,
    GetRebloggedBy,
    GetRelationships,
    GetScheduledStatuses,
    GetSearch,
    GetSearchAccounts,
    GetStatus,
    GetStatusCard,
    GetStatusContext,
    GetStatuses,
    GetTagTimeline,
    GetTrends,
    GetVerifyCredentials,
    PatchUpdateCredentials,
    PostBlock,
    PostClearNotifications,
    PostDismissNotification,
    PostFavourite,
    PostFilter,
    PostFollow,
    PostGroupJoin,
    PostMute,
    PostPin,
    PostPollVote,
    PostReblog,
    PostStatus,
    PostUnblock,
    PostUnfavourite,
    PostUnfollow,
    PostUnmute,
    PostUnpin,
    PostUnreblog,
    Request,
    UploadFile,
    effective_paging,
)

PATH_PARAM = re.compile(r"{(\w+)}")
PAGING_KEYS = ("max_id", "since_id", "min_id", "limit")


@dataclass(frozen=True)
class ServerInfo:
    """Which server a request goes to, and as whom."""

    server: str
    token: str | None = None

    @property
    def base_url(self) -> str:
        server = self.server.rstrip("/")
        if server.startswith(("https://", "http://")):
            return server
        return f"https://{server}"


@dataclass(frozen=True)
class JsonBody:
    data: dict[str, Any]

    def encode(self) -> bytes:
        return json.dumps(self.data).encode("utf-8")


@dataclass(frozen=True)
class MultipartBody:
    fields: dict[str, str] = field(default_factory=dict)
    files: dict[str, UploadFile] = field(default_factory=dict)


@dataclass(frozen=True)
class RawRequest:
    method: str
    url: str
    headers: dict[str, str]
    body: JsonBody | MultipartBody | None = None


def _params(*names: str, **renamed: str) -> tuple[tuple[str, str], ...]:
    """(attribute, wire key) pairs; keyword form renames the wire key."""
    return tuple((name, name) for name in names) + tuple(renamed.items())


@dataclass(frozen=True)
class Route:
    method: str
    path: str
    expects: tuple[type[Entity], ...]
    many: bool = False
    query: tuple[tuple[str, str], ...] = ()
    body: tuple[tuple[str, str], ...] = ()
    paged: bool = False
    multipart: bool = False
    auth: bool = True


def _get(path, *expects, many=False, query=(), paged=False, auth=True) -> Route:
    return Route("GET", path, expects, many=many, query=query, paged=paged, auth=auth)


def _post(path, *expects, body=(), method="POST") -> Route:
    return Route(method, path, expects, body=body)


ROUTES: dict[type[Request], Route] = {
    # Accounts
    GetVerifyCredentials: _get("/api/v1/accounts/verify_credentials", Account),
    PatchUpdateCredentials: Route(
        "PATCH", "/api/v1/accounts/update_credentials", (Account,), multipart=True
    ),
    GetAccount: _get("/api/v1/accounts/{id}", Account, auth=False),
    GetFollowers: _get(
        "/api/v1/accounts/{id}/followers", Account, many=True, paged=True, auth=False
    ),
    GetFollowing: _get(
        "/api/v1/accounts/{id}/following", Account, many=True, paged=True, auth=False
    ),
    GetStatuses: _get(
        "/api/v1/accounts/{id}/statuses",
        Status,
        many=True,
        query=_params("only_media", "pinned", "exclude_replies", "exclude_reblogs"),
        paged=True,
        auth=False,
    ),
    PostFollow: _post("/api/v1/accounts/{id}/follow", Relationship, body=_params(reblogs="reblog")),
    PostUnfollow: _post("/api/v1/accounts/{id}/unfollow", Relationship),
    GetRelationships: _get(
        "/api/v1/accounts/relationships", Relationship, many=True, query=_params(ids="id[]")
    ),
    GetSearchAccounts: _get(
        "/api/v1/accounts/search",
        Account,
        many=True,
        query=_params("q", "limit", "resolve", "following"),
    ),
    PostBlock: _post("/api/v1/accounts/{id}/block", Relationship),
    PostUnblock: _post("/api/v1/accounts/{id}/unblock", Relationship),
    PostMute: _post("/api/v1/accounts/{id}/mute", Relationship, body=_params("notifications")),
    PostUnmute: _post("/api/v1/accounts/{id}/unmute", Relationship),
    # Statuses
    GetStatus: _get("/api/v1/statuses/{id}", Status, auth=False),
    GetStatusContext: _get("/api/v1/statuses/{id}/context", Context, auth=False),
    GetStatusCard: _get("/api/v1/statuses/{id}/card", Card, auth=False),
    GetRebloggedBy: _get(
        "/api/v1/statuses/{id}/reblogged_by", Account, many=True, paged=True, auth=False
    ),
    GetFavouritedBy: _get(
        "/api/v1/statuses/{id}/favourited_by", Account, many=True, paged=True, auth=False
    ),
    # A scheduled post answers with a ScheduledStatus instead of a Status
    PostStatus: _post(
        "/api/v1/statuses",
        Status,
        ScheduledStatus,
        body=_params(
            "status",
            "in_reply_to_id",
            "media_ids",
            "poll",
            "sensitive",
            "spoiler_text",
            "visibility",
            "scheduled_at",
            "language",
        ),
    ),
    # Older servers answer {} instead of the deleted status
    DeleteStatus: _post("/api/v1/statuses/{id}", Status, Empty, method="DELETE"),
    PostReblog: _post("/api/v1/statuses/{id}/reblog", Status),
    PostUnreblog: _post("/api/v1/statuses/{id}/unreblog", Status),
    PostFavourite: _post("/api/v1/statuses/{id}/favourite", Status),
    PostUnfavourite: _post("/api/v1/statuses/{id}/unfavourite", Status),
    PostPin: _post("/api/v1/statuses/{id}/pin", Status),
    PostUnpin: _post("/api/v1/statuses/{id}/unpin", Status),
    GetScheduledStatuses: _get("/api/v1/scheduled_statuses", ScheduledStatus, many=True, paged=True),
    GetPoll: _get("/api/v1/polls/{id}", Poll, auth=False),
    PostPollVote: _post("/api/v1/polls/{id}/votes", Poll, body=_params("choices")),
    # Timelines
    GetHomeTimeline: _get("/api/v1/timelines/home", Status, many=True, paged=True),
    GetConversations: _get("/api/v1/conversations", Conversation, many=True, paged=True),
    GetPublicTimeline: _get(
        "/api/v1/timelines/public",
        Status,
        many=True,
        query=_params("local", "only_media"),
        paged=True,
        auth=False,
    ),
    GetTagTimeline: _get(
        "/api/v1/timelines/tag/{hashtag}",
        Status,
        many=True,
        query=_params("local", "only_media"),
        paged=True,
        auth=False,
    ),
    GetListTimeline: _get("/api/v1/timelines/list/{list_id}", Status, many=True, paged=True),
    GetGroupTimeline: _get("/api/v1/timelines/group/{group_id}", Status, many=True, paged=True),
    # Notifications
    GetNotifications: _get(
        "/api/v1/notifications",
        Notification,
        many=True,
        query=_params("account_id", exclude_types="exclude_types[]"),
        paged=True,
    ),
    GetNotification: _get("/api/v1/notifications/{id}", Notification),
    PostClearNotifications: _post("/api/v1/notifications/clear", Empty),
    PostDismissNotification: _post("/api/v1/notifications/{id}/dismiss", Empty),
    # Groups
    GetGroups: _get("/api/v1/groups", Group, many=True, query=_params("tab")),
    GetGroup: _get("/api/v1/groups/{id}", Group),
    GetGroupAccounts: _get("/api/v1/groups/{id}/accounts", Account, many=True, paged=True),
    PostGroupJoin: _post("/api/v1/groups/{id}/accounts", Empty),
    DeleteGroupJoin: _post("/api/v1/groups/{id}/accounts", Empty, method="DELETE"),
    # Instance, trends, custom emojis
    GetInstance: _get("/api/v1/instance", Instance, auth=False),
    GetTrends: _get("/api/v1/trends", Tag, many=True, query=_params("limit"), auth=False),
    GetCustomEmojis: _get("/api/v1/custom_emojis", Emoji, many=True, auth=False),
    # Search
    GetSearch: _get(
        "/api/v2/search",
        Results,
        query=_params("q", "type", "resolve", "following", "account_id", "limit", "offset"),
        auth=False,
    ),
    # Filters
    GetFilters: _get("/api/v1/filters", Filter, many=True),
    GetFilter: _get("/api/v1/filters/{id}", Filter),
    PostFilter: _post(
        "/api/v1/filters",
        Filter,
        body=_params("phrase", "context", "irreversible", "whole_word", "expires_in"),
    ),
    # Lists
    GetLists: _get("/api/v1/lists", ListEntity, many=True),
    GetList: _get("/api/v1/lists/{id}", ListEntity),
    GetListAccounts: _get("/api/v1/lists/{id}/accounts", Account, many=True, paged=True),
}


def route_for(request: Request) -> Route:
    try:
        return ROUTES[type(request)]
    except KeyError:
        raise TypeError(f"No route for {type(request).__name__}") from None


def requires_auth(request: Request) -> bool:
    return route_for(request).auth


def expected_entity(request: Request) -> tuple[tuple[type[Entity], ...], bool]:
    """Entity types the response may decode to, and whether it is an array."""
    route = route_for(request)
    return route.expects, route.many


def _json_value(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (list, tuple)):
        return [_json_value(item) for item in value]
    if is_dataclass(value):
        return {k: _json_value(v) for k, v in asdict(value).items()}
    return value


def _query_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return value.value
    return str(value)


def _query_params(request: Request, route: Route) -> list[tuple[str, str]]:
    params: list[tuple[str, str]] = []
    for attr, key in route.query:
        value = getattr(request, attr)
        # Flags default to off server-side, so only "true" is ever sent
        if value is None or value is False:
            continue
        if isinstance(value, (list, tuple)):
            params.extend((key, _query_value(item)) for item in value)
        else:
            params.append((key, _query_value(value)))

    if route.paged:
        paging = effective_paging(request)
        if paging is not None:
            for key in PAGING_KEYS:
                value = getattr(paging, key)
                if value is not None and value != "":
                    params.append((key, str(value)))

    # sort is stable, so repeated keys keep their list order
    return sorted(params, key=lambda pair: pair[0])


def _json_body(request: Request, route: Route) -> JsonBody:
    data = {}
    for attr, key in route.body:
        value = getattr(request, attr)
        if value is not None:
            data[key] = _json_value(value)
    return JsonBody(data)


def _form_bool(value: bool) -> str:
    return "true" if value else "false"


def _update_credentials_body(request: PatchUpdateCredentials) -> MultipartBody:
    form: dict[str, str] = {}
    if request.display_name is not None:
        form["display_name"] = request.display_name
    if request.note is not None:
        form["note"] = request.note
    for name in ("locked", "bot", "discoverable"):
        value = getattr(request, name)
        if value is not None:
            form[name] = _form_bool(value)
    if request.privacy is not None:
        form["source[privacy]"] = request.privacy.value
    if request.sensitive is not None:
        form["source[sensitive]"] = _form_bool(request.sensitive)
    if request.language is not None:
        form["source[language]"] = request.language
    for index, (name, value) in enumerate(request.fields_attributes or []):
        form[f"fields_attributes[{index}][name]"] = name
        form[f"fields_attributes[{index}][value]"] = value

    files = {}
    if request.avatar is not None:
        files["avatar"] = request.avatar
    if request.header is not None:
        files["header"] = request.header
    return MultipartBody(fields=form, files=files)


def _path(request: Request, route: Route) -> str:
    return PATH_PARAM.sub(
        lambda m: quote(str(getattr(request, m.group(1))), safe=""),
        route.path,
    )


def build(server_info: ServerInfo, request: Request) -> RawRequest:
    """Turn ``request`` into the HTTP call it stands for on ``server_info``."""
    route = route_for(request)

    url = server_info.base_url + _path(request, route)
    params = _query_params(request, route)
    if params:
        url = f"{url}?{httpx.QueryParams(params)}"

    headers = {"Accept": "application/json"}
    if server_info.token:
        headers["Authorization"] = f"Bearer {server_info.token}"

    body: JsonBody | MultipartBody | None = None
    if route.multipart:
        body = _update_credentials_body(request)
    elif route.method != "GET" and route.body:
        body = _json_body(request, route)
    elif route.method in ("POST", "PATCH", "PUT"):
        body = JsonBody({})

    if isinstance(body, JsonBody):
        headers["Content-Type"] = "application/json"

    idempotency_key = getattr(request, "idempotency_key", None)
    if idempotency_key:
        headers["Idempotency-Key"] = idempotency_key

    return RawRequest(method=route.method, url=url, headers=headers, body=body)
