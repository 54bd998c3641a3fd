"""Request descriptors, one dataclass per API operation.

Requests are plain data: with a ``ServerInfo`` they determine the exact HTTP
call (see ``builder.build``), but they never touch the network themselves.
Variants are grouped under one abstract base per API namespace.
"""

from dataclasses import dataclass, field, replace

from .models import FilterContext, NotificationType, Visibility


@dataclass(frozen=True)
class Paging:
    """Cursor window over a reverse-chronological list endpoint."""

    max_id: str | None = None
    since_id: str | None = None
    min_id: str | None = None
    limit: int | None = None


@dataclass(frozen=True)
class UploadFile:
    filename: str
    content: bytes
    content_type: str = "application/octet-stream"


class Request:
    """Base class of every request variant."""


# ── Accounts ──


class AccountsRequest(Request):
    pass


@dataclass(frozen=True)
class GetVerifyCredentials(AccountsRequest):
    pass


@dataclass(frozen=True)
class PatchUpdateCredentials(AccountsRequest):
    display_name: str | None = None
    note: str | None = None
    avatar: UploadFile | None = None
    header: UploadFile | None = None
    locked: bool | None = None
    bot: bool | None = None
    discoverable: bool | None = None
    # (name, value) pairs for the profile metadata table
    fields_attributes: list[tuple[str, str]] | None = None
    privacy: Visibility | None = None
    sensitive: bool | None = None
    language: str | None = None


@dataclass(frozen=True)
class GetAccount(AccountsRequest):
    id: str


@dataclass(frozen=True)
class GetFollowers(AccountsRequest):
    id: str
    limit: int | None = None
    paging: Paging | None = None


@dataclass(frozen=True)
class GetFollowing(AccountsRequest):
    id: str
    limit: int | None = None
    paging: Paging | None = None


@dataclass(frozen=True)
class GetStatuses(AccountsRequest):
    id: str
    only_media: bool = False
    pinned: bool = False
    exclude_replies: bool = False
    exclude_reblogs: bool = False
    paging: Paging | None = None


@dataclass(frozen=True)
class PostFollow(AccountsRequest):
    id: str
    reblogs: bool = True


@dataclass(frozen=True)
class PostUnfollow(AccountsRequest):
    id: str


@dataclass(frozen=True)
class GetRelationships(AccountsRequest):
    ids: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class GetSearchAccounts(AccountsRequest):
    q: str
    limit: int | None = None
    resolve: bool = False
    following: bool = False


@dataclass(frozen=True)
class PostBlock(AccountsRequest):
    id: str


@dataclass(frozen=True)
class PostUnblock(AccountsRequest):
    id: str


@dataclass(frozen=True)
class PostMute(AccountsRequest):
    id: str
    notifications: bool = True


@dataclass(frozen=True)
class PostUnmute(AccountsRequest):
    id: str


# ── Statuses ──


class StatusesRequest(Request):
    pass


@dataclass(frozen=True)
class GetStatus(StatusesRequest):
    id: str


@dataclass(frozen=True)
class GetStatusContext(StatusesRequest):
    id: str


@dataclass(frozen=True)
class GetStatusCard(StatusesRequest):
    id: str


@dataclass(frozen=True)
class GetRebloggedBy(StatusesRequest):
    id: str
    limit: int | None = None
    paging: Paging | None = None


@dataclass(frozen=True)
class GetFavouritedBy(StatusesRequest):
    id: str
    limit: int | None = None
    paging: Paging | None = None


@dataclass(frozen=True)
class PollDefinition:
    options: list[str]
    expires_in: int
    multiple: bool = False
    hide_totals: bool = False


@dataclass(frozen=True)
class PostStatus(StatusesRequest):
    status: str = ""
    in_reply_to_id: str | None = None
    media_ids: list[str] | None = None
    poll: PollDefinition | None = None
    sensitive: bool | None = None
    spoiler_text: str | None = None
    visibility: Visibility | None = None
    scheduled_at: str | None = None
    language: str | None = None
    idempotency_key: str | None = None


@dataclass(frozen=True)
class DeleteStatus(StatusesRequest):
    id: str


@dataclass(frozen=True)
class PostReblog(StatusesRequest):
    id: str


@dataclass(frozen=True)
class PostUnreblog(StatusesRequest):
    id: str


@dataclass(frozen=True)
class PostFavourite(StatusesRequest):
    id: str


@dataclass(frozen=True)
class PostUnfavourite(StatusesRequest):
    id: str


@dataclass(frozen=True)
class PostPin(StatusesRequest):
    id: str


@dataclass(frozen=True)
class PostUnpin(StatusesRequest):
    id: str


@dataclass(frozen=True)
class GetScheduledStatuses(StatusesRequest):
    paging: Paging | None = None


@dataclass(frozen=True)
class GetPoll(StatusesRequest):
    id: str


@dataclass(frozen=True)
class PostPollVote(StatusesRequest):
    id: str
    choices: list[int] = field(default_factory=list)


# ── Timelines ──


class TimelinesRequest(Request):
    pass


@dataclass(frozen=True)
class GetHomeTimeline(TimelinesRequest):
    paging: Paging | None = None


@dataclass(frozen=True)
class GetConversations(TimelinesRequest):
    paging: Paging | None = None


@dataclass(frozen=True)
class GetPublicTimeline(TimelinesRequest):
    local: bool = False
    only_media: bool = False
    paging: Paging | None = None


@dataclass(frozen=True)
class GetTagTimeline(TimelinesRequest):
    hashtag: str
    local: bool = False
    only_media: bool = False
    paging: Paging | None = None


@dataclass(frozen=True)
class GetListTimeline(TimelinesRequest):
    list_id: str
    paging: Paging | None = None


@dataclass(frozen=True)
class GetGroupTimeline(TimelinesRequest):
    group_id: str
    paging: Paging | None = None


# ── Notifications ──


class NotificationsRequest(Request):
    pass


@dataclass(frozen=True)
class GetNotifications(NotificationsRequest):
    exclude_types: list[NotificationType] = field(default_factory=list)
    account_id: str | None = None
    paging: Paging | None = None


@dataclass(frozen=True)
class GetNotification(NotificationsRequest):
    id: str


@dataclass(frozen=True)
class PostClearNotifications(NotificationsRequest):
    pass


@dataclass(frozen=True)
class PostDismissNotification(NotificationsRequest):
    id: str


# ── Groups (Gab) ──


class GroupsRequest(Request):
    pass


@dataclass(frozen=True)
class GetGroups(GroupsRequest):
    # "featured", "member" or "admin"
    tab: str = "member"


@dataclass(frozen=True)
class GetGroup(GroupsRequest):
    id: str


@dataclass(frozen=True)
class GetGroupAccounts(GroupsRequest):
    id: str
    limit: int | None = None
    paging: Paging | None = None


@dataclass(frozen=True)
class PostGroupJoin(GroupsRequest):
    id: str


@dataclass(frozen=True)
class DeleteGroupJoin(GroupsRequest):
    id: str


# ── Instance, trends, custom emojis ──


class InstanceRequest(Request):
    pass


@dataclass(frozen=True)
class GetInstance(InstanceRequest):
    pass


class TrendsRequest(Request):
    pass


@dataclass(frozen=True)
class GetTrends(TrendsRequest):
    limit: int | None = None


class CustomEmojisRequest(Request):
    pass


@dataclass(frozen=True)
class GetCustomEmojis(CustomEmojisRequest):
    pass


# ── Search ──


class SearchRequest(Request):
    pass


@dataclass(frozen=True)
class GetSearch(SearchRequest):
    q: str
    # "accounts", "hashtags" or "statuses"
    type: str | None = None
    resolve: bool = False
    following: bool = False
    account_id: str | None = None
    limit: int | None = None
    offset: int | None = None


# ── Filters ──


class FiltersRequest(Request):
    pass


@dataclass(frozen=True)
class GetFilters(FiltersRequest):
    pass


@dataclass(frozen=True)
class GetFilter(FiltersRequest):
    id: str


@dataclass(frozen=True)
class PostFilter(FiltersRequest):
    phrase: str
    context: list[FilterContext] = field(default_factory=list)
    irreversible: bool | None = None
    whole_word: bool | None = None
    expires_in: int | None = None


# ── Lists ──


class ListsRequest(Request):
    pass


@dataclass(frozen=True)
class GetLists(ListsRequest):
    pass


@dataclass(frozen=True)
class GetList(ListsRequest):
    id: str


@dataclass(frozen=True)
class GetListAccounts(ListsRequest):
    id: str
    limit: int | None = None
    paging: Paging | None = None


def effective_paging(request: Request) -> Paging | None:
    """The cursor a request will send, with a top-level ``limit`` folded in."""
    paging = getattr(request, "paging", None)
    limit = getattr(request, "limit", None)
    if limit is None or not hasattr(request, "paging"):
        return paging
    return replace(paging or Paging(), limit=limit)


def with_paging(request: Request, paging: Paging | None) -> Request:
    """Copy of ``request`` using ``paging`` as its cursor."""
    if not hasattr(request, "paging"):
        raise TypeError(f"{type(request).__name__} does not take paging")
    return replace(request, paging=paging)
