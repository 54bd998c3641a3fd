"""Data models for decoded API entities.

Every entity is a frozen dataclass carrying ``v``: the exact JSON value it was
decoded from. ``v`` takes no part in equality, so two entities with the same
typed fields compare equal whatever payload produced them.

Fields without a default are the ones the decoder cannot substitute. All other
fields fall back to ``False``, ``""``, ``0``, ``[]``, ``{}`` or ``None`` when the
server leaves them out.

Accounts and statuses can embed one level of themselves (``Account.moved``,
``Status.reblog``). Those go through ``WrappedAccount`` / ``WrappedStatus`` so
every place that recurses is explicit.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Visibility(Enum):
    PUBLIC = "public"
    UNLISTED = "unlisted"
    PRIVATE = "private"
    DIRECT = "direct"


class AttachmentType(Enum):
    IMAGE = "image"
    GIFV = "gifv"
    VIDEO = "video"
    AUDIO = "audio"
    UNKNOWN = "unknown"


class CardType(Enum):
    LINK = "link"
    PHOTO = "photo"
    VIDEO = "video"
    RICH = "rich"


class NotificationType(Enum):
    MENTION = "mention"
    REBLOG = "reblog"
    FAVOURITE = "favourite"
    FOLLOW = "follow"
    FOLLOW_REQUEST = "follow_request"
    POLL = "poll"


class FilterContext(Enum):
    HOME = "home"
    NOTIFICATIONS = "notifications"
    PUBLIC = "public"
    THREAD = "thread"
    ACCOUNT = "account"


class Entity:
    """Base class of every decoded API resource."""

    v: Any


def _raw() -> Any:
    return field(default=None, compare=False, repr=False)


# ── Sub-records ──


@dataclass(frozen=True, kw_only=True)
class Emoji(Entity):
    shortcode: str
    url: str = ""
    static_url: str = ""
    visible_in_picker: bool = False
    v: Any = _raw()


@dataclass(frozen=True, kw_only=True)
class AccountField(Entity):
    name: str = ""
    value: str = ""
    verified_at: str | None = None
    v: Any = _raw()


@dataclass(frozen=True, kw_only=True)
class Source(Entity):
    privacy: Visibility | None = None
    sensitive: bool = False
    language: str | None = None
    note: str = ""
    fields: list[AccountField] = field(default_factory=list)
    v: Any = _raw()


@dataclass(frozen=True, kw_only=True)
class Account(Entity):
    id: str
    username: str = ""
    acct: str = ""
    display_name: str = ""
    locked: bool = False
    bot: bool = False
    group: bool = False
    discoverable: bool | None = None
    created_at: str = ""
    note: str = ""
    url: str = ""
    avatar: str = ""
    avatar_static: str = ""
    header: str = ""
    header_static: str = ""
    followers_count: int = 0
    following_count: int = 0
    statuses_count: int = 0
    last_status_at: str | None = None
    source: Source | None = None
    emojis: list[Emoji] = field(default_factory=list)
    fields: list[AccountField] = field(default_factory=list)
    moved: "WrappedAccount | None" = None
    v: Any = _raw()


@dataclass(frozen=True)
class WrappedAccount:
    """One nested level of Account (the account this one moved to)."""

    account: Account


@dataclass(frozen=True, kw_only=True)
class Token(Entity):
    access_token: str
    token_type: str = ""
    scope: str = ""
    created_at: int = 0
    v: Any = _raw()


@dataclass(frozen=True, kw_only=True)
class Application(Entity):
    name: str = ""
    website: str | None = None
    vapid_key: str | None = None
    client_id: str | None = None
    client_secret: str | None = None
    v: Any = _raw()


@dataclass(frozen=True, kw_only=True)
class ImageMeta(Entity):
    width: int | None = None
    height: int | None = None
    size: str | None = None
    aspect: float | None = None
    v: Any = _raw()


@dataclass(frozen=True, kw_only=True)
class Focus(Entity):
    x: float = 0.0
    y: float = 0.0
    v: Any = _raw()


@dataclass(frozen=True, kw_only=True)
class Meta(Entity):
    small: ImageMeta | None = None
    original: ImageMeta | None = None
    focus: Focus | None = None
    length: str | None = None
    duration: float | None = None
    fps: int | None = None
    v: Any = _raw()


@dataclass(frozen=True, kw_only=True)
class Attachment(Entity):
    id: str
    type: AttachmentType = AttachmentType.UNKNOWN
    url: str = ""
    remote_url: str | None = None
    preview_url: str = ""
    text_url: str | None = None
    meta: Meta | None = None
    description: str | None = None
    blurhash: str | None = None
    v: Any = _raw()


@dataclass(frozen=True, kw_only=True)
class Card(Entity):
    url: str = ""
    title: str = ""
    description: str = ""
    type: CardType = CardType.LINK
    image: str | None = None
    author_name: str | None = None
    author_url: str | None = None
    provider_name: str | None = None
    provider_url: str | None = None
    html: str | None = None
    width: int | None = None
    height: int | None = None
    embed_url: str | None = None
    v: Any = _raw()


@dataclass(frozen=True, kw_only=True)
class Error(Entity):
    """Body of a failed API call, e.g. ``{"error": "Record not found"}``."""

    error: str = ""
    error_description: str | None = None
    v: Any = _raw()


@dataclass(frozen=True, kw_only=True)
class Filter(Entity):
    id: str
    phrase: str = ""
    context: list[FilterContext] = field(default_factory=list)
    expires_at: str | None = None
    irreversible: bool = False
    whole_word: bool = False
    v: Any = _raw()


@dataclass(frozen=True, kw_only=True)
class Stats(Entity):
    user_count: int = 0
    status_count: int = 0
    domain_count: int = 0
    v: Any = _raw()


@dataclass(frozen=True, kw_only=True)
class Instance(Entity):
    uri: str = ""
    title: str = ""
    description: str = ""
    short_description: str | None = None
    email: str = ""
    version: str = ""
    thumbnail: str | None = None
    urls: dict[str, Any] = field(default_factory=dict)
    stats: Stats | None = None
    languages: list[str] = field(default_factory=list)
    contact_account: Account | None = None
    registrations: bool = False
    approval_required: bool = False
    max_toot_chars: int | None = None
    v: Any = _raw()


@dataclass(frozen=True, kw_only=True)
class ListEntity(Entity):
    id: str
    title: str = ""
    v: Any = _raw()


@dataclass(frozen=True, kw_only=True)
class Mention(Entity):
    id: str
    username: str = ""
    acct: str = ""
    url: str = ""
    v: Any = _raw()


@dataclass(frozen=True, kw_only=True)
class PollOption(Entity):
    title: str = ""
    votes_count: int | None = None
    v: Any = _raw()


@dataclass(frozen=True, kw_only=True)
class Poll(Entity):
    id: str
    expires_at: str | None = None
    expired: bool = False
    multiple: bool = False
    votes_count: int = 0
    voters_count: int | None = None
    voted: bool | None = None
    own_votes: list[int] = field(default_factory=list)
    options: list[PollOption] = field(default_factory=list)
    emojis: list[Emoji] = field(default_factory=list)
    v: Any = _raw()


@dataclass(frozen=True, kw_only=True)
class PushSubscription(Entity):
    id: str
    endpoint: str = ""
    server_key: str = ""
    alerts: dict[str, Any] = field(default_factory=dict)
    v: Any = _raw()


@dataclass(frozen=True, kw_only=True)
class Relationship(Entity):
    id: str
    following: bool = False
    showing_reblogs: bool = False
    followed_by: bool = False
    blocking: bool = False
    blocked_by: bool = False
    muting: bool = False
    muting_notifications: bool = False
    requested: bool = False
    domain_blocking: bool = False
    endorsed: bool = False
    note: str = ""
    v: Any = _raw()


@dataclass(frozen=True, kw_only=True)
class History(Entity):
    day: str = ""
    uses: str = ""
    accounts: str = ""
    v: Any = _raw()


@dataclass(frozen=True, kw_only=True)
class Tag(Entity):
    name: str
    url: str = ""
    history: list[History] = field(default_factory=list)
    v: Any = _raw()


@dataclass(frozen=True, kw_only=True)
class Status(Entity):
    id: str
    account: Account
    visibility: Visibility
    uri: str = ""
    url: str | None = None
    created_at: str = ""
    content: str = ""
    spoiler_text: str = ""
    sensitive: bool = False
    language: str | None = None
    in_reply_to_id: str | None = None
    in_reply_to_account_id: str | None = None
    reblog: "WrappedStatus | None" = None
    replies_count: int = 0
    reblogs_count: int = 0
    favourites_count: int = 0
    favourited: bool = False
    reblogged: bool = False
    muted: bool = False
    bookmarked: bool = False
    pinned: bool = False
    emojis: list[Emoji] = field(default_factory=list)
    media_attachments: list[Attachment] = field(default_factory=list)
    mentions: list[Mention] = field(default_factory=list)
    tags: list[Tag] = field(default_factory=list)
    card: Card | None = None
    poll: Poll | None = None
    application: Application | None = None
    v: Any = _raw()


@dataclass(frozen=True)
class WrappedStatus:
    """One nested level of Status (the status being reblogged)."""

    status: Status


@dataclass(frozen=True, kw_only=True)
class StatusParams(Entity):
    text: str = ""
    in_reply_to_id: str | None = None
    media_ids: list[str] = field(default_factory=list)
    sensitive: bool | None = None
    spoiler_text: str | None = None
    visibility: Visibility | None = None
    scheduled_at: str | None = None
    application_id: str | None = None
    v: Any = _raw()


@dataclass(frozen=True, kw_only=True)
class ScheduledStatus(Entity):
    id: str
    scheduled_at: str = ""
    params: StatusParams | None = None
    media_attachments: list[Attachment] = field(default_factory=list)
    v: Any = _raw()


@dataclass(frozen=True, kw_only=True)
class Context(Entity):
    ancestors: list[Status] = field(default_factory=list)
    descendants: list[Status] = field(default_factory=list)
    v: Any = _raw()


@dataclass(frozen=True, kw_only=True)
class Notification(Entity):
    id: str
    type: NotificationType
    account: Account
    created_at: str = ""
    status: Status | None = None
    v: Any = _raw()


@dataclass(frozen=True, kw_only=True)
class Results(Entity):
    accounts: list[Account] = field(default_factory=list)
    statuses: list[Status] = field(default_factory=list)
    hashtags: list[Tag] = field(default_factory=list)
    v: Any = _raw()


@dataclass(frozen=True, kw_only=True)
class Conversation(Entity):
    id: str
    accounts: list[Account] = field(default_factory=list)
    last_status: Status | None = None
    unread: bool = False
    v: Any = _raw()


@dataclass(frozen=True, kw_only=True)
class Group(Entity):
    """A Gab-style group."""

    id: str
    title: str = ""
    description: str = ""
    cover_image_url: str = ""
    is_archived: bool = False
    member_count: int = 0
    v: Any = _raw()


@dataclass(frozen=True, kw_only=True)
class Empty(Entity):
    """An endpoint that answers with ``{}``."""

    v: Any = _raw()


@dataclass(frozen=True, kw_only=True)
class EntityList(Entity):
    """A decoded JSON array; every item has the same entity type."""

    items: list[Entity] = field(default_factory=list)
    v: Any = _raw()

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self):
        return iter(self.items)


# Entity variants a response can decode to. EntityList is the array form of
# any of them.
ENTITY_TYPES: tuple[type[Entity], ...] = (
    Account,
    Source,
    Token,
    Application,
    Attachment,
    Meta,
    Card,
    Context,
    Error,
    Filter,
    Instance,
    Stats,
    ListEntity,
    Mention,
    Notification,
    Poll,
    PushSubscription,
    Relationship,
    Results,
    Status,
    ScheduledStatus,
    Tag,
    History,
    Conversation,
    Emoji,
    Group,
    Empty,
)


def entity_id(entity: Entity) -> str | None:
    """Identifier used as a paging cursor (``id``, or ``name`` for tags)."""
    if isinstance(entity, Tag):
        return entity.name
    return getattr(entity, "id", None)
