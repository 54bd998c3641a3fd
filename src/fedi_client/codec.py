"""Decode API JSON into entities and encode entities back to JSON.

Each entity has a field table mapping attribute name (identical to the wire
key) to a ``Codec``. Decoding walks the dataclass fields:

- a missing or ``null`` key keeps the dataclass default
- a value its codec rejects also keeps the default (logged at DEBUG)
- a field without a default must be present and valid, else ``DecodeError``

The decoded entity keeps the input value in ``v``.
"""

import json
import logging
from collections.abc import Callable
from dataclasses import MISSING, dataclass, fields
from enum import Enum
from typing import Any

from .errors import DecodeError
from .models import (
    Account,
    AccountField,
    Application,
    Attachment,
    AttachmentType,
    Card,
    CardType,
    Context,
    Conversation,
    Emoji,
    Empty,
    Entity,
    EntityList,
    Error,
    Filter,
    FilterContext,
    Focus,
    Group,
    History,
    ImageMeta,
    Instance,
    ListEntity,
    Mention,
    Meta,
    Notification,
    NotificationType,
    Poll,
    PollOption,
    PushSubscription,
    Relationship,
    Results,
    ScheduledStatus,
    Source,
    Stats,
    Status,
    StatusParams,
    Tag,
    Token,
    Visibility,
    WrappedAccount,
    WrappedStatus,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Codec:
    """A decode/encode pair for one kind of JSON value."""

    name: str
    decode: Callable[[Any, str], Any]
    encode: Callable[[Any], Any]


def _fail(path: str, expected: str, value: Any) -> DecodeError:
    return DecodeError(path, f"expected {expected}, got {type(value).__name__}")


def _decode_str(value: Any, path: str) -> str:
    if not isinstance(value, str):
        raise _fail(path, "a string", value)
    return value


def _decode_int(value: Any, path: str) -> int:
    # bool is an int subclass; JSON true is not a count
    if isinstance(value, bool) or not isinstance(value, int):
        raise _fail(path, "an integer", value)
    return value


def _decode_float(value: Any, path: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise _fail(path, "a number", value)
    return float(value)


def _decode_bool(value: Any, path: str) -> bool:
    if not isinstance(value, bool):
        raise _fail(path, "a boolean", value)
    return value


def _decode_object(value: Any, path: str) -> dict:
    if not isinstance(value, dict):
        raise _fail(path, "an object", value)
    return value


def _identity(value: Any) -> Any:
    return value


STRING = Codec("string", _decode_str, _identity)
INT = Codec("int", _decode_int, _identity)
FLOAT = Codec("float", _decode_float, _identity)
BOOL = Codec("bool", _decode_bool, _identity)
OBJECT = Codec("object", _decode_object, _identity)


def maybe(codec: Codec) -> Codec:
    """``null`` decodes to None; anything else goes through ``codec``."""

    def decode(value: Any, path: str) -> Any:
        if value is None:
            return None
        return codec.decode(value, path)

    def encode(value: Any) -> Any:
        if value is None:
            return None
        return codec.encode(value)

    return Codec(f"maybe {codec.name}", decode, encode)


def list_of(codec: Codec, skip_invalid: bool = False) -> Codec:
    """A JSON array of ``codec`` values.

    With ``skip_invalid`` an element that fails to decode is dropped instead of
    failing the whole list.
    """

    def decode(value: Any, path: str) -> list:
        if not isinstance(value, list):
            raise _fail(path, "an array", value)
        items = []
        for index, item in enumerate(value):
            item_path = f"{path}[{index}]"
            try:
                items.append(codec.decode(item, item_path))
            except DecodeError as e:
                if not skip_invalid:
                    raise
                logger.debug("Dropping list element %s: %s", item_path, e.message)
        return items

    def encode(value: list) -> list:
        return [codec.encode(item) for item in value]

    return Codec(f"list of {codec.name}", decode, encode)


def enum(enum_cls: type[Enum], fallback: Enum | None = None) -> Codec:
    """A closed set of strings.

    Unknown strings decode to ``fallback`` when one is given, otherwise they
    fail.
    """
    by_value = {member.value: member for member in enum_cls}

    def decode(value: Any, path: str) -> Enum:
        _decode_str(value, path)
        member = by_value.get(value)
        if member is not None:
            return member
        if fallback is not None:
            logger.debug(
                "Unknown %s %r at %s, using %s",
                enum_cls.__name__,
                value,
                path,
                fallback.value,
            )
            return fallback
        raise DecodeError(path, f"unknown {enum_cls.__name__} {value!r}")

    def encode(value: Enum) -> str:
        return value.value

    return Codec(enum_cls.__name__, decode, encode)


# Populated below once every table exists; entity codecs look tables up lazily
# so mutually nested entities (Status -> Account -> Status) need no ordering.
FIELD_TABLES: dict[type[Entity], dict[str, Codec]] = {}


def _decode_record(cls: type[Entity], value: Any, path: str) -> Entity:
    if not isinstance(value, dict):
        raise _fail(path, f"an object for {cls.__name__}", value)

    table = FIELD_TABLES[cls]
    kwargs: dict[str, Any] = {}
    for f in fields(cls):
        if f.name == "v":
            continue
        required = f.default is MISSING and f.default_factory is MISSING
        field_path = f"{path}.{f.name}"
        raw = value.get(f.name)

        if raw is None:
            if required:
                raise DecodeError(field_path, "missing required field")
            continue

        codec = table[f.name]
        if required:
            kwargs[f.name] = codec.decode(raw, field_path)
            continue

        try:
            kwargs[f.name] = codec.decode(raw, field_path)
        except DecodeError as e:
            logger.debug("Defaulting %s: %s", field_path, e.message)

    return cls(**kwargs, v=value)


def _encode_record(entity: Entity) -> dict:
    table = FIELD_TABLES[type(entity)]
    return {
        f.name: table[f.name].encode(getattr(entity, f.name))
        for f in fields(entity)
        if f.name != "v"
    }


def entity(cls: type[Entity]) -> Codec:
    """A nested entity, decoded with its own field table."""

    def decode(value: Any, path: str) -> Entity:
        return _decode_record(cls, value, path)

    return Codec(cls.__name__, decode, _encode_record)


def _wrapped_account() -> Codec:
    inner = entity(Account)
    return Codec(
        "WrappedAccount",
        lambda value, path: WrappedAccount(inner.decode(value, path)),
        lambda wrapper: inner.encode(wrapper.account),
    )


def _wrapped_status() -> Codec:
    inner = entity(Status)
    return Codec(
        "WrappedStatus",
        lambda value, path: WrappedStatus(inner.decode(value, path)),
        lambda wrapper: inner.encode(wrapper.status),
    )


EMOJIS = list_of(entity(Emoji))
OPT_STRING = maybe(STRING)
OPT_INT = maybe(INT)
OPT_FLOAT = maybe(FLOAT)
OPT_BOOL = maybe(BOOL)

FIELD_TABLES.update(
    {
        Emoji: {
            "shortcode": STRING,
            "url": STRING,
            "static_url": STRING,
            "visible_in_picker": BOOL,
        },
        AccountField: {
            "name": STRING,
            "value": STRING,
            "verified_at": OPT_STRING,
        },
        Source: {
            "privacy": maybe(enum(Visibility)),
            "sensitive": BOOL,
            "language": OPT_STRING,
            "note": STRING,
            "fields": list_of(entity(AccountField)),
        },
        Account: {
            "id": STRING,
            "username": STRING,
            "acct": STRING,
            "display_name": STRING,
            "locked": BOOL,
            "bot": BOOL,
            "group": BOOL,
            "discoverable": OPT_BOOL,
            "created_at": STRING,
            "note": STRING,
            "url": STRING,
            "avatar": STRING,
            "avatar_static": STRING,
            "header": STRING,
            "header_static": STRING,
            "followers_count": INT,
            "following_count": INT,
            "statuses_count": INT,
            "last_status_at": OPT_STRING,
            "source": maybe(entity(Source)),
            "emojis": EMOJIS,
            "fields": list_of(entity(AccountField)),
            "moved": maybe(_wrapped_account()),
        },
        Token: {
            "access_token": STRING,
            "token_type": STRING,
            "scope": STRING,
            "created_at": INT,
        },
        Application: {
            "name": STRING,
            "website": OPT_STRING,
            "vapid_key": OPT_STRING,
            "client_id": OPT_STRING,
            "client_secret": OPT_STRING,
        },
        ImageMeta: {
            "width": OPT_INT,
            "height": OPT_INT,
            "size": OPT_STRING,
            "aspect": OPT_FLOAT,
        },
        Focus: {"x": FLOAT, "y": FLOAT},
        Meta: {
            "small": maybe(entity(ImageMeta)),
            "original": maybe(entity(ImageMeta)),
            "focus": maybe(entity(Focus)),
            "length": OPT_STRING,
            "duration": OPT_FLOAT,
            "fps": OPT_INT,
        },
        Attachment: {
            "id": STRING,
            "type": enum(AttachmentType, fallback=AttachmentType.UNKNOWN),
            "url": STRING,
            "remote_url": OPT_STRING,
            "preview_url": STRING,
            "text_url": OPT_STRING,
            "meta": maybe(entity(Meta)),
            "description": OPT_STRING,
            "blurhash": OPT_STRING,
        },
        Card: {
            "url": STRING,
            "title": STRING,
            "description": STRING,
            "type": enum(CardType, fallback=CardType.LINK),
            "image": OPT_STRING,
            "author_name": OPT_STRING,
            "author_url": OPT_STRING,
            "provider_name": OPT_STRING,
            "provider_url": OPT_STRING,
            "html": OPT_STRING,
            "width": OPT_INT,
            "height": OPT_INT,
            "embed_url": OPT_STRING,
        },
        Error: {"error": STRING, "error_description": OPT_STRING},
        Filter: {
            "id": STRING,
            "phrase": STRING,
            "context": list_of(enum(FilterContext), skip_invalid=True),
            "expires_at": OPT_STRING,
            "irreversible": BOOL,
            "whole_word": BOOL,
        },
        Stats: {"user_count": INT, "status_count": INT, "domain_count": INT},
        Instance: {
            "uri": STRING,
            "title": STRING,
            "description": STRING,
            "short_description": OPT_STRING,
            "email": STRING,
            "version": STRING,
            "thumbnail": OPT_STRING,
            "urls": OBJECT,
            "stats": maybe(entity(Stats)),
            "languages": list_of(STRING),
            "contact_account": maybe(entity(Account)),
            "registrations": BOOL,
            "approval_required": BOOL,
            "max_toot_chars": OPT_INT,
        },
        ListEntity: {"id": STRING, "title": STRING},
        Mention: {"id": STRING, "username": STRING, "acct": STRING, "url": STRING},
        PollOption: {"title": STRING, "votes_count": OPT_INT},
        Poll: {
            "id": STRING,
            "expires_at": OPT_STRING,
            "expired": BOOL,
            "multiple": BOOL,
            "votes_count": INT,
            "voters_count": OPT_INT,
            "voted": OPT_BOOL,
            "own_votes": list_of(INT),
            "options": list_of(entity(PollOption)),
            "emojis": EMOJIS,
        },
        PushSubscription: {
            "id": STRING,
            "endpoint": STRING,
            "server_key": STRING,
            "alerts": OBJECT,
        },
        Relationship: {
            "id": STRING,
            "following": BOOL,
            "showing_reblogs": BOOL,
            "followed_by": BOOL,
            "blocking": BOOL,
            "blocked_by": BOOL,
            "muting": BOOL,
            "muting_notifications": BOOL,
            "requested": BOOL,
            "domain_blocking": BOOL,
            "endorsed": BOOL,
            "note": STRING,
        },
        History: {"day": STRING, "uses": STRING, "accounts": STRING},
        Tag: {"name": STRING, "url": STRING, "history": list_of(entity(History))},
        Status: {
            "id": STRING,
            "account": entity(Account),
            "visibility": enum(Visibility),
            "uri": STRING,
            "url": OPT_STRING,
            "created_at": STRING,
            "content": STRING,
            "spoiler_text": STRING,
            "sensitive": BOOL,
            "language": OPT_STRING,
            "in_reply_to_id": OPT_STRING,
            "in_reply_to_account_id": OPT_STRING,
            "reblog": maybe(_wrapped_status()),
            "replies_count": INT,
            "reblogs_count": INT,
            "favourites_count": INT,
            "favourited": BOOL,
            "reblogged": BOOL,
            "muted": BOOL,
            "bookmarked": BOOL,
            "pinned": BOOL,
            "emojis": EMOJIS,
            "media_attachments": list_of(entity(Attachment)),
            "mentions": list_of(entity(Mention)),
            "tags": list_of(entity(Tag)),
            "card": maybe(entity(Card)),
            "poll": maybe(entity(Poll)),
            "application": maybe(entity(Application)),
        },
        StatusParams: {
            "text": STRING,
            "in_reply_to_id": OPT_STRING,
            "media_ids": list_of(STRING),
            "sensitive": OPT_BOOL,
            "spoiler_text": OPT_STRING,
            "visibility": maybe(enum(Visibility)),
            "scheduled_at": OPT_STRING,
            "application_id": OPT_STRING,
        },
        ScheduledStatus: {
            "id": STRING,
            "scheduled_at": STRING,
            "params": maybe(entity(StatusParams)),
            "media_attachments": list_of(entity(Attachment)),
        },
        Context: {
            "ancestors": list_of(entity(Status)),
            "descendants": list_of(entity(Status)),
        },
        Notification: {
            "id": STRING,
            "type": enum(NotificationType),
            "account": entity(Account),
            "created_at": STRING,
            "status": maybe(entity(Status)),
        },
        Results: {
            "accounts": list_of(entity(Account)),
            "statuses": list_of(entity(Status)),
            "hashtags": list_of(entity(Tag)),
        },
        Conversation: {
            "id": STRING,
            "accounts": list_of(entity(Account)),
            "last_status": maybe(entity(Status)),
            "unread": BOOL,
        },
        Group: {
            "id": STRING,
            "title": STRING,
            "description": STRING,
            "cover_image_url": STRING,
            "is_archived": BOOL,
            "member_count": INT,
        },
        Empty: {},
    }
)


def decode(cls: type[Entity], value: Any) -> Entity:
    """Decode one JSON value (already parsed) into an entity of ``cls``."""
    try:
        return _decode_record(cls, value, "$")
    except DecodeError as e:
        e.value = value
        raise


def decode_list(cls: type[Entity], value: Any) -> EntityList:
    """Decode a JSON array whose elements are all ``cls``."""
    if not isinstance(value, list):
        raise DecodeError("$", f"expected an array of {cls.__name__}", value)
    try:
        items = [
            _decode_record(cls, item, f"$[{index}]")
            for index, item in enumerate(value)
        ]
    except DecodeError as e:
        e.value = value
        raise
    return EntityList(items=items, v=value)


def decode_json(cls: type[Entity], text: str, many: bool = False) -> Entity:
    """Parse ``text`` as JSON and decode it."""
    try:
        value = json.loads(text)
    except ValueError as e:
        raise DecodeError("$", f"invalid JSON: {e}", text) from e
    return decode_list(cls, value) if many else decode(cls, value)


def encode(entity: Entity) -> Any:
    """Encode an entity back to JSON-compatible data using wire key names."""
    if isinstance(entity, EntityList):
        return [encode(item) for item in entity.items]
    return _encode_record(entity)
