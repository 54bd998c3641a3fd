"""Tests for entity decoding and encoding."""

from dataclasses import fields

import pytest

from fedi_client import codec
from fedi_client.errors import DecodeError
from fedi_client.models import (
    ENTITY_TYPES,
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

BOB = Account(id="7", username="bob", acct="bob")


class TestTolerantDecode:
    def test_partial_account_gets_defaults(self):
        payload = {"id": "7", "username": "bob"}
        account = codec.decode(Account, payload)

        assert account.id == "7"
        assert account.username == "bob"
        assert account.locked is False
        assert account.followers_count == 0
        assert account.emojis == []
        assert account.fields == []
        assert account.moved is None
        assert account.v == payload

    def test_missing_required_id_fails(self):
        with pytest.raises(DecodeError) as exc_info:
            codec.decode(Account, {"username": "bob"})
        assert exc_info.value.path == "$.id"
        assert exc_info.value.value == {"username": "bob"}

    def test_null_required_field_fails(self):
        with pytest.raises(DecodeError):
            codec.decode(Account, {"id": None})

    def test_null_optional_field_uses_default(self):
        account = codec.decode(Account, {"id": "1", "note": None, "emojis": None})
        assert account.note == ""
        assert account.emojis == []

    def test_wrongly_typed_field_uses_default(self):
        account = codec.decode(
            Account, {"id": "1", "followers_count": "lots", "locked": "yes"}
        )
        assert account.followers_count == 0
        assert account.locked is False

    def test_bool_is_not_a_count(self):
        account = codec.decode(Account, {"id": "1", "statuses_count": True})
        assert account.statuses_count == 0

    @pytest.mark.parametrize("payload", [[], "account", 42, None, True])
    def test_wrong_shape_fails(self, payload):
        with pytest.raises(DecodeError):
            codec.decode(Account, payload)

    def test_broken_nested_optional_entity_is_dropped(self):
        account = codec.decode(Account, {"id": "1", "moved": {"username": "no-id"}})
        assert account.moved is None

    def test_broken_required_nested_entity_fails(self):
        with pytest.raises(DecodeError) as exc_info:
            codec.decode(
                Status, {"id": "1", "visibility": "public", "account": {"acct": "x"}}
            )
        assert exc_info.value.path == "$.account.id"

    def test_empty_accepts_any_object(self):
        assert codec.decode(Empty, {}) == Empty()
        assert codec.decode(Empty, {"member": True}).v == {"member": True}


class TestFixtureDecode:
    def test_account(self, account_json):
        account = codec.decode(Account, account_json)

        assert account.display_name == "Alice"
        assert account.discoverable is True
        assert account.followers_count == 120
        assert account.emojis[0].shortcode == "blobcat"
        assert account.emojis[0].visible_in_picker is True
        assert account.fields[1] == AccountField(name="Pronouns", value="she/her")
        assert account.v is account_json

    def test_moved_account_is_wrapped(self, account_json):
        account = codec.decode(Account, account_json)

        assert isinstance(account.moved, WrappedAccount)
        assert account.moved.account.id == "43"
        assert account.moved.account.v == account_json["moved"]

    def test_reblog_is_wrapped(self, status_json):
        status = codec.decode(Status, status_json)

        assert isinstance(status.reblog, WrappedStatus)
        inner = status.reblog.status
        assert inner.id == "1000"
        assert inner.account.username == "alice"
        assert inner.reblogs_count == 5
        assert inner.tags[0].name == "gardening"
        assert inner.application == Application(name="Web")

    def test_attachment_meta(self, status_json):
        attachment = codec.decode(Status, status_json).reblog.status.media_attachments[0]

        assert attachment.type is AttachmentType.IMAGE
        assert attachment.meta.original == ImageMeta(
            width=1200, height=800, size="1200x800", aspect=1.5
        )
        assert attachment.meta.focus == Focus(x=-0.5, y=0.25)

    def test_unknown_attachment_type_falls_back(self, status_json):
        attachment = codec.decode(Status, status_json).reblog.status.media_attachments[1]
        assert attachment.type is AttachmentType.UNKNOWN

    def test_unknown_card_type_falls_back(self, status_json):
        card = codec.decode(Status, status_json).reblog.status.card
        assert card.type is CardType.LINK
        assert card.title == "Seed starting guide"

    def test_notifications(self, notifications_json):
        notifications = codec.decode_list(Notification, notifications_json)

        assert len(notifications) == 2
        follow, favourite = notifications.items
        assert follow.type is NotificationType.FOLLOW
        assert follow.status is None
        assert favourite.status.id == "1000"
        assert notifications.v is notifications_json

    def test_instance(self, instance_json):
        instance = codec.decode(Instance, instance_json)

        assert instance.stats == Stats(user_count=1200, status_count=98000, domain_count=4100)
        assert instance.urls == {"streaming_api": "wss://example.social"}
        assert instance.contact_account.username == "admin"
        assert instance.max_toot_chars is None


class TestEnums:
    def test_unknown_visibility_fails_status(self):
        payload = {"id": "1", "visibility": "circle", "account": {"id": "7"}}
        with pytest.raises(DecodeError) as exc_info:
            codec.decode(Status, payload)
        assert exc_info.value.path == "$.visibility"

    def test_missing_visibility_fails_status(self):
        with pytest.raises(DecodeError):
            codec.decode(Status, {"id": "1", "account": {"id": "7"}})

    def test_unknown_notification_type_fails(self):
        payload = {"id": "1", "type": "emoji_reaction", "account": {"id": "7"}}
        with pytest.raises(DecodeError):
            codec.decode(Notification, payload)

    def test_unknown_filter_context_is_dropped(self):
        payload = {"id": "3", "phrase": "spoiler", "context": ["home", "explore", "thread"]}
        flt = codec.decode(Filter, payload)
        assert flt.context == [FilterContext.HOME, FilterContext.THREAD]

    def test_unknown_source_privacy_defaults_to_none(self):
        source = codec.decode(Source, {"privacy": "circle", "note": "hi"})
        assert source.privacy is None
        assert source.note == "hi"


class TestLists:
    def test_decode_list(self):
        accounts = codec.decode_list(Account, [{"id": "a"}, {"id": "b"}])
        assert [a.id for a in accounts] == ["a", "b"]

    def test_empty_list(self):
        assert codec.decode_list(Account, []).items == []

    def test_list_requires_array(self):
        with pytest.raises(DecodeError):
            codec.decode_list(Account, {"id": "a"})

    def test_bad_element_fails_list(self):
        with pytest.raises(DecodeError) as exc_info:
            codec.decode_list(Account, [{"id": "a"}, {"username": "b"}])
        assert exc_info.value.path == "$[1].id"

    def test_decode_json_invalid(self):
        with pytest.raises(DecodeError, match="invalid JSON"):
            codec.decode_json(Account, "{not json")

    def test_decode_json_many(self):
        result = codec.decode_json(Tag, '[{"name": "python"}]', many=True)
        assert result == EntityList(items=[Tag(name="python")])


STATUS_FULL = Status(
    id="100",
    account=BOB,
    visibility=Visibility.UNLISTED,
    uri="https://example.social/users/bob/statuses/100",
    url="https://example.social/@bob/100",
    created_at="2025-02-10T18:30:00.000Z",
    content="<p>hi</p>",
    spoiler_text="cw",
    sensitive=True,
    language="en",
    in_reply_to_id="99",
    in_reply_to_account_id="8",
    reblog=WrappedStatus(Status(id="90", account=BOB, visibility=Visibility.PUBLIC)),
    replies_count=1,
    reblogs_count=2,
    favourites_count=3,
    favourited=True,
    reblogged=True,
    muted=True,
    bookmarked=True,
    pinned=True,
    emojis=[Emoji(shortcode="wave", url="u", static_url="s", visible_in_picker=True)],
    media_attachments=[
        Attachment(
            id="5",
            type=AttachmentType.VIDEO,
            url="u",
            remote_url="r",
            preview_url="p",
            text_url="t",
            meta=Meta(
                small=ImageMeta(width=1, height=2, size="1x2", aspect=0.5),
                original=ImageMeta(),
                focus=Focus(x=0.1, y=-0.1),
                length="0:00:10",
                duration=10.5,
                fps=30,
            ),
            description="clip",
            blurhash="bh",
        )
    ],
    mentions=[Mention(id="8", username="carol", acct="carol@x", url="u")],
    tags=[Tag(name="t", url="u", history=[History(day="1", uses="2", accounts="3")])],
    card=Card(
        url="u",
        title="t",
        description="d",
        type=CardType.VIDEO,
        image="i",
        author_name="a",
        author_url="au",
        provider_name="p",
        provider_url="pu",
        html="<iframe>",
        width=640,
        height=480,
        embed_url="e",
    ),
    poll=Poll(
        id="9",
        expires_at="2025-03-01",
        expired=True,
        multiple=True,
        votes_count=4,
        voters_count=3,
        voted=True,
        own_votes=[0, 1],
        options=[PollOption(title="yes", votes_count=3), PollOption(title="no")],
        emojis=[],
    ),
    application=Application(name="App", website="https://app.example"),
)

ROUND_TRIP_CORPUS = [
    Account(id="1"),
    Account(
        id="1",
        username="a",
        acct="a@b",
        display_name="A",
        locked=True,
        bot=True,
        group=True,
        discoverable=False,
        created_at="2020-01-01",
        note="n",
        url="u",
        avatar="av",
        avatar_static="avs",
        header="h",
        header_static="hs",
        followers_count=1,
        following_count=2,
        statuses_count=3,
        last_status_at="2025-01-01",
        source=Source(
            privacy=Visibility.PRIVATE,
            sensitive=True,
            language="de",
            note="src",
            fields=[AccountField(name="k", value="v", verified_at="2024")],
        ),
        emojis=[Emoji(shortcode="x")],
        fields=[AccountField(name="k", value="v")],
        moved=WrappedAccount(Account(id="2")),
    ),
    Source(),
    Token(access_token="tok"),
    Token(access_token="tok", token_type="Bearer", scope="read write", created_at=1700000000),
    Application(),
    Application(name="n", website="w", vapid_key="k", client_id="c", client_secret="s"),
    Attachment(id="1"),
    Meta(),
    Card(),
    Context(),
    Context(ancestors=[STATUS_FULL], descendants=[Status(id="2", account=BOB, visibility=Visibility.DIRECT)]),
    Error(),
    Error(error="Record not found", error_description="gone"),
    Filter(id="1"),
    Filter(
        id="1",
        phrase="p",
        context=list(FilterContext),
        expires_at="2025",
        irreversible=True,
        whole_word=True,
    ),
    Instance(),
    Instance(
        uri="x",
        title="t",
        description="d",
        short_description="s",
        email="e",
        version="4",
        thumbnail="th",
        urls={"streaming_api": "wss://x"},
        stats=Stats(user_count=1, status_count=2, domain_count=3),
        languages=["en"],
        contact_account=BOB,
        registrations=True,
        approval_required=True,
        max_toot_chars=500,
    ),
    Stats(),
    ListEntity(id="1"),
    ListEntity(id="1", title="Friends"),
    Mention(id="1"),
    Notification(id="1", type=NotificationType.POLL, account=BOB),
    Notification(
        id="1",
        type=NotificationType.MENTION,
        account=BOB,
        created_at="2025",
        status=STATUS_FULL,
    ),
    Poll(id="1"),
    PushSubscription(id="1"),
    PushSubscription(id="1", endpoint="e", server_key="k", alerts={"follow": True}),
    Relationship(id="1"),
    Relationship(
        id="1",
        following=True,
        showing_reblogs=True,
        followed_by=True,
        blocking=True,
        blocked_by=True,
        muting=True,
        muting_notifications=True,
        requested=True,
        domain_blocking=True,
        endorsed=True,
        note="n",
    ),
    Results(),
    Results(accounts=[BOB], statuses=[STATUS_FULL], hashtags=[Tag(name="t")]),
    Status(id="1", account=BOB, visibility=Visibility.PUBLIC),
    STATUS_FULL,
    ScheduledStatus(id="1"),
    ScheduledStatus(
        id="1",
        scheduled_at="2030",
        params=StatusParams(
            text="later",
            in_reply_to_id="5",
            media_ids=["6"],
            sensitive=False,
            spoiler_text="",
            visibility=Visibility.PUBLIC,
            scheduled_at="2030",
            application_id="3",
        ),
        media_attachments=[Attachment(id="6", type=AttachmentType.AUDIO)],
    ),
    Tag(name="t"),
    History(),
    Conversation(id="1"),
    Conversation(id="1", accounts=[BOB], last_status=STATUS_FULL, unread=True),
    Emoji(shortcode="x"),
    Group(id="1"),
    Group(
        id="1",
        title="t",
        description="d",
        cover_image_url="c",
        is_archived=True,
        member_count=5,
    ),
    Empty(),
]


class TestRoundTrip:
    @pytest.mark.parametrize(
        "entity",
        ROUND_TRIP_CORPUS,
        ids=lambda e: type(e).__name__,
    )
    def test_decode_encode_identity(self, entity):
        encoded = codec.encode(entity)
        decoded = codec.decode(type(entity), encoded)

        assert decoded == entity
        assert decoded.v is encoded

    def test_corpus_covers_every_variant(self):
        covered = {type(e) for e in ROUND_TRIP_CORPUS}
        assert covered >= set(ENTITY_TYPES)

    def test_entity_list(self):
        entities = EntityList(items=[BOB, Account(id="8")])
        encoded = codec.encode(entities)
        assert codec.decode_list(Account, encoded) == entities

    def test_encode_uses_wire_keys(self):
        encoded = codec.encode(STATUS_FULL)
        assert encoded["visibility"] == "unlisted"
        assert encoded["reblog"]["id"] == "90"
        assert encoded["media_attachments"][0]["type"] == "video"
        assert encoded["account"]["display_name"] == ""

    def test_fixture_reencodes_to_equal_entity(self, status_json):
        status = codec.decode(Status, status_json)
        assert codec.decode(Status, codec.encode(status)) == status


class TestFieldTables:
    @pytest.mark.parametrize("cls", ENTITY_TYPES, ids=lambda c: c.__name__)
    def test_every_field_has_a_codec(self, cls):
        names = {f.name for f in fields(cls)} - {"v"}
        assert set(codec.FIELD_TABLES[cls]) == names
