"""Render entities as plain text for the terminal.

Status and account notes arrive as HTML. Paragraphs and line breaks become
newlines, every other tag is dropped and entities are unescaped.
"""

import html
import re

from .models import (
    Account,
    Entity,
    EntityList,
    Instance,
    Notification,
    Relationship,
    Status,
    Tag,
)

BREAK_RE = re.compile(r"<br\s*/?>", re.IGNORECASE)
PARAGRAPH_RE = re.compile(r"</p>\s*<p[^>]*>", re.IGNORECASE)
TAG_RE = re.compile(r"<[^>]+>")


def html_to_text(content: str) -> str:
    text = PARAGRAPH_RE.sub("\n\n", content)
    text = BREAK_RE.sub("\n", text)
    text = TAG_RE.sub("", text)
    return html.unescape(text).strip()


def render_account(account: Account) -> str:
    name = account.display_name or account.username
    lines = [f"{name} (@{account.acct or account.username}) [{account.id}]"]
    lines.append(
        f"{account.statuses_count} posts, {account.following_count} following, "
        f"{account.followers_count} followers"
    )
    flags = [label for label, on in (("locked", account.locked), ("bot", account.bot)) if on]
    if flags:
        lines.append(", ".join(flags))
    if account.moved is not None:
        lines.append(f"Moved to @{account.moved.account.acct}")
    note = html_to_text(account.note)
    if note:
        lines.append("")
        lines.append(note)
    return "\n".join(lines)


def render_status(status: Status) -> str:
    lines: list[str] = []
    if status.reblog is not None:
        lines.append(f"@{status.account.acct} boosted:")
        status = status.reblog.status

    lines.append(f"@{status.account.acct} · {status.created_at} · {status.visibility.value}")
    if status.spoiler_text:
        lines.append(f"CW: {status.spoiler_text}")
    lines.append(html_to_text(status.content))
    for attachment in status.media_attachments:
        description = f" ({attachment.description})" if attachment.description else ""
        lines.append(f"[{attachment.type.value}] {attachment.url}{description}")
    if status.card is not None:
        lines.append(f"[card] {status.card.title} {status.card.url}".rstrip())
    lines.append(
        f"replies {status.replies_count} · boosts {status.reblogs_count} · "
        f"favourites {status.favourites_count} · id {status.id}"
    )
    return "\n".join(lines)


def render_notification(notification: Notification) -> str:
    header = f"{notification.type.value} from @{notification.account.acct}"
    if notification.status is None:
        return header
    return f"{header}\n{render_status(notification.status)}"


def render_relationship(relationship: Relationship) -> str:
    states = [
        name
        for name in ("following", "followed_by", "requested", "blocking", "muting")
        if getattr(relationship, name)
    ]
    return f"{relationship.id}: {', '.join(states) or 'no relationship'}"


def render_instance(instance: Instance) -> str:
    lines = [f"{instance.title} ({instance.uri})", f"Version {instance.version}"]
    if instance.stats is not None:
        lines.append(
            f"{instance.stats.user_count} users, {instance.stats.status_count} posts, "
            f"{instance.stats.domain_count} known servers"
        )
    description = html_to_text(instance.short_description or instance.description)
    if description:
        lines.append("")
        lines.append(description)
    return "\n".join(lines)


def render_entity(entity: Entity) -> str:
    """Render any entity, falling back to its repr for the rarer types."""
    if isinstance(entity, EntityList):
        return "\n\n---\n\n".join(render_entity(item) for item in entity.items)
    if isinstance(entity, Status):
        return render_status(entity)
    if isinstance(entity, Account):
        return render_account(entity)
    if isinstance(entity, Notification):
        return render_notification(entity)
    if isinstance(entity, Relationship):
        return render_relationship(entity)
    if isinstance(entity, Instance):
        return render_instance(entity)
    if isinstance(entity, Tag):
        return f"#{entity.name} {entity.url}".rstrip()
    return repr(entity)
