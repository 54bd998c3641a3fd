"""Caller-side state for one server context, and the follow-up dispatch table.

After each successful response the session runs the follow-up registered for
the request's class, if any:

    GetVerifyCredentials, PatchUpdateCredentials   remember the logged-in account
    Post(Un)Follow, Post(Un)Block, Post(Un)Mute,
    GetRelationships                               refresh the relationship cache
    paged list requests                            advance the view's cursor

Cursor updates are tied to a per-view generation. A response that arrives
after its view was reset, or after a newer request for the same view was
issued, is returned to the caller but does not touch the cursor.
"""

import logging
from dataclasses import dataclass, fields

from .builder import ServerInfo
from .client import AsyncMastodonClient, MastodonClient, Response, Result
from .models import Account, EntityList, Relationship
from .paging import smart_paging
from .request import (
    GetConversations,
    GetFavouritedBy,
    GetFollowers,
    GetFollowing,
    GetGroupAccounts,
    GetGroupTimeline,
    GetHomeTimeline,
    GetListAccounts,
    GetListTimeline,
    GetNotifications,
    GetPublicTimeline,
    GetRebloggedBy,
    GetRelationships,
    GetScheduledStatuses,
    GetStatuses,
    GetTagTimeline,
    GetVerifyCredentials,
    Paging,
    PatchUpdateCredentials,
    PostBlock,
    PostFollow,
    PostMute,
    PostUnblock,
    PostUnfollow,
    PostUnmute,
    Request,
    effective_paging,
    with_paging,
)

logger = logging.getLogger(__name__)


def view_key(request: Request) -> str:
    """Identify the list a request pages through, ignoring the cursor."""
    parts = [type(request).__name__]
    parts.extend(
        f"{f.name}={getattr(request, f.name)}"
        for f in fields(request)
        if f.name != "paging"
    )
    return ":".join(parts)


@dataclass(frozen=True)
class Ticket:
    view: str
    generation: int


class Session:
    def __init__(
        self,
        client: MastodonClient | AsyncMastodonClient,
        server_info: ServerInfo,
        smart_paging: bool = False,
    ):
        self.client = client
        self.server_info = server_info
        self.smart_paging = smart_paging
        self.account: Account | None = None
        self.relationships: dict[str, Relationship] = {}
        self.cursors: dict[str, Paging | None] = {}
        self._generations: dict[str, int] = {}

        self._followups = {
            GetVerifyCredentials: self._on_account,
            PatchUpdateCredentials: self._on_account,
            PostFollow: self._on_relationship,
            PostUnfollow: self._on_relationship,
            PostBlock: self._on_relationship,
            PostUnblock: self._on_relationship,
            PostMute: self._on_relationship,
            PostUnmute: self._on_relationship,
            GetRelationships: self._on_relationship,
            GetFollowers: self._on_page,
            GetFollowing: self._on_page,
            GetStatuses: self._on_page,
            GetRebloggedBy: self._on_page,
            GetFavouritedBy: self._on_page,
            GetScheduledStatuses: self._on_page,
            GetHomeTimeline: self._on_page,
            GetConversations: self._on_page,
            GetPublicTimeline: self._on_page,
            GetTagTimeline: self._on_page,
            GetListTimeline: self._on_page,
            GetGroupTimeline: self._on_page,
            GetNotifications: self._on_page,
            GetGroupAccounts: self._on_page,
            GetListAccounts: self._on_page,
        }

    def begin(self, request: Request) -> Ticket:
        """Register an outgoing request; older in-flight ones for its view go stale."""
        view = view_key(request)
        generation = self._generations.get(view, 0) + 1
        self._generations[view] = generation
        return Ticket(view, generation)

    def handle(self, result: Result, ticket: Ticket) -> Result:
        if not isinstance(result, Response):
            return result
        followup = self._followups.get(type(result.request))
        if followup is not None:
            followup(result, ticket)
        return result

    def send(self, request: Request) -> Result:
        ticket = self.begin(request)
        return self.handle(self.client.send(self.server_info, request), ticket)

    async def asend(self, request: Request) -> Result:
        ticket = self.begin(request)
        result = await self.client.send(self.server_info, request)
        return self.handle(result, ticket)

    def next_page(self, request: Request) -> Request:
        """``request`` with the cursor stored for its view, if there is one."""
        view = view_key(request)
        if view not in self.cursors:
            return request
        return with_paging(request, self.cursors[view])

    def reset_view(self, request: Request) -> None:
        view = view_key(request)
        self.cursors.pop(view, None)
        self._generations[view] = self._generations.get(view, 0) + 1

    def _on_account(self, response: Response, ticket: Ticket) -> None:
        if isinstance(response.entity, Account):
            self.account = response.entity

    def _on_relationship(self, response: Response, ticket: Ticket) -> None:
        entity = response.entity
        relationships = entity.items if isinstance(entity, EntityList) else [entity]
        for relationship in relationships:
            if isinstance(relationship, Relationship):
                self.relationships[relationship.id] = relationship

    def _on_page(self, response: Response, ticket: Ticket) -> None:
        if self._generations.get(ticket.view) != ticket.generation:
            logger.debug("Ignoring stale page for %s", ticket.view)
            return
        self.cursors[ticket.view] = smart_paging(
            response.entity, effective_paging(response.request), self.smart_paging
        )
