"""Smart paging: move a list cursor along based on what the server returned.

The rules, applied in order:

1. disabled: cursor unchanged
2. ``since_id`` set: the caller is paging from a fixed point, unchanged
3. ``min_id`` set and ``max_id`` empty: ``min_id`` becomes the first item's id
4. at least ``limit`` items came back: ``max_id`` becomes the last item's id
5. otherwise the page was short (end of data): unchanged

A missing ``limit`` counts as 1, so any non-empty page advances ``max_id``.
"""

import logging
from dataclasses import replace

from .models import Entity, EntityList, entity_id
from .request import Paging

logger = logging.getLogger(__name__)


def smart_paging(
    entity: Entity, paging: Paging | None, enabled: bool = True
) -> Paging | None:
    """Return the cursor to use for the next request after ``entity``."""
    if not enabled or not isinstance(entity, EntityList):
        return paging

    cursor = paging or Paging()
    items = entity.items

    if cursor.since_id:
        return paging

    if cursor.min_id and not cursor.max_id:
        if not items:
            return paging
        min_id = entity_id(items[0])
        logger.debug("Smart paging: min_id %s -> %s", cursor.min_id, min_id)
        return replace(cursor, min_id=min_id)

    limit = cursor.limit if cursor.limit is not None else 1
    if items and len(items) >= limit:
        max_id = entity_id(items[-1])
        logger.debug("Smart paging: max_id %s -> %s", cursor.max_id, max_id)
        return replace(cursor, max_id=max_id)

    logger.debug(
        "Smart paging: short page (%d < %d), cursor unchanged", len(items), limit
    )
    return paging
