"""
Entry points for a resolver layer.

Each function opens its own sessions from `conversation_engine.database.session`:
the conversation page reads from the replica, while the index builder and the
reassignment write path use the primary.

    from conversation_engine import api

    page = await api.get_conversations({"limit": 50, "offset": 0}, org_id, {"contactsFilter": {...}})
    moved = await api.reassign_filtered_conversations(org_id, filters, new_texter_id=17)
"""

from typing import Any, Mapping, Sequence

from sqlalchemy import Select

from conversation_engine.cache.assignment_cache import AssignmentCache, get_assignment_cache
from conversation_engine.config import get_settings
from conversation_engine.database.session import session_scope
from conversation_engine.repositories.conversation_repository import ConversationRepository
from conversation_engine.schemas import ConversationFilter, Cursor, PaginatedConversations
from conversation_engine.services.reassignment import ReassignmentService


def _as_filter(filters: ConversationFilter | Mapping[str, Any] | None) -> ConversationFilter:
    if isinstance(filters, ConversationFilter):
        return filters
    return ConversationFilter.model_validate(filters or {})


def _as_cursor(cursor: Cursor | Mapping[str, Any] | None) -> Cursor:
    if isinstance(cursor, Cursor):
        return cursor
    return Cursor.model_validate(cursor or {})


async def get_conversations(
    cursor: Cursor | Mapping[str, Any] | None,
    organization_id: int | str,
    filters: ConversationFilter | Mapping[str, Any] | None,
    *,
    include_tags: bool = False,
    just_id_query: bool = False,
) -> PaginatedConversations | Select:
    """Load a conversation page. See `ConversationRepository.get_conversations`."""
    async with session_scope(readonly=True) as read_db:
        return await ConversationRepository(read_db).get_conversations(
            _as_cursor(cursor),
            organization_id,
            _as_filter(filters),
            include_tags=include_tags,
            just_id_query=just_id_query,
        )


async def get_campaign_id_contact_ids_maps(
    organization_id: int | str,
    filters: ConversationFilter | Mapping[str, Any] | None,
) -> dict[int, list[int]]:
    async with session_scope() as db:
        return await ConversationRepository(db).get_campaign_id_contact_ids_maps(organization_id, _as_filter(filters))


async def reassign_conversations(
    campaign_id_contact_ids_map: Mapping[int, Sequence[int]],
    new_texter_id: int | str | None,
    cache: AssignmentCache | None = None,
) -> list[dict[str, Any]]:
    """
    Reassign contacts and report `{"campaignId", "assignmentId"}` per chunk written.

    `assignmentId` is the id as a string, or None when unassigning. The list
    may be partial; see `ReassignmentService.reassign_conversations`.
    """
    settings = get_settings()
    owns_cache = cache is None
    cache = cache or get_assignment_cache(settings)
    try:
        async with session_scope() as db:
            service = ReassignmentService(db, cache=cache, settings=settings)
            chunks = await service.reassign_conversations(campaign_id_contact_ids_map, new_texter_id)
    finally:
        if owns_cache:
            await cache.close()
    return [chunk.as_resolver_payload() for chunk in chunks]


async def reassign_filtered_conversations(
    organization_id: int | str,
    filters: ConversationFilter | Mapping[str, Any] | None,
    new_texter_id: int | str | None,
    cache: AssignmentCache | None = None,
) -> list[dict[str, Any]]:
    """Reassign every contact matching `filters` (index builder, then reassignment)."""
    campaign_id_contact_ids_map = await get_campaign_id_contact_ids_maps(organization_id, filters)
    return await reassign_conversations(campaign_id_contact_ids_map, new_texter_id, cache=cache)


__all__ = [
    "get_conversations",
    "get_campaign_id_contact_ids_maps",
    "reassign_conversations",
    "reassign_filtered_conversations",
]
