"""
Conversation repository: the paginated conversation list and the
campaign/contact index used by reassignment.

A "conversation" is not a table. It is a campaign contact joined with its
campaign, its assignment's texter and its whole message thread. Loading a page
takes three coordinated queries that share one filter predicate
(`build_conversations_query`):

1. ids     - `campaign_contact.id` for the page (ordered, limited, offset),
              one row per contact even when a message filter is joined
2. detail  - one row per message of those contacts, collapsed into conversations
3. count   - distinct matching contacts with no paging; bounded by a timeout

plus an optional tag lookup. Ids, detail and tags must succeed; the count
degrades to `UNKNOWN_TOTAL` instead of failing the page.

A contact without messages comes back with `messages == []`: the all-NULL row
produced by the detail query's outer join is not turned into a message.
"""

import asyncio
import time
import logging
from itertools import groupby
from operator import itemgetter
from typing import Any, Iterable, Mapping

from sqlalchemy import Select, distinct, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from conversation_engine.config import Settings, get_settings
from conversation_engine.exceptions.base import RepositoryError
from conversation_engine.models import (
    Assignment,
    Campaign,
    CampaignContact,
    Message,
    Tag,
    TagCampaignContact,
    User,
    UserOrganization,
)
from conversation_engine.queries import build_conversations_query, joins_message_filter
from conversation_engine.schemas import (
    UNKNOWN_TOTAL,
    ConversationFilter,
    Cursor,
    PageInfo,
    PaginatedConversations,
)
from conversation_engine.utils.row_mapping import map_query_fields_to_resolver_fields
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)

# Explicit labels keep contact/user/campaign/message columns from colliding
DETAIL_COLUMNS = (
    CampaignContact.id.label("cc_id"),
    CampaignContact.first_name.label("cc_first_name"),
    CampaignContact.last_name.label("cc_last_name"),
    CampaignContact.cell.label("cell"),
    CampaignContact.error_code.label("error_code"),
    CampaignContact.message_status.label("message_status"),
    CampaignContact.is_opted_out.label("is_opted_out"),
    CampaignContact.updated_at.label("updated_at"),
    Assignment.id.label("assignment_id"),
    User.id.label("u_id"),
    User.first_name.label("u_first_name"),
    User.last_name.label("u_last_name"),
    UserOrganization.role.label("u_role"),
    Campaign.id.label("cmp_id"),
    Campaign.title.label("title"),
    Campaign.due_by.label("due_by"),
    Assignment.id.label("ass_id"),
    Message.id.label("mess_id"),
    Message.text.label("text"),
    Message.user_number.label("user_number"),
    Message.contact_number.label("contact_number"),
    Message.created_at.label("created_at"),
    Message.is_from_contact.label("is_from_contact"),
)

MESSAGE_FIELDS = ("mess_id", "text", "user_number", "contact_number", "created_at", "is_from_contact")


def collapse_conversation_rows(rows: Iterable[Mapping[str, Any]], organization_id: int | str) -> list[dict[str, Any]]:
    """
    Fold detail rows (one per message) into one dict per contact.

    A new conversation starts whenever `cc_id` differs from the previous row's,
    so rows must arrive grouped by contact. Each conversation carries the
    non-message columns of its first row, `organization_id`, and `messages`
    in row order. The all-NULL message of a contact without messages is dropped.
    """
    conversations = []
    for _, group in groupby(rows, key=itemgetter("cc_id")):
        group = list(group)
        conversation = {k: v for k, v in group[0].items() if k not in MESSAGE_FIELDS}
        conversation["messages"] = [
            map_query_fields_to_resolver_fields({k: row[k] for k in MESSAGE_FIELDS}, {"mess_id": "id"})
            for row in group
            if row["mess_id"] is not None
        ]
        conversation["organization_id"] = int(organization_id)
        conversations.append(conversation)
    return conversations


def group_contact_ids_by_campaign(rows: Iterable[Mapping[str, Any]]) -> dict[int, list[int]]:
    """
    Build `{cmp_id: [cc_id, ...]}` from rows ordered by `cc_id`.

    Only a contact id that differs from the immediately preceding row's is
    appended: adjacent repeats collapse, non-adjacent ones do not.
    """
    index: dict[int, list[int]] = {}
    previous = None
    for row in rows:
        cc_id = row["cc_id"]
        if cc_id != previous:
            previous = cc_id
            index.setdefault(row["cmp_id"], []).append(cc_id)
    return index


class ConversationRepository(BaseRepository[CampaignContact]):
    """
    Read side of the conversation list.

    Args:
        db: primary (read-write) session; used by the index builder, whose
            output feeds writes.
        read_db: read-replica session for the page queries. Defaults to `db`.
        settings: defaults to `get_settings()`.
    """

    def __init__(self, db: AsyncSession, read_db: AsyncSession | None = None, settings: Settings | None = None):
        super().__init__(CampaignContact, db)
        self.read_db = read_db or db
        self.settings = settings or get_settings()

    # =================================================================================================================
    # Conversation page
    # =================================================================================================================

    async def get_conversations(
        self,
        cursor: Cursor | None,
        organization_id: int | str,
        filters: ConversationFilter | None,
        *,
        include_tags: bool = False,
        just_id_query: bool = False,
    ) -> PaginatedConversations | Select:
        """
        Load one page of conversations.

        Args:
            cursor: limit/offset window; None or an empty cursor returns every match.
            organization_id: organization whose campaigns are searched.
            filters: composite filter; None matches everything in the organization.
            include_tags: attach `tags` ([{campaign_contact_id, name, id, value}])
                to conversations that have any.
            just_id_query: return the unexecuted contact-id `Select` instead
                (used by exports that stream ids themselves).

        Raises:
            RepositoryError: the id, detail or tag query failed.
        """
        cursor = cursor or Cursor()
        filters = filters or ConversationFilter()
        start = time.perf_counter()

        id_stmt = build_conversations_query(
            select(CampaignContact.id.label("cc_id")), organization_id, filters
        )
        # msgfilter yields a row per matching message; pages and the DISTINCT count need one per contact
        if joins_message_filter(filters):
            id_stmt = id_stmt.group_by(CampaignContact.id)
        if just_id_query:
            return id_stmt

        if cursor.is_paged:
            if not self.settings.CONVERSATIONS_RECENT:
                id_stmt = id_stmt.order_by(CampaignContact.id.desc())
            id_stmt = id_stmt.limit(cursor.limit).offset(cursor.offset)

        result = await self._execute(id_stmt, "conversations.ids", organization_id)
        cc_ids = list(result.scalars().all())
        logger.debug(
            "conversations.ids.fetched",
            extra={
                "organization_id": organization_id,
                "limit": cursor.limit,
                "offset": cursor.offset,
                "id_count": len(cc_ids),
                "duration_ms": int((time.perf_counter() - start) * 1000),
            },
        )

        conversations: list[dict[str, Any]] = []
        if cc_ids:
            detail_stmt = (
                build_conversations_query(select(*DETAIL_COLUMNS), organization_id, filters, for_data=True)
                .where(CampaignContact.id.in_(cc_ids))
                .outerjoin(Message, Message.campaign_contact_id == CampaignContact.id)
                .order_by(CampaignContact.id.desc(), Message.id)
            )
            result = await self._execute(detail_stmt, "conversations.detail", organization_id)
            conversations = collapse_conversation_rows(result.mappings().all(), organization_id)
            logger.debug(
                "conversations.detail.fetched",
                extra={
                    "organization_id": organization_id,
                    "conversation_count": len(conversations),
                    "duration_ms": int((time.perf_counter() - start) * 1000),
                },
            )

            if include_tags:
                await self._attach_tags(conversations, cc_ids, organization_id)

        count_stmt = build_conversations_query(
            select(func.count(distinct(CampaignContact.id))), organization_id, filters
        ).order_by(None)
        total = await self._count_conversations(count_stmt, organization_id)

        logger.info(
            "conversations.page.loaded",
            extra={
                "organization_id": organization_id,
                "conversation_count": len(conversations),
                "total": total,
                "duration_ms": int((time.perf_counter() - start) * 1000),
            },
        )
        return PaginatedConversations(
            conversations=conversations,
            page_info=PageInfo(limit=cursor.limit, offset=cursor.offset, total=total),
        )

    async def _attach_tags(self, conversations: list[dict[str, Any]], cc_ids: list[int], organization_id) -> None:
        stmt = (
            select(
                TagCampaignContact.campaign_contact_id.label("campaign_contact_id"),
                Tag.name.label("name"),
                Tag.id.label("id"),
                TagCampaignContact.value.label("value"),
            )
            .select_from(TagCampaignContact)
            .join(Tag, Tag.id == TagCampaignContact.tag_id)
            .where(TagCampaignContact.campaign_contact_id.in_(cc_ids))
        )
        result = await self._execute(stmt, "conversations.tags", organization_id)

        contact_tags: dict[int, list[dict[str, Any]]] = {}
        for row in result.mappings().all():
            contact_tags.setdefault(int(row["campaign_contact_id"]), []).append(dict(row))

        for conversation in conversations:
            tags = contact_tags.get(conversation["cc_id"])
            if tags:
                conversation["tags"] = tags

    async def _count_conversations(self, stmt: Select, organization_id) -> int:
        """Run the count under CONVERSATIONS_COUNT_TIMEOUT_MS; any failure yields UNKNOWN_TOTAL."""
        start = time.perf_counter()
        try:
            # SQLite cannot cancel a running statement
            if self.read_db.get_bind().dialect.name == "sqlite":
                total = await self.read_db.scalar(stmt)
            else:
                total = await asyncio.wait_for(
                    self.read_db.scalar(stmt),
                    timeout=self.settings.CONVERSATIONS_COUNT_TIMEOUT_MS / 1000,
                )
        except Exception as e:
            logger.warning(
                "conversations.count.failed",
                extra={
                    "organization_id": organization_id,
                    "error": repr(e),
                    "duration_ms": int((time.perf_counter() - start) * 1000),
                },
            )
            await self._rollback_read_session()
            return UNKNOWN_TOTAL

        logger.debug(
            "conversations.count.done",
            extra={
                "organization_id": organization_id,
                "total": total,
                "duration_ms": int((time.perf_counter() - start) * 1000),
            },
        )
        return int(total or 0)

    async def _rollback_read_session(self) -> None:
        try:
            await self.read_db.rollback()
        except Exception:
            logger.exception("conversations.count.rollback_failed")

    async def _execute(self, stmt: Select, event: str, organization_id):
        try:
            return await self.read_db.execute(stmt)
        except Exception as e:
            logger.error(
                f"{event}.failed",
                extra={"organization_id": organization_id, "error": repr(e)},
                exc_info=True,
            )
            raise RepositoryError("Failed to load conversations") from e

    # =================================================================================================================
    # Campaign/contact index
    # =================================================================================================================

    async def get_campaign_id_contact_ids_maps(
        self,
        organization_id: int | str,
        filters: ConversationFilter | None,
    ) -> dict[int, list[int]]:
        """
        Map each campaign id to the ids of its contacts matching `filters`,
        in ascending contact id order. Read from the primary database.

        Raises:
            RepositoryError: the query failed.
        """
        start = time.perf_counter()
        stmt = build_conversations_query(
            select(CampaignContact.id.label("cc_id"), Campaign.id.label("cmp_id")),
            organization_id,
            filters,
        ).order_by(CampaignContact.id)

        try:
            result = await self.db.execute(stmt)
        except Exception as e:
            logger.error(
                "conversations.index.failed",
                extra={"organization_id": organization_id, "error": repr(e)},
                exc_info=True,
            )
            raise RepositoryError("Failed to load campaign contact ids") from e

        index = group_contact_ids_by_campaign(result.mappings().all())
        logger.info(
            "conversations.index.built",
            extra={
                "organization_id": organization_id,
                "campaign_count": len(index),
                "contact_count": sum(len(ids) for ids in index.values()),
                "duration_ms": int((time.perf_counter() - start) * 1000),
            },
        )
        return index
