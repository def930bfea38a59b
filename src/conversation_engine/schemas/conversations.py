"""
Result envelopes for the conversation queries and the reassignment service.
"""

from typing import Any

from pydantic import BaseModel, Field


# Reported as the total when the count query times out or fails ("a lot")
UNKNOWN_TOTAL = 9999


class Cursor(BaseModel):
    """Limit/offset pagination window. Both unset means no paging."""
    limit: int | None = None
    offset: int | None = None

    @property
    def is_paged(self) -> bool:
        return bool(self.limit or self.offset)


class PageInfo(BaseModel):
    limit: int | None = None
    offset: int | None = None
    total: int


class PaginatedConversations(BaseModel):
    """
    One page of conversations.

    Each conversation is the flat, aliased detail row of its contact (cc_id,
    cc_first_name, u_id, cmp_id, ...) plus `messages`, `organization_id` and,
    when tags were requested and the contact has any, `tags`. The resolvers in
    `conversation_engine.resolvers` project texter/contact/campaign views out of
    that row.

    `messages` is ordered by message id and is empty for a contact that has
    never been messaged (no all-NULL placeholder message).
    """
    conversations: list[dict[str, Any]] = Field(default_factory=list)
    page_info: PageInfo | None = None


class ReassignedChunk(BaseModel):
    """
    Outcome of one chunked contact update during reassignment.

    A campaign split into N chunks yields N entries sharing one assignment id.
    `cache_failures` lists contact ids whose cache refresh raised.
    """
    campaign_id: int
    assignment_id: int | None
    contact_count: int
    cache_failures: list[int] = Field(default_factory=list)

    def as_resolver_payload(self) -> dict[str, Any]:
        return {
            "campaignId": self.campaign_id,
            "assignmentId": str(self.assignment_id) if self.assignment_id is not None else None,
        }


__all__ = [
    "UNKNOWN_TOTAL",
    "Cursor",
    "PageInfo",
    "PaginatedConversations",
    "ReassignedChunk",
]
