from .filters import (
    UNASSIGNED_TEXTER_ID,
    ANY_TAG,
    SUPPRESSED_TAG_PREFIX,
    CampaignsFilter,
    AssignmentsFilter,
    ContactsFilter,
    ConversationFilter,
)
from .conversations import UNKNOWN_TOTAL, Cursor, PageInfo, PaginatedConversations, ReassignedChunk

__all__ = [
    "UNASSIGNED_TEXTER_ID",
    "ANY_TAG",
    "SUPPRESSED_TAG_PREFIX",
    "CampaignsFilter",
    "AssignmentsFilter",
    "ContactsFilter",
    "ConversationFilter",
    "UNKNOWN_TOTAL",
    "Cursor",
    "PageInfo",
    "PaginatedConversations",
    "ReassignedChunk",
]
