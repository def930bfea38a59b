"""
Field resolvers for the PaginatedConversations and Conversation types.

A conversation is carried as its flat aliased detail row; the sub-object
resolvers rename the aliased columns back to the field names the schema uses.
"""

from typing import Any, Callable, Mapping

from conversation_engine.schemas import PageInfo, PaginatedConversations
from conversation_engine.utils.row_mapping import map_query_fields_to_resolver_fields

TEXTER_FIELDS = {
    "u_id": "id",
    "u_first_name": "first_name",
    "u_last_name": "last_name",
    "u_role": "role",
}

CONTACT_FIELDS = {
    "cc_id": "id",
    "cc_first_name": "first_name",
    "cc_last_name": "last_name",
}

CAMPAIGN_FIELDS = {"cmp_id": "id"}


def paginated_conversations_conversations(query_result: PaginatedConversations) -> list[dict[str, Any]]:
    return query_result.conversations


def paginated_conversations_page_info(query_result: PaginatedConversations) -> PageInfo | None:
    return query_result.page_info


def conversation_texter(query_result: Mapping[str, Any]) -> dict[str, Any]:
    return map_query_fields_to_resolver_fields(query_result, TEXTER_FIELDS)


def conversation_contact(query_result: Mapping[str, Any]) -> dict[str, Any]:
    return map_query_fields_to_resolver_fields(query_result, CONTACT_FIELDS)


def conversation_campaign(query_result: Mapping[str, Any]) -> dict[str, Any]:
    return map_query_fields_to_resolver_fields(query_result, CAMPAIGN_FIELDS)


RESOLVERS: dict[str, dict[str, Callable[..., Any]]] = {
    "PaginatedConversations": {
        "conversations": paginated_conversations_conversations,
        "pageInfo": paginated_conversations_page_info,
    },
    "Conversation": {
        "texter": conversation_texter,
        "contact": conversation_contact,
        "campaign": conversation_campaign,
    },
}
