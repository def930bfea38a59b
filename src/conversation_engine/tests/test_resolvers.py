from datetime import datetime

from conversation_engine.resolvers import RESOLVERS
from conversation_engine.schemas import PageInfo, PaginatedConversations

CONVERSATION_ROW = {
    "cc_id": 11,
    "cc_first_name": "Grace",
    "cc_last_name": "Hopper",
    "cell": "+15551234567",
    "message_status": "needsResponse",
    "updated_at": "2024-02-03T04:05:06",
    "u_id": 4,
    "u_first_name": "Alan",
    "u_last_name": "Turing",
    "u_role": "TEXTER",
    "cmp_id": 2,
    "title": "Spring Outreach",
    "messages": [],
    "organization_id": 1,
}


def test_paginated_conversations_fields():
    page = PaginatedConversations(conversations=[CONVERSATION_ROW], page_info=PageInfo(limit=10, offset=0, total=1))
    resolvers = RESOLVERS["PaginatedConversations"]

    assert resolvers["conversations"](page) == [CONVERSATION_ROW]
    assert resolvers["pageInfo"](page).total == 1


def test_page_info_absent():
    assert RESOLVERS["PaginatedConversations"]["pageInfo"](PaginatedConversations()) is None


def test_texter_projection():
    texter = RESOLVERS["Conversation"]["texter"](CONVERSATION_ROW)

    assert texter["id"] == 4
    assert texter["first_name"] == "Alan"
    assert texter["last_name"] == "Turing"
    assert texter["role"] == "TEXTER"


def test_contact_projection_parses_updated_at():
    contact = RESOLVERS["Conversation"]["contact"](CONVERSATION_ROW)

    assert contact["id"] == 11
    assert contact["first_name"] == "Grace"
    assert contact["last_name"] == "Hopper"
    assert contact["cell"] == "+15551234567"
    assert contact["updated_at"] == datetime(2024, 2, 3, 4, 5, 6)


def test_campaign_projection():
    campaign = RESOLVERS["Conversation"]["campaign"](CONVERSATION_ROW)

    assert campaign["id"] == 2
    assert campaign["title"] == "Spring Outreach"
