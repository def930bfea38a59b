"""
Every conversation query shares `build_conversations_query`; these tests run the
id projection against the seeded world and compare the matched contact ids.
"""

import pytest
from sqlalchemy import select

from conversation_engine.models import CampaignContact
from conversation_engine.queries import build_conversations_query
from conversation_engine.schemas import ConversationFilter


async def matching_ids(db, organization_id, filters: dict | None = None) -> set[int]:
    conversation_filter = ConversationFilter.model_validate(filters) if filters is not None else None
    stmt = build_conversations_query(select(CampaignContact.id), organization_id, conversation_filter)
    result = await db.execute(stmt)
    return set(result.scalars().all())


def ids(*contacts) -> set[int]:
    return {c.id for c in contacts}


@pytest.mark.asyncio
class TestOrganizationScope:

    async def test_no_filter_returns_every_contact_of_the_organization(self, db_session, conversation_world):
        w = conversation_world
        assert await matching_ids(db_session, w.org.id) == ids(w.c1, w.c2, w.c3, w.c4)

    async def test_other_organization_only_sees_its_own_contacts(self, db_session, conversation_world):
        w = conversation_world
        assert await matching_ids(db_session, w.other_org.id, {}) == ids(w.c5)

    async def test_string_organization_id_is_accepted(self, db_session, conversation_world):
        w = conversation_world
        assert await matching_ids(db_session, str(w.org.id)) == ids(w.c1, w.c2, w.c3, w.c4)


@pytest.mark.asyncio
class TestCampaignsFilter:

    async def test_is_archived_false(self, db_session, conversation_world):
        w = conversation_world
        found = await matching_ids(db_session, w.org.id, {"campaignsFilter": {"isArchived": False}})
        assert found == ids(w.c1, w.c2, w.c3)

    async def test_campaign_id(self, db_session, conversation_world):
        w = conversation_world
        found = await matching_ids(db_session, w.org.id, {"campaignsFilter": {"campaignId": w.fall.id}})
        assert found == ids(w.c4)

    async def test_campaign_id_wins_over_campaign_ids(self, db_session, conversation_world):
        w = conversation_world
        found = await matching_ids(
            db_session,
            w.org.id,
            {"campaignsFilter": {"campaignId": w.fall.id, "campaignIds": [w.spring.id]}},
        )
        assert found == ids(w.c4)

    async def test_empty_campaign_ids_is_ignored(self, db_session, conversation_world):
        w = conversation_world
        found = await matching_ids(db_session, w.org.id, {"campaignsFilter": {"campaignIds": []}})
        assert found == ids(w.c1, w.c2, w.c3, w.c4)

    async def test_search_string_matches_title_substring(self, db_session, conversation_world):
        w = conversation_world
        found = await matching_ids(db_session, w.org.id, {"campaignsFilter": {"searchString": "GOTV"}})
        assert found == ids(w.c4)


@pytest.mark.asyncio
class TestAssignmentsFilter:

    async def test_unassigned_sentinel(self, db_session, conversation_world):
        w = conversation_world
        found = await matching_ids(db_session, w.org.id, {"assignmentsFilter": {"texterId": -2}})
        assert found == ids(w.c3)

    async def test_unassigned_sentinel_as_string(self, db_session, conversation_world):
        w = conversation_world
        found = await matching_ids(db_session, w.org.id, {"assignmentsFilter": {"texterId": "-2"}})
        assert found == ids(w.c3)

    async def test_texter_matches_assignment_owner(self, db_session, conversation_world):
        w = conversation_world
        found = await matching_ids(db_session, w.org.id, {"assignmentsFilter": {"texterId": w.texter_a.id}})
        assert found == ids(w.c1, w.c2)

    async def test_sender_matches_message_author_instead_of_owner(self, db_session, conversation_world):
        """texter_b owns only c4 but also sent the message on c2."""
        w = conversation_world
        found = await matching_ids(
            db_session,
            w.org.id,
            {"assignmentsFilter": {"texterId": w.texter_b.id, "sender": True}},
        )
        assert found == ids(w.c2, w.c4)


@pytest.mark.asyncio
class TestMessageTextFilter:

    async def test_substring_match_on_any_message(self, db_session, conversation_world):
        w = conversation_world
        assert await matching_ids(db_session, w.org.id, {"messageTextFilter": "Vote"}) == ids(w.c4)

    async def test_combined_with_sender(self, db_session, conversation_world):
        w = conversation_world
        found = await matching_ids(
            db_session,
            w.org.id,
            {"messageTextFilter": "in", "assignmentsFilter": {"texterId": w.texter_b.id, "sender": True}},
        )
        # texter_b also sent "Vote tomorrow" on c4, which does not match
        assert found == ids(w.c2)


@pytest.mark.asyncio
class TestContactsFilter:

    async def test_message_status_list(self, db_session, conversation_world):
        w = conversation_world
        found = await matching_ids(db_session, w.org.id, {"contactsFilter": {"messageStatus": "convo,closed"}})
        assert found == ids(w.c2, w.c4)

    async def test_needs_message_or_response(self, db_session, conversation_world):
        w = conversation_world
        found = await matching_ids(
            db_session, w.org.id, {"contactsFilter": {"messageStatus": "needsMessageOrResponse"}}
        )
        assert found == ids(w.c1, w.c3)

    async def test_updated_at_window(self, db_session, conversation_world):
        w = conversation_world
        found = await matching_ids(
            db_session,
            w.org.id,
            {"contactsFilter": {"updatedAtGt": "2024-02-01T00:00:00", "updatedAtLt": "2024-04-01T00:00:00"}},
        )
        assert found == ids(w.c2, w.c3)

    async def test_is_opted_out_false_still_filters(self, db_session, conversation_world):
        w = conversation_world
        found = await matching_ids(db_session, w.org.id, {"contactsFilter": {"isOptedOut": False}})
        assert found == ids(w.c1, w.c2, w.c3)

    async def test_is_opted_out_true(self, db_session, conversation_world):
        w = conversation_world
        found = await matching_ids(db_session, w.org.id, {"contactsFilter": {"isOptedOut": True}})
        assert found == ids(w.c4)

    async def test_absent_is_opted_out_is_a_no_op(self, db_session, conversation_world):
        w = conversation_world
        found = await matching_ids(db_session, w.org.id, {"contactsFilter": {}})
        assert found == ids(w.c1, w.c2, w.c3, w.c4)

    async def test_error_code_zero_means_no_error(self, db_session, conversation_world):
        w = conversation_world
        found = await matching_ids(db_session, w.org.id, {"contactsFilter": {"errorCode": [0]}})
        assert found == ids(w.c1, w.c3)

    async def test_leading_zero_ignores_remaining_codes(self, db_session, conversation_world):
        w = conversation_world
        found = await matching_ids(db_session, w.org.id, {"contactsFilter": {"errorCode": [0, 7]}})
        assert found == ids(w.c1, w.c3)

    async def test_error_code_list(self, db_session, conversation_world):
        w = conversation_world
        found = await matching_ids(db_session, w.org.id, {"contactsFilter": {"errorCode": [7, 30]}})
        assert found == ids(w.c2, w.c4)

    async def test_empty_tags_means_untagged(self, db_session, conversation_world):
        w = conversation_world
        found = await matching_ids(db_session, w.org.id, {"contactsFilter": {"tags": []}})
        assert found == ids(w.c3)

    async def test_wildcard_tag_means_any_tag(self, db_session, conversation_world):
        w = conversation_world
        found = await matching_ids(db_session, w.org.id, {"contactsFilter": {"tags": ["*"]}})
        assert found == ids(w.c1, w.c2, w.c4)

    async def test_tag_ids(self, db_session, conversation_world):
        w = conversation_world
        found = await matching_ids(
            db_session, w.org.id, {"contactsFilter": {"tags": [str(w.tag_y.id), str(w.tag_z.id)]}}
        )
        assert found == ids(w.c2, w.c4)

    async def test_integer_tag_ids(self, db_session, conversation_world):
        w = conversation_world
        found = await matching_ids(
            db_session,
            w.org.id,
            {"contactsFilter": {"tags": [w.tag_y.id, w.tag_z.id], "suppressedTags": [w.tag_x.id]}},
        )
        assert found == ids(w.c2)

    async def test_suppressed_tags_exclude_tagged_contacts(self, db_session, conversation_world):
        w = conversation_world
        found = await matching_ids(
            db_session, w.org.id, {"contactsFilter": {"suppressedTags": [f"s_{w.tag_x.id}"]}}
        )
        assert found == ids(w.c2, w.c3)

    async def test_tags_and_suppressed_tags_combine(self, db_session, conversation_world):
        w = conversation_world
        found = await matching_ids(
            db_session,
            w.org.id,
            {"contactsFilter": {"tags": [str(w.tag_x.id)], "suppressedTags": [f"s_{w.tag_z.id}"]}},
        )
        assert found == ids(w.c1)

    async def test_order_by_raw_is_applied(self, db_session, conversation_world):
        w = conversation_world
        stmt = build_conversations_query(
            select(CampaignContact.id),
            w.org.id,
            ConversationFilter.model_validate({"contactsFilter": {"orderByRaw": "campaign_contact.id desc"}}),
        )
        result = await db_session.execute(stmt)
        assert list(result.scalars().all()) == [w.c4.id, w.c3.id, w.c2.id, w.c1.id]


class TestQueryShape:
    """The detail query must not carry the filtering message join."""

    def test_sender_filter_joins_msgfilter_for_ids(self):
        filters = ConversationFilter.model_validate({"assignmentsFilter": {"texterId": 5, "sender": True}})
        stmt = build_conversations_query(select(CampaignContact.id), 1, filters)
        assert "msgfilter" in str(stmt)

    def test_detail_shape_never_joins_msgfilter(self):
        filters = ConversationFilter.model_validate(
            {"messageTextFilter": "hello", "assignmentsFilter": {"texterId": 5, "sender": True}}
        )
        stmt = build_conversations_query(select(CampaignContact.id), 1, filters, for_data=True)
        assert "msgfilter" not in str(stmt)

    def test_detail_shape_always_outer_joins_texter(self):
        stmt = build_conversations_query(select(CampaignContact.id), 1, None, for_data=True)
        sql = str(stmt)
        assert "LEFT OUTER JOIN assignment" in sql
        assert "LEFT OUTER JOIN user_organization" in sql

    def test_id_shape_skips_texter_joins_without_texter_filter(self):
        stmt = build_conversations_query(select(CampaignContact.id), 1, ConversationFilter())
        assert "JOIN assignment" not in str(stmt)
