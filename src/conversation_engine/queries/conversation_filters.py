"""
Join and WHERE clause builder shared by every conversation query.

The id query, the detail query, the count query and the campaign/contact index
query must all select the same contacts, so they all go through
`build_conversations_query()`. The function never executes anything: it takes
a `Select` carrying the caller's projection and returns it with FROM, JOIN,
WHERE and (optionally) ORDER BY clauses added.

`for_data` distinguishes the two shapes:

| Concern                                  | for_data=False (ids/count/index) | for_data=True (detail)     |
| ---------------------------------------- | -------------------------------- | -------------------------- |
| assignment/user/user_organization joins  | only with a texter filter        | always (LEFT OUTER)        |
| `message AS msgfilter` join              | with text or sender filters      | never                      |

The detail query outer-joins `message` itself to fetch every message of each
contact, so the filtering join must stay out of it.
"""

from sqlalchemy import Select, and_, exists, select, text
from sqlalchemy.orm import aliased

from conversation_engine.models import (
    Assignment,
    Campaign,
    CampaignContact,
    Message,
    TagCampaignContact,
    User,
    UserOrganization,
)
from conversation_engine.schemas.filters import ANY_TAG, UNASSIGNED_TEXTER_ID, ConversationFilter

from .campaign_filters import add_campaigns_filter_to_query
from .contact_filters import add_message_status_filter_irrespective_of_past_due

# Second alias of `message`, used only to test whether a qualifying message exists
msgfilter = aliased(Message, name="msgfilter")


def _contact_tags_exist(tag_ids: list[int] | None = None):
    sub = select(TagCampaignContact.id).where(
        TagCampaignContact.campaign_contact_id == CampaignContact.id
    )
    if tag_ids is not None:
        sub = sub.where(TagCampaignContact.tag_id.in_(tag_ids))
    return exists(sub)


def joins_message_filter(filters: ConversationFilter | None) -> bool:
    """True when the id, count and index queries join `msgfilter`, one row per matching message."""
    if filters is None:
        return False
    assignments_filter = filters.assignments_filter
    return bool(filters.message_text_filter) or (
        assignments_filter is not None and assignments_filter.filters_by_sender
    )


def build_conversations_query(
    stmt: Select,
    organization_id: int | str,
    filters: ConversationFilter | None,
    *,
    for_data: bool = False,
) -> Select:
    """
    Apply the conversation joins and filter predicates to `stmt`.

    Args:
        stmt: A `select(...)` holding only the projection.
        organization_id: Organization whose campaigns are searched.
        filters: Composite filter; None (or any missing sub-filter) adds no constraint.
        for_data: True for the detail query (see module docstring).

    Returns:
        The composed, unexecuted `Select`.
    """
    filters = filters or ConversationFilter()
    assignments_filter = filters.assignments_filter
    contacts_filter = filters.contacts_filter
    message_text_filter = filters.message_text_filter

    stmt = stmt.select_from(CampaignContact).join(Campaign, Campaign.id == CampaignContact.campaign_id)
    stmt = add_campaigns_filter_to_query(stmt, filters.campaigns_filter, organization_id)

    by_assignment = assignments_filter is not None and assignments_filter.filters_by_assignment
    by_sender = assignments_filter is not None and assignments_filter.filters_by_sender

    # LEFT joins so contacts without an assignment survive
    if for_data or by_assignment:
        stmt = (
            stmt.outerjoin(Assignment, CampaignContact.assignment_id == Assignment.id)
            .outerjoin(User, Assignment.user_id == User.id)
            .outerjoin(
                UserOrganization,
                and_(
                    UserOrganization.user_id == User.id,
                    UserOrganization.organization_id == Campaign.organization_id,
                ),
            )
        )

    if by_assignment:
        if assignments_filter.texter_id == UNASSIGNED_TEXTER_ID:
            stmt = stmt.where(CampaignContact.assignment_id.is_(None))
        else:
            stmt = stmt.where(Assignment.user_id == assignments_filter.texter_id)

    if not for_data and joins_message_filter(filters):
        stmt = stmt.join(msgfilter, msgfilter.campaign_contact_id == CampaignContact.id)
        if message_text_filter:
            stmt = stmt.where(msgfilter.text.like(f"%{message_text_filter}%"))
        if by_sender and assignments_filter.texter_id:
            stmt = stmt.where(msgfilter.user_id == assignments_filter.texter_id)

    if contacts_filter is None:
        return stmt

    stmt = add_message_status_filter_irrespective_of_past_due(stmt, contacts_filter.message_status)

    if contacts_filter.updated_at_gt:
        stmt = stmt.where(CampaignContact.updated_at > contacts_filter.updated_at_gt)
    if contacts_filter.updated_at_lt:
        stmt = stmt.where(CampaignContact.updated_at < contacts_filter.updated_at_lt)

    # An explicit False must still filter; only an absent key is skipped
    if contacts_filter.is_set("is_opted_out"):
        stmt = stmt.where(CampaignContact.is_opted_out == contacts_filter.is_opted_out)

    if contacts_filter.error_code:
        # A leading 0 selects contacts without an error code, and only those
        if contacts_filter.error_code[0] == 0:
            stmt = stmt.where(CampaignContact.error_code.is_(None))
        else:
            stmt = stmt.where(CampaignContact.error_code.in_(contacts_filter.error_code))

    if contacts_filter.tags is not None:
        tags = contacts_filter.tags
        if len(tags) == 0:
            stmt = stmt.where(~_contact_tags_exist())
        elif tags == [ANY_TAG]:
            stmt = stmt.where(_contact_tags_exist())
        else:
            stmt = stmt.where(_contact_tags_exist(contacts_filter.tag_ids()))

    if contacts_filter.suppressed_tags:
        stmt = stmt.where(~_contact_tags_exist(contacts_filter.suppressed_tag_ids()))

    if contacts_filter.order_by_raw:
        stmt = stmt.order_by(text(contacts_filter.order_by_raw))

    return stmt
