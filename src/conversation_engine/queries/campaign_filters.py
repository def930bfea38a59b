"""
Campaign-membership predicate shared by the conversation queries.
"""

from sqlalchemy import Select

from conversation_engine.models import Campaign
from conversation_engine.schemas.filters import CampaignsFilter


def add_campaigns_filter_to_query(
    stmt: Select,
    campaigns_filter: CampaignsFilter | None,
    organization_id: int | str | None,
) -> Select:
    """
    Restrict `stmt` (which must already join `campaign`) to the organization's
    campaigns, narrowed further by `campaigns_filter` when given.

    - `is_archived` is applied only when the caller set it.
    - `campaign_id` wins over `campaign_ids`; an empty `campaign_ids` is ignored.
    - `search_string` matches the campaign title as a substring.
    """
    if organization_id:
        stmt = stmt.where(Campaign.organization_id == int(organization_id))

    if campaigns_filter is None:
        return stmt

    if campaigns_filter.is_set("is_archived") and campaigns_filter.is_archived is not None:
        stmt = stmt.where(Campaign.is_archived == campaigns_filter.is_archived)

    if campaigns_filter.campaign_id is not None:
        stmt = stmt.where(Campaign.id == campaigns_filter.campaign_id)
    elif campaigns_filter.campaign_ids:
        stmt = stmt.where(Campaign.id.in_(campaigns_filter.campaign_ids))

    if campaigns_filter.search_string:
        stmt = stmt.where(Campaign.title.like(f"%{campaigns_filter.search_string}%"))

    return stmt
