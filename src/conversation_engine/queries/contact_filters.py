"""
Contact message-status predicate.
"""

from sqlalchemy import Select

from conversation_engine.models import CampaignContact

# Pseudo-status selecting contacts that are waiting on the texter either way
NEEDS_MESSAGE_OR_RESPONSE = "needsMessageOrResponse"


def message_statuses(message_status: str) -> list[str]:
    """Expand a message-status filter value into the concrete statuses it selects."""
    if message_status == NEEDS_MESSAGE_OR_RESPONSE:
        return ["needsResponse", "needsMessage"]
    return [status.strip() for status in message_status.split(",") if status.strip()]


def add_message_status_filter_irrespective_of_past_due(stmt: Select, message_status: str | None) -> Select:
    """
    Constrain `campaign_contact.message_status` to the requested statuses.

    Unlike the texter-facing todo query, no campaign due-date condition is
    added: a "needsMessage" contact matches whether or not its campaign is past due.
    """
    if not message_status:
        return stmt

    return stmt.where(CampaignContact.message_status.in_(message_statuses(message_status)))
