"""
Composable SQLAlchemy query fragments for the conversation list.

Usage:
    from conversation_engine.queries import build_conversations_query
"""

from .campaign_filters import add_campaigns_filter_to_query
from .contact_filters import add_message_status_filter_irrespective_of_past_due
from .conversation_filters import build_conversations_query, joins_message_filter, msgfilter

__all__ = [
    "add_campaigns_filter_to_query",
    "add_message_status_filter_irrespective_of_past_due",
    "build_conversations_query",
    "joins_message_filter",
    "msgfilter",
]
