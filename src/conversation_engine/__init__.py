"""
conversation_engine: filterable, paginated conversation retrieval and bulk
texter reassignment over the campaign/contact/message schema.
"""

from .api import (
    get_conversations,
    get_campaign_id_contact_ids_maps,
    reassign_conversations,
    reassign_filtered_conversations,
)
from .resolvers import RESOLVERS

__all__ = [
    "get_conversations",
    "get_campaign_id_contact_ids_maps",
    "reassign_conversations",
    "reassign_filtered_conversations",
    "RESOLVERS",
]
