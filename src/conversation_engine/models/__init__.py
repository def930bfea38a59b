r"""
Single import point for the ORM models.

Importing this package registers every table on `Base.metadata`, which
`create_all()` in the tests relies on.

Example:
    from conversation_engine.models import CampaignContact, Assignment, Message
"""

from .user import Organization, User, UserOrganization
from .campaign import Campaign
from .assignment import Assignment
from .campaign_contact import CampaignContact
from .message import Message
from .tag import Tag, TagCampaignContact

__all__ = [
    "Organization",
    "User",
    "UserOrganization",
    "Campaign",
    "Assignment",
    "CampaignContact",
    "Message",
    "Tag",
    "TagCampaignContact",
]
