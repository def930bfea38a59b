"""
Repository layer: SQLAlchemy persistence for conversations, contacts and assignments.

Usage:
    from conversation_engine.repositories import ConversationRepository, AssignmentRepository
"""

from .base_repository import BaseRepository
from .assignment_repository import AssignmentRepository
from .campaign_contact_repository import CampaignContactRepository
from .conversation_repository import ConversationRepository

__all__ = [
    "BaseRepository",
    "AssignmentRepository",
    "CampaignContactRepository",
    "ConversationRepository",
]
