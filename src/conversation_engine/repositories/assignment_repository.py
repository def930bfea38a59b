"""
Assignment lookup and lazy creation for the reassignment service.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from conversation_engine.models import Assignment
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class AssignmentRepository(BaseRepository[Assignment]):

    def __init__(self, db: AsyncSession):
        super().__init__(Assignment, db)

    async def find_for_texter(self, user_id: int, campaign_id: int) -> Assignment | None:
        """Existing assignment of `user_id` on `campaign_id`; the oldest one wins if several exist."""
        return await self.find_one_by(user_id=user_id, campaign_id=campaign_id)

    async def get_or_create(self, user_id: int, campaign_id: int, max_contacts: int | None = 0) -> Assignment:
        """
        Return the texter's assignment on the campaign, creating it with
        `max_contacts` when missing. The new row is flushed, not committed.
        """
        assignment = await self.find_for_texter(user_id, campaign_id)
        if assignment is not None:
            return assignment

        assignment = await self.create(user_id=user_id, campaign_id=campaign_id, max_contacts=max_contacts)
        logger.info(
            "assignment.created",
            extra={"assignment_id": assignment.id, "user_id": user_id, "campaign_id": campaign_id},
        )
        return assignment
