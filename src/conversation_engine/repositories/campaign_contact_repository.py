"""
Bulk writes against `campaign_contact`.
"""

import time
import logging

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from conversation_engine.exceptions.mapper import db_error_handler
from conversation_engine.models import CampaignContact
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class CampaignContactRepository(BaseRepository[CampaignContact]):

    def __init__(self, db: AsyncSession):
        super().__init__(CampaignContact, db)

    async def set_assignment(self, campaign_id: int, contact_ids: list[int], assignment_id: int | None) -> int:
        """
        Point every contact of `campaign_id` whose id is in `contact_ids` at
        `assignment_id` (None unassigns). Contacts of other campaigns are never
        touched, even when listed.

        Callers keep `contact_ids` below the driver's bound-parameter limit.

        Returns:
            Number of rows the database reports as updated.
        """
        if not contact_ids:
            return 0

        start = time.perf_counter()
        stmt = (
            update(CampaignContact)
            .where(CampaignContact.campaign_id == campaign_id)
            .where(CampaignContact.id.in_(contact_ids))
            .values(assignment_id=assignment_id)
            .execution_options(synchronize_session=False)
        )

        async with db_error_handler(self.db, "CampaignContact"):
            result = await self.db.execute(stmt)

        logger.debug(
            "campaign_contact.set_assignment",
            extra={
                "campaign_id": campaign_id,
                "assignment_id": assignment_id,
                "contact_count": len(contact_ids),
                "rowcount": result.rowcount,
                "duration_ms": int((time.perf_counter() - start) * 1000),
            },
        )
        return result.rowcount
