"""
Bulk reassignment of campaign contacts to another texter.

For every campaign in the input map the service resolves the texter's
assignment (creating one when missing), then walks the campaign's contacts in
chunks of MAX_CONTACTS_PER_UPDATE. Each chunk is one committed transaction:

    UPDATE campaign_contact SET assignment_id = :id WHERE campaign_id = :c AND id IN (...chunk)
    COMMIT
    refresh the cached copy of every contact in the chunk (concurrently)

There is no transaction spanning chunks. On the first failure the service
stops, logs, and returns the chunks completed so far; the caller treats the
result as a possibly-partial success report.
"""

import asyncio
import time
import logging
from typing import Mapping, Sequence
from uuid import uuid4

from sqlalchemy.ext.asyncio import AsyncSession

from conversation_engine.cache.assignment_cache import AssignmentCache, NullAssignmentCache
from conversation_engine.config import Settings, get_settings
from conversation_engine.core.logging.filters import get_request_id, reset_request_id, set_request_id
from conversation_engine.repositories.assignment_repository import AssignmentRepository
from conversation_engine.repositories.campaign_contact_repository import CampaignContactRepository
from conversation_engine.schemas import UNASSIGNED_TEXTER_ID, ReassignedChunk
from conversation_engine.utils.row_mapping import chunked

logger = logging.getLogger(__name__)

# Postgres prepared statements cap bound parameters at 65535
MAX_CONTACTS_PER_UPDATE = 65_000


def is_unassign(texter_id: int | str | None) -> bool:
    """None, -2 and "-2" all mean "remove the contacts' assignment"."""
    return texter_id is None or str(texter_id) == str(UNASSIGNED_TEXTER_ID)


class ReassignmentService:

    def __init__(
        self,
        db: AsyncSession,
        cache: AssignmentCache | None = None,
        settings: Settings | None = None,
        *,
        assignment_repository: AssignmentRepository | None = None,
        contact_repository: CampaignContactRepository | None = None,
    ):
        self.db = db
        self.cache = cache or NullAssignmentCache()
        self.settings = settings or get_settings()
        self.assignments = assignment_repository or AssignmentRepository(db)
        self.contacts = contact_repository or CampaignContactRepository(db)

    async def reassign_conversations(
        self,
        campaign_id_contact_ids_map: Mapping[int, Sequence[int]],
        new_texter_id: int | str | None,
    ) -> list[ReassignedChunk]:
        """
        Point every listed contact at `new_texter_id`'s assignment on its campaign.

        Returns one entry per chunk written, so a campaign split into N chunks
        yields N entries with the same assignment id. Never raises: a failure
        ends processing and the entries accumulated so far are returned.
        """
        token = set_request_id(get_request_id() or f"reassign-{uuid4().hex[:12]}")
        texter_id = None if is_unassign(new_texter_id) else int(new_texter_id)
        assignment_ids: dict[int, int | None] = {}
        results: list[ReassignedChunk] = []
        start = time.perf_counter()

        try:
            for campaign_id, contact_ids in campaign_id_contact_ids_map.items():
                campaign_id = int(campaign_id)
                for chunk in chunked(contact_ids, MAX_CONTACTS_PER_UPDATE):
                    if campaign_id not in assignment_ids:
                        assignment_ids[campaign_id] = await self._resolve_assignment_id(campaign_id, texter_id)
                    assignment_id = assignment_ids[campaign_id]

                    await self.contacts.set_assignment(campaign_id, chunk, assignment_id)
                    await self.db.commit()

                    failures = await self._refresh_cache(chunk, assignment_id, texter_id, campaign_id)
                    results.append(
                        ReassignedChunk(
                            campaign_id=campaign_id,
                            assignment_id=assignment_id,
                            contact_count=len(chunk),
                            cache_failures=failures,
                        )
                    )
                    if failures:
                        logger.error(
                            "reassign.cache_refresh_failed",
                            extra={
                                "campaign_id": campaign_id,
                                "assignment_id": assignment_id,
                                "failed_count": len(failures),
                                "chunk_size": len(chunk),
                            },
                        )
                        return results
        except Exception:
            logger.exception(
                "reassign.failed",
                extra={"texter_id": texter_id, "completed_chunks": len(results)},
            )
            await self._safe_rollback()
            return results
        finally:
            reset_request_id(token)

        logger.info(
            "reassign.success",
            extra={
                "texter_id": texter_id,
                "campaign_count": len(assignment_ids),
                "chunk_count": len(results),
                "contact_count": sum(r.contact_count for r in results),
                "duration_ms": int((time.perf_counter() - start) * 1000),
            },
        )
        return results

    async def _resolve_assignment_id(self, campaign_id: int, texter_id: int | None) -> int | None:
        if texter_id is None:
            return None
        assignment = await self.assignments.get_or_create(
            user_id=texter_id,
            campaign_id=campaign_id,
            max_contacts=self.settings.MAX_CONTACTS_PER_TEXTER,
        )
        return assignment.id

    async def _refresh_cache(
        self,
        contact_ids: list[int],
        assignment_id: int | None,
        texter_id: int | None,
        campaign_id: int,
    ) -> list[int]:
        """Refresh every contact concurrently; return the ids whose refresh raised."""
        outcomes = await asyncio.gather(
            *(
                self.cache.update_assignment_cache(contact_id, assignment_id, texter_id, campaign_id)
                for contact_id in contact_ids
            ),
            return_exceptions=True,
        )
        failed = []
        for contact_id, outcome in zip(contact_ids, outcomes):
            if isinstance(outcome, Exception):
                logger.debug(
                    "reassign.cache_refresh_error",
                    extra={"contact_id": contact_id, "error": repr(outcome)},
                )
                failed.append(contact_id)
        return failed

    async def _safe_rollback(self) -> None:
        try:
            await self.db.rollback()
        except Exception:
            logger.exception("reassign.rollback_failed")
