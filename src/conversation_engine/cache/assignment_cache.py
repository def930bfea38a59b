"""
Contact assignment cache.

Contacts may be cached as JSON under `{prefix}contact-{id}`. After a contact is
reassigned its cached copy must point at the new assignment, otherwise texters
keep seeing stale ownership until the entry expires.

`update_assignment_cache()` is idempotent and safe to run concurrently for
distinct contact ids. Errors propagate to the caller, which decides how to
report them.
"""

import json
import logging
from typing import Protocol

import redis.asyncio as redis
from redis.asyncio import BlockingConnectionPool

from conversation_engine.config import Settings

logger = logging.getLogger(__name__)


class AssignmentCache(Protocol):
    async def update_assignment_cache(
        self,
        contact_id: int,
        assignment_id: int | None,
        texter_id: int | None,
        campaign_id: int,
    ) -> None: ...

    async def close(self) -> None: ...


class NullAssignmentCache:
    """Used when no cache is configured: every update is a no-op."""

    async def update_assignment_cache(self, contact_id, assignment_id, texter_id, campaign_id) -> None:
        return None

    async def close(self) -> None:
        return None


class RedisAssignmentCache:
    """
    Rewrites the assignment fields of already-cached contacts.

    Contacts that are not cached are left alone; they are loaded fresh on
    next read. The entry keeps its remaining TTL.
    """

    def __init__(self, client: redis.Redis, prefix: str = ""):
        self.client = client
        self.prefix = prefix

    @classmethod
    def from_url(cls, url: str, prefix: str = "", max_connections: int = 20) -> "RedisAssignmentCache":
        pool = BlockingConnectionPool.from_url(
            url,
            max_connections=max_connections,
            # seconds to wait for a free connection during large refresh bursts
            timeout=10,
            retry_on_timeout=True,
            socket_connect_timeout=5,
            socket_timeout=5,
            health_check_interval=30,
            decode_responses=True,
        )
        return cls(redis.Redis(connection_pool=pool), prefix=prefix)

    def contact_key(self, contact_id: int) -> str:
        return f"{self.prefix}contact-{contact_id}"

    async def update_assignment_cache(
        self,
        contact_id: int,
        assignment_id: int | None,
        texter_id: int | None,
        campaign_id: int,
    ) -> None:
        key = self.contact_key(contact_id)
        cached = await self.client.get(key)
        if not cached:
            return

        contact = json.loads(cached)
        contact["assignment_id"] = assignment_id
        contact["user_id"] = texter_id
        contact["campaign_id"] = campaign_id
        await self.client.set(key, json.dumps(contact), keepttl=True)

    async def close(self) -> None:
        await self.client.aclose()
        logger.info("assignment_cache.closed")


def get_assignment_cache(settings: Settings) -> AssignmentCache:
    """Redis-backed cache when REDIS_URL is set, otherwise the no-op cache."""
    if settings.REDIS_URL:
        return RedisAssignmentCache.from_url(settings.REDIS_URL, prefix=settings.REDIS_CACHE_PREFIX)
    return NullAssignmentCache()


__all__ = [
    "AssignmentCache",
    "NullAssignmentCache",
    "RedisAssignmentCache",
    "get_assignment_cache",
]
