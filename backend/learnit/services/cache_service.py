"""
Redis caching for the machine list.

CACHING STRATEGY
================

What we cache:
  - The GET /machines response (JSON-serialized)
  - Cache key pattern: "machines:list:type={type}"

Why:
  - Every dashboard and the mobile home screen load the machine list,
    and the list only changes on admin edits or status overrides.

Invalidation:
  - Any machine create/update/delete/status change deletes every
    "machines:list:*" key (SCAN, small keyspace).
  - TTL expiry as a safety net.

Not cached:
  - Eligibility and availability. Both must reflect certifications and
    bookings at request time.
"""

import json
from typing import Optional

from learnit.core.config import get_settings
from learnit.core.logging import get_logger
from learnit.core.metrics import record_cache_operation, redis_connection_errors
from learnit.infrastructure.redis_client import get_redis

logger = get_logger(__name__)
settings = get_settings()

MACHINE_LIST_PREFIX = "machines:list:"


def _make_machine_list_key(machine_type: Optional[str]) -> str:
    return f"{MACHINE_LIST_PREFIX}type={machine_type or 'all'}"


async def get_cached_machines(machine_type: Optional[str]) -> Optional[dict]:
    client = await get_redis()
    if not client:
        return None

    key = _make_machine_list_key(machine_type)
    try:
        data = await client.get(key)
    except Exception as e:
        redis_connection_errors.inc()
        logger.error("cache_get_error", key=key, error=str(e))
        return None

    record_cache_operation("get", hit=data is not None)
    if data:
        logger.debug("cache_hit", key=key)
        return json.loads(data)
    logger.debug("cache_miss", key=key)
    return None


async def set_cached_machines(machine_type: Optional[str], data: dict) -> None:
    client = await get_redis()
    if not client:
        return

    key = _make_machine_list_key(machine_type)
    try:
        await client.setex(key, settings.REDIS_CACHE_TTL, json.dumps(data, default=str))
        logger.debug("cache_set", key=key, ttl=settings.REDIS_CACHE_TTL)
    except Exception as e:
        redis_connection_errors.inc()
        logger.error("cache_set_error", key=key, error=str(e))


async def invalidate_machine_cache() -> None:
    client = await get_redis()
    if not client:
        return

    try:
        deleted = 0
        async for key in client.scan_iter(match=f"{MACHINE_LIST_PREFIX}*", count=100):
            await client.delete(key)
            deleted += 1
        logger.info("cache_invalidated", keys_deleted=deleted)
    except Exception as e:
        redis_connection_errors.inc()
        logger.error("cache_invalidation_error", error=str(e))


async def get_cache_stats() -> dict:
    """Redis cache statistics for the health endpoint."""
    client = await get_redis()
    if not client:
        return {"status": "disabled"}

    try:
        info = await client.info("stats")
        hits = info.get("keyspace_hits", 0)
        misses = info.get("keyspace_misses", 0)
        return {
            "status": "connected",
            "hits": hits,
            "misses": misses,
            "hit_rate": round(hits / max(hits + misses, 1) * 100, 2),
        }
    except Exception as e:
        return {"status": "error", "error": str(e)}
