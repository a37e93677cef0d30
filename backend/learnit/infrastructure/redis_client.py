"""
Shared async Redis connection for caching and slot admission.

Redis is advisory in this service: every caller treats None as
"Redis unavailable" and falls back to the database.
"""

from typing import Optional

import redis.asyncio as redis

from learnit.core.config import get_settings
from learnit.core.logging import get_logger

logger = get_logger(__name__)
settings = get_settings()


class RedisClient:
    """Process-wide lazily connected client."""

    _instance: Optional[redis.Redis] = None

    @classmethod
    async def get_client(cls) -> Optional[redis.Redis]:
        if not settings.REDIS_ENABLED:
            return None

        if cls._instance is None:
            client = redis.from_url(
                settings.REDIS_URL,
                encoding="utf-8",
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
                retry_on_timeout=True,
                health_check_interval=30,
            )
            try:
                await client.ping()
            except Exception as e:
                logger.error("redis_connection_failed", url=settings.REDIS_URL, error=str(e))
                await client.aclose()
                return None
            logger.info("redis_connected", url=settings.REDIS_URL)
            cls._instance = client

        return cls._instance

    @classmethod
    async def close(cls) -> None:
        if cls._instance is not None:
            await cls._instance.aclose()
            cls._instance = None


async def get_redis() -> Optional[redis.Redis]:
    return await RedisClient.get_client()


async def close_redis() -> None:
    await RedisClient.close()
