"""
Redis slot admission.

Each booking attempt takes "slot:{machine}:{date}:{time}" with
SET NX EX before touching the database. A second request for the same
slot inside the hold window is rejected without a database round trip.

Circuit breaker:
  On Redis failure the gate fails open (admits). The unique index still
  prevents double-booking; only the early rejection is lost.
"""

from typing import Optional

from learnit.core.config import get_settings
from learnit.core.logging import get_logger
from learnit.core.metrics import redis_connection_errors
from learnit.infrastructure.redis_client import get_redis
from learnit.services.interfaces.admission import AdmissionStrategy

logger = get_logger(__name__)


class RedisAdmission(AdmissionStrategy):

    def __init__(self, hold_seconds: Optional[int] = None):
        self.hold_seconds = hold_seconds or get_settings().SLOT_HOLD_SECONDS

    async def admit(self, key: str) -> bool:
        client = await get_redis()
        if client is None:
            return True
        try:
            acquired = await client.set(key, "1", nx=True, ex=self.hold_seconds)
            return bool(acquired)
        except Exception as e:
            redis_connection_errors.inc()
            logger.warning("admission_fail_open", key=key, error=str(e))
            return True

    async def release(self, key: str) -> None:
        client = await get_redis()
        if client is None:
            return
        try:
            await client.delete(key)
        except Exception as e:
            # Hold expires on its own after hold_seconds
            redis_connection_errors.inc()
            logger.warning("admission_release_failed", key=key, error=str(e))
