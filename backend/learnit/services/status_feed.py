"""
Machine status feed.

One versioned change log per process replaces the per-screen refresh
timers. Every status override bumps the version; clients poll
GET /machines/status/changes?since=<version> and either get the newer
changes immediately or wait (long-poll) until one arrives or the wait
ceiling passes.

Only the latest change per machine is kept: a client that is several
versions behind needs the current status, not the history.
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from learnit.core.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class StatusEvent:
    version: int
    machine_id: str
    status: str
    maintenance_note: Optional[str]
    changed_at: datetime


class StatusFeed:

    def __init__(self):
        self._version = 0
        self._latest: dict[str, StatusEvent] = {}
        self._condition = asyncio.Condition()

    @property
    def version(self) -> int:
        return self._version

    async def publish(
        self,
        machine_id: str,
        status: str,
        maintenance_note: Optional[str] = None,
    ) -> StatusEvent:
        async with self._condition:
            self._version += 1
            event = StatusEvent(
                version=self._version,
                machine_id=machine_id,
                status=status,
                maintenance_note=maintenance_note,
                changed_at=datetime.now(timezone.utc),
            )
            self._latest[machine_id] = event
            self._condition.notify_all()

        logger.info("status_published", machine_id=machine_id, status=status, version=event.version)
        return event

    async def forget(self, machine_id: str) -> None:
        async with self._condition:
            self._latest.pop(machine_id, None)

    def changes_since(self, since: int) -> list[StatusEvent]:
        return sorted(
            (e for e in self._latest.values() if e.version > since),
            key=lambda e: e.version,
        )

    async def wait_for_changes(self, since: int, timeout: float) -> list[StatusEvent]:
        """
        Changes newer than `since`, waiting up to `timeout` seconds for one.

        A `since` ahead of the feed (carried over from before a restart)
        returns the full current state at once so the client can resync.
        """
        if since > self._version:
            return self.changes_since(0)

        changes = self.changes_since(since)
        if changes or timeout <= 0:
            return changes

        async with self._condition:
            try:
                await asyncio.wait_for(
                    self._condition.wait_for(lambda: self._version > since),
                    timeout=timeout,
                )
            except asyncio.TimeoutError:
                return []
        return self.changes_since(since)


_feed: Optional[StatusFeed] = None


def get_status_feed() -> StatusFeed:
    global _feed
    if _feed is None:
        _feed = StatusFeed()
    return _feed


def reset_status_feed() -> None:
    global _feed
    _feed = None
