from __future__ import annotations

import logging
from datetime import timedelta

from studydash.domain.common.time import from_iso
from studydash.domain.sync.ports import Clock, SyncLogStore

logger = logging.getLogger(__name__)


class StalenessPolicy:
    """Sync when there is no successful sync newer than max_age."""

    def __init__(self, logs: SyncLogStore, clock: Clock, max_age: timedelta = timedelta(hours=1)) -> None:
        self._logs = logs
        self._clock = clock
        self._max_age = max_age

    async def should_sync(self, user_id: int) -> bool:
        try:
            last = await self._logs.last_success(user_id)
            if last is None:
                return True
            return from_iso(last.synced_at) < self._clock.now() - self._max_age
        except Exception:
            # unreadable history counts as stale
            logger.error("Error checking sync status for user %s", user_id, exc_info=True)
            return True
