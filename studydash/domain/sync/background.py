from __future__ import annotations

import logging
from datetime import timedelta

from studydash.constants import SYNC_TYPE_BACKGROUND
from studydash.domain.common.errors import SyncInProgressError
from studydash.domain.common.time import to_iso
from studydash.domain.sync.models import BackgroundSummary
from studydash.domain.sync.ports import Clock, SyncLogStore
from studydash.domain.sync.service import SyncService
from studydash.domain.sync.staleness import StalenessPolicy

logger = logging.getLogger(__name__)


class BackgroundSync:
    """Periodic job: refresh every active user whose last sync is stale."""

    def __init__(
        self,
        service: SyncService,
        staleness: StalenessPolicy,
        logs: SyncLogStore,
        clock: Clock,
        active_days: int = 7,
        course_delay: float = 0.5,
    ) -> None:
        self._service = service
        self._staleness = staleness
        self._logs = logs
        self._clock = clock
        self._active_days = active_days
        self._course_delay = course_delay

    async def sync_all_active_users(self) -> BackgroundSummary:
        logger.info("=== Background sync started ===")
        since_iso = to_iso(self._clock.now() - timedelta(days=self._active_days))
        users = await self._logs.list_active_users(since_iso)
        logger.info("Found %d active users to sync", len(users))

        synced = skipped = failed = 0
        for user in users:
            if not await self._staleness.should_sync(user.id):
                skipped += 1
                logger.info("Skipped %s (recently synced)", user.username)
                continue

            try:
                result = await self._service.run(
                    user, SYNC_TYPE_BACKGROUND, course_delay=self._course_delay
                )
            except SyncInProgressError:
                skipped += 1
                logger.info("Skipped %s (sync already running)", user.username)
                continue
            except Exception:
                # failures inside the sync itself are already in sync_logs
                failed += 1
                logger.error("Failed to sync %s", user.username, exc_info=True)
                continue

            synced += 1
            logger.info("Synced %s: %d assignments/quizzes", user.username, result.assignments)

        logger.info("=== Background sync complete === Synced: %d, Skipped: %d, Failed: %d", synced, skipped, failed)
        return BackgroundSummary(synced=synced, skipped=skipped, failed=failed)
