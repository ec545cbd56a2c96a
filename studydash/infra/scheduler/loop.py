from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

logger = logging.getLogger(__name__)


JobFn = Callable[[], Awaitable[Any]]


@dataclass
class SchedulerConfig:
    interval_seconds: float = 3 * 60 * 60
    run_immediately: bool = False


class SchedulerLoop:
    """
    Runs one job on a fixed interval until stop() is called.
    The first run happens after one interval unless run_immediately is set.
    """

    def __init__(self, job: JobFn, cfg: SchedulerConfig = SchedulerConfig()) -> None:
        self._job = job
        self._cfg = cfg
        self._stop = asyncio.Event()

    @property
    def stopped(self) -> bool:
        return self._stop.is_set()

    def stop(self) -> None:
        self._stop.set()

    async def run_forever(self) -> None:
        logger.info("Scheduler started: every %.0f seconds", self._cfg.interval_seconds)
        if not self._cfg.run_immediately:
            if await self._wait():
                return
        while not self._stop.is_set():
            try:
                await self._tick()
            except Exception as e:
                # never take the server down because of a tick
                logger.error(f"Scheduler tick error: {e}", exc_info=True)
            if await self._wait():
                break
        logger.info("Scheduler stopped")

    async def _tick(self) -> None:
        result = await self._job()
        if result is not None:
            logger.info("Scheduled job finished: %s", result)

    async def _wait(self) -> bool:
        """Sleep one interval. Returns True if stop() was called meanwhile."""
        try:
            await asyncio.wait_for(self._stop.wait(), timeout=self._cfg.interval_seconds)
        except asyncio.TimeoutError:
            return False
        return True
