from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict

from studydash.domain.common.errors import SyncInProgressError


class SyncGuard:
    """
    One in-flight sync per user inside this process.

    A second attempt does not wait for the first; it fails fast with
    SyncInProgressError so login, manual and background triggers can each
    decide what skipping means for them.
    """

    def __init__(self) -> None:
        self._locks: Dict[int, asyncio.Lock] = {}

    def is_running(self, user_id: int) -> bool:
        lock = self._locks.get(user_id)
        return lock is not None and lock.locked()

    @asynccontextmanager
    async def hold(self, user_id: int) -> AsyncIterator[None]:
        lock = self._locks.setdefault(user_id, asyncio.Lock())
        if lock.locked():
            raise SyncInProgressError(user_id)
        async with lock:
            yield
