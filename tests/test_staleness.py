"""
Tests for the sync staleness gate under a simulated clock.
"""
from __future__ import annotations

import asyncio
from datetime import timedelta
from unittest.mock import AsyncMock

from studydash.domain.common.time import to_iso
from studydash.domain.sync.staleness import StalenessPolicy
from studydash.infra.db.repo.sync_logs_sqlite import SyncLogsSqliteRepo

from fakes import FakeClock, cleanup_db, make_user, migrated_db


def test_gate_opens_closes_and_reopens_with_time():
    async def run():
        db = await migrated_db()
        try:
            user = await make_user(db)
            clock = FakeClock()
            logs = SyncLogsSqliteRepo(db)
            policy = StalenessPolicy(logs, clock, max_age=timedelta(hours=1))

            assert await policy.should_sync(user.id) is True

            await logs.append(user.id, to_iso(clock.now()), "login", "success", 5)
            assert await policy.should_sync(user.id) is False

            clock.advance(timedelta(minutes=59))
            assert await policy.should_sync(user.id) is False

            clock.advance(timedelta(minutes=2))
            assert await policy.should_sync(user.id) is True
        finally:
            cleanup_db(db.path)

    asyncio.run(run())


def test_failed_syncs_do_not_close_the_gate():
    async def run():
        db = await migrated_db()
        try:
            user = await make_user(db)
            clock = FakeClock()
            logs = SyncLogsSqliteRepo(db)
            await logs.append(user.id, to_iso(clock.now()), "background", "failed", error_message="timeout")
            assert await StalenessPolicy(logs, clock).should_sync(user.id) is True
        finally:
            cleanup_db(db.path)

    asyncio.run(run())


def test_unreadable_history_means_sync():
    logs = AsyncMock()
    logs.last_success.side_effect = RuntimeError("database is locked")
    policy = StalenessPolicy(logs, FakeClock())
    assert asyncio.run(policy.should_sync(1)) is True
