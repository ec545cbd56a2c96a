from __future__ import annotations

from typing import Optional, Sequence

import aiosqlite

from studydash.constants import SYNC_STATUS_SUCCESS
from studydash.domain.sync.ports import SyncLogStore
from studydash.infra.db.connection import Database
from studydash.infra.db.repo.users_sqlite import row_to_user
from studydash.models import SyncLog, User


class SyncLogsSqliteRepo(SyncLogStore):
    """Append-only sync history. Nothing here updates or deletes rows."""

    def __init__(self, db: Database) -> None:
        self._db = db

    async def append(
        self,
        user_id: int,
        synced_at_iso: str,
        sync_type: str,
        status: str,
        assignments_count: int = 0,
        modules_count: int = 0,
        error_message: Optional[str] = None,
    ) -> None:
        await self._db.execute(
            """
            INSERT INTO sync_logs(
              user_id, synced_at, sync_type, status,
              assignments_count, modules_count, error_message
            ) VALUES (?, ?, ?, ?, ?, ?, ?);
            """,
            (user_id, synced_at_iso, sync_type, status, assignments_count, modules_count, error_message),
        )

    async def last_success(self, user_id: int) -> Optional[SyncLog]:
        row = await self._db.fetchone(
            """
            SELECT *
            FROM sync_logs
            WHERE user_id = ? AND status = ?
            ORDER BY synced_at DESC, id DESC
            LIMIT 1;
            """,
            (user_id, SYNC_STATUS_SUCCESS),
        )
        return self._row_to_log(row) if row else None

    async def list_recent(self, user_id: int, limit: int = 10) -> list[SyncLog]:
        rows = await self._db.fetchall(
            "SELECT * FROM sync_logs WHERE user_id = ? ORDER BY synced_at DESC, id DESC LIMIT ?;",
            (user_id, limit),
        )
        return [self._row_to_log(r) for r in rows]

    async def list_active_users(self, since_iso: str) -> Sequence[User]:
        """Users with a Canvas token who synced since `since_iso` or never synced."""
        rows = await self._db.fetchall(
            """
            SELECT DISTINCT u.*
            FROM users u
            LEFT JOIN sync_logs s ON u.id = s.user_id
            WHERE u.canvas_token IS NOT NULL
              AND (s.synced_at > ? OR s.synced_at IS NULL)
            ORDER BY u.id ASC;
            """,
            (since_iso,),
        )
        return [row_to_user(r) for r in rows]

    def _row_to_log(self, row: aiosqlite.Row) -> SyncLog:
        return SyncLog(
            id=row["id"],
            user_id=row["user_id"],
            synced_at=row["synced_at"],
            sync_type=row["sync_type"],
            status=row["status"],
            assignments_count=row["assignments_count"],
            modules_count=row["modules_count"],
            error_message=row["error_message"],
        )
