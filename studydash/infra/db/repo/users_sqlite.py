from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import aiosqlite

from studydash.infra.db.connection import Database
from studydash.models import User

logger = logging.getLogger(__name__)


def row_to_user(row: aiosqlite.Row) -> User:
    return User(
        id=row["id"],
        username=row["username"],
        password=row["password"],
        canvas_token=row["canvas_token"],
        email=row["email"],
        role=row["role"],
        join_date=row["join_date"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


class UsersSqliteRepo:
    def __init__(self, db: Database) -> None:
        self._db = db

    async def get_by_username(self, username: str) -> Optional[User]:
        row = await self._db.fetchone("SELECT * FROM users WHERE username = ?;", (username,))
        return row_to_user(row) if row else None

    async def create(
        self,
        username: str,
        password: str,
        now_iso: str,
        canvas_token: Optional[str] = None,
        email: Optional[str] = None,
        role: str = "user",
    ) -> int:
        return await self._db.insert(
            """
            INSERT INTO users(username, password, canvas_token, email, role, join_date, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?);
            """,
            (
                username,
                password,
                canvas_token,
                email or f"{username}@example.com",
                role,
                now_iso,
                now_iso,
                now_iso,
            ),
        )

    async def update_canvas_token(self, user_id: int, canvas_token: Optional[str], now_iso: str) -> bool:
        count = await self._db.execute(
            "UPDATE users SET canvas_token = ?, updated_at = ? WHERE id = ?;",
            (canvas_token, now_iso, user_id),
        )
        return count > 0

    async def seed_from_file(self, path: Path, now_iso: str) -> int:
        """
        Create users listed as `username:password[:canvas_token]`, one per line.
        Existing usernames are left alone. Returns how many were created.
        """
        if not path.exists():
            logger.info("No users file at %s, skipping seed", path)
            return 0

        created = 0
        for line in path.read_text(encoding="utf-8").splitlines():
            if not line.strip() or line.lstrip().startswith("#"):
                continue
            parts = line.strip().split(":")
            username = parts[0].strip()
            password = parts[1].strip() if len(parts) > 1 else ""
            token = parts[2].strip() if len(parts) > 2 and parts[2].strip() else None
            if not username or not password:
                logger.warning("Ignoring malformed users file line for %r", username or line[:20])
                continue
            if await self.get_by_username(username):
                continue
            await self.create(
                username=username,
                password=password,
                now_iso=now_iso,
                canvas_token=token,
                role="admin" if username == "admin" else "user",
            )
            created += 1
            logger.info("Seeded user: %s", username)
        return created
