from __future__ import annotations

from typing import Optional

import aiosqlite

from studydash.domain.sync.ports import CourseStore
from studydash.infra.db.connection import Database
from studydash.models import Course


class CoursesSqliteRepo(CourseStore):
    def __init__(self, db: Database) -> None:
        self._db = db

    async def list_for_user(self, user_id: int) -> list[Course]:
        rows = await self._db.fetchall(
            "SELECT * FROM courses WHERE user_id = ? ORDER BY name ASC, id ASC;",
            (user_id,),
        )
        return [self._row_to_course(r) for r in rows]

    async def get(self, course_id: int) -> Optional[Course]:
        row = await self._db.fetchone("SELECT * FROM courses WHERE id = ?;", (course_id,))
        return self._row_to_course(row) if row else None

    async def find_by_name(self, user_id: int, name: str) -> Optional[Course]:
        row = await self._db.fetchone(
            """
            SELECT *
            FROM courses
            WHERE user_id = ? AND name = ?
            ORDER BY canvas_course_id IS NULL, id ASC
            LIMIT 1;
            """,
            (user_id, name),
        )
        return self._row_to_course(row) if row else None

    async def delete_canvas_courses(self, user_id: int) -> int:
        return await self._db.execute(
            "DELETE FROM courses WHERE user_id = ? AND canvas_course_id IS NOT NULL;",
            (user_id,),
        )

    async def create(
        self,
        user_id: int,
        name: str,
        canvas_course_id: Optional[str],
        professor: Optional[str],
        now_iso: str,
    ) -> int:
        return await self._db.insert(
            """
            INSERT INTO courses(user_id, name, canvas_course_id, professor, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?);
            """,
            (user_id, name, canvas_course_id, professor, now_iso, now_iso),
        )

    def _row_to_course(self, row: aiosqlite.Row) -> Course:
        return Course(
            id=row["id"],
            user_id=row["user_id"],
            name=row["name"],
            professor=row["professor"],
            credits=row["credits"],
            canvas_course_id=row["canvas_course_id"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
