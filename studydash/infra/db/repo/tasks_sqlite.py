from __future__ import annotations

from typing import Any, Optional

import aiosqlite

from studydash.domain.sync.models import NewTask, REFRESHABLE_FIELDS
from studydash.domain.sync.ports import TaskStore
from studydash.infra.db.connection import Database
from studydash.models import Task

# Columns a user may change through the API
EDITABLE_FIELDS = (
    "title",
    "description",
    "type",
    "course",
    "due_date",
    "due_time",
    "priority",
    "completed",
    "submitted",
)

_COLUMNS = (
    "id, user_id, title, description, type, course, due_date, due_time, "
    "priority, completed, submitted, created_at, updated_at"
)


class TasksSqliteRepo(TaskStore):
    def __init__(self, db: Database) -> None:
        self._db = db

    async def list_for_user(
        self,
        user_id: int,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> list[Task]:
        sql = f"SELECT {_COLUMNS} FROM tasks WHERE user_id = ?"
        params: list[Any] = [user_id]
        if start_date and end_date:
            sql += " AND due_date BETWEEN ? AND ?"
            params.extend([start_date, end_date])
        sql += " ORDER BY due_date ASC, due_time ASC;"
        rows = await self._db.fetchall(sql, params)
        return [self._row_to_task(r) for r in rows]

    async def get(self, task_id: int, user_id: int) -> Optional[Task]:
        row = await self._db.fetchone(
            f"SELECT {_COLUMNS} FROM tasks WHERE id = ? AND user_id = ?;",
            (task_id, user_id),
        )
        return self._row_to_task(row) if row else None

    async def find_by_title_and_course(self, user_id: int, title: str, course: Optional[str]) -> Optional[Task]:
        # IS, not =, so a task without a course matches another one without a course
        row = await self._db.fetchone(
            f"""
            SELECT {_COLUMNS}
            FROM tasks
            WHERE user_id = ? AND title = ? AND course IS ?
            ORDER BY id ASC
            LIMIT 1;
            """,
            (user_id, title, course),
        )
        return self._row_to_task(row) if row else None

    async def create(self, task: NewTask, now_iso: str) -> int:
        return await self._db.insert(
            """
            INSERT INTO tasks(
              user_id, title, description, type, course,
              due_date, due_time, priority, completed, submitted,
              created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?);
            """,
            (
                task.user_id,
                task.title,
                task.description,
                task.type,
                task.course,
                task.due_date,
                task.due_time,
                task.priority,
                int(task.completed),
                int(task.submitted),
                now_iso,
                now_iso,
            ),
        )

    async def refresh(self, task_id: int, values: dict[str, Any], now_iso: str) -> None:
        unknown = set(values) - REFRESHABLE_FIELDS
        if unknown:
            raise ValueError(f"sync may not overwrite: {', '.join(sorted(unknown))}")
        await self._update_columns(task_id, None, values, now_iso)

    async def update(self, task_id: int, user_id: int, values: dict[str, Any], now_iso: str) -> bool:
        """Owner-scoped partial update. Returns False when no such task for this user."""
        unknown = set(values) - set(EDITABLE_FIELDS)
        if unknown:
            raise ValueError(f"not editable: {', '.join(sorted(unknown))}")
        if not values:
            return False
        return await self._update_columns(task_id, user_id, values, now_iso) > 0

    async def delete(self, task_id: int, user_id: int) -> bool:
        count = await self._db.execute("DELETE FROM tasks WHERE id = ? AND user_id = ?;", (task_id, user_id))
        return count > 0

    async def delete_all_for_user(self, user_id: int) -> int:
        return await self._db.execute("DELETE FROM tasks WHERE user_id = ?;", (user_id,))

    async def _update_columns(
        self,
        task_id: int,
        user_id: Optional[int],
        values: dict[str, Any],
        now_iso: str,
    ) -> int:
        # column names come from the whitelists above, never from the caller
        assignments = [f"{col} = ?" for col in values]
        params: list[Any] = [int(v) if isinstance(v, bool) else v for v in values.values()]
        assignments.append("updated_at = ?")
        params.append(now_iso)

        sql = f"UPDATE tasks SET {', '.join(assignments)} WHERE id = ?"
        params.append(task_id)
        if user_id is not None:
            sql += " AND user_id = ?"
            params.append(user_id)
        return await self._db.execute(sql + ";", params)

    def _row_to_task(self, row: aiosqlite.Row) -> Task:
        data = dict(row)
        data["completed"] = bool(data["completed"])
        data["submitted"] = bool(data["submitted"])
        return Task(**data)
