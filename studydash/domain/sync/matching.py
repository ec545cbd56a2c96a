from __future__ import annotations

from typing import Optional

from studydash.domain.sync.models import TaskDraft
from studydash.domain.sync.ports import TaskMatcher, TaskStore
from studydash.models import Task


class TitleCourseMatcher(TaskMatcher):
    """Same user, same title, same course name (exact, NULL matches NULL)."""

    def __init__(self, tasks: TaskStore) -> None:
        self._tasks = tasks

    async def find_existing(self, user_id: int, draft: TaskDraft) -> Optional[Task]:
        return await self._tasks.find_by_title_and_course(user_id, draft.title, draft.course)
