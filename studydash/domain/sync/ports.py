from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Optional, Sequence

from studydash.domain.canvas.models import (
    CanvasAssignment,
    CanvasCourse,
    CanvasModule,
    CanvasPlannerItem,
    CanvasQuiz,
)
from studydash.domain.sync.models import NewTask, TaskDraft
from studydash.models import SyncLog, Task, User


class Clock(ABC):
    @abstractmethod
    def now(self) -> datetime: ...


class CanvasGateway(ABC):
    """Read-only view of one user's Canvas account."""

    @abstractmethod
    async def fetch_courses(self) -> list[CanvasCourse]: ...

    @abstractmethod
    async def fetch_assignments(self, course_id: int) -> list[CanvasAssignment]: ...

    @abstractmethod
    async def fetch_quizzes(self, course_id: int) -> list[CanvasQuiz]: ...

    @abstractmethod
    async def fetch_modules(self, course_id: int) -> list[CanvasModule]: ...

    @abstractmethod
    async def fetch_assignment(self, course_id: int, assignment_id: int) -> Optional[CanvasAssignment]: ...

    @abstractmethod
    async def fetch_planner_items(self, start_date: str, end_date: str) -> list[CanvasPlannerItem]: ...

    @abstractmethod
    async def fetch_course(self, course_id: str) -> Optional[dict[str, Any]]: ...

    @abstractmethod
    async def probe(self, url: str) -> bool: ...

    @abstractmethod
    async def aclose(self) -> None: ...


class TaskStore(ABC):
    @abstractmethod
    async def find_by_title_and_course(self, user_id: int, title: str, course: Optional[str]) -> Optional[Task]: ...

    @abstractmethod
    async def create(self, task: NewTask, now_iso: str) -> int: ...

    @abstractmethod
    async def refresh(self, task_id: int, values: dict[str, Any], now_iso: str) -> None: ...

    @abstractmethod
    async def delete_all_for_user(self, user_id: int) -> int: ...


class CourseStore(ABC):
    @abstractmethod
    async def delete_canvas_courses(self, user_id: int) -> int: ...

    @abstractmethod
    async def create(
        self,
        user_id: int,
        name: str,
        canvas_course_id: Optional[str],
        professor: Optional[str],
        now_iso: str,
    ) -> int: ...


class SyncLogStore(ABC):
    @abstractmethod
    async def append(
        self,
        user_id: int,
        synced_at_iso: str,
        sync_type: str,
        status: str,
        assignments_count: int = 0,
        modules_count: int = 0,
        error_message: Optional[str] = None,
    ) -> None: ...

    @abstractmethod
    async def last_success(self, user_id: int) -> Optional[SyncLog]: ...

    @abstractmethod
    async def list_active_users(self, since_iso: str) -> Sequence[User]: ...


class TaskMatcher(ABC):
    """
    Finds the stored task a synced item corresponds to.

    Canvas has no id shared by assignments, quizzes, module items and planner
    items, so implementations decide what "the same task" means.
    """

    @abstractmethod
    async def find_existing(self, user_id: int, draft: TaskDraft) -> Optional[Task]: ...
