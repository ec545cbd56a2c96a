from __future__ import annotations

import logging
from typing import Any, Iterable, Optional

from studydash.domain.canvas.models import CanvasAssignment, CanvasPlannerItem, CanvasQuiz
from studydash.domain.canvas.timestamps import normalize_timestamp, timestamp_candidates
from studydash.domain.common.time import to_iso
from studydash.domain.sync.models import (
    FIELD_COMPLETED,
    FIELD_DESCRIPTION,
    FIELD_DUE_DATE,
    FIELD_DUE_TIME,
    FIELD_SUBMITTED,
    FIELD_TYPE,
    NewTask,
    ReconcileStats,
    ResolvedModuleItem,
    TaskDraft,
)
from studydash.domain.sync.ports import Clock, TaskMatcher, TaskStore
from studydash.domain.sync.rules import (
    draft_from_assignment,
    draft_from_module_item,
    draft_from_planner_item,
    draft_from_quiz,
)

logger = logging.getLogger(__name__)


class TaskReconciler:
    """
    Upserts Canvas items into the tasks table, one item at a time.

    There is no surrounding transaction: if item N raises, items before it stay
    written and the exception propagates to the caller.
    """

    def __init__(self, tasks: TaskStore, matcher: TaskMatcher, clock: Clock) -> None:
        self._tasks = tasks
        self._matcher = matcher
        self._clock = clock

    async def reconcile_assignments(
        self,
        user_id: int,
        course_name: str,
        assignments: Iterable[CanvasAssignment],
        client_timezone: Optional[str] = None,
        client_offset: Optional[int] = None,
    ) -> ReconcileStats:
        drafts = (draft_from_assignment(a, course_name or None) for a in assignments)
        return await self._apply_all(user_id, drafts, client_timezone, client_offset)

    async def reconcile_quizzes(
        self,
        user_id: int,
        course_name: str,
        quizzes: Iterable[CanvasQuiz],
        client_timezone: Optional[str] = None,
        client_offset: Optional[int] = None,
    ) -> ReconcileStats:
        drafts = (draft_from_quiz(q, course_name or None) for q in quizzes)
        return await self._apply_all(user_id, drafts, client_timezone, client_offset)

    async def reconcile_module_items(
        self,
        user_id: int,
        course_name: str,
        items: Iterable[ResolvedModuleItem],
        client_timezone: Optional[str] = None,
        client_offset: Optional[int] = None,
    ) -> ReconcileStats:
        drafts = (draft_from_module_item(i, course_name or None) for i in items)
        return await self._apply_all(user_id, drafts, client_timezone, client_offset)

    async def reconcile_planner_items(
        self,
        user_id: int,
        items: Iterable[CanvasPlannerItem],
        client_timezone: Optional[str] = None,
        client_offset: Optional[int] = None,
    ) -> ReconcileStats:
        drafts = (draft_from_planner_item(i) for i in items)
        return await self._apply_all(user_id, drafts, client_timezone, client_offset)

    async def _apply_all(
        self,
        user_id: int,
        drafts: Iterable[Optional[TaskDraft]],
        client_timezone: Optional[str],
        client_offset: Optional[int],
    ) -> ReconcileStats:
        stats = ReconcileStats()
        for draft in drafts:
            if draft is None:
                stats.skipped += 1
                continue
            inserted = await self.apply(user_id, draft, client_timezone, client_offset)
            if inserted:
                stats.inserted += 1
            else:
                stats.updated += 1
        return stats

    async def apply(
        self,
        user_id: int,
        draft: TaskDraft,
        client_timezone: Optional[str] = None,
        client_offset: Optional[int] = None,
    ) -> bool:
        """Insert or refresh one task. Returns True when a row was inserted."""
        due_date, due_time = normalize_timestamp(draft.due_at, client_timezone, client_offset)
        if logger.isEnabledFor(logging.DEBUG):
            timestamp_candidates(draft.due_at)
        now_iso = to_iso(self._clock.now())

        existing = await self._matcher.find_existing(user_id, draft)
        if existing is None:
            logger.info(
                "Creating task from %s: %s - Type: %s - Due: %s at %s - Submitted: %s",
                draft.source, draft.title, draft.type, due_date, due_time, draft.submitted,
            )
            await self._tasks.create(
                NewTask(
                    user_id=user_id,
                    title=draft.title,
                    description=draft.description,
                    type=draft.type,
                    course=draft.course,
                    due_date=due_date,
                    due_time=due_time,
                    priority=draft.priority,
                    completed=draft.completed,
                    submitted=draft.submitted,
                ),
                now_iso,
            )
            return True

        logger.debug(
            "Task exists (%s): %s - due_date in DB: %s, new: %s",
            draft.source, draft.title, existing.due_date, due_date,
        )
        candidates: dict[str, Any] = {
            FIELD_DUE_DATE: due_date,
            FIELD_DUE_TIME: due_time,
            FIELD_TYPE: draft.type,
            FIELD_DESCRIPTION: draft.description,
            FIELD_SUBMITTED: draft.submitted,
            FIELD_COMPLETED: draft.completed,
        }
        values = {k: v for k, v in candidates.items() if k in draft.refresh_fields}
        await self._tasks.refresh(existing.id, values, now_iso)
        return False
