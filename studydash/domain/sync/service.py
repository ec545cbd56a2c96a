from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional, Sequence

from studydash.constants import (
    SOURCE_MODULES,
    SOURCE_PLANNER,
    SOURCE_QUIZZES,
    SYNC_STATUS_FAILED,
    SYNC_STATUS_SUCCESS,
)
from studydash.domain.canvas.models import CanvasCourse
from studydash.domain.canvas.names import clean_course_name, extract_course_code
from studydash.domain.common.errors import ValidationError
from studydash.domain.common.time import to_iso
from studydash.domain.sync.guard import SyncGuard
from studydash.domain.sync.models import ReconcileStats, ResolvedModuleItem, SyncResult
from studydash.domain.sync.ports import CanvasGateway, Clock, CourseStore, SyncLogStore, TaskStore
from studydash.domain.sync.reconciler import TaskReconciler
from studydash.models import User
from studydash.utils import date_range_around

logger = logging.getLogger(__name__)

GatewayFactory = Callable[[str], CanvasGateway]


class SyncService:
    """
    Canvas -> local store synchronization. No HTTP framework. No sqlite.

    Login, the manual sync endpoints and the background scheduler all go
    through run(); run() serializes per user and appends the sync log row.
    """

    def __init__(
        self,
        gateways: GatewayFactory,
        courses: CourseStore,
        tasks: TaskStore,
        logs: SyncLogStore,
        reconciler: TaskReconciler,
        guard: SyncGuard,
        clock: Clock,
        extra_sources: Sequence[str] = (),
        planner_months_before: int = 2,
        planner_months_after: int = 3,
    ) -> None:
        self._gateways = gateways
        self._courses = courses
        self._tasks = tasks
        self._logs = logs
        self._reconciler = reconciler
        self._guard = guard
        self._clock = clock
        self._extra_sources = frozenset(extra_sources)
        self._planner_months_before = planner_months_before
        self._planner_months_after = planner_months_after

    # ------------------------------------------------------------------
    # Entry points

    async def run(
        self,
        user: User,
        sync_type: str,
        *,
        reset: bool = False,
        client_timezone: Optional[str] = None,
        client_offset: Optional[int] = None,
        course_delay: float = 0.0,
    ) -> SyncResult:
        token = _require_token(user)
        async with self._guard.hold(user.id):
            try:
                if reset:
                    result = await self.reset_and_sync(
                        user.id, token, client_timezone, client_offset, course_delay=course_delay
                    )
                else:
                    result = await self.perform_full_sync(
                        user.id, token, client_timezone, client_offset, course_delay=course_delay
                    )
            except Exception as e:
                await self._log(user.id, sync_type, SYNC_STATUS_FAILED, error_message=str(e) or type(e).__name__)
                raise
            await self._log(user.id, sync_type, SYNC_STATUS_SUCCESS, result.assignments, result.modules)
            return result

    async def run_course_sync(self, user: User) -> list[CanvasCourse]:
        token = _require_token(user)
        async with self._guard.hold(user.id):
            return await self.sync_courses(user.id, token)

    async def sync_courses(self, user_id: int, token: str) -> list[CanvasCourse]:
        gateway = self._gateways(token)
        try:
            return await self._sync_courses(gateway, user_id)
        finally:
            await gateway.aclose()

    async def perform_full_sync(
        self,
        user_id: int,
        token: str,
        client_timezone: Optional[str] = None,
        client_offset: Optional[int] = None,
        *,
        course_delay: float = 0.0,
    ) -> SyncResult:
        gateway = self._gateways(token)
        try:
            return await self._full_sync(gateway, user_id, client_timezone, client_offset, course_delay)
        finally:
            await gateway.aclose()

    async def reset_and_sync(
        self,
        user_id: int,
        token: str,
        client_timezone: Optional[str] = None,
        client_offset: Optional[int] = None,
        *,
        course_delay: float = 0.0,
    ) -> SyncResult:
        removed = await self._tasks.delete_all_for_user(user_id)
        logger.info("Cleared %d tasks for user %s before resync", removed, user_id)
        return await self.perform_full_sync(
            user_id, token, client_timezone, client_offset, course_delay=course_delay
        )

    # ------------------------------------------------------------------
    # Steps

    async def _sync_courses(self, gateway: CanvasGateway, user_id: int) -> list[CanvasCourse]:
        canvas_courses = await gateway.fetch_courses()
        now_iso = to_iso(self._clock.now())

        await self._courses.delete_canvas_courses(user_id)
        for course in canvas_courses:
            raw_name = course.short_name or course.long_name
            await self._courses.create(
                user_id=user_id,
                name=clean_course_name(course.short_name, course.long_name),
                canvas_course_id=str(course.id),
                professor=extract_course_code(raw_name, course.course_code),
                now_iso=now_iso,
            )
        return canvas_courses

    async def _full_sync(
        self,
        gateway: CanvasGateway,
        user_id: int,
        client_timezone: Optional[str],
        client_offset: Optional[int],
        course_delay: float,
    ) -> SyncResult:
        canvas_courses = await self._sync_courses(gateway, user_id)
        result = SyncResult(courses=len(canvas_courses))

        for index, course in enumerate(canvas_courses):
            if index and course_delay > 0:
                await asyncio.sleep(course_delay)

            course_name = clean_course_name(course.short_name, course.long_name)
            try:
                assignments = await gateway.fetch_assignments(course.id)
                logger.info("%s: found %d assignments/quizzes", course_name, len(assignments))
                stats = await self._reconciler.reconcile_assignments(
                    user_id, course_name, assignments, client_timezone, client_offset
                )
                result.stats.add(stats)
                result.assignments += len(assignments)
            except Exception:
                logger.warning("Failed to sync data for course %s", course.id, exc_info=True)
                result.failed_courses.append(course.id)
                continue

            if SOURCE_QUIZZES in self._extra_sources:
                result.quizzes += await self._sync_course_quizzes(
                    gateway, user_id, course, course_name, client_timezone, client_offset, result.stats
                )
            if SOURCE_MODULES in self._extra_sources:
                result.modules += await self._sync_course_modules(
                    gateway, user_id, course, course_name, client_timezone, client_offset, result.stats
                )

        if SOURCE_PLANNER in self._extra_sources:
            result.planner_items = await self._sync_planner(
                gateway, user_id, client_timezone, client_offset, result.stats
            )

        logger.info(
            "Full sync for user %s: %d courses, %d assignments (%d inserted, %d updated, %d skipped)",
            user_id, result.courses, result.assignments,
            result.stats.inserted, result.stats.updated, result.stats.skipped,
        )
        return result

    async def _sync_course_quizzes(
        self,
        gateway: CanvasGateway,
        user_id: int,
        course: CanvasCourse,
        course_name: str,
        client_timezone: Optional[str],
        client_offset: Optional[int],
        totals: ReconcileStats,
    ) -> int:
        try:
            quizzes = await gateway.fetch_quizzes(course.id)
            stats = await self._reconciler.reconcile_quizzes(
                user_id, course_name, quizzes, client_timezone, client_offset
            )
        except Exception:
            logger.warning("Failed to sync quizzes for course %s", course.id, exc_info=True)
            return 0
        totals.add(stats)
        return stats.inserted

    async def _sync_course_modules(
        self,
        gateway: CanvasGateway,
        user_id: int,
        course: CanvasCourse,
        course_name: str,
        client_timezone: Optional[str],
        client_offset: Optional[int],
        totals: ReconcileStats,
    ) -> int:
        try:
            items = await self.resolve_module_items(gateway, course.id)
            stats = await self._reconciler.reconcile_module_items(
                user_id, course_name, items, client_timezone, client_offset
            )
        except Exception:
            logger.warning("Failed to sync modules for course %s", course.id, exc_info=True)
            return 0
        totals.add(stats)
        return stats.inserted

    async def resolve_module_items(self, gateway: CanvasGateway, course_id: int) -> list[ResolvedModuleItem]:
        """Gradable module items, with due dates looked up when the module listing omits them."""
        resolved: list[ResolvedModuleItem] = []
        for module in await gateway.fetch_modules(course_id):
            for item in module.items:
                if not item.is_gradable:
                    continue

                due_at = item.inline_due_at
                description = f"Module: {module.name}"
                if not due_at and item.content_id:
                    logger.debug("No content_details due date for %s, fetching assignment %s", item.title, item.content_id)
                    details = await gateway.fetch_assignment(course_id, item.content_id)
                    if details is not None:
                        due_at = details.due_at
                        description = details.description or description

                resolved.append(
                    ResolvedModuleItem(
                        module_name=module.name,
                        title=item.title,
                        type=item.type,
                        quiz_lti=item.quiz_lti,
                        completed=item.is_completed,
                        due_at=due_at,
                        description=description,
                    )
                )
        return resolved

    async def _sync_planner(
        self,
        gateway: CanvasGateway,
        user_id: int,
        client_timezone: Optional[str],
        client_offset: Optional[int],
        totals: ReconcileStats,
    ) -> int:
        start_date, end_date = date_range_around(
            self._clock.now().date(), self._planner_months_before, self._planner_months_after
        )
        try:
            items = await gateway.fetch_planner_items(start_date, end_date)
            stats = await self._reconciler.reconcile_planner_items(
                user_id, items, client_timezone, client_offset
            )
        except Exception:
            logger.warning("Failed to sync planner items for user %s", user_id, exc_info=True)
            return 0
        totals.add(stats)
        return len(items)

    async def _log(
        self,
        user_id: int,
        sync_type: str,
        status: str,
        assignments_count: int = 0,
        modules_count: int = 0,
        error_message: Optional[str] = None,
    ) -> None:
        try:
            await self._logs.append(
                user_id=user_id,
                synced_at_iso=to_iso(self._clock.now()),
                sync_type=sync_type,
                status=status,
                assignments_count=assignments_count,
                modules_count=modules_count,
                error_message=error_message,
            )
        except Exception:
            logger.error("Error logging sync for user %s", user_id, exc_info=True)


def _require_token(user: User) -> str:
    if not user.canvas_token:
        raise ValidationError("Canvas token is required. Please add your Canvas API token first.")
    return user.canvas_token
