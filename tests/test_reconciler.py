"""
Tests for reconciling Canvas items into the tasks table (temporary SQLite DB).
"""
from __future__ import annotations

import asyncio

from studydash.domain.canvas.models import CanvasPlannable, CanvasPlannerItem, CanvasQuiz, CanvasSubmission
from studydash.domain.sync.matching import TitleCourseMatcher
from studydash.domain.sync.models import ResolvedModuleItem
from studydash.domain.sync.reconciler import TaskReconciler
from studydash.infra.db.repo.tasks_sqlite import TasksSqliteRepo

from fakes import FakeClock, assignment, cleanup_db, make_user, migrated_db


def _reconciler(db, clock=None):
    tasks = TasksSqliteRepo(db)
    return tasks, TaskReconciler(tasks, TitleCourseMatcher(tasks), clock or FakeClock())


def test_reconcile_twice_is_idempotent():
    async def run():
        db = await migrated_db()
        try:
            user = await make_user(db)
            tasks, reconciler = _reconciler(db)
            items = [assignment(1, "HW1", "2025-01-15T04:59:00Z"), assignment(2, "HW2", "2025-01-22T04:59:00Z")]

            first = await reconciler.reconcile_assignments(user.id, "CS101", items)
            second = await reconciler.reconcile_assignments(user.id, "CS101", items)

            rows = await tasks.list_for_user(user.id)
            assert (first.inserted, first.updated) == (2, 0)
            assert (second.inserted, second.updated) == (0, 2)
            assert [(t.title, t.due_date, t.due_time) for t in rows] == [
                ("HW1", "2025-01-14", "23:59"),
                ("HW2", "2025-01-21", "23:59"),
            ]
        finally:
            cleanup_db(db.path)

    asyncio.run(run())


def test_skipped_items_are_counted_and_not_written():
    async def run():
        db = await migrated_db()
        try:
            user = await make_user(db)
            tasks, reconciler = _reconciler(db)
            items = [
                assignment(1, "Reading", "2025-01-15T04:59:00Z", submission_types=("none",), points_possible=0),
                assignment(2, "Undated", None),
            ]
            stats = await reconciler.reconcile_assignments(user.id, "CS101", items)
            assert (stats.inserted, stats.updated, stats.skipped) == (0, 0, 2)
            assert await tasks.list_for_user(user.id) == []
        finally:
            cleanup_db(db.path)

    asyncio.run(run())


def test_same_title_and_course_from_two_sources_is_one_task():
    async def run():
        db = await migrated_db()
        try:
            user = await make_user(db)
            tasks, reconciler = _reconciler(db)
            await reconciler.reconcile_assignments(user.id, "CS101", [assignment(1, "Quiz 1", "2025-01-15T04:59:00Z")])
            await reconciler.reconcile_quizzes(
                user.id, "CS101",
                [CanvasQuiz(id=9, title="Quiz 1", quiz_type="assignment", due_at="2025-01-16T04:59:00Z", published=True)],
            )
            rows = await tasks.list_for_user(user.id)
            assert len(rows) == 1
            assert rows[0].due_date == "2025-01-15"
            # priority is never overwritten by a later source
            assert rows[0].priority == "medium"
        finally:
            cleanup_db(db.path)

    asyncio.run(run())


def test_same_title_in_different_courses_are_separate():
    async def run():
        db = await migrated_db()
        try:
            user = await make_user(db)
            tasks, reconciler = _reconciler(db)
            await reconciler.reconcile_assignments(user.id, "CS101", [assignment(1, "HW1", "2025-01-15T04:59:00Z")])
            await reconciler.reconcile_assignments(user.id, "MATH200", [assignment(2, "HW1", "2025-01-15T04:59:00Z")])
            assert len(await tasks.list_for_user(user.id)) == 2
        finally:
            cleanup_db(db.path)

    asyncio.run(run())


def test_hw1_from_planner_then_assignments_leaves_one_row_with_last_due():
    async def run():
        db = await migrated_db()
        try:
            user = await make_user(db)
            tasks, reconciler = _reconciler(db)
            planner = CanvasPlannerItem(
                plannable_type="assignment",
                context_type="Course",
                context_name="CS101",
                plannable=CanvasPlannable(id=1, title="HW1", due_at="2025-01-15T04:59:00Z"),
            )
            await reconciler.reconcile_planner_items(user.id, [planner])
            await reconciler.reconcile_assignments(user.id, "CS101", [assignment(1, "HW1", "2025-01-17T16:00:00Z")])

            rows = await tasks.list_for_user(user.id)
            assert len(rows) == 1
            assert (rows[0].due_date, rows[0].due_time) == ("2025-01-17", "11:00")
        finally:
            cleanup_db(db.path)

    asyncio.run(run())


def test_assignment_refresh_keeps_user_description_and_priority():
    async def run():
        db = await migrated_db()
        try:
            user = await make_user(db)
            tasks, reconciler = _reconciler(db)
            await reconciler.reconcile_assignments(
                user.id, "CS101", [assignment(1, "HW1", "2025-01-15T04:59:00Z", description="canvas text")]
            )
            task = (await tasks.list_for_user(user.id))[0]
            await tasks.update(task.id, user.id, {"description": "my notes", "priority": "low"}, "2025-01-11T00:00:00+00:00")

            submitted = assignment(
                1, "HW1", "2025-01-16T04:59:00Z",
                description="canvas text v2",
                submission=CanvasSubmission(workflow_state="submitted"),
            )
            await reconciler.reconcile_assignments(user.id, "CS101", [submitted])

            task = (await tasks.list_for_user(user.id))[0]
            assert task.description == "my notes"
            assert task.priority == "low"
            assert task.due_date == "2025-01-15"
            assert task.submitted is True
            assert task.completed is True
        finally:
            cleanup_db(db.path)

    asyncio.run(run())


def test_quiz_and_module_refresh_overwrite_description():
    async def run():
        db = await migrated_db()
        try:
            user = await make_user(db)
            tasks, reconciler = _reconciler(db)
            quiz = CanvasQuiz(id=1, title="Quiz 1", quiz_type="assignment", due_at="2025-01-15T04:59:00Z", question_count=5)
            await reconciler.reconcile_quizzes(user.id, "CS101", [quiz])
            task = (await tasks.list_for_user(user.id))[0]
            assert task.description == "assignment - 5 questions"
            await tasks.update(task.id, user.id, {"description": "my notes"}, "2025-01-11T00:00:00+00:00")

            await reconciler.reconcile_quizzes(user.id, "CS101", [quiz])
            assert (await tasks.get(task.id, user.id)).description == "assignment - 5 questions"

            lab = ResolvedModuleItem(
                module_name="Week 1", title="Quiz 1", type="Quiz", quiz_lti=False,
                completed=True, due_at="2025-01-15T04:59:00Z", description="Module: Week 1",
            )
            await reconciler.reconcile_module_items(user.id, "CS101", [lab])
            task = await tasks.get(task.id, user.id)
            assert task.description == "Module: Week 1"
            assert task.completed is True
        finally:
            cleanup_db(db.path)

    asyncio.run(run())


def test_empty_course_name_matches_null_course():
    async def run():
        db = await migrated_db()
        try:
            user = await make_user(db)
            tasks, reconciler = _reconciler(db)
            await reconciler.reconcile_assignments(user.id, "", [assignment(1, "HW1", "2025-01-15T04:59:00Z")])
            await reconciler.reconcile_assignments(user.id, "", [assignment(1, "HW1", "2025-01-15T04:59:00Z")])
            rows = await tasks.list_for_user(user.id)
            assert len(rows) == 1
            assert rows[0].course is None
        finally:
            cleanup_db(db.path)

    asyncio.run(run())
