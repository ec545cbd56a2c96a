"""
Per-source mapping of Canvas items onto the task shape.

Each draft_from_* returns None when the item must not become a task.
"""
from __future__ import annotations

import logging
from typing import Optional

from studydash.constants import (
    PRIORITY_HIGH,
    PRIORITY_MEDIUM,
    TASK_TYPE_ASSIGNMENT,
    TASK_TYPE_EXAM,
    TASK_TYPE_OTHER,
)
from studydash.domain.canvas.models import CanvasAssignment, CanvasPlannerItem, CanvasQuiz
from studydash.domain.canvas.names import clean_course_name
from studydash.domain.sync.models import (
    FIELD_COMPLETED,
    FIELD_DESCRIPTION,
    FIELD_DUE_DATE,
    FIELD_DUE_TIME,
    FIELD_SUBMITTED,
    FIELD_TYPE,
    ResolvedModuleItem,
    TaskDraft,
)

logger = logging.getLogger(__name__)

SOURCE_ASSIGNMENT = "assignment"
SOURCE_QUIZ = "quiz"
SOURCE_MODULE = "module"
SOURCE_PLANNER = "planner"

# Title, course and priority belong to the user once the task exists.
# Quiz and module refreshes also rewrite the description; assignments don't.
ASSIGNMENT_REFRESH = frozenset({FIELD_DUE_DATE, FIELD_DUE_TIME, FIELD_TYPE, FIELD_SUBMITTED, FIELD_COMPLETED})
QUIZ_REFRESH = frozenset({FIELD_DUE_DATE, FIELD_DUE_TIME, FIELD_DESCRIPTION})
MODULE_REFRESH = frozenset({FIELD_DUE_DATE, FIELD_DUE_TIME, FIELD_DESCRIPTION, FIELD_TYPE, FIELD_COMPLETED})
PLANNER_REFRESH = frozenset({FIELD_SUBMITTED, FIELD_COMPLETED, FIELD_DUE_DATE, FIELD_DUE_TIME})

QUIZ_SUBMISSION_TYPES = {"online_quiz", "external_tool"}
SUBMITTED_STATES = {"submitted", "graded"}


def is_optional_assignment(assignment: CanvasAssignment) -> bool:
    """Nothing to hand in and worth no points: readings and announcements."""
    no_submission = set(assignment.submission_types) == {"none"}
    no_points = not assignment.points_possible
    return no_submission and no_points


def assignment_task_type(assignment: CanvasAssignment) -> str:
    is_quiz = (
        assignment.is_quiz_assignment
        or assignment.is_quiz_lti_assignment
        or bool(QUIZ_SUBMISSION_TYPES.intersection(assignment.submission_types))
    )
    return TASK_TYPE_EXAM if is_quiz else TASK_TYPE_ASSIGNMENT


def assignment_is_submitted(assignment: CanvasAssignment) -> bool:
    submission = assignment.submission
    if submission is None:
        return False
    return submission.workflow_state in SUBMITTED_STATES or submission.submitted_at is not None


def draft_from_assignment(assignment: CanvasAssignment, course: Optional[str]) -> Optional[TaskDraft]:
    if not assignment.due_at:
        logger.debug("Skipping assignment without due date: %s", assignment.name)
        return None
    if is_optional_assignment(assignment):
        logger.debug("Skipping optional assignment (no submission, no points): %s", assignment.name)
        return None

    submitted = assignment_is_submitted(assignment)
    return TaskDraft(
        source=SOURCE_ASSIGNMENT,
        title=assignment.name,
        course=course,
        due_at=assignment.due_at,
        type=assignment_task_type(assignment),
        priority=PRIORITY_MEDIUM,
        description=assignment.description,
        submitted=submitted,
        completed=submitted,
        refresh_fields=ASSIGNMENT_REFRESH,
    )


def quiz_description(quiz: CanvasQuiz) -> str:
    if quiz.description:
        return quiz.description
    text = f"{quiz.quiz_type} - {quiz.question_count} questions"
    if quiz.time_limit:
        text += f", {quiz.time_limit} minutes"
    return text


def draft_from_quiz(quiz: CanvasQuiz, course: Optional[str]) -> Optional[TaskDraft]:
    if not quiz.due_at or quiz.quiz_type == "practice_quiz":
        return None
    return TaskDraft(
        source=SOURCE_QUIZ,
        title=quiz.title,
        course=course,
        due_at=quiz.due_at,
        type=TASK_TYPE_OTHER if quiz.quiz_type == "survey" else TASK_TYPE_EXAM,
        priority=PRIORITY_HIGH if quiz.quiz_type == "assignment" else PRIORITY_MEDIUM,
        description=quiz_description(quiz),
        submitted=False,
        completed=False,
        refresh_fields=QUIZ_REFRESH,
    )


def draft_from_module_item(item: ResolvedModuleItem, course: Optional[str]) -> Optional[TaskDraft]:
    if not item.due_at:
        logger.debug("Skipping module item %s - no due date", item.title)
        return None
    is_exam = item.type == "Quiz" or item.quiz_lti
    return TaskDraft(
        source=SOURCE_MODULE,
        title=item.title,
        course=course,
        due_at=item.due_at,
        type=TASK_TYPE_EXAM if is_exam else TASK_TYPE_ASSIGNMENT,
        priority=PRIORITY_MEDIUM,
        description=item.description,
        submitted=False,
        completed=item.completed,
        refresh_fields=MODULE_REFRESH,
    )


def draft_from_planner_item(item: CanvasPlannerItem) -> Optional[TaskDraft]:
    if not item.plannable.due_at:
        return None
    return TaskDraft(
        source=SOURCE_PLANNER,
        title=item.plannable.title,
        course=clean_course_name(item.context_name or "", "") or None,
        due_at=item.plannable.due_at,
        type=TASK_TYPE_ASSIGNMENT,
        priority=PRIORITY_MEDIUM,
        description=None,
        submitted=item.submitted,
        completed=item.submitted,
        refresh_fields=PLANNER_REFRESH,
    )
