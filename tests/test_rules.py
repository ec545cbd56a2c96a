"""
Unit tests for mapping Canvas items to task drafts (pure, no DB).
"""
from __future__ import annotations

from studydash.domain.canvas.models import CanvasPlannable, CanvasPlannerItem, CanvasQuiz, CanvasSubmission
from studydash.domain.sync.models import ResolvedModuleItem
from studydash.domain.sync.rules import (
    ASSIGNMENT_REFRESH,
    QUIZ_REFRESH,
    assignment_is_submitted,
    assignment_task_type,
    draft_from_assignment,
    draft_from_module_item,
    draft_from_planner_item,
    draft_from_quiz,
    is_optional_assignment,
    quiz_description,
)

from fakes import assignment

DUE = "2025-01-15T04:59:00Z"


# ----- assignments -----


def test_assignment_without_due_date_is_skipped():
    assert draft_from_assignment(assignment(1, "Reading", None), "CS101") is None


def test_optional_assignment_is_skipped():
    for points in (None, 0, 0.0):
        a = assignment(1, "Reading", DUE, submission_types=("none",), points_possible=points)
        assert is_optional_assignment(a) is True
        assert draft_from_assignment(a, "CS101") is None


def test_assignment_with_points_is_not_optional():
    a = assignment(1, "Participation", DUE, submission_types=("none",), points_possible=5.0)
    assert is_optional_assignment(a) is False
    assert draft_from_assignment(a, "CS101") is not None


def test_mixed_submission_types_are_not_optional():
    a = assignment(1, "Paper", DUE, submission_types=("none", "online_upload"), points_possible=0)
    assert is_optional_assignment(a) is False


def test_assignment_type_derivation():
    assert assignment_task_type(assignment(1, "a", DUE)) == "assignment"
    assert assignment_task_type(assignment(1, "a", DUE, is_quiz_assignment=True)) == "exam"
    assert assignment_task_type(assignment(1, "a", DUE, is_quiz_lti_assignment=True)) == "exam"
    assert assignment_task_type(assignment(1, "a", DUE, submission_types=("online_quiz",))) == "exam"
    assert assignment_task_type(assignment(1, "a", DUE, submission_types=("external_tool",))) == "exam"


def test_assignment_submission_detection():
    assert assignment_is_submitted(assignment(1, "a", DUE)) is False
    graded = assignment(1, "a", DUE, submission=CanvasSubmission(workflow_state="graded"))
    assert assignment_is_submitted(graded) is True
    late = assignment(1, "a", DUE, submission=CanvasSubmission(workflow_state="pending_review", submitted_at="2025-01-14T00:00:00Z"))
    assert assignment_is_submitted(late) is True
    unsubmitted = assignment(1, "a", DUE, submission=CanvasSubmission(workflow_state="unsubmitted"))
    assert assignment_is_submitted(unsubmitted) is False


def test_assignment_draft_sets_completed_from_submitted():
    a = assignment(1, "HW1", DUE, description="<p>Do it</p>", submission=CanvasSubmission(workflow_state="submitted"))
    draft = draft_from_assignment(a, "CS101")
    assert draft is not None
    assert draft.submitted is True
    assert draft.completed is True
    assert draft.priority == "medium"
    assert draft.description == "<p>Do it</p>"
    assert draft.refresh_fields == ASSIGNMENT_REFRESH
    assert "description" not in draft.refresh_fields


# ----- quizzes -----


def _quiz(**kwargs) -> CanvasQuiz:
    kwargs.setdefault("id", 1)
    kwargs.setdefault("title", "Quiz 1")
    kwargs.setdefault("quiz_type", "assignment")
    kwargs.setdefault("due_at", DUE)
    kwargs.setdefault("published", True)
    return CanvasQuiz(**kwargs)


def test_practice_quiz_is_skipped():
    assert draft_from_quiz(_quiz(quiz_type="practice_quiz"), "CS101") is None


def test_graded_quiz_is_high_priority_exam():
    draft = draft_from_quiz(_quiz(), "CS101")
    assert draft is not None
    assert draft.type == "exam"
    assert draft.priority == "high"
    assert draft.refresh_fields == QUIZ_REFRESH


def test_survey_is_other():
    draft = draft_from_quiz(_quiz(quiz_type="survey"), "CS101")
    assert draft is not None
    assert draft.type == "other"
    assert draft.priority == "medium"


def test_quiz_description_fallback():
    assert quiz_description(_quiz(question_count=10)) == "assignment - 10 questions"
    assert quiz_description(_quiz(question_count=10, time_limit=30)) == "assignment - 10 questions, 30 minutes"
    assert quiz_description(_quiz(description="Covers ch. 1")) == "Covers ch. 1"


# ----- module items and planner -----


def test_module_quiz_item_is_exam_and_carries_completion():
    item = ResolvedModuleItem(
        module_name="Week 1", title="Check-in", type="Quiz", quiz_lti=False,
        completed=True, due_at=DUE, description="Module: Week 1",
    )
    draft = draft_from_module_item(item, "CS101")
    assert draft is not None
    assert draft.type == "exam"
    assert draft.completed is True
    assert draft.submitted is False
    assert draft.description == "Module: Week 1"


def test_module_item_without_due_date_is_skipped():
    item = ResolvedModuleItem(
        module_name="Week 1", title="Lab", type="Assignment", quiz_lti=False,
        completed=False, due_at=None, description="Module: Week 1",
    )
    assert draft_from_module_item(item, "CS101") is None


def test_planner_item_uses_context_name_as_course():
    item = CanvasPlannerItem(
        plannable_type="assignment",
        context_type="Course",
        context_name="CS101",
        plannable=CanvasPlannable(id=1, title="HW1", due_at=DUE),
        submitted=True,
    )
    draft = draft_from_planner_item(item)
    assert draft is not None
    assert draft.course == "CS101"
    assert draft.type == "assignment"
    assert draft.submitted is True
    assert draft.completed is True
    assert draft.description is None


def test_planner_course_is_cleaned_like_course_cards():
    item = CanvasPlannerItem(
        plannable_type="assignment",
        context_type="Course",
        context_name="(25FS-Full) CS 1010 Intro (001)",
        plannable=CanvasPlannable(id=1, title="HW1", due_at=DUE),
        submitted=False,
    )
    draft = draft_from_planner_item(item)
    assert draft is not None
    assert draft.course == "CS 1010 Intro"


def test_planner_item_without_context_has_no_course():
    item = CanvasPlannerItem(
        plannable_type="assignment",
        context_type="User",
        context_name=None,
        plannable=CanvasPlannable(id=1, title="Personal", due_at=DUE),
        submitted=False,
    )
    draft = draft_from_planner_item(item)
    assert draft is not None
    assert draft.course is None
