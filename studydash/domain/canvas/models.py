"""
Typed views over Canvas REST payloads.

Each `from_json` reads only the keys the sync engine uses; anything else in the
payload is dropped. Missing identity keys raise ValueError.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional


def _require(payload: Mapping[str, Any], key: str, kind: str) -> Any:
    if not isinstance(payload, Mapping):
        raise ValueError(f"{kind} payload must be an object, got {type(payload).__name__}")
    value = payload.get(key)
    if value is None:
        raise ValueError(f"{kind} payload is missing '{key}'")
    return value


def _as_int(value: Any, key: str, kind: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"{kind} '{key}' is not an integer: {value!r}") from e


def _opt_int(value: Any) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _opt_float(value: Any) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _opt_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value)
    return text if text else None


@dataclass(frozen=True)
class CanvasCourse:
    id: int
    long_name: str
    short_name: str
    course_code: str
    term: Optional[str]

    @classmethod
    def from_json(cls, payload: Mapping[str, Any]) -> "CanvasCourse":
        course_id = _as_int(_require(payload, "id", "course"), "id", "course")
        long_name = str(payload.get("longName") or "")
        short_name = str(payload.get("shortName") or "")
        if not long_name and not short_name:
            raise ValueError(f"course {course_id} has neither shortName nor longName")
        return cls(
            id=course_id,
            long_name=long_name,
            short_name=short_name,
            course_code=str(payload.get("courseCode") or ""),
            term=_opt_str(payload.get("term")),
        )


@dataclass(frozen=True)
class CanvasSubmission:
    workflow_state: Optional[str] = None
    submitted_at: Optional[str] = None

    @classmethod
    def from_json(cls, payload: Any) -> Optional["CanvasSubmission"]:
        if not isinstance(payload, Mapping):
            return None
        return cls(
            workflow_state=_opt_str(payload.get("workflow_state")),
            submitted_at=_opt_str(payload.get("submitted_at")),
        )


@dataclass(frozen=True)
class CanvasAssignment:
    id: int
    name: str
    due_at: Optional[str]
    submission_types: tuple[str, ...] = ()
    points_possible: Optional[float] = None
    description: Optional[str] = None
    published: bool = False
    workflow_state: Optional[str] = None
    html_url: Optional[str] = None
    is_quiz_assignment: bool = False
    is_quiz_lti_assignment: bool = False
    submission: Optional[CanvasSubmission] = None

    @property
    def is_published(self) -> bool:
        return self.published and self.workflow_state == "published"

    @classmethod
    def from_json(cls, payload: Mapping[str, Any]) -> "CanvasAssignment":
        assignment_id = _as_int(_require(payload, "id", "assignment"), "id", "assignment")
        name = str(_require(payload, "name", "assignment"))
        types = payload.get("submission_types") or ()
        return cls(
            id=assignment_id,
            name=name,
            due_at=_opt_str(payload.get("due_at")),
            submission_types=tuple(str(t) for t in types),
            points_possible=_opt_float(payload.get("points_possible")),
            description=_opt_str(payload.get("description")),
            published=bool(payload.get("published")),
            workflow_state=_opt_str(payload.get("workflow_state")),
            html_url=_opt_str(payload.get("html_url")),
            is_quiz_assignment=bool(payload.get("is_quiz_assignment")),
            is_quiz_lti_assignment=bool(payload.get("is_quiz_lti_assignment")),
            submission=CanvasSubmission.from_json(payload.get("submission")),
        )


@dataclass(frozen=True)
class CanvasQuiz:
    id: int
    title: str
    quiz_type: str
    due_at: Optional[str] = None
    description: Optional[str] = None
    question_count: int = 0
    time_limit: Optional[int] = None
    published: bool = False
    html_url: Optional[str] = None

    @classmethod
    def from_json(cls, payload: Mapping[str, Any]) -> "CanvasQuiz":
        quiz_id = _as_int(_require(payload, "id", "quiz"), "id", "quiz")
        return cls(
            id=quiz_id,
            title=str(_require(payload, "title", "quiz")),
            quiz_type=str(payload.get("quiz_type") or "assignment"),
            due_at=_opt_str(payload.get("due_at")),
            description=_opt_str(payload.get("description")),
            question_count=_opt_int(payload.get("question_count")) or 0,
            time_limit=_opt_int(payload.get("time_limit")),
            published=bool(payload.get("published")),
            html_url=_opt_str(payload.get("html_url")),
        )


@dataclass(frozen=True)
class CanvasCompletionRequirement:
    type: Optional[str] = None
    completed: bool = False


@dataclass(frozen=True)
class CanvasContentDetails:
    due_at: Optional[str] = None
    points_possible: Optional[float] = None


@dataclass(frozen=True)
class CanvasModuleItem:
    id: int
    title: str
    type: str
    content_id: Optional[int] = None
    quiz_lti: bool = False
    html_url: Optional[str] = None
    completion_requirement: Optional[CanvasCompletionRequirement] = None
    content_details: Optional[CanvasContentDetails] = None

    @property
    def is_gradable(self) -> bool:
        return self.type in ("Assignment", "Quiz")

    @property
    def is_completed(self) -> bool:
        return bool(self.completion_requirement and self.completion_requirement.completed)

    @property
    def inline_due_at(self) -> Optional[str]:
        return self.content_details.due_at if self.content_details else None

    @classmethod
    def from_json(cls, payload: Mapping[str, Any]) -> "CanvasModuleItem":
        item_id = _as_int(_require(payload, "id", "module item"), "id", "module item")
        requirement = payload.get("completion_requirement")
        details = payload.get("content_details")
        return cls(
            id=item_id,
            title=str(_require(payload, "title", "module item")),
            type=str(payload.get("type") or ""),
            content_id=_opt_int(payload.get("content_id")),
            quiz_lti=bool(payload.get("quiz_lti")),
            html_url=_opt_str(payload.get("html_url")),
            completion_requirement=CanvasCompletionRequirement(
                type=_opt_str(requirement.get("type")),
                completed=bool(requirement.get("completed")),
            ) if isinstance(requirement, Mapping) else None,
            content_details=CanvasContentDetails(
                due_at=_opt_str(details.get("due_at")),
                points_possible=_opt_float(details.get("points_possible")),
            ) if isinstance(details, Mapping) else None,
        )


@dataclass(frozen=True)
class CanvasModule:
    id: int
    name: str
    items: tuple[CanvasModuleItem, ...] = field(default_factory=tuple)

    @classmethod
    def from_json(cls, payload: Mapping[str, Any]) -> "CanvasModule":
        module_id = _as_int(_require(payload, "id", "module"), "id", "module")
        items = payload.get("items") or ()
        return cls(
            id=module_id,
            name=str(payload.get("name") or ""),
            items=tuple(CanvasModuleItem.from_json(i) for i in items),
        )


@dataclass(frozen=True)
class CanvasPlannable:
    id: int
    title: str
    due_at: Optional[str] = None
    html_url: Optional[str] = None


@dataclass(frozen=True)
class CanvasPlannerItem:
    plannable_type: str
    context_type: Optional[str]
    context_name: Optional[str]
    plannable: CanvasPlannable
    submitted: bool = False

    @classmethod
    def from_json(cls, payload: Mapping[str, Any]) -> "CanvasPlannerItem":
        raw = _require(payload, "plannable", "planner item")
        plannable = CanvasPlannable(
            id=_as_int(_require(raw, "id", "plannable"), "id", "plannable"),
            title=str(_require(raw, "title", "plannable")),
            due_at=_opt_str(raw.get("due_at")),
            html_url=_opt_str(raw.get("html_url")),
        )
        submissions = payload.get("submissions")
        # Canvas sends `false` here when there is nothing to report
        submitted = isinstance(submissions, Mapping) and submissions.get("submitted") is True
        return cls(
            plannable_type=str(payload.get("plannable_type") or ""),
            context_type=_opt_str(payload.get("context_type")),
            context_name=_opt_str(payload.get("context_name")),
            plannable=plannable,
            submitted=submitted,
        )
