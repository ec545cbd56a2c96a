from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

# Columns a sync source may overwrite on an existing task
FIELD_DUE_DATE = "due_date"
FIELD_DUE_TIME = "due_time"
FIELD_TYPE = "type"
FIELD_DESCRIPTION = "description"
FIELD_SUBMITTED = "submitted"
FIELD_COMPLETED = "completed"

REFRESHABLE_FIELDS = frozenset(
    {FIELD_DUE_DATE, FIELD_DUE_TIME, FIELD_TYPE, FIELD_DESCRIPTION, FIELD_SUBMITTED, FIELD_COMPLETED}
)


@dataclass(frozen=True)
class TaskDraft:
    """A Canvas item mapped to the task shape, before timestamp normalization."""
    source: str  # 'assignment' | 'quiz' | 'module' | 'planner'
    title: str
    course: Optional[str]
    due_at: str  # raw Canvas timestamp
    type: str
    priority: str
    description: Optional[str]
    submitted: bool
    completed: bool
    refresh_fields: frozenset[str] = field(default_factory=frozenset)


@dataclass(frozen=True)
class NewTask:
    user_id: int
    title: str
    description: Optional[str]
    type: str
    course: Optional[str]
    due_date: str
    due_time: Optional[str]
    priority: str
    completed: bool = False
    submitted: bool = False


@dataclass(frozen=True)
class ResolvedModuleItem:
    """A gradable module item whose due date has been looked up if needed."""
    module_name: str
    title: str
    type: str
    quiz_lti: bool
    completed: bool
    due_at: Optional[str]
    description: str


@dataclass
class ReconcileStats:
    inserted: int = 0
    updated: int = 0
    skipped: int = 0

    def add(self, other: "ReconcileStats") -> None:
        self.inserted += other.inserted
        self.updated += other.updated
        self.skipped += other.skipped


@dataclass
class SyncResult:
    courses: int = 0
    assignments: int = 0
    quizzes: int = 0
    modules: int = 0
    planner_items: int = 0
    failed_courses: list[int] = field(default_factory=list)
    stats: ReconcileStats = field(default_factory=ReconcileStats)


@dataclass(frozen=True)
class BackgroundSummary:
    synced: int
    skipped: int
    failed: int
