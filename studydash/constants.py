"""
Constants for tasks, courses and sync bookkeeping.
"""
from __future__ import annotations

# Task types (stored in tasks.type)
TASK_TYPE_ASSIGNMENT = "assignment"
TASK_TYPE_EXAM = "exam"
TASK_TYPE_PROJECT = "project"
TASK_TYPE_MEETING = "meeting"
TASK_TYPE_STUDY = "study"
TASK_TYPE_DEADLINE = "deadline"
TASK_TYPE_OTHER = "other"

TASK_TYPES = (
    TASK_TYPE_ASSIGNMENT,
    TASK_TYPE_EXAM,
    TASK_TYPE_PROJECT,
    TASK_TYPE_MEETING,
    TASK_TYPE_STUDY,
    TASK_TYPE_DEADLINE,
    TASK_TYPE_OTHER,
)

# Task priorities (stored in tasks.priority)
PRIORITY_HIGH = "high"
PRIORITY_MEDIUM = "medium"
PRIORITY_LOW = "low"

PRIORITIES = (PRIORITY_HIGH, PRIORITY_MEDIUM, PRIORITY_LOW)

# Sync log types (stored in sync_logs.sync_type)
SYNC_TYPE_LOGIN = "login"
SYNC_TYPE_BACKGROUND = "background"
SYNC_TYPE_MANUAL = "manual"
SYNC_TYPE_RESET = "reset"

# Sync log status (stored in sync_logs.status)
SYNC_STATUS_SUCCESS = "success"
SYNC_STATUS_FAILED = "failed"

# Optional sync sources beyond course assignments (SYNC_EXTRA_SOURCES)
SOURCE_QUIZZES = "quizzes"
SOURCE_MODULES = "modules"
SOURCE_PLANNER = "planner"
EXTRA_SOURCES = (SOURCE_QUIZZES, SOURCE_MODULES, SOURCE_PLANNER)

# Canvas timestamps are rendered in this zone before being stored
REFERENCE_TIMEZONE = "America/New_York"

# Course code stored when none can be extracted from the card
UNKNOWN_COURSE_CODE = "N/A"
