# -*- coding: utf-8 -*-
"""Shared data models (User, Course, Task, SyncLog) as stored in SQLite."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class User:
    id: int
    username: str
    password: str
    canvas_token: Optional[str]
    email: str
    role: str
    join_date: str
    created_at: str
    updated_at: str

    @property
    def canvas_token_preview(self) -> Optional[str]:
        if not self.canvas_token:
            return None
        return self.canvas_token[:10] + "..."


@dataclass(frozen=True)
class Course:
    id: int
    user_id: int
    name: str
    professor: Optional[str]  # holds the extracted course code for Canvas rows
    credits: Optional[int]
    canvas_course_id: Optional[str]  # NULL for courses created by hand
    created_at: str
    updated_at: str


@dataclass(frozen=True)
class Task:
    id: int
    user_id: int
    title: str
    description: Optional[str]
    type: str  # see constants.TASK_TYPES
    course: Optional[str]  # free text, matched by name only
    due_date: str  # YYYY-MM-DD
    due_time: Optional[str]  # HH:MM
    priority: str  # 'high' | 'medium' | 'low'
    completed: bool
    submitted: bool
    created_at: str
    updated_at: str


@dataclass(frozen=True)
class SyncLog:
    id: int
    user_id: int
    synced_at: str  # ISO datetime, UTC
    sync_type: str
    status: str
    assignments_count: int
    modules_count: int
    error_message: Optional[str]
