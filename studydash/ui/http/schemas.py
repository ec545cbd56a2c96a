from __future__ import annotations

from typing import Annotated, Optional

from pydantic import AfterValidator, BaseModel, Field, field_validator, model_validator

from studydash.constants import PRIORITIES, TASK_TYPES
from studydash.utils import parse_date_string, parse_time_string


def _check_type(v: str) -> str:
    if v not in TASK_TYPES:
        raise ValueError("Invalid task type")
    return v


def _check_priority(v: str) -> str:
    if v not in PRIORITIES:
        raise ValueError("Invalid priority")
    return v


def _check_date(v: str) -> str:
    if parse_date_string(v) is None:
        raise ValueError("due_date must be YYYY-MM-DD")
    return v


def _check_time(v: Optional[str]) -> Optional[str]:
    if not v:
        return None
    parsed = parse_time_string(v)
    if parsed is None:
        raise ValueError("due_time must be HH:MM")
    return f"{parsed[0]:02d}:{parsed[1]:02d}"


TaskType = Annotated[str, AfterValidator(_check_type)]
Priority = Annotated[str, AfterValidator(_check_priority)]
DueDate = Annotated[str, AfterValidator(_check_date)]
DueTime = Annotated[Optional[str], AfterValidator(_check_time)]


class LoginPayload(BaseModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


class CanvasTokenPayload(BaseModel):
    canvasToken: str

    @field_validator("canvasToken")
    @classmethod
    def _long_enough(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 10:
            raise ValueError("Canvas token appears to be invalid (too short)")
        return v


class TaskCreatePayload(BaseModel):
    title: str = Field(min_length=1)
    description: Optional[str] = None
    type: TaskType
    course: Optional[str] = None
    due_date: DueDate
    due_time: DueTime = None
    priority: Priority


class TaskUpdatePayload(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    type: Optional[TaskType] = None
    course: Optional[str] = None
    due_date: Optional[DueDate] = None
    due_time: DueTime = None
    priority: Optional[Priority] = None
    completed: Optional[bool] = None
    submitted: Optional[bool] = None

    @model_validator(mode="after")
    def _no_null_required(self) -> "TaskUpdatePayload":
        for name in ("title", "type", "due_date", "priority", "completed", "submitted"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True)
