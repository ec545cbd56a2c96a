from __future__ import annotations

import dataclasses
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, status

from studydash.domain.common.errors import NotFoundError, ValidationError
from studydash.domain.common.time import to_iso
from studydash.domain.sync.models import NewTask
from studydash.models import User
from studydash.ui.http.auth import current_user
from studydash.ui.http.deps import Services, get_services
from studydash.ui.http.schemas import TaskCreatePayload, TaskUpdatePayload

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.get("")
async def list_tasks(
    startDate: Optional[str] = None,
    endDate: Optional[str] = None,
    user: User = Depends(current_user),
    services: Services = Depends(get_services),
) -> Dict[str, Any]:
    tasks = await services.tasks.list_for_user(user.id, startDate, endDate)
    return {
        "tasks": [dataclasses.asdict(t) for t in tasks],
        "user": user.username,
    }


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_task(
    payload: TaskCreatePayload,
    user: User = Depends(current_user),
    services: Services = Depends(get_services),
) -> Dict[str, Any]:
    task_id = await services.tasks.create(
        NewTask(
            user_id=user.id,
            title=payload.title,
            description=payload.description,
            type=payload.type,
            course=payload.course or None,
            due_date=payload.due_date,
            due_time=payload.due_time,
            priority=payload.priority,
        ),
        to_iso(services.clock.now()),
    )
    return {"success": True, "message": "Task created successfully", "taskId": task_id}


@router.put("/{task_id}")
async def update_task(
    task_id: int,
    payload: TaskUpdatePayload,
    user: User = Depends(current_user),
    services: Services = Depends(get_services),
) -> Dict[str, Any]:
    changes = payload.changes()
    if not changes:
        raise ValidationError("No fields to update")
    updated = await services.tasks.update(task_id, user.id, changes, to_iso(services.clock.now()))
    if not updated:
        raise NotFoundError("Task not found")
    return {"success": True, "message": "Task updated successfully"}


@router.delete("/{task_id}")
async def delete_task(
    task_id: int,
    user: User = Depends(current_user),
    services: Services = Depends(get_services),
) -> Dict[str, Any]:
    if not await services.tasks.delete(task_id, user.id):
        raise NotFoundError("Task not found")
    return {"success": True, "message": "Task deleted successfully"}


@router.get("/{task_id}/canvas-url")
async def task_canvas_url(
    task_id: int,
    user: User = Depends(current_user),
    services: Services = Depends(get_services),
) -> Dict[str, str]:
    """
    Link to the task's page in Canvas.

    The task's course name is matched to a Canvas-linked course row, then the
    task title to one of that course's assignments. Without a title match the
    course's assignment list is returned.
    """
    task = await services.tasks.get(task_id, user.id)
    if task is None:
        raise NotFoundError("Task not found")

    course = await services.courses.find_by_name(user.id, task.course) if task.course else None
    if course is None or not course.canvas_course_id:
        raise NotFoundError("No Canvas course linked to this task")
    if not user.canvas_token:
        raise ValidationError("Canvas token is required. Please add your Canvas API token first.")

    fallback = f"{services.settings.canvas_web_url}/courses/{course.canvas_course_id}/assignments"
    gateway = services.gateways(user.canvas_token)
    try:
        assignments = await gateway.fetch_assignments(int(course.canvas_course_id))
    finally:
        await gateway.aclose()

    for assignment in assignments:
        if assignment.name == task.title and assignment.html_url:
            return {"url": assignment.html_url}
    logger.info("No Canvas assignment titled %r in course %s", task.title, course.canvas_course_id)
    return {"url": fallback}
