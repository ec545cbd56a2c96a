from __future__ import annotations

import dataclasses
import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends

from studydash.constants import SYNC_TYPE_MANUAL, SYNC_TYPE_RESET
from studydash.domain.common.errors import NotFoundError, ValidationError
from studydash.models import User
from studydash.ui.http.auth import current_user
from studydash.ui.http.deps import ClientZone, Services, client_zone, get_services

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/courses", tags=["courses"])


@router.get("")
async def list_courses(
    user: User = Depends(current_user),
    services: Services = Depends(get_services),
) -> Dict[str, Any]:
    courses = await services.courses.list_for_user(user.id)
    return {
        "courses": [dataclasses.asdict(c) for c in courses],
        "user": user.username,
    }


@router.post("/sync-canvas-courses")
async def sync_canvas_courses(
    user: User = Depends(current_user),
    services: Services = Depends(get_services),
) -> Dict[str, Any]:
    canvas_courses = await services.sync.run_course_sync(user)
    courses = await services.courses.list_for_user(user.id)
    return {
        "success": True,
        "message": f"Successfully synced {len(canvas_courses)} courses from Canvas",
        "courses": [dataclasses.asdict(c) for c in courses],
        "canvasCoursesCount": len(canvas_courses),
    }


@router.post("/sync-canvas-assignments")
async def sync_canvas_assignments(
    user: User = Depends(current_user),
    services: Services = Depends(get_services),
    zone: ClientZone = Depends(client_zone),
) -> Dict[str, Any]:
    result = await services.sync.run(
        user,
        SYNC_TYPE_MANUAL,
        client_timezone=zone.timezone,
        client_offset=zone.offset,
    )
    return {
        "success": True,
        "message": f"Successfully synced {result.assignments} assignments/quizzes from Canvas",
        "assignmentCount": result.assignments,
        "failedCourses": result.failed_courses,
    }


@router.post("/reset-and-sync-canvas")
async def reset_and_sync_canvas(
    user: User = Depends(current_user),
    services: Services = Depends(get_services),
    zone: ClientZone = Depends(client_zone),
) -> Dict[str, Any]:
    logger.info("Reset and resync requested by %s", user.username)
    result = await services.sync.run(
        user,
        SYNC_TYPE_RESET,
        reset=True,
        client_timezone=zone.timezone,
        client_offset=zone.offset,
    )
    return {
        "success": True,
        "message": (
            f"Successfully reset and re-synced all data. {result.courses} courses, "
            f"{result.assignments} assignments/quizzes synced."
        ),
        "courses": result.courses,
        "assignments": result.assignments,
    }


@router.get("/{course_id}/syllabus")
async def course_syllabus(
    course_id: int,
    user: User = Depends(current_user),
    services: Services = Depends(get_services),
) -> Dict[str, str]:
    course = await services.courses.get(course_id)
    if course is None or course.user_id != user.id:
        raise NotFoundError("Course not found")
    if not course.canvas_course_id:
        raise NotFoundError("No Canvas course id available")
    if not user.canvas_token:
        raise ValidationError("Canvas token is required. Please add your Canvas API token first.")

    fallback = f"{services.settings.canvas_web_url}/courses/{course.canvas_course_id}/assignments/syllabus"
    gateway = services.gateways(user.canvas_token)
    try:
        data = await gateway.fetch_course(course.canvas_course_id)
        html_url = (data or {}).get("html_url")
        if isinstance(html_url, str) and html_url:
            candidate = f"{html_url.rstrip('/')}/assignments/syllabus"
            if await gateway.probe(candidate):
                return {"url": candidate}
            logger.info("Syllabus probe failed for %s, using constructed URL", candidate)
    finally:
        await gateway.aclose()
    return {"url": fallback}
