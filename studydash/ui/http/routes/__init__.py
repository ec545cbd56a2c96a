"""
Routes module - combines all API routers.
"""
from __future__ import annotations

from fastapi import APIRouter

from studydash.ui.http.routes import auth, courses, tasks, users

router = APIRouter()

router.include_router(auth.router)
router.include_router(users.router)
router.include_router(tasks.router)
router.include_router(courses.router)

__all__ = ["router"]
