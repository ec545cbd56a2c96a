from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends

from studydash.domain.common.errors import NotFoundError
from studydash.domain.common.time import to_iso
from studydash.models import User
from studydash.ui.http.auth import current_user
from studydash.ui.http.deps import Services, get_services
from studydash.ui.http.schemas import CanvasTokenPayload

router = APIRouter(tags=["users"])


@router.get("/me")
def me(user: User = Depends(current_user)) -> Dict[str, Any]:
    return {
        "user": {
            "username": user.username,
            "hasCanvasToken": bool(user.canvas_token),
            "canvasTokenPreview": user.canvas_token_preview,
        },
        "authenticated": True,
    }


@router.get("/profile")
async def profile(
    user: User = Depends(current_user),
    services: Services = Depends(get_services),
) -> Dict[str, Any]:
    join_date = (user.join_date or "").split("T")[0] or None
    recent = await services.sync_logs.list_recent(user.id, limit=5)
    return {
        "profile": {
            "username": user.username,
            "email": user.email,
            "joinDate": join_date,
            "role": user.role,
            "hasCanvasToken": bool(user.canvas_token),
            "canvasTokenPreview": user.canvas_token_preview,
            "recentSyncs": [
                {
                    "syncedAt": log.synced_at,
                    "syncType": log.sync_type,
                    "status": log.status,
                    "assignmentsCount": log.assignments_count,
                    "errorMessage": log.error_message,
                }
                for log in recent
            ],
        }
    }


@router.put("/canvas-token")
async def update_canvas_token(
    payload: CanvasTokenPayload,
    user: User = Depends(current_user),
    services: Services = Depends(get_services),
) -> Dict[str, Any]:
    now_iso = to_iso(services.clock.now())
    if not await services.users.update_canvas_token(user.id, payload.canvasToken, now_iso):
        raise NotFoundError("User not found")
    return {
        "success": True,
        "message": "Canvas token updated successfully",
        "canvasTokenPreview": payload.canvasToken[:10] + "...",
    }


@router.delete("/canvas-token")
async def delete_canvas_token(
    user: User = Depends(current_user),
    services: Services = Depends(get_services),
) -> Dict[str, Any]:
    now_iso = to_iso(services.clock.now())
    if not await services.users.update_canvas_token(user.id, None, now_iso):
        raise NotFoundError("User not found")
    return {"success": True, "message": "Canvas token removed successfully"}
