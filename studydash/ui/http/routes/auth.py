from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, status

from studydash.constants import SYNC_TYPE_LOGIN
from studydash.domain.common.errors import SyncInProgressError
from studydash.models import User
from studydash.ui.http.auth import issue_token, password_matches
from studydash.ui.http.deps import ClientZone, Services, client_zone, get_services
from studydash.ui.http.schemas import LoginPayload

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


@router.get("/health")
def health() -> Dict[str, str]:
    return {"status": "ok"}


@router.post("/login")
async def login(
    payload: LoginPayload,
    services: Services = Depends(get_services),
    zone: ClientZone = Depends(client_zone),
) -> Dict[str, Any]:
    user = await services.users.get_by_username(payload.username)
    if user is None or not password_matches(user.password, payload.password):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid username or password")

    await _sync_on_login(services, user, zone)

    token = issue_token(
        user.username,
        services.settings.jwt_secret,
        services.clock.now(),
        services.settings.jwt_expires_hours,
    )
    return {
        "success": True,
        "message": "Login successful",
        "user": {"username": user.username},
        "token": token,
    }


@router.post("/logout")
def logout() -> Dict[str, Any]:
    # session tokens are stateless; the client drops its copy
    return {"success": True, "message": "Logged out successfully"}


async def _sync_on_login(services: Services, user: User, zone: ClientZone) -> None:
    """Refresh Canvas data if it is stale. Never blocks the login itself."""
    if not user.canvas_token:
        return
    if not await services.staleness.should_sync(user.id):
        logger.info("User %s recently synced, using cached data", user.username)
        return

    try:
        result = await services.sync.run(
            user,
            SYNC_TYPE_LOGIN,
            client_timezone=zone.timezone,
            client_offset=zone.offset,
        )
    except SyncInProgressError:
        logger.info("Sync already running for %s, using cached data", user.username)
        return
    except Exception:
        logger.error("Login sync failed for %s, continuing with cached data", user.username, exc_info=True)
        return
    logger.info("Login sync for %s: %d assignments/quizzes", user.username, result.assignments)
