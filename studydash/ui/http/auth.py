from __future__ import annotations

import hmac
import logging
from datetime import datetime, timedelta
from typing import Optional

import jwt
from fastapi import Depends, Header, HTTPException, status

from studydash.models import User
from studydash.ui.http.deps import Services, get_services

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"


def issue_token(username: str, secret: str, now: datetime, expires_hours: int = 24) -> str:
    payload = {
        "sub": username,
        "iat": now,
        "exp": now + timedelta(hours=expires_hours),
    }
    return jwt.encode(payload, secret, algorithm=ALGORITHM)


def decode_token(token: str, secret: str) -> str:
    """Username from a session token. Raises jwt.InvalidTokenError."""
    payload = jwt.decode(token, secret, algorithms=[ALGORITHM])
    username = payload.get("sub")
    if not isinstance(username, str) or not username:
        raise jwt.InvalidTokenError("token has no subject")
    return username


def password_matches(stored: str, given: str) -> bool:
    return hmac.compare_digest(stored.encode("utf-8"), given.encode("utf-8"))


def _bearer(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


async def current_user(
    authorization: Optional[str] = Header(default=None),
    services: Services = Depends(get_services),
) -> User:
    token = _bearer(authorization)
    if token is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Access token required")

    try:
        username = decode_token(token, services.settings.jwt_secret)
    except jwt.InvalidTokenError as e:
        logger.info("Rejected session token: %s", e)
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid or expired token") from e

    user = await services.users.get_by_username(username)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user
