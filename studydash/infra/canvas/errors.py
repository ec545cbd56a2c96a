from __future__ import annotations

from typing import Optional


class CanvasAPIError(Exception):
    """
    Raised for a failed Canvas call.

    status is the HTTP status code, or None when the request never got a
    response (DNS, connect, timeout, ...).
    """

    def __init__(self, status: Optional[int], message: str) -> None:
        super().__init__(f"Canvas API error: {status if status is not None else 'network'} {message}".rstrip())
        self.status = status

    @property
    def is_auth_error(self) -> bool:
        return self.status == 401
