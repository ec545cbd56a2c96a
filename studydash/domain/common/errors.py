from __future__ import annotations


class DomainError(Exception):
    """Base for errors raised by domain services."""


class ValidationError(DomainError):
    pass


class NotFoundError(DomainError):
    pass


class ConflictError(DomainError):
    pass


class SyncInProgressError(ConflictError):
    def __init__(self, user_id: int) -> None:
        super().__init__(f"A sync is already running for user {user_id}.")
        self.user_id = user_id
