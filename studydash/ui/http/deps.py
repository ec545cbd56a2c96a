from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from fastapi import Header, Request

from studydash.config import Settings
from studydash.domain.sync.ports import Clock
from studydash.domain.sync.service import GatewayFactory, SyncService
from studydash.domain.sync.staleness import StalenessPolicy
from studydash.infra.db.connection import Database
from studydash.infra.db.repo.courses_sqlite import CoursesSqliteRepo
from studydash.infra.db.repo.sync_logs_sqlite import SyncLogsSqliteRepo
from studydash.infra.db.repo.tasks_sqlite import TasksSqliteRepo
from studydash.infra.db.repo.users_sqlite import UsersSqliteRepo
from studydash.utils import parse_int_safe


@dataclass
class Services:
    """
    Everything route handlers need, built once in create_app.

    Handlers ask for it with `services: Services = Depends(get_services)`.
    """

    settings: Settings
    db: Database
    clock: Clock
    users: UsersSqliteRepo
    tasks: TasksSqliteRepo
    courses: CoursesSqliteRepo
    sync_logs: SyncLogsSqliteRepo
    sync: SyncService
    staleness: StalenessPolicy
    gateways: GatewayFactory


@dataclass(frozen=True)
class ClientZone:
    timezone: Optional[str] = None
    offset: Optional[int] = None


def get_services(request: Request) -> Services:
    return request.app.state.services


def client_zone(
    x_client_timezone: Optional[str] = Header(default=None),
    x_client_timezone_offset: Optional[str] = Header(default=None),
) -> ClientZone:
    return ClientZone(
        timezone=x_client_timezone or None,
        offset=parse_int_safe(x_client_timezone_offset),
    )
