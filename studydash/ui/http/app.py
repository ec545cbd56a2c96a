from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import timedelta
from pathlib import Path
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from studydash.config import Settings
from studydash.domain.common.errors import ConflictError, DomainError, NotFoundError, ValidationError
from studydash.domain.common.time import to_iso
from studydash.domain.sync.background import BackgroundSync
from studydash.domain.sync.guard import SyncGuard
from studydash.domain.sync.matching import TitleCourseMatcher
from studydash.domain.sync.ports import Clock
from studydash.domain.sync.reconciler import TaskReconciler
from studydash.domain.sync.service import GatewayFactory, SyncService
from studydash.domain.sync.staleness import StalenessPolicy
from studydash.infra.canvas.client import CanvasClient
from studydash.infra.canvas.errors import CanvasAPIError
from studydash.infra.clock.system_clock import SystemClock
from studydash.infra.db.connection import Database
from studydash.infra.db.repo import CoursesSqliteRepo, SyncLogsSqliteRepo, TasksSqliteRepo, UsersSqliteRepo
from studydash.infra.db.schema_version import apply_migrations
from studydash.infra.scheduler.loop import SchedulerConfig, SchedulerLoop
from studydash.ui.http.deps import Services
from studydash.ui.http.routes import router as api_router

logger = logging.getLogger(__name__)

CANVAS_AUTH_MESSAGE = "Canvas API token is invalid or expired. Please update your token."
CANVAS_UNAVAILABLE_MESSAGE = "Unable to connect to Canvas. Please try again later."


def resolve_db_path(db_path: Path) -> Path:
    return db_path if db_path.is_absolute() else Path.cwd() / db_path


def build_services(
    settings: Settings,
    *,
    gateway_factory: Optional[GatewayFactory] = None,
    clock: Optional[Clock] = None,
) -> Services:
    clock = clock or SystemClock()
    db = Database(str(resolve_db_path(settings.db_path)))

    if gateway_factory is None:
        def gateway_factory(token: str) -> CanvasClient:
            return CanvasClient(settings.canvas_api_url, token, timeout=settings.canvas_timeout_seconds)

    tasks_repo = TasksSqliteRepo(db)
    courses_repo = CoursesSqliteRepo(db)
    logs_repo = SyncLogsSqliteRepo(db)

    reconciler = TaskReconciler(tasks_repo, TitleCourseMatcher(tasks_repo), clock)
    sync = SyncService(
        gateways=gateway_factory,
        courses=courses_repo,
        tasks=tasks_repo,
        logs=logs_repo,
        reconciler=reconciler,
        guard=SyncGuard(),
        clock=clock,
        extra_sources=settings.sync_extra_sources,
        planner_months_before=settings.planner_months_before,
        planner_months_after=settings.planner_months_after,
    )
    staleness = StalenessPolicy(logs_repo, clock, max_age=timedelta(hours=settings.sync_cache_hours))

    return Services(
        settings=settings,
        db=db,
        clock=clock,
        users=UsersSqliteRepo(db),
        tasks=tasks_repo,
        courses=courses_repo,
        sync_logs=logs_repo,
        sync=sync,
        staleness=staleness,
        gateways=gateway_factory,
    )


def create_app(
    settings: Settings,
    *,
    gateway_factory: Optional[GatewayFactory] = None,
    clock: Optional[Clock] = None,
) -> FastAPI:
    services = build_services(settings, gateway_factory=gateway_factory, clock=clock)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        db_file = Path(services.db.path)
        db_file.parent.mkdir(parents=True, exist_ok=True)
        now_iso = to_iso(services.clock.now())
        await apply_migrations(services.db, now_iso)
        if settings.users_file is not None:
            await services.users.seed_from_file(settings.users_file, now_iso)
        logger.info("Database ready at %s", db_file)

        scheduler: Optional[SchedulerLoop] = None
        scheduler_task: Optional[asyncio.Task] = None
        if settings.scheduler_enabled:
            background = BackgroundSync(
                services.sync,
                services.staleness,
                services.sync_logs,
                services.clock,
                active_days=settings.sync_active_days,
                course_delay=settings.sync_course_delay_seconds,
            )
            scheduler = SchedulerLoop(
                background.sync_all_active_users,
                SchedulerConfig(interval_seconds=settings.sync_interval_hours * 3600),
            )
            scheduler_task = asyncio.create_task(scheduler.run_forever())

        try:
            yield
        finally:
            if scheduler is not None and scheduler_task is not None:
                scheduler.stop()
                await scheduler_task

    app = FastAPI(title="StudyDash API", version="0.1.0", lifespan=lifespan)
    app.state.services = services

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.cors_origin],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _register_error_handlers(app)

    app.include_router(api_router, prefix="/api")
    return app


def _message(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message})


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def on_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
        return _message(status.HTTP_400_BAD_REQUEST, validation_message(exc.errors()))

    @app.exception_handler(StarletteHTTPException)
    async def on_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return _message(exc.status_code, str(exc.detail))

    @app.exception_handler(DomainError)
    async def on_domain_error(request: Request, exc: DomainError) -> JSONResponse:
        if isinstance(exc, ValidationError):
            code = status.HTTP_400_BAD_REQUEST
        elif isinstance(exc, NotFoundError):
            code = status.HTTP_404_NOT_FOUND
        elif isinstance(exc, ConflictError):
            code = status.HTTP_409_CONFLICT
        else:
            code = status.HTTP_500_INTERNAL_SERVER_ERROR
        return _message(code, str(exc))

    @app.exception_handler(CanvasAPIError)
    async def on_canvas_error(request: Request, exc: CanvasAPIError) -> JSONResponse:
        logger.warning("Canvas call failed on %s: status=%s", request.url.path, exc.status)
        if exc.is_auth_error:
            return _message(status.HTTP_401_UNAUTHORIZED, CANVAS_AUTH_MESSAGE)
        return _message(status.HTTP_502_BAD_GATEWAY, CANVAS_UNAVAILABLE_MESSAGE)


def validation_message(errors: list) -> str:
    """One readable line for the first pydantic error."""
    if not errors:
        return "Invalid request"
    first = errors[0]
    loc = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path", "header")]
    field = loc[-1] if loc else None
    if first.get("type") == "missing" and field:
        return f"{field} is required"
    msg = str(first.get("msg", "Invalid request"))
    if msg.startswith("Value error, "):
        msg = msg[len("Value error, "):]
    return f"{field}: {msg}" if field else msg
